"""Binary-versus-text classification from a leading byte sample.

A NUL byte is treated as a decisive binary signal. Otherwise the sample is
binary when C0 control bytes (other than tab, newline, vertical tab, form feed
and carriage return) make up more than 30% of it.
"""

from __future__ import annotations

import enum
from typing import BinaryIO

BINARY_SAMPLE_BYTES = 8_192
CONTROL_PERCENT_LIMIT = 30


class Classification(enum.Enum):
    TEXT = "text"
    BINARY = "binary"


def read_sample(handle: BinaryIO, size: int = BINARY_SAMPLE_BYTES) -> bytes:
    """Read up to ``size`` leading bytes from an open binary ``handle``.

    The handle is left positioned after the sample so the caller can read the
    rest of the file without reopening it.
    """
    if size <= 0:
        raise ValueError(f"sample size must be positive, got {size}")
    return handle.read(size)


def is_control_byte(value: int) -> bool:
    """Return whether ``value`` counts toward the control-byte ratio."""
    return value < 0x09 or 0x0D < value < 0x20


def classify(sample: bytes) -> Classification:
    """Classify ``sample`` as text or binary.

    An empty sample is text (an empty file). The ratio test is done in integer
    arithmetic: binary iff ``control * 100 > total * 30``.
    """
    total = len(sample)
    if total == 0:
        return Classification.TEXT
    if b"\x00" in sample:
        return Classification.BINARY

    control = 0
    for value in sample:
        if is_control_byte(value):
            control += 1
    if control * 100 > total * CONTROL_PERCENT_LIMIT:
        return Classification.BINARY
    return Classification.TEXT


__all__ = [
    "BINARY_SAMPLE_BYTES",
    "CONTROL_PERCENT_LIMIT",
    "Classification",
    "classify",
    "is_control_byte",
    "read_sample",
]

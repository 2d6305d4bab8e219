"""Per-file read -> classify -> decode pipeline.

``load_content`` reads a file once and never raises for per-file problems; I/O
failures and undecodable bytes are folded into ``DecodedContent.unreadable``
with a human-readable reason.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .classify import Classification, classify, read_sample
from .decoded import DecodedContent
from .encoding import detect_bom, resolve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileBytes:
    """Bytes read from one file, its classification, and its size on disk."""

    data: bytes
    classification: Classification
    size: int


def read_for_decode(path: Path) -> FileBytes:
    """Read ``path`` once, classifying its leading sample before the rest.

    Binary files stop after the sample so large blobs are never fully loaded.
    Data that opens with a byte-order mark skips the classifier: UTF-16/32
    text legitimately contains NUL bytes. The size comes from the same open
    handle as the bytes.
    """
    with path.open("rb") as handle:
        size = os.fstat(handle.fileno()).st_size
        sample = read_sample(handle)
        if detect_bom(sample) is None and classify(sample) is Classification.BINARY:
            return FileBytes(sample, Classification.BINARY, size)
        return FileBytes(sample + handle.read(), Classification.TEXT, size)


def load_content(path: Path) -> DecodedContent:
    """Produce the ``DecodedContent`` for one file, never raising per-file errors."""
    try:
        raw = read_for_decode(path)
    except OSError as exc:
        logger.debug("cannot read %s: %s", path, exc)
        return DecodedContent.unreadable(exc.strerror or str(exc))

    if raw.classification is Classification.BINARY:
        logger.debug("binary content: %s", path)
        return DecodedContent.binary(raw.size)

    decoded = resolve(raw.data)
    if decoded.is_text:
        logger.debug("decoded %s as %s", path, decoded.encoding)
    else:
        logger.debug("undecodable content: %s (%s)", path, decoded.reason)
    return decoded


__all__ = [
    "FileBytes",
    "load_content",
    "read_for_decode",
]

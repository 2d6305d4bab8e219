"""Recover Unicode text from bytes with an ordered fallback chain.

Strategies run in a fixed order and the first one that decodes the whole input
without a single error wins:

1. strict UTF-8
2. byte-order-mark check (BOM stripped, remainder decoded strictly)
3. BOM-less UTF-16LE
4. statistical detection via ``charset_normalizer``

Each strategy returns a ``DecodeAttempt`` or ``None``. Lossy decodes with
replacement characters are never produced, so a failed strategy contributes
nothing to the output.
"""

from __future__ import annotations

import codecs
import logging
from collections.abc import Callable
from dataclasses import dataclass

from charset_normalizer import from_bytes

from .decoded import DecodedContent

logger = logging.getLogger(__name__)

UNDECODABLE_REASON = "could not decode as UTF-8, UTF-16LE, or detected encoding"

# Longest marks first: the UTF-32LE mark begins with the UTF-16LE one.
BYTE_ORDER_MARKS: tuple[tuple[bytes, str], ...] = (
    (codecs.BOM_UTF32_LE, "utf-32-le"),
    (codecs.BOM_UTF32_BE, "utf-32-be"),
    (b"\x84\x31\x95\x33", "gb18030"),
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)


@dataclass(frozen=True)
class DecodeAttempt:
    """Successful decode result: full text plus the codec that produced it."""

    text: str
    encoding: str


DecodeStrategy = Callable[[bytes], "DecodeAttempt | None"]


def _strict_decode(data: bytes, encoding: str) -> str | None:
    try:
        return data.decode(encoding, errors="strict")
    except (UnicodeDecodeError, LookupError):
        return None


def detect_bom(data: bytes) -> tuple[bytes, str] | None:
    """Return the longest recognized ``(mark, codec)`` prefix of ``data``."""
    for mark, encoding in BYTE_ORDER_MARKS:
        if data.startswith(mark):
            return mark, encoding
    return None


def decode_utf8(data: bytes) -> DecodeAttempt | None:
    """Strict UTF-8; declines BOM-prefixed data so the BOM step strips it."""
    if data.startswith(codecs.BOM_UTF8):
        return None
    text = _strict_decode(data, "utf-8")
    if text is None:
        return None
    return DecodeAttempt(text, "utf-8")


def decode_with_bom(data: bytes) -> DecodeAttempt | None:
    """Strip a recognized BOM and decode the remainder with its codec.

    When several marks match (``FF FE 00 00`` is also ``FF FE`` plus a NUL
    code unit), each candidate is tried longest first.
    """
    for mark, encoding in BYTE_ORDER_MARKS:
        if not data.startswith(mark):
            continue
        text = _strict_decode(data[len(mark) :], encoding)
        if text is not None:
            return DecodeAttempt(text, f"{encoding} (bom)")
    return None


def decode_utf16le(data: bytes) -> DecodeAttempt | None:
    text = _strict_decode(data, "utf-16-le")
    if text is None:
        return None
    return DecodeAttempt(text, "utf-16-le")


def decode_detected(data: bytes) -> DecodeAttempt | None:
    """Decode with the detector's single best guess, rejecting any error."""
    best = from_bytes(data).best()
    if best is None or not best.encoding:
        return None
    text = _strict_decode(data, best.encoding)
    if text is None:
        logger.debug("detected encoding %s failed strict decode", best.encoding)
        return None
    return DecodeAttempt(text, best.encoding)


STRATEGIES: tuple[tuple[str, DecodeStrategy], ...] = (
    ("utf-8", decode_utf8),
    ("bom", decode_with_bom),
    ("utf-16-le", decode_utf16le),
    ("detected", decode_detected),
)


def resolve(data: bytes) -> DecodedContent:
    """Decode ``data`` with the first strategy that succeeds.

    Returns ``DecodedContent.unreadable`` when every strategy declines.
    """
    for name, strategy in STRATEGIES:
        attempt = strategy(data)
        if attempt is not None:
            return DecodedContent.text_content(attempt.text, attempt.encoding)
        logger.debug("decode strategy %s declined", name)
    return DecodedContent.unreadable(UNDECODABLE_REASON)


__all__ = [
    "BYTE_ORDER_MARKS",
    "DecodeAttempt",
    "STRATEGIES",
    "UNDECODABLE_REASON",
    "decode_detected",
    "decode_utf16le",
    "decode_utf8",
    "decode_with_bom",
    "detect_bom",
    "resolve",
]

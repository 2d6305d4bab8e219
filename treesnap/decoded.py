"""Tagged content outcome for one file.

Exactly one of text, binary, or unreadable applies to each file. Binary and
unreadable outcomes render as short placeholders; no raw bytes are embedded.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class ContentKind(enum.Enum):
    TEXT = "text"
    BINARY = "binary"
    UNREADABLE = "unreadable"


@dataclass(frozen=True)
class DecodedContent:
    """Outcome of decoding one file's bytes."""

    kind: ContentKind
    text: str = ""
    encoding: str | None = None
    size: int | None = None
    reason: str | None = None

    @classmethod
    def text_content(cls, text: str, encoding: str) -> DecodedContent:
        """Construct a successfully decoded payload."""
        return cls(kind=ContentKind.TEXT, text=text, encoding=encoding)

    @classmethod
    def binary(cls, size: int | None = None) -> DecodedContent:
        """Construct a binary placeholder; no bytes are retained."""
        return cls(kind=ContentKind.BINARY, size=size)

    @classmethod
    def unreadable(cls, reason: str) -> DecodedContent:
        """Construct a placeholder for content that could not be obtained or decoded."""
        return cls(kind=ContentKind.UNREADABLE, reason=reason)

    @property
    def is_text(self) -> bool:
        return self.kind is ContentKind.TEXT

    def placeholder(self) -> str:
        if self.kind is ContentKind.BINARY:
            if self.size is not None and self.size >= 0:
                return f"<binary file: {self.size} bytes>"
            return "<binary file>"
        if self.kind is ContentKind.UNREADABLE:
            return f"<unreadable file: {self.reason}>"
        return ""

    def render(self) -> str:
        """Return the fenced-block body, always ending in a newline."""
        body = self.text if self.is_text else self.placeholder()
        if not body.endswith("\n"):
            body += "\n"
        return body


__all__ = [
    "ContentKind",
    "DecodedContent",
]

"""Fence language tags for file content blocks."""

from __future__ import annotations

from pathlib import PurePath

from pygments.lexers import get_lexer_for_filename
from pygments.util import ClassNotFound


def extension_tag(rel_path: PurePath) -> str:
    """Return the last suffix without its dot, or ``""`` when there is none."""
    return rel_path.suffix[1:]


def lexer_tag(rel_path: PurePath) -> str:
    """Return the Pygments short name for ``rel_path``.

    Falls back to the extension tag when Pygments has no lexer for the name.
    """
    try:
        lexer = get_lexer_for_filename(rel_path.name)
    except ClassNotFound:
        return extension_tag(rel_path)
    aliases = getattr(lexer, "aliases", None) or ()
    return aliases[0] if aliases else extension_tag(rel_path)


def fence_tag_for(rel_path: PurePath, mode: str = "extension") -> str:
    if mode == "lexer":
        return lexer_tag(rel_path)
    return extension_tag(rel_path)


__all__ = [
    "extension_tag",
    "fence_tag_for",
    "lexer_tag",
]

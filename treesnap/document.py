"""Assemble the two-section snapshot document and write it atomically.

The tree section lists the root, every directory, and every included file,
indented four spaces per depth level. The contents section repeats the
included files in the same order, each under a ``###`` heading with its
relative path and a fenced block tagged with its language.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path, PurePath

from .config import temp_output_name
from .decoded import ContentKind, DecodedContent
from .errors import OutputWriteError
from .inclusion import InclusionPolicy
from .language import fence_tag_for
from .walk import Entry

logger = logging.getLogger(__name__)

TREE_HEADING = "## 1. Directory Structure"
CONTENTS_HEADING = "## 2. File Contents"
INDENT_UNIT = "    "
MIN_FENCE = 3

_BACKTICK_RUN_RE = re.compile(r"`{3,}")


@dataclass(frozen=True)
class Document:
    """Rendered snapshot plus per-outcome counters for reporting."""

    tree_section: str
    contents_section: str
    file_count: int = 0
    binary_count: int = 0
    unreadable_count: int = 0

    @property
    def text(self) -> str:
        return self.tree_section + self.contents_section


def root_label(root: Path) -> str:
    """Return the root line of the tree; undecodable name bytes are shown escaped."""
    name = os.fsencode(root.resolve().name).decode("utf-8", errors="backslashreplace")
    return f"{name or 'root'}/"


def fence_for(body: str) -> str:
    """Return a backtick fence longer than any backtick run inside ``body``."""
    longest = max((len(match.group(0)) for match in _BACKTICK_RUN_RE.finditer(body)), default=0)
    return "`" * max(MIN_FENCE, longest + 1)


def _dirs_with_included_files(files: Iterable[Entry]) -> set[PurePath]:
    kept: set[PurePath] = set()
    for entry in files:
        kept.update(entry.rel_path.parents)
    return kept


def render_tree(
    root: Path,
    entries: list[Entry],
    included: set[PurePath],
    *,
    hide_empty_dirs: bool = False,
) -> str:
    """Render the tree section.

    Directories are always listed unless ``hide_empty_dirs`` is set, in which
    case only directories with at least one included descendant remain.
    """
    visible_dirs: set[PurePath] | None = None
    if hide_empty_dirs:
        visible_dirs = _dirs_with_included_files(entry for entry in entries if entry.rel_path in included)

    lines = [TREE_HEADING, "", root_label(root)]
    for entry in entries:
        indent = INDENT_UNIT * entry.depth
        if entry.is_dir:
            if visible_dirs is not None and entry.rel_path not in visible_dirs:
                continue
            lines.append(f"{indent}{entry.name}/")
        elif entry.rel_path in included:
            lines.append(f"{indent}{entry.name}")
    return "\n".join(lines) + "\n"


def render_file_block(rel_path: PurePath, content: DecodedContent, fence_tag: str = "extension") -> str:
    body = content.render()
    fence = fence_for(body)
    tag = fence_tag_for(rel_path, fence_tag)
    return f"### {rel_path.as_posix()}\n{fence}{tag}\n{body}{fence}\n\n"


def _resolve_contents(
    files: list[Entry],
    content_for: Callable[[Path], DecodedContent],
    jobs: int,
) -> list[DecodedContent]:
    """Resolve each file's content exactly once, preserving ``files`` order."""
    paths = [entry.path for entry in files]
    if jobs <= 1 or len(paths) <= 1:
        return [content_for(path) for path in paths]
    with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="treesnap-content") as executor:
        return list(executor.map(content_for, paths))


def assemble(
    root: Path,
    entries: Iterable[Entry],
    policy: InclusionPolicy,
    content_for: Callable[[Path], DecodedContent],
    *,
    fence_tag: str = "extension",
    hide_empty_dirs: bool = False,
    jobs: int = 1,
) -> Document:
    """Build the document from traversal ``entries``.

    ``content_for`` is called once per included file and must not raise for
    per-file problems. The filesystem is never modified here.
    """
    entry_list = list(entries)
    files = [entry for entry in entry_list if not entry.is_dir and policy.is_included(entry.rel_path)]
    included = {entry.rel_path for entry in files}

    tree_section = render_tree(root, entry_list, included, hide_empty_dirs=hide_empty_dirs)

    contents = _resolve_contents(files, content_for, jobs)
    blocks = ["\n", CONTENTS_HEADING, "\n\n"]
    binary_count = 0
    unreadable_count = 0
    for entry, content in zip(files, contents):
        if content.kind is ContentKind.BINARY:
            binary_count += 1
        elif content.kind is ContentKind.UNREADABLE:
            unreadable_count += 1
            logger.info("unreadable: %s (%s)", entry.rel_path.as_posix(), content.reason)
        blocks.append(render_file_block(entry.rel_path, content, fence_tag))

    return Document(
        tree_section=tree_section,
        contents_section="".join(blocks),
        file_count=len(files),
        binary_count=binary_count,
        unreadable_count=unreadable_count,
    )


def write_document(document: Document, path: Path) -> None:
    """Write ``document`` to ``path`` via a temp file and ``os.replace``.

    A failed write, including text that cannot be encoded as UTF-8, leaves no
    partial output behind and raises ``OutputWriteError``.
    """
    tmp = path.with_name(temp_output_name(path.name))
    try:
        with tmp.open("w", encoding="utf-8", newline="") as handle:
            handle.write(document.text)
        os.replace(tmp, path)
    except (OSError, UnicodeError) as exc:
        try:
            tmp.unlink()
        except OSError:
            pass
        raise OutputWriteError(path, exc) from exc


__all__ = [
    "CONTENTS_HEADING",
    "Document",
    "INDENT_UNIT",
    "TREE_HEADING",
    "assemble",
    "fence_for",
    "render_file_block",
    "render_tree",
    "root_label",
    "write_document",
]

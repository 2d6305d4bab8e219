"""Deterministic depth-first traversal with ignore-rule pruning.

Children are listed with ``os.scandir`` and sorted directories first, then by
case-folded name, so the same tree state always yields the same sequence.
Ignored directories are pruned before descent; nothing below them is listed.

Entries that cannot be scanned (unlistable directories, failed stat calls,
names not representable as UTF-8) are handled by one policy per run: skipped
with a recorded warning by default, or raised as ``TraversalError`` in strict
mode.
"""

from __future__ import annotations

import enum
import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path, PurePath

from .config import temp_output_name
from .errors import TraversalError
from .ignore import IgnoreRules

logger = logging.getLogger(__name__)


class EntryKind(enum.Enum):
    DIRECTORY = "directory"
    FILE = "file"


@dataclass(frozen=True)
class Entry:
    """One directory or regular file found under the scan root."""

    path: Path
    rel_path: PurePath
    kind: EntryKind

    @property
    def depth(self) -> int:
        return len(self.rel_path.parts)

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


@dataclass(frozen=True)
class TraversalWarning:
    path: Path
    reason: str


@dataclass(frozen=True)
class _Child:
    name: str
    path: Path
    kind: EntryKind


class _Problems:
    """Apply the run's traversal-error policy uniformly."""

    def __init__(self, strict: bool, warnings: list[TraversalWarning] | None) -> None:
        self.strict = strict
        self.warnings = warnings

    def report(self, path: Path, reason: str) -> None:
        if self.strict:
            raise TraversalError(path, reason)
        logger.warning("skipping %s: %s", path, reason)
        if self.warnings is not None:
            self.warnings.append(TraversalWarning(path, reason))


def _child_kind(child: os.DirEntry[str]) -> EntryKind | None:
    """Return the entry kind, or ``None`` for anything but dirs and regular files.

    Symlinked directories are not followed; symlinks to regular files are read
    as files.
    """
    if child.is_dir(follow_symlinks=False):
        return EntryKind.DIRECTORY
    if child.is_file(follow_symlinks=True):
        return EntryKind.FILE
    return None


def list_children(directory: Path, problems: _Problems) -> list[_Child]:
    """List and sort one directory's scannable children.

    An unlistable directory is reported once and treated as empty.
    """
    children: list[_Child] = []
    try:
        with os.scandir(directory) as entries:
            for child in entries:
                child_path = Path(child.path)
                try:
                    child.name.encode("utf-8")
                except UnicodeEncodeError:
                    problems.report(child_path, "name is not valid UTF-8")
                    continue
                try:
                    kind = _child_kind(child)
                except OSError as exc:
                    problems.report(child_path, exc.strerror or str(exc))
                    continue
                if kind is None:
                    logger.debug("skipping non-regular entry %s", child_path)
                    continue
                children.append(_Child(child.name, child_path, kind))
    except OSError as exc:
        problems.report(directory, exc.strerror or str(exc))
        return []

    children.sort(key=lambda item: (item.kind is not EntryKind.DIRECTORY, item.name.casefold(), item.name))
    return children


def walk_tree(
    root: Path,
    ignore_rules: IgnoreRules,
    *,
    strict: bool = False,
    warnings: list[TraversalWarning] | None = None,
) -> Iterator[Entry]:
    """Yield every non-ignored directory and regular file under ``root``.

    The root itself is never yielded. Directories are yielded before their
    contents (pre-order), which is the order the document renders.
    """
    root = root.resolve()
    problems = _Problems(strict, warnings)

    def visit(directory: Path) -> Iterator[Entry]:
        for child in list_children(directory, problems):
            if ignore_rules.is_ignored(child.path):
                logger.debug("ignoring %s", child.path)
                continue
            entry = Entry(
                path=child.path,
                rel_path=child.path.relative_to(root),
                kind=child.kind,
            )
            yield entry
            if entry.is_dir:
                yield from visit(child.path)

    yield from visit(root)


def scan_extensions(root: Path, ignore_rules: IgnoreRules, output_name: str) -> list[str]:
    """Return the sorted dotted suffixes of all non-ignored files under ``root``.

    Traversal problems are only logged here; the snapshot run records them.
    """
    skipped = {output_name, temp_output_name(output_name)}
    extensions: set[str] = set()
    for entry in walk_tree(root, ignore_rules):
        if entry.is_dir or entry.name in skipped:
            continue
        suffix = entry.rel_path.suffix
        if suffix:
            extensions.add(suffix)
    return sorted(extensions)


__all__ = [
    "Entry",
    "EntryKind",
    "TraversalWarning",
    "list_children",
    "scan_extensions",
    "walk_tree",
]

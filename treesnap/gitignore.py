"""Git-backed ignore matching.

Builds a matcher by querying git for ignored files and directories under the
scan root, so nested ``.gitignore`` files, ``.git/info/exclude`` and the global
excludes file are all honored exactly as git sees them.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


def _is_within(path: Path, root: Path) -> bool:
    """Return whether ``path`` is at or under ``root`` after resolution."""
    try:
        path.relative_to(root)
        return True
    except ValueError:
        return False


@dataclass(frozen=True)
class GitIgnoreMatcher:
    """Resolved gitignore snapshot for a project subtree.

    ``ignored_dirs`` is stored as resolved directory paths so parent checks can
    quickly reject whole subtrees.
    """

    root: Path
    ignored_files: frozenset[Path]
    ignored_dirs: frozenset[Path]

    def is_ignored(self, path: Path) -> bool:
        """Return whether ``path`` is ignored under this matcher root."""
        resolved = path.resolve()
        if not _is_within(resolved, self.root):
            return False
        if resolved in self.ignored_files:
            return True
        current = resolved
        while True:
            if current in self.ignored_dirs:
                return True
            if current == self.root:
                break
            parent = current.parent
            if parent == current:
                break
            current = parent
        return False

    def __call__(self, path: Path) -> bool:
        return self.is_ignored(path)


def _git(args: list[str]) -> bytes | None:
    """Run one git command, returning stdout or ``None`` on any failure."""
    try:
        proc = subprocess.run(
            ["git", *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        logger.debug("git %s failed: %s", " ".join(args), exc)
        return None
    return proc.stdout


def load_git_matcher(root: Path) -> GitIgnoreMatcher | None:
    """Build a matcher by querying git for ignored files/directories.

    Returns ``None`` when git is unavailable, ``root`` is not inside a work
    tree, or any probing command fails. The matcher only tracks ignored paths
    within ``root`` (even when the repository root is higher).
    """
    if shutil.which("git") is None:
        return None

    root = root.resolve()
    top_output = _git(["-C", str(root), "rev-parse", "--show-toplevel"])
    if top_output is None:
        return None
    top_level = top_output.decode("utf-8", errors="surrogateescape").strip()
    if not top_level:
        return None

    repo_root = Path(top_level).resolve()
    if not _is_within(root, repo_root):
        return None

    listing = _git(
        [
            "-C",
            str(repo_root),
            "ls-files",
            "-z",
            "--others",
            "-i",
            "--exclude-standard",
            "--directory",
        ]
    )
    if listing is None:
        return None

    ignored_files: set[Path] = set()
    ignored_dirs: set[Path] = set()
    for raw in listing.split(b"\x00"):
        if not raw:
            continue
        rel = raw.decode("utf-8", errors="surrogateescape")
        is_dir = rel.endswith("/")
        rel = rel.rstrip("/")
        if not rel:
            continue
        abs_path = (repo_root / rel).resolve()
        if not _is_within(abs_path, root):
            continue
        if is_dir or abs_path.is_dir():
            ignored_dirs.add(abs_path)
        else:
            ignored_files.add(abs_path)

    logger.debug(
        "git reports %d ignored files and %d ignored directories under %s",
        len(ignored_files),
        len(ignored_dirs),
        root,
    )
    return GitIgnoreMatcher(
        root=root,
        ignored_files=frozenset(ignored_files),
        ignored_dirs=frozenset(ignored_dirs),
    )


__all__ = [
    "GitIgnoreMatcher",
    "load_git_matcher",
]

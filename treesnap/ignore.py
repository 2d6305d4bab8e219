"""Ignore-rule sources composed into one traversal predicate.

Built-in names are matched against every entry name at every depth. On top of
them a run may add gitignore-syntax rules from a pattern file at the root
(parsed by ``gitignore_parser``) or the ignored set reported by git itself.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from gitignore_parser import parse_gitignore

from .config import SnapshotConfig
from .errors import ConfigurationError
from .gitignore import load_git_matcher

logger = logging.getLogger(__name__)

PathMatcher = Callable[[Path], bool]


@dataclass(frozen=True)
class IgnoreRules:
    """Immutable ignore predicate for one run."""

    names: frozenset[str] = frozenset()
    matchers: tuple[PathMatcher, ...] = ()

    def is_ignored(self, path: Path) -> bool:
        if path.name in self.names:
            return True
        return any(matcher(path) for matcher in self.matchers)


def load_pattern_file(root: Path, ignore_file: str) -> PathMatcher:
    """Parse a gitignore-syntax pattern file located at ``root``."""
    pattern_path = root / ignore_file
    if not pattern_path.is_file():
        raise ConfigurationError(f"ignore file not found: {pattern_path}")
    try:
        matches = parse_gitignore(str(pattern_path), base_dir=str(root))
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"cannot read ignore file {pattern_path}: {exc}") from exc

    def matcher(path: Path) -> bool:
        try:
            return bool(matches(str(path)))
        except ValueError:
            # Symlinks resolving outside the root are outside the rules' reach.
            return False

    return matcher


def build_ignore_rules(config: SnapshotConfig) -> IgnoreRules:
    """Build the ignore predicate for ``config``.

    Raises ``ConfigurationError`` when the requested source is unavailable: a
    missing pattern file, or a root outside any git work tree.
    """
    root = config.root.resolve()
    matchers: list[PathMatcher] = []
    if config.ignore_source == "file":
        matchers.append(load_pattern_file(root, config.ignore_file))
        logger.info("using ignore patterns from %s", root / config.ignore_file)
    elif config.ignore_source == "git":
        git_matcher = load_git_matcher(root)
        if git_matcher is None:
            raise ConfigurationError(f"not inside a git work tree (or git unavailable): {root}")
        matchers.append(git_matcher)
        logger.info("using git ignore rules for %s", root)
    return IgnoreRules(names=frozenset(config.ignore_dirs), matchers=tuple(matchers))


__all__ = [
    "IgnoreRules",
    "PathMatcher",
    "build_ignore_rules",
    "load_pattern_file",
]

"""Error taxonomy for snapshot runs.

Configuration and output errors stop a run before anything is written.
Per-file read/decode problems never surface here; they become
``DecodedContent`` placeholders instead.
"""

from __future__ import annotations

from pathlib import Path


class TreesnapError(Exception):
    """Base class for errors that terminate a snapshot run."""


class ConfigurationError(TreesnapError):
    """Run settings are unusable (missing root, no ignore source, empty selection)."""


class TraversalError(TreesnapError):
    """A directory entry could not be scanned while running in strict mode."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class OutputWriteError(TreesnapError):
    """The snapshot document could not be written to its destination."""

    def __init__(self, path: Path, exc: Exception) -> None:
        super().__init__(f"cannot write {path}: {exc}")
        self.path = path

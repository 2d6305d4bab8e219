"""Decide which non-ignored files contribute to the snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath

from .config import SnapshotConfig, temp_output_name


@dataclass(frozen=True)
class InclusionPolicy:
    """Extension allow-list (or include-all) plus reserved-name exclusions.

    The output file name and its staging name are excluded at every depth so
    a previous snapshot, or one left half-written, is never folded into the
    next one. Extensions match the last suffix exactly,
    so ``archive.tar.gz`` is selected by ``.gz``.
    """

    extensions: frozenset[str] = frozenset()
    include_all: bool = False
    output_name: str = ""
    reserved_names: frozenset[str] = frozenset()
    reserved_scope: str = "root"

    @classmethod
    def from_config(cls, config: SnapshotConfig) -> InclusionPolicy:
        return cls(
            extensions=config.extensions,
            include_all=config.include_all,
            output_name=config.output_name,
            reserved_names=config.reserved_names,
            reserved_scope=config.reserved_scope,
        )

    def is_reserved(self, rel_path: PurePath) -> bool:
        name = rel_path.name
        if name in {self.output_name, temp_output_name(self.output_name)}:
            return True
        if name not in self.reserved_names:
            return False
        return self.reserved_scope == "global" or len(rel_path.parts) == 1

    def is_included(self, rel_path: PurePath) -> bool:
        """Return whether the file at ``rel_path`` (relative to root) is included."""
        if self.is_reserved(rel_path):
            return False
        if self.include_all:
            return True
        suffix = rel_path.suffix
        return bool(suffix) and suffix in self.extensions


__all__ = ["InclusionPolicy"]

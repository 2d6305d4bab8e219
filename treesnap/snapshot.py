"""Run orchestration: validate settings, traverse, assemble, write."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .config import SnapshotConfig
from .content import load_content
from .decoded import DecodedContent
from .document import Document, assemble, write_document
from .ignore import build_ignore_rules
from .inclusion import InclusionPolicy
from .walk import TraversalWarning, walk_tree

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapshotResult:
    document: Document
    output_path: Path
    warnings: tuple[TraversalWarning, ...] = ()


def build_snapshot(
    config: SnapshotConfig,
    content_for: Callable[[Path], DecodedContent] = load_content,
) -> SnapshotResult:
    """Build the snapshot document for ``config`` without writing it.

    Configuration problems raise ``ConfigurationError`` before any traversal.
    In strict mode the first traversal problem raises ``TraversalError``.
    """
    config.validate()
    root = config.root.resolve()
    ignore_rules = build_ignore_rules(config)
    policy = InclusionPolicy.from_config(config)

    logger.info("scanning %s", root)
    warnings: list[TraversalWarning] = []
    entries = walk_tree(root, ignore_rules, strict=config.strict, warnings=warnings)
    document = assemble(
        root,
        entries,
        policy,
        content_for,
        fence_tag=config.fence_tag,
        hide_empty_dirs=config.hide_empty_dirs,
        jobs=config.jobs,
    )
    logger.info(
        "assembled %d files (%d binary, %d unreadable, %d traversal warnings)",
        document.file_count,
        document.binary_count,
        document.unreadable_count,
        len(warnings),
    )
    return SnapshotResult(document=document, output_path=root / config.output_name, warnings=tuple(warnings))


def write_snapshot(
    config: SnapshotConfig,
    content_for: Callable[[Path], DecodedContent] = load_content,
) -> SnapshotResult:
    """Build the snapshot and write it atomically to ``config.output_path``."""
    result = build_snapshot(config, content_for)
    write_document(result.document, result.output_path)
    return result


__all__ = [
    "SnapshotResult",
    "build_snapshot",
    "write_snapshot",
]

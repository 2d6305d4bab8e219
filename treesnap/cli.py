"""Command-line front door for treesnap.

Parses CLI options, resolves the root path and the extension selection (from
flags or an interactive prompt), then builds and writes the snapshot.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from . import config as user_config
from .config import FENCE_TAGS, IGNORE_SOURCES, RESERVED_SCOPES, SnapshotConfig, normalize_extension
from .errors import ConfigurationError, TreesnapError
from .ignore import build_ignore_rules
from .snapshot import build_snapshot, write_snapshot
from .walk import scan_extensions

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_CONFIG = 2


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _stdin_is_interactive() -> bool:
    try:
        return sys.stdin.isatty()
    except (AttributeError, ValueError):
        return False


def _ask(prompt: str) -> str:
    """Read one answer from stdin; end of input or Ctrl-C cancels the run."""
    try:
        return input(prompt)
    except (EOFError, KeyboardInterrupt) as exc:
        raise ConfigurationError("input cancelled") from exc


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="treesnap",
        description="Snapshot a source tree into one Markdown document: a directory listing followed by file contents.",
    )
    parser.add_argument("path", nargs="?", default=None, help="Root directory. Defaults to the current directory.")
    parser.add_argument("--prompt", action="store_true", help="Ask for the root directory when no path is given.")
    parser.add_argument(
        "-e",
        "--ext",
        action="append",
        default=[],
        metavar="EXT",
        help="Include files with this extension (repeatable, e.g. -e py -e .rs).",
    )
    parser.add_argument("-a", "--all", action="store_true", help="Include every non-ignored file.")
    parser.add_argument("-o", "--output", default=None, help="Output file name inside the root.")
    parser.add_argument("--stdout", action="store_true", help="Print the document instead of writing the file.")
    parser.add_argument(
        "--ignore-source",
        choices=IGNORE_SOURCES,
        default="builtin",
        help="Ignore rules: built-in names only, a pattern file at the root, or git's ignored set.",
    )
    parser.add_argument("--ignore-file", default=user_config.DEFAULT_IGNORE_FILE, help="Pattern file for --ignore-source=file.")
    parser.add_argument(
        "--ignore-dir",
        action="append",
        default=[],
        metavar="NAME",
        help="Additional entry name ignored at every depth (repeatable).",
    )
    parser.add_argument(
        "--reserved",
        action="append",
        default=[],
        metavar="NAME",
        help="File name excluded from the snapshot, e.g. LICENSE (repeatable).",
    )
    parser.add_argument(
        "--reserved-scope",
        choices=RESERVED_SCOPES,
        default="root",
        help="Exclude reserved names only at the root or at every depth.",
    )
    parser.add_argument("--fence-tag", choices=FENCE_TAGS, default="extension", help="Code fence language tag source.")
    parser.add_argument("--hide-empty-dirs", action="store_true", help="Omit directories without included files.")
    parser.add_argument("--strict", action="store_true", help="Fail on unreadable directories instead of skipping them.")
    parser.add_argument("-j", "--jobs", type=_positive_int, default=1, help="Worker threads for reading files.")
    parser.add_argument("--no-config", action="store_true", help="Ignore and do not update the user config file.")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v, -vv).")
    return parser


def resolve_root(path_arg: str | None, prompt: bool, default_path: Path | None) -> Path:
    """Pick the root from the argument, an interactive prompt, or the default."""
    if path_arg:
        return Path(path_arg)
    if prompt and _stdin_is_interactive():
        answer = _ask("Project path: ").strip()
        if answer:
            return Path(answer)
    return default_path if default_path is not None else Path.cwd()


def parse_selection(answer: str, choices: list[str], default: tuple[str, ...]) -> set[str]:
    """Parse a numbered selection such as ``"1,3 4"`` or ``"all"``.

    An empty answer keeps ``default`` (restricted to available choices).
    Raises ``ConfigurationError`` on out-of-range or non-numeric items.
    """
    stripped = answer.strip()
    if not stripped:
        return {ext for ext in default if ext in choices}
    if stripped.lower() == "all":
        return set(choices)
    selected: set[str] = set()
    for token in stripped.replace(",", " ").split():
        try:
            index = int(token)
        except ValueError as exc:
            raise ConfigurationError(f"invalid selection: {token!r}") from exc
        if not 1 <= index <= len(choices):
            raise ConfigurationError(f"selection out of range: {index}")
        selected.add(choices[index - 1])
    return selected


def prompt_extensions(choices: list[str], default: tuple[str, ...]) -> set[str]:
    print("Found these file types; choose which to include:")
    for index, ext in enumerate(choices, start=1):
        marker = "*" if ext in default else " "
        print(f"  {index:>3}. [{marker}] {ext}")
    hint = " (Enter keeps the * marks)" if any(ext in choices for ext in default) else ""
    answer = _ask(f"Numbers separated by spaces or commas, or 'all'{hint}: ")
    return parse_selection(answer, choices, default)


def select_extensions(base: SnapshotConfig, remembered: tuple[str, ...]) -> frozenset[str]:
    """Scan the root for extensions and ask which ones to include."""
    replace(base, include_all=True).validate()
    ignore_rules = build_ignore_rules(base)
    choices = scan_extensions(base.root.resolve(), ignore_rules, base.output_name)
    if not choices:
        raise ConfigurationError(f"no files with an extension found under {base.root}")
    if not _stdin_is_interactive():
        raise ConfigurationError("no file extensions selected (use --ext or --all)")
    selected = prompt_extensions(choices, remembered)
    if not selected:
        raise ConfigurationError("no file extensions selected")
    return frozenset(selected)


def main(argv: list[str] | None = None, default_path: Path | None = None) -> None:
    """Parse CLI arguments and write (or print) the snapshot document.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is used.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    use_config = not args.no_config
    ignore_dirs = set(user_config.load_ignore_dirs() if use_config else user_config.DEFAULT_IGNORE_DIRS)
    ignore_dirs.update(name for name in args.ignore_dir if name)
    reserved = set(user_config.load_reserved_names() if use_config else ())
    reserved.update(name for name in args.reserved if name)
    output_name = args.output or (user_config.load_output_name() if use_config else user_config.DEFAULT_OUTPUT_NAME)
    extensions = {normalize_extension(ext) for ext in args.ext}
    extensions.discard("")

    try:
        root = resolve_root(args.path, args.prompt, default_path)
        snapshot_config = SnapshotConfig(
            root=root,
            output_name=output_name,
            ignore_source=args.ignore_source,
            ignore_file=args.ignore_file,
            ignore_dirs=frozenset(ignore_dirs),
            extensions=frozenset(extensions),
            include_all=args.all,
            reserved_names=frozenset(reserved),
            reserved_scope=args.reserved_scope,
            fence_tag=args.fence_tag,
            hide_empty_dirs=args.hide_empty_dirs,
            strict=args.strict,
            jobs=args.jobs,
        )
        if not snapshot_config.include_all and not snapshot_config.extensions:
            remembered = user_config.load_last_extensions() if use_config else ()
            chosen = select_extensions(snapshot_config, remembered)
            snapshot_config = replace(snapshot_config, extensions=chosen)
            logger.debug("selected extensions: %s", ", ".join(sorted(chosen)))
            if use_config:
                user_config.save_last_extensions(chosen)
        if args.stdout:
            sys.stdout.write(build_snapshot(snapshot_config).document.text)
            return
        result = write_snapshot(snapshot_config)
    except ConfigurationError as exc:
        parser.exit(EXIT_CONFIG, f"error: {exc}\n")
    except TreesnapError as exc:
        parser.exit(EXIT_FAILURE, f"error: {exc}\n")

    print(f"Snapshot written: {result.output_path} ({result.document.file_count} files)")


if __name__ == "__main__":
    main()

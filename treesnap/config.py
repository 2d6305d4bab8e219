"""Run settings and persisted user defaults.

``SnapshotConfig`` is an immutable value built once per run and passed
explicitly to every stage. User defaults (ignored directory names, reserved
names, output name, last extension selection) live in a JSON file under the
platform config directory. Access to that file is defensive: malformed or
missing config falls back to built-in defaults.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

from .errors import ConfigurationError

APP_NAME = "treesnap"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_OUTPUT_NAME = "project_documentation.md"
TEMP_SUFFIX = ".tmp"
DEFAULT_IGNORE_DIRS: tuple[str, ...] = ("__pycache__", ".vs", "target", ".claude", ".git")
DEFAULT_IGNORE_FILE = ".gitignore"
DEFAULT_RESERVED_NAMES: tuple[str, ...] = ()

IGNORE_SOURCES = ("builtin", "file", "git")
RESERVED_SCOPES = ("root", "global")
FENCE_TAGS = ("extension", "lexer")


@dataclass(frozen=True)
class SnapshotConfig:
    """Settings for one snapshot run.

    ``extensions`` holds dotted suffixes (``".py"``) and is ignored when
    ``include_all`` is set. ``reserved_scope`` decides whether
    ``reserved_names`` are excluded only at the root or at every depth; the
    output file name is always excluded everywhere.
    """

    root: Path
    output_name: str = DEFAULT_OUTPUT_NAME
    ignore_source: str = "builtin"
    ignore_file: str = DEFAULT_IGNORE_FILE
    ignore_dirs: frozenset[str] = field(default_factory=lambda: frozenset(DEFAULT_IGNORE_DIRS))
    extensions: frozenset[str] = frozenset()
    include_all: bool = False
    reserved_names: frozenset[str] = field(default_factory=lambda: frozenset(DEFAULT_RESERVED_NAMES))
    reserved_scope: str = "root"
    fence_tag: str = "extension"
    hide_empty_dirs: bool = False
    strict: bool = False
    jobs: int = 1

    @property
    def output_path(self) -> Path:
        return self.root / self.output_name

    def validate(self) -> None:
        """Raise ``ConfigurationError`` for settings a run cannot start with."""
        if not self.root.exists():
            raise ConfigurationError(f"path does not exist: {self.root}")
        if not self.root.is_dir():
            raise ConfigurationError(f"path is not a directory: {self.root}")
        if self.output_name in {"", ".."} or Path(self.output_name).name != self.output_name:
            raise ConfigurationError(f"invalid output file name: {self.output_name!r}")
        if self.ignore_source not in IGNORE_SOURCES:
            raise ConfigurationError(f"unknown ignore source: {self.ignore_source!r}")
        if self.reserved_scope not in RESERVED_SCOPES:
            raise ConfigurationError(f"unknown reserved-name scope: {self.reserved_scope!r}")
        if self.fence_tag not in FENCE_TAGS:
            raise ConfigurationError(f"unknown fence tag mode: {self.fence_tag!r}")
        if self.jobs < 1:
            raise ConfigurationError("jobs must be >= 1")
        if not self.include_all and not self.extensions:
            raise ConfigurationError("no file extensions selected")


def temp_output_name(output_name: str) -> str:
    """Name of the staging file an in-progress write uses next to the output."""
    return output_name + TEMP_SUFFIX


def normalize_extension(value: str) -> str:
    """Return ``value`` as a dotted suffix (``"py"`` -> ``".py"``)."""
    stripped = value.strip()
    if not stripped:
        return ""
    return stripped if stripped.startswith(".") else f".{stripped}"


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are ignored; remembering defaults is never fatal to a run.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError:
        pass


def _load_name_list(key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """Read a list of non-empty strings, falling back to ``default`` when invalid."""
    value = load_config().get(key)
    if not isinstance(value, list):
        return default
    names = tuple(item.strip() for item in value if isinstance(item, str) and item.strip())
    return names if names else default


def load_ignore_dirs() -> tuple[str, ...]:
    """Load directory/file names ignored at every depth."""
    return _load_name_list("ignore_dirs", DEFAULT_IGNORE_DIRS)


def load_reserved_names() -> tuple[str, ...]:
    """Load reserved file names (license, readme) excluded from the snapshot."""
    return _load_name_list("reserved_names", DEFAULT_RESERVED_NAMES)


def load_output_name() -> str:
    value = load_config().get("output_name")
    if not isinstance(value, str):
        return DEFAULT_OUTPUT_NAME
    stripped = value.strip()
    return stripped if stripped else DEFAULT_OUTPUT_NAME


def load_last_extensions() -> tuple[str, ...]:
    """Load the previous interactive extension selection, normalized and sorted."""
    value = load_config().get("last_extensions")
    if not isinstance(value, list):
        return ()
    normalized = {normalize_extension(item) for item in value if isinstance(item, str)}
    normalized.discard("")
    return tuple(sorted(normalized))


def save_last_extensions(extensions: frozenset[str] | set[str]) -> None:
    """Persist the extension selection for the next interactive prompt."""
    config = load_config()
    config["last_extensions"] = sorted(extensions)
    save_config(config)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "DEFAULT_IGNORE_DIRS",
    "DEFAULT_IGNORE_FILE",
    "DEFAULT_OUTPUT_NAME",
    "FENCE_TAGS",
    "IGNORE_SOURCES",
    "RESERVED_SCOPES",
    "SnapshotConfig",
    "TEMP_SUFFIX",
    "load_config",
    "load_ignore_dirs",
    "load_last_extensions",
    "load_output_name",
    "load_reserved_names",
    "normalize_extension",
    "save_config",
    "save_last_extensions",
    "temp_output_name",
]

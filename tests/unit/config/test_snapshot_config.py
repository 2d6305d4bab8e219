"""Tests for run settings validation and persisted user defaults."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from treesnap import config
from treesnap.config import SnapshotConfig, normalize_extension
from treesnap.errors import ConfigurationError


class SnapshotConfigValidationTests(unittest.TestCase):
    def test_valid_config_passes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            SnapshotConfig(root=Path(tmp), extensions=frozenset({".py"})).validate()

    def test_missing_root(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaisesRegex(ConfigurationError, "does not exist"):
                SnapshotConfig(root=Path(tmp) / "nope", include_all=True).validate()

    def test_root_is_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            file_path = Path(tmp) / "file.txt"
            file_path.write_text("x", encoding="utf-8")
            with self.assertRaisesRegex(ConfigurationError, "not a directory"):
                SnapshotConfig(root=file_path, include_all=True).validate()

    def test_empty_selection(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaisesRegex(ConfigurationError, "no file extensions"):
                SnapshotConfig(root=Path(tmp)).validate()

    def test_invalid_output_names(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            for name in ("", "..", "sub/out.md"):
                with self.subTest(name=name):
                    with self.assertRaises(ConfigurationError):
                        SnapshotConfig(root=Path(tmp), include_all=True, output_name=name).validate()

    def test_unknown_modes_and_jobs(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            for overrides in (
                {"ignore_source": "svn"},
                {"reserved_scope": "parent"},
                {"fence_tag": "mime"},
                {"jobs": 0},
            ):
                with self.subTest(overrides=overrides):
                    with self.assertRaises(ConfigurationError):
                        SnapshotConfig(root=root, include_all=True, **overrides).validate()

    def test_output_path_is_inside_root(self) -> None:
        settings = SnapshotConfig(root=Path("/work"), output_name="snap.md")
        self.assertEqual(settings.output_path, Path("/work/snap.md"))

    def test_normalize_extension(self) -> None:
        self.assertEqual(normalize_extension("py"), ".py")
        self.assertEqual(normalize_extension(" .rs "), ".rs")
        self.assertEqual(normalize_extension("  "), "")


class PersistedConfigTests(unittest.TestCase):
    def test_missing_or_malformed_config_falls_back_to_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            with mock.patch("treesnap.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), {})
                self.assertEqual(config.load_ignore_dirs(), config.DEFAULT_IGNORE_DIRS)

                config_path.write_text("{not json", encoding="utf-8")
                self.assertEqual(config.load_config(), {})

                config_path.write_text("[1, 2]", encoding="utf-8")
                self.assertEqual(config.load_config(), {})
                self.assertEqual(config.load_output_name(), config.DEFAULT_OUTPUT_NAME)

    def test_user_lists_override_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text(
                json.dumps(
                    {
                        "ignore_dirs": ["node_modules", "", 3],
                        "reserved_names": ["LICENSE"],
                        "output_name": "snapshot.md",
                    }
                ),
                encoding="utf-8",
            )
            with mock.patch("treesnap.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_ignore_dirs(), ("node_modules",))
                self.assertEqual(config.load_reserved_names(), ("LICENSE",))
                self.assertEqual(config.load_output_name(), "snapshot.md")

    def test_last_extensions_round_trip(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "nested" / "config.json"
            with mock.patch("treesnap.config.CONFIG_PATH", config_path):
                config.save_last_extensions({".rs", ".py"})

                saved = json.loads(config_path.read_text(encoding="utf-8"))
                self.assertEqual(saved["last_extensions"], [".py", ".rs"])
                self.assertEqual(config.load_last_extensions(), (".py", ".rs"))


if __name__ == "__main__":
    unittest.main()

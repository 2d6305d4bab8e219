"""End-to-end snapshot runs over real temporary trees."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from treesnap import content
from treesnap.config import SnapshotConfig
from treesnap.snapshot import build_snapshot, write_snapshot


class SnapshotRunTests(unittest.TestCase):
    def test_single_file_document_is_exact(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "hello.txt").write_bytes(b"Hello")

            result = write_snapshot(SnapshotConfig(root=root, extensions=frozenset({".txt"})))

            expected = (
                "## 1. Directory Structure\n\n"
                f"{root.name}/\n"
                "    hello.txt\n"
                "\n## 2. File Contents\n\n"
                "### hello.txt\n"
                "```txt\n"
                "Hello\n"
                "```\n\n"
            )
            self.assertEqual(result.output_path, root / "project_documentation.md")
            self.assertEqual(result.output_path.read_text(encoding="utf-8"), expected)

    def test_ignored_directory_is_absent_from_both_sections(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "__pycache__").mkdir()
            (root / "__pycache__" / "stale.py").write_text("old\n", encoding="utf-8")
            (root / "app.py").write_text("new\n", encoding="utf-8")

            text = build_snapshot(SnapshotConfig(root=root, extensions=frozenset({".py"}))).document.text

            self.assertNotIn("__pycache__", text)
            self.assertNotIn("stale.py", text)
            self.assertIn("### app.py\n", text)

    def test_rerun_with_previous_output_present_is_identical(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "docs").mkdir()
            (root / "docs" / "guide.md").write_text("# Guide\n", encoding="utf-8")
            (root / "main.py").write_text("print(1)\n", encoding="utf-8")
            config = SnapshotConfig(root=root, include_all=True)

            first = write_snapshot(config).output_path.read_bytes()
            second = write_snapshot(config).output_path.read_bytes()

            self.assertEqual(first, second)
            self.assertNotIn(b"project_documentation.md", second)

    def test_unreadable_file_gets_placeholder_and_run_continues(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "a.py").write_text("A = 1\n", encoding="utf-8")
            (root / "locked.py").write_text("secret\n", encoding="utf-8")
            (root / "z.py").write_text("Z = 26\n", encoding="utf-8")
            real_read = content.read_for_decode

            def fake_read(path: Path):
                if path.name == "locked.py":
                    raise PermissionError(13, "Permission denied")
                return real_read(path)

            with mock.patch("treesnap.content.read_for_decode", side_effect=fake_read):
                document = build_snapshot(SnapshotConfig(root=root, extensions=frozenset({".py"}))).document

            self.assertIn("### locked.py\n```py\n<unreadable file: Permission denied>\n```\n", document.text)
            self.assertIn("### a.py\n```py\nA = 1\n```\n", document.text)
            self.assertIn("### z.py\n```py\nZ = 26\n```\n", document.text)
            self.assertEqual(document.unreadable_count, 1)

    def test_mixed_encodings_and_binary(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "wide.txt").write_bytes(b"\xff\xfe\x48\x00\x69\x00")
            (root / "blob.txt").write_bytes(b"\x00\x01\x02\x03")
            (root / "plain.txt").write_text("plain\n", encoding="utf-8")

            document = build_snapshot(SnapshotConfig(root=root, extensions=frozenset({".txt"}))).document

            self.assertIn("### wide.txt\n```txt\nHi\n```\n", document.text)
            self.assertIn("### blob.txt\n```txt\n<binary file: 4 bytes>\n```\n", document.text)
            self.assertIn("### plain.txt\n```txt\nplain\n```\n", document.text)
            self.assertEqual(document.binary_count, 1)

    def test_tree_lists_directories_and_only_included_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "assets").mkdir()
            (root / "assets" / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00")
            (root / "src").mkdir()
            (root / "src" / "lib.rs").write_text("fn main() {}\n", encoding="utf-8")

            tree = build_snapshot(SnapshotConfig(root=root, extensions=frozenset({".rs"}))).document.tree_section

            self.assertEqual(
                tree,
                "## 1. Directory Structure\n\n"
                f"{root.name}/\n"
                "    assets/\n"
                "    src/\n"
                "        lib.rs\n",
            )

    @unittest.skipUnless(sys.platform.startswith("linux"), "requires byte-level file names")
    def test_root_with_non_utf8_name_is_written(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(os.fsdecode(os.path.join(os.fsencode(tmp), b"proj\xff"))).resolve()
            root.mkdir()
            (root / "a.py").write_text("A = 1\n", encoding="utf-8")

            result = write_snapshot(SnapshotConfig(root=root, extensions=frozenset({".py"})))

            text = result.output_path.read_text(encoding="utf-8")
            self.assertTrue(text.startswith("## 1. Directory Structure\n\nproj\\xff/\n    a.py\n"))
            self.assertEqual(sorted(path.name for path in root.iterdir()), ["a.py", "project_documentation.md"])

    def test_stale_staging_file_is_not_included(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "main.py").write_text("print(1)\n", encoding="utf-8")
            (root / "project_documentation.md.tmp").write_text("half written\n", encoding="utf-8")

            text = write_snapshot(SnapshotConfig(root=root, include_all=True)).output_path.read_text(encoding="utf-8")

            self.assertNotIn("project_documentation.md.tmp", text)
            self.assertNotIn("half written", text)
            self.assertIn("### main.py\n", text)

    def test_pattern_file_source(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / ".gitignore").write_text("build/\n*.log\n", encoding="utf-8")
            (root / "build").mkdir()
            (root / "build" / "gen.py").write_text("x\n", encoding="utf-8")
            (root / "debug.log").write_text("noise\n", encoding="utf-8")
            (root / "main.py").write_text("print(1)\n", encoding="utf-8")

            config = SnapshotConfig(root=root, include_all=True, ignore_source="file")
            document = build_snapshot(config).document

            self.assertNotIn("build/", document.tree_section)
            self.assertNotIn("gen.py", document.text)
            self.assertNotIn("debug.log", document.text)
            self.assertIn("### .gitignore\n", document.text)
            self.assertIn("### main.py\n", document.text)

    @unittest.skipIf(shutil.which("git") is None, "git is not installed")
    def test_git_source(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            subprocess.run(["git", "init", "-q", str(root)], check=True)
            (root / ".gitignore").write_text("build/\n*.log\n", encoding="utf-8")
            (root / "build").mkdir()
            (root / "build" / "gen.py").write_text("x\n", encoding="utf-8")
            (root / "debug.log").write_text("noise\n", encoding="utf-8")
            (root / "main.py").write_text("print(1)\n", encoding="utf-8")

            config = SnapshotConfig(root=root, include_all=True, ignore_source="git")
            document = build_snapshot(config).document

            self.assertNotIn("build/", document.tree_section)
            self.assertNotIn("gen.py", document.text)
            self.assertNotIn("debug.log", document.text)
            self.assertIn("### main.py\n", document.text)


if __name__ == "__main__":
    unittest.main()

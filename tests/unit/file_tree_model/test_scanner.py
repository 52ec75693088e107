"""Tests for directory scans, lazy reads, pagination, and counts."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from workspacefs.errors import FileNotFound, InvalidPath
from workspacefs.file_tree_model import (
    DirectoryPage,
    FileNode,
    ScanOptions,
    count_directory_items,
    get_directory_page,
    read_directory_lazy,
    scan_directory,
)
from workspacefs.file_tree_model import fs as scanner


def _create_test_structure(base: Path) -> None:
    for i in range(1, 6):
        (base / f"file{i}.txt").write_text("content", encoding="utf-8")
    (base / ".hidden").write_text("hidden content", encoding="utf-8")
    for i in range(1, 3):
        folder = base / f"folder{i}"
        folder.mkdir()
        for j in range(1, 11):
            (folder / f"file{j}.txt").write_text("content", encoding="utf-8")
    nested = base / "nested" / "deep" / "structure"
    nested.mkdir(parents=True)
    (nested / "deep_file.txt").write_text("deep content", encoding="utf-8")


class ScannerTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.base = Path(self._tmp.name).resolve()


class ScanDirectoryTests(ScannerTestCase):
    def test_directories_first_then_case_insensitive_names(self) -> None:
        (self.base / "b.txt").write_text("b", encoding="utf-8")
        (self.base / "A.txt").write_text("a", encoding="utf-8")
        (self.base / "folder").mkdir()

        names = [node.name for node in scan_directory(self.base)]
        self.assertEqual(names, ["folder", "A.txt", "b.txt"])

    def test_mixed_case_directories_and_files(self) -> None:
        for name in ("zeta", "Alpha", "beta"):
            (self.base / name).mkdir()
        for name in ("Zed.md", "apple.md", "Banana.md"):
            (self.base / name).write_text(name, encoding="utf-8")

        names = [node.name for node in scan_directory(self.base)]
        self.assertEqual(names, ["Alpha", "beta", "zeta", "apple.md", "Banana.md", "Zed.md"])

    def test_basic_scan_skips_hidden_and_lists_immediate_children(self) -> None:
        _create_test_structure(self.base)
        nodes = scan_directory(self.base, ScanOptions(include_hidden=False, max_depth=1))

        names = [node.name for node in nodes]
        self.assertEqual(
            names,
            ["folder1", "folder2", "nested", "file1.txt", "file2.txt", "file3.txt", "file4.txt", "file5.txt"],
        )
        self.assertNotIn(".hidden", names)

    def test_include_hidden(self) -> None:
        _create_test_structure(self.base)
        nodes = scan_directory(self.base, ScanOptions(include_hidden=True))
        self.assertIn(".hidden", [node.name for node in nodes])
        self.assertEqual(len(nodes), 9)

    def test_node_fields(self) -> None:
        (self.base / "doc.md").write_text("12345", encoding="utf-8")
        (self.base / "dir").mkdir()
        folder, doc = scan_directory(self.base)

        self.assertFalse(folder.is_file)
        self.assertIsNone(folder.size)
        self.assertIsNone(folder.children)
        self.assertEqual(folder.path, self.base / "dir")
        self.assertTrue(doc.is_file)
        self.assertEqual(doc.size, 5)
        self.assertIsNotNone(doc.modified)
        self.assertEqual(doc.path, self.base / "doc.md")

    def test_deeper_scan_returns_flat_sorted_listing(self) -> None:
        _create_test_structure(self.base)
        nodes = scan_directory(self.base, ScanOptions(max_depth=2))
        paths = {node.path.relative_to(self.base).as_posix() for node in nodes}

        self.assertIn("folder1/file10.txt", paths)
        self.assertIn("nested/deep", paths)
        self.assertNotIn("nested/deep/structure", paths)
        self.assertEqual(nodes, sorted(nodes, key=scanner.node_sort_key))

    def test_zero_depth_lists_nothing(self) -> None:
        (self.base / "a.txt").write_text("a", encoding="utf-8")
        self.assertEqual(scan_directory(self.base, ScanOptions(max_depth=0)), [])

    def test_not_a_directory(self) -> None:
        target = self.base / "file.txt"
        target.write_text("x", encoding="utf-8")
        with self.assertRaises(InvalidPath):
            scan_directory(target)
        with self.assertRaises(InvalidPath):
            scan_directory(self.base / "missing")

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks unsupported")
    def test_unreadable_entries_are_dropped(self) -> None:
        (self.base / "ok.txt").write_text("ok", encoding="utf-8")
        (self.base / "dangling").symlink_to(self.base / "nowhere")

        names = [node.name for node in scan_directory(self.base)]
        self.assertEqual(names, ["ok.txt"])
        self.assertEqual(count_directory_items(self.base), 1)

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks unsupported")
    def test_symlinks_report_their_target_kind(self) -> None:
        (self.base / "real_dir").mkdir()
        (self.base / "real.txt").write_text("abc", encoding="utf-8")
        (self.base / "link_dir").symlink_to(self.base / "real_dir", target_is_directory=True)
        (self.base / "link.txt").symlink_to(self.base / "real.txt")

        by_name = {node.name: node for node in scan_directory(self.base)}
        self.assertFalse(by_name["link_dir"].is_file)
        self.assertTrue(by_name["link.txt"].is_file)
        self.assertEqual(by_name["link.txt"].size, 3)

    def test_parallel_metadata_path_matches_sequential_order(self) -> None:
        for i in range(40):
            (self.base / f"File{i:02d}.txt").write_text("x" * i, encoding="utf-8")
        for i in range(5):
            (self.base / f"dir{i}").mkdir()

        sequential = scan_directory(self.base)
        with mock.patch.object(scanner, "PARALLEL_STAT_THRESHOLD", 1):
            parallel = scan_directory(self.base)

        self.assertEqual(parallel, sequential)
        self.assertEqual([node.name for node in parallel[:5]], [f"dir{i}" for i in range(5)])


class ReadDirectoryLazyTests(ScannerTestCase):
    def test_children_loaded_but_grandchildren_absent(self) -> None:
        _create_test_structure(self.base)
        node = read_directory_lazy(self.base, include_hidden=False)

        self.assertFalse(node.is_file)
        self.assertEqual(node.path, self.base)
        self.assertEqual(node.name, self.base.name)
        self.assertIsNotNone(node.children)
        assert node.children is not None
        self.assertEqual(len(node.children), 8)
        for child in node.children:
            self.assertIsNone(child.children)

        folder1 = next(child for child in node.children if child.name == "folder1")
        self.assertFalse(folder1.is_file)
        self.assertIsNone(folder1.children)

    def test_grandchildren_are_never_scanned(self) -> None:
        (self.base / "sub").mkdir()
        (self.base / "sub" / "inner.txt").write_text("x", encoding="utf-8")
        scanned: list[Path] = []
        real_scandir = os.scandir

        def tracking_scandir(path):
            scanned.append(Path(path))
            return real_scandir(path)

        with mock.patch("workspacefs.file_tree_model.fs.os.scandir", side_effect=tracking_scandir):
            read_directory_lazy(self.base)

        self.assertEqual(scanned, [self.base])

    def test_empty_directory_has_empty_children(self) -> None:
        node = read_directory_lazy(self.base)
        self.assertEqual(node.children, ())

    def test_file_is_rejected(self) -> None:
        target = self.base / "file.txt"
        target.write_text("x", encoding="utf-8")
        with self.assertRaises(InvalidPath):
            read_directory_lazy(target)

    def test_missing_directory(self) -> None:
        with self.assertRaises(FileNotFound):
            read_directory_lazy(self.base / "missing")

    def test_to_dict_keeps_unloaded_children_as_none(self) -> None:
        (self.base / "sub").mkdir()
        payload = read_directory_lazy(self.base).to_dict()

        self.assertEqual(payload["path"], str(self.base))
        children = payload["children"]
        assert isinstance(children, list)
        self.assertEqual(children[0]["name"], "sub")
        self.assertIsNone(children[0]["children"])


class DirectoryPageTests(ScannerTestCase):
    def setUp(self) -> None:
        super().setUp()
        for i in range(1, 6):
            (self.base / f"file{i}.txt").write_text("content", encoding="utf-8")
        for name in ("folder1", "folder2", "nested"):
            (self.base / name).mkdir()

    def test_first_page_has_more(self) -> None:
        page = get_directory_page(self.base, 0, 3, include_hidden=False)
        self.assertIsInstance(page, DirectoryPage)
        self.assertEqual(len(page.nodes), 3)
        self.assertEqual(page.total_count, 8)
        self.assertTrue(page.has_more)
        self.assertEqual([node.name for node in page.nodes], ["folder1", "folder2", "nested"])

    def test_last_partial_page(self) -> None:
        page = get_directory_page(self.base, 6, 3)
        self.assertEqual([node.name for node in page.nodes], ["file4.txt", "file5.txt"])
        self.assertFalse(page.has_more)

    def test_offset_past_end_is_empty(self) -> None:
        page = get_directory_page(self.base, 100, 3)
        self.assertEqual(page.nodes, ())
        self.assertEqual(page.total_count, 8)
        self.assertFalse(page.has_more)

    def test_pages_concatenate_to_full_listing(self) -> None:
        full = scan_directory(self.base)
        collected: list[FileNode] = []
        offset = 0
        while True:
            page = get_directory_page(self.base, offset, 3)
            collected.extend(page.nodes)
            offset += len(page.nodes)
            if not page.has_more:
                break
        self.assertEqual(collected, full)

    def test_zero_limit(self) -> None:
        page = get_directory_page(self.base, 0, 0)
        self.assertEqual(page.nodes, ())
        self.assertTrue(page.has_more)

    def test_negative_values_are_rejected(self) -> None:
        with self.assertRaises(InvalidPath):
            get_directory_page(self.base, -1, 3)
        with self.assertRaises(InvalidPath):
            get_directory_page(self.base, 0, -3)

    def test_page_reflects_mutation_between_calls(self) -> None:
        first = get_directory_page(self.base, 0, 100)
        (self.base / "late.txt").write_text("late", encoding="utf-8")
        second = get_directory_page(self.base, 0, 100)
        self.assertEqual(second.total_count, first.total_count + 1)


class CountDirectoryItemsTests(ScannerTestCase):
    def test_count_matches_scan(self) -> None:
        _create_test_structure(self.base)
        self.assertEqual(count_directory_items(self.base, include_hidden=False), 8)
        self.assertEqual(count_directory_items(self.base, include_hidden=True), 9)
        self.assertEqual(count_directory_items(self.base), len(scan_directory(self.base)))

    def test_count_requires_directory(self) -> None:
        with self.assertRaises(InvalidPath):
            count_directory_items(self.base / "missing")


if __name__ == "__main__":
    unittest.main()

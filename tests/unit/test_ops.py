from __future__ import annotations

import asyncio
import os
from pathlib import Path

import pytest

from common.base.aio import async_is_file, async_read_lines, async_write_text
from common.base.file_io import read_lines, read_text, write_text
from common.base.fs import has_extension, iter_files_with_extension
from common.base.ops import delete_files_with_extension, open_in_editor


def test_has_extension() -> None:
    assert has_extension(Path("test.txt"), "txt")
    assert not has_extension(Path("test.txt"), "rs")
    assert not has_extension(Path("test.TXT"), "txt")
    assert not has_extension(Path("test"), "txt")
    assert not has_extension(Path("test.txt"), ".txt")


def test_iter_files_with_extension_skips_dot_names(make_tree) -> None:
    root = make_tree(["a.txt", ".b.txt", "nested/c.txt", "nested/d.rs", ".hidden/e.txt"])

    found = sorted(p.relative_to(root).as_posix() for p in iter_files_with_extension(root, "txt"))

    assert found == [".hidden/e.txt", "a.txt", "nested/c.txt"]


def test_text_helpers_round_trip_and_strip_lines(tmp_path: Path) -> None:
    path = tmp_path / "lines.txt"
    write_text(path, "Line 1\n  Line 2  \nLine 3")

    assert read_text(path) == "Line 1\n  Line 2  \nLine 3"
    assert read_lines(path) == ["Line 1", "Line 2", "Line 3"]


def test_async_text_helpers(tmp_path: Path) -> None:
    path = tmp_path / "async.txt"

    async def scenario():
        await async_write_text(path, "first\n  second \n")
        return await async_read_lines(path), await async_is_file(path)

    lines, is_file = asyncio.run(scenario())

    assert lines == ["first", "second"]
    assert is_file


def test_delete_files_with_extension_is_case_insensitive(make_tree) -> None:
    root = make_tree(["test1.tmp", "test2.TMP", "keep.txt", "subdir/test3.tmp"])

    removed = asyncio.run(delete_files_with_extension(root, "tmp"))

    assert len(removed) == 3
    remaining = sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())
    assert remaining == ["keep.txt"]


def test_delete_files_with_extension_dry_run_keeps_files(make_tree) -> None:
    root = make_tree(["a.tmp", "b.tmp"])

    removed = asyncio.run(delete_files_with_extension(root, "tmp", dry_run=True))

    assert sorted(p.name for p in removed) == ["a.tmp", "b.tmp"]
    assert (root / "a.tmp").exists() and (root / "b.tmp").exists()


def test_open_in_editor_with_no_files_launches_nothing() -> None:
    assert open_in_editor([], editor="definitely-not-an-editor") == 0


@pytest.mark.skipif(os.name == "nt", reason="relies on the POSIX `true` command")
def test_open_in_editor_passes_every_file(tmp_path: Path) -> None:
    files = [tmp_path / "a.txt", tmp_path / "b.txt"]
    for f in files:
        f.write_text("x", encoding="utf-8")

    assert open_in_editor(files, editor="true") == 0

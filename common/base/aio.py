"""Async filesystem wrappers: each call runs one blocking operation via asyncio.to_thread."""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path
from typing import List

from .file_io import read_lines, read_text, write_text


async def async_is_file(path: Path) -> bool:
    return await asyncio.to_thread(path.is_file)


async def async_mkdir(path: Path, *, parents: bool = True, exist_ok: bool = True) -> None:
    await asyncio.to_thread(path.mkdir, parents=parents, exist_ok=exist_ok)


async def async_copy_file(src: Path, dst: Path) -> Path:
    return Path(await asyncio.to_thread(shutil.copy2, src, dst))


async def async_rmtree(path: Path) -> None:
    await asyncio.to_thread(shutil.rmtree, path)


async def async_unlink(path: Path, *, missing_ok: bool = False) -> None:
    await asyncio.to_thread(path.unlink, missing_ok=missing_ok)


async def async_iterdir(path: Path) -> List[Path]:
    return await asyncio.to_thread(lambda: list(path.iterdir()))


async def async_read_text(path: Path) -> str:
    return await asyncio.to_thread(read_text, path)


async def async_write_text(path: Path, content: str) -> None:
    await asyncio.to_thread(write_text, path, content)


async def async_read_lines(path: Path) -> List[str]:
    return await asyncio.to_thread(read_lines, path)

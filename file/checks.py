"""
file.checks

Content checks run concurrently over a filtered walk.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List

from common.base.aio import async_read_text
from common.base.logging import get_logger

from .walker import walk_filtered

log = get_logger(__name__)


async def find_multiline_files(root: Path | str, extension: str) -> List[Path]:
    """Return, sorted, the files under ``root`` with ``extension`` that hold more than one line."""
    found: List[Path] = []
    lock = asyncio.Lock()

    async def _check(path: Path) -> None:
        content = await async_read_text(path)
        if len(content.splitlines()) > 1:
            log.debug(f"File with multiple lines found: {path}")
            async with lock:
                found.append(path)

    await walk_filtered(root, extension, _check)
    return sorted(found)

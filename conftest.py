from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Iterable

import pytest


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[..., Path]:
    """Create files below ``tmp_path / 'src'``; values are file contents."""

    def _make(files: Iterable[str] | Dict[str, str], root: str = "src") -> Path:
        base = tmp_path / root
        base.mkdir(parents=True, exist_ok=True)
        items = files.items() if isinstance(files, dict) else ((name, name) for name in files)
        for rel, content in items:
            path = base / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return base

    return _make

"""Filesystem helper utilities shared across common modules."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator


def has_extension(path: Path | str, extension: str) -> bool:
    """Case-sensitive check of the final extension, given without the leading dot."""
    suffix = Path(path).suffix
    return bool(suffix) and suffix[1:] == extension


def iter_files_with_extension(root: Path | str, extension: str) -> Iterator[Path]:
    """
    Yield every path under ``root`` with the given extension.

    Entries whose own name starts with a dot are skipped, but their
    directories are still descended into; unreadable directories are ignored.
    """
    for dirpath, dirnames, filenames in os.walk(root):
        for name in (*dirnames, *filenames):
            if name.startswith("."):
                continue
            if has_extension(name, extension):
                yield Path(dirpath) / name

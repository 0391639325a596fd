"""
file.filters

Name-only predicates used to prune directory traversal. Each takes the final
path component (a string or anything with a ``name``) and never touches the
filesystem.
"""

from __future__ import annotations

import os
from pathlib import PurePath
from typing import Union

NameLike = Union[str, PurePath]

GIT_DIR_NAME = ".git"
TARGET_DIR_NAME = "target"
TEMP_MARKER_PREFIX = ".tmp"


def _name_of(entry: NameLike) -> str:
    if isinstance(entry, PurePath):
        return entry.name
    return os.path.basename(entry) or entry


def is_hidden(entry: NameLike) -> bool:
    """Dot-prefixed names other than ``.``/``..``. ``.tmp*`` names stay visible for in-flight atomic writes."""
    name = _name_of(entry)
    return (
        name.startswith(".")
        and name not in {".", ".."}
        and not name.startswith(TEMP_MARKER_PREFIX)
    )


def is_git_dir(entry: NameLike) -> bool:
    return _name_of(entry) == GIT_DIR_NAME


def is_target_dir(entry: NameLike) -> bool:
    return _name_of(entry) == TARGET_DIR_NAME


def is_excluded(entry: NameLike) -> bool:
    """True when the entry (and everything beneath it) is skipped by the walker."""
    return is_hidden(entry) or is_git_dir(entry) or is_target_dir(entry)

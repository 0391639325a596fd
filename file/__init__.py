"""Filtered traversal and directory splitting."""

from .filters import is_excluded, is_git_dir, is_hidden, is_target_dir  # noqa: F401
from .walker import DirectoryEntry, iter_entries, iter_filtered, walk_filtered, walk_sequential  # noqa: F401
from .matcher import (  # noqa: F401
    FileMatcher,
    PredicateFileMatcher,
    RegexFileMatcher,
    extension_predicate,
    glob_predicate,
)
from .splitter import DirectorySplitter, SplitConfig, cleanup, split  # noqa: F401
from .checks import find_multiline_files  # noqa: F401

__all__ = [
    "is_hidden",
    "is_git_dir",
    "is_target_dir",
    "is_excluded",
    "DirectoryEntry",
    "iter_entries",
    "iter_filtered",
    "walk_filtered",
    "walk_sequential",
    "FileMatcher",
    "PredicateFileMatcher",
    "RegexFileMatcher",
    "glob_predicate",
    "extension_predicate",
    "SplitConfig",
    "DirectorySplitter",
    "split",
    "cleanup",
    "find_multiline_files",
]

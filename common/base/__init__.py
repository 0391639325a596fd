"""Low-level shared utilities for fsplit tools."""

from .logging import get_logger, setup_logging, FsplitLogger

__all__ = [
    "get_logger",
    "setup_logging",
    "FsplitLogger",
]

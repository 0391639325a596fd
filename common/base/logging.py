"""
common.base.logging

Typed logging for fsplit tools.

Features:
 - FsplitLogger subclass carrying the Rich flag and the active log file
 - Rich console handler, or an ANSI/emoji stream handler when Rich is off
 - Optional per-run file logging
 - Config-driven defaults (level, Rich toggle, log directory, file prefix)
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, cast

from rich.logging import RichHandler
from rich.text import Text

BASE_LOGGER_NAME = "fsplit"

# ----------------------------------------------------------------------
# LEVEL STYLE METADATA
# ----------------------------------------------------------------------

ANSI_RESET = "\033[0m"

LEVEL_STYLES: Dict[int, Dict[str, str]] = {
    logging.DEBUG: {"emoji": "🐛", "ansi": "\033[36m", "rich": "bright_cyan"},
    logging.INFO: {"emoji": "ℹ️", "ansi": "\033[32m", "rich": "green"},
    logging.WARNING: {"emoji": "⚠️", "ansi": "\033[33m", "rich": "yellow"},
    logging.ERROR: {"emoji": "❌", "ansi": "\033[31m", "rich": "red"},
    logging.CRITICAL: {"emoji": "💥", "ansi": "\033[95m", "rich": "bold magenta"},
}
DEFAULT_STYLE = LEVEL_STYLES[logging.INFO]


def _style_for(record: logging.LogRecord) -> Dict[str, str]:
    return LEVEL_STYLES.get(record.levelno, DEFAULT_STYLE)


# ----------------------------------------------------------------------
# FORMATTERS
# ----------------------------------------------------------------------

class ColorEmojiFormatter(logging.Formatter):
    """Console formatter that injects colored level names and emojis."""

    def format(self, record: logging.LogRecord) -> str:
        style = _style_for(record)
        display = f"{style['emoji']} {record.levelname}"
        record.level_display = f"{style['ansi']}{display}{ANSI_RESET}"  # type: ignore[attr-defined]
        try:
            return super().format(record)
        finally:
            del record.level_display  # type: ignore[attr-defined]


class EmojiFormatter(logging.Formatter):
    """File formatter that prefixes log lines with the level emoji."""

    def format(self, record: logging.LogRecord) -> str:
        record.level_emoji = _style_for(record)["emoji"]  # type: ignore[attr-defined]
        return super().format(record)


class FsplitRichHandler(RichHandler):
    """Rich console handler with emoji-enhanced level column."""

    def get_level_text(self, record: logging.LogRecord) -> Text:  # type: ignore[override]
        style = _style_for(record)
        text = Text()
        text.append(f"{style['emoji']} ", style=style["rich"])
        text.append(record.levelname, style=style["rich"])
        return text


# ----------------------------------------------------------------------
# LOGGER CLASS
# ----------------------------------------------------------------------

class FsplitLogger(logging.Logger):
    """Logger carrying the Rich flag and the per-run log file."""

    rich_enabled: bool = False
    log_file: Optional[Path] = None


# ----------------------------------------------------------------------
# CONFIG-DRIVEN DEFAULTS
# ----------------------------------------------------------------------

def normalize_level(value: Any) -> str:
    if isinstance(value, str):
        candidate = value.strip().upper()
        if candidate in logging._nameToLevel:  # type: ignore[attr-defined]
            return candidate
    elif isinstance(value, int):
        label = logging.getLevelName(value)
        if isinstance(label, str) and not label.startswith("Level "):
            return label
    return "INFO"


def normalize_use_rich(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1", "on"}:
            return True
        if lowered in {"false", "no", "0", "off"}:
            return False
    return None


def _load_default_logging_settings() -> Dict[str, Any]:
    from common.shared.loader import load_logging_config

    try:
        return load_logging_config(None)
    except (OSError, ValueError):
        return {}


# ----------------------------------------------------------------------
# BASE LOGGER SETUP
# ----------------------------------------------------------------------

def setup_logging(
    level: str | int | None = None,
    use_rich: Optional[bool] = None,
    log_dir: Optional[Path | str] = None,
    file_prefix: Optional[str] = None,
    log_to_file: bool = True,
) -> FsplitLogger:
    """
    Configure and return the project logger.

    Args:
        level: Desired logging level. Defaults to the config value (INFO if unset).
        use_rich: Force-enable or disable the Rich handler. None means enabled
            unless the config says otherwise.
        log_dir: Directory for log files. Defaults to the config value or ./logs.
        file_prefix: Prefix for generated log filenames.
        log_to_file: Attach a per-run file handler.
    """
    defaults = _load_default_logging_settings()
    resolved_level = normalize_level(level if level is not None else defaults.get("level"))
    if use_rich is None:
        use_rich = normalize_use_rich(defaults.get("use_rich"))
    resolved_use_rich = True if use_rich is None else use_rich
    resolved_log_dir = Path(log_dir or defaults.get("log_dir") or "./logs").expanduser()
    resolved_prefix = file_prefix or defaults.get("file_prefix") or BASE_LOGGER_NAME

    logging.setLoggerClass(FsplitLogger)
    logger = cast(FsplitLogger, logging.getLogger(BASE_LOGGER_NAME))
    logger.setLevel(resolved_level)

    # Rebuild handlers on every call so new settings take effect.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler: logging.Handler
    if resolved_use_rich:
        console_handler = FsplitRichHandler(
            rich_tracebacks=True,
            markup=False,
            show_time=True,
            show_level=True,
            show_path=False,
            log_time_format="[%X]",
        )
        logger.rich_enabled = True
    else:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(
            ColorEmojiFormatter(
                fmt="%(asctime)s %(level_display)s %(name)s: %(message)s",
                datefmt="%H:%M:%S",
            )
        )
        logger.rich_enabled = False
    logger.addHandler(console_handler)

    logger.log_file = None
    if log_to_file:
        resolved_log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        log_file_path = resolved_log_dir / f"{resolved_prefix}_{timestamp}.log"
        file_handler = logging.FileHandler(log_file_path, mode="a", encoding="utf-8")
        file_handler.setFormatter(
            EmojiFormatter(
                fmt="%(asctime)s %(level_emoji)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)
        logger.log_file = log_file_path

    logger.propagate = False
    logger._initialized = True  # type: ignore[attr-defined]
    logger.debug(
        "Logger initialized at level %s (Rich=%s)",
        resolved_level,
        "ON" if logger.rich_enabled else "OFF",
    )
    if logger.log_file is not None:
        logger.info("📄 Log file created at: %s", logger.log_file.resolve())
    return logger


# ----------------------------------------------------------------------
# UTILITY ACCESSOR
# ----------------------------------------------------------------------

def get_logger(name: str = BASE_LOGGER_NAME) -> FsplitLogger:
    """Retrieve a namespaced project logger (configured later via setup_logging)."""

    logging.setLoggerClass(FsplitLogger)
    base = cast(FsplitLogger, logging.getLogger(BASE_LOGGER_NAME))

    if not getattr(base, "_initialized", False) and not base.handlers:
        base.addHandler(logging.NullHandler())

    if not name or name == BASE_LOGGER_NAME:
        return base

    return cast(FsplitLogger, base.getChild(name))

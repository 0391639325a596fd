"""Command-line entry points for fsplit tasks.

Each entry point is installed as a ``console_scripts`` target. Values come
from the YAML config (``--config``, or ``configs/config.yaml`` when present)
and any flag given on the command line overrides the matching config key.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

import argcomplete

from common.base.logging import get_logger, setup_logging, normalize_use_rich
from common.base.ops import delete_files_with_extension, open_in_editor
from common.shared.loader import load_task_config
from file.checks import find_multiline_files
from file.matcher import glob_predicate
from file.splitter import DirectorySplitter, SplitConfig, cleanup
from file.walker import iter_filtered

log = get_logger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# ----------------------------------------------------------------------
# SHARED PLUMBING
# ----------------------------------------------------------------------

def _base_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", "-c", help="Path to configuration YAML (defaults to configs/config.yaml).")
    parser.add_argument("--log-level", choices=LOG_LEVELS, help="Override the configured log level.")
    parser.add_argument("--no-log-file", action="store_true", help="Log to the console only.")
    return parser


def _add_naming_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--source", help="Source directory to split.")
    parser.add_argument("--output", help="Directory receiving the target directories (defaults to source).")
    parser.add_argument("--num-dirs", "-n", type=int, help="Number of target directories.")
    parser.add_argument("--prefix", dest="prefix_format", help="Directory name prefix; '{}' becomes the index.")
    parser.add_argument("--suffix", dest="suffix_format", help="Directory name suffix.")


def _parse(parser: argparse.ArgumentParser, argv: Optional[Iterable[str]]) -> argparse.Namespace:
    argcomplete.autocomplete(parser)
    return parser.parse_args(list(argv) if argv is not None else None)


def _configure_logging(args: argparse.Namespace, logging_cfg: Dict[str, Any]) -> None:
    setup_logging(
        level=args.log_level or logging_cfg.get("level"),
        use_rich=normalize_use_rich(logging_cfg.get("use_rich")),
        log_dir=logging_cfg.get("log_dir"),
        file_prefix=logging_cfg.get("file_prefix"),
        log_to_file=not args.no_log_file,
    )


def _load(task: str, args: argparse.Namespace, overrides: Dict[str, Any]) -> Dict[str, Any]:
    cfg = dict(load_task_config(task, args.config, overrides))
    _configure_logging(args, cfg.pop("__logging__", {}) or {})
    log.debug(f"Task '{task}' configuration: {cfg}")
    return cfg


def _split_config(cfg: Dict[str, Any]) -> SplitConfig:
    config = SplitConfig(Path(cfg["source_dir"]), cfg["num_dirs"])
    if cfg.get("output_dir"):
        config = config.with_output_dir(cfg["output_dir"])
    if cfg.get("prefix_format") or cfg.get("suffix_format"):
        config = config.with_naming(
            cfg.get("prefix_format") or config.prefix_format,
            cfg.get("suffix_format") or "",
        )
    if cfg.get("accompanying"):
        config = config.with_regex_patterns(cfg["accompanying"])
    return config


def _run(body: Callable[[], Awaitable[int]]) -> int:
    try:
        return asyncio.run(body())
    except KeyboardInterrupt:
        log.warning("⚠️ Operation cancelled by user.")
        return 130
    except Exception as e:
        log.error(f"❌ {type(e).__name__}: {e}", exc_info=log.isEnabledFor(logging.DEBUG))
        return 1


def _guarded(load: Callable[[], Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    try:
        return load()
    except (FileNotFoundError, ValueError) as e:
        setup_logging(log_to_file=False)
        log.error(f"❌ Invalid configuration: {e}")
        return None


# ----------------------------------------------------------------------
# ENTRY POINTS
# ----------------------------------------------------------------------

def cli_split(argv: Optional[Iterable[str]] = None) -> int:
    parser = _base_parser("Distribute files and their accompanying files across N directories.")
    _add_naming_args(parser)
    parser.add_argument(
        "--match",
        "-m",
        action="append",
        help="Glob for representative file names (repeatable, default '*').",
    )
    parser.add_argument(
        "--accompanying",
        "-a",
        action="append",
        help="Regex for sibling files travelling with a representative (repeatable).",
    )
    parser.add_argument(
        "--same-stem",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Require accompanying files to share the representative's stem (default: on).",
    )
    parser.add_argument("--progress", action="store_true", default=None, help="Show a progress bar.")
    args = _parse(parser, argv)

    cfg = _guarded(lambda: _load("split", args, {
        "source_dir": args.source,
        "output_dir": args.output,
        "num_dirs": args.num_dirs,
        "prefix_format": args.prefix_format,
        "suffix_format": args.suffix_format,
        "match": args.match,
        "accompanying": args.accompanying,
        "same_stem": args.same_stem,
        "progress": args.progress,
    }))
    if cfg is None:
        return 1

    async def _body() -> int:
        config = _split_config(cfg)
        splitter = DirectorySplitter.from_config(
            config,
            glob_predicate(*(cfg.get("match") or ["*"])),
            same_stem=cfg.get("same_stem", True),
            show_progress=cfg.get("progress", False),
        )
        created = await splitter.split()
        for directory in created:
            print(directory)
        return 0

    return _run(_body)


def cli_cleanup(argv: Optional[Iterable[str]] = None) -> int:
    parser = _base_parser("Remove the directories created by a previous split.")
    _add_naming_args(parser)
    args = _parse(parser, argv)

    cfg = _guarded(lambda: _load("cleanup", args, {
        "source_dir": args.source,
        "output_dir": args.output,
        "num_dirs": args.num_dirs,
        "prefix_format": args.prefix_format,
        "suffix_format": args.suffix_format,
    }))
    if cfg is None:
        return 1

    async def _body() -> int:
        await cleanup(_split_config(cfg).target_dirs())
        return 0

    return _run(_body)


def cli_walk(argv: Optional[Iterable[str]] = None) -> int:
    parser = _base_parser("List files with an extension, skipping hidden, .git and target directories.")
    parser.add_argument("--root", help="Directory to walk.")
    parser.add_argument("--ext", dest="extension", help="Extension without the dot, or '*' for all files.")
    parser.add_argument("--multiline", action="store_true", default=None, help="Only files with more than one line.")
    parser.add_argument("--edit", action="store_true", default=None, help="Open the listed files in $EDITOR.")
    parser.add_argument("--editor", help="Editor command (default: $EDITOR, then nvim).")
    args = _parse(parser, argv)

    cfg = _guarded(lambda: _load("walk", args, {
        "root": args.root,
        "extension": args.extension,
        "multiline": args.multiline,
        "edit": args.edit,
        "editor": args.editor,
    }))
    if cfg is None:
        return 1

    async def _body() -> int:
        root, extension = Path(cfg["root"]), cfg["extension"]
        files: List[Path]
        if cfg.get("multiline"):
            files = await find_multiline_files(root, extension)
        else:
            files = await asyncio.to_thread(lambda: list(iter_filtered(root, extension)))
        for path in files:
            print(path)
        log.info(f"Found {len(files)} file(s) under {root}")
        if cfg.get("edit"):
            return open_in_editor(files, cfg.get("editor"))
        return 0

    return _run(_body)


def cli_purge(argv: Optional[Iterable[str]] = None) -> int:
    parser = _base_parser("Delete every file with an extension (case-insensitive) below a directory.")
    parser.add_argument("--root", help="Directory to purge.")
    parser.add_argument("--ext", dest="extension", help="Extension without the dot.")
    parser.add_argument("--dry-run", action="store_true", default=None, help="Only report what would be deleted.")
    args = _parse(parser, argv)

    cfg = _guarded(lambda: _load("purge", args, {
        "root": args.root,
        "extension": args.extension,
        "dry_run": args.dry_run,
    }))
    if cfg is None:
        return 1

    async def _body() -> int:
        removed = await delete_files_with_extension(
            cfg["root"], cfg["extension"], dry_run=cfg.get("dry_run", False)
        )
        for path in removed:
            print(path)
        return 0

    return _run(_body)

"""
common.base.ops

Operational helpers for fsplit tools.

 - Dry-run support for destructive operations
 - Concurrent bulk deletion by extension
 - Subprocess execution and external editor launch
"""

from __future__ import annotations

import asyncio
import os
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from .aio import async_unlink
from .logging import get_logger

log = get_logger(__name__)

DEFAULT_EDITOR = "nvim"


# ----------------------------------------------------------------------
# FILESYSTEM OPERATIONS
# ----------------------------------------------------------------------

async def remove_file(path: Path | str, dry_run: bool = False) -> bool:
    """
    Remove a file. Returns True if removed, False if missing or on failure.

    Args:
        path: File path
        dry_run: Simulate delete without performing it
    """
    p = Path(path)
    if dry_run:
        log.info(f"[DRY-RUN] Would delete file: {p}")
        return True

    try:
        await async_unlink(p)
    except FileNotFoundError:
        log.debug(f"File not found (skip delete): {p}")
        return False
    except OSError as e:
        log.error(f"Failed to remove {p}: {e}")
        return False
    log.debug(f"🗑️ Deleted file: {p}")
    return True


def _matching_files(root: Path, extension: str) -> List[Path]:
    wanted = extension.lower()
    matches: List[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root):
        for name in filenames:
            candidate = Path(dirpath) / name
            if candidate.suffix[1:].lower() == wanted and candidate.is_file():
                matches.append(candidate)
    return matches


async def delete_files_with_extension(
    root: Path | str,
    extension: str,
    dry_run: bool = False,
) -> List[Path]:
    """
    Delete every file under ``root`` whose extension matches case-insensitively.

    Removals run concurrently; a file that cannot be removed is logged and
    left in place. Returns the paths that were (or would be) removed.
    """
    root_path = Path(root).expanduser()
    candidates = await asyncio.to_thread(_matching_files, root_path, extension)
    outcomes = await asyncio.gather(*(remove_file(p, dry_run=dry_run) for p in candidates))
    removed = [p for p, ok in zip(candidates, outcomes) if ok]
    log.info(f"🧹 Removed {len(removed)}/{len(candidates)} '.{extension}' files under {root_path}")
    return removed


# ----------------------------------------------------------------------
# SHELL / SUBPROCESS HELPERS
# ----------------------------------------------------------------------

def run_command(
    cmd: Union[str, List[str]],
    cwd: Optional[Path | str] = None,
    capture: bool = True,
    check: bool = False,
    timeout: Optional[int] = None,
) -> Tuple[int, str, str]:
    """
    Execute a command with optional output capture.

    Args:
        cmd: Command string or list
        cwd: Working directory
        capture: Capture stdout/stderr; otherwise inherit the terminal
        check: Raise if return code != 0
        timeout: Max seconds before killing process

    Returns:
        tuple: (exit_code, stdout, stderr)
    """
    shell_mode = isinstance(cmd, str)
    log.debug(f"▶️ Running command: {cmd} (cwd={cwd})")

    result = subprocess.run(
        cmd,
        cwd=str(cwd) if cwd else None,
        shell=shell_mode,
        capture_output=capture,
        text=True,
        timeout=timeout,
        check=check,
    )
    out = (result.stdout or "").strip()
    err = (result.stderr or "").strip()
    if result.returncode == 0:
        log.debug(f"✅ Command OK: {cmd}")
    else:
        log.warning(f"⚠️ Command returned {result.returncode}: {cmd}")
        if err:
            log.debug(f"stderr: {err}")
    return result.returncode, out, err


def open_in_editor(files: Sequence[Path | str], editor: Optional[str] = None) -> int:
    """
    Open all ``files`` in one editor session and wait for it to exit.

    The editor defaults to ``$EDITOR`` and then to nvim. An empty file list
    launches nothing and returns 0.
    """
    if not files:
        return 0
    program = editor or os.environ.get("EDITOR") or DEFAULT_EDITOR
    code, _out, _err = run_command([program, *(str(f) for f in files)], capture=False)
    return code

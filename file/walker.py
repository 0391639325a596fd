"""
file.walker

Filtered directory traversal and concurrent per-file dispatch.

The traversal is depth-first and pre-order, follows symbolic links, and prunes
every subtree whose root name is hidden, ``.git`` or ``target`` (see
``file.filters``). Entries that cannot be read (permission denied, broken
links, link cycles) are skipped and the walk carries on.

``walk_filtered`` schedules one asyncio task per matched file and, once the
traversal is exhausted, waits for all of them. The first failure in
scheduling order is re-raised only after every task has finished.
"""

from __future__ import annotations

import asyncio
import inspect
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterator, List, Optional, Set, Tuple, Union

from common.base.fs import has_extension
from common.base.logging import get_logger

from .filters import is_excluded

log = get_logger(__name__)

WILDCARD = "*"

KIND_FILE = "file"
KIND_DIR = "dir"
KIND_OTHER = "other"

Handler = Callable[[Path], Union[Awaitable[Any], Any]]


@dataclass(frozen=True)
class DirectoryEntry:
    """One entry seen during a traversal. ``kind`` describes the link target when following symlinks."""

    path: Path
    name: str
    kind: str
    depth: int
    is_symlink: bool = False

    @property
    def is_file(self) -> bool:
        return self.kind == KIND_FILE

    @property
    def is_dir(self) -> bool:
        return self.kind == KIND_DIR


def _kind_from_stat(mode: int) -> str:
    if stat.S_ISDIR(mode):
        return KIND_DIR
    if stat.S_ISREG(mode):
        return KIND_FILE
    return KIND_OTHER


def _identity(st: os.stat_result) -> Tuple[int, int]:
    return st.st_dev, st.st_ino


def _list_dir(directory: Path) -> List[os.DirEntry]:
    try:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda e: e.name)
    except OSError as exc:
        log.debug(f"Skipping unreadable directory {directory}: {exc}")
        return []


def _descend(directory: Path, depth: int, ancestors: Set[Tuple[int, int]]) -> Iterator[DirectoryEntry]:
    for dir_entry in _list_dir(directory):
        if is_excluded(dir_entry.name):
            log.debug(f"Pruned {dir_entry.path}")
            continue
        try:
            st = dir_entry.stat(follow_symlinks=True)
            is_link = dir_entry.is_symlink()
        except OSError as exc:
            log.debug(f"Skipping {dir_entry.path}: {exc}")
            continue

        entry = DirectoryEntry(
            path=Path(dir_entry.path),
            name=dir_entry.name,
            kind=_kind_from_stat(st.st_mode),
            depth=depth,
            is_symlink=is_link,
        )
        yield entry

        if entry.is_dir:
            ident = _identity(st)
            if ident in ancestors:
                log.debug(f"Skipping symlink loop at {entry.path}")
                continue
            yield from _descend(entry.path, depth + 1, ancestors | {ident})


def iter_entries(root: Path | str) -> Iterator[DirectoryEntry]:
    """
    Yield every non-pruned entry under ``root`` (root included at depth 0).

    Paths are absolute. The predicates also apply to the root's own name,
    so walking a hidden directory yields nothing.
    """
    raw = os.fspath(root)
    root_path = Path(raw).expanduser().absolute()
    root_name = os.path.basename(os.path.normpath(raw))
    if is_excluded(root_name):
        log.debug(f"Root {root_path} is excluded by name")
        return
    try:
        st = root_path.stat()
    except OSError as exc:
        log.debug(f"Skipping unreadable root {root_path}: {exc}")
        return

    root_entry = DirectoryEntry(
        path=root_path,
        name=root_name,
        kind=_kind_from_stat(st.st_mode),
        depth=0,
        is_symlink=root_path.is_symlink(),
    )
    yield root_entry
    if root_entry.is_dir:
        yield from _descend(root_path, 1, {_identity(st)})


def iter_filtered(root: Path | str, extension: str) -> Iterator[Path]:
    """
    Lazily yield regular files under ``root`` whose extension equals ``extension``.

    The comparison is case-sensitive and takes the extension without its dot.
    ``"*"`` accepts every regular file.
    """
    for entry in iter_entries(root):
        if not entry.is_file:
            continue
        if extension == WILDCARD or has_extension(entry.path, extension):
            yield entry.path


async def _invoke(handler: Handler, path: Path) -> Any:
    result = handler(path)
    if inspect.isawaitable(result):
        result = await result
    return result


async def walk_filtered(root: Path | str, extension: str, handler: Handler) -> int:
    """
    Run ``handler`` concurrently for every file yielded by ``iter_filtered``.

    The traversal advances in a worker thread (``asyncio.to_thread``), so
    handlers already scheduled run while large directories are listed.
    ``handler`` may be a coroutine function or a plain callable. Every
    scheduled task is awaited; if any failed (or was cancelled), the first
    failure in scheduling order is raised afterwards.

    Returns:
        Number of files dispatched.
    """
    log.debug(f"Starting walk of {root} for extension '{extension}'")
    paths: List[Path] = []
    tasks: List[asyncio.Task] = []
    found = iter_filtered(root, extension)
    while True:
        # Directory listing runs in a worker thread so scheduled handlers keep progressing.
        path = await asyncio.to_thread(next, found, None)
        if path is None:
            break
        paths.append(path)
        tasks.append(asyncio.create_task(_invoke(handler, path)))

    results = await asyncio.gather(*tasks, return_exceptions=True)

    first_failure: Optional[BaseException] = None
    failures = 0
    for path, outcome in zip(paths, results):
        if isinstance(outcome, asyncio.CancelledError):
            outcome = RuntimeError(f"Handler for {path} was cancelled")
        if isinstance(outcome, BaseException):
            failures += 1
            log.debug(f"Handler failed for {path}: {outcome!r}")
            if first_failure is None:
                first_failure = outcome

    log.debug(f"Walk of {root} dispatched {len(tasks)} file(s), {failures} failed")
    if first_failure is not None:
        raise first_failure
    return len(tasks)


async def walk_sequential(root: Path | str, extension: str, handler: Handler) -> int:
    """Await ``handler`` for each matching file in traversal order, stopping at the first failure."""
    count = 0
    for path in iter_filtered(root, extension):
        await _invoke(handler, path)
        count += 1
    return count

"""
file.splitter

Partition a source directory's files, together with their accompanying
files, across ``num_dirs`` target directories.

A split runs three strictly sequential phases:

 1. discover   - walk every file under the source (pruned as in
                 ``file.walker``), ask the matcher whether it is a
                 representative, and record a group of the representative
                 plus its accompanying files
 2. prepare    - create the target directories ``<prefix with index><suffix>``
                 under the output directory, in index order
 3. distribute - copy each group into one target directory, round-robin

Directories are returned to the caller, who may later pass them to
``cleanup``. Nothing is rolled back when a phase fails part way.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from common.base.aio import async_copy_file, async_mkdir, async_rmtree
from common.base.logging import get_logger
from common.shared.utils import Progress

from .matcher import FileMatcher, PatternLike, Predicate, RegexFileMatcher, compile_patterns
from .walker import WILDCARD, walk_filtered

log = get_logger(__name__)

INDEX_PLACEHOLDER = "{}"
DEFAULT_PREFIX_FORMAT = "part_{}"

FileGroups = Dict[Path, List[Path]]


@dataclass(frozen=True)
class SplitConfig:
    """
    Immutable description of one split.

    ``prefix_format`` must contain ``{}``, which is replaced by the directory
    index; ``suffix_format`` is appended verbatim. ``output_dir`` defaults to
    ``source_dir``.
    """

    source_dir: Path
    num_dirs: int
    output_dir: Optional[Path] = None
    prefix_format: str = DEFAULT_PREFIX_FORMAT
    suffix_format: str = ""
    regex_patterns: Tuple = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if isinstance(self.num_dirs, bool) or not isinstance(self.num_dirs, int):
            raise ValueError(f"num_dirs must be an integer, got {self.num_dirs!r}")
        if self.num_dirs < 1:
            raise ValueError(f"num_dirs must be at least 1, got {self.num_dirs}")
        if INDEX_PLACEHOLDER not in self.prefix_format:
            raise ValueError(f"prefix_format must contain '{INDEX_PLACEHOLDER}': {self.prefix_format!r}")
        object.__setattr__(self, "source_dir", Path(self.source_dir))
        if self.output_dir is not None:
            object.__setattr__(self, "output_dir", Path(self.output_dir))
        object.__setattr__(self, "regex_patterns", compile_patterns(self.regex_patterns))

    def with_output_dir(self, output_dir: Path | str) -> SplitConfig:
        return replace(self, output_dir=Path(output_dir))

    def with_naming(self, prefix_format: str, suffix_format: str = "") -> SplitConfig:
        return replace(self, prefix_format=prefix_format, suffix_format=suffix_format)

    def with_regex_patterns(self, patterns: Iterable[PatternLike]) -> SplitConfig:
        return replace(self, regex_patterns=tuple(patterns))

    @property
    def resolved_output_dir(self) -> Path:
        return self.output_dir if self.output_dir is not None else self.source_dir

    def dir_name(self, index: int) -> str:
        return f"{self.prefix_format.replace(INDEX_PLACEHOLDER, str(index))}{self.suffix_format}"

    def target_dirs(self) -> List[Path]:
        """Target directory paths in index order 0..num_dirs-1."""
        base = self.resolved_output_dir
        return [base / self.dir_name(i) for i in range(self.num_dirs)]


class DirectorySplitter:
    """Groups files with a ``FileMatcher`` and distributes the groups round-robin."""

    def __init__(self, config: SplitConfig, matcher: FileMatcher, show_progress: bool = False):
        self.config = config
        self.matcher = matcher
        self.show_progress = show_progress

    @classmethod
    def from_config(
        cls,
        config: SplitConfig,
        predicate: Predicate,
        same_stem: bool = True,
        show_progress: bool = False,
    ) -> DirectorySplitter:
        """Build a splitter whose matcher uses the config's accompanying patterns."""
        matcher = RegexFileMatcher(predicate, config.regex_patterns, same_stem=same_stem)
        return cls(config, matcher, show_progress=show_progress)

    # ------------------------------------------------------------------
    # PHASE 1: DISCOVER
    # ------------------------------------------------------------------

    async def discover(self) -> FileGroups:
        """
        Build the group table: representative path -> [representative, *accompanying].

        Handlers run concurrently; the table and the set of claimed paths are
        only touched under one lock per file. Accompanying files already claimed
        by another group are dropped, and files without an extension never
        become representatives.
        """
        source = self.config.source_dir
        if not source.exists():
            raise FileNotFoundError(f"Source directory not found: {source}")
        if not source.is_dir():
            raise NotADirectoryError(f"Source path is not a directory: {source}")

        groups: FileGroups = {}
        claimed: Set[Path] = set()
        lock = asyncio.Lock()

        async def _record(path: Path) -> None:
            if not path.suffix:
                return
            if not await self.matcher.is_match(path):
                return
            log.debug(f"Found matching file: {path}")
            accompanying = await self.matcher.find_accompanying_files(path)

            async with lock:
                if path in claimed:
                    log.debug(f"Skipping {path}: already grouped with another file")
                    return
                group = groups.setdefault(path, [])
                group.append(path)
                claimed.add(path)
                for extra in accompanying:
                    if extra in claimed:
                        log.debug(f"Skipping {extra}: already grouped")
                        continue
                    log.debug(f"Found accompanying file: {extra}")
                    group.append(extra)
                    claimed.add(extra)

        log.info(f"🔍 Scanning {source} for files...")
        await walk_filtered(source, WILDCARD, _record)

        log.info(f"Found {len(groups)} group(s) covering {len(claimed)} file(s)")
        return groups

    # ------------------------------------------------------------------
    # PHASE 2: PREPARE TARGETS
    # ------------------------------------------------------------------

    async def prepare_targets(self) -> List[Path]:
        created: List[Path] = []
        for dir_path in self.config.target_dirs():
            log.debug(f"Creating directory: {dir_path}")
            await async_mkdir(dir_path, parents=True, exist_ok=True)
            created.append(dir_path)
        return created

    # ------------------------------------------------------------------
    # PHASE 3: DISTRIBUTE
    # ------------------------------------------------------------------

    async def distribute(self, groups: FileGroups, target_dirs: Sequence[Path]) -> int:
        """
        Copy each group into the next target directory in turn. Returns the number of files copied.

        Raises ``FileExistsError`` before copying a file whose name was already
        placed in the same target directory by this call.
        """
        if not target_dirs:
            raise ValueError("No target directories to distribute into")

        log.info(f"📦 Distributing {len(groups)} file group(s) across {len(target_dirs)} directories")
        items = groups.values()
        iterable: Iterable[List[Path]] = (
            Progress(items, desc="Distributing", total=len(groups)) if self.show_progress else items
        )

        current_dir = 0
        copied = 0
        placed: Dict[Path, Dict[str, Path]] = {}
        for members in iterable:
            target_dir = target_dirs[current_dir]
            log.debug(f"Copying {len(members)} file(s) into {target_dir}")
            for member in members:
                if not member.name:
                    raise ValueError(f"Cannot copy a path without a file name: {member!r}")
                seen = placed.setdefault(target_dir, {})
                if member.name in seen:
                    raise FileExistsError(
                        f"{member} and {seen[member.name]} would both be copied to {target_dir / member.name}"
                    )
                seen[member.name] = member
                await async_copy_file(member, target_dir / member.name)
                copied += 1
            current_dir = (current_dir + 1) % len(target_dirs)
        return copied

    # ------------------------------------------------------------------
    # DRIVERS
    # ------------------------------------------------------------------

    async def split(self) -> List[Path]:
        """Run discover, prepare and distribute; return the created directories in index order."""
        groups = await self.discover()
        created_dirs = await self.prepare_targets()
        copied = await self.distribute(groups, created_dirs)
        log.info(
            f"✅ Split {self.config.source_dir} into {len(created_dirs)} directories "
            f"({copied} file(s) copied)"
        )
        return created_dirs

    async def cleanup(self, dirs: Sequence[Path]) -> None:
        await cleanup(dirs)


async def split(config: SplitConfig, matcher: FileMatcher, show_progress: bool = False) -> List[Path]:
    """Split ``config.source_dir`` using ``matcher``; returns the created directories."""
    return await DirectorySplitter(config, matcher, show_progress=show_progress).split()


async def cleanup(dirs: Sequence[Path | str]) -> None:
    """
    Remove every directory recursively and concurrently.

    All removals are attempted; afterwards the first failure (in ``dirs``
    order) is raised. Removing a directory that no longer exists fails with
    ``FileNotFoundError``.
    """
    paths = [Path(d) for d in dirs]
    log.info(f"🧹 Starting cleanup of {len(paths)} directories")
    results = await asyncio.gather(*(async_rmtree(p) for p in paths), return_exceptions=True)

    first_failure: Optional[BaseException] = None
    for path, outcome in zip(paths, results):
        if isinstance(outcome, BaseException):
            log.error(f"Failed to remove directory {path}: {outcome}")
            if first_failure is None:
                first_failure = outcome
        else:
            log.debug(f"Removed directory: {path}")
    if first_failure is not None:
        raise first_failure

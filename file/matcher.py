"""
file.matcher

Matchers decide which files become group representatives during a split and
which sibling files travel with them.

 - ``FileMatcher``: the abstract capability used by ``DirectorySplitter``
 - ``RegexFileMatcher``: predicate for representatives, regular expressions
   for accompanying siblings
 - ``PredicateFileMatcher``: both decisions supplied as callables
"""

from __future__ import annotations

import fnmatch
import inspect
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Pattern, Sequence, Tuple, Union

from common.base.aio import async_is_file, async_iterdir
from common.base.logging import get_logger

log = get_logger(__name__)

Predicate = Callable[[Path], Union[bool, Awaitable[bool]]]
AccompanyingFinder = Callable[[Path], Union[Sequence[Path], Awaitable[Sequence[Path]]]]
PatternLike = Union[str, Pattern[str]]


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def compile_patterns(patterns: Optional[Iterable[PatternLike]]) -> Tuple[Pattern[str], ...]:
    """Compile pattern strings, keeping already-compiled ones. Raises ``re.error`` on bad input."""
    if not patterns:
        return ()
    return tuple(p if isinstance(p, re.Pattern) else re.compile(p) for p in patterns)


def glob_predicate(*patterns: str) -> Callable[[Path], bool]:
    """Predicate matching file names against shell-style patterns (``*.log``)."""

    def _predicate(path: Path) -> bool:
        return any(fnmatch.fnmatchcase(path.name, pattern) for pattern in patterns)

    return _predicate


def extension_predicate(*extensions: str) -> Callable[[Path], bool]:
    """Predicate matching case-sensitive extensions given with or without the dot."""
    wanted = {ext if ext.startswith(".") else f".{ext}" for ext in extensions}

    def _predicate(path: Path) -> bool:
        return path.suffix in wanted

    return _predicate


class FileMatcher(ABC):
    """Decides representatives and their accompanying files. Both calls may perform I/O."""

    @abstractmethod
    async def is_match(self, path: Path) -> bool:
        ...

    @abstractmethod
    async def find_accompanying_files(self, path: Path) -> List[Path]:
        ...


class PredicateFileMatcher(FileMatcher):
    """Matcher built from two callables (plain or async)."""

    def __init__(self, is_match: Predicate, find_accompanying: Optional[AccompanyingFinder] = None):
        self._is_match = is_match
        self._find_accompanying = find_accompanying

    async def is_match(self, path: Path) -> bool:
        return bool(await _resolve(self._is_match(path)))

    async def find_accompanying_files(self, path: Path) -> List[Path]:
        if self._find_accompanying is None:
            return []
        return [Path(p) for p in await _resolve(self._find_accompanying(path))]


class RegexFileMatcher(FileMatcher):
    """
    Representatives are chosen by ``predicate``; accompanying files are the
    siblings in the same directory whose full path matches any of
    ``patterns`` (``re.search`` semantics, so look-around and
    back-references are available).

    A sibling is never accompanying when it is the representative itself or
    would be a representative on its own. With ``same_stem`` the sibling must
    also share the representative's stem: ``clip.mkv`` takes ``clip.srt`` and
    ``clip.en.srt`` but not ``other.srt``. Pass ``same_stem=False`` for
    pattern-only matching, where every sibling file matching a pattern is
    accompanying; ``DirectorySplitter`` still keeps each path in one group.
    """

    def __init__(
        self,
        predicate: Predicate,
        patterns: Optional[Iterable[PatternLike]] = None,
        same_stem: bool = True,
    ):
        self.predicate = predicate
        self.patterns = compile_patterns(patterns)
        self.same_stem = same_stem

    async def is_match(self, path: Path) -> bool:
        return bool(await _resolve(self.predicate(path)))

    def _pattern_match(self, candidate: Path) -> bool:
        text = str(candidate)
        for pattern in self.patterns:
            if pattern.search(text):
                return True
        return False

    @staticmethod
    def _shares_stem(candidate: Path, representative: Path) -> bool:
        stem = representative.stem
        return candidate.name == stem or candidate.name.startswith(f"{stem}.")

    async def find_accompanying_files(self, path: Path) -> List[Path]:
        if not self.patterns:
            return []

        accompanying: List[Path] = []
        for candidate in sorted(await async_iterdir(path.parent)):
            if candidate == path:
                continue
            if self.same_stem and not self._shares_stem(candidate, path):
                continue
            if not self._pattern_match(candidate):
                continue
            if not await async_is_file(candidate):
                continue
            if await self.is_match(candidate):
                continue
            accompanying.append(candidate)

        if accompanying:
            log.debug(f"{path.name}: {len(accompanying)} accompanying file(s)")
        return accompanying

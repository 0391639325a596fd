"""Utility helpers for performing file I/O with consistent defaults."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Mapping, Optional

import yaml


DEFAULT_ENCODING = "utf-8"


def _to_path(path: Path | str) -> Path:
    return Path(path).expanduser()


def read_text(path: Path | str, encoding: str = DEFAULT_ENCODING) -> str:
    return _to_path(path).read_text(encoding=encoding)


def write_text(path: Path | str, content: str, encoding: str = DEFAULT_ENCODING) -> None:
    _to_path(path).write_text(content, encoding=encoding)


def read_lines(path: Path | str, encoding: str = DEFAULT_ENCODING) -> List[str]:
    """Return every line of the file with surrounding whitespace stripped."""
    with open_file(path, "r", encoding=encoding) as handle:
        return [line.strip() for line in handle]


@contextmanager
def open_file(
    path: Path | str,
    mode: str = "r",
    *,
    encoding: str = DEFAULT_ENCODING,
    newline: Optional[str] = None,
) -> Iterator[Any]:
    path_obj = _to_path(path)
    kwargs: dict[str, Any] = {}
    if "b" in mode:
        if newline is not None:
            raise ValueError("newline is not supported in binary mode")
    else:
        kwargs["encoding"] = encoding
        kwargs["newline"] = newline
    with open(path_obj, mode, **kwargs) as handle:
        yield handle


def read_yaml(path: Path | str) -> Mapping[str, Any] | list[Any]:
    with open_file(path, "r") as handle:
        data = yaml.safe_load(handle)
    return data if data is not None else {}

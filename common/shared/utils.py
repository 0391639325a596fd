"""
common.shared.utils

Progress helpers shared across fsplit modules.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Optional

from tqdm import tqdm


class Progress:
    """
    Simple wrapper for tqdm progress bars that automatically closes
    on completion or interruption.
    """

    def __init__(self, iterable: Iterable[Any], desc: str = "Processing", total: Optional[int] = None):
        self._tqdm = tqdm(iterable, desc=desc, total=total, ncols=100, leave=False, dynamic_ncols=True)

    def __iter__(self) -> Iterator[Any]:
        try:
            for item in self._tqdm:
                yield item
        finally:
            self._tqdm.close()

    def close(self) -> None:
        self._tqdm.close()


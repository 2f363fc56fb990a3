"""
Plot Cache
==========

Single-slot cache holding the last computed plot data until invalidated.
"""

from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class Cache(Generic[T]):
    """A dead-simple cache: one value, computed on demand, dropped on invalidate()."""

    def __init__(self, data: Optional[T] = None) -> None:
        self._data = data

    def get_or_init(self, init: Callable[[], T]) -> T:
        if self._data is None:
            self._data = init()
        return self._data

    def invalidate(self) -> None:
        self._data = None

    def is_valid(self) -> bool:
        return self._data is not None

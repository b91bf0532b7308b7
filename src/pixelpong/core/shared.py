"""Single-value cell shared between the physics task and draw tasks.

The physics task is the only writer; draw tasks only read. Values stored
here are immutable (``bytes``, frozen dataclasses) and are always replaced
whole, so a reader gets either the old or the new value and never a mix.
"""

from __future__ import annotations

import threading
from typing import Generic, TypeVar

__all__ = ["Shared"]

T = TypeVar("T")


class Shared(Generic[T]):
    """Lock-guarded holder for one immutable value."""

    __slots__ = ("_value", "_lock")

    def __init__(self, value: T) -> None:
        self._value = value
        self._lock = threading.Lock()

    def get(self) -> T:
        with self._lock:
            return self._value

    def set(self, value: T) -> None:
        with self._lock:
            self._value = value

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Callable, Generic, Iterator, TypeVar

from dirmark.core.errors import LockError

T = TypeVar("T")


class Guarded(Generic[T]):
    """A single session field behind its own lock.

    ``hold()`` keeps the lock for a whole read-modify-write; ``get`` and
    ``set`` are one-shot conveniences.
    """

    def __init__(self, name: str, value: T, *, timeout: float = 1.0) -> None:
        self.name = name
        self._value = value
        self._timeout = timeout
        self._lock = threading.Lock()

    @contextmanager
    def hold(self) -> Iterator[_Slot[T]]:
        if not self._lock.acquire(timeout=self._timeout):
            raise LockError(self.name, self._timeout)
        try:
            yield _Slot(self)
        finally:
            self._lock.release()

    def get(self) -> T:
        with self.hold() as slot:
            return slot.value

    def set(self, value: T) -> None:
        with self.hold() as slot:
            slot.value = value


class _Slot(Generic[T]):
    __slots__ = ("_cell",)

    def __init__(self, cell: Guarded[T]) -> None:
        self._cell = cell

    @property
    def value(self) -> T:
        return self._cell._value

    @value.setter
    def value(self, value: T) -> None:
        self._cell._value = value


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    current_path: str = ""
    generation: int = 0
    filter_pattern: str = ""
    visible_count: int = 0
    mark_count: int = 0
    listing_error: str | None = None


class SessionStateStore:
    def __init__(self, initial: SessionSnapshot | None = None) -> None:
        self._state = initial or SessionSnapshot()
        self._listeners: set[Callable[[SessionSnapshot], None]] = set()

    @property
    def state(self) -> SessionSnapshot:
        return self._state

    def subscribe(self, callback: Callable[[SessionSnapshot], None]) -> None:
        self._listeners.add(callback)
        callback(self._state)

    def unsubscribe(self, callback: Callable[[SessionSnapshot], None]) -> None:
        self._listeners.discard(callback)

    def update(self, **changes: object) -> None:
        new_state = replace(self._state, **changes)
        if new_state == self._state:
            return
        self._state = new_state
        for callback in list(self._listeners):
            callback(self._state)

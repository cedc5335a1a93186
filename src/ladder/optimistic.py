from __future__ import annotations

from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")
R = TypeVar("R")

Persist = Callable[[], Awaitable[R]]


class _Absent:
    def __repr__(self) -> str:
        return "<absent>"


ABSENT = _Absent()


@dataclass(frozen=True)
class UndoRecord(Generic[K, V]):
    key: K
    previous: V | _Absent


class OptimisticStore(Generic[K, V]):
    """Keyed in-memory projection mirrored against a durable store.

    Every mutation is applied to the projection first, then ``persist`` is
    awaited. If ``persist`` raises, the entry is restored to its exact prior
    state and the same exception propagates.
    """

    def __init__(self) -> None:
        self._items: dict[K, V] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)

    def get(self, key: K) -> V | None:
        return self._items.get(key)

    def snapshot(self) -> dict[K, V]:
        return dict(self._items)

    def remember(self, key: K, value: V) -> None:
        self._items[key] = value

    def forget(self, key: K) -> None:
        self._items.pop(key, None)

    async def create(self, key: K, value: V, persist: Persist[R]) -> R:
        if key in self._items:
            raise KeyError(f"Projection already holds {key!r}.")
        return await self._transact(key, value, persist)

    async def update(self, key: K, value: V, persist: Persist[R]) -> R:
        if key not in self._items:
            raise KeyError(f"Projection has no entry for {key!r}.")
        return await self._transact(key, value, persist)

    async def put(self, key: K, value: V, persist: Persist[R]) -> R:
        return await self._transact(key, value, persist)

    async def delete(self, key: K, persist: Persist[R]) -> R:
        if key not in self._items:
            raise KeyError(f"Projection has no entry for {key!r}.")
        return await self._transact(key, ABSENT, persist)

    async def _transact(self, key: K, value: V | _Absent, persist: Persist[R]) -> R:
        undo = self._apply(key, value)
        try:
            return await persist()
        except BaseException:
            self._restore(undo)
            raise

    def _apply(self, key: K, value: V | _Absent) -> UndoRecord[K, V]:
        undo: UndoRecord[K, V] = UndoRecord(key=key, previous=self._items.get(key, ABSENT))
        if isinstance(value, _Absent):
            self._items.pop(key, None)
        else:
            self._items[key] = value
        return undo

    def _restore(self, undo: UndoRecord[K, V]) -> None:
        if isinstance(undo.previous, _Absent):
            self._items.pop(undo.key, None)
        else:
            self._items[undo.key] = undo.previous

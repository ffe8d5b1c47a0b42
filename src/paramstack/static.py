"""Static parameters: an insertion-ordered set of unique values."""

from __future__ import annotations

from typing import Generic, Hashable, Iterable, Iterator, TypeVar

T = TypeVar("T", bound=Hashable)


class StaticParameters(Generic[T]):
    """Deduplicated bag of values with reset-to-initial and clone support."""

    def __init__(self, initial: Iterable[T] = ()) -> None:
        self.initial: tuple[T, ...] = tuple(initial)
        self.stack: dict[T, None] = {}
        self.initialize()

    def initialize(self) -> StaticParameters[T]:
        for value in self.initial:
            self.add(value)
        return self

    @property
    def value(self) -> T | None:
        """First member in insertion order, or None when empty.

        A falsy first member such as 0 or "" is returned as is, not masked to None.
        """
        return next(iter(self.stack), None)

    def entries(self) -> list[T]:
        return list(self.stack)

    def add(self, value: T) -> StaticParameters[T]:
        self.stack[value] = None
        return self

    def has(self, key: T) -> bool:
        return key in self.stack

    def remove(self, key: T) -> StaticParameters[T]:
        self.stack.pop(key, None)
        return self

    def reset(self) -> StaticParameters[T]:
        return self.clear().initialize()

    def clear(self) -> StaticParameters[T]:
        self.stack.clear()
        return self

    def clone(self) -> StaticParameters[T]:
        """New instance seeded from the initial values."""
        return type(self)(self.initial)

    def clone_original(self) -> StaticParameters[T]:
        """New instance seeded from the current members."""
        return type(self)(self.entries())

    def __contains__(self, key: object) -> bool:
        return key in self.stack

    def __len__(self) -> int:
        return len(self.stack)

    def __iter__(self) -> Iterator[T]:
        return iter(self.entries())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.entries()!r})"

"""Parameter record: the (value, default_value, callback) triple kept per key.

A record is never mutated in place. Every write to a store replaces the
whole record, so holding a reference to one gives a stable snapshot.
"""

from __future__ import annotations

from typing import Callable, Generic, Mapping, TypeVar

V = TypeVar("V")

Listener = Callable[[V], None]
Disposer = Callable[[], None]


class Parameter(Generic[V]):
    """One stored value with its fallback and optional change listener."""

    __slots__ = ("value", "default_value", "callback")

    def __init__(
        self,
        value: V,
        default_value: V | None = None,
        callback: Listener[V] | None = None,
    ) -> None:
        self.value = value
        self.default_value = default_value
        self.callback = callback

    @classmethod
    def coerce(cls, data: Parameter[V] | Mapping[str, object]) -> Parameter[V]:
        """Accept a Parameter or a {"value", "default_value", "callback"} mapping."""
        if isinstance(data, Parameter):
            return data
        return cls(
            data["value"],
            data.get("default_value"),
            data.get("callback"),
        )

    def resolve(self) -> V | None:
        """Current value if truthy, else the default if truthy, else None."""
        return self.value or self.default_value or None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Parameter):
            return NotImplemented
        return (
            self.value == other.value
            and self.default_value == other.default_value
            and self.callback is other.callback
        )

    def __repr__(self) -> str:
        return f"Parameter({self.value!r}, default_value={self.default_value!r})"

"""Dynamic parameters: a keyed store of values, defaults and change listeners.

Every write replaces the key's Parameter record and then dispatches: each
listener registered for that key is called synchronously with the resolved
value. Reads resolve by truthiness, so 0, "", False and None fall through
to the default and then to None.

The listener ledger (``signal``) is independent of the value mapping
(``stack``). remove(), clear() and reset() never prune it; teardown is
explicit through unlisten() or the disposer returned by subscribe().

Thread safety: none by default. Call set_scheduler() once from the owning
thread and set() from any other thread is handed to the scheduler instead
of running in place.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from types import MappingProxyType
from typing import Generic, Hashable, Iterator, Mapping, TypeVar

from paramstack.parameter import Disposer, Listener, Parameter

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

# ─── Auto-marshal ────────────────────────────────────────────────────────────
_scheduler = None
_scheduler_thread = None


def set_scheduler(scheduler) -> None:
    """Set the global thread scheduler for cross-thread writes.

    Call once from the owning thread:
        paramstack.set_scheduler(app.call_from_thread)

    After this, any DynamicParameters.set() from another thread is passed to
    scheduler(fn). Writes on the owning thread stay synchronous. Pass None to
    turn marshaling off again.
    """
    global _scheduler, _scheduler_thread
    _scheduler = scheduler
    _scheduler_thread = threading.current_thread() if scheduler is not None else None


def _off_thread() -> bool:
    return _scheduler is not None and threading.current_thread() != _scheduler_thread


class DynamicParameters(Generic[K, V]):
    """Key -> Parameter store with per-key listeners."""

    def __init__(self, initial: Mapping[K, Parameter[V] | Mapping[str, object]]) -> None:
        self.initial: Mapping[K, Parameter[V]] = MappingProxyType(
            {key: Parameter.coerce(data) for key, data in initial.items()}
        )
        self.stack: dict[K, Parameter[V]] = {}
        # id(listener) -> listener: identity dedup, insertion order kept
        self.signal: dict[K, dict[int, Listener[V]]] = {}
        self._batch_depth = 0
        self._pending: dict[K, None] = {}
        self.initialize()

    def initialize(self) -> None:
        """Replay the initial definition, firing declared callbacks.

        Writes in place on the calling thread, never through the scheduler.
        """
        for key, data in self.initial.items():
            self._set_direct(key, data.value, data.default_value, data.callback)

    @property
    def entries(self) -> dict[K, V]:
        """Raw stored values (not resolved), in write order."""
        return {key: data.value for key, data in self.stack.items()}

    # --- Reads ---

    def get(self, key: K) -> V | None:
        data = self.stack.get(key)
        return data.resolve() if data is not None else None

    def has(self, key: K) -> bool:
        return key in self.stack

    def listeners(self, key: K) -> tuple[Listener[V], ...]:
        return tuple(self.signal.get(key, {}).values())

    # --- Writes ---

    def set(
        self,
        key: K,
        value: V,
        default_value: V | None = None,
        callback: Listener[V] | None = None,
    ) -> DynamicParameters[K, V]:
        """Replace the record for key, register callback, then dispatch.

        An omitted or falsy default_value makes value its own default for
        this write; earlier defaults are not carried over.
        """
        if _off_thread():
            _scheduler(lambda: self._set_direct(key, value, default_value, callback))
        else:
            self._set_direct(key, value, default_value, callback)
        return self

    def _set_direct(
        self,
        key: K,
        value: V,
        default_value: V | None,
        callback: Listener[V] | None,
    ) -> None:
        self.stack[key] = Parameter(value, default_value or value, callback)
        if callback:
            self.listen(key, callback)
        self.dispatch(key)

    def update(self, key: K, value: V) -> DynamicParameters[K, V]:
        """set() only if key is present; silently ignored otherwise."""
        if self.has(key):
            self.set(key, value)
        return self

    def remove(self, key: K) -> DynamicParameters[K, V]:
        self.stack.pop(key, None)
        return self

    def clear(self) -> DynamicParameters[K, V]:
        self.stack.clear()
        return self

    def reset(self) -> DynamicParameters[K, V]:
        """Drop live state and replay the initial definition.

        Listeners already registered stay registered and fire again. From a
        non-owner thread the clear and the replay are scheduled as one call.
        """
        if _off_thread():
            _scheduler(self._reset_direct)
        else:
            self._reset_direct()
        return self

    def _reset_direct(self) -> None:
        self.stack.clear()
        self.initialize()

    # --- Copies ---

    def clone(self) -> DynamicParameters[K, V]:
        """New instance seeded from the current records, without callbacks."""
        return type(self)(
            {key: Parameter(data.value, data.default_value) for key, data in self.stack.items()}
        )

    def clone_original(self) -> DynamicParameters[K, V]:
        """New instance seeded from a shallow copy of the initial definition."""
        return type(self)(dict(self.initial))

    # --- Listeners ---

    def listen(self, key: K, callback: Listener[V]) -> DynamicParameters[K, V]:
        """Register callback for key. Does not fire it.

        Deduplicated by identity. Each ``obj.method`` access builds a new
        bound method, so keep the reference you registered to unlisten it.
        """
        self.signal.setdefault(key, {}).setdefault(id(callback), callback)
        return self

    def unlisten(self, key: K, callback: Listener[V]) -> DynamicParameters[K, V]:
        listeners = self.signal.get(key)
        if listeners is not None and listeners.get(id(callback)) is callback:
            del listeners[id(callback)]
        return self

    def subscribe(self, key: K, callback: Listener[V]) -> Disposer:
        """Register callback for key. Returns a function that removes it."""
        self.listen(key, callback)

        def _unsubscribe() -> None:
            self.unlisten(key, callback)

        return _unsubscribe

    def dispatch(self, key: K) -> DynamicParameters[K, V]:
        """Call every listener for key, in registration order, with get(key).

        Inside batch() the key is only recorded; it is dispatched once when
        the outermost batch exits.
        """
        if self._batch_depth > 0:
            self._pending[key] = None
            return self
        # Snapshot: listeners may register more listeners while running.
        for listener in list(self.signal.get(key, {}).values()):
            self._notify(listener, self.get(key))
        return self

    def _notify(self, listener: Listener[V], value: V | None) -> None:
        listener(value)

    # --- Batching ---

    @contextmanager
    def batch(self) -> Iterator[DynamicParameters[K, V]]:
        """Defer dispatches until the outermost batch exits.

        Usage:
            with params.batch():
                params.set("width", 640)
                params.set("height", 480)
                params.set("width", 800)
            # "width" listeners fire once with 800, then "height" listeners
        """
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                self._flush_pending()

    def _flush_pending(self) -> None:
        """Dispatch every recorded key, even if an earlier one raises.

        The first listener error is re-raised once all keys have run.
        """
        # Snapshot and clear: listeners run outside the batch and dispatch directly.
        keys = list(self._pending)
        self._pending.clear()
        error: Exception | None = None
        for key in keys:
            try:
                self.dispatch(key)
            except Exception as exc:
                if error is None:
                    error = exc
        if error is not None:
            raise error

    # --- Dunder ---

    def __contains__(self, key: object) -> bool:
        return key in self.stack

    def __len__(self) -> int:
        return len(self.stack)

    def __iter__(self) -> Iterator[K]:
        return iter(list(self.stack))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.entries!r})"

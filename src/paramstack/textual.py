"""Textual integration for paramstack. Opt-in: requires textual.

bind() turns a store key into a widget update: every dispatch of that key
calls the effect with the resolved value. Because a binding is an ordinary
listener, it outlives remove() and clear() and fires again on reset(),
exactly like any other listener; only its disposer tears it down.

Effects are skipped while the app is not running or is inside suspend().
A widget that has not been mounted yet (NoMatches) is ignored. Dispatches
from a worker thread are forwarded with app.call_from_thread.
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

# id(app) -> open suspend() count
_suspended: dict[int, int] = {}


@contextmanager
def suspend(app):
    """Hold back bound effects for app, e.g. while its screen is being rebuilt.

    Nests: effects resume only when the outermost suspend() exits.
    """
    key = id(app)
    _suspended[key] = _suspended.get(key, 0) + 1
    try:
        yield
    finally:
        depth = _suspended.pop(key) - 1
        if depth:
            _suspended[key] = depth


def is_live(app) -> bool:
    """Can bound effects touch app's widgets right now?"""
    return bool(app.is_running) and id(app) not in _suspended


def bind(app, params, key, effect_fn, *, fire_immediately=False):
    """Call effect_fn(value) whenever params dispatches key.

    With fire_immediately, effect_fn also runs once now with params.get(key).
    Returns the disposer; call it to unbind.
    """
    owner = threading.get_ident()

    def _apply(value):
        try:
            effect_fn(value)
        except NoMatches:
            pass

    def _on_dispatch(value):
        if not is_live(app):
            return
        if threading.get_ident() == owner:
            _apply(value)
        else:
            app.call_from_thread(_apply, value)

    dispose = params.subscribe(key, _on_dispatch)
    if fire_immediately:
        _on_dispatch(params.get(key))
    return dispose


def bind_all(app, params, effects, *, fire_immediately=False):
    """bind() every key -> effect_fn pair in effects. Returns one disposer for all."""
    disposers = [
        bind(app, params, key, effect_fn, fire_immediately=fire_immediately)
        for key, effect_fn in effects.items()
    ]

    def _dispose_all():
        for dispose in disposers:
            dispose()

    return _dispose_all

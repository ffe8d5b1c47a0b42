"""Failure-isolating store. Opt-in: import only if you need listener isolation."""

import logging

from paramstack.dynamic import DynamicParameters

logger = logging.getLogger("paramstack.guarded")


class GuardedDynamicParameters(DynamicParameters):
    """Store whose dispatch survives failing listeners.

    Same API as DynamicParameters. Adds:
    - Exception safety: a listener that raises is logged and skipped
    - Logging: reset events are clearly logged
    - Degraded operation: remaining listeners still run, state is never rolled back
    """

    def _notify(self, listener, value):
        """Safe notify: log and skip a failing listener."""
        try:
            listener(value)
        except Exception:
            logger.exception(
                "Listener %r failed",
                getattr(listener, "__name__", listener),
            )

    def _reset_direct(self):
        super()._reset_direct()
        logger.info(
            "Reset: %d keys replayed, %d listeners",
            len(self.initial),
            sum(len(listeners) for listeners in self.signal.values()),
        )

"""paramstack: in-memory parameter containers with change listeners."""

from importlib.metadata import version as _version

__version__ = _version("paramstack")

from paramstack.parameter import Parameter, Listener, Disposer
from paramstack.dynamic import DynamicParameters, set_scheduler
from paramstack.static import StaticParameters
# guarded and textual NOT auto-imported: opt-in only

__all__ = [
    "Parameter",
    "Listener",
    "Disposer",
    "DynamicParameters",
    "StaticParameters",
    "set_scheduler",
]

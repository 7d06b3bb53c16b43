"""MMD (Micro Module Definition): named, lazily-built modules with dependency injection."""

from importlib.metadata import version as _version

__version__ = _version("mmd")

from mmd.engine import Engine, SELF_REFERENCE
from mmd.errors import MMDError, DefinitionError, UnresolvedReferenceError, CircularReferenceError
from mmd.exports import Exports, EXPORTS
from mmd.namespace import Namespace
from mmd.registry import ModuleRecord, Registry, format_id

__all__ = [
    "Engine",
    "SELF_REFERENCE",
    "EXPORTS",
    "Exports",
    "Namespace",
    "ModuleRecord",
    "Registry",
    "format_id",
    "MMDError",
    "DefinitionError",
    "UnresolvedReferenceError",
    "CircularReferenceError",
]

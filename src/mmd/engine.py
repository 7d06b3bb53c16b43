"""Engine: the public handle for defining and requiring modules.

An Engine owns one Registry, one Namespace and one Resolver. Factories that
declare the engine's own name as a dependency receive the engine itself,
so code never reaches for a global instance.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Sequence, TypeVar

from mmd.definition import normalize
from mmd.namespace import Namespace
from mmd.registry import Registry
from mmd.resolver import Resolver

logger = logging.getLogger("mmd.engine")

SELF_REFERENCE = "mmd"

F = TypeVar("F", bound=Callable[..., Any])


class Engine:
    """A module registry plus the resolver that builds modules on demand.

    Usage:
        engine = Engine()
        engine.define("config", {"debug": True})
        engine.define("app", ["config"], lambda config: App(config))

        app = engine.require("app")
        engine.require(["config", "app"], lambda config, app: app.run())
    """

    def __init__(self, ids: Iterable[str] | None = None, *, name: str = SELF_REFERENCE) -> None:
        self.name = name
        self.namespace = Namespace(ids)
        self._registry = Registry()
        self._resolver = Resolver(self._registry, self, name)

    def define(self, *args: Any) -> None:
        """Define a module.

        Accepted shapes: (id, dependencies, factory), (id, factory),
        (dependencies, factory) and (factory). Without an id the next id
        from the namespace queue is used. A non-callable factory is the
        module's value as-is.

        Redefining an id replaces the old record and drops its memoized value.

        Raises:
            DefinitionError: if no id or no factory can be determined.
        """
        definition = normalize(args, self.namespace.take)
        previous = self._registry.add(definition.to_record())
        if previous is not None:
            logger.debug("Redefined module '%s'", definition.id)
        else:
            logger.debug("Defined module '%s'", definition.id)

    def module(self, module_id: str | None = None, dependencies: Sequence[str] = ()) -> Callable[[F], F]:
        """Decorator form of define(). The decorated function is returned unchanged.

        Usage:
            @engine.module("greeter", ["config"])
            def greeter(config):
                return Greeter(config["name"])
        """

        def decorator(factory: F) -> F:
            args: list[Any] = [list(dependencies), factory]
            if module_id is not None:
                args.insert(0, module_id)
            self.define(*args)
            return factory

        return decorator

    def require(self, request: str | Sequence[str], callback: Callable[..., Any] | None = None) -> Any:
        """Resolve one id or a sequence of ids, building modules as needed.

        A string request returns that module's value; a sequence returns a
        list of values in request order. If callback is callable it is
        called with the values as positional arguments; its return value
        is discarded.

        Raises:
            UnresolvedReferenceError: if any id in the graph is undefined.
            CircularReferenceError: if a module is re-entered while building.
        """
        single = isinstance(request, str)
        ids = [request] if single else list(request)
        values = self._resolver.require_all(ids)

        if callable(callback):
            callback(*values)

        return values[0] if single else values

    def undef(self, module_id: str) -> None:
        """Remove a module definition. No error if it does not exist."""
        if self._registry.remove(module_id):
            logger.debug("Undefined module '%s'", module_id)

    def is_defined(self, module_id: str) -> bool:
        """Is there a definition for module_id (after formatting)?"""
        return module_id in self._registry

    def is_built(self, module_id: str) -> bool:
        """Has module_id been built and memoized?"""
        record = self._registry.get(module_id)
        return record is not None and record.built

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._registry

    # Original API names for the namespace queue.

    def push_id(self, module_id: str) -> None:
        self.namespace.add(module_id)

    def get_ids(self) -> tuple[str, ...]:
        return self.namespace.list()

    def clear_ids(self) -> None:
        self.namespace.clear()

    def __repr__(self) -> str:
        """Name and number of defined modules, e.g. Engine(name='mmd', modules=2)."""
        return f"Engine(name={self.name!r}, modules={len(self._registry)})"

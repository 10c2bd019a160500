from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from autowire._internal.constructor_selector import ConstructorSelector
from autowire._internal.resolution_stack import ResolutionStack
from autowire.exceptions import AutowireCaptiveDependencyError, AutowirePrimitiveNotResolvableError
from autowire.introspection import TypeIntrospector
from autowire.types import Lifetime

logger = logging.getLogger(__name__)

ConcreteTypeLookup = Callable[[Any, "str | None"], Any]


class LifetimeResolver:
    """Infer singleton or transient lifetimes from type metadata alone.

    Inference walks constructor parameter types recursively and never calls a
    constructor. Priority, highest first:

    1. An explicit ``@lifetime`` declaration, rejected when a declared
       singleton depends on a transient (captive dependency).
    2. Resource-owning types (context managers, types with ``close()``) are
       transient.
    3. Any transient dependency makes the type transient.
    4. Everything else is a singleton.

    Results are memoised per type reference; the first stored value wins when
    two threads race on the same type.
    """

    def __init__(
        self,
        introspector: TypeIntrospector,
        selector: ConstructorSelector,
        concrete_type_for: ConcreteTypeLookup,
    ) -> None:
        self._introspector = introspector
        self._selector = selector
        self._concrete_type_for = concrete_type_for
        self._lifetimes: dict[Any, Lifetime] = {}
        self._lifetimes_lock = threading.Lock()

    def determine(self, service: Any, stack: ResolutionStack | None = None) -> Lifetime:
        """Return the lifetime of the concrete type ``service``.

        Args:
            service: Concrete class or closed generic alias.
            stack: Lifetime stack of an analysis already in progress. A new one
                is started when omitted.

        Raises:
            AutowireCircularDependencyError: If ``service`` depends on itself.
            AutowireCaptiveDependencyError: If an explicit singleton depends on
                a transient.
            AutowirePrimitiveNotResolvableError: If ``service`` or one of its
                dependencies is a primitive or value type.

        """
        cached = self._lifetimes.get(service)
        if cached is not None:
            return cached
        if self._introspector.is_primitive(service):
            raise AutowirePrimitiveNotResolvableError(service)

        if stack is None:
            stack = ResolutionStack()
        with stack.enter(service):
            transient_dependency = self._first_transient_dependency(service, stack)
            lifetime = self._decide(service, transient_dependency)
            with self._lifetimes_lock:
                lifetime = self._lifetimes.setdefault(service, lifetime)

        logger.debug("Lifetime of %r is %s", service, lifetime.value)
        return lifetime

    def _first_transient_dependency(self, service: Any, stack: ResolutionStack) -> Any | None:
        constructor = self._selector.select(service)
        requesting_scope = self._introspector.scope_of(service)
        transient_dependency = None
        for dependency in self._introspector.parameter_types(constructor):
            concrete = self._concrete_type_for(dependency, requesting_scope)
            lifetime = self.determine(concrete, stack)
            if lifetime is Lifetime.TRANSIENT and transient_dependency is None:
                transient_dependency = concrete
        return transient_dependency

    def _decide(self, service: Any, transient_dependency: Any | None) -> Lifetime:
        explicit = self._introspector.explicit_lifetime_of(service)
        if explicit is not None:
            if explicit is Lifetime.SINGLETON and transient_dependency is not None:
                raise AutowireCaptiveDependencyError(service, transient_dependency)
            return explicit
        if self._introspector.is_resource_owning(service):
            return Lifetime.TRANSIENT
        if transient_dependency is not None:
            return Lifetime.TRANSIENT
        return Lifetime.SINGLETON

from __future__ import annotations

from collections.abc import Callable
from inspect import Parameter
from typing import Any

from autowire._internal.constructor_selector import ConstructorSelector
from autowire._internal.resolution_stack import ResolutionStack
from autowire.exceptions import (
    AutowireConstructionFailedError,
    AutowirePrimitiveNotResolvableError,
)
from autowire.introspection import TypeIntrospector

DependencyResolver = Callable[[Any, "str | None", ResolutionStack], Any]


class InstanceFactory:
    """Create instances by resolving constructor dependencies through the container."""

    def __init__(
        self,
        introspector: TypeIntrospector,
        selector: ConstructorSelector,
        resolve: DependencyResolver,
    ) -> None:
        self._introspector = introspector
        self._selector = selector
        self._resolve = resolve

    def create(self, service: Any, stack: ResolutionStack) -> Any:
        """Build a new instance of the concrete type ``service``.

        Each injected parameter is resolved with ``service``'s module as the
        requesting scope. ``service`` stays on ``stack`` until the constructor
        returns or fails.

        Raises:
            AutowirePrimitiveNotResolvableError: If ``service`` is a primitive
                or value type.
            AutowireCircularDependencyError: If ``service`` is already being
                constructed by this call.
            AutowireConstructionFailedError: If the constructor returns ``None``.

        """
        if self._introspector.is_primitive(service):
            raise AutowirePrimitiveNotResolvableError(service)

        with stack.enter(service):
            constructor = self._selector.select(service)
            requesting_scope = self._introspector.scope_of(service)
            args: list[Any] = []
            kwargs: dict[str, Any] = {}
            for parameter in constructor.injected_parameters:
                value = self._resolve(parameter.annotation, requesting_scope, stack)
                if parameter.kind is Parameter.POSITIONAL_ONLY:
                    args.append(value)
                else:
                    kwargs[parameter.name] = value

            instance = constructor.invoke(*args, **kwargs)
            if instance is None:
                raise AutowireConstructionFailedError(service)
            return instance

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


def _type_name(value: Any) -> str:
    name = getattr(value, "__qualname__", None)
    if isinstance(name, str) and getattr(value, "__args__", None) is None:
        return name
    return repr(value)


class AutowireError(Exception):
    """Represent a base class for all autowire-specific failures.

    Catch this type when you want to handle any resolution failure without
    matching each concrete exception class individually.
    """


class AutowireNoPublicConstructorError(AutowireError):
    """Signal that a concrete type exposes no constructor autowire can call.

    Raised by constructor selection when neither ``__init__`` nor any
    ``@constructor`` classmethod can be introspected.
    """

    def __init__(self, service: Any) -> None:
        self.service = service
        super().__init__(
            f"Cannot resolve instance of type {_type_name(service)} "
            "because it has no public constructors.",
        )


class AutowireUnsupportedParameterKindError(AutowireError):
    """Signal that the selected constructor has a parameter autowire cannot supply.

    Typical triggers are ``*args``/``**kwargs``, a required parameter without a
    type annotation, or an annotation that still contains an unbound TypeVar.

    Typical fixes include annotating the parameter, giving it a default value,
    or adding a ``@constructor`` classmethod with a resolvable signature.
    """

    def __init__(self, service: Any, parameter: str, reason: str) -> None:
        self.service = service
        self.parameter = parameter
        self.reason = reason
        super().__init__(
            f"Cannot resolve instance of type {_type_name(service)} because its "
            f"constructor parameter '{parameter}' {reason}.",
        )


class AutowireImplementationNotFoundError(AutowireError):
    """Signal that discovery found no concrete implementation in any scope.

    Typical fix is defining (and importing) a concrete class that subclasses
    the requested interface.
    """

    def __init__(self, requested: Any) -> None:
        self.requested = requested
        super().__init__(
            f"No implementation found for {_type_name(requested)}. "
            "Ensure a concrete class implementing this interface exists.",
        )


class AutowireAmbiguousImplementationError(AutowireError):
    """Signal that one scope contains several equally valid implementations."""

    def __init__(self, requested: Any, candidates: Sequence[Any]) -> None:
        self.requested = requested
        self.candidates = tuple(candidates)
        names = ", ".join(_type_name(candidate) for candidate in self.candidates)
        super().__init__(
            f"Multiple implementations found for {_type_name(requested)}: {names}. "
            "Cannot resolve ambiguous interface.",
        )


class AutowireCircularDependencyError(AutowireError):
    """Signal that a type reappeared on an active resolution chain.

    Raised both by lifetime analysis and by instance construction. ``chain``
    lists the types in the order they were entered, ending with the repeated
    type.
    """

    def __init__(self, service: Any, chain: Sequence[Any]) -> None:
        self.service = service
        self.chain = tuple(chain)
        rendered = " -> ".join(_type_name(item) for item in self.chain)
        super().__init__(
            f"Circular dependency detected while resolving {_type_name(service)}. "
            f"Resolution chain: {rendered}",
        )


class AutowireCaptiveDependencyError(AutowireError):
    """Signal an explicit singleton that depends on a transient.

    The transient instance would be captured by the singleton and never
    released. Either drop the explicit singleton declaration or make the
    dependency a singleton.
    """

    def __init__(self, service: Any, dependency: Any) -> None:
        self.service = service
        self.dependency = dependency
        service_name = _type_name(service)
        dependency_name = _type_name(dependency)
        super().__init__(
            f"Captive dependency detected: Singleton '{service_name}' depends on "
            f"Transient '{dependency_name}'. This would cause the transient instance "
            "to be captured and never released. Either remove the "
            f"@lifetime(Lifetime.SINGLETON) declaration from '{service_name}', or mark "
            f"'{dependency_name}' as Singleton.",
        )


class AutowirePrimitiveNotResolvableError(AutowireError):
    """Signal a request for a builtin or value type that cannot be autowired."""

    def __init__(self, service: Any) -> None:
        self.service = service
        super().__init__(
            f"Cannot resolve instance of type {_type_name(service)} "
            "because it is a primitive type.",
        )


class AutowireConstructionFailedError(AutowireError):
    """Signal that a constructor returned no instance."""

    def __init__(self, service: Any) -> None:
        self.service = service
        super().__init__(f"Constructor invocation for type {_type_name(service)} returned None.")


class AutowireTypeMismatchError(AutowireError):
    """Signal that the resolved instance is not compatible with the requested type."""

    def __init__(self, requested: Any, instance: object) -> None:
        self.requested = requested
        self.instance = instance
        super().__init__(
            f"Failed to cast resolved instance of type {type(instance).__qualname__} "
            f"to requested type {_type_name(requested)}.",
        )


class AutowireUnionNotResolvableError(AutowireError):
    """Signal a direct request for a union such as ``Sender | None``.

    A union names several possible types, so there is no single type to
    construct. Request one member of the union instead.
    """

    def __init__(self, requested: Any) -> None:
        self.requested = requested
        super().__init__(
            f"Cannot resolve {_type_name(requested)} because it is a union type. "
            "Request one of its member types instead.",
        )

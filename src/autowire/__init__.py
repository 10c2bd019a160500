from autowire.container import Container
from autowire.exceptions import (
    AutowireAmbiguousImplementationError,
    AutowireCaptiveDependencyError,
    AutowireCircularDependencyError,
    AutowireConstructionFailedError,
    AutowireError,
    AutowireImplementationNotFoundError,
    AutowireNoPublicConstructorError,
    AutowirePrimitiveNotResolvableError,
    AutowireTypeMismatchError,
    AutowireUnionNotResolvableError,
    AutowireUnsupportedParameterKindError,
)
from autowire.introspection import (
    Constructor,
    ConstructorParameter,
    RuntimeTypeIntrospector,
    TypeIntrospector,
)
from autowire.lock_mode import LockMode
from autowire.markers import constructor, lifetime
from autowire.types import Lifetime

__all__ = [
    "AutowireAmbiguousImplementationError",
    "AutowireCaptiveDependencyError",
    "AutowireCircularDependencyError",
    "AutowireConstructionFailedError",
    "AutowireError",
    "AutowireImplementationNotFoundError",
    "AutowireNoPublicConstructorError",
    "AutowirePrimitiveNotResolvableError",
    "AutowireTypeMismatchError",
    "AutowireUnionNotResolvableError",
    "AutowireUnsupportedParameterKindError",
    "Constructor",
    "ConstructorParameter",
    "Container",
    "Lifetime",
    "LockMode",
    "RuntimeTypeIntrospector",
    "TypeIntrospector",
    "constructor",
    "lifetime",
]

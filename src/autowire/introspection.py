from __future__ import annotations

import inspect
import threading
from collections.abc import Callable, Iterable, Sequence
from contextlib import AbstractAsyncContextManager, AbstractContextManager
from dataclasses import dataclass
from inspect import Parameter
from typing import Any, Protocol, get_args, get_origin, get_type_hints

from autowire._internal.module_scopes import ModuleScopes
from autowire._internal.open_generics import (
    close_open_generic,
    contains_typevar,
    is_assignable,
    is_closed_generic,
    own_type_parameters,
    substitute_typevars,
    typevar_mapping_for,
)
from autowire._internal.type_checks import (
    is_abstract_class,
    is_runtime_class,
    is_union,
    origin_or_self,
    strip_annotated,
)
from autowire.defaults import DEFAULT_IGNORED_SCOPE_PREFIXES, DEFAULT_VALUE_TYPES
from autowire.markers import explicit_lifetime_of, is_marked_constructor
from autowire.types import Lifetime

_MISSING_ANNOTATION: Any = object()
_PROTOCOL_PLACEHOLDER_INITS = frozenset({"_no_init", "_no_init_or_replace_init"})
_VARIADIC_KINDS = (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)


@dataclass(frozen=True, slots=True)
class ConstructorParameter:
    """A single parameter of a constructor, with its resolved annotation."""

    name: str
    kind: Any
    annotation: Any
    """Closed type reference to inject, or a sentinel when it could not be determined."""
    has_default: bool
    problem: str | None = None
    """Why the parameter cannot be supplied by the container, if it cannot."""

    @property
    def is_injected(self) -> bool:
        """Return true when the container supplies this parameter."""
        return not self.has_default and self.kind not in _VARIADIC_KINDS

    @property
    def is_supported(self) -> bool:
        """Return true when the container can satisfy or skip this parameter."""
        if self.kind in _VARIADIC_KINDS:
            return False
        return self.has_default or self.problem is None


@dataclass(frozen=True, slots=True)
class Constructor:
    """A public way to build instances of ``service``."""

    service: Any
    name: str
    invoke: Callable[..., Any]
    parameters: tuple[ConstructorParameter, ...]

    @property
    def arity(self) -> int:
        return len(self.parameters)

    @property
    def injected_parameters(self) -> tuple[ConstructorParameter, ...]:
        return tuple(parameter for parameter in self.parameters if parameter.is_injected)

    def first_unsupported_parameter(self) -> ConstructorParameter | None:
        """Return the first parameter the container can neither supply nor skip."""
        for parameter in self.parameters:
            if not parameter.is_supported:
                return parameter
        return None


class TypeIntrospector(Protocol):
    """Type metadata queries consumed by discovery, inference and construction.

    ``RuntimeTypeIntrospector`` implements this protocol with ``inspect`` and
    ``typing``. Alternative implementations can back the container with a
    pre-built type table.
    """

    def list_public_constructors(self, type_ref: Any) -> Sequence[Constructor]: ...

    def parameter_types(self, constructor: Constructor) -> tuple[Any, ...]: ...

    def has_unsupported_parameter(self, constructor: Constructor) -> bool: ...

    def is_assignable(self, candidate: Any, target: Any) -> bool: ...

    def is_concrete(self, type_ref: Any) -> bool: ...

    def is_primitive(self, type_ref: Any) -> bool: ...

    def is_generic_closed(self, type_ref: Any) -> bool: ...

    def is_generic_open(self, type_ref: Any) -> bool: ...

    def open_shape_of(self, type_ref: Any) -> Any: ...

    def generic_arguments_of(self, type_ref: Any) -> tuple[Any, ...]: ...

    def try_close(self, open_type: Any, shape: Any, arguments: tuple[Any, ...]) -> Any | None: ...

    def explicit_lifetime_of(self, type_ref: Any) -> Lifetime | None: ...

    def is_resource_owning(self, type_ref: Any) -> bool: ...

    def scope_of(self, type_ref: Any) -> str | None: ...

    def scopes_in_search_order(self, requesting_scope: str | None) -> Iterable[str]: ...

    def concrete_types_in(self, scope: str) -> Sequence[Any]: ...


class RuntimeTypeIntrospector:
    """Answer type metadata queries from live Python classes.

    Constructors are the class ``__init__`` plus public classmethods marked
    with ``@constructor``. Scopes are the modules in ``sys.modules``.
    """

    def __init__(
        self,
        *,
        ignored_scope_prefixes: Iterable[str] = DEFAULT_IGNORED_SCOPE_PREFIXES,
        value_types: tuple[type[Any], ...] = DEFAULT_VALUE_TYPES,
    ) -> None:
        self._scopes = ModuleScopes(ignored_prefixes=tuple(ignored_scope_prefixes))
        self._value_types = value_types
        self._constructors: dict[Any, tuple[Constructor, ...]] = {}
        self._constructors_lock = threading.Lock()

    def list_public_constructors(self, type_ref: Any) -> tuple[Constructor, ...]:
        cached = self._constructors.get(type_ref)
        if cached is not None:
            return cached

        cls = origin_or_self(type_ref)
        constructors: list[Constructor] = []
        init_constructor = self._init_constructor(type_ref, cls)
        if init_constructor is not None:
            constructors.append(init_constructor)
        for name, member in vars(cls).items():
            if name.startswith("_") or not is_marked_constructor(member):
                continue
            constructors.append(
                Constructor(
                    service=type_ref,
                    name=name,
                    invoke=getattr(cls, name),
                    parameters=self._parameters(
                        type_ref=type_ref,
                        owner=cls,
                        function=member.__func__,
                        skip_first=True,
                    ),
                ),
            )

        result = tuple(constructors)
        with self._constructors_lock:
            return self._constructors.setdefault(type_ref, result)

    def parameter_types(self, constructor: Constructor) -> tuple[Any, ...]:
        return tuple(parameter.annotation for parameter in constructor.injected_parameters)

    def has_unsupported_parameter(self, constructor: Constructor) -> bool:
        return constructor.first_unsupported_parameter() is not None

    def is_assignable(self, candidate: Any, target: Any) -> bool:
        return is_assignable(candidate, strip_annotated(target))

    def is_concrete(self, type_ref: Any) -> bool:
        type_ref = strip_annotated(type_ref)
        if is_union(type_ref):
            return False
        cls = origin_or_self(type_ref)
        if not is_runtime_class(cls):
            return False
        if get_origin(type_ref) is not None and not is_closed_generic(type_ref):
            return False
        return not is_abstract_class(cls)

    def is_primitive(self, type_ref: Any) -> bool:
        cls = origin_or_self(strip_annotated(type_ref))
        if not is_runtime_class(cls):
            return False
        if cls.__module__ == "builtins":
            return True
        return issubclass(cls, self._value_types)

    def is_generic_closed(self, type_ref: Any) -> bool:
        return is_closed_generic(strip_annotated(type_ref))

    def is_generic_open(self, type_ref: Any) -> bool:
        return get_origin(type_ref) is None and bool(own_type_parameters(type_ref))

    def open_shape_of(self, type_ref: Any) -> Any:
        return get_origin(strip_annotated(type_ref))

    def generic_arguments_of(self, type_ref: Any) -> tuple[Any, ...]:
        return get_args(strip_annotated(type_ref))

    def try_close(self, open_type: Any, shape: Any, arguments: tuple[Any, ...]) -> Any | None:
        return close_open_generic(open_type, target_origin=shape, arguments=arguments)

    def explicit_lifetime_of(self, type_ref: Any) -> Lifetime | None:
        cls = origin_or_self(type_ref)
        return explicit_lifetime_of(cls) if is_runtime_class(cls) else None

    def is_resource_owning(self, type_ref: Any) -> bool:
        cls = origin_or_self(type_ref)
        if not is_runtime_class(cls):
            return False
        if issubclass(cls, (AbstractContextManager, AbstractAsyncContextManager)):
            return True
        return callable(getattr(cls, "close", None))

    def scope_of(self, type_ref: Any) -> str | None:
        module = getattr(origin_or_self(type_ref), "__module__", None)
        return module if isinstance(module, str) else None

    def scopes_in_search_order(self, requesting_scope: str | None) -> Iterable[str]:
        return self._scopes.search_order(requesting_scope)

    def concrete_types_in(self, scope: str) -> tuple[type[Any], ...]:
        return tuple(
            cls for cls in self._scopes.concrete_types_in(scope) if not is_abstract_class(cls)
        )

    def _init_constructor(self, type_ref: Any, cls: type[Any]) -> Constructor | None:
        owner, init = _find_init(cls)
        if init is None:
            return Constructor(service=type_ref, name="__init__", invoke=type_ref, parameters=())
        try:
            inspect.signature(init)
        except (TypeError, ValueError):
            return None
        return Constructor(
            service=type_ref,
            name="__init__",
            invoke=type_ref,
            parameters=self._parameters(
                type_ref=type_ref,
                owner=owner,
                function=init,
                skip_first=True,
            ),
        )

    def _parameters(
        self,
        *,
        type_ref: Any,
        owner: type[Any],
        function: Callable[..., Any],
        skip_first: bool,
    ) -> tuple[ConstructorParameter, ...]:
        parameters = tuple(inspect.signature(function).parameters.values())
        if skip_first and parameters and parameters[0].kind in (
            Parameter.POSITIONAL_ONLY,
            Parameter.POSITIONAL_OR_KEYWORD,
        ):
            parameters = parameters[1:]

        annotation_error: Exception | None = None
        try:
            hints = get_type_hints(function, include_extras=True)
        except Exception as error:  # noqa: BLE001
            hints = {}
            annotation_error = error
        mapping = typevar_mapping_for(type_ref, owner)

        return tuple(
            _describe_parameter(
                parameter=parameter,
                hints=hints,
                annotation_error=annotation_error,
                mapping=mapping,
            )
            for parameter in parameters
        )


def _describe_parameter(
    *,
    parameter: Parameter,
    hints: dict[str, Any],
    annotation_error: Exception | None,
    mapping: dict[Any, Any],
) -> ConstructorParameter:
    has_default = parameter.default is not Parameter.empty
    if parameter.kind in _VARIADIC_KINDS:
        return ConstructorParameter(
            name=parameter.name,
            kind=parameter.kind,
            annotation=_MISSING_ANNOTATION,
            has_default=has_default,
            problem="is variadic (*args/**kwargs)",
        )

    annotation = hints.get(parameter.name, _MISSING_ANNOTATION)
    if annotation is _MISSING_ANNOTATION:
        raw_annotation = parameter.annotation
        if raw_annotation is not Parameter.empty and not isinstance(raw_annotation, str):
            annotation = raw_annotation

    problem: str | None = None
    if annotation is _MISSING_ANNOTATION:
        if parameter.annotation is Parameter.empty:
            problem = "has no type annotation"
        else:
            problem = f"has an annotation that cannot be evaluated ({annotation_error})"
    else:
        annotation = substitute_typevars(strip_annotated(annotation), mapping=mapping)
        if is_union(annotation):
            problem = "is a union type"
        elif contains_typevar(annotation):
            problem = "refers to an unbound type variable"

    return ConstructorParameter(
        name=parameter.name,
        kind=parameter.kind,
        annotation=annotation,
        has_default=has_default,
        problem=problem,
    )


def _find_init(cls: type[Any]) -> tuple[type[Any], Any]:
    for klass in cls.__mro__:
        init = vars(klass).get("__init__")
        if init is None:
            continue
        if klass is object:
            return klass, None
        if getattr(init, "__name__", "") in _PROTOCOL_PLACEHOLDER_INITS:
            continue
        return klass, init
    return object, None

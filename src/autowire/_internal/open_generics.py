from __future__ import annotations

import logging
import typing
from collections.abc import Mapping
from typing import Any, Generic, TypeVar, get_args, get_origin

import typing_extensions
from typing_extensions import get_original_bases

from autowire._internal.type_checks import is_runtime_class, nominal_subclass, origin_or_self

logger = logging.getLogger(__name__)

_SKIPPED_GENERIC_ORIGINS: tuple[Any, ...] = (
    Generic,
    typing.Protocol,
    typing_extensions.Protocol,
)


def contains_typevar(value: Any) -> bool:
    """Return whether a type expression still contains a ``TypeVar``.

    Args:
        value: Type expression or object to inspect.

    Returns:
        ``True`` when any nested node contains a TypeVar, else ``False``.

    """
    if isinstance(value, TypeVar):
        return True

    origin = get_origin(value)
    if origin is not None:
        return any(contains_typevar(argument) for argument in get_args(value))

    parameters = getattr(value, "__parameters__", ())
    if not isinstance(parameters, tuple):
        return False
    return any(isinstance(parameter, TypeVar) for parameter in parameters)


def substitute_typevars(value: Any, *, mapping: Mapping[TypeVar, Any]) -> Any:
    """Substitute TypeVars in a type expression using a resolved mapping.

    This is used to derive closed constructor parameter types for closed
    generic implementations, for example ``Store[T]`` becomes ``Store[User]``
    when constructing ``SqlRepository[User]``.

    Args:
        value: Type expression template that may contain TypeVars.
        mapping: Mapping from template TypeVars to concrete type arguments.

    Returns:
        The substituted type expression with available TypeVars replaced.

    """
    if isinstance(value, TypeVar):
        return mapping.get(value, value)

    origin = get_origin(value)
    if origin is None:
        return value

    arguments = get_args(value)
    if not arguments:
        return value

    substituted_arguments = tuple(
        substitute_typevars(argument, mapping=mapping) for argument in arguments
    )
    return _rebuild_alias(origin=origin, args=substituted_arguments, fallback=value)


def find_invalid_argument(typevar_map: Mapping[TypeVar, Any]) -> str | None:
    """Describe the first argument that violates its TypeVar constraints or bound.

    Args:
        typevar_map: Mapping from open TypeVars to candidate concrete arguments.

    Returns:
        A human readable description of the violation, or ``None`` when every
        argument is acceptable.

    """
    for typevar, argument in typevar_map.items():
        if _is_type_argument_valid(typevar=typevar, argument=argument):
            continue
        constraints = getattr(typevar, "__constraints__", ())
        bound = getattr(typevar, "__bound__", None)
        if constraints:
            formatted_constraints = ", ".join(repr(item) for item in constraints)
            return (
                f"Generic argument {argument!r} for TypeVar '{typevar.__name__}' must satisfy "
                f"one of: {formatted_constraints}."
            )
        if bound is not None:
            return (
                f"Generic argument {argument!r} for TypeVar '{typevar.__name__}' must satisfy "
                f"bound {bound!r}."
            )
        return f"Generic argument {argument!r} is invalid for TypeVar '{typevar.__name__}'."
    return None


def own_type_parameters(cls: Any) -> tuple[TypeVar, ...]:
    """Return the unbound TypeVars a runtime class declares."""
    if not is_runtime_class(cls):
        return ()
    # Some classes expose __parameters__ as a descriptor rather than a tuple
    parameters = getattr(cls, "__parameters__", ())
    if not isinstance(parameters, tuple):
        return ()
    return tuple(parameter for parameter in parameters if isinstance(parameter, TypeVar))


def is_closed_generic(value: Any) -> bool:
    """Return true for aliases such as ``Repository[User]`` with no TypeVars left."""
    origin = get_origin(value)
    if origin is None:
        return False
    arguments = get_args(value)
    if not arguments:
        return False
    return not any(contains_typevar(argument) for argument in arguments)


def generic_lineage(type_ref: Any) -> tuple[Any, ...]:
    """Return every generic base alias of ``type_ref`` with its arguments substituted.

    The walk follows ``__orig_bases__`` through the whole base-class chain, so
    for ``class SqlRepository(BaseRepository[T])`` and
    ``class BaseRepository(Repository[T])`` the lineage of
    ``SqlRepository[User]`` contains both ``BaseRepository[User]`` and
    ``Repository[User]``. For an open definition the aliases are expressed in
    terms of the definition's own TypeVars.

    Args:
        type_ref: Runtime class or closed generic alias.

    Returns:
        Base aliases in depth-first declaration order, possibly with repeats
        for diamond-shaped hierarchies.

    """
    cls = origin_or_self(type_ref)
    if not is_runtime_class(cls):
        return ()
    found: list[Any] = []
    _collect_lineage(cls=cls, mapping=_own_mapping(type_ref), found=found)
    return tuple(found)


def typevar_mapping_for(type_ref: Any, owner: type[Any]) -> dict[TypeVar, Any]:
    """Return the TypeVar bindings of ``owner`` as seen from ``type_ref``.

    ``owner`` is usually the class that defines an inherited ``__init__``;
    its annotations use ``owner``'s TypeVars, which must be mapped through the
    lineage rather than through the requested alias directly.
    """
    if origin_or_self(type_ref) is owner:
        return _own_mapping(type_ref)
    parameters = own_type_parameters(owner)
    for alias in generic_lineage(type_ref):
        if get_origin(alias) is not owner:
            continue
        arguments = get_args(alias)
        if len(arguments) == len(parameters):
            return dict(zip(parameters, arguments, strict=True))
    return {}


def close_open_generic(
    open_type: type[Any],
    *,
    target_origin: Any,
    arguments: tuple[Any, ...],
) -> Any | None:
    """Close an open generic implementation against a closed request.

    The implementation must derive from ``target_origin`` through an alias
    whose arguments are exactly its own TypeVars in a one-to-one mapping, for
    example ``class Impl(Repo[K, V])`` closed against ``Repo[int, str]``
    produces ``Impl[int, str]``. Anything else, including nested argument
    inference such as ``class Impl(Repo[Box[T]])``, yields ``None``.

    Args:
        open_type: Concrete generic definition with unbound TypeVars.
        target_origin: Origin of the requested closed alias.
        arguments: Arguments of the requested closed alias.

    Returns:
        The closed alias, or ``None`` when closing is impossible or the
        arguments violate TypeVar constraints.

    """
    parameters = own_type_parameters(open_type)
    if len(parameters) != len(arguments):
        return None

    for alias in generic_lineage(open_type):
        if get_origin(alias) is not target_origin:
            continue
        alias_arguments = get_args(alias)
        if not _is_one_to_one(alias_arguments, parameters):
            continue

        mapping = dict(zip(alias_arguments, arguments, strict=True))
        violation = find_invalid_argument(mapping)
        if violation is not None:
            logger.debug("Skipping %r as a closing candidate: %s", open_type, violation)
            return None
        closed_arguments = tuple(mapping[parameter] for parameter in parameters)
        return _rebuild_alias(origin=open_type, args=closed_arguments, fallback=None)
    return None


def is_assignable(candidate: Any, target: Any) -> bool:
    """Return whether instances of ``candidate`` are usable where ``target`` is requested.

    Plain classes use nominal subclassing. Closed generic targets additionally
    require a matching alias in the candidate's lineage, honouring the
    variance declared on the target's TypeVars.
    """
    candidate_class = origin_or_self(candidate)
    if not is_runtime_class(candidate_class):
        return False

    target_origin = get_origin(target)
    if target_origin is None:
        return is_runtime_class(target) and nominal_subclass(candidate_class, target)

    if not is_runtime_class(target_origin):
        return False
    if not nominal_subclass(candidate_class, target_origin):
        return False

    target_arguments = get_args(target)
    if candidate_class is target_origin:
        return _arguments_compatible(
            origin=target_origin,
            candidate_arguments=get_args(candidate),
            target_arguments=target_arguments,
        )
    return any(
        get_origin(alias) is target_origin
        and _arguments_compatible(
            origin=target_origin,
            candidate_arguments=get_args(alias),
            target_arguments=target_arguments,
        )
        for alias in generic_lineage(candidate)
    )


def _collect_lineage(*, cls: type[Any], mapping: Mapping[TypeVar, Any], found: list[Any]) -> None:
    for base in get_original_bases(cls):
        origin = get_origin(base)
        if origin is None:
            if is_runtime_class(base) and base is not object:
                _collect_lineage(cls=base, mapping={}, found=found)
            continue
        if origin in _SKIPPED_GENERIC_ORIGINS or not is_runtime_class(origin):
            continue

        closed = substitute_typevars(base, mapping=mapping)
        found.append(closed)
        parameters = own_type_parameters(origin)
        arguments = get_args(closed)
        base_mapping = (
            dict(zip(parameters, arguments, strict=True))
            if len(parameters) == len(arguments)
            else {}
        )
        _collect_lineage(cls=origin, mapping=base_mapping, found=found)


def _own_mapping(type_ref: Any) -> dict[TypeVar, Any]:
    origin = get_origin(type_ref)
    if origin is None:
        return {}
    parameters = own_type_parameters(origin)
    arguments = get_args(type_ref)
    if len(parameters) != len(arguments):
        return {}
    return dict(zip(parameters, arguments, strict=True))


def _is_one_to_one(alias_arguments: tuple[Any, ...], parameters: tuple[TypeVar, ...]) -> bool:
    if len(alias_arguments) != len(parameters):
        return False
    if not all(isinstance(argument, TypeVar) for argument in alias_arguments):
        return False
    return set(alias_arguments) == set(parameters) and len(set(alias_arguments)) == len(
        alias_arguments,
    )


def _arguments_compatible(
    *,
    origin: type[Any],
    candidate_arguments: tuple[Any, ...],
    target_arguments: tuple[Any, ...],
) -> bool:
    if len(candidate_arguments) != len(target_arguments):
        return False
    parameters = own_type_parameters(origin)
    for index, (candidate_argument, target_argument) in enumerate(
        zip(candidate_arguments, target_arguments, strict=True),
    ):
        if contains_typevar(candidate_argument):
            return False
        typevar = parameters[index] if index < len(parameters) else None
        if getattr(typevar, "__covariant__", False):
            compatible = _is_subtype(candidate_argument, target_argument)
        elif getattr(typevar, "__contravariant__", False):
            compatible = _is_subtype(target_argument, candidate_argument)
        else:
            compatible = candidate_argument == target_argument
        if not compatible:
            return False
    return True


def _is_subtype(value: Any, expected: Any) -> bool:
    if value == expected:
        return True
    if is_runtime_class(value) and is_runtime_class(expected):
        return nominal_subclass(value, expected)
    return False


def _rebuild_alias(*, origin: Any, args: tuple[Any, ...], fallback: Any) -> Any:
    try:
        if len(args) == 1:
            return origin[args[0]]
        return origin[args]
    except TypeError:
        return fallback


def _is_type_argument_valid(*, typevar: TypeVar, argument: Any) -> bool:
    constraints = getattr(typevar, "__constraints__", ())
    if constraints:
        return any(
            _matches_type_constraint(argument=argument, constraint=constraint)
            for constraint in constraints
        )
    bound = getattr(typevar, "__bound__", None)
    if bound is None:
        return True
    return _matches_type_constraint(argument=argument, constraint=bound)


def _matches_type_constraint(*, argument: Any, constraint: Any) -> bool:
    if constraint is Any:
        return True
    argument_type = origin_or_self(argument)
    constraint_type = origin_or_self(constraint)
    if isinstance(argument_type, type) and isinstance(constraint_type, type):
        try:
            return issubclass(argument_type, constraint_type)
        except TypeError:
            return False
    return argument == constraint

from __future__ import annotations

import inspect
import types
from abc import ABC
from typing import Annotated, Any, TypeGuard, Union, get_args, get_origin

from typing_extensions import is_protocol

_UNION_ORIGINS = (Union, types.UnionType)


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def origin_or_self(value: Any) -> Any:
    """Return the origin of a generic alias, or the value itself."""
    return get_origin(value) or value


def strip_annotated(value: Any) -> Any:
    """Return ``X`` for ``Annotated[X, ...]`` and the value unchanged otherwise."""
    while get_origin(value) is Annotated:
        value = get_args(value)[0]
    return value


def is_union(value: Any) -> bool:
    """Return true for ``X | Y`` and ``Optional[X]`` style annotations."""
    return get_origin(value) in _UNION_ORIGINS


def is_abstract_class(cls: type[Any]) -> bool:
    """Return true for ABCs with abstract members, protocols and declared abstract bases.

    A class that lists ``abc.ABC`` among its direct bases is treated as
    abstract even when it declares no abstract methods.
    """
    if inspect.isabstract(cls) or is_protocol(cls):
        return True
    return ABC in cls.__bases__


def nominal_subclass(candidate: type[Any], target: type[Any]) -> bool:
    """Return true when ``candidate`` explicitly derives from ``target``.

    Protocols only match when they appear in the candidate's MRO, so
    structural matches never make an unrelated class a candidate.
    """
    if candidate is target:
        return True
    if is_protocol(target):
        return target in candidate.__mro__
    try:
        return issubclass(candidate, target)
    except TypeError:
        return False


__all__ = [
    "is_abstract_class",
    "is_runtime_class",
    "is_union",
    "nominal_subclass",
    "origin_or_self",
    "strip_annotated",
]

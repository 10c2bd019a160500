from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from autowire.types import Lifetime

C = TypeVar("C", bound=type)
F = TypeVar("F")

LIFETIME_ATTRIBUTE = "__autowire_lifetime__"
CONSTRUCTOR_ATTRIBUTE = "__autowire_constructor__"


def lifetime(value: Lifetime) -> Callable[[C], C]:
    """Declare an explicit lifetime for a class, overriding inference.

    The declaration applies to the decorated class only; subclasses go back to
    inferred lifetimes unless they are decorated themselves.

    Usage:
        @lifetime(Lifetime.TRANSIENT)
        class RequestContext:
            ...

    Args:
        value: Lifetime the container must use for the class.

    Returns:
        A class decorator that records the declaration and returns the class
        unchanged.

    """
    if not isinstance(value, Lifetime):
        msg = f"lifetime() expects a Lifetime member, got {value!r}."
        raise TypeError(msg)

    def decorator(cls: C) -> C:
        setattr(cls, LIFETIME_ATTRIBUTE, value)
        return cls

    return decorator


def constructor(func: F) -> F:
    """Mark a classmethod as an additional public constructor.

    Marked classmethods compete with ``__init__`` during constructor
    selection: the candidate with most parameters wins, and ``__init__`` wins
    ties because it is considered declared first.

    Usage:
        class Client:
            def __init__(self) -> None: ...

            @classmethod
            @constructor
            def with_session(cls, session: Session) -> Client: ...

    """
    target: Any = func.__func__ if isinstance(func, classmethod) else func
    setattr(target, CONSTRUCTOR_ATTRIBUTE, True)
    return func


def explicit_lifetime_of(cls: type) -> Lifetime | None:
    """Return the lifetime declared directly on ``cls``, ignoring base classes."""
    declared = vars(cls).get(LIFETIME_ATTRIBUTE)
    return declared if isinstance(declared, Lifetime) else None


def is_marked_constructor(member: object) -> bool:
    """Return true when a class attribute is a ``@constructor`` classmethod."""
    if not isinstance(member, classmethod):
        return False
    return bool(getattr(member.__func__, CONSTRUCTOR_ATTRIBUTE, False))

from __future__ import annotations

from typing import Any

from autowire.exceptions import (
    AutowireNoPublicConstructorError,
    AutowireUnsupportedParameterKindError,
)
from autowire.introspection import Constructor, TypeIntrospector


class ConstructorSelector:
    """Select the constructor used to instantiate a concrete type.

    The constructor with the most parameters wins; ties go to the one declared
    first, which makes ``__init__`` win over an equally sized
    ``@constructor`` classmethod.
    """

    def __init__(self, introspector: TypeIntrospector) -> None:
        self._introspector = introspector

    def select(self, service: Any) -> Constructor:
        """Return the constructor to invoke for ``service``.

        Args:
            service: Concrete class or closed generic alias.

        Raises:
            AutowireNoPublicConstructorError: If ``service`` exposes no public
                constructor.
            AutowireUnsupportedParameterKindError: If the selected constructor
                has a parameter the container cannot supply. Other constructors
                are not tried as a fallback.

        """
        constructors = self._introspector.list_public_constructors(service)
        if not constructors:
            raise AutowireNoPublicConstructorError(service)

        selected = constructors[0]
        for candidate in constructors[1:]:
            if candidate.arity > selected.arity:
                selected = candidate

        if self._introspector.has_unsupported_parameter(selected):
            parameter = selected.first_unsupported_parameter()
            name = parameter.name if parameter is not None else "?"
            reason = (
                parameter.problem
                if parameter is not None and parameter.problem is not None
                else "is not supported"
            )
            raise AutowireUnsupportedParameterKindError(service, name, reason)
        return selected

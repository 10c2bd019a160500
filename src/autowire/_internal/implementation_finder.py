from __future__ import annotations

import logging
from typing import Any

from autowire.exceptions import (
    AutowireAmbiguousImplementationError,
    AutowireImplementationNotFoundError,
)
from autowire.introspection import TypeIntrospector

logger = logging.getLogger(__name__)


class ImplementationFinder:
    """Find the concrete implementation of an interface or abstract class.

    Scopes are searched closest first and the search stops at the first scope
    that yields any candidate, so an implementation that lives next to its
    consumer wins over one further away, and ambiguity is only reported among
    candidates of the same scope.
    """

    def __init__(self, introspector: TypeIntrospector) -> None:
        self._introspector = introspector

    def find(self, requested: Any, requesting_scope: str | None) -> Any:
        """Search scopes for exactly one implementation of ``requested``.

        Args:
            requested: Abstract class, protocol or closed generic alias.
            requesting_scope: Module that asked for ``requested``; searched first.

        Raises:
            AutowireAmbiguousImplementationError: If the first scope with
                candidates has more than one.
            AutowireImplementationNotFoundError: If no scope has a candidate.

        """
        introspector = self._introspector
        shape: Any = None
        arguments: tuple[Any, ...] = ()
        if introspector.is_generic_closed(requested):
            shape = introspector.open_shape_of(requested)
            arguments = introspector.generic_arguments_of(requested)

        for scope in introspector.scopes_in_search_order(requesting_scope):
            candidates = self._candidates_in(
                scope,
                requested=requested,
                shape=shape,
                arguments=arguments,
            )
            if len(candidates) == 1:
                logger.debug(
                    "Resolved %r to %r in scope %s (requested from %s)",
                    requested,
                    candidates[0],
                    scope,
                    requesting_scope,
                )
                return candidates[0]
            if candidates:
                raise AutowireAmbiguousImplementationError(requested, candidates)

        raise AutowireImplementationNotFoundError(requested)

    def _candidates_in(
        self,
        scope: str,
        *,
        requested: Any,
        shape: Any,
        arguments: tuple[Any, ...],
    ) -> list[Any]:
        introspector = self._introspector
        found: dict[Any, None] = {}
        for candidate in introspector.concrete_types_in(scope):
            if introspector.is_generic_open(candidate):
                if shape is None:
                    continue
                closed = introspector.try_close(candidate, shape, arguments)
                if closed is not None and introspector.is_assignable(closed, requested):
                    found[closed] = None
            elif introspector.is_assignable(candidate, requested):
                found[candidate] = None
        return list(found)

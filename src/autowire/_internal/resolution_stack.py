from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from autowire.exceptions import AutowireCircularDependencyError


class ResolutionStack:
    """Track the types in progress for one resolution or lifetime analysis.

    A fresh stack is created for every top-level call and passed down the
    recursion explicitly, so concurrent calls never see each other's entries.
    Entries keep insertion order to report the chain when a cycle is found.
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: dict[Any, None] = {}

    @contextmanager
    def enter(self, service: Any) -> Iterator[None]:
        """Push ``service`` for the duration of the block.

        Raises:
            AutowireCircularDependencyError: If ``service`` is already on the
                stack.

        """
        if service in self._entries:
            raise AutowireCircularDependencyError(service, [*self._entries, service])
        self._entries[service] = None
        try:
            yield
        finally:
            self._entries.pop(service, None)

    @property
    def chain(self) -> tuple[Any, ...]:
        """Return the types in progress, outermost first."""
        return tuple(self._entries)

    def __contains__(self, service: object) -> bool:
        return service in self._entries

    def __len__(self) -> int:
        return len(self._entries)

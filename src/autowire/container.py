from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Final, TypeVar, overload

from autowire._internal.caller import calling_module
from autowire._internal.constructor_selector import ConstructorSelector
from autowire._internal.implementation_finder import ImplementationFinder
from autowire._internal.instance_factory import InstanceFactory
from autowire._internal.lifetime_resolver import LifetimeResolver
from autowire._internal.resolution_stack import ResolutionStack
from autowire._internal.type_checks import (
    is_runtime_class,
    is_union,
    nominal_subclass,
    origin_or_self,
    strip_annotated,
)
from autowire.defaults import DEFAULT_LOCK_MODE
from autowire.exceptions import AutowireTypeMismatchError, AutowireUnionNotResolvableError
from autowire.introspection import RuntimeTypeIntrospector, TypeIntrospector
from autowire.lock_mode import LockMode
from autowire.types import Lifetime

T = TypeVar("T")

logger = logging.getLogger(__name__)

_MISSING: Final[Any] = object()


@dataclass(slots=True)
class _RegistryEntry:
    """Resolved type with its lifetime and, for singletons, the shared instance."""

    service: Any
    lifetime: Lifetime
    value: Any = _MISSING


class Container:
    """Resolve object graphs without registrations.

    ``resolve`` maps an interface to its closest concrete implementation,
    infers whether the implementation is a singleton or a transient, and
    constructs it by resolving constructor parameters recursively.

    Usage:
        container = Container()
        service = container.resolve(Notifier)

    Each container owns its caches. Two containers never share singletons.
    """

    def __init__(
        self,
        *,
        introspector: TypeIntrospector | None = None,
        lock_mode: LockMode = DEFAULT_LOCK_MODE,
    ) -> None:
        """Initialize a container.

        Args:
            introspector: Source of type metadata. Defaults to a
                ``RuntimeTypeIntrospector`` that inspects live classes and
                searches ``sys.modules``.
            lock_mode: ``LockMode.THREAD`` constructs each singleton exactly
                once under concurrent first access; ``LockMode.NONE`` skips the
                per-type lock.

        """
        self._introspector = introspector or RuntimeTypeIntrospector()
        self._lock_mode = lock_mode

        selector = ConstructorSelector(self._introspector)
        self._finder = ImplementationFinder(self._introspector)
        self._lifetimes = LifetimeResolver(
            self._introspector,
            selector,
            concrete_type_for=self._concrete_type_for,
        )
        self._factory = InstanceFactory(self._introspector, selector, resolve=self._resolve)

        self._entries: dict[Any, _RegistryEntry] = {}
        self._entries_lock = threading.Lock()
        # (requested type, requesting scope) -> concrete type
        self._implementations: dict[tuple[Any, str | None], Any] = {}
        self._implementations_lock = threading.Lock()
        self._singleton_locks: dict[Any, threading.RLock] = {}
        self._singleton_locks_lock = threading.Lock()

    @overload
    def resolve(self, dependency: type[T]) -> T: ...

    @overload
    def resolve(self, dependency: Any) -> Any: ...

    def resolve(self, dependency: Any) -> Any:
        """Resolve an instance of ``dependency``.

        Interfaces, abstract classes and protocols are mapped to the single
        implementation found closest to the calling module. Closed generic
        aliases such as ``Repository[User]`` may be satisfied by closing an open
        generic implementation.

        Args:
            dependency: Class or closed generic alias to resolve.

        Returns:
            The cached singleton or a new transient instance.

        Raises:
            AutowireError: Any resolution failure. The container remains usable
                after a failed call.

        """
        requested = strip_annotated(dependency)
        instance = self._resolve(requested, calling_module(), ResolutionStack())
        self._ensure_compatible(requested, instance)
        return instance

    def _resolve(self, requested: Any, requesting_scope: str | None, stack: ResolutionStack) -> Any:
        service = self._concrete_type_for(requested, requesting_scope)

        entry = self._entries.get(service)
        if entry is not None:
            if entry.lifetime is Lifetime.SINGLETON:
                return entry.value
            return self._factory.create(service, stack)

        lifetime = self._lifetimes.determine(service)
        if lifetime is Lifetime.TRANSIENT:
            instance = self._factory.create(service, stack)
            self._record(_RegistryEntry(service=service, lifetime=lifetime))
            return instance
        return self._resolve_singleton(service, stack)

    def _resolve_singleton(self, service: Any, stack: ResolutionStack) -> Any:
        if self._lock_mode is LockMode.NONE:
            instance = self._factory.create(service, stack)
            return self._record(
                _RegistryEntry(service=service, lifetime=Lifetime.SINGLETON, value=instance),
            ).value

        with self._get_singleton_lock(service):
            # Second check after acquiring lock - another thread may have built it
            entry = self._entries.get(service)
            if entry is not None:
                return entry.value
            instance = self._factory.create(service, stack)
            return self._record(
                _RegistryEntry(service=service, lifetime=Lifetime.SINGLETON, value=instance),
            ).value

    def _record(self, entry: _RegistryEntry) -> _RegistryEntry:
        with self._entries_lock:
            stored = self._entries.setdefault(entry.service, entry)
        if stored is entry:
            logger.debug("Registered %r as %s", entry.service, entry.lifetime.value)
        return stored

    def _concrete_type_for(self, requested: Any, requesting_scope: str | None) -> Any:
        if is_union(requested):
            raise AutowireUnionNotResolvableError(requested)
        if self._introspector.is_concrete(requested):
            return requested

        key = (requested, requesting_scope)
        cached = self._implementations.get(key, _MISSING)
        if cached is not _MISSING:
            return cached

        found = self._finder.find(requested, requesting_scope)
        with self._implementations_lock:
            return self._implementations.setdefault(key, found)

    def _get_singleton_lock(self, service: Any) -> threading.RLock:
        """Get or create the construction lock for a singleton type.

        Uses double-checked locking to minimize lock contention.
        """
        lock = self._singleton_locks.get(service)
        if lock is None:
            with self._singleton_locks_lock:
                lock = self._singleton_locks.get(service)
                if lock is None:
                    lock = threading.RLock()
                    self._singleton_locks[service] = lock
        return lock

    @staticmethod
    def _ensure_compatible(requested: Any, instance: object) -> None:
        expected = origin_or_self(requested)
        if is_runtime_class(expected) and not nominal_subclass(type(instance), expected):
            raise AutowireTypeMismatchError(requested, instance)

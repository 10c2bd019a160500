from __future__ import annotations

import inspect
import logging
import sys
from collections.abc import Iterator
from dataclasses import dataclass
from types import ModuleType
from typing import Any

from autowire._internal.type_checks import is_runtime_class

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ModuleScopes:
    """Enumerate Python modules as discovery scopes.

    A scope is a module in ``sys.modules``. Search order starts at the
    requesting module, continues with the modules it references from its
    global namespace, and ends with every other loaded module ordered by
    package proximity to the requesting module.
    """

    ignored_prefixes: tuple[str, ...] = ()

    def search_order(self, requesting_scope: str | None) -> Iterator[str]:
        """Yield scope names closest first, each at most once.

        Args:
            requesting_scope: Module name of the requesting type or caller,
                or ``None`` when unknown.

        Yields:
            Module names in search order.

        """
        modules = dict(sys.modules)
        visited: set[str] = set()

        def visit(name: str) -> bool:
            if name in visited or name not in modules or self._is_ignored(name):
                return False
            visited.add(name)
            return True

        if requesting_scope is not None:
            if visit(requesting_scope):
                yield requesting_scope
            requesting_module = modules.get(requesting_scope)
            if requesting_module is not None:
                for name in _direct_dependencies(requesting_module):
                    if visit(name):
                        yield name

        remaining = [name for name in modules if name not in visited]
        if requesting_scope is not None:
            remaining.sort(key=lambda name: _package_distance(requesting_scope, name))
        for name in remaining:
            if visit(name):
                yield name

    def concrete_types_in(self, scope: str) -> tuple[type[Any], ...]:
        """Return classes defined in ``scope``, nested classes included.

        Enumeration is best effort: a module or class attribute that cannot be
        read is skipped and the classes collected so far are still returned.
        """
        module = sys.modules.get(scope)
        if module is None:
            return ()
        try:
            namespace = dict(vars(module))
        except TypeError:
            logger.debug("Scope %s has no readable namespace", scope)
            return ()

        found: dict[type[Any], None] = {}
        for value in namespace.values():
            try:
                _collect_classes(value, scope=scope, found=found)
            except Exception:  # noqa: BLE001
                logger.debug("Skipping unreadable member of scope %s", scope, exc_info=True)
        return tuple(found)

    def _is_ignored(self, name: str) -> bool:
        return any(
            name == prefix or name.startswith(f"{prefix}.") for prefix in self.ignored_prefixes
        )


def _collect_classes(value: Any, *, scope: str, found: dict[type[Any], None]) -> None:
    if not is_runtime_class(value) or value in found:
        return
    if getattr(value, "__module__", None) != scope:
        return
    found[value] = None
    prefix = f"{value.__qualname__}."
    for member in list(vars(value).values()):
        if is_runtime_class(member) and member.__qualname__.startswith(prefix):
            _collect_classes(member, scope=scope, found=found)


def _direct_dependencies(module: ModuleType) -> list[str]:
    names: dict[str, None] = {}
    try:
        members = list(vars(module).values())
    except TypeError:
        return []
    for member in members:
        if isinstance(member, ModuleType):
            name = member.__name__
        elif inspect.isclass(member) or inspect.isfunction(member):
            name = getattr(member, "__module__", None)
        else:
            continue
        if isinstance(name, str) and name != module.__name__:
            names[name] = None
    return list(names)


def _package_distance(origin: str, other: str) -> tuple[int, int]:
    origin_parts = origin.split(".")
    other_parts = other.split(".")
    common = 0
    for origin_part, other_part in zip(origin_parts, other_parts):
        if origin_part != other_part:
            break
        common += 1
    return len(origin_parts) - common, len(other_parts) - common

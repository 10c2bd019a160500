from __future__ import annotations

import inspect

_PACKAGE = "autowire"


def calling_module() -> str | None:
    """Return the module name of the closest stack frame outside this package.

    The module of the code that called ``Container.resolve`` is the requesting
    scope for a top-level resolution.
    """
    frame = inspect.currentframe()
    try:
        while frame is not None:
            name = frame.f_globals.get("__name__")
            if isinstance(name, str) and not _is_internal(name):
                return name
            frame = frame.f_back
        return None
    finally:
        del frame


def _is_internal(module_name: str) -> bool:
    return module_name == _PACKAGE or module_name.startswith(f"{_PACKAGE}.")

import datetime
import decimal
import enum
import pathlib
import uuid
from typing import Any

from autowire.lock_mode import LockMode

DEFAULT_LOCK_MODE = LockMode.THREAD

DEFAULT_VALUE_TYPES: tuple[type[Any], ...] = (
    pathlib.PurePath,
    datetime.datetime,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    uuid.UUID,
    decimal.Decimal,
    enum.Enum,
)
"""Classes outside ``builtins`` that are values rather than services."""

DEFAULT_IGNORED_SCOPE_PREFIXES: tuple[str, ...] = ()
"""Module-name prefixes that implementation discovery never scans."""

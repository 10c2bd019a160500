from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for singleton construction.

    Use these values for the container-level ``lock_mode`` argument. The
    default, ``THREAD``, guarantees that each singleton is constructed exactly
    once even when several threads request it at the same time.
    """

    THREAD = "thread"
    """Guard singleton construction with a per-type ``threading.RLock``."""

    NONE = "none"
    """Disable locking; concurrent first requests may construct duplicates."""

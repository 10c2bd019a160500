from enum import Enum


class Lifetime(str, Enum):
    """Defines how long a resolved instance is kept by the container."""

    TRANSIENT = "transient"
    """A new instance is created every time the type is resolved."""

    SINGLETON = "singleton"
    """A single instance is created and shared for the lifetime of the container."""

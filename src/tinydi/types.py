from enum import Enum


class Lifetime(str, Enum):
    """Defines the lifetime of a service in the container."""

    TRANSIENT = "transient"
    """A new instance is created every time the service is requested."""

    SINGLETON = "singleton"
    """A single instance is created and shared by the root scope and all of its children."""

    SCOPED = "scoped"
    """Instance is shared within a scope, different instances across scopes."""

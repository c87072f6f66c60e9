"""Configuration enums for type-safe settings.

These enums provide type safety and IDE autocomplete for configuration values.
They inherit from str to maintain JSON serialization compatibility.
"""

from enum import Enum


class StorageBackendType(str, Enum):
    """Storage backend types.

    Determines which key-value store persists the user id and pending queue.
    """

    MEMORY = "memory"
    FILESYSTEM = "filesystem"
    REDIS = "redis"


class Environment(str, Enum):
    """Deployment environments.

    Controls environment-specific behavior like log formatting.
    """

    LOCAL = "local"
    TEST = "test"
    DEV = "dev"
    PRD = "prd"


class PlatformId(str, Enum):
    """Platform identifiers reported on every event."""

    IOS = "ios"
    ANDROID = "android"
    WEB = "web"
    WINDOWS = "windows"
    MAC = "mac"
    LINUX = "linux"

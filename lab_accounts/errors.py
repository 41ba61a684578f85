"""Exception types raised by lab account workflows."""

from __future__ import annotations

from redis.exceptions import RedisError

# Store failures surface as the backend's own exception type, never wrapped.
StoreError = RedisError


class LabAccountError(Exception):
    """Base class for errors raised by the lab account service."""


class InvalidArgumentError(LabAccountError, ValueError):
    """Raised when an operation receives an unusable argument."""


class ConfigurationError(LabAccountError):
    """Raised when account naming configuration is missing."""


class RecordDecodeError(LabAccountError):
    """Raised when a stored account record cannot be decoded."""

    def __init__(self, cache_key: str, reason: str) -> None:
        self.cache_key = cache_key
        self.reason = reason
        super().__init__(f"corrupt account record at {cache_key}: {reason}")


class AccountUnavailableError(LabAccountError, ValueError):
    """Raised when assignment is requested for an account that is not assignable."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"account {username} is not assignable")

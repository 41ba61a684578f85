from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
import os

from .errors import ConfigurationError

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


@dataclass(frozen=True)
class AccountNaming:
    """Naming policy used to derive lab account usernames from an index."""

    prefix: str
    pad_zeroes: bool = False


@dataclass(frozen=True)
class Settings:
    """Runtime configuration values exposed to FastAPI components."""

    app_name: str = "lab-account-service"
    version: str = "0.1.0"
    accounts_prefix: str | None = field(default_factory=lambda: os.getenv("ACCOUNTS_PREFIX"))
    accounts_pad_zeroes: bool = field(default_factory=lambda: _env_flag("ACCOUNTS_PAD_ZEROES"))
    account_list_limit: int = field(
        default_factory=lambda: int(os.getenv("ACCOUNT_LIST_LIMIT", "100"))
    )
    http_host: str = field(default_factory=lambda: os.getenv("HTTP_HOST", "0.0.0.0"))
    http_port: int = field(default_factory=lambda: int(os.getenv("HTTP_PORT", "8000")))
    cache_backend: str = field(
        default_factory=lambda: os.getenv("CACHE_BACKEND", "memory").lower()
    )
    redis_url: str = field(default_factory=lambda: os.getenv("REDIS_URL", ""))

    def naming(self) -> AccountNaming:
        """Return the account naming policy, failing fast when no prefix is configured."""
        if self.accounts_prefix is None:
            raise ConfigurationError("ACCOUNTS_PREFIX must be set to name lab accounts")
        return AccountNaming(prefix=self.accounts_prefix, pad_zeroes=self.accounts_pad_zeroes)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached Settings instance for the running process."""
    return Settings()

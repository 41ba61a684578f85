"""Account service orchestrating lab account transitions over the cache."""

from __future__ import annotations

import logging

from .account import Account
from .record import AccountRecord
from ..cache import CacheStore
from ..config import AccountNaming
from ..errors import AccountUnavailableError, InvalidArgumentError
from ..metrics import ACCOUNT_TRANSITIONS

logger = logging.getLogger(__name__)


class LabAccountService:
    """Lab account workflows backed by the shared cache store."""

    def __init__(self, store: CacheStore, naming: AccountNaming) -> None:
        """Store dependencies used to build account handles."""
        self._store = store
        self._naming = naming

    def account(self, num: int) -> Account:
        """Return a handle for the account at index ``num``."""
        return Account(num, self._store, self._naming)

    async def get_account(self, num: int) -> AccountRecord:
        return await self.account(num).get_user_info()

    async def list_accounts(self, start: int, count: int) -> list[AccountRecord]:
        """Return records for the caller-chosen index range ``[start, start + count)``."""
        if count < 0:
            raise InvalidArgumentError("count must not be negative")
        return [await self.account(num).get_user_info() for num in range(start, start + count)]

    async def assign_account(self, num: int, ip: str, email: str) -> AccountRecord:
        """Assign the account when it is currently assignable.

        The assignability check and the write are separate store calls; a
        concurrent assigner can still slip in between them.
        """
        account = self.account(num)
        if not await account.is_assignable():
            raise AccountUnavailableError(account.username)
        await account.assign(ip, email)
        ACCOUNT_TRANSITIONS.labels(operation="assign").inc()
        logger.info("assigned %s", account.username)
        logger.debug("%s assigned to %s (%s)", account.username, email, ip)
        return await account.get_user_info()

    async def release_account(self, num: int) -> AccountRecord:
        account = self.account(num)
        await account.unassign()
        ACCOUNT_TRANSITIONS.labels(operation="unassign").inc()
        logger.info("released %s", account.username)
        return await account.get_user_info()

    async def enable_account(self, num: int) -> AccountRecord:
        account = self.account(num)
        await account.enable()
        ACCOUNT_TRANSITIONS.labels(operation="enable").inc()
        logger.info("enabled %s", account.username)
        return await account.get_user_info()

    async def disable_account(self, num: int) -> AccountRecord:
        account = self.account(num)
        await account.disable()
        ACCOUNT_TRANSITIONS.labels(operation="disable").inc()
        logger.info("disabled %s", account.username)
        return await account.get_user_info()

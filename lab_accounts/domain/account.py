"""Lab account handle over a single cached record."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
import logging

from ..cache import CacheStore
from ..config import AccountNaming
from ..errors import ConfigurationError, InvalidArgumentError
from .record import AccountRecord, decode_record, encode_record

logger = logging.getLogger(__name__)


def account_username(num: int, naming: AccountNaming) -> str:
    """Return the canonical username for account ``num`` under ``naming``."""
    if num < 10 and naming.pad_zeroes:
        return f"{naming.prefix}0{num}"
    return f"{naming.prefix}{num}"


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Account:
    """A lab account that can be lent out to one requester at a time.

    Mutations are read-then-write sequences against the store with no
    compare-and-swap, so concurrent writers race and the last write wins.
    """

    def __init__(self, num: int, store: CacheStore, naming: AccountNaming | None) -> None:
        """Derive the account identity for index ``num``."""
        if naming is None or naming.prefix is None:
            raise ConfigurationError("account naming prefix is not configured")
        if isinstance(num, bool) or not isinstance(num, int) or num < 0:
            raise InvalidArgumentError(f"account index must be a non-negative integer, got {num!r}")

        self.num = num
        self.username = account_username(num, naming)
        self.cache_key = f"user:{self.username}"
        self._store = store

    def __repr__(self) -> str:
        return f"Account({self.username!r})"

    async def fetch_record(self) -> AccountRecord | None:
        """Return the stored record, or ``None`` when the key was never written."""
        raw = await self._store.get(self.cache_key)
        if raw is None:
            return None
        return decode_record(self.cache_key, raw)

    async def get_record(self) -> AccountRecord:
        """Return the stored record, defaulting to an unassigned, enabled record."""
        record = await self.fetch_record()
        if record is None:
            return AccountRecord(username=self.username)
        return record

    async def get_user_info(self) -> AccountRecord:
        """Return a copy of the current record that callers are free to mutate."""
        return replace(await self.get_record())

    async def is_assignable(self) -> bool:
        record = await self.get_record()
        logger.debug("checking if %s is assignable: %s", self.username, record)
        return not record.assigned_ts and not record.disabled

    async def is_assigned(self) -> bool:
        """Return ``True`` when the account currently carries an assignment."""
        logger.debug("checking if %s is assigned", self.username)
        record = await self.get_record()
        assigned = bool(record.assigned_ts)
        logger.debug("%s is %s", self.username, "assigned" if assigned else "not assigned")
        return assigned

    async def assign(self, ip: str, email: str) -> None:
        """Assign the account to the requester at ``ip``/``email``.

        The previous record is replaced outright, which also clears any
        ``disabled`` flag it carried.
        """
        if not ip:
            raise InvalidArgumentError("account assignment requires an ip")
        if not email:
            raise InvalidArgumentError("account assignment requires an email")

        await self._write(
            AccountRecord(
                username=self.username,
                assigned_ts=_utc_timestamp(),
                ip=ip,
                email=email,
                disabled=False,
            )
        )

    async def unassign(self) -> None:
        """Free the account for reassignment, keeping its ``disabled`` flag."""
        record = await self.get_record()
        await self._write(AccountRecord(username=self.username, disabled=record.disabled or False))

    async def enable(self) -> None:
        await self._set_disabled(False)

    async def disable(self) -> None:
        # Leaves any current assignment in place; only assignability changes.
        await self._set_disabled(True)

    async def _set_disabled(self, disabled: bool) -> None:
        record = await self.get_record()
        await self._write(
            AccountRecord(
                username=self.username,
                assigned_ts=record.assigned_ts,
                ip=record.ip,
                email=record.email,
                disabled=disabled,
            )
        )

    async def _write(self, record: AccountRecord) -> None:
        logger.debug("setting cached data for %s to %s", self.username, record.to_wire())
        await self._store.set(self.cache_key, encode_record(record))

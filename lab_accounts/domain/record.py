"""Cached state describing a lab account's assignment and disablement."""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any

from ..errors import RecordDecodeError

_OPTIONAL_STRINGS = ("assignedTs", "email", "ip")


@dataclass(slots=True)
class AccountRecord:
    """Full snapshot of one account record; every write replaces all fields."""

    username: str
    assigned_ts: str | None = None
    email: str | None = None
    ip: str | None = None
    disabled: bool = False

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready mapping using the stored field names."""
        return {
            "assignedTs": self.assigned_ts,
            "ip": self.ip,
            "disabled": self.disabled,
            "email": self.email,
            "username": self.username,
        }


def encode_record(record: AccountRecord) -> bytes:
    return json.dumps(record.to_wire()).encode("utf-8")


def decode_record(cache_key: str, raw: bytes) -> AccountRecord:
    """Parse stored bytes into an :class:`AccountRecord`.

    Keys missing from the payload read as ``None``/``False``. Anything that is
    not a JSON object with correctly typed fields raises
    :class:`~lab_accounts.errors.RecordDecodeError`.
    """
    try:
        data = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as exc:
        raise RecordDecodeError(cache_key, f"invalid JSON ({exc})") from exc

    if not isinstance(data, dict):
        raise RecordDecodeError(cache_key, f"expected an object, got {type(data).__name__}")

    username = data.get("username")
    if not isinstance(username, str) or not username:
        raise RecordDecodeError(cache_key, "username missing")
    for name in _OPTIONAL_STRINGS:
        value = data.get(name)
        if value is not None and not isinstance(value, str):
            raise RecordDecodeError(cache_key, f"{name} must be a string or null")
    disabled = data.get("disabled")
    if disabled is not None and not isinstance(disabled, bool):
        raise RecordDecodeError(cache_key, "disabled must be a boolean or null")

    return AccountRecord(
        username=username,
        assigned_ts=data.get("assignedTs"),
        email=data.get("email"),
        ip=data.get("ip"),
        disabled=bool(disabled),
    )

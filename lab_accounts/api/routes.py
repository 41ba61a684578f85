"""HTTP route definitions for the lab account service."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel, EmailStr

from ..config import get_settings
from ..domain.record import AccountRecord
from ..domain.service import LabAccountService
from ..errors import AccountUnavailableError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1")

settings = get_settings()


class AccountResponse(BaseModel):
    """Serialised representation of an `AccountRecord`."""

    username: str
    assigned_ts: str | None
    email: str | None
    ip: str | None
    disabled: bool
    assigned: bool
    assignable: bool

    @classmethod
    def from_domain(cls, record: AccountRecord) -> "AccountResponse":
        """Build a response model from the cached record."""
        assigned = bool(record.assigned_ts)
        return cls(
            username=record.username,
            assigned_ts=record.assigned_ts,
            email=record.email,
            ip=record.ip,
            disabled=record.disabled,
            assigned=assigned,
            assignable=not assigned and not record.disabled,
        )


class AssignmentRequest(BaseModel):
    """Payload accepted when lending an account to a requester."""

    email: EmailStr
    ip: str | None = None


class AccountListResponse(BaseModel):
    """Envelope for a contiguous range of account records."""

    items: list[AccountResponse]


def get_service(request: Request) -> LabAccountService:
    """Resolve the `LabAccountService` stored on the FastAPI application state."""
    service: LabAccountService = request.app.state.account_service
    return service


@router.get("/accounts", response_model=AccountListResponse)
async def list_accounts(
    start: int = Query(default=1, ge=0),
    count: int = Query(default=10, ge=0, le=settings.account_list_limit),
    service: LabAccountService = Depends(get_service),
) -> AccountListResponse:
    """Return the records for accounts ``start`` through ``start + count - 1``."""
    records = await service.list_accounts(start, count)
    return AccountListResponse(items=[AccountResponse.from_domain(record) for record in records])


@router.get("/accounts/{num}", response_model=AccountResponse)
async def get_account(
    num: int,
    service: LabAccountService = Depends(get_service),
) -> AccountResponse:
    try:
        record = await service.get_account(num)
    except ValueError as exc:
        raise _http_error_from_value_error(exc) from exc
    return AccountResponse.from_domain(record)


@router.put("/accounts/{num}/assignment", response_model=AccountResponse)
async def assign_account(
    num: int,
    payload: AssignmentRequest,
    request: Request,
    service: LabAccountService = Depends(get_service),
) -> AccountResponse:
    """Lend the account to the requester, defaulting the IP to the calling client."""
    ip = payload.ip
    if ip is None:
        ip = request.client.host if request.client else ""
    try:
        record = await service.assign_account(num, ip, payload.email)
    except ValueError as exc:
        raise _http_error_from_value_error(exc) from exc
    return AccountResponse.from_domain(record)


@router.delete("/accounts/{num}/assignment", response_model=AccountResponse)
async def release_account(
    num: int,
    service: LabAccountService = Depends(get_service),
) -> AccountResponse:
    try:
        record = await service.release_account(num)
    except ValueError as exc:
        raise _http_error_from_value_error(exc) from exc
    return AccountResponse.from_domain(record)


@router.post("/accounts/{num}/enable", response_model=AccountResponse)
async def enable_account(
    num: int,
    service: LabAccountService = Depends(get_service),
) -> AccountResponse:
    try:
        record = await service.enable_account(num)
    except ValueError as exc:
        raise _http_error_from_value_error(exc) from exc
    return AccountResponse.from_domain(record)


@router.post("/accounts/{num}/disable", response_model=AccountResponse)
async def disable_account(
    num: int,
    service: LabAccountService = Depends(get_service),
) -> AccountResponse:
    """Disable the account without touching its current assignment."""
    try:
        record = await service.disable_account(num)
    except ValueError as exc:
        raise _http_error_from_value_error(exc) from exc
    return AccountResponse.from_domain(record)


def _http_error_from_value_error(exc: ValueError) -> HTTPException:
    status_code = status.HTTP_400_BAD_REQUEST
    if isinstance(exc, AccountUnavailableError):
        status_code = status.HTTP_409_CONFLICT
    logger.info("rejecting account request: %s", exc)
    return HTTPException(status_code=status_code, detail=str(exc))

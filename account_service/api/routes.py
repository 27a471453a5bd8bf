"""HTTP route definitions for the account service."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel

from ..domain.account import AccountCommand, AccountEvent, AccountStatus
from ..domain.contracts import AccountPatch, CreateAccountInput
from ..domain.errors import (
    AccountError,
    Conflict,
    DuplicateKey,
    InvalidTransition,
    NotFound,
)
from ..domain.service import AccountService
from ..schemas import AccountEventSnapshot, AccountSnapshot

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1")


class CreateAccountRequest(BaseModel):
    """Payload accepted when opening an account."""

    user_id: int
    account_number: str
    default_account: bool = False


class UpdateAccountRequest(BaseModel):
    """Full replacement of an account's mutable fields."""

    account_id: int | None = None
    user_id: int
    account_number: str
    default_account: bool = False
    status: AccountStatus


class AppendEventRequest(BaseModel):
    event_type: str


class CommandsResponse(BaseModel):
    """Commands the account's current status permits."""

    account_id: int
    commands: list[AccountCommand]


def get_service(request: Request) -> AccountService:
    """Resolve the `AccountService` stored on the FastAPI application state."""
    service: AccountService = request.app.state.account_service
    return service


@router.post("/accounts", response_model=AccountSnapshot, status_code=status.HTTP_201_CREATED)
def create_account(
    payload: CreateAccountRequest,
    service: AccountService = Depends(get_service),
) -> AccountSnapshot:
    """Open a pending account."""
    try:
        account = service.create_account(
            CreateAccountInput(
                user_id=payload.user_id,
                account_number=payload.account_number,
                default_account=payload.default_account,
            )
        )
    except AccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    return AccountSnapshot.from_domain(account)


@router.get("/accounts/{account_id}", response_model=AccountSnapshot)
def get_account(
    account_id: int,
    service: AccountService = Depends(get_service),
) -> AccountSnapshot:
    try:
        account = service.get_account(account_id)
    except AccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    return AccountSnapshot.from_domain(account)


@router.put("/accounts/{account_id}", response_model=AccountSnapshot)
def update_account(
    account_id: int,
    payload: UpdateAccountRequest,
    service: AccountService = Depends(get_service),
) -> AccountSnapshot:
    """Replace the mutable fields of an account without recording an event."""
    try:
        account = service.update_account(
            account_id,
            AccountPatch(
                account_id=payload.account_id,
                user_id=payload.user_id,
                account_number=payload.account_number,
                default_account=payload.default_account,
                status=payload.status,
            ),
        )
    except AccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    return AccountSnapshot.from_domain(account)


@router.delete("/accounts/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(
    account_id: int,
    service: AccountService = Depends(get_service),
) -> Response:
    try:
        service.delete_account(account_id)
    except AccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/accounts/{account_id}/events", response_model=list[AccountEventSnapshot])
def list_account_events(
    account_id: int,
    service: AccountService = Depends(get_service),
) -> list[AccountEventSnapshot]:
    """Return the account's event log in append order."""
    try:
        account = service.get_account(account_id)
    except AccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    return [AccountEventSnapshot.from_domain(event) for event in account.events]


@router.post(
    "/accounts/{account_id}/events",
    response_model=AccountEventSnapshot,
    status_code=status.HTTP_201_CREATED,
)
def append_account_event(
    account_id: int,
    payload: AppendEventRequest,
    service: AccountService = Depends(get_service),
) -> AccountEventSnapshot:
    try:
        event = service.append_event(account_id, AccountEvent(event_type=payload.event_type))
    except AccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    return AccountEventSnapshot.from_domain(event)


@router.get("/accounts/{account_id}/commands", response_model=CommandsResponse)
def list_account_commands(
    account_id: int,
    service: AccountService = Depends(get_service),
) -> CommandsResponse:
    try:
        commands = service.available_commands(account_id)
    except AccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    return CommandsResponse(account_id=account_id, commands=commands)


@router.post("/accounts/{account_id}/commands/{command}", response_model=AccountSnapshot)
def apply_account_command(
    account_id: int,
    command: str,
    service: AccountService = Depends(get_service),
) -> AccountSnapshot:
    """Apply a lifecycle command such as ``CONFIRM_ACCOUNT`` to the account."""
    try:
        account = service.apply_command(account_id, command)
    except AccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    return AccountSnapshot.from_domain(account)


def _http_error_from_account_error(exc: AccountError) -> HTTPException:
    status_code = status.HTTP_400_BAD_REQUEST
    if isinstance(exc, NotFound):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (DuplicateKey, Conflict, InvalidTransition)):
        status_code = status.HTTP_409_CONFLICT
    logger.debug("account request rejected with %s: %s", status_code, exc)
    return HTTPException(status_code=status_code, detail=str(exc))

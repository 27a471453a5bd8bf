"""Account status transition table.

Every legal ``(status, command)`` pair is listed in :data:`TRANSITIONS`; any
pair missing from it is rejected with :class:`InvalidTransition`.
"""

from __future__ import annotations

from dataclasses import dataclass

from .account import AccountCommand, AccountEventType, AccountStatus
from .errors import InvalidCommand, InvalidTransition


@dataclass(frozen=True, slots=True)
class Transition:
    """Outcome of a legal command: the status to move to and the event to record."""

    source: AccountStatus
    target: AccountStatus
    event_type: AccountEventType


_S = AccountStatus
_C = AccountCommand
_E = AccountEventType

TRANSITIONS: dict[tuple[AccountStatus, AccountCommand], tuple[AccountStatus, AccountEventType]] = {
    (_S.ACCOUNT_PENDING, _C.CONFIRM_ACCOUNT): (_S.ACCOUNT_CONFIRMED, _E.ACCOUNT_CONFIRMED),
    (_S.ACCOUNT_CONFIRMED, _C.ACTIVATE_ACCOUNT): (_S.ACCOUNT_ACTIVE, _E.ACCOUNT_ACTIVATED),
    (_S.ACCOUNT_SUSPENDED, _C.ACTIVATE_ACCOUNT): (_S.ACCOUNT_ACTIVE, _E.ACCOUNT_ACTIVATED),
    (_S.ACCOUNT_ARCHIVED, _C.ACTIVATE_ACCOUNT): (_S.ACCOUNT_ACTIVE, _E.ACCOUNT_ACTIVATED),
    (_S.ACCOUNT_ACTIVE, _C.SUSPEND_ACCOUNT): (_S.ACCOUNT_SUSPENDED, _E.ACCOUNT_SUSPENDED),
    (_S.ACCOUNT_ACTIVE, _C.ARCHIVE_ACCOUNT): (_S.ACCOUNT_ARCHIVED, _E.ACCOUNT_ARCHIVED),
}


def parse_command(token: AccountCommand | str) -> AccountCommand:
    """Resolve a command token, accepting enum members or their (case-insensitive) values."""
    if isinstance(token, AccountCommand):
        return token
    if isinstance(token, str):
        try:
            return AccountCommand(token.strip().upper())
        except ValueError:
            pass
    raise InvalidCommand(token)


def transition(status: AccountStatus, command: AccountCommand) -> Transition:
    """Return the transition for ``command`` applied in ``status`` or raise ``InvalidTransition``."""
    outcome = TRANSITIONS.get((status, command))
    if outcome is None:
        raise InvalidTransition(status, command, _rejection_reason(status, command))
    target, event_type = outcome
    return Transition(source=status, target=target, event_type=event_type)


def available_commands(status: AccountStatus) -> list[AccountCommand]:
    """List the commands that are legal for an account in ``status``, in declaration order."""
    return [command for command in AccountCommand if (status, command) in TRANSITIONS]


def _rejection_reason(status: AccountStatus, command: AccountCommand) -> str:
    if command is _C.CONFIRM_ACCOUNT:
        return "the account has already been confirmed"
    if command is _C.ACTIVATE_ACCOUNT:
        if status is _S.ACCOUNT_ACTIVE:
            return "the account is already active"
        return "the account cannot be activated"
    if command is _C.SUSPEND_ACCOUNT:
        return "an inactive account cannot be suspended"
    return "an inactive account cannot be archived"

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class AccountStatus(str, Enum):
    ACCOUNT_PENDING = "ACCOUNT_PENDING"
    ACCOUNT_CONFIRMED = "ACCOUNT_CONFIRMED"
    ACCOUNT_ACTIVE = "ACCOUNT_ACTIVE"
    ACCOUNT_SUSPENDED = "ACCOUNT_SUSPENDED"
    ACCOUNT_ARCHIVED = "ACCOUNT_ARCHIVED"


class AccountCommand(str, Enum):
    CONFIRM_ACCOUNT = "CONFIRM_ACCOUNT"
    ACTIVATE_ACCOUNT = "ACTIVATE_ACCOUNT"
    SUSPEND_ACCOUNT = "SUSPEND_ACCOUNT"
    ARCHIVE_ACCOUNT = "ARCHIVE_ACCOUNT"


class AccountEventType(str, Enum):
    ACCOUNT_CREATED = "ACCOUNT_CREATED"
    ACCOUNT_CONFIRMED = "ACCOUNT_CONFIRMED"
    ACCOUNT_ACTIVATED = "ACCOUNT_ACTIVATED"
    ACCOUNT_SUSPENDED = "ACCOUNT_SUSPENDED"
    ACCOUNT_ARCHIVED = "ACCOUNT_ARCHIVED"


@dataclass(frozen=True, slots=True)
class AccountEvent:
    """Immutable entry in an account's append-only event log.

    ``account_id`` is a reference to the owning account, never the account object.
    ``event_id`` is assigned by the event store and orders the log.
    """

    event_type: str
    account_id: int | None = None
    event_id: int | None = None
    created_at: datetime | None = None


@dataclass(slots=True)
class Account:
    """Aggregate root carrying the current lifecycle status and its event log."""

    user_id: int
    account_number: str
    default_account: bool = False
    status: AccountStatus = AccountStatus.ACCOUNT_PENDING
    account_id: int | None = None
    events: list[AccountEvent] = field(default_factory=list)
    created_at: datetime | None = None
    last_modified: datetime | None = None

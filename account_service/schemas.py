"""Pydantic representations of accounts shared by the cache and the HTTP layer."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from .domain.account import Account, AccountEvent, AccountStatus


class AccountEventSnapshot(BaseModel):
    event_id: int | None = None
    account_id: int | None = None
    event_type: str
    created_at: datetime | None = None

    @classmethod
    def from_domain(cls, event: AccountEvent) -> "AccountEventSnapshot":
        return cls(
            event_id=event.event_id,
            account_id=event.account_id,
            event_type=event.event_type,
            created_at=event.created_at,
        )

    def to_domain(self) -> AccountEvent:
        return AccountEvent(
            event_type=self.event_type,
            account_id=self.account_id,
            event_id=self.event_id,
            created_at=self.created_at,
        )


class AccountSnapshot(BaseModel):
    """Serialised representation of an ``Account`` aggregate and its event log."""

    account_id: int | None = None
    user_id: int
    account_number: str
    default_account: bool = False
    status: AccountStatus
    events: list[AccountEventSnapshot] = []
    created_at: datetime | None = None
    last_modified: datetime | None = None

    @classmethod
    def from_domain(cls, account: Account) -> "AccountSnapshot":
        """Build a snapshot from the domain aggregate."""
        return cls(
            account_id=account.account_id,
            user_id=account.user_id,
            account_number=account.account_number,
            default_account=account.default_account,
            status=account.status,
            events=[AccountEventSnapshot.from_domain(event) for event in account.events],
            created_at=account.created_at,
            last_modified=account.last_modified,
        )

    def to_domain(self) -> Account:
        """Rebuild the domain aggregate from the snapshot."""
        return Account(
            account_id=self.account_id,
            user_id=self.user_id,
            account_number=self.account_number,
            default_account=self.default_account,
            status=AccountStatus(self.status),
            events=[event.to_domain() for event in self.events],
            created_at=self.created_at,
            last_modified=self.last_modified,
        )

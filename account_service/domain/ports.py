"""Interfaces the account workflows consume from storage and caching adapters."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol

from .account import Account, AccountEvent


class AccountStore(Protocol):
    def find_by_id(self, account_id: int, *, for_update: bool = False) -> Account | None: ...

    def find_by_user_id(self, user_id: int) -> Account | None: ...

    def find_by_account_number(self, account_number: str) -> Account | None: ...

    def exists(self, account_id: int) -> bool: ...

    def save(self, account: Account) -> Account: ...

    def delete(self, account_id: int) -> None: ...


class EventStore(Protocol):
    def create_event(self, event: AccountEvent) -> AccountEvent: ...

    def list_for_account(self, account_id: int) -> list[AccountEvent]: ...


class StoreSession(Protocol):
    """Account and event stores bound to one open transaction."""

    accounts: AccountStore
    events: EventStore


class UnitOfWork(Protocol):
    def begin(self) -> AbstractContextManager[StoreSession]:
        """Open a transaction; commit on normal exit, roll back when the block raises."""
        ...


class AccountCache(Protocol):
    def get(self, account_id: int) -> Account | None: ...

    def put(self, account: Account) -> None: ...

    def put_if_newer(self, account: Account) -> None:
        """Store unless the cached entry is at least as recent; used by read-through loads."""
        ...

    def evict(self, account_id: int) -> None: ...

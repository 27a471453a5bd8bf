from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from account_service.api import routes
from account_service.cache import InMemoryAccountCache
from account_service.domain.account import Account, AccountEvent
from account_service.domain.errors import DuplicateKey
from account_service.domain.service import AccountService


@dataclass
class FakeState:
    accounts: dict[int, Account] = field(default_factory=dict)
    events: list[AccountEvent] = field(default_factory=list)
    account_seq: int = 0
    event_seq: int = 0


class FakeAccountRepository:
    """In-memory account store mimicking the Postgres unique constraints."""

    def __init__(self, state: FakeState) -> None:
        self._state = state

    def find_by_id(self, account_id: int, *, for_update: bool = False):
        return self._load(self._state.accounts.get(account_id))

    def find_by_user_id(self, user_id: int):
        matches = [a for a in self._state.accounts.values() if a.user_id == user_id]
        return self._load(matches[0] if matches else None)

    def find_by_account_number(self, account_number: str):
        matches = [a for a in self._state.accounts.values() if a.account_number == account_number]
        return self._load(matches[0] if matches else None)

    def exists(self, account_id: int) -> bool:
        return account_id in self._state.accounts

    def save(self, account: Account) -> Account:
        for other in self._state.accounts.values():
            if other.account_id == account.account_id:
                continue
            if other.user_id == account.user_id or other.account_number == account.account_number:
                raise DuplicateKey("unique constraint violated")
        now = datetime.now(timezone.utc)
        if account.account_id is None:
            self._state.account_seq += 1
            account.account_id = self._state.account_seq
            account.created_at = now
        account.last_modified = now
        self._state.accounts[account.account_id] = replace(copy.deepcopy(account), events=[])
        return account

    def delete(self, account_id: int) -> None:
        self._state.accounts.pop(account_id, None)

    def _load(self, stored: Account | None):
        if stored is None:
            return None
        account = copy.deepcopy(stored)
        account.events = [
            copy.deepcopy(e) for e in self._state.events if e.account_id == stored.account_id
        ]
        return account


class FakeEventRepository:
    def __init__(self, state: FakeState, fail: bool) -> None:
        self._state = state
        self._fail = fail

    def create_event(self, event: AccountEvent) -> AccountEvent:
        if self._fail:
            raise RuntimeError("event store unavailable")
        self._state.event_seq += 1
        stored = replace(
            event,
            event_id=self._state.event_seq,
            created_at=datetime.now(timezone.utc),
        )
        self._state.events.append(copy.deepcopy(stored))
        return stored

    def list_for_account(self, account_id: int) -> list[AccountEvent]:
        return [copy.deepcopy(e) for e in self._state.events if e.account_id == account_id]


@dataclass
class FakeSession:
    accounts: FakeAccountRepository
    events: FakeEventRepository


class FakeUnitOfWork:
    """Unit of work that restores a snapshot of the store when the block raises."""

    def __init__(self) -> None:
        self.state = FakeState()
        self.fail_events = False
        self.commits = 0
        self.rollbacks = 0

    @contextmanager
    def begin(self):
        snapshot = copy.deepcopy(self.state)
        try:
            yield FakeSession(
                accounts=FakeAccountRepository(self.state),
                events=FakeEventRepository(self.state, self.fail_events),
            )
        except Exception:
            self.state.__dict__.update(snapshot.__dict__)
            self.rollbacks += 1
            raise
        self.commits += 1


@pytest.fixture
def unit_of_work() -> FakeUnitOfWork:
    return FakeUnitOfWork()


@pytest.fixture
def cache() -> InMemoryAccountCache:
    return InMemoryAccountCache()


@pytest.fixture
def service(unit_of_work, cache) -> AccountService:
    return AccountService(unit_of_work, cache)


@pytest.fixture
def api_client(service):
    """Provide a FastAPI test client with isolated state."""
    app = FastAPI()
    app.include_router(routes.router)
    app.state.account_service = service

    with TestClient(app) as client:
        yield client, service

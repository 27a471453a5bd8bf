"""Account service orchestrating lifecycle transitions, persistence, and the event log."""

from __future__ import annotations

from dataclasses import replace
import logging

from .account import Account, AccountCommand, AccountEvent, AccountEventType, AccountStatus
from .contracts import AccountPatch, CreateAccountInput
from .errors import Conflict, DuplicateKey, InvalidTransition, NotFound
from .events import EventService
from .lifecycle import available_commands, parse_command, transition
from .ports import AccountCache, StoreSession, UnitOfWork

logger = logging.getLogger(__name__)


class AccountService:
    """Account workflows with event sourcing support.

    Every public operation runs in a single unit of work. Events appended by
    a workflow commit together with the account change that produced them, so
    the event log can be used to remediate distributed operations that failed
    part way through. The cache is refreshed or evicted only after commit.
    """

    def __init__(self, unit_of_work: UnitOfWork, cache: AccountCache) -> None:
        """Store the transaction factory and the account read cache."""
        self._unit_of_work = unit_of_work
        self._cache = cache

    def create_account(self, payload: CreateAccountInput) -> Account:
        """Persist a new pending account and record its creation event."""
        with self._unit_of_work.begin() as session:
            if session.accounts.find_by_user_id(payload.user_id) is not None:
                raise DuplicateKey("an account with the supplied user id already exists")
            if session.accounts.find_by_account_number(payload.account_number) is not None:
                raise DuplicateKey("an account with the supplied account number already exists")

            account = session.accounts.save(
                Account(
                    user_id=payload.user_id,
                    account_number=payload.account_number,
                    default_account=payload.default_account,
                    status=AccountStatus.ACCOUNT_PENDING,
                )
            )
            self._append(session, account, AccountEvent(AccountEventType.ACCOUNT_CREATED.value))

        self._cache.evict(account.account_id)
        logger.info("account %s created for user %s", account.account_id, account.user_id)
        return account

    def get_account(self, account_id: int) -> Account:
        """Return the account with the given id, reading through the cache."""
        cached = self._cache.get(account_id)
        if cached is not None:
            return cached
        with self._unit_of_work.begin() as session:
            account = session.accounts.find_by_id(account_id)
        if account is None:
            raise NotFound(account_id)
        self._cache.put_if_newer(account)
        return account

    def update_account(self, account_id: int, patch: AccountPatch) -> Account:
        """Overwrite the mutable fields of a stored account.

        This is the raw update path: ``status`` is replaced as given, without
        consulting the transition table, and no event is appended. Use
        :meth:`apply_command` for lifecycle changes.
        """
        if patch.account_id is not None and patch.account_id != account_id:
            raise Conflict("the account id in the request body must match the resource id")
        with self._unit_of_work.begin() as session:
            account = self._overwrite(session, self._load(session, account_id), patch)
        self._cache.put(account)
        return account

    def delete_account(self, account_id: int) -> bool:
        """Remove an account; its recorded events are left to the store's retention policy."""
        with self._unit_of_work.begin() as session:
            if not session.accounts.exists(account_id):
                raise NotFound(account_id)
            session.accounts.delete(account_id)
        self._cache.evict(account_id)
        logger.info("account %s deleted", account_id)
        return True

    def append_event(self, account_id: int, event: AccountEvent) -> AccountEvent:
        """Append an event to the log of an existing account and return the stored event."""
        with self._unit_of_work.begin() as session:
            account = self._load(session, account_id)
            stored = self._append(session, account, event)
        self._cache.put(account)
        return stored

    def apply_command(self, account_id: int, command: AccountCommand | str) -> Account:
        """Apply a lifecycle command, committing the status change and its event together."""
        command = parse_command(command)
        with self._unit_of_work.begin() as session:
            account = self._load(session, account_id)
            try:
                step = transition(account.status, command)
            except InvalidTransition as exc:
                logger.warning("account %s rejected %s: %s", account_id, command.value, exc.reason)
                raise
            account = self._overwrite(
                session,
                account,
                AccountPatch(
                    user_id=account.user_id,
                    account_number=account.account_number,
                    default_account=account.default_account,
                    status=step.target,
                ),
            )
            self._append(session, account, AccountEvent(step.event_type.value))

        self._cache.put(account)
        logger.info(
            "account %s moved from %s to %s",
            account_id,
            step.source.value,
            step.target.value,
        )
        return account

    def available_commands(self, account_id: int) -> list[AccountCommand]:
        """Return the commands that the account's current status permits."""
        return available_commands(self.get_account(account_id).status)

    def _load(self, session: StoreSession, account_id: int) -> Account:
        account = session.accounts.find_by_id(account_id, for_update=True)
        if account is None:
            raise NotFound(account_id)
        return account

    def _overwrite(self, session: StoreSession, current: Account, patch: AccountPatch) -> Account:
        current.user_id = patch.user_id
        current.account_number = patch.account_number
        current.default_account = patch.default_account
        current.status = patch.status
        return session.accounts.save(current)

    def _append(self, session: StoreSession, account: Account, event: AccountEvent) -> AccountEvent:
        stored = EventService(session.events).create_event(
            replace(event, account_id=account.account_id)
        )
        account.events.append(stored)
        session.accounts.save(account)
        return stored

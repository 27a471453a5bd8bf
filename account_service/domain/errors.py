"""Errors raised by account workflows before any state is mutated."""

from __future__ import annotations

from .account import AccountCommand, AccountStatus


class AccountError(ValueError):
    """Base class for account precondition failures."""


class DuplicateKey(AccountError):
    """A unique account attribute is already taken."""


class NotFound(AccountError):
    """The referenced account does not exist."""

    def __init__(self, account_id: int | None) -> None:
        super().__init__(f"account {account_id} not found")
        self.account_id = account_id


class Conflict(AccountError):
    """Identifiers supplied for the same account disagree."""


class InvalidTransition(AccountError):
    """The command is not legal for the account's current status."""

    def __init__(self, status: AccountStatus, command: AccountCommand, reason: str) -> None:
        super().__init__(f"cannot apply {command.value} to account in {status.value}: {reason}")
        self.status = status
        self.command = command
        self.reason = reason


class InvalidCommand(AccountError):
    """The command token is not recognised."""

    def __init__(self, command: object) -> None:
        super().__init__(f"invalid command: {command!r}")
        self.command = command

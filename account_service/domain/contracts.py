"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass

from .account import AccountStatus


@dataclass(slots=True)
class CreateAccountInput:
    """Inputs required to open a new account; the status always starts pending."""

    user_id: int
    account_number: str
    default_account: bool = False


@dataclass(slots=True)
class AccountPatch:
    """Replacement values for the mutable fields of a stored account.

    ``account_id`` is optional; when present it must match the target id.
    """

    user_id: int
    account_number: str
    default_account: bool
    status: AccountStatus
    account_id: int | None = None

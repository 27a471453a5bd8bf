from __future__ import annotations

import itertools

import pytest

from account_service.domain.account import AccountCommand, AccountEventType, AccountStatus
from account_service.domain.errors import InvalidCommand, InvalidTransition
from account_service.domain.lifecycle import available_commands, parse_command, transition

S = AccountStatus
C = AccountCommand

EXPECTED = {
    (S.ACCOUNT_PENDING, C.CONFIRM_ACCOUNT): (S.ACCOUNT_CONFIRMED, AccountEventType.ACCOUNT_CONFIRMED),
    (S.ACCOUNT_CONFIRMED, C.ACTIVATE_ACCOUNT): (S.ACCOUNT_ACTIVE, AccountEventType.ACCOUNT_ACTIVATED),
    (S.ACCOUNT_SUSPENDED, C.ACTIVATE_ACCOUNT): (S.ACCOUNT_ACTIVE, AccountEventType.ACCOUNT_ACTIVATED),
    (S.ACCOUNT_ARCHIVED, C.ACTIVATE_ACCOUNT): (S.ACCOUNT_ACTIVE, AccountEventType.ACCOUNT_ACTIVATED),
    (S.ACCOUNT_ACTIVE, C.SUSPEND_ACCOUNT): (S.ACCOUNT_SUSPENDED, AccountEventType.ACCOUNT_SUSPENDED),
    (S.ACCOUNT_ACTIVE, C.ARCHIVE_ACCOUNT): (S.ACCOUNT_ARCHIVED, AccountEventType.ACCOUNT_ARCHIVED),
}

ALL_PAIRS = list(itertools.product(AccountStatus, AccountCommand))


@pytest.mark.parametrize("status,command", [pair for pair in ALL_PAIRS if pair in EXPECTED])
def test_legal_transitions_follow_the_table(status, command):
    step = transition(status, command)
    assert (step.target, step.event_type) == EXPECTED[(status, command)]
    assert step.source is status


@pytest.mark.parametrize("status,command", [pair for pair in ALL_PAIRS if pair not in EXPECTED])
def test_illegal_transitions_are_rejected(status, command):
    with pytest.raises(InvalidTransition) as excinfo:
        transition(status, command)
    assert excinfo.value.status is status
    assert excinfo.value.command is command
    assert status.value in str(excinfo.value)
    assert command.value in str(excinfo.value)


def test_activate_rejection_reason_distinguishes_active_accounts():
    with pytest.raises(InvalidTransition, match="already active"):
        transition(S.ACCOUNT_ACTIVE, C.ACTIVATE_ACCOUNT)
    with pytest.raises(InvalidTransition, match="cannot be activated"):
        transition(S.ACCOUNT_PENDING, C.ACTIVATE_ACCOUNT)


def test_parse_command_accepts_members_and_values():
    assert parse_command(C.SUSPEND_ACCOUNT) is C.SUSPEND_ACCOUNT
    assert parse_command("CONFIRM_ACCOUNT") is C.CONFIRM_ACCOUNT
    assert parse_command(" archive_account ") is C.ARCHIVE_ACCOUNT


@pytest.mark.parametrize("token", ["FREEZE_ACCOUNT", "", None, 3])
def test_parse_command_rejects_unknown_tokens(token):
    with pytest.raises(InvalidCommand):
        parse_command(token)


def test_available_commands_per_status():
    assert available_commands(S.ACCOUNT_PENDING) == [C.CONFIRM_ACCOUNT]
    assert available_commands(S.ACCOUNT_CONFIRMED) == [C.ACTIVATE_ACCOUNT]
    assert available_commands(S.ACCOUNT_ACTIVE) == [C.SUSPEND_ACCOUNT, C.ARCHIVE_ACCOUNT]
    assert available_commands(S.ACCOUNT_SUSPENDED) == [C.ACTIVATE_ACCOUNT]
    assert available_commands(S.ACCOUNT_ARCHIVED) == [C.ACTIVATE_ACCOUNT]

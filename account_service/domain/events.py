"""Event creation for account event logs."""

from __future__ import annotations

import logging

from .account import AccountEvent
from .ports import EventStore

logger = logging.getLogger(__name__)


class EventService:
    """Persists account events through the event store of the current transaction."""

    def __init__(self, store: EventStore) -> None:
        self._store = store

    def create_event(self, event: AccountEvent) -> AccountEvent:
        """Persist a new event and return it with its assigned id and timestamp."""
        if event.account_id is None:
            raise ValueError("event must reference an account")
        if event.event_id is not None:
            raise ValueError("event has already been recorded")
        stored = self._store.create_event(event)
        logger.debug(
            "event %s recorded for account %s as %s",
            stored.event_type,
            stored.account_id,
            stored.event_id,
        )
        return stored

"""Postgres repositories for accounts and their event logs."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from psycopg import Connection
from psycopg.errors import UniqueViolation
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import Account, AccountEvent, AccountStatus
from .domain.errors import DuplicateKey

_ACCOUNT_COLUMNS = (
    "account_id, user_id, account_number, default_account, status, created_at, last_modified"
)


class PostgresAccountRepository:
    """Account persistence bound to the connection of an open transaction."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def find_by_id(self, account_id: int, *, for_update: bool = False) -> Account | None:
        """Fetch an account with its events; ``for_update`` locks the row until commit."""
        query = f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE account_id = %s"
        if for_update:
            query += " FOR UPDATE"
        return self._fetch_one(query, (account_id,))

    def find_by_user_id(self, user_id: int) -> Account | None:
        return self._fetch_one(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE user_id = %s",
            (user_id,),
        )

    def find_by_account_number(self, account_number: str) -> Account | None:
        return self._fetch_one(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE account_number = %s",
            (account_number,),
        )

    def exists(self, account_id: int) -> bool:
        with self._conn.cursor(row_factory=tuple_row) as cur:
            cur.execute("SELECT 1 FROM accounts WHERE account_id = %s", (account_id,))
            return cur.fetchone() is not None

    def save(self, account: Account) -> Account:
        """Insert or update the account row and stamp the stored identifiers on ``account``.

        Events are rows of their own keyed by ``account_id``; saving the
        account only refreshes ``last_modified``.
        """
        try:
            with self._conn.cursor(row_factory=tuple_row) as cur:
                if account.account_id is None:
                    cur.execute(
                        """
                        INSERT INTO accounts (user_id, account_number, default_account, status)
                        VALUES (%s, %s, %s, %s)
                        RETURNING account_id, created_at, last_modified
                        """,
                        (
                            account.user_id,
                            account.account_number,
                            account.default_account,
                            account.status.value,
                        ),
                    )
                    account.account_id, account.created_at, account.last_modified = cur.fetchone()
                else:
                    cur.execute(
                        """
                        UPDATE accounts
                        SET user_id = %s, account_number = %s, default_account = %s,
                            status = %s, last_modified = NOW()
                        WHERE account_id = %s
                        RETURNING last_modified
                        """,
                        (
                            account.user_id,
                            account.account_number,
                            account.default_account,
                            account.status.value,
                            account.account_id,
                        ),
                    )
                    (account.last_modified,) = cur.fetchone()
        except UniqueViolation as exc:
            raise DuplicateKey("an account with the supplied user id or account number already exists") from exc
        return account

    def delete(self, account_id: int) -> None:
        with self._conn.cursor() as cur:
            cur.execute("DELETE FROM accounts WHERE account_id = %s", (account_id,))

    def _fetch_one(self, query: str, params: tuple) -> Account | None:
        with self._conn.cursor(row_factory=tuple_row) as cur:
            cur.execute(query, params)
            row = cur.fetchone()
        if not row:
            return None
        account = self._map_record(row)
        account.events = PostgresEventRepository(self._conn).list_for_account(account.account_id)
        return account

    def _map_record(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return Account(
            account_id=row[0],
            user_id=row[1],
            account_number=row[2],
            default_account=row[3],
            status=AccountStatus(row[4]),
            created_at=row[5],
            last_modified=row[6],
        )


class PostgresEventRepository:
    """Append-only storage for account events."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def create_event(self, event: AccountEvent) -> AccountEvent:
        with self._conn.cursor(row_factory=tuple_row) as cur:
            cur.execute(
                """
                INSERT INTO account_events (account_id, event_type)
                VALUES (%s, %s)
                RETURNING event_id, account_id, event_type, created_at
                """,
                (event.account_id, event.event_type),
            )
            return self._map_record(cur.fetchone())

    def list_for_account(self, account_id: int) -> list[AccountEvent]:
        """Return the account's events in append order."""
        with self._conn.cursor(row_factory=tuple_row) as cur:
            cur.execute(
                """
                SELECT event_id, account_id, event_type, created_at
                FROM account_events
                WHERE account_id = %s
                ORDER BY event_id
                """,
                (account_id,),
            )
            return [self._map_record(row) for row in cur.fetchall()]

    def _map_record(self, row: tuple) -> AccountEvent:
        return AccountEvent(
            event_id=row[0],
            account_id=row[1],
            event_type=row[2],
            created_at=row[3],
        )


@dataclass(slots=True)
class PostgresSession:
    """Repositories sharing one transaction."""

    accounts: PostgresAccountRepository
    events: PostgresEventRepository


class PostgresUnitOfWork:
    """Opens one Postgres transaction per account workflow."""

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    @contextmanager
    def begin(self) -> Iterator[PostgresSession]:
        """Yield repositories bound to a pooled connection inside a single transaction."""
        with self._pool.connection() as conn:
            with conn.transaction():
                yield PostgresSession(
                    accounts=PostgresAccountRepository(conn),
                    events=PostgresEventRepository(conn),
                )

"""Read caches for account aggregates keyed by account id."""

from __future__ import annotations

import copy
import logging
from threading import Lock
from typing import TYPE_CHECKING, Final

import redis
from redis import Redis
from redis.client import Pipeline

from .domain.account import Account
from .schemas import AccountSnapshot

if TYPE_CHECKING:
    from .config import Settings

logger = logging.getLogger(__name__)


class InMemoryAccountCache:
    """Thread-safe process-local account cache."""

    def __init__(self) -> None:
        self._entries: dict[int, Account] = {}
        self._lock = Lock()

    def get(self, account_id: int) -> Account | None:
        with self._lock:
            account = self._entries.get(account_id)
            return copy.deepcopy(account) if account is not None else None

    def put(self, account: Account) -> None:
        if account.account_id is None:
            return
        with self._lock:
            self._entries[account.account_id] = copy.deepcopy(account)

    def put_if_newer(self, account: Account) -> None:
        """Store the account unless the entry already cached is at least as recent."""
        if account.account_id is None:
            return
        with self._lock:
            cached = self._entries.get(account.account_id)
            if cached is not None and not _supersedes(account, cached):
                return
            self._entries[account.account_id] = copy.deepcopy(account)

    def evict(self, account_id: int) -> None:
        with self._lock:
            self._entries.pop(account_id, None)


class RedisAccountCache:
    """Account cache shared between processes, stored as JSON strings in Redis."""

    DEFAULT_TTL_SECONDS: Final[int] = 300

    def __init__(
        self,
        client: Redis,
        *,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        key_prefix: str = "account"
    ) -> None:
        """Store the Redis client and key/expiry configuration."""
        self._client = client
        self._ttl_seconds = ttl_seconds
        self._key_prefix = key_prefix

    def _key(self, account_id: int) -> str:
        return f"{self._key_prefix}:{account_id}"

    def get(self, account_id: int) -> Account | None:
        """Return the cached account or ``None`` on a miss."""
        payload = self._client.get(self._key(account_id))
        if payload is None:
            return None
        return AccountSnapshot.model_validate_json(payload).to_domain()

    def put(self, account: Account) -> None:
        """Store the account, replacing any existing entry for its id."""
        if account.account_id is None:
            return
        payload = AccountSnapshot.from_domain(account).model_dump_json()
        self._client.set(self._key(account.account_id), payload, ex=self._ttl_seconds)

    def put_if_newer(self, account: Account) -> None:
        """Store the account unless the entry already cached is at least as recent.

        The compare and the write run in a WATCH/MULTI transaction, retried when
        another client changes the key in between.
        """
        if account.account_id is None:
            return
        key = self._key(account.account_id)
        payload = AccountSnapshot.from_domain(account).model_dump_json()

        def _store(pipe: Pipeline) -> None:
            current = pipe.get(key)
            if current is not None:
                cached = AccountSnapshot.model_validate_json(current).to_domain()
                if not _supersedes(account, cached):
                    pipe.unwatch()
                    return
            pipe.multi()
            pipe.set(key, payload, ex=self._ttl_seconds)

        self._client.transaction(_store, key)

    def evict(self, account_id: int) -> None:
        self._client.delete(self._key(account_id))


def _supersedes(incoming: Account, cached: Account) -> bool:
    if incoming.last_modified is None or cached.last_modified is None:
        return True
    return incoming.last_modified > cached.last_modified


def build_cache(settings: "Settings") -> InMemoryAccountCache | RedisAccountCache:
    """Instantiate the configured cache backend, preferring Redis when available."""
    if settings.cache_backend == "redis" and settings.redis_url:
        try:
            client = redis.from_url(settings.redis_url)
            # ensure connectivity early to fail fast and fall back
            client.ping()
            logger.info("account cache configured for redis backend at %s", settings.redis_url)
            return RedisAccountCache(
                client,
                ttl_seconds=settings.cache_ttl_seconds,
                key_prefix=settings.cache_key_prefix,
            )
        except (redis.RedisError, ValueError) as exc:
            logger.warning("redis account cache unavailable, falling back to in-memory: %s", exc)

    logger.info("account cache using in-memory backend")
    return InMemoryAccountCache()

"""Two-tier membership snapshot store.

L1 is a process-local dict with per-entry expiry; L2 is Redis, shared across
processes. Values are whole `MembershipSnapshot` instances, never patched in
place, so readers see a complete snapshot or nothing.
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

import redis.asyncio as redis
from pydantic import ValidationError
from redis.exceptions import RedisError

from clubhouse.cache.defaults import CacheEntryOptions
from clubhouse.errors import CacheInvalidationError
from clubhouse.models.membership import MembershipSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _LocalEntry:
    value: MembershipSnapshot
    expires_at: float


class LocalCacheTier:
    """Thread-safe in-process tier with monotonic-clock expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: dict[str, _LocalEntry] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key: str) -> MembershipSnapshot | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: MembershipSnapshot, ttl_seconds: float) -> None:
        with self._lock:
            self._entries[key] = _LocalEntry(value=value, expires_at=self._clock() + ttl_seconds)

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class MembershipCacheStore:
    """Local tier in front of an optional Redis tier.

    Reads degrade to a miss when Redis misbehaves (the caller then loads from
    the system of record). Removal does not degrade: a key that cannot be
    dropped from Redis raises `CacheInvalidationError`.
    """

    def __init__(
        self,
        options: CacheEntryOptions,
        redis_client: redis.Redis | None = None,
        local: LocalCacheTier | None = None,
    ) -> None:
        """Initialize store.

        Args:
            options: Entry lifetimes for both tiers
            redis_client: Shared tier client; None keeps the store process-local
            local: Local tier (injected for tests)
        """
        self._options = options
        self._redis = redis_client
        self._local = local or LocalCacheTier()

    @property
    def options(self) -> CacheEntryOptions:
        return self._options

    @property
    def has_shared_tier(self) -> bool:
        return self._redis is not None

    def get_local(self, key: str) -> MembershipSnapshot | None:
        """Local tier only; never awaits."""
        return self._local.get(key)

    async def get_shared(self, key: str) -> MembershipSnapshot | None:
        """Read the shared tier without touching the local tier.

        Copying a shared hit into the local tier is left to the caller, which
        has to order it against invalidation.
        """
        if self._redis is None:
            return None

        try:
            raw = await self._redis.get(key)
        except RedisError as e:
            logger.warning(f"[membership_store] Redis GET failed for {key}: {e}")
            return None

        if raw is None:
            return None

        try:
            return MembershipSnapshot.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"[membership_store] Discarding malformed entry {key}: {e}")
            return None

    async def get(self, key: str) -> tuple[MembershipSnapshot | None, str]:
        """Look a snapshot up in both tiers without filling either.

        Returns:
            (snapshot or None, tier result: local_hit, shared_hit or miss)
        """
        snapshot = self.get_local(key)
        if snapshot is not None:
            return (snapshot, "local_hit")

        snapshot = await self.get_shared(key)
        if snapshot is not None:
            return (snapshot, "shared_hit")
        return (None, "miss")

    def fill_local(self, key: str, snapshot: MembershipSnapshot) -> None:
        """Copy a shared-tier snapshot into the local tier."""
        self._local.set(key, snapshot, self._options.local_expiration.total_seconds())

    async def set(self, key: str, snapshot: MembershipSnapshot) -> None:
        """Store a snapshot in both tiers."""
        if self._redis is not None:
            try:
                await self._redis.set(
                    key,
                    snapshot.model_dump_json(),
                    ex=int(self._options.expiration.total_seconds()),
                )
            except RedisError as e:
                logger.warning(f"[membership_store] Redis SET failed for {key}: {e}")

        self._local.set(key, snapshot, self._options.local_expiration.total_seconds())

    async def remove(self, key: str) -> None:
        """Drop a key from both tiers. Safe when the key is absent.

        Raises:
            CacheInvalidationError: If Redis could not delete the key.
        """
        self._local.remove(key)

        if self._redis is None:
            return

        try:
            await self._redis.delete(key)
        except RedisError as e:
            raise CacheInvalidationError(f"Failed to remove {key} from shared cache") from e

    async def ping(self) -> bool:
        """Check shared tier connectivity (True when there is none)."""
        if self._redis is None:
            return True
        try:
            return bool(await self._redis.ping())
        except RedisError:
            return False

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()


def create_redis_client(redis_url: str | None) -> redis.Redis | None:
    """Create the shared-tier client, or None when Redis is not configured."""
    if not redis_url:
        logger.info("[membership_store] Redis not configured, using local tier only")
        return None
    return redis.from_url(redis_url)

"""Read-through membership cache with explicit invalidation.

Answers "is user U a member of club C?" from an immutable per-user snapshot.
Concurrent misses for the same user share one load (single-flight), and
`invalidate` guarantees that no load started before it can write its result
after it returns.
"""

import asyncio
import logging
import zlib
from dataclasses import dataclass

from clubhouse.cache.defaults import USER_CLUBS_KEY_PREFIX, user_clubs_key
from clubhouse.cache.store import MembershipCacheStore
from clubhouse.db.repositories import MembershipLoader
from clubhouse.models.membership import ClubSummary, MembershipSnapshot
from clubhouse.utils.metrics import PrometheusMembershipMetrics

logger = logging.getLogger(__name__)

_WRITE_LOCK_STRIPES = 64


@dataclass(eq=False)
class _Flight:
    """One in-progress load shared by every waiter on a key."""

    task: "asyncio.Task[MembershipSnapshot] | None" = None
    waiters: int = 0
    detached: bool = False


class MembershipCacheService:
    """Membership queries backed by a two-tier snapshot cache."""

    def __init__(
        self,
        store: MembershipCacheStore,
        loader: MembershipLoader,
        metrics: PrometheusMembershipMetrics | None = None,
        key_prefix: str = USER_CLUBS_KEY_PREFIX,
    ) -> None:
        """Initialize service.

        Args:
            store: Snapshot store (local tier + optional Redis tier)
            loader: System-of-record loader, must bypass tenant filters
            metrics: Metrics sink
            key_prefix: Cache key prefix
        """
        self._store = store
        self._loader = loader
        self._metrics = metrics or PrometheusMembershipMetrics()
        self._key_prefix = key_prefix
        self._flights: dict[str, _Flight] = {}
        self._write_locks = [asyncio.Lock() for _ in range(_WRITE_LOCK_STRIPES)]

    def cache_key(self, user_id: int) -> str:
        """Cache key holding the user's snapshot in both tiers."""
        return user_clubs_key(user_id, self._key_prefix)

    def _write_lock(self, key: str) -> asyncio.Lock:
        # Serializes store writes and removals per key so a stale load
        # cannot land after an invalidation
        return self._write_locks[zlib.crc32(key.encode()) % _WRITE_LOCK_STRIPES]

    async def get_membership(self, user_id: int) -> MembershipSnapshot:
        """Return the user's snapshot, loading it once on a miss.

        Only the local tier is read before joining the in-flight load; the
        shared tier and the loader are consulted once per flight.

        Raises:
            Exception: Whatever the loader raised; failures are never turned
                into an empty snapshot.
        """
        key = self.cache_key(user_id)

        snapshot = self._store.get_local(key)
        if snapshot is not None:
            self._metrics.inc_lookup("local_hit")
            return snapshot

        # No await between the local miss and joining or starting the flight
        flight = self._flights.get(key)
        if flight is None:
            flight = _Flight()
            flight.task = asyncio.create_task(self._resolve(key, user_id, flight))
            self._flights[key] = flight

        task = flight.task
        if task is None:
            raise RuntimeError(f"In-flight load for {key} has no task")

        flight.waiters += 1
        try:
            return await asyncio.shield(task)
        finally:
            flight.waiters -= 1
            if flight.waiters == 0 and not task.done():
                # Last waiter left; drop the load without storing anything
                if self._flights.get(key) is flight:
                    del self._flights[key]
                task.cancel()

    async def _resolve(self, key: str, user_id: int, flight: _Flight) -> MembershipSnapshot:
        try:
            snapshot = await self._store.get_shared(key)
            if snapshot is not None:
                self._metrics.inc_lookup("shared_hit")
                async with self._write_lock(key):
                    if not flight.detached:
                        self._store.fill_local(key, snapshot)
                return snapshot

            self._metrics.inc_lookup("miss")
            return await self._load(key, user_id, flight)
        finally:
            if self._flights.get(key) is flight:
                del self._flights[key]

    async def _load(self, key: str, user_id: int, flight: _Flight) -> MembershipSnapshot:
        try:
            clubs = await self._loader.load_clubs(user_id)
        except asyncio.CancelledError:
            self._metrics.inc_load("cancelled")
            logger.info(f"[membership_cache] load cancelled for user_id={user_id}")
            raise
        except Exception as e:
            self._metrics.inc_load("error")
            logger.error(f"[membership_cache] load failed for user_id={user_id}: {e}")
            raise

        snapshot = MembershipSnapshot.from_clubs(clubs)

        async with self._write_lock(key):
            if not flight.detached:
                await self._store.set(key, snapshot)

        self._metrics.inc_load("success")
        logger.debug(
            f"[membership_cache] loaded {len(snapshot.clubs)} clubs for user_id={user_id}"
        )
        return snapshot

    async def is_member(self, user_id: int, club_id: int) -> bool:
        """O(1) membership check once the snapshot is resolved."""
        snapshot = await self.get_membership(user_id)
        return snapshot.contains(club_id)

    async def list_clubs(self, user_id: int) -> tuple[ClubSummary, ...]:
        """Clubs the user belongs to, ordered by name."""
        snapshot = await self.get_membership(user_id)
        return snapshot.clubs

    async def list_club_ids(self, user_id: int) -> frozenset[int]:
        """Ids of the clubs the user belongs to."""
        snapshot = await self.get_membership(user_id)
        return snapshot.club_ids

    async def invalidate(self, user_id: int) -> None:
        """Drop the user's snapshot; the next read loads fresh.

        Safe when nothing is cached. Any load already in flight for the user
        is detached: its waiters still get its result, but it is not stored.

        Raises:
            CacheInvalidationError: If the shared tier could not drop the key.
        """
        key = self.cache_key(user_id)

        async with self._write_lock(key):
            flight = self._flights.pop(key, None)
            if flight is not None:
                flight.detached = True
            await self._store.remove(key)

        self._metrics.inc_invalidation()
        logger.debug(f"[membership_cache] invalidated user_id={user_id}")

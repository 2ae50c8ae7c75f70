"""Unit tests for MembershipCacheService.

Covers read-through loading, invalidation, single-flight loading, load
failures and cancellation against the in-memory loader.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from clubhouse.cache.defaults import CacheEntryOptions
from clubhouse.cache.membership import MembershipCacheService
from clubhouse.cache.store import MembershipCacheStore
from clubhouse.db.inmemory import InMemoryMembershipLoader
from clubhouse.models.membership import ClubSummary, MembershipSnapshot

USER = 10


class BlockingLoader(InMemoryMembershipLoader):
    """Reads the system of record, then holds the result until released."""

    def __init__(self) -> None:
        super().__init__()
        self.calls = 0
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def load_clubs(self, user_id: int) -> list[ClubSummary]:
        self.calls += 1
        clubs = await super().load_clubs(user_id)
        self.started.set()
        await self.release.wait()
        return clubs


def _populate(loader: InMemoryMembershipLoader) -> None:
    loader.add_club(1, "Arsenal Youth")
    loader.add_club(2, "Boca Juniors")
    loader.add_club(3, "Celtic FC")
    loader.add_member(USER, 2)
    loader.add_member(USER, 1)


@pytest.fixture
def loader() -> InMemoryMembershipLoader:
    loader = InMemoryMembershipLoader()
    _populate(loader)
    return loader


@pytest.fixture
def blocking_loader() -> BlockingLoader:
    loader = BlockingLoader()
    _populate(loader)
    return loader


@pytest.fixture
def store() -> MembershipCacheStore:
    return MembershipCacheStore(CacheEntryOptions())


def make_service(
    loader: InMemoryMembershipLoader,
    store: MembershipCacheStore,
    metrics: MagicMock | None = None,
) -> MembershipCacheService:
    return MembershipCacheService(store, loader, metrics=metrics or MagicMock())


class TestReadThrough:
    @pytest.mark.asyncio
    async def test_member_of_loaded_clubs_only(
        self, loader: InMemoryMembershipLoader, store: MembershipCacheStore
    ) -> None:
        """Test user in clubs {1,2} is a member of 1 and not of 3."""
        service = make_service(loader, store)

        assert await service.is_member(USER, 1) is True
        assert await service.is_member(USER, 2) is True
        assert await service.is_member(USER, 3) is False

    @pytest.mark.asyncio
    async def test_user_without_clubs_gets_empty_snapshot(
        self, loader: InMemoryMembershipLoader, store: MembershipCacheStore
    ) -> None:
        service = make_service(loader, store)

        assert await service.get_membership(99) == MembershipSnapshot.empty()
        assert await service.is_member(99, 1) is False

    @pytest.mark.asyncio
    async def test_clubs_listed_by_name(
        self, loader: InMemoryMembershipLoader, store: MembershipCacheStore
    ) -> None:
        service = make_service(loader, store)

        clubs = await service.list_clubs(USER)

        assert [c.name for c in clubs] == ["Arsenal Youth", "Boca Juniors"]
        assert await service.list_club_ids(USER) == frozenset({1, 2})

    @pytest.mark.asyncio
    async def test_second_read_served_from_cache(
        self, loader: InMemoryMembershipLoader, store: MembershipCacheStore
    ) -> None:
        metrics = MagicMock()
        service = make_service(loader, store, metrics)

        await service.is_member(USER, 1)
        await service.is_member(USER, 3)

        assert loader.load_count == 1
        lookups = [c.args[0] for c in metrics.inc_lookup.call_args_list]
        assert lookups == ["miss", "local_hit"]
        metrics.inc_load.assert_called_once_with("success")

    @pytest.mark.asyncio
    async def test_shared_tier_hit_skips_loader(self, loader: InMemoryMembershipLoader) -> None:
        cached = MembershipSnapshot.from_clubs(
            [ClubSummary(club_id=7, name="Celtic FC", city="", state="")]
        )
        redis_client = AsyncMock()
        redis_client.get.return_value = cached.model_dump_json()
        service = make_service(loader, MembershipCacheStore(CacheEntryOptions(), redis_client))

        assert await service.is_member(USER, 7) is True
        assert loader.load_count == 0
        redis_client.get.assert_awaited_once_with("user-clubs-10")


class TestInvalidation:
    @pytest.mark.asyncio
    async def test_removed_member_not_seen_after_invalidate(
        self, loader: InMemoryMembershipLoader, store: MembershipCacheStore
    ) -> None:
        """Test removal is visible right after invalidation despite a long lifetime."""
        service = make_service(loader, store)
        assert await service.is_member(USER, 1) is True

        loader.remove_member(USER, 1)
        # Cached snapshot still answers until invalidated
        assert await service.is_member(USER, 1) is True

        await service.invalidate(USER)

        assert await service.is_member(USER, 1) is False
        assert loader.load_count == 2

    @pytest.mark.asyncio
    async def test_invalidate_without_entry_is_noop(
        self, loader: InMemoryMembershipLoader, store: MembershipCacheStore
    ) -> None:
        metrics = MagicMock()
        service = make_service(loader, store, metrics)

        await service.invalidate(USER)
        await service.invalidate(USER)

        assert metrics.inc_invalidation.call_count == 2
        assert loader.load_count == 0

    @pytest.mark.asyncio
    async def test_cache_agrees_with_source_across_changes(
        self, loader: InMemoryMembershipLoader, store: MembershipCacheStore
    ) -> None:
        """Test is_member matches the loader after every change plus invalidation."""
        service = make_service(loader, store)
        users = [USER, 11, 12]
        changes = [
            ("add", 11, 3),
            ("remove", USER, 2),
            ("add", 12, 1),
            ("add", USER, 3),
            ("remove", 11, 3),
        ]

        for action, user_id, club_id in changes:
            if action == "add":
                loader.add_member(user_id, club_id)
            else:
                loader.remove_member(user_id, club_id)
            await service.invalidate(user_id)

            for u in users:
                for c in (1, 2, 3):
                    assert await service.is_member(u, c) == loader.is_member(u, c)

    @pytest.mark.asyncio
    async def test_invalidate_discards_in_flight_result(
        self, blocking_loader: BlockingLoader, store: MembershipCacheStore
    ) -> None:
        """Test a load that started before invalidate never lands in the cache."""
        service = make_service(blocking_loader, store)

        stale_read = asyncio.create_task(service.get_membership(USER))
        await blocking_loader.started.wait()

        blocking_loader.remove_member(USER, 1)
        await service.invalidate(USER)

        blocking_loader.release.set()
        stale = await stale_read

        assert stale.contains(1)
        assert await store.get(service.cache_key(USER)) == (None, "miss")
        assert await service.is_member(USER, 1) is False
        assert blocking_loader.calls == 2

    @pytest.mark.asyncio
    async def test_read_after_invalidate_does_not_join_old_load(
        self, blocking_loader: BlockingLoader, store: MembershipCacheStore
    ) -> None:
        service = make_service(blocking_loader, store)

        first = asyncio.create_task(service.get_membership(USER))
        await blocking_loader.started.wait()

        blocking_loader.remove_member(USER, 1)
        await service.invalidate(USER)
        second = asyncio.create_task(service.get_membership(USER))

        blocking_loader.release.set()
        old, fresh = await asyncio.gather(first, second)

        assert old.contains(1)
        assert not fresh.contains(1)
        assert blocking_loader.calls == 2
        assert await store.get(service.cache_key(USER)) == (fresh, "local_hit")


class TestSingleFlight:
    @pytest.mark.asyncio
    async def test_concurrent_cold_reads_share_one_load(
        self, blocking_loader: BlockingLoader, store: MembershipCacheStore
    ) -> None:
        """Test N concurrent reads on a cold key trigger exactly one load."""
        service = make_service(blocking_loader, store)

        readers = [asyncio.create_task(service.get_membership(USER)) for _ in range(10)]
        await blocking_loader.started.wait()
        blocking_loader.release.set()
        results = await asyncio.gather(*readers)

        assert blocking_loader.calls == 1
        assert all(r is results[0] for r in results)
        assert results[0].club_ids == frozenset({1, 2})

    @pytest.mark.asyncio
    async def test_different_users_load_independently(
        self, loader: InMemoryMembershipLoader, store: MembershipCacheStore
    ) -> None:
        loader.add_member(11, 3)
        service = make_service(loader, store)

        a, b = await asyncio.gather(service.get_membership(USER), service.get_membership(11))

        assert a.club_ids == frozenset({1, 2})
        assert b.club_ids == frozenset({3})
        assert loader.loads_by_user == {USER: 1, 11: 1}


class TestFailures:
    @pytest.mark.asyncio
    async def test_load_failure_reaches_every_waiter_and_is_not_cached(
        self, blocking_loader: BlockingLoader, store: MembershipCacheStore
    ) -> None:
        """Test a backing-store failure propagates instead of becoming 'not a member'."""
        metrics = MagicMock()
        service = make_service(blocking_loader, store, metrics)
        blocking_loader.fail_with(RuntimeError("database unavailable"))

        readers = [asyncio.create_task(service.is_member(USER, 1)) for _ in range(3)]
        await asyncio.sleep(0)
        blocking_loader.release.set()
        results = await asyncio.gather(*readers, return_exceptions=True)

        assert all(isinstance(r, RuntimeError) for r in results)
        assert blocking_loader.calls == 1
        assert await store.get(service.cache_key(USER)) == (None, "miss")
        metrics.inc_load.assert_called_once_with("error")

        blocking_loader.fail_with(None)
        assert await service.is_member(USER, 1) is True
        assert blocking_loader.calls == 2


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancelled_waiter_leaves_shared_load_running(
        self, blocking_loader: BlockingLoader, store: MembershipCacheStore
    ) -> None:
        service = make_service(blocking_loader, store)

        leaving = asyncio.create_task(service.get_membership(USER))
        staying = asyncio.create_task(service.get_membership(USER))
        await blocking_loader.started.wait()

        leaving.cancel()
        with pytest.raises(asyncio.CancelledError):
            await leaving

        blocking_loader.release.set()
        snapshot = await staying

        assert snapshot.club_ids == frozenset({1, 2})
        assert blocking_loader.calls == 1
        assert await store.get(service.cache_key(USER)) == (snapshot, "local_hit")

    @pytest.mark.asyncio
    async def test_last_waiter_cancel_stops_load_and_stores_nothing(
        self, blocking_loader: BlockingLoader, store: MembershipCacheStore
    ) -> None:
        metrics = MagicMock()
        service = make_service(blocking_loader, store, metrics)

        reader = asyncio.create_task(service.get_membership(USER))
        await blocking_loader.started.wait()

        reader.cancel()
        with pytest.raises(asyncio.CancelledError):
            await reader

        # Let the shared load observe its cancellation
        for _ in range(3):
            await asyncio.sleep(0)

        blocking_loader.release.set()
        assert await store.get(service.cache_key(USER)) == (None, "miss")
        metrics.inc_load.assert_called_once_with("cancelled")

        assert await service.is_member(USER, 1) is True
        assert blocking_loader.calls == 2


class GatedRedis:
    """Dict-backed stand-in for the Redis client.

    GET reads its value immediately, then waits on `release` and an optional
    per-call delay before returning it.
    """

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.get_calls = 0
        self.get_started = asyncio.Event()
        self.release = asyncio.Event()
        self.release.set()
        self.get_delays: list[float] = []

    async def get(self, key: str) -> str | None:
        self.get_calls += 1
        value = self.data.get(key)
        self.get_started.set()
        await self.release.wait()
        if self.get_delays:
            await asyncio.sleep(self.get_delays.pop(0))
        return value

    async def set(self, key: str, value: str, ex: int | None = None) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)


class TestSharedTier:
    @pytest.mark.asyncio
    async def test_invalidate_during_shared_read_keeps_stale_value_out(
        self, loader: InMemoryMembershipLoader
    ) -> None:
        """Test a Redis hit read before invalidate never reaches the local tier."""
        redis_client = GatedRedis()
        store = MembershipCacheStore(CacheEntryOptions(), redis_client)  # type: ignore[arg-type]
        service = make_service(loader, store)
        key = service.cache_key(USER)

        stale = MembershipSnapshot.from_clubs(
            [ClubSummary(club_id=1, name="Arsenal Youth", city="", state="")]
        )
        redis_client.data[key] = stale.model_dump_json()
        loader.remove_member(USER, 1)
        redis_client.release.clear()

        first = asyncio.create_task(service.is_member(USER, 1))
        await redis_client.get_started.wait()

        await service.invalidate(USER)
        redis_client.release.set()

        # The read began before invalidate returned and may see the old value
        assert await first is True
        assert store.get_local(key) is None

        assert await service.is_member(USER, 1) is False
        assert loader.load_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_cold_reads_share_one_load(self) -> None:
        """Test uneven Redis latency does not let a second caller start its own load."""
        loader = InMemoryMembershipLoader(delay_seconds=0.01)
        _populate(loader)
        redis_client = GatedRedis()
        redis_client.get_delays = [0, 0.05]
        service = make_service(
            loader, MembershipCacheStore(CacheEntryOptions(), redis_client)  # type: ignore[arg-type]
        )

        a, b = await asyncio.gather(service.get_membership(USER), service.get_membership(USER))

        assert a is b
        assert a.club_ids == frozenset({1, 2})
        assert loader.load_count == 1
        assert redis_client.get_calls == 1

    @pytest.mark.asyncio
    async def test_shared_hit_fills_local_tier(self, loader: InMemoryMembershipLoader) -> None:
        redis_client = GatedRedis()
        store = MembershipCacheStore(CacheEntryOptions(), redis_client)  # type: ignore[arg-type]
        metrics = MagicMock()
        service = make_service(loader, store, metrics)
        cached = MembershipSnapshot.from_clubs(
            [ClubSummary(club_id=3, name="Celtic FC", city="", state="")]
        )
        redis_client.data[service.cache_key(USER)] = cached.model_dump_json()

        assert await service.is_member(USER, 3) is True
        assert await service.is_member(USER, 3) is True

        assert redis_client.get_calls == 1
        assert loader.load_count == 0
        lookups = [c.args[0] for c in metrics.inc_lookup.call_args_list]
        assert lookups == ["shared_hit", "local_hit"]

    @pytest.mark.asyncio
    async def test_load_writes_shared_tier_and_invalidate_deletes_it(
        self, loader: InMemoryMembershipLoader
    ) -> None:
        redis_client = GatedRedis()
        service = make_service(
            loader, MembershipCacheStore(CacheEntryOptions(), redis_client)  # type: ignore[arg-type]
        )
        key = service.cache_key(USER)

        await service.get_membership(USER)
        assert MembershipSnapshot.model_validate_json(redis_client.data[key]).club_ids == frozenset(
            {1, 2}
        )

        await service.invalidate(USER)

        assert key not in redis_client.data

"""Unit tests for the epoch-scoped corpus cache."""

import asyncio

import pytest

from docs_relevance.exceptions import IndexBuildError


class TestEpochLifecycle:
    """Test TTL-bounded reuse of the corpus/index pair."""

    @pytest.mark.asyncio
    async def test_first_call_builds_epoch(self, make_cache, fake_fetcher):
        cache = make_cache(fake_fetcher)
        epoch = await cache.get_or_rebuild()

        assert epoch.generation == 1
        assert epoch.index is not None
        assert len(epoch.documents) == epoch.index.document_count
        assert cache.epoch is epoch

    @pytest.mark.asyncio
    async def test_reused_within_ttl(self, make_cache, fake_fetcher, fake_clock):
        cache = make_cache(fake_fetcher)
        first = await cache.get_or_rebuild()
        fake_clock.advance(3599)
        second = await cache.get_or_rebuild()

        assert second is first
        assert len(fake_fetcher.calls) == 1

    @pytest.mark.asyncio
    async def test_load_twice_does_not_refetch(self, make_cache, fake_fetcher):
        cache = make_cache(fake_fetcher)
        first = await cache.load()
        second = await cache.load()

        assert first == second
        assert len(fake_fetcher.calls) == 1

    @pytest.mark.asyncio
    async def test_rebuilt_at_ttl(self, make_cache, fake_fetcher, fake_clock):
        cache = make_cache(fake_fetcher)
        await cache.get_or_rebuild()
        fake_clock.advance(3600)
        epoch = await cache.get_or_rebuild()

        assert epoch.generation == 2
        assert len(fake_fetcher.calls) == 2

    @pytest.mark.asyncio
    async def test_explicit_now(self, make_cache, fake_fetcher):
        cache = make_cache(fake_fetcher)
        await cache.get_or_rebuild(now=0.0)
        await cache.get_or_rebuild(now=10.0)
        epoch = await cache.get_or_rebuild(now=3600.0)

        assert epoch.generation == 2

    @pytest.mark.asyncio
    async def test_invalidate_forces_rebuild(self, make_cache, fake_fetcher):
        cache = make_cache(fake_fetcher)
        await cache.get_or_rebuild()
        cache.invalidate()
        epoch = await cache.get_or_rebuild()

        assert epoch.generation == 2

    @pytest.mark.asyncio
    async def test_stats(self, make_cache, fake_fetcher, fake_clock):
        cache = make_cache(fake_fetcher)
        assert cache.stats()["generation"] == 0

        await cache.get_or_rebuild()
        fake_clock.advance(12)
        stats = cache.stats()

        assert stats["generation"] == 1
        assert stats["documents"] == 5
        assert stats["index_available"] is True
        assert stats["age_seconds"] == 12


class TestSingleFlight:
    """Test that concurrent staleness triggers exactly one rebuild."""

    @pytest.mark.asyncio
    async def test_concurrent_first_build(self, make_cache, fake_fetcher):
        cache = make_cache(fake_fetcher)
        epochs = await asyncio.gather(*(cache.get_or_rebuild() for _ in range(5)))

        assert len(fake_fetcher.calls) == 1
        assert all(epoch is epochs[0] for epoch in epochs)

    @pytest.mark.asyncio
    async def test_stale_epoch_served_during_rebuild(
        self, make_cache, fake_fetcher, fake_clock
    ):
        cache = make_cache(fake_fetcher)
        stale = await cache.get_or_rebuild()
        fake_clock.advance(3600)

        fake_fetcher.gate = asyncio.Event()
        rebuild = asyncio.create_task(cache.get_or_rebuild())
        await asyncio.sleep(0)

        served = await cache.get_or_rebuild()
        assert served is stale

        fake_fetcher.gate.set()
        fresh = await rebuild

        assert fresh.generation == 2
        assert len(fake_fetcher.calls) == 2


class TestFailures:
    """Test recovery from fetch and build failures."""

    @pytest.mark.asyncio
    async def test_fetch_failure_without_epoch(self, make_cache, failing_fetcher):
        cache = make_cache(failing_fetcher)
        epoch = await cache.get_or_rebuild()

        assert epoch.documents == ()
        assert epoch.index is None
        assert cache.epoch is None

    @pytest.mark.asyncio
    async def test_fetch_failure_keeps_previous_epoch(
        self, make_cache, fake_fetcher, fake_clock, failing_fetcher
    ):
        cache = make_cache(fake_fetcher)
        previous = await cache.get_or_rebuild()
        fake_clock.advance(3600)
        fake_fetcher.error = failing_fetcher.error

        served = await cache.get_or_rebuild()
        assert served is previous

        # Not re-stamped, so the next request retries
        fake_fetcher.error = None
        epoch = await cache.get_or_rebuild()
        assert epoch.generation == 2
        assert len(fake_fetcher.calls) == 3

    @pytest.mark.asyncio
    async def test_index_build_failure_publishes_unindexed_epoch(
        self, make_cache, fake_fetcher, mocker
    ):
        cache = make_cache(fake_fetcher)
        mocker.patch.object(
            cache.builder, "build", side_effect=IndexBuildError("boom", document_count=5)
        )

        epoch = await cache.get_or_rebuild()

        assert epoch.index is None
        assert len(epoch.documents) == 5
        assert cache.stats()["index_available"] is False


class TestLockBinding:
    def test_cache_built_outside_event_loop(self, make_cache, fake_fetcher):
        cache = make_cache(fake_fetcher)
        assert cache._lock is None

        async def contend():
            return await asyncio.gather(*(cache.get_or_rebuild() for _ in range(3)))

        epochs = asyncio.run(contend())

        assert len(fake_fetcher.calls) == 1
        assert all(epoch is epochs[0] for epoch in epochs)

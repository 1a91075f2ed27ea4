"""Unit tests for the active campaign cache.

Time is controlled through a fake clock, so freshness is deterministic.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from storefront.domain.exceptions import UpstreamUnavailable
from storefront.domain.model.campaign import Campaign, DiscountKind
from storefront.domain.service.active_campaign_cache import ActiveCampaignCache
from tests.fakes import FakeCampaignRepository, FakeClock

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _campaign(id: str, priority: int = 0, ends_in=timedelta(days=7)) -> Campaign:
    return Campaign(
        id=id,
        name=f"Campaign {id}",
        kind=DiscountKind.PERCENTAGE,
        value=Decimal("10"),
        start_at=NOW - timedelta(days=1),
        end_at=NOW + ends_in,
        priority=priority,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture
def repo() -> FakeCampaignRepository:
    return FakeCampaignRepository([_campaign("a", 1), _campaign("b", 5)])


@pytest.fixture
def cache(repo, clock):
    cache = ActiveCampaignCache(repo, clock=clock, fetch_timeout=0.5)
    yield cache
    cache.close()


class TestFreshness:

    def test_sorted_by_priority_descending(self, cache):
        assert [c.id for c in cache.get_active()] == ["b", "a"]

    def test_equal_priorities_keep_store_order(self, clock):
        repo = FakeCampaignRepository([_campaign("x", 3), _campaign("y", 3)])
        cache = ActiveCampaignCache(repo, clock=clock)
        assert [c.id for c in cache.get_active()] == ["x", "y"]
        cache.close()

    def test_reads_store_once_within_ttl(self, cache, repo, clock):
        cache.get_active()
        clock.advance(seconds=59)
        cache.get_active()
        assert repo.reads == 1

    def test_refreshes_after_ttl(self, cache, repo, clock):
        cache.get_active()
        repo.save(_campaign("c", 9))
        clock.advance(seconds=60)
        assert [c.id for c in cache.get_active()] == ["c", "b", "a"]
        assert repo.reads == 2

    def test_same_answer_within_window(self, cache, clock):
        first = cache.get_active()
        clock.advance(seconds=30)
        assert cache.get_active() == first

    def test_invalidate_forces_refetch(self, cache, repo):
        cache.get_active()
        cache.invalidate()
        cache.get_active()
        assert repo.reads == 2

    def test_callers_cannot_mutate_cached_list(self, cache):
        cache.get_active().clear()
        assert len(cache.get_active()) == 2


class TestStoreFailure:

    def test_serves_stale_copy_when_store_fails(self, cache, repo, clock):
        cache.get_active()
        repo.fail_with = ConnectionError("store down")
        clock.advance(minutes=5)
        assert [c.id for c in cache.get_active()] == ["b", "a"]

    def test_stale_copy_drops_ended_campaigns(self, clock):
        repo = FakeCampaignRepository(
            [_campaign("short", 9, ends_in=timedelta(minutes=2)), _campaign("long", 1)]
        )
        cache = ActiveCampaignCache(repo, clock=clock)
        cache.get_active()
        repo.fail_with = ConnectionError("store down")
        clock.advance(minutes=5)
        assert [c.id for c in cache.get_active()] == ["long"]
        cache.close()

    def test_too_stale_copy_raises(self, cache, repo, clock):
        cache.get_active()
        repo.fail_with = ConnectionError("store down")
        clock.advance(minutes=16)
        with pytest.raises(UpstreamUnavailable):
            cache.get_active()

    def test_no_cache_raises(self, cache, repo):
        repo.fail_with = ConnectionError("store down")
        with pytest.raises(UpstreamUnavailable):
            cache.get_active()

    def test_slow_store_times_out(self, cache, repo):
        repo.delay = 2.0
        with pytest.raises(UpstreamUnavailable) as info:
            cache.get_active()
        assert "did not answer" in str(info.value.__cause__)

    def test_recovers_when_store_returns(self, cache, repo, clock):
        repo.fail_with = ConnectionError("store down")
        with pytest.raises(UpstreamUnavailable):
            cache.get_active()
        repo.fail_with = None
        assert len(cache.get_active()) == 2

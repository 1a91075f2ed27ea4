"""Domain service: the set of campaigns currently running.

Every catalog listing and every price resolution needs the active
campaigns, so they are read from the store at most once per TTL window
and shared by all callers.  A campaign that ends inside the window may
keep applying until the next refresh; that staleness is accepted.

The cache is an ordinary object handed to its users, with an injectable
clock so freshness can be controlled in tests.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FetchTimeout
from datetime import datetime, timedelta, timezone

from storefront.domain.exceptions import UpstreamUnavailable
from storefront.domain.model.campaign import Campaign
from storefront.domain.repository.campaign_repository import CampaignRepository

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(seconds=60)
DEFAULT_MAX_STALENESS = timedelta(minutes=15)
DEFAULT_FETCH_TIMEOUT = 5.0  # seconds

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ActiveCampaignCache:

    def __init__(
        self,
        campaign_repo: CampaignRepository,
        clock: Clock = utcnow,
        ttl: timedelta = DEFAULT_TTL,
        max_staleness: timedelta = DEFAULT_MAX_STALENESS,
        fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
    ) -> None:
        self._campaign_repo = campaign_repo
        self._clock = clock
        self._ttl = ttl
        self._max_staleness = max_staleness
        self._fetch_timeout = fetch_timeout
        self._lock = threading.Lock()
        self._campaigns: list[Campaign] | None = None
        self._fetched_at: datetime | None = None
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="campaign-fetch"
        )

    def get_active(self) -> list[Campaign]:
        """Return running campaigns, highest priority first.

        Refreshes from the store when the cached copy is older than the
        TTL.  If the store fails, a copy younger than ``max_staleness`` is
        served instead; otherwise UpstreamUnavailable is raised.
        """
        now = self._clock()
        with self._lock:
            if self._is_fresh(now):
                return list(self._campaigns)

            try:
                campaigns = self._fetch(now)
            except Exception as exc:
                return self._serve_stale(now, exc)

            self._campaigns = campaigns
            self._fetched_at = now
            logger.debug("Refreshed active campaigns: %d running", len(campaigns))
            return list(campaigns)

    def invalidate(self) -> None:
        """Drop the cached copy so the next read goes to the store."""
        with self._lock:
            self._campaigns = None
            self._fetched_at = None

    def close(self) -> None:
        self._executor.shutdown(wait=False)

    # --- Internal helpers -----------------------------------------------------

    def _is_fresh(self, now: datetime) -> bool:
        return (
            self._campaigns is not None
            and self._fetched_at is not None
            and now - self._fetched_at < self._ttl
        )

    def _fetch(self, now: datetime) -> list[Campaign]:
        future = self._executor.submit(self._campaign_repo.list_live, now)
        try:
            live = future.result(timeout=self._fetch_timeout)
        except FetchTimeout as exc:
            future.cancel()
            raise UpstreamUnavailable(
                f"Campaign store did not answer within {self._fetch_timeout}s"
            ) from exc
        # sorted() is stable: equal priorities keep store order.
        return sorted(live, key=lambda c: c.priority, reverse=True)

    def _serve_stale(self, now: datetime, exc: Exception) -> list[Campaign]:
        if (
            self._campaigns is not None
            and self._fetched_at is not None
            and now - self._fetched_at <= self._max_staleness
        ):
            logger.warning(
                "Campaign refresh failed (%s); serving copy from %s",
                exc,
                self._fetched_at.isoformat(),
            )
            return [c for c in self._campaigns if c.is_live_at(now)]

        logger.error("Campaign refresh failed with no usable cache: %s", exc)
        raise UpstreamUnavailable("Campaign store is unavailable") from exc

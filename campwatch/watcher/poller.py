"""
Poll orchestration

One poll fans out a fetch for every campground/month pair, waits for all of
them, matches each site against the night requirements and decides what to
report.
"""
import asyncio
import logging
from typing import Optional, List

from ..api.client import RecGovAPIClient
from ..common.config import WatchConfig
from ..common.errors import TransportError, UpstreamError
from ..common.matching import find_qualifying_run
from ..common.models import (
    AvailabilityRecord,
    MatchedSite,
    PollOutcome,
    PollResult,
    PollState,
    PollTrigger,
)
from ..common.notifications import Notifier

logger = logging.getLogger(__name__)


class Poller:
    """
    Runs poll cycles.

    A failed fetch aborts the whole cycle: nothing is reported for it and the
    next tick or /check starts over. Overlapping cycles are not serialized.
    """

    def __init__(
        self,
        client: RecGovAPIClient,
        config: WatchConfig,
        state: PollState,
        notifier: Optional[Notifier] = None
    ):
        self.client = client
        self.config = config
        self.state = state
        self.notifier = notifier

    async def fetch_all(self) -> List[AvailabilityRecord]:
        """Fetch every campground x month pair concurrently; first error wins"""
        batches = await asyncio.gather(*[
            self.client.fetch_month(campground_id, month)
            for campground_id in self.config.campground_ids
            for month in self.config.months
        ])
        return [record for batch in batches for record in batch]

    def match(self, records: List[AvailabilityRecord]) -> List[MatchedSite]:
        matches = []
        for record in records:
            run = find_qualifying_run(
                record.available_dates,
                self.config.min_nights,
                self.config.start_dates
            )
            if run:
                matches.append(MatchedSite.from_record(record, run))
        return matches

    def partial_summary(self, total_nights: int) -> str:
        return (
            f"{total_nights} night(s) available but none have "
            f"{self.config.min_nights} consecutive nights starting on "
            f"{self.config.describe_start_dates()}."
        )

    async def run_poll(
        self,
        trigger: PollTrigger = PollTrigger.SCHEDULED,
        reply_to: Optional[str] = None
    ) -> PollResult:
        """
        Run one poll cycle.

        Args:
            trigger: SCHEDULED polls advance the poll counter, MANUAL ones do not
            reply_to: Chat that asked for a manual check, if any
        """
        if trigger == PollTrigger.SCHEDULED:
            label = f"Poll #{self.state.next_poll()}"
        else:
            label = "Check"

        logger.info(
            f"{label}: checking {len(self.config.months)} month(s) "
            f"across {len(self.config.campground_ids)} campground(s)..."
        )

        try:
            records = await self.fetch_all()
        except (TransportError, UpstreamError) as e:
            logger.error(f"{label} failed: {e}")
            return PollResult(label=label, trigger=trigger, outcome=PollOutcome.FAILED, error=str(e))

        if not records:
            logger.info(f"{label}: nothing available.")
            if reply_to and self.notifier:
                await self.notifier.notify_text("📭 Nothing available right now.", reply_to)
            return PollResult(label=label, trigger=trigger, outcome=PollOutcome.NOTHING)

        matches = self.match(records)
        result = PollResult(
            label=label,
            trigger=trigger,
            outcome=PollOutcome.MATCHED if matches else PollOutcome.PARTIAL,
            records=records,
            matches=matches,
        )

        if not matches:
            summary = self.partial_summary(result.total_nights)
            logger.info(f"{label}: {summary}")
            if self.notifier and (reply_to or self.config.notify_partial):
                await self.notifier.notify_text(summary, reply_to, title="ℹ️ Partial Match")
            return result

        logger.info(f"🎉 FOUND {len(matches)} SITE(S)!")
        for site in matches:
            logger.info(
                f"  ✅ [{site.campground_id}] Site {site.display_name} | "
                f"Loop: {site.loop or '—'} | Type: {site.site_type or '—'}"
            )
            logger.info(f"     Matched run : {' → '.join(site.matched_run)} ({len(site.matched_run)} nights)")
            logger.info(f"     All available: {', '.join(site.available_dates)}")
            logger.info(f"     Book: {site.booking_url}")

        if self.notifier:
            await self.notifier.notify_matches(matches, reply_to)

        return result

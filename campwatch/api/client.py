"""
Recreation.gov Availability Client

Fetches one campground/month of availability and normalizes it into
AvailabilityRecord objects.
"""
import logging
from typing import Optional, List, Dict, Any

import httpx

from .endpoints import Endpoints
from ..common.config import APIConfig
from ..common.errors import TransportError, UpstreamError
from ..common.models import AVAILABLE_STATUS, AvailabilityRecord
from ..common.scheduler import RateLimiter

logger = logging.getLogger(__name__)


def parse_availability(data: Dict[str, Any], campground_id: str, month: str) -> List[AvailabilityRecord]:
    """
    Normalize a month availability payload.

    Only the exact status "Available" counts; holds, "Open", "Reserved" and
    unknown states are dropped. Timestamps are cut to their calendar day.
    Sites without any available night are left out.
    """
    campsites = data.get("campsites") if isinstance(data, dict) else None
    if not campsites:
        return []

    records = []
    for site_id, site in campsites.items():
        availabilities = site.get("availabilities") or {}
        dates = sorted({
            stamp[:10]
            for stamp, status in availabilities.items()
            if status == AVAILABLE_STATUS
        })
        if not dates:
            continue

        records.append(AvailabilityRecord(
            campground_id=campground_id,
            site_id=str(site_id),
            site_name=site.get("site"),
            loop=site.get("loop"),
            site_type=site.get("campsite_type"),
            available_dates=tuple(dates),
            month=month,
        ))

    return records


class RecGovAPIClient:
    """
    Client for the public recreation.gov availability API.

    Safe to share between concurrent tasks; requests are throttled by a
    token bucket.
    """

    def __init__(self, config: Optional[APIConfig] = None):
        self.config = config or APIConfig()
        self.endpoints = Endpoints(base_url=self.config.base_url)
        self.rate_limiter = RateLimiter(self.config.requests_per_second)
        self.client = httpx.AsyncClient(
            headers=self.config.headers,
            timeout=self.config.timeout,
            follow_redirects=True
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def close(self):
        await self.client.aclose()

    async def fetch_month(self, campground_id: str, month: str) -> List[AvailabilityRecord]:
        """
        Get available sites for one campground and month.

        Args:
            campground_id: Campground ID (e.g., "232447")
            month: Month to check as "YYYY-MM"

        Raises:
            TransportError: network failure or timeout
            UpstreamError: non-2xx response or unreadable body
        """
        context = f"{campground_id}/{month}"
        url = self.endpoints.campground_month(campground_id, month)

        async with self.rate_limiter:
            try:
                response = await self.client.get(url)
            except httpx.HTTPError as e:
                raise TransportError(f"Fetch failed for {context}: {e}") from e

        if not 200 <= response.status_code < 300:
            raise UpstreamError(
                f"HTTP {response.status_code} for {context}",
                response.status_code,
                context
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                f"Invalid JSON for {context}: {e}",
                response.status_code,
                context
            ) from e

        records = parse_availability(data, campground_id, month)
        logger.debug(f"{context}: {len(records)} site(s) with availability")
        return records

"""
Recreation.gov availability endpoints

⚠️ WARNING: These endpoints are undocumented and may change without notice.
They were found by watching the campground availability page in DevTools.
"""
from dataclasses import dataclass
from urllib.parse import urlencode


BASE_URL = "https://www.recreation.gov"


@dataclass
class Endpoints:
    """URL builders for the public (no auth) camping API"""

    base_url: str = BASE_URL

    @property
    def api_base(self) -> str:
        return f"{self.base_url.rstrip('/')}/api"

    def campground_month(self, campground_id: str, month: str) -> str:
        """
        Availability for every campsite in a campground for one month.

        GET /api/camps/availability/campground/{id}/month?start_date={ISO_DATE}

        The start_date is the first of the month, e.g. "2026-05-01T00:00:00.000Z".
        """
        params = {"start_date": month_start(month)}
        return f"{self.api_base}/camps/availability/campground/{campground_id}/month?{urlencode(params)}"


def month_start(month: str) -> str:
    """First instant of a "YYYY-MM" month as the API expects it"""
    return f"{month}-01T00:00:00.000Z"


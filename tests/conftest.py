from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import pytest

from campwatch.common.config import Config, WatchConfig, TelegramConfig
from campwatch.common.models import AvailabilityRecord, PollState, SendResult
from campwatch.telegram.markdown import escape


def make_response(status_code: int = 200, json=None, url: str = "https://example.test/") -> httpx.Response:
    """Real httpx response bound to a request, for AsyncMock return values"""
    return httpx.Response(status_code, json=json, request=httpx.Request("GET", url))


def make_record(site_id: str = "1001", dates=("2026-05-10", "2026-05-11"), campground_id: str = "232447", **kwargs):
    return AvailabilityRecord(
        campground_id=campground_id,
        site_id=site_id,
        site_name=kwargs.pop("site_name", f"A{site_id}"),
        loop=kwargs.pop("loop", "Loop A"),
        site_type=kwargs.pop("site_type", "STANDARD NONELECTRIC"),
        available_dates=tuple(dates),
        month=kwargs.pop("month", "2026-05"),
    )


@pytest.fixture()
def config():
    return Config(
        watch=WatchConfig(
            campground_ids=["232447", "232450"],
            months=["2026-05"],
            min_nights=2,
        ),
        telegram=TelegramConfig(token="123:abc", chat_id="42"),
    )


@pytest.fixture()
def state():
    return PollState()


@pytest.fixture()
def transport():
    """Stand-in chat transport that records sent messages"""
    return SimpleNamespace(
        escape=escape,
        send_message=AsyncMock(return_value=SendResult(ok=True)),
    )

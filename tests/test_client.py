"""
Tests for the availability client (campwatch/api/client.py)
"""
import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from campwatch.api.client import RecGovAPIClient, parse_availability
from campwatch.common.config import APIConfig
from campwatch.common.errors import TransportError, UpstreamError

from .conftest import make_response


PAYLOAD = {
    "campsites": {
        "1001": {
            "site": "A001",
            "loop": "Loop A",
            "campsite_type": "STANDARD NONELECTRIC",
            "availabilities": {
                "2026-05-06T00:00:00Z": "Available",
                "2026-05-05T00:00:00Z": "Available",
                "2026-05-07T00:00:00Z": "Reserved",
            },
        },
        "1002": {
            "site": "A002",
            "availabilities": {
                "2026-05-05T00:00:00Z": "Reserved",
                "2026-05-06T00:00:00Z": "Not Available",
            },
        },
    }
}


class TestParseAvailability:
    def test_keeps_only_available_dates(self):
        data = {
            "campsites": {
                "1": {
                    "availabilities": {
                        "2026-05-05T00:00:00Z": "Available",
                        "2026-05-06T00:00:00Z": "Reserved",
                    }
                }
            }
        }
        records = parse_availability(data, "232447", "2026-05")
        assert len(records) == 1
        assert records[0].available_dates == ("2026-05-05",)

    def test_omits_sites_without_availability(self):
        records = parse_availability(PAYLOAD, "232447", "2026-05")
        assert [r.site_id for r in records] == ["1001"]

    def test_dates_sorted_and_truncated(self):
        record = parse_availability(PAYLOAD, "232447", "2026-05")[0]
        assert record.available_dates == ("2026-05-05", "2026-05-06")

    def test_site_metadata(self):
        record = parse_availability(PAYLOAD, "232447", "2026-05")[0]
        assert record.campground_id == "232447"
        assert record.site_name == "A001"
        assert record.loop == "Loop A"
        assert record.site_type == "STANDARD NONELECTRIC"
        assert record.month == "2026-05"

    def test_status_match_is_exact(self):
        data = {
            "campsites": {
                "1": {
                    "availabilities": {
                        "2026-05-05T00:00:00Z": "available",
                        "2026-05-06T00:00:00Z": "Open",
                        "2026-05-07T00:00:00Z": "Available (Hold)",
                    }
                }
            }
        }
        assert parse_availability(data, "1", "2026-05") == []

    def test_duplicate_days_collapsed(self):
        data = {
            "campsites": {
                "1": {
                    "availabilities": {
                        "2026-05-05T00:00:00Z": "Available",
                        "2026-05-05T07:00:00Z": "Available",
                    }
                }
            }
        }
        record = parse_availability(data, "1", "2026-05")[0]
        assert record.available_dates == ("2026-05-05",)

    def test_missing_campsites(self):
        assert parse_availability({}, "1", "2026-05") == []
        assert parse_availability({"campsites": None}, "1", "2026-05") == []

    def test_missing_availabilities(self):
        assert parse_availability({"campsites": {"1": {"site": "A"}}}, "1", "2026-05") == []


class TestFetchMonth:
    @pytest.mark.asyncio
    async def test_success(self):
        async with RecGovAPIClient(APIConfig()) as client:
            client.client.get = AsyncMock(return_value=make_response(200, PAYLOAD))

            records = await client.fetch_month("232447", "2026-05")

            assert [r.site_id for r in records] == ["1001"]
            url = client.client.get.call_args[0][0]
            assert "campground/232447/month" in url
            assert "start_date=2026-05-01T00%3A00%3A00.000Z" in url

    @pytest.mark.asyncio
    async def test_empty_payload(self):
        async with RecGovAPIClient() as client:
            client.client.get = AsyncMock(return_value=make_response(200, {}))
            assert await client.fetch_month("232447", "2026-05") == []

    @pytest.mark.asyncio
    async def test_http_error_raises_upstream_error(self):
        async with RecGovAPIClient() as client:
            client.client.get = AsyncMock(return_value=make_response(503, {"error": "down"}))

            with pytest.raises(UpstreamError) as exc:
                await client.fetch_month("232447", "2026-06")

            assert exc.value.status_code == 503
            assert exc.value.context == "232447/2026-06"
            assert "232447/2026-06" in str(exc.value)

    @pytest.mark.asyncio
    async def test_network_error_raises_transport_error(self):
        async with RecGovAPIClient() as client:
            client.client.get = AsyncMock(side_effect=httpx.ConnectError("connection refused"))

            with pytest.raises(TransportError) as exc:
                await client.fetch_month("232447", "2026-05")

            assert "232447/2026-05" in str(exc.value)

    @pytest.mark.asyncio
    async def test_timeout_raises_transport_error(self):
        async with RecGovAPIClient() as client:
            client.client.get = AsyncMock(side_effect=httpx.ReadTimeout("timed out"))

            with pytest.raises(TransportError):
                await client.fetch_month("232447", "2026-05")

    @pytest.mark.asyncio
    async def test_invalid_json_raises_upstream_error(self):
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_response.json.side_effect = ValueError("Expecting value")

        async with RecGovAPIClient() as client:
            client.client.get = AsyncMock(return_value=mock_response)

            with pytest.raises(UpstreamError):
                await client.fetch_month("232447", "2026-05")

    @pytest.mark.asyncio
    async def test_uses_configured_base_url(self):
        async with RecGovAPIClient(APIConfig(base_url="http://localhost:9000")) as client:
            client.client.get = AsyncMock(return_value=make_response(200, {}))
            await client.fetch_month("1", "2026-05")

            assert client.client.get.call_args[0][0].startswith("http://localhost:9000/api/")

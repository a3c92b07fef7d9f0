"""
Tests for the Telegram transport (campwatch/telegram/client.py, markdown.py)
"""
import httpx
import pytest
from unittest.mock import AsyncMock

from campwatch.common.errors import ConflictError, TransportError, UpstreamError
from campwatch.telegram.client import TelegramClient
from campwatch.telegram.markdown import escape

from .conftest import make_response


class TestEscape:
    def test_reserved_characters(self):
        assert escape("a.b-c!") == "a\\.b\\-c\\!"

    def test_all_reserved(self):
        reserved = "_*[]()~`>#+-=|{}.!"
        assert escape(reserved) == "".join(f"\\{c}" for c in reserved)

    def test_backslash_escaped_first(self):
        assert escape("a\\b") == "a\\\\b"

    def test_plain_text_unchanged(self):
        assert escape("Site A001 Loop A") == "Site A001 Loop A"

    def test_none_and_empty(self):
        assert escape(None) == ""
        assert escape("") == ""

    def test_numbers(self):
        assert escape(0) == "0"
        assert escape(2.5) == "2\\.5"


class TestSendMessage:
    @pytest.mark.asyncio
    async def test_success(self):
        async with TelegramClient("123:abc") as client:
            client.client.post = AsyncMock(return_value=make_response(200, {"ok": True, "result": {}}))

            result = await client.send_message("42", "hello")

            assert result.ok is True
            url = client.client.post.call_args[0][0]
            assert url == "https://api.telegram.org/bot123:abc/sendMessage"
            body = client.client.post.call_args[1]["json"]
            assert body == {
                "chat_id": "42",
                "text": "hello",
                "parse_mode": "MarkdownV2",
                "disable_web_page_preview": False,
            }

    @pytest.mark.asyncio
    async def test_rejected_message(self):
        async with TelegramClient("123:abc") as client:
            client.client.post = AsyncMock(return_value=make_response(
                400, {"ok": False, "description": "Bad Request: can't parse entities"}
            ))

            result = await client.send_message("42", "bad *markup")

            assert result.ok is False
            assert result.description == "Bad Request: can't parse entities"

    @pytest.mark.asyncio
    async def test_non_json_error(self):
        async with TelegramClient("123:abc") as client:
            client.client.post = AsyncMock(return_value=httpx.Response(
                502, text="Bad Gateway", request=httpx.Request("POST", "https://api.telegram.org")
            ))

            result = await client.send_message("42", "hi")

            assert result.ok is False
            assert result.description == "HTTP 502"

    @pytest.mark.asyncio
    async def test_network_error(self):
        async with TelegramClient("123:abc") as client:
            client.client.post = AsyncMock(side_effect=httpx.ConnectError("no route"))

            with pytest.raises(TransportError):
                await client.send_message("42", "hi")

    def test_escape_delegates_to_markdown(self):
        assert TelegramClient.escape("1.5") == "1\\.5"


class TestGetUpdates:
    @pytest.mark.asyncio
    async def test_parses_updates(self):
        payload = {
            "ok": True,
            "result": [
                {"update_id": 5, "message": {"chat": {"id": 42}, "text": "/status"}},
                {"update_id": 6, "message": {"chat": {"id": 7}}},
            ],
        }
        async with TelegramClient("123:abc") as client:
            client.client.get = AsyncMock(return_value=make_response(200, payload))

            updates = await client.get_updates(offset=5, timeout=30)

            assert [u.update_id for u in updates] == [5, 6]
            assert updates[0].chat_id == "42"
            assert updates[0].text == "/status"
            assert updates[1].text is None

            kwargs = client.client.get.call_args[1]
            assert kwargs["params"] == {"offset": 5, "timeout": 30}
            assert kwargs["timeout"] > 30

    @pytest.mark.asyncio
    async def test_empty_result(self):
        async with TelegramClient("123:abc") as client:
            client.client.get = AsyncMock(return_value=make_response(200, {"ok": True, "result": []}))
            assert await client.get_updates(offset=1) == []

    @pytest.mark.asyncio
    async def test_conflict(self):
        async with TelegramClient("123:abc") as client:
            client.client.get = AsyncMock(return_value=make_response(409, {"ok": False}))

            with pytest.raises(ConflictError) as exc:
                await client.get_updates(offset=1)

            assert exc.value.status_code == 409

    @pytest.mark.asyncio
    async def test_other_http_error(self):
        async with TelegramClient("123:abc") as client:
            client.client.get = AsyncMock(return_value=make_response(401, {"ok": False}))

            with pytest.raises(UpstreamError) as exc:
                await client.get_updates(offset=1)

            assert not isinstance(exc.value, ConflictError)
            assert exc.value.status_code == 401

    @pytest.mark.asyncio
    async def test_not_ok_body(self):
        async with TelegramClient("123:abc") as client:
            client.client.get = AsyncMock(return_value=make_response(200, {"ok": False, "description": "nope"}))

            with pytest.raises(UpstreamError):
                await client.get_updates(offset=1)

    @pytest.mark.asyncio
    async def test_network_error(self):
        async with TelegramClient("123:abc") as client:
            client.client.get = AsyncMock(side_effect=httpx.ReadTimeout("timed out"))

            with pytest.raises(TransportError):
                await client.get_updates(offset=1)

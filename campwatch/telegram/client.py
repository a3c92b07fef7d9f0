"""
Telegram Bot API client

Only the two calls the watcher needs: sendMessage and getUpdates.
"""
import logging
from typing import List

import httpx

from . import markdown
from ..common.errors import ConflictError, TransportError, UpstreamError
from ..common.models import ChatUpdate, SendResult

logger = logging.getLogger(__name__)

API_URL = "https://api.telegram.org"


class TelegramClient:
    """Async wrapper around the Telegram Bot HTTP API"""

    def __init__(self, token: str, api_url: str = API_URL, timeout: float = 10.0):
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.client = httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def close(self):
        await self.client.aclose()

    def method_url(self, method: str) -> str:
        return f"{self.api_url}/bot{self.token}/{method}"

    @staticmethod
    def escape(value) -> str:
        return markdown.escape(value)

    async def send_message(
        self,
        chat_id: str,
        text: str,
        parse_mode: str = "MarkdownV2",
        disable_web_page_preview: bool = False
    ) -> SendResult:
        """
        Send one message.

        Returns:
            SendResult; ok is False when Telegram rejected the message

        Raises:
            TransportError: Telegram could not be reached
        """
        try:
            response = await self.client.post(
                self.method_url("sendMessage"),
                json={
                    "chat_id": chat_id,
                    "text": text,
                    "parse_mode": parse_mode,
                    "disable_web_page_preview": disable_web_page_preview,
                }
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Telegram send failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if 200 <= response.status_code < 300 and data.get("ok", True):
            return SendResult(ok=True)
        return SendResult(
            ok=False,
            description=data.get("description") or f"HTTP {response.status_code}"
        )

    async def get_updates(self, offset: int, timeout: int = 30) -> List[ChatUpdate]:
        """
        Long-poll for new updates.

        Args:
            offset: First update id to return (last seen + 1)
            timeout: Seconds Telegram may hold the request open

        Raises:
            ConflictError: HTTP 409, another getUpdates session is active
            UpstreamError: other non-2xx response or ok=false
            TransportError: network failure or timeout
        """
        try:
            response = await self.client.get(
                self.method_url("getUpdates"),
                params={"offset": offset, "timeout": timeout},
                # The server holds the request for up to `timeout` seconds
                timeout=timeout + self.timeout,
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Telegram getUpdates failed: {e}") from e

        if response.status_code == 409:
            raise ConflictError(context="getUpdates")
        if not 200 <= response.status_code < 300:
            raise UpstreamError(
                f"HTTP {response.status_code} from getUpdates",
                response.status_code,
                "getUpdates"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(f"Invalid JSON from getUpdates: {e}", response.status_code, "getUpdates") from e

        if not data.get("ok"):
            raise UpstreamError(
                f"getUpdates not ok: {data.get('description', 'unknown error')}",
                response.status_code,
                "getUpdates"
            )

        return [ChatUpdate.from_api(item) for item in data.get("result", [])]

"""
Notification service for the availability watcher

Formats alerts as Telegram MarkdownV2 and delivers them to one chat.
"""
import logging
from typing import Optional, List, Sequence, Protocol

from .errors import TransportError
from .models import MatchedSite, SendResult

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 4000
# Room kept free in each chunk of a multi-part alert for the "(i/n) " prefix
ORDINAL_RESERVE = 16

ALERT_HEADER = "🚨 *SITE ALERT* 🚨\n\n"
CONTINUED_HEADER = "🚨 *SITE ALERT \\(continued\\)* 🚨\n\n"


class ChatTransport(Protocol):
    """What the notifier needs from a chat client"""

    def escape(self, value) -> str: ...

    async def send_message(self, chat_id: str, text: str) -> SendResult: ...


class Notifier:
    """Sends alerts and plain messages to the configured chat"""

    def __init__(self, transport: ChatTransport, default_chat_id: str, max_length: int = MAX_MESSAGE_LENGTH):
        self.transport = transport
        self.default_chat_id = default_chat_id
        self.max_length = max_length

    def escape(self, value) -> str:
        return self.transport.escape(value)

    def format_site(self, site: MatchedSite) -> str:
        """One alert block for a matched site"""
        esc = self.escape
        info = esc(f"{site.display_name} ({site.loop or site.site_type or '—'})")
        run = esc(" → ".join(site.matched_run))
        label = esc(f"Book Site at Campground {site.campground_id}")
        return (
            f"🔔 *Site {info}*\n"
            f"📅 {run}\n"
            f"[{label}]({site.booking_url})\n\n"
        )

    def build_match_messages(self, sites: Sequence[MatchedSite]) -> List[str]:
        """
        Split the alert for `sites` into messages under the length limit.

        Site blocks keep their order; every chunk after the first starts with
        a "continued" header, and multi-part alerts get an "(i/n)" prefix.
        """
        blocks = [self.format_site(site) for site in sites]
        chunks = self._chunk(blocks, self.max_length)
        if len(chunks) == 1:
            return chunks

        # Multi-part: re-split leaving room for the ordinal prefix
        chunks = self._chunk(blocks, self.max_length - ORDINAL_RESERVE)
        total = len(chunks)
        return [
            f"{self.escape(f'({i}/{total}) ')}{chunk}"
            for i, chunk in enumerate(chunks, start=1)
        ]

    @staticmethod
    def _chunk(blocks: Sequence[str], budget: int) -> List[str]:
        chunks: List[str] = []
        current = ALERT_HEADER
        has_blocks = False

        for block in blocks:
            if has_blocks and len(current) + len(block) > budget:
                chunks.append(current.strip())
                current = CONTINUED_HEADER + block
            else:
                current += block
            has_blocks = True
        chunks.append(current.strip())
        return chunks

    async def deliver(self, text: str, destination: Optional[str] = None) -> bool:
        """
        Send pre-formatted MarkdownV2 text.

        Failures are logged, never raised.
        """
        chat_id = destination or self.default_chat_id
        try:
            result = await self.transport.send_message(chat_id, text)
        except TransportError as e:
            logger.error(f"Telegram send failed: {e}")
            return False

        if not result.ok:
            logger.error(f"Telegram error: {result.description}")
        return result.ok

    async def notify_text(
        self,
        message: str,
        destination: Optional[str] = None,
        title: Optional[str] = None
    ) -> bool:
        """Send a plain message, optionally under a bold title"""
        text = self.escape(message)
        if title:
            text = f"*{self.escape(title)}*\n{text}"
        return await self.deliver(text, destination)

    async def notify_matches(self, sites: Sequence[MatchedSite], destination: Optional[str] = None) -> int:
        """
        Send the site alert, chunk by chunk and in order.

        Returns:
            Number of chunks delivered successfully
        """
        if not sites:
            return 0

        chunks = self.build_match_messages(sites)
        delivered = 0
        for chunk in chunks:
            if await self.deliver(chunk, destination):
                delivered += 1

        logger.info(f"Notifications sent: {delivered}/{len(chunks)} successful")
        return delivered

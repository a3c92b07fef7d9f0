"""
Telegram command listener

Long-polls getUpdates and answers commands from the configured chat:

    /check, /poll   run a poll now and reply with the result
    /status         show settings and poll count
    /help, /start   list commands
"""
import asyncio
import logging
from enum import Enum
from typing import Optional

from .client import TelegramClient
from ..common.config import Config
from ..common.errors import ConflictError, TransportError, UpstreamError
from ..common.models import ChatUpdate, PollState, PollTrigger
from ..common.notifications import Notifier
from ..common.scheduler import format_interval

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "👋 *Campground Watcher Commands*:\n\n"
    "/check \\- Trigger manual poll\n"
    "/status \\- View current settings"
)
CHECK_ACK = "🔍 *Manual check triggered*\\.\\.\\."


class ListenerState(str, Enum):
    IDLE = "idle"
    WAITING = "waiting"


class CommandListener:
    """
    Long-poll loop: IDLE -> WAITING on each getUpdates call, back to IDLE on
    the response or error.
    """

    def __init__(
        self,
        client: TelegramClient,
        notifier: Notifier,
        poller,
        config: Config,
        state: PollState,
    ):
        self.client = client
        self.notifier = notifier
        self.poller = poller
        self.config = config
        self.poll_state = state
        self.chat_id = str(config.telegram.chat_id)
        self.state = ListenerState.IDLE
        self._stop_event = asyncio.Event()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self):
        self._stop_event.set()

    async def run(self):
        """Listen until stop() is called"""
        logger.info("Telegram: listening for commands (/check, /status)...")
        while not self.stopped:
            delay = await self.step()
            if delay and not await self._backoff(delay):
                break
        logger.info("Telegram listener stopped")

    async def step(self) -> float:
        """
        One long-poll round trip.

        Returns:
            Seconds to back off before the next round (0 after success)
        """
        telegram = self.config.telegram
        self.state = ListenerState.WAITING
        try:
            updates = await self.client.get_updates(
                offset=self.poll_state.last_update_id + 1,
                timeout=telegram.long_poll_timeout
            )
        except ConflictError:
            logger.error("Telegram conflict (409): another instance is likely running with this token.")
            logger.error("Stop all other bot processes or containers.")
            return telegram.conflict_backoff
        except (TransportError, UpstreamError) as e:
            logger.error(f"Telegram listener error: {e}")
            return telegram.error_backoff
        finally:
            self.state = ListenerState.IDLE

        try:
            for update in updates:
                self.poll_state.advance_update_id(update.update_id)
                await self.handle_update(update)
        except Exception as e:
            logger.exception(f"Telegram listener error: {e}")
            return telegram.error_backoff

        return 0

    async def handle_update(self, update: ChatUpdate) -> Optional[str]:
        """
        Dispatch one update.

        Returns:
            The command handled, or None if the update was ignored
        """
        if not update.text or update.chat_id != self.chat_id:
            return None

        command = parse_command(update.text)

        if command in ("/check", "/poll"):
            await self.notifier.deliver(CHECK_ACK, update.chat_id)
            await self.poller.run_poll(PollTrigger.MANUAL, reply_to=update.chat_id)
        elif command == "/status":
            await self.notifier.deliver(self.format_status(), update.chat_id)
        elif command in ("/help", "/start"):
            await self.notifier.deliver(HELP_TEXT, update.chat_id)
        else:
            return None

        logger.info(f"Handled {command} from chat {update.chat_id}")
        return command

    def format_status(self) -> str:
        esc = self.notifier.escape
        watch = self.config.watch
        snapshot = self.poll_state.snapshot()
        return "\n".join([
            "ℹ️ *Watcher Status*",
            f"📍 Campgrounds: {esc(', '.join(watch.campground_ids))}",
            f"📅 Months: {esc(', '.join(watch.months))}",
            f"⏱ Interval: every {esc(format_interval(watch.interval_minutes))}",
            f"🌙 Min Nights: {esc(watch.min_nights)}",
            f"🚩 Start Dates: {esc(watch.describe_start_dates())}",
            f"🔢 Poll Count: {esc(snapshot.poll_count)}",
        ])

    async def _backoff(self, delay: float) -> bool:
        """Sleep `delay` seconds; False if stopped meanwhile"""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return True
        return False


def parse_command(text: str) -> str:
    """Command word of a message, lower-cased and without any @botname suffix"""
    word = text.strip().split(maxsplit=1)[0] if text.strip() else ""
    return word.split("@", 1)[0].lower()

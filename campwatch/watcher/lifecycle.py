"""
Watcher lifecycle

Owns the HTTP clients, runs the scheduled poll and the Telegram listener side
by side, and shuts both down on SIGINT/SIGTERM.
"""
import asyncio
import logging
import signal
from typing import Optional, List

from .poller import Poller
from ..api.client import RecGovAPIClient
from ..common.config import Config
from ..common.models import PollState, PollTrigger
from ..common.notifications import Notifier
from ..common.scheduler import IntervalScheduler
from ..telegram.client import TelegramClient
from ..telegram.listener import CommandListener

logger = logging.getLogger(__name__)


class Watcher:
    """
    Top-level runner.

    Usage:
        async with Watcher(config) as watcher:
            await watcher.run()
    """

    def __init__(self, config: Config):
        self.config = config
        self.state = PollState()
        self.api = RecGovAPIClient(config.api)

        self.telegram: Optional[TelegramClient] = None
        self.notifier: Optional[Notifier] = None
        if config.telegram.enabled:
            self.telegram = TelegramClient(config.telegram.token)
            self.notifier = Notifier(self.telegram, config.telegram.chat_id)
        else:
            logger.warning("Telegram credentials are not set. Notifications will only be logged.")

        self.poller = Poller(self.api, config.watch, self.state, self.notifier)
        self.scheduler = IntervalScheduler(config.watch.interval_seconds)

        self.listener: Optional[CommandListener] = None
        if self.telegram:
            self.listener = CommandListener(
                self.telegram, self.notifier, self.poller, config, self.state
            )

        self._stopped = asyncio.Event()
        self._tasks: List[asyncio.Task] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def close(self):
        await self.api.close()
        if self.telegram:
            await self.telegram.close()

    async def scheduled_poll(self):
        await self.poller.run_poll(PollTrigger.SCHEDULED)

    def install_signal_handlers(self):
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.stop)
            except (NotImplementedError, RuntimeError):
                # add_signal_handler is unavailable on Windows event loops
                logger.debug(f"Cannot install handler for {sig.name}")

    def stop(self):
        """Stop polling and listening; safe to call more than once"""
        if self._stopped.is_set():
            return
        logger.info("🛑 Gracefully shutting down...")
        self.scheduler.cancel()
        if self.listener:
            self.listener.stop()
        self._stopped.set()

    async def run(self):
        """Poll now, then every interval, until stop() or a signal"""
        self.install_signal_handlers()

        self._tasks = [asyncio.create_task(self.scheduler.run(self.scheduled_poll))]
        if self.listener:
            self._tasks.append(asyncio.create_task(self.listener.run()))

        await self._stopped.wait()

        # In-flight requests are dropped; there is no state to flush
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)

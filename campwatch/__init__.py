"""
Recreation.gov Campsite Availability Watcher

Polls campground availability for the configured months, looks for runs of
consecutive open nights and pushes alerts to a Telegram chat.

1. Availability API (campwatch.api)
   - Month-by-month campground availability from recreation.gov
   - Concurrent fan-out across campgrounds and months

2. Telegram (campwatch.telegram)
   - MarkdownV2 alerts to a single chat
   - Long-poll command listener (/check, /status, /help)
"""
from .common.config import Config, load_config

__version__ = "1.0.0"

__all__ = [
    "Config",
    "load_config",
]

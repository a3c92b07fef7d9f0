"""
Common utilities for the availability watcher
"""
from .config import Config, load_config
from .errors import (
    WatcherError,
    ConfigError,
    TransportError,
    UpstreamError,
    ConflictError,
)
from .matching import find_qualifying_run, split_runs
from .models import (
    AVAILABLE_STATUS,
    AvailabilityRecord,
    MatchedSite,
    PollTrigger,
    PollOutcome,
    PollResult,
    PollState,
    ChatUpdate,
    SendResult,
)
from .notifications import Notifier
from .scheduler import IntervalScheduler, RateLimiter, format_interval

__all__ = [
    "Config",
    "load_config",
    "WatcherError",
    "ConfigError",
    "TransportError",
    "UpstreamError",
    "ConflictError",
    "find_qualifying_run",
    "split_runs",
    "AVAILABLE_STATUS",
    "AvailabilityRecord",
    "MatchedSite",
    "PollTrigger",
    "PollOutcome",
    "PollResult",
    "PollState",
    "ChatUpdate",
    "SendResult",
    "Notifier",
    "IntervalScheduler",
    "RateLimiter",
    "format_interval",
]

"""
Telegram chat transport and command listener
"""
from .client import TelegramClient
from .listener import CommandListener, ListenerState
from .markdown import escape

__all__ = [
    "TelegramClient",
    "CommandListener",
    "ListenerState",
    "escape",
]

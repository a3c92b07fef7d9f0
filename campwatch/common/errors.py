"""
Error types shared by the availability and Telegram clients
"""
from typing import Optional


class WatcherError(Exception):
    """Base class for watcher errors"""
    pass


class ConfigError(WatcherError):
    """Raised when the configuration is missing or invalid"""
    pass


class TransportError(WatcherError):
    """Raised when a remote service cannot be reached (network failure, timeout)"""
    pass


class UpstreamError(WatcherError):
    """Raised when a remote service answers with a non-success status"""
    def __init__(self, message: str, status_code: Optional[int] = None, context: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.context = context


class ConflictError(UpstreamError):
    """Raised on HTTP 409 from getUpdates: another process holds the long-poll session"""
    def __init__(self, message: str = "Conflict: another listener is polling with this token", context: Optional[str] = None):
        super().__init__(message, status_code=409, context=context)

"""
Poll orchestration and process lifecycle
"""
from .poller import Poller
from .lifecycle import Watcher

__all__ = [
    "Poller",
    "Watcher",
]

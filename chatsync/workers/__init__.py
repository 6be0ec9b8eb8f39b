"""Background workers."""

from chatsync.workers.poller import Poller

__all__ = ["Poller"]

import logging
from datetime import datetime, timezone
from mediroute.store.base import SignalStore

logger = logging.getLogger(__name__)

class SignalResetter:
    def __init__(self, store: SignalStore):
        self.store = store

    def reset_all(self) -> int:
        """Force every stored signal back to the normal N-S green pattern"""
        count = self.store.reset_signals(datetime.now(timezone.utc))
        logger.info("Reset %d signals to normal", count)
        return count

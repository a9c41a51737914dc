"""Deduplicating signal stream with a capped, newest-first history.

A candidate replaces the active signal only when its timestamp differs from
the active one. Two different signals sharing a timestamp collide and the
second is dropped; content is never compared. Subscribers are notified once
per accepted signal and never for a dropped duplicate.
"""

import logging
from collections import deque
from typing import Callable, List, Optional

from models import Signal

logger = logging.getLogger(__name__)

SignalCallback = Callable[[Signal], None]


class SignalStream:
    def __init__(self, capacity: int = 5):
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self.capacity = capacity
        self.active: Optional[Signal] = None
        # appendleft keeps newest first; maxlen drops the oldest from the right
        self._history: deque[Signal] = deque(maxlen=capacity)
        self._subscribers: List[SignalCallback] = []

    @property
    def history(self) -> List[Signal]:
        return list(self._history)

    def subscribe(self, callback: SignalCallback) -> Callable[[], None]:
        """Register ``callback`` for accepted signals; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def offer(self, signal: Signal) -> bool:
        """Accept ``signal`` unless it shares the active signal's timestamp."""
        if self.active is not None and signal.timestamp == self.active.timestamp:
            logger.debug("Duplicate signal dropped: %s %s @ %s",
                         signal.type, signal.strategy_name, signal.timestamp.isoformat())
            return False

        self.active = signal
        self._history.appendleft(signal)
        logger.info("Signal accepted: %s %s entry=%.2f sl=%.2f tp=%.2f (%s)",
                    signal.type, signal.strategy_name, signal.entry,
                    signal.stop_loss, signal.take_profit, signal.reason_text)
        self._notify(signal)
        return True

    def _notify(self, signal: Signal):
        for callback in list(self._subscribers):
            try:
                callback(signal)
            except Exception:
                # Acceptance is already committed; keep notifying the rest
                logger.exception("Signal subscriber %r failed", callback)

    def clear(self):
        self.active = None
        self._history.clear()

"""Single-instrument analysis engine.

``AnalysisEngine`` owns the price window and the signal stream and processes
one sample at a time to completion:

    submit_sample -> indicators -> sentiment -> policy -> signal stream

Indicators and levels are evaluated from the window as it stood before the
incoming sample, so the new price is judged against prior history (this is
what allows a price to break above a resistance formed by earlier samples).
The sample is appended before the policy's minimum-sample check.
"""

import logging
import math
from datetime import datetime, timezone
from decimal import Decimal
from numbers import Real
from typing import Callable, List, Optional

from errors import InvalidInput
from indicators import calculate_levels, compute_technical_state
from models import Levels, PriceWindow, Sentiment, Signal, TechnicalState
from policy import evaluate_signal
from sentiment import estimate_sentiment
from signal_stream import SignalCallback, SignalStream

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _validate_price(price) -> float:
    if isinstance(price, bool) or not isinstance(price, (Real, Decimal)):
        raise InvalidInput(price, "price must be a real number")
    if isinstance(price, Decimal) and not price.is_finite():
        raise InvalidInput(price, "price must be finite")
    value = float(price)
    if not math.isfinite(value):
        raise InvalidInput(price, "price must be finite")
    if value <= 0.0:
        raise InvalidInput(price, "price must be positive")
    return value


class AnalysisEngine:
    def __init__(
        self,
        window_capacity: int = 50,
        history_capacity: int = 5,
        clock: Optional[Clock] = None,
        on_signal: Optional[SignalCallback] = None,
    ):
        self.window = PriceWindow(window_capacity)
        self.stream = SignalStream(history_capacity)
        self._clock = clock or _utc_now
        self._reset_state()
        if on_signal is not None:
            self.stream.subscribe(on_signal)

    def _reset_state(self):
        self._technical = TechnicalState(rsi=50.0, ema=0.0, trend="Flat")
        self._levels = Levels(support=0.0, resistance=0.0)
        self._sentiment = Sentiment(status="Neutral", score=50.0)

    # --- input ---

    def submit_sample(self, price: float, timestamp: Optional[datetime] = None) -> Optional[Signal]:
        """Process one price sample; returns the signal it produced if accepted."""
        try:
            value = _validate_price(price)
        except InvalidInput:
            logger.warning("Rejected price sample %r", price)
            raise

        # Caller timestamps are kept as given; clock readings are cut to whole seconds
        ts = timestamp if timestamp is not None else self._clock().replace(microsecond=0)

        history = self.window.snapshot() or [value]
        self._technical = compute_technical_state(history, value)
        self._levels = calculate_levels(history)
        self.window.append(value)

        self._sentiment = estimate_sentiment(self._technical.trend, self._technical.rsi)
        candidate = evaluate_signal(
            value, self._levels, self._technical, self._sentiment, ts, len(self.window)
        )
        logger.debug("Sample %.4f: rsi=%.2f ema=%.4f trend=%s sentiment=%s(%.1f)",
                     value, self._technical.rsi, self._technical.ema,
                     self._technical.trend, self._sentiment.status, self._sentiment.score)
        if candidate is None:
            return None
        return candidate if self.stream.offer(candidate) else None

    # --- pull interface ---

    @property
    def sample_count(self) -> int:
        return len(self.window)

    def current_technical(self) -> TechnicalState:
        return self._technical

    def current_levels(self) -> Levels:
        return self._levels

    def current_sentiment(self) -> Sentiment:
        return self._sentiment

    def active_signal(self) -> Optional[Signal]:
        return self.stream.active

    def signal_history(self) -> List[Signal]:
        """Up to ``history_capacity`` accepted signals, newest first."""
        return self.stream.history

    # --- push interface ---

    def subscribe(self, callback: SignalCallback) -> Callable[[], None]:
        return self.stream.subscribe(callback)

    def reset(self):
        self.window.clear()
        self.stream.clear()
        self._reset_state()

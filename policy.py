"""Rule-based signal policy.

Rules are evaluated in order and the first match wins:

1. Breakout Buy     price > resistance, Uptrend, Bullish
2. Pullback Buy     Uptrend, RSI < 40
3. Breakdown Sell   price < support, Downtrend, Bearish
4. Rejection Sell   Downtrend, RSI > 60

Stops and targets use fixed absolute offsets from the entry price (1:2).
"""

import logging
from datetime import datetime
from typing import Optional, Tuple

from models import Levels, Sentiment, Side, Signal, TechnicalState

logger = logging.getLogger(__name__)

MIN_SAMPLES = 5
STOP_DISTANCE = 4.00
TARGET_DISTANCE = 8.00
PULLBACK_RSI = 40.0
REJECTION_RSI = 60.0


def apply_risk_model(side: Side, entry: float) -> Tuple[float, float]:
    """Return (stop_loss, take_profit) for a signal entered at ``entry``."""
    if side == "BUY":
        return entry - STOP_DISTANCE, entry + TARGET_DISTANCE
    if side == "SELL":
        return entry + STOP_DISTANCE, entry - TARGET_DISTANCE
    raise ValueError(f"unknown side: {side!r}")


def _make_signal(side: Side, price: float, timestamp: datetime, strategy: str, reason: str) -> Signal:
    stop_loss, take_profit = apply_risk_model(side, price)
    return Signal(
        type=side,
        entry=price,
        stop_loss=stop_loss,
        take_profit=take_profit,
        timestamp=timestamp,
        strategy_name=strategy,
        reason_text=reason,
    )


def evaluate_signal(
    price: float,
    levels: Levels,
    technical: TechnicalState,
    sentiment: Sentiment,
    timestamp: datetime,
    sample_count: int,
) -> Optional[Signal]:
    """Apply the ordered rules; ``None`` when nothing matches or data is too thin."""
    if sample_count < MIN_SAMPLES:
        logger.debug("Policy skipped: %d/%d samples", sample_count, MIN_SAMPLES)
        return None

    trend = technical.trend
    rsi = technical.rsi

    if price > levels.resistance and trend == "Uptrend" and sentiment.status == "Bullish":
        return _make_signal("BUY", price, timestamp, "Breakout Strategy", "Resistance Broken")
    if trend == "Uptrend" and rsi < PULLBACK_RSI:
        return _make_signal("BUY", price, timestamp, "Trend Pullback", "RSI Oversold in Uptrend")
    if price < levels.support and trend == "Downtrend" and sentiment.status == "Bearish":
        return _make_signal("SELL", price, timestamp, "Breakdown Strategy", "Support Broken")
    if trend == "Downtrend" and rsi > REJECTION_RSI:
        return _make_signal("SELL", price, timestamp, "Trend Rejection", "RSI Overbought in Downtrend")
    return None

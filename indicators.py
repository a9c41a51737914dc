"""Trading indicators computed on demand over the rolling price window.

This module provides the Relative Strength Index (RSI), an Exponential Moving
Average (EMA), local support/resistance levels and a trend classifier. Every
function accepts any ordered iterable of prices (typically the engine's
``collections.deque[float]``) and recomputes its value from scratch; no state is
carried between calls apart from the window itself.

Insufficient data is never an error. Each indicator has a fixed fallback:
- RSI: 50.0 (neutral)
- EMA: the last observed price
- Levels: a single-point level at the oldest observed price
"""

from typing import Iterable, List

from models import Levels, TechnicalState, Trend

RSI_PERIOD = 14
EMA_PERIOD = 20
LEVELS_LOOKBACK = 20
LEVELS_MIN_SAMPLES = 10
TREND_BAND = 0.5


def _as_floats(prices: Iterable[float]) -> List[float]:
    return [float(p) for p in prices]


def calculate_rsi(prices: Iterable[float], period: int = RSI_PERIOD) -> float:
    """Compute the RSI from simple averages of the last ``period`` deltas.

    - Returns 50.0 if there are fewer than ``period + 1`` prices.
    - Only the final ``period`` price-to-price differences contribute; there is
      no Wilder smoothing over older deltas.
    - Returns exactly 100.0 when the window holds no losses, including a
      completely flat window.
    """
    if period <= 0:
        raise ValueError("period must be > 0")

    closes = _as_floats(prices)
    if len(closes) < period + 1:
        return 50.0  # Neutral when data is insufficient

    gains = 0.0
    losses = 0.0
    for i in range(len(closes) - period, len(closes)):
        d = closes[i] - closes[i - 1]
        if d > 0:
            gains += d
        elif d < 0:
            losses += -d

    avg_gain = gains / period
    avg_loss = losses / period
    if avg_loss == 0.0:
        return 100.0

    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def calculate_ema(prices: Iterable[float], period: int = EMA_PERIOD) -> float:
    """Compute an EMA over the full sequence passed in.

    Contract:
    - Input: ordered prices, ``period`` > 0
    - Output: float EMA after folding in every sample
    - Edge cases: an empty sequence gives 0.0; fewer than ``period`` prices
      return the last price unchanged.

    The average is seeded with the oldest price of the sequence rather than an
    SMA of the first ``period`` prices, and smoothed with k = 2 / (period + 1).
    """
    if period <= 0:
        raise ValueError("period must be > 0")

    closes = _as_floats(prices)
    if not closes:
        return 0.0
    if len(closes) < period:
        return closes[-1]

    k = 2.0 / (period + 1)
    ema = closes[0]
    for p in closes[1:]:
        ema = p * k + ema * (1.0 - k)
    return ema


def calculate_levels(
    prices: Iterable[float],
    lookback: int = LEVELS_LOOKBACK,
    min_samples: int = LEVELS_MIN_SAMPLES,
) -> Levels:
    """Support and resistance as the literal min/max of the last ``lookback`` prices.

    With fewer than ``min_samples`` prices both levels sit on the oldest price.
    """
    if lookback <= 0:
        raise ValueError("lookback must be > 0")

    closes = _as_floats(prices)
    if not closes:
        return Levels(support=0.0, resistance=0.0)
    if len(closes) < min_samples:
        return Levels(support=closes[0], resistance=closes[0])

    recent = closes[-lookback:]
    return Levels(support=min(recent), resistance=max(recent))


def classify_trend(price: float, ema: float, band: float = TREND_BAND) -> Trend:
    """Uptrend/Downtrend only once price leaves the ``band`` around the EMA."""
    if price > ema + band:
        return "Uptrend"
    if price < ema - band:
        return "Downtrend"
    return "Flat"


def compute_technical_state(prices: Iterable[float], price: float) -> TechnicalState:
    """Recompute RSI(14), EMA(20) and the trend of ``price`` against the EMA."""
    closes = _as_floats(prices)
    rsi_val = calculate_rsi(closes, period=RSI_PERIOD)
    ema_val = calculate_ema(closes, period=EMA_PERIOD)
    return TechnicalState(rsi=rsi_val, ema=ema_val, trend=classify_trend(price, ema_val))

# models.py
from pydantic import BaseModel
from collections import deque
from datetime import datetime
from typing import Iterator, List, Literal, Optional
from dataclasses import dataclass

Trend = Literal["Uptrend", "Downtrend", "Flat"]
SentimentStatus = Literal["Bullish", "Bearish", "Neutral"]
Side = Literal["BUY", "SELL"]


# The rolling price buffer feeding every indicator
class PriceWindow:
    def __init__(self, capacity: int = 50):
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self.capacity = capacity
        # Oldest sample is evicted by the deque itself on overflow
        self.prices: deque[float] = deque(maxlen=capacity)

    def append(self, price: float):
        self.prices.append(float(price))

    def snapshot(self) -> List[float]:
        return list(self.prices)

    def clear(self):
        self.prices.clear()

    @property
    def latest(self) -> Optional[float]:
        return self.prices[-1] if self.prices else None

    def __len__(self) -> int:
        return len(self.prices)

    def __iter__(self) -> Iterator[float]:
        return iter(self.prices)


@dataclass(frozen=True)
class TechnicalState:
    rsi: float       # [0, 100]
    ema: float
    trend: Trend


@dataclass(frozen=True)
class Levels:
    support: float
    resistance: float


@dataclass(frozen=True)
class Sentiment:
    status: SentimentStatus
    score: float


@dataclass(frozen=True)
class Signal:
    """A trade signal. Never mutated once the policy has created it."""
    type: Side
    entry: float
    stop_loss: float
    take_profit: float
    timestamp: datetime
    strategy_name: str
    reason_text: str


# --- API models ---

class SampleRequest(BaseModel):
    price: float


class TechnicalResponse(BaseModel):
    rsi: float
    ema: float
    trend: Trend

    @classmethod
    def from_state(cls, state: TechnicalState) -> "TechnicalResponse":
        return cls(rsi=state.rsi, ema=state.ema, trend=state.trend)


class LevelsResponse(BaseModel):
    support: float
    resistance: float

    @classmethod
    def from_levels(cls, levels: Levels) -> "LevelsResponse":
        return cls(support=levels.support, resistance=levels.resistance)


class SentimentResponse(BaseModel):
    status: SentimentStatus
    score: float

    @classmethod
    def from_sentiment(cls, sentiment: Sentiment) -> "SentimentResponse":
        return cls(status=sentiment.status, score=sentiment.score)


class SignalResponse(BaseModel):
    type: Side
    entry: float
    stop_loss: float
    take_profit: float
    timestamp: datetime
    strategy_name: str
    reason_text: str

    @classmethod
    def from_signal(cls, signal: Signal) -> "SignalResponse":
        return cls(
            type=signal.type,
            entry=signal.entry,
            stop_loss=signal.stop_loss,
            take_profit=signal.take_profit,
            timestamp=signal.timestamp,
            strategy_name=signal.strategy_name,
            reason_text=signal.reason_text,
        )


class SnapshotResponse(BaseModel):
    symbol: str
    samples: int
    technical: TechnicalResponse
    levels: LevelsResponse
    sentiment: SentimentResponse
    active_signal: Optional[SignalResponse] = None
    history: List[SignalResponse] = []


class SubmitResponse(BaseModel):
    technical: TechnicalResponse
    levels: LevelsResponse
    sentiment: SentimentResponse
    signal: Optional[SignalResponse] = None

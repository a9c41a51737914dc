import os

# The service tests drive the engine through POST /samples only
os.environ.setdefault("FEED_ENABLED", "false")

from datetime import datetime, timedelta, timezone

import pytest

from models import Signal

BASE_TS = datetime(2024, 1, 2, 9, 30, tzinfo=timezone.utc)


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime = BASE_TS):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


@pytest.fixture
def step_clock():
    return StepClock()


def make_signal(side="BUY", entry=1900.0, seconds=0, strategy="Breakout Strategy", reason="Resistance Broken"):
    if side == "BUY":
        sl, tp = entry - 4.0, entry + 8.0
    else:
        sl, tp = entry + 4.0, entry - 8.0
    return Signal(
        type=side,
        entry=entry,
        stop_loss=sl,
        take_profit=tp,
        timestamp=BASE_TS + timedelta(seconds=seconds),
        strategy_name=strategy,
        reason_text=reason,
    )


@pytest.fixture
def signal_factory():
    return make_signal

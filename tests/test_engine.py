"""End-to-end tests for AnalysisEngine: window, accessors, signals and validation."""

import math
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from engine import AnalysisEngine
from errors import InvalidInput

RISING_20 = [1900.0 + i * 20.0 / 19.0 for i in range(20)]


def test_defaults_before_first_sample():
	engine = AnalysisEngine()
	assert engine.sample_count == 0
	assert engine.current_technical().rsi == 50.0
	assert engine.current_technical().trend == "Flat"
	assert engine.current_levels().support == 0.0
	assert engine.current_sentiment().status == "Neutral"
	assert engine.current_sentiment().score == 50.0
	assert engine.active_signal() is None
	assert engine.signal_history() == []


def test_window_is_bounded_fifo():
	engine = AnalysisEngine(window_capacity=50)
	prices = [100.0 + i for i in range(60)]
	for p in prices:
		engine.submit_sample(p)
	assert engine.sample_count == 50
	assert engine.window.snapshot() == prices[10:]


def test_breakout_scenario(step_clock):
	received = []
	engine = AnalysisEngine(clock=step_clock, on_signal=received.append)
	for p in RISING_20:
		engine.submit_sample(p)

	signal = engine.submit_sample(1921.0)

	technical = engine.current_technical()
	assert technical.trend == "Uptrend"
	assert technical.rsi == 100.0
	assert engine.current_levels().resistance == 1920.0
	assert engine.current_sentiment().status == "Bullish"
	assert engine.current_sentiment().score == pytest.approx(80.0)

	assert signal is not None
	assert signal is engine.active_signal()
	assert signal.type == "BUY"
	assert signal.strategy_name == "Breakout Strategy"
	assert signal.entry == 1921.0
	assert signal.stop_loss == 1917.0
	assert signal.take_profit == 1929.0
	assert received[-1] is signal
	assert engine.signal_history()[0] is signal
	assert len(engine.signal_history()) == 5


def test_no_signal_before_five_samples(step_clock):
	engine = AnalysisEngine(clock=step_clock)
	for p in (1900.0, 1901.0, 1902.0, 1903.0):
		assert engine.submit_sample(p) is None
	assert engine.active_signal() is None

	# Fifth sample clears the floor: price 1904 breaks the single-point level at 1900
	signal = engine.submit_sample(1904.0)
	assert signal is not None
	assert signal.strategy_name == "Breakout Strategy"


def test_same_second_signals_deduplicated():
	fixed = datetime(2024, 1, 2, 9, 30, 0, 250000, tzinfo=timezone.utc)
	received = []
	engine = AnalysisEngine(clock=lambda: fixed, on_signal=received.append)
	for p in (1900.0, 1901.0, 1902.0, 1903.0, 1904.0, 1905.0, 1906.0):
		engine.submit_sample(p)

	assert len(received) == 1
	assert engine.signal_history() == received
	assert engine.active_signal().entry == 1904.0
	assert engine.active_signal().timestamp.microsecond == 0


def test_explicit_timestamp_is_used(step_clock):
	engine = AnalysisEngine(clock=step_clock)
	for p in (1900.0, 1901.0, 1902.0, 1903.0):
		engine.submit_sample(p)
	ts = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
	signal = engine.submit_sample(1904.0, timestamp=ts)
	assert signal.timestamp == ts


def test_falling_prices_emit_sell(step_clock):
	engine = AnalysisEngine(clock=step_clock)
	for i in range(20):
		engine.submit_sample(1950.0 - i)
	signal = engine.active_signal()
	assert signal.type == "SELL"
	assert signal.strategy_name == "Breakdown Strategy"
	assert signal.stop_loss == signal.entry + 4.0
	assert signal.take_profit == signal.entry - 8.0


@pytest.mark.parametrize("bad", [0, 0.0, -1.5, math.nan, math.inf, "1900", None, True])
def test_invalid_samples_rejected(bad):
	engine = AnalysisEngine()
	engine.submit_sample(1900.0)
	with pytest.raises(InvalidInput):
		engine.submit_sample(bad)
	assert engine.window.snapshot() == [1900.0]


def test_reset_clears_everything(step_clock):
	engine = AnalysisEngine(clock=step_clock)
	for p in RISING_20:
		engine.submit_sample(p)
	engine.reset()
	assert engine.sample_count == 0
	assert engine.active_signal() is None
	assert engine.signal_history() == []
	assert engine.current_technical().rsi == 50.0


def test_bad_capacity_rejected():
	with pytest.raises(ValueError):
		AnalysisEngine(window_capacity=0)
	with pytest.raises(ValueError):
		AnalysisEngine(history_capacity=0)


def test_sub_second_timestamps_are_distinct_signals():
	base = datetime(2024, 1, 2, 0, 0, 0, tzinfo=timezone.utc)
	received = []
	engine = AnalysisEngine(on_signal=received.append)
	stamps = [base + timedelta(milliseconds=100 * i) for i in range(6)]
	for price, ts in zip((1900.0, 1901.0, 1902.0, 1903.0, 1904.0, 1905.0), stamps):
		engine.submit_sample(price, timestamp=ts)

	# Samples at 0.4s and 0.5s both break out and keep their own timestamps
	assert [s.timestamp for s in received] == [stamps[4], stamps[5]]
	assert engine.signal_history() == [received[1], received[0]]


def test_pullback_buy_from_samples(step_clock):
	# Drop from 1950 to 1900 inside the last 14 deltas: RSI 0, resistance stays 1950
	engine = AnalysisEngine(clock=step_clock)
	for p in [1950.0] * 6 + [1900.0] * 14:
		engine.submit_sample(p)

	# EMA sits near 1912.3, so 1920 is an uptrend still below resistance
	signal = engine.submit_sample(1920.0)
	assert engine.current_technical().trend == "Uptrend"
	assert engine.current_technical().rsi == 0.0
	assert engine.current_levels().resistance == 1950.0
	assert signal is not None
	assert signal.type == "BUY"
	assert signal.strategy_name == "Trend Pullback"
	assert signal.reason_text == "RSI Oversold in Uptrend"
	assert (signal.stop_loss, signal.take_profit) == (1916.0, 1928.0)


def test_rejection_sell_from_samples(step_clock):
	# Rise from 1850 to 1900 inside the last 14 deltas: RSI 100, support stays 1850
	engine = AnalysisEngine(clock=step_clock)
	for p in [1850.0] * 6 + [1900.0] * 14:
		engine.submit_sample(p)

	# EMA sits near 1887.7, so 1880 is a downtrend still above support
	signal = engine.submit_sample(1880.0)
	assert engine.current_technical().trend == "Downtrend"
	assert engine.current_technical().rsi == 100.0
	assert engine.current_levels().support == 1850.0
	assert signal is not None
	assert signal.type == "SELL"
	assert signal.strategy_name == "Trend Rejection"
	assert signal.reason_text == "RSI Overbought in Downtrend"
	assert (signal.stop_loss, signal.take_profit) == (1884.0, 1872.0)


def test_decimal_price_accepted():
	engine = AnalysisEngine()
	engine.submit_sample(Decimal("1900.5"))
	assert engine.window.snapshot() == [1900.5]
	with pytest.raises(InvalidInput):
		engine.submit_sample(Decimal("-1"))
	with pytest.raises(InvalidInput):
		engine.submit_sample(Decimal("NaN"))
	with pytest.raises(InvalidInput):
		engine.submit_sample(Decimal("sNaN"))

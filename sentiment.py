"""Sentiment proxy derived from trend and momentum.

There is no external news or fundamentals feed: the label follows the trend
and the score leans on RSI, giving a momentum-correlated confidence value.
"""

from models import Sentiment, Trend

SCORE_MIN = 0.0
SCORE_MAX = 100.0


def estimate_sentiment(trend: Trend, rsi: float) -> Sentiment:
    """Map (trend, rsi) to a sentiment label and score.

    For rsi in [0, 100] the score stays within [20, 80]; it is still clamped
    to [0, 100] for out-of-range rsi values.
    """
    if trend == "Uptrend":
        status, score = "Bullish", 70.0 + rsi / 10.0
    elif trend == "Downtrend":
        status, score = "Bearish", 30.0 - rsi / 10.0
    else:
        status, score = "Neutral", 50.0

    score = min(max(score, SCORE_MIN), SCORE_MAX)
    return Sentiment(status=status, score=score)

# config.py
import os
from dotenv import load_dotenv

# Load environment variables from a .env file for local development
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Service configuration loaded from environment variables."""
    # --- Instrument ---
    # Label only; the engine tracks a single instrument
    SYMBOL = os.getenv('SYMBOL', 'XAUUSD')

    # --- Engine buffers ---
    WINDOW_CAPACITY = int(os.getenv('WINDOW_CAPACITY', 50))
    HISTORY_CAPACITY = int(os.getenv('HISTORY_CAPACITY', 5))

    # --- Simulated feed ---
    FEED_ENABLED = _env_bool('FEED_ENABLED', True)
    FEED_INTERVAL_MS = int(os.getenv('FEED_INTERVAL_MS', 1000))
    FEED_BASE_PRICE = float(os.getenv('FEED_BASE_PRICE', 1900.0))
    FEED_JITTER = float(os.getenv('FEED_JITTER', 0.6))

    # --- WebSocket fan-out ---
    WS_QUEUE_SIZE = int(os.getenv('WS_QUEUE_SIZE', 100))

    # --- Logging ---
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


config = Config()

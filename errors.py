# errors.py
"""Error kinds raised by the analysis engine.

Insufficient data is never an error: indicators fall back to neutral values.
Only out-of-contract input (a non-positive or non-finite price) is rejected.
"""


class EngineError(Exception):
    """Base class for analysis engine errors."""


class InvalidInput(EngineError, ValueError):
    """Raised when a price sample is outside the accepted domain."""

    def __init__(self, value, reason: str = "price must be a positive finite number"):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid price sample {value!r}: {reason}")

# stream_stub.py
# Async price emitter for a single instrument (simulated ticks).
# Usage example:
#   import asyncio
#   from stream_stub import price_stream
#   async def main():
#       async for tick in price_stream(symbol="XAUUSD", interval_ms=500):
#           print(tick)
#   asyncio.run(main())

import asyncio
import random
import time
from dataclasses import dataclass
from typing import AsyncIterator, Optional

MIN_PRICE = 0.01


@dataclass
class Tick:
    symbol: str
    ts: float        # epoch seconds
    price: float


async def price_stream(symbol: str = "XAUUSD",
                       base_price: float = 1900.0,
                       jitter: float = 0.6,
                       interval_ms: int = 1000,
                       seed: Optional[int] = None) -> AsyncIterator[Tick]:
    """Yield simulated ticks at ~interval_ms cadence.
    Prices follow a noisy random walk and never drop below MIN_PRICE.
    """
    rng = random.Random(seed)
    price = float(base_price)
    while True:
        drift = rng.uniform(-0.02, 0.02)
        shock = rng.gauss(0.0, jitter)
        price = max(MIN_PRICE, price * (1.0 + drift * 1e-3) + shock)
        yield Tick(symbol=symbol, ts=time.time(), price=round(price, 2))
        await asyncio.sleep(max(0.0, interval_ms / 1000.0))


if __name__ == "__main__":
    async def _demo():
        async for t in price_stream(interval_ms=250):
            print(t)
    asyncio.run(_demo())

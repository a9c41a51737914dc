# main.py
import asyncio
import logging
from datetime import datetime, timezone
from typing import AsyncIterable, List, Optional

from fastapi import FastAPI, Request, WebSocket, status
from fastapi.responses import JSONResponse
from starlette.websockets import WebSocketDisconnect

from config import config
from engine import AnalysisEngine
from errors import InvalidInput
from logger import setup_logging
from models import (
    LevelsResponse,
    SampleRequest,
    SentimentResponse,
    Signal,
    SignalResponse,
    SnapshotResponse,
    SubmitResponse,
    TechnicalResponse,
)
from stream_stub import Tick, price_stream

setup_logging()
logger = logging.getLogger(__name__)

# --- INITIAL SETUP ---
# One engine per process: a single instrument, updated synchronously on the event loop
ENGINE = AnalysisEngine(
    window_capacity=config.WINDOW_CAPACITY,
    history_capacity=config.HISTORY_CAPACITY,
)

app = FastAPI(title="Price Signal Engine")


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc)},
    )


# --- 1) ASYNC CONSUMER TASK (Runs in the background) ---

async def price_consumer_task(engine: AnalysisEngine, ticks: AsyncIterable[Tick]):
    """Feed every tick into the engine in arrival order."""
    logger.info("Starting price consumer")
    try:
        async for tick in ticks:
            ts = datetime.fromtimestamp(tick.ts, tz=timezone.utc)
            try:
                engine.submit_sample(tick.price, timestamp=ts)
            except InvalidInput:
                # Already logged by the engine; skip the bad tick and keep consuming
                continue
    except asyncio.CancelledError:
        logger.info("Price consumer task cancelled.")
        raise


@app.on_event("startup")
async def startup_event():
    app.state.consumer_task = None
    if not config.FEED_ENABLED:
        logger.info("Simulated feed disabled; waiting for POST /samples")
        return
    ticks = price_stream(
        symbol=config.SYMBOL,
        base_price=config.FEED_BASE_PRICE,
        jitter=config.FEED_JITTER,
        interval_ms=config.FEED_INTERVAL_MS,
    )
    app.state.consumer_task = asyncio.create_task(price_consumer_task(ENGINE, ticks))


@app.on_event("shutdown")
async def shutdown_event():
    task = app.state.consumer_task
    if task is None:
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


def _queue_forwarder(queue: asyncio.Queue):
    """Engine callback feeding a bounded queue; the oldest signal is dropped when full."""
    def forward(signal: Signal):
        if queue.full():
            dropped = queue.get_nowait()
            logger.warning("Slow WebSocket client: dropped queued signal @ %s",
                           dropped.timestamp.isoformat())
        queue.put_nowait(signal)

    return forward


def _signal_or_none(signal: Optional[Signal]) -> Optional[SignalResponse]:
    return SignalResponse.from_signal(signal) if signal is not None else None


# --- 2) HTTP Endpoints ---

# Declared async so submission runs on the event loop, where WebSocket subscriber queues live
@app.post("/samples", response_model=SubmitResponse, tags=["Feed"])
async def submit_sample(body: SampleRequest):
    signal = ENGINE.submit_sample(body.price)
    return SubmitResponse(
        technical=TechnicalResponse.from_state(ENGINE.current_technical()),
        levels=LevelsResponse.from_levels(ENGINE.current_levels()),
        sentiment=SentimentResponse.from_sentiment(ENGINE.current_sentiment()),
        signal=_signal_or_none(signal),
    )


@app.get("/technical", response_model=TechnicalResponse, tags=["Analysis"])
async def get_technical():
    return TechnicalResponse.from_state(ENGINE.current_technical())


@app.get("/levels", response_model=LevelsResponse, tags=["Analysis"])
async def get_levels():
    return LevelsResponse.from_levels(ENGINE.current_levels())


@app.get("/sentiment", response_model=SentimentResponse, tags=["Analysis"])
async def get_sentiment():
    return SentimentResponse.from_sentiment(ENGINE.current_sentiment())


@app.get("/signal", response_model=Optional[SignalResponse], tags=["Signal"])
async def get_signal():
    return _signal_or_none(ENGINE.active_signal())


@app.get("/signals", response_model=List[SignalResponse], tags=["Signal"])
async def get_signal_history():
    return [SignalResponse.from_signal(s) for s in ENGINE.signal_history()]


@app.get("/snapshot", response_model=SnapshotResponse, tags=["Analysis"])
async def get_snapshot():
    return SnapshotResponse(
        symbol=config.SYMBOL,
        samples=ENGINE.sample_count,
        technical=TechnicalResponse.from_state(ENGINE.current_technical()),
        levels=LevelsResponse.from_levels(ENGINE.current_levels()),
        sentiment=SentimentResponse.from_sentiment(ENGINE.current_sentiment()),
        active_signal=_signal_or_none(ENGINE.active_signal()),
        history=[SignalResponse.from_signal(s) for s in ENGINE.signal_history()],
    )


# --- 3) WS /ws/signal Endpoint ---

@app.websocket("/ws/signal")
async def websocket_endpoint(websocket: WebSocket):
    """Push each newly accepted signal; the active one is sent on connect."""
    await websocket.accept()
    queue: asyncio.Queue = asyncio.Queue(maxsize=config.WS_QUEUE_SIZE)
    unsubscribe = ENGINE.subscribe(_queue_forwarder(queue))
    # Watch the client side so a disconnect ends the handler while it waits for signals
    incoming = asyncio.ensure_future(websocket.receive())
    pending = None
    try:
        current = _signal_or_none(ENGINE.active_signal())
        await websocket.send_json({"signal": current.model_dump(mode="json") if current else None})
        while True:
            pending = asyncio.ensure_future(queue.get())
            done, _ = await asyncio.wait({pending, incoming}, return_when=asyncio.FIRST_COMPLETED)
            if incoming in done:
                message = incoming.result()
                if message["type"] == "websocket.disconnect":
                    break
                # Client messages are ignored
                incoming = asyncio.ensure_future(websocket.receive())
            if pending in done:
                payload = SignalResponse.from_signal(pending.result()).model_dump(mode="json")
                pending = None
                await websocket.send_json({"signal": payload})
            else:
                pending.cancel()
                pending = None
    except WebSocketDisconnect:
        pass
    finally:
        logger.info("Client disconnected from signal WebSocket.")
        unsubscribe()
        for task in (incoming, pending):
            if task is not None and not task.done():
                task.cancel()

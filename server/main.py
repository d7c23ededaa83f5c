"""FastAPI WebSocket server publishing IMU records by topic.

Start with::

    I2C_IMU_PARAMS=params.yaml uvicorn server.main:app --host 0.0.0.0 --port 8000

WebSocket clients connect to ``ws://<host>:8000/ws/<topic>`` and receive one
JSON message per record on that topic:

    data   orientation, angular velocity and acceleration (always published)
    mag    magnetometer vector (``publish_magnetometer: true``)
    euler  roll/pitch/yaw (``publish_euler: true``)

The IMU is opened and initialised during startup. If either step fails the
application refuses to start: without a working sensor there is nothing to
serve. For the same reason a failure of the acquisition thread while serving
is logged and shuts the server down.
"""

import asyncio
import logging
import os
import signal
import tempfile
from collections.abc import AsyncIterator
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket, WebSocketDisconnect, status

from i2c_imu.config import load_params, resolve, resolve_channels
from i2c_imu.device import open_device
from i2c_imu.pipeline import AcquisitionLoop
from server.broadcaster import TopicBroadcaster
from server.sinks import build_sinks

logger = logging.getLogger(__name__)

_QUEUE_MAX_SIZE = 10
_TIMEOUT_SECONDS = 5.0


async def _send_messages_until_disconnect(
    queue: asyncio.Queue[str],
    websocket: WebSocket,
) -> None:
    try:
        while True:
            message = await asyncio.wait_for(queue.get(), timeout=_TIMEOUT_SECONDS)
            await websocket.send_text(message)
    except TimeoutError:
        await websocket.close(code=status.WS_1001_GOING_AWAY)
    except WebSocketDisconnect:
        pass


def _request_shutdown() -> None:
    # uvicorn treats SIGTERM as a graceful shutdown request
    os.kill(os.getpid(), signal.SIGTERM)


def _on_acquisition_done(future: asyncio.Future[None]) -> None:
    if future.cancelled() or future.exception() is None:
        return
    logger.error(
        "IMU acquisition failed; shutting down", exc_info=future.exception()
    )
    _request_shutdown()


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    loop = asyncio.get_running_loop()
    params = load_params()
    config = resolve(params)
    channels = resolve_channels(params)

    broadcaster: TopicBroadcaster = application.state.broadcaster
    sinks = build_sinks(channels, broadcaster, loop)

    # A single worker thread makes every driver call, including init
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="imu")
    with tempfile.TemporaryDirectory(prefix="i2c_imu-") as settings_dir:
        driver = open_device(config, settings_dir)
        acquisition = AcquisitionLoop(driver, channels, sinks)
        try:
            await loop.run_in_executor(executor, acquisition.start)
        except Exception:
            executor.shutdown(wait=False)
            raise
        running = loop.run_in_executor(executor, acquisition.run)
        running.add_done_callback(_on_acquisition_done)
        application.state.acquisition = running
        logger.info("Publishing IMU topics: %s", ", ".join(sinks))
        try:
            yield
        finally:
            acquisition.stop()
            try:
                await running
            finally:
                executor.shutdown(wait=True)


app = FastAPI(lifespan=_lifespan)
app.state.broadcaster = TopicBroadcaster()


@app.websocket("/ws/{topic}")
async def websocket_endpoint(websocket: WebSocket, topic: str) -> None:
    """Stream the JSON messages of one topic to a connected WebSocket client.

    Each client gets its own bounded queue (max ``_QUEUE_MAX_SIZE`` messages).
    The oldest message is dropped when the queue is full so slow clients do
    not stall the acquisition thread. Unknown topics are refused with code
    1008, and every topic is refused with code 1011 once acquisition has
    stopped. The connection closes with code 1001, and the client should
    reconnect, if no message arrives within ``_TIMEOUT_SECONDS``.

    Args:
        websocket: The incoming WebSocket connection.
        topic: Topic name from the URL path.
    """
    broadcaster: TopicBroadcaster = websocket.app.state.broadcaster
    if topic not in broadcaster.topics:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    acquisition = getattr(websocket.app.state, "acquisition", None)
    if acquisition is None or acquisition.done():
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        return

    queue: asyncio.Queue[str] = asyncio.Queue(maxsize=_QUEUE_MAX_SIZE)
    broadcaster.add_subscriber(topic, queue)
    try:
        await websocket.accept()
        await _send_messages_until_disconnect(queue, websocket)
    finally:
        broadcaster.remove_subscriber(topic, queue)

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable

from home_services.errors import WatchClosedError
from home_services.watcher import ChangeWatcher

_LOGGER = logging.getLogger(__name__)

UPDATE_FRAME = "data: update\n\n"
# An SSE comment line; EventSource ignores it.
KEEP_ALIVE_FRAME = ":\n\n"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
}


async def live_update_stream(
    watcher: ChangeWatcher,
    *,
    keep_alive: float,
    is_disconnected: Callable[[], Awaitable[bool]] | None = None,
) -> AsyncIterator[str]:
    """
    Turn a started watcher into a stream of server-sent event frames.

    Every change notification becomes one `update` frame and every
    `keep_alive` seconds without one produces a keep-alive comment. The
    stream only ends when the client goes away or the watch stops, and the
    watcher is always closed on the way out.

    :param ChangeWatcher watcher: A started watcher owned by this stream.
    :param float keep_alive: Seconds of silence before a keep-alive frame.
    :param is_disconnected: Optional check for the client having gone away.
    :return AsyncIterator[str]: The encoded SSE frames.
    """
    try:
        while True:
            if is_disconnected is not None and await is_disconnected():
                _LOGGER.debug("Live update client disconnected")
                return
            try:
                await asyncio.wait_for(watcher.next_change(), timeout=keep_alive)
            except asyncio.TimeoutError:
                yield KEEP_ALIVE_FRAME
                continue
            except WatchClosedError:
                return
            except Exception as e:
                # Already logged as a warning by the watcher.
                _LOGGER.debug("Watch for live updates failed: %s", e)
                return
            _LOGGER.debug("Sending update event")
            yield UPDATE_FRAME
    finally:
        watcher.close()
        _LOGGER.debug("Live update stream closed")

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, StreamingResponse

from home_services.live_updates import SSE_HEADERS, live_update_stream
from home_services.registry import read_config
from home_services.rendering import render_index
from home_services.settings import Settings
from home_services.watcher import ChangeWatcher, WatchTracker

_LOGGER = logging.getLogger(__name__)

router = APIRouter()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_watch_tracker(request: Request) -> WatchTracker:
    return request.app.state.watch_tracker


@router.get("/health")
def health_check(
    settings: Settings = Depends(get_settings),
    tracker: WatchTracker = Depends(get_watch_tracker),
):
    return {
        "status": "ok",
        # @related: GITHUB_SHA_ENV_VAR
        "version": settings.github_sha,
        "active_watches": tracker.active,
    }


@router.get("/sse")
async def live_updates(
    request: Request,
    settings: Settings = Depends(get_settings),
    tracker: WatchTracker = Depends(get_watch_tracker),
) -> StreamingResponse:
    """
    Stream an `update` event whenever the config directory changes.

    The watch is attached before the response starts, so a failure here is
    answered with the error page rather than a broken stream.
    """
    _LOGGER.debug("GET: /sse")
    watcher = ChangeWatcher(settings.home_service_cfg_dir, tracker=tracker)
    await watcher.start()

    _LOGGER.debug("Completing sse handshake")
    return StreamingResponse(
        live_update_stream(
            watcher,
            keep_alive=settings.keep_alive_seconds,
            is_disconnected=request.is_disconnected,
        ),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


# Unknown paths fall through to the dashboard rather than a 404.
@router.get("/", response_class=HTMLResponse)
@router.get("/index.html", response_class=HTMLResponse)
@router.get(
    "/{full_path:path}", response_class=HTMLResponse, include_in_schema=False
)
def index(settings: Settings = Depends(get_settings)) -> HTMLResponse:
    registry = read_config(settings.home_service_cfg_dir)
    return HTMLResponse(render_index(registry))

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles

from home_services.errors import InfrastructureError
from home_services.logging_config import instrument_requests
from home_services.registry import ensure_config_dir
from home_services.rendering import render_error
from home_services.router import router
from home_services.settings import Settings
from home_services.watcher import WatchTracker

_LOGGER = logging.getLogger(__name__)

# we always use a path relative to the file as the calling process can come
# from multiple locations
assets_dir = Path(__file__).parent / "assets"


@asynccontextmanager
async def lifespan(app_: FastAPI):
    """Run startup and shutdown events."""
    cfg_dir = app_.state.settings.home_service_cfg_dir
    _LOGGER.info("Starting up, serving services from `%s`", cfg_dir)
    try:
        ensure_config_dir(cfg_dir)
    except InfrastructureError as e:
        # Page loads retry this and report it to the browser.
        _LOGGER.warning("Could not create config directory at startup: %s", e)
    yield
    _LOGGER.info("Shutting down...")


async def infrastructure_error_handler(
    request: Request, exc: InfrastructureError
) -> HTMLResponse:
    _LOGGER.warning("Generating error html for %s: %s", request.url.path, exc)
    return HTMLResponse(render_error(exc.context, exc.cause), status_code=500)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create the dashboard application.

    :param Settings settings: The resolved settings. When omitted they are
        read from the environment, which is what `uvicorn --factory` does.
    :return FastAPI: The application.
    """
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="home-services",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.watch_tracker = WatchTracker()

    if settings.log_json:
        instrument_requests(app)

    app.add_exception_handler(InfrastructureError, infrastructure_error_handler)

    # The asset mount has to come before the router's catch-all route.
    app.mount("/assets", StaticFiles(directory=assets_dir), name="assets")
    app.include_router(router)

    return app

import logging
import logging.config
from typing import Any

import json_logging
from fastapi import FastAPI

_LOGGER = logging.getLogger(__name__)
_JSON_LOGGING_ENABLED = False


def build_logging_config(level: str) -> dict[str, Any]:
    """
    Build the dict config used for the service and for uvicorn.

    :param str level: The root log level name, e.g. "INFO".
    :return dict[str, Any]: A `logging.config.dictConfig` configuration.
    """
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",  # Default is stderr
            },
        },
        "loggers": {
            "uvicorn": {"level": level},
            "uvicorn.access": {"level": level},
            "watchdog": {"level": "WARNING"},
        },
        "root": {
            "handlers": ["console"],
            "level": level,
        },
    }


def configure_logging(level: str = "INFO", json_logs: bool = False) -> dict[str, Any]:
    """
    Configure the root logger to stream to stdout.

    :param str level: The root log level name.
    :param bool json_logs: Emit structured JSON log lines.
    :return dict[str, Any]: The dict config that was applied, so it can be
        handed to uvicorn as well.
    """
    level = level.upper()
    config = build_logging_config(level)
    logging.config.dictConfig(config)

    if json_logs:
        _enable_json_logging()

    _LOGGER.debug("Configured logging with level %s (json=%s)", level, json_logs)
    return config


def _enable_json_logging() -> None:
    global _JSON_LOGGING_ENABLED

    # json_logging refuses to be initialised twice.
    if _JSON_LOGGING_ENABLED:
        return
    json_logging.init_fastapi(enable_json=True)
    json_logging.config_root_logger()
    _JSON_LOGGING_ENABLED = True


def instrument_requests(app: FastAPI) -> None:
    """
    Log one JSON line per request handled by the app.

    The live update stream is left out; its requests last as long as the
    browser tab.

    :param FastAPI app: The application to instrument.
    """
    _enable_json_logging()
    json_logging.init_request_instrument(app, exclude_url_patterns=[r"^/sse"])

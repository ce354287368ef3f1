import uvicorn

from home_services.logging_config import configure_logging
from home_services.main import create_app
from home_services.settings import Settings

HOST = "0.0.0.0"
PORT = 8080


def main() -> None:
    settings = Settings()
    log_config = configure_logging(settings.log_level, settings.log_json)
    app = create_app(settings)
    uvicorn.run(
        app,
        host=HOST,
        port=PORT,
        # uvicorn would replace the JSON formatter with its own otherwise.
        log_config=None if settings.log_json else log_config,
    )


if __name__ == "__main__":
    main()

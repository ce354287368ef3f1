import socket
import threading
import time
from pathlib import Path

import pytest
import uvicorn
from fastapi.testclient import TestClient

from home_services.main import create_app
from home_services.settings import Settings


@pytest.fixture
def cfg_dir(tmp_path: Path) -> Path:
    path = tmp_path / "cfg"
    path.mkdir()
    return path


# Based on
# @see: https://docs.pytest.org/en/stable/how-to/fixtures.html#factories-as-fixtures
@pytest.fixture
def make_descriptor(cfg_dir: Path):
    def _make_descriptor(
        filename: str,
        name: str = "Jellyfin",
        url: str = "http://media.lan:8096",
        description: str = "Films and TV",
    ) -> Path:
        path = cfg_dir / filename
        path.write_text(
            f'name = "{name}"\nurl = "{url}"\ndescription = "{description}"\n',
            encoding="utf-8",
        )
        return path

    return _make_descriptor


@pytest.fixture
def settings(cfg_dir: Path) -> Settings:
    return Settings(
        home_service_cfg_dir=cfg_dir,
        keep_alive_seconds=0.2,
        github_sha="test-sha",
    )


@pytest.fixture(name="client")
def client_fixture(settings: Settings):
    with TestClient(create_app(settings)) as client:
        yield client


@pytest.fixture
def live_server(settings: Settings):
    """
    Serve the app with uvicorn on a free local port.

    `TestClient` collects the whole response body before returning, so the
    never-ending live update stream has to be read from a real server.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    host, port = sock.getsockname()

    server = uvicorn.Server(
        uvicorn.Config(
            create_app(settings),
            log_config=None,
            log_level="warning",
            timeout_graceful_shutdown=1,
        )
    )
    thread = threading.Thread(target=server.run, kwargs={"sockets": [sock]})
    thread.daemon = True
    thread.start()

    deadline = time.monotonic() + 5.0
    while not server.started:
        assert time.monotonic() < deadline, "server did not start"
        time.sleep(0.01)

    yield f"http://{host}:{port}"

    server.should_exit = True
    thread.join(timeout=5.0)
    sock.close()

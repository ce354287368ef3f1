from pathlib import Path

import pytest
from pydantic import ValidationError

from home_services.settings import Settings


def test_defaults(monkeypatch):
    for name in ("HOME_SERVICE_CFG_DIR", "LOG_LEVEL", "LOG_JSON", "GITHUB_SHA"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings()

    assert settings.home_service_cfg_dir == Path("cfg")
    assert settings.log_level == "INFO"
    assert settings.log_json is False
    assert settings.keep_alive_seconds == 15.0
    assert settings.github_sha == "unknown"


def test_config_directory_comes_from_the_environment(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("HOME_SERVICE_CFG_DIR", str(tmp_path / "services"))

    assert Settings().home_service_cfg_dir == tmp_path / "services"


def test_keep_alive_must_be_positive(monkeypatch):
    monkeypatch.setenv("KEEP_ALIVE_SECONDS", "0")

    with pytest.raises(ValidationError):
        Settings()

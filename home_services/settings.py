from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Service settings loaded from environment variables.

    Resolved once at startup and handed to `create_app`; nothing reads the
    environment after that.
    """

    # @related: HOME_SERVICE_CFG_DIR
    home_service_cfg_dir: Path = Path("cfg")

    log_level: str = "INFO"
    log_json: bool = False

    # Idle period after which the live update stream sends a keep-alive frame.
    keep_alive_seconds: float = Field(default=15.0, gt=0)

    github_sha: str = "unknown"

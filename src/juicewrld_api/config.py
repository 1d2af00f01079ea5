"""Client configuration via pydantic-settings (.env + JUICEWRLD_* env vars)."""

import sys
from pathlib import Path

from loguru import logger
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import DEFAULT_BASE_URL, DEFAULT_PATH_TEMPLATES, DEFAULT_USER_AGENT


class ClientConfig(BaseSettings):
    """All client configuration with layered resolution:
    .env file < environment variables < constructor kwargs.
    """

    model_config = SettingsConfigDict(
        env_prefix="JUICEWRLD_",
        env_file=".env",
        extra="ignore",
    )

    # -- Connection --
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT

    # -- Downloads --
    download_chunk_size: int = 64 * 1024

    # -- Playback resolution (server storage layout, see models) --
    path_templates: list[str] = list(DEFAULT_PATH_TEMPLATES)

    # -- Logging --
    log_level: str = "INFO"
    log_dir: Path | None = None

    @property
    def api_root(self) -> str:
        """Base URL without a trailing slash."""
        return self.base_url.rstrip("/")

    def setup_logging(self) -> None:
        """Configure loguru for the client."""
        logger.remove()  # Remove default stderr handler

        log_format = (
            "{time:YYYY-MM-DDTHH:mm:ssZ} | {level:<8} | "
            "{extra[stage]:<10} | {message}"
        )

        def _default_extra(record):
            record["extra"].setdefault("stage", "")
            return True

        logger.add(
            sys.stderr,
            format=log_format,
            level=self.log_level.upper(),
            filter=_default_extra,
        )

        if self.log_dir is None:
            return

        self.log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(self.log_dir / "juicewrld.log"),
            format=log_format,
            level="DEBUG",
            rotation="10 MB",
            retention="30 days",
            filter=_default_extra,
        )

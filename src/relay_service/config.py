from __future__ import annotations

from typing import Literal

from pydantic import ConfigDict
from pydantic_settings import BaseSettings

from relay_service.domain.value_objects.enums import Environment


class Settings(BaseSettings):
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    APP_ENV: Literal["local", "production"] | None = None
    HEROKU_APP_NAME: str | None = None

    STATIC_DIR: str = "public"
    CORS_ORIGINS: list[str] = ["*"]

    LOG_LEVEL: str = "info"

    ALLOW_UNKNOWN_ROLE: bool = True
    NOTIFY_DISPLAY_ROUTE_FAILURE: bool = False
    OUTBOX_LIMIT: int = 256

    @property
    def server_name(self) -> str:
        return self.HEROKU_APP_NAME or "Local"

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


def detect_environment(cfg: Settings, *, force_local: bool = False) -> Environment:
    """Pick the deployment mode.

    An explicit ``APP_ENV`` wins, then a Heroku app name, then the
    ``--local`` flag. A platform-assigned ``PORT`` means production.
    """
    if cfg.APP_ENV is not None:
        return Environment(cfg.APP_ENV)
    if cfg.HEROKU_APP_NAME:
        return Environment.PRODUCTION
    if force_local:
        return Environment.LOCAL
    if "PORT" in cfg.model_fields_set:
        return Environment.PRODUCTION
    return Environment.LOCAL


settings = Settings()

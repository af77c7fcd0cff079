"""Env var config loading with pydantic-settings."""

from __future__ import annotations

import signal
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Literal

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger()

_CATALOG_PATH = Path(__file__).parent.parent / "catalog" / "services.yaml"

KNOWN_ENVIRONMENTS = ("development", "production")


class CSPKitSettings(BaseSettings):
    """Service configuration, overridden by CSPKIT_* env vars."""

    model_config = SettingsConfigDict(
        env_prefix="CSPKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Selects the development/production option overlay
    environment: str = "development"
    listen_port: int = 8080
    log_level: str = "info"
    log_json: bool = True
    catalog_file: str = str(_CATALOG_PATH)

    # Auto-generated nonces
    nonce_length: int = Field(default=16, gt=0)
    nonce_encoding: Literal["base64", "hex"] = "base64"

    # Response header middleware
    header_services: list[str] = Field(default_factory=list)
    report_uri: str = ""

    @field_validator("environment")
    @classmethod
    def normalize_environment(cls, v: str) -> str:
        # Only "production" enforces; test, staging and the like run as development
        value = v.strip().lower()
        if value not in KNOWN_ENVIRONMENTS:
            logger.warning("unknown_environment", value=v, using="development")
            return "development"
        return value


_settings: CSPKitSettings | None = None


def get_settings() -> CSPKitSettings:
    """Get or create the singleton settings instance."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def load_settings() -> CSPKitSettings:
    """Load settings from env vars (env vars override model defaults)."""
    global _settings
    _settings = CSPKitSettings()
    logger.info("config_loaded", environment=_settings.environment, catalog=_settings.catalog_file)
    return _settings


def register_reload_handler(*callbacks: Callable[[CSPKitSettings], None]) -> bool:
    """Reload settings on SIGHUP, then pass the new settings to each callback.

    Returns False when the handler could not be installed (worker thread or a
    platform without SIGHUP).
    """
    if threading.current_thread() is not threading.main_thread():
        logger.debug("skipping_sighup_handler", reason="not main thread")
        return False

    def _reload(signum, frame):
        logger.info("config_reload_triggered")
        settings = load_settings()
        for callback in callbacks:
            callback(settings)

    sighup = getattr(signal, "SIGHUP", None)
    if sighup is None:
        logger.debug("skipping_sighup_handler", reason="signal not supported")
        return False
    signal.signal(sighup, _reload)
    return True

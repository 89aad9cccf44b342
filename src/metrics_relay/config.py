"""Configuration utilities for the metrics relay."""
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

ENV_FILES = [Path(".env.local"), Path(".env")]


def load_env() -> None:
    """Load .env files in priority order."""
    for env_file in ENV_FILES:
        if env_file.exists():
            load_dotenv(env_file, override=False)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_path(name: str) -> Optional[Path]:
    value = os.getenv(name)
    return Path(value) if value else None


class RelaySettings(BaseModel):
    """Runtime configuration for the relay service."""

    http_host: str = Field(default_factory=lambda: os.getenv("RELAY_HTTP_HOST", "0.0.0.0"))
    http_port: int = Field(default_factory=lambda: int(os.getenv("RELAY_HTTP_PORT", "9091")))
    udp_host: str = Field(default_factory=lambda: os.getenv("RELAY_UDP_HOST", "0.0.0.0"))
    udp_port: int = Field(default_factory=lambda: int(os.getenv("RELAY_UDP_PORT", "9125")))
    tcp_host: str = Field(default_factory=lambda: os.getenv("RELAY_TCP_HOST", "0.0.0.0"))
    tcp_port: int = Field(default_factory=lambda: int(os.getenv("RELAY_TCP_PORT", "9126")))
    strict: bool = Field(default_factory=lambda: _env_flag("RELAY_STRICT"))
    declarations_path: Optional[Path] = Field(default_factory=lambda: _env_path("RELAY_DECLARATIONS"))
    log_level: str = Field(default_factory=lambda: os.getenv("RELAY_LOG_LEVEL", "INFO"))


@lru_cache(maxsize=1)
def get_settings() -> RelaySettings:
    """Return cached relay settings."""
    load_env()
    return RelaySettings()


def settings_dict() -> dict[str, Any]:
    """Convenience helper for exporting settings to logs."""
    return get_settings().model_dump(mode="json")

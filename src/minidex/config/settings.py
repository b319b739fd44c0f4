"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

import structlog

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir(config_dir: Path | None = None) -> Path:
    if config_dir is not None:
        return config_dir
    if _CWD_CONFIG.exists():
        return _CWD_CONFIG
    return _CONFIG_DIR


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """Load merged config from default.toml and optional profile overlay."""
    directory = _find_config_dir(config_dir)
    default_path = directory / "default.toml"
    if not default_path.exists():
        return {}
    base = _load_toml(default_path)
    if profile:
        profile_path = directory / f"{profile}.toml"
        if profile_path.exists():
            overlay = _load_toml(profile_path)
            base = _deep_merge(base, overlay)
    return base


def get_settings(profile: str | None = None, config_dir: Path | None = None) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir)
    return Settings.from_dict(raw)


class Settings:
    """Application settings from TOML config."""

    def __init__(
        self,
        *,
        service: dict[str, Any] | None = None,
        polling: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.service = service or {}
        self.polling = polling or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            service=raw.get("service"),
            polling=raw.get("polling"),
            logging=raw.get("logging"),
        )

    # Convenience accessors with defaults
    @property
    def base_url(self) -> str:
        return self.service.get("base_url", "http://localhost:4000")

    @property
    def orders_path(self) -> str:
        return self.service.get("orders_path", "/api/orders/db")

    @property
    def trades_path(self) -> str:
        return self.service.get("trades_path", "/api/orders/trades/db")

    @property
    def create_path(self) -> str:
        return self.service.get("create_path", "/api/orders")

    @property
    def request_timeout_sec(self) -> float | None:
        # 0 disables the client-side timeout and leaves it to the transport
        value = float(self.service.get("request_timeout_sec", 30.0))
        return value if value > 0 else None

    @property
    def poll_interval_sec(self) -> float:
        return float(self.polling.get("interval_sec", 2.0))

    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry."""
    level = getattr(logging, settings.logging_level, logging.INFO)
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

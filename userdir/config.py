"""Configuration management for the user list console."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import yaml

DEFAULT_SERVICE_URL = "http://127.0.0.1:8000"
DEFAULT_TIMEOUT = 10.0
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class ConsoleSettings:
    """Settings used to reach the user directory from the console."""

    service_url: str = DEFAULT_SERVICE_URL
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    @staticmethod
    def from_dict(data: Dict[str, object]) -> "ConsoleSettings":
        """Create :class:`ConsoleSettings` from raw dictionary data."""
        unknown = set(data.keys()) - {"service_url", "timeout", "log_level"}
        if unknown:
            raise ValueError(f"Unknown console configuration fields: {', '.join(sorted(unknown))}")

        service_url = str(data.get("service_url") or DEFAULT_SERVICE_URL).strip()
        if not service_url:
            raise ValueError("service_url must not be empty")

        try:
            timeout = float(data.get("timeout", DEFAULT_TIMEOUT))
        except (TypeError, ValueError) as exc:
            raise ValueError("timeout must be a number of seconds") from exc
        if timeout <= 0:
            raise ValueError("timeout must be greater than zero")

        log_level = str(data.get("log_level") or DEFAULT_LOG_LEVEL).strip().upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"Unknown log level '{log_level}'")

        return ConsoleSettings(service_url=service_url, timeout=timeout, log_level=log_level)


def load_settings(config_path: Path, *, service_url: Optional[str] = None) -> ConsoleSettings:
    """Load console settings from a YAML file.

    A missing file yields the defaults. ``service_url`` overrides the value
    read from the file.
    """
    raw: Dict[str, object] = {}
    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping")
        section = loaded.get("console", loaded)
        if not isinstance(section, dict):
            raise ValueError("The 'console' section must be a mapping")
        raw = dict(section)

    if service_url:
        raw["service_url"] = service_url
    return ConsoleSettings.from_dict(raw)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "console.yaml").resolve(strict=False)
    return candidate


__all__ = ["ConsoleSettings", "load_settings", "resolve_config_path"]

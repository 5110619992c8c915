"""Configuration management for the users API service."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_ENVIRONMENT = "development"
DEFAULT_LOG_LEVEL = "INFO"

# The first variable that is set wins.
_ENVIRONMENT_VARIABLES: Dict[str, tuple[str, ...]] = {
    "host": ("HOST",),
    "port": ("PORT",),
    "environment": ("APP_ENV", "NODE_ENV"),
    "public_dir": ("PUBLIC_DIR",),
    "log_level": ("LOG_LEVEL",),
}


def default_public_dir() -> Path:
    return (Path(__file__).resolve().parent.parent / "public").resolve(strict=False)


def _coerce_port(value: object) -> int:
    try:
        port = int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid port value: {value!r}") from exc
    if not 0 <= port <= 65535:
        raise ValueError(f"Port must be between 0 and 65535, got {port}")
    return port


def _coerce_log_level(value: object) -> str:
    level = str(value).strip().upper() or DEFAULT_LOG_LEVEL
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown log level: {value!r}")
    return level


def _resolve_directory(value: object, base_path: Path | None) -> Path:
    raw = Path(str(value)).expanduser()
    if raw.is_absolute():
        return raw.resolve(strict=False)
    base = base_path if base_path is not None else Path.cwd()
    return (base / raw).resolve(strict=False)


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the HTTP service."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    environment: str = DEFAULT_ENVIRONMENT
    public_dir: Path = field(default_factory=default_public_dir)
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"

    @staticmethod
    def from_dict(data: Mapping[str, object], base_path: Path | None = None) -> "Settings":
        """Create :class:`Settings` from raw mapping data.

        Relative ``public_dir`` values are resolved against ``base_path``,
        or the current working directory when no base path is given.
        """
        known = {item.name for item in fields(Settings)}
        unknown = set(data.keys()) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        values: Dict[str, object] = {}
        if data.get("host") is not None:
            values["host"] = str(data["host"]).strip() or DEFAULT_HOST
        if data.get("port") is not None:
            values["port"] = _coerce_port(data["port"])
        if data.get("environment") is not None:
            values["environment"] = str(data["environment"]).strip() or DEFAULT_ENVIRONMENT
        if data.get("public_dir") is not None:
            values["public_dir"] = _resolve_directory(data["public_dir"], base_path)
        if data.get("log_level") is not None:
            values["log_level"] = _coerce_log_level(data["log_level"])
        return Settings(**values)  # type: ignore[arg-type]


def resolve_config_path(
    explicit: Optional[str | Path],
    environ: Mapping[str, str],
) -> Optional[Path]:
    """Return the settings file to read, if one was requested."""
    raw = explicit or environ.get("USERS_API_CONFIG")
    if not raw:
        return None
    return Path(raw).expanduser().resolve(strict=False)


def load_settings_file(config_path: Path) -> Settings:
    """Load settings from a YAML file."""
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise ValueError("Configuration file must contain a mapping at the top level")

    return Settings.from_dict(raw, base_path=config_path.parent)


def _environment_overrides(environ: Mapping[str, str]) -> Dict[str, object]:
    raw: Dict[str, object] = {}
    for key, names in _ENVIRONMENT_VARIABLES.items():
        for name in names:
            value = environ.get(name)
            if value is not None and value.strip():
                raw[key] = value
                break
    if not raw:
        return {}
    parsed = Settings.from_dict(raw)
    return {key: getattr(parsed, key) for key in raw}


def load_settings(
    config_path: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Resolve settings from defaults, an optional YAML file and the environment."""
    env = os.environ if environ is None else environ

    path = resolve_config_path(config_path, env)
    settings = load_settings_file(path) if path is not None else Settings()

    overrides = _environment_overrides(env)
    if overrides:
        settings = replace(settings, **overrides)
    return settings


__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "Settings",
    "default_public_dir",
    "load_settings",
    "load_settings_file",
    "resolve_config_path",
]

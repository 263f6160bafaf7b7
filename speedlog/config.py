"""Configuration loading helpers for the speedtest logger."""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

DEFAULT_INTERVAL_MINUTES = 15
DEFAULT_TIMEOUT_SECONDS = 100


class ConfigError(ValueError):
    """Raised when the configuration cannot drive the measurement loop."""


@dataclass
class PathsConfig:
    log_dir: Path
    logs_dir: Path
    bin_dir: Path


@dataclass
class OoklaConfig:
    auto_download: bool = False
    binary_name: str = "speedtest"
    binary_path: Optional[str] = None
    urls: Dict[str, str] = field(default_factory=dict)
    extra_args: List[str] = field(default_factory=list)


@dataclass
class ScheduleConfig:
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class AppConfig:
    root_dir: Path
    paths: PathsConfig
    ookla: OoklaConfig
    schedule: ScheduleConfig
    logging: LoggingConfig

    @property
    def ookla_platform_key(self) -> str:
        system = platform.system().lower()
        machine = platform.machine().lower()
        # Normalize machine architecture names
        if machine in ("amd64", "x86_64"):
            machine = "x86_64"
        elif machine in ("arm64", "aarch64"):
            machine = "aarch64"
        return f"{system}_{machine}"


def _as_path(base: Path, maybe_path: Optional[str]) -> Path:
    if not maybe_path:
        raise ConfigError("Path configuration entries cannot be empty")
    return (base / Path(maybe_path).expanduser()).resolve()


def _read_yaml(path: Optional[str]) -> Tuple[Path, Dict[str, Any]]:
    if path:
        source_path = Path(path).resolve()
        if not source_path.exists():
            raise FileNotFoundError(f"Missing configuration file at {source_path}")
    else:
        source_path = Path.cwd() / "config.yaml"
        if not source_path.exists():
            return Path.cwd(), {}

    with source_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {source_path} must contain a mapping")
    return source_path.parent, data


def _section(cls, data: Dict[str, Any], name: str):
    try:
        return cls(**(data.get(name, {}) or {}))
    except TypeError as exc:
        raise ConfigError(f"Invalid {name} section: {exc}") from exc


def load_config(path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> AppConfig:
    """Load configuration from YAML, apply command line overrides and validate.

    Without an explicit ``path`` a ``config.yaml`` in the working directory is
    used when present, otherwise built-in defaults apply.
    """

    root_dir, data = _read_yaml(path)
    overrides = {key: value for key, value in (overrides or {}).items() if value is not None}

    paths_data = data.get("paths", {}) or {}
    if "log_dir" in overrides:
        log_dir = Path(overrides["log_dir"]).expanduser().resolve()
    else:
        log_dir = _as_path(root_dir, paths_data.get("log_dir", "."))
    paths = PathsConfig(
        log_dir=log_dir,
        logs_dir=_as_path(root_dir, paths_data.get("logs_dir", "logs")),
        bin_dir=_as_path(root_dir, paths_data.get("bin_dir", "bin")),
    )

    schedule = _section(ScheduleConfig, data, "schedule")
    if "interval" in overrides:
        schedule.interval_minutes = overrides["interval"]
    if "timeout" in overrides:
        schedule.timeout_seconds = overrides["timeout"]

    logging_config = _section(LoggingConfig, data, "logging")
    if "log_level" in overrides:
        logging_config.level = overrides["log_level"]

    ookla = _section(OoklaConfig, data, "ookla")

    config = AppConfig(
        root_dir=root_dir,
        paths=paths,
        ookla=ookla,
        schedule=schedule,
        logging=logging_config,
    )
    validate_config(config)
    return config


def _positive_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"{name} must be a positive integer, got {value!r}")


def _writable_dir(label: str, path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigError(f"Cannot create {label} {path}: {exc}") from exc
    if not os.access(path, os.W_OK):
        raise ConfigError(f"{label.capitalize()} {path} is not writable")


def validate_config(config: AppConfig) -> None:
    _positive_int("schedule.interval_minutes", config.schedule.interval_minutes)
    _positive_int("schedule.timeout_seconds", config.schedule.timeout_seconds)

    _writable_dir("log directory", config.paths.log_dir)
    _writable_dir("diagnostics directory", config.paths.logs_dir)

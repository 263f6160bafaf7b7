"""Application bootstrap helpers."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from .config import AppConfig, load_config
from .csv_log import CSVLogWriter
from .logging_setup import configure_logging
from .measurements.manager import MeasurementManager
from .measurements.providers import ensure_ookla_binary
from .measurements.speedtest_runner import SpeedtestRunner, build_command
from .scheduler import ScheduleState, SchedulerService

LOGGER = logging.getLogger(__name__)


class ApplicationContext:
    """Holds the wired components for one monitor process."""

    def __init__(self, config: AppConfig, started_at: Optional[datetime] = None):
        self.config = config
        log_path = configure_logging(config)
        LOGGER.debug("Diagnostics are written to %s", log_path)
        self.started_at = started_at or datetime.now()
        self.state = ScheduleState.create(
            interval_minutes=config.schedule.interval_minutes,
            timeout_seconds=config.schedule.timeout_seconds,
            log_directory=config.paths.log_dir,
            started_at=self.started_at,
        )
        self.binary_path = ensure_ookla_binary(config)
        self.runner = SpeedtestRunner(
            build_command(self.binary_path, config.ookla.extra_args),
            timeout_seconds=self.state.timeout_seconds,
        )
        self.writer = CSVLogWriter(self.state.log_path)
        if not self.writer.ensure_header():
            LOGGER.info(
                "Appending to existing log %s (%s rows)", self.writer.path, self.writer.count_rows()
            )
        self.measurements = MeasurementManager(self.runner, self.writer)
        self.scheduler = SchedulerService(self.state, self.measurements)

    def start(self) -> None:
        self.scheduler.start()


def bootstrap(config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> ApplicationContext:
    """Load configuration and wire dependencies."""

    config = load_config(config_path, overrides)
    return ApplicationContext(config)


def run_monitor(
    interval: Optional[int] = None,
    timeout: Optional[int] = None,
    log_directory: Optional[str] = None,
    config_path: Optional[str] = None,
) -> None:
    """Measure every ``interval`` minutes, forever, appending to a CSV log.

    Unset arguments fall back to the config file, then to 15 minutes, a 100
    second timeout and the current working directory.
    """

    overrides = {"interval": interval, "timeout": timeout, "log_dir": log_directory}
    bootstrap(config_path, overrides).start()

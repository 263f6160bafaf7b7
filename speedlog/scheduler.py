"""Wall-clock scheduling of speedtest ticks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Optional

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .csv_log import log_file_name
from .measurements.manager import MeasurementManager
from .measurements.speedtest_runner import MeasurementLaunchError

LOGGER = logging.getLogger(__name__)

# Failures that stop the monitor instead of skipping a tick.
FATAL_ERRORS = (MeasurementLaunchError, OSError)


def _minute(moment: datetime) -> datetime:
    return moment.replace(second=0, microsecond=0)


@dataclass
class ScheduleState:
    interval_minutes: int
    timeout_seconds: int
    log_directory: Path
    log_file_name: str
    next_due_time: datetime

    @classmethod
    def create(
        cls,
        interval_minutes: int,
        timeout_seconds: int,
        log_directory: Path,
        started_at: datetime,
    ) -> "ScheduleState":
        return cls(
            interval_minutes=interval_minutes,
            timeout_seconds=timeout_seconds,
            log_directory=Path(log_directory),
            log_file_name=log_file_name(started_at),
            next_due_time=_minute(started_at),
        )

    @property
    def log_path(self) -> Path:
        return self.log_directory / self.log_file_name

    @property
    def interval(self) -> timedelta:
        return timedelta(minutes=self.interval_minutes)

    def is_due(self, now: datetime) -> bool:
        return _minute(now) >= self.next_due_time

    def advance(self, now: datetime) -> datetime:
        """Move the due time past ``now``'s minute in whole intervals."""
        current = _minute(now)
        while self.next_due_time <= current:
            self.next_due_time += self.interval
        return self.next_due_time


class SchedulerService:
    def __init__(
        self,
        state: ScheduleState,
        measurement_manager: MeasurementManager,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.state = state
        self.measurements = measurement_manager
        self.clock = clock
        self.scheduler = BlockingScheduler(
            executors={"default": ThreadPoolExecutor(max_workers=1)},
            job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": None},
        )
        self.fatal_error: Optional[BaseException] = None

    def start(self) -> None:
        """Run ticks until the process is interrupted or a fatal error occurs."""
        trigger = IntervalTrigger(
            minutes=self.state.interval_minutes, start_date=self.state.next_due_time
        )
        self.scheduler.add_job(
            self._run_cycle,
            trigger=trigger,
            id="scheduled-measurements",
            next_run_time=self.state.next_due_time,
        )
        LOGGER.info(
            "Measuring every %s minutes (timeout %ss), first run at %s, logging to %s",
            self.state.interval_minutes,
            self.state.timeout_seconds,
            self.state.next_due_time.strftime("%H:%M"),
            self.state.log_path,
        )

        try:
            self.scheduler.start()
        except (KeyboardInterrupt, SystemExit):
            LOGGER.info("Interrupted, stopping scheduler")
            self.shutdown()

        if self.fatal_error is not None:
            raise self.fatal_error

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    def _run_cycle(self) -> None:
        now = self.clock()
        if not self.state.is_due(now):
            LOGGER.debug("Tick at %s is ahead of due time %s, skipping", now, self.state.next_due_time)
            return

        next_due = self.state.advance(now)
        LOGGER.info("Starting speedtest at %s (next due %s)", now.strftime("%H:%M"), next_due.strftime("%H:%M"))
        try:
            self.measurements.run_tick(now)
        except FATAL_ERRORS as exc:
            LOGGER.error("Stopping monitor: %s", exc)
            self.fatal_error = exc
            self.shutdown()
        except Exception as exc:  # pylint: disable=broad-except
            LOGGER.exception("Scheduled measurement failed: %s", exc)

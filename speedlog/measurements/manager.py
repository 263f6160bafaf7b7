"""Measurement orchestration for one scheduled tick."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..csv_log import CSVLogWriter
from .models import MeasurementRecord
from .parser import parse_report
from .speedtest_runner import RunState, SpeedtestRunner

LOGGER = logging.getLogger(__name__)


class MeasurementManager:
    def __init__(self, runner: SpeedtestRunner, writer: CSVLogWriter):
        self.runner = runner
        self.writer = writer

    def run_tick(self, now: datetime) -> Optional[MeasurementRecord]:
        """Run one speedtest, then parse and log it.

        Returns None when the run timed out; nothing is written in that case.
        Launch and write failures propagate to the caller.
        """

        outcome = self.runner.run()
        if outcome.state is RunState.TIMED_OUT:
            LOGGER.warning(
                "Speedtest started at %s timed out after %.0fs; no row logged",
                now.strftime("%H:%M"),
                outcome.duration_seconds,
            )
            return None

        record = parse_report(outcome.output or "", now)
        self.writer.append(record)
        LOGGER.info(
            "Logged measurement at %s %s: latency %s %s, down %s %s, up %s %s, loss %s",
            record.date,
            record.time,
            record.latency,
            record.latency_unit,
            record.down_speed,
            record.down_speed_unit,
            record.up_speed,
            record.up_speed_unit,
            record.packet_loss,
        )
        return record

"""Run the Ookla speedtest CLI as a bounded background process."""

from __future__ import annotations

import enum
import logging
import subprocess
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

LOGGER = logging.getLogger(__name__)


class MeasurementLaunchError(RuntimeError):
    """The measurement utility could not be started at all."""


class RunState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"


@dataclass
class RunOutcome:
    state: RunState
    output: Optional[str]
    return_code: Optional[int]
    duration_seconds: float


def build_command(binary_path: Union[str, Path], extra_args: Sequence[str] = ()) -> List[str]:
    command = [str(binary_path), "--accept-license", "--accept-gdpr"]
    command += list(extra_args)
    return command


class SpeedtestRunner:
    """Launches one speedtest at a time and waits for it up to a deadline."""

    def __init__(self, command: Sequence[str], timeout_seconds: int):
        self.command = list(command)
        self.timeout_seconds = timeout_seconds
        self.state = RunState.IDLE

    def run(self) -> RunOutcome:
        started = time.monotonic()
        # stdout and stderr share one temp file; it is removed when closed
        with tempfile.TemporaryFile(mode="w+", encoding="utf-8", errors="replace") as capture:
            try:
                process = subprocess.Popen(
                    self.command,
                    stdout=capture,
                    stderr=subprocess.STDOUT,
                    stdin=subprocess.DEVNULL,
                )
            except OSError as exc:
                self.state = RunState.IDLE
                raise MeasurementLaunchError(
                    f"Unable to start measurement utility {self.command[0]}: {exc}"
                ) from exc

            self.state = RunState.RUNNING
            LOGGER.debug("Started %s (pid %s)", " ".join(self.command), process.pid)

            try:
                return_code = process.wait(timeout=self.timeout_seconds)
            except subprocess.TimeoutExpired:
                LOGGER.warning(
                    "Speedtest did not finish within %s seconds; terminating pid %s",
                    self.timeout_seconds,
                    process.pid,
                )
                process.kill()
                process.wait()
                self.state = RunState.TIMED_OUT
                return RunOutcome(
                    state=RunState.TIMED_OUT,
                    output=None,
                    return_code=None,
                    duration_seconds=time.monotonic() - started,
                )

            capture.seek(0)
            output = capture.read()

        self.state = RunState.COMPLETED
        duration = time.monotonic() - started
        if return_code != 0:
            LOGGER.warning("Speedtest exited with status %s after %.1fs", return_code, duration)
        return RunOutcome(
            state=RunState.COMPLETED,
            output=output,
            return_code=return_code,
            duration_seconds=duration,
        )

"""Append-only CSV log of measurement records."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from .measurements.models import CSV_HEADER, MeasurementRecord

SEPARATOR = ", "


def _cell(value: str) -> str:
    # a comma inside a value would add a column
    return " ".join(value.replace(",", ";").split())


def log_file_name(started_at: datetime) -> str:
    """``Ookla_<M>.<D>.<YYYY>_<HHMM>.csv`` for the time the monitor started."""
    return (
        f"Ookla_{started_at.month}.{started_at.day}.{started_at.year}"
        f"_{started_at.strftime('%H%M')}.csv"
    )


class CSVLogWriter:
    def __init__(self, path: Path):
        self.path = Path(path)

    def ensure_header(self) -> bool:
        """Write the header row to a new or empty log; returns False if it already has content."""
        if self.path.exists() and self.path.stat().st_size > 0:
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._append_line(SEPARATOR.join(CSV_HEADER))
        return True

    def append(self, record: MeasurementRecord) -> None:
        self._append_line(SEPARATOR.join(_cell(value) for value in record.as_row()))

    def count_rows(self) -> int:
        if not self.path.exists():
            return 0
        with self.path.open("r", encoding="utf-8") as handle:
            return max(sum(1 for line in handle if line.strip()) - 1, 0)

    def _append_line(self, line: str) -> None:
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            handle.write(line + "\n")

"""Turn the captured console report of one speedtest run into a record."""

from __future__ import annotations

from datetime import datetime
from typing import Dict

from .extractors import extract_fields
from .models import RECORD_FIELDS, SENTINEL, MeasurementRecord


def format_date(timestamp: datetime) -> str:
    return f"{timestamp.month}/{timestamp.day}/{timestamp.year}"


def format_time(timestamp: datetime) -> str:
    return timestamp.strftime("%H:%M")


def parse_report(text: str, timestamp: datetime) -> MeasurementRecord:
    """Scan ``text`` line by line and build a fully populated record.

    Fields that no line supplied are set to ``SENTINEL``; parsing never fails
    because of missing or malformed lines.
    """

    values: Dict[str, str] = {name: "" for name in RECORD_FIELDS}
    values["date"] = format_date(timestamp)
    values["time"] = format_time(timestamp)

    for line in text.splitlines():
        values.update(extract_fields(line))

    for name, value in values.items():
        if not value:
            values[name] = SENTINEL

    return MeasurementRecord(**values)

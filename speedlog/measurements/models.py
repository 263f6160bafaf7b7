"""Shared dataclasses for measurements."""

from __future__ import annotations

from dataclasses import astuple, dataclass, fields
from typing import List

SENTINEL = "ERROR"

CSV_HEADER = [
    "Date",
    "Time",
    "Server",
    "State",
    "NodeID",
    "ISP",
    "Latency",
    "LatencyUnit",
    "Jitter",
    "JitterUnit",
    "DownSpeed",
    "DownSpeedUnit",
    "DownSize",
    "DownSizeUnit",
    "UpSpeed",
    "UpSpeedUnit",
    "UpSize",
    "UpSizeUnit",
    "PacketLoss",
    "ResultURL",
]


@dataclass(frozen=True)
class MeasurementRecord:
    """One row of the measurement log, every value kept as text."""

    date: str
    time: str
    server: str
    state: str
    node_id: str
    isp: str
    latency: str
    latency_unit: str
    jitter: str
    jitter_unit: str
    down_speed: str
    down_speed_unit: str
    down_size: str
    down_size_unit: str
    up_speed: str
    up_speed_unit: str
    up_size: str
    up_size_unit: str
    packet_loss: str
    result_url: str

    def as_row(self) -> List[str]:
        return list(astuple(self))


RECORD_FIELDS = [f.name for f in fields(MeasurementRecord)]

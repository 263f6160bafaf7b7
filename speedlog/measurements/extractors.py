"""Per-marker field extraction for the Ookla console report.

Every extractor takes a single line of report text and returns ``None`` when
the line does not carry its marker. Otherwise it returns a dict keyed by
``MeasurementRecord`` field names holding the sub-values it managed to pull
out. Sub-values that could not be found are left out of the dict so the
report parser can fill them with the sentinel.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional, Tuple

Fields = Dict[str, str]
Extractor = Callable[[str], Optional[Fields]]

_NUMBER_UNIT = re.compile(r"^([-+]?\d+(?:\.\d+)?)([^\d\s.].*)$")


def _after_marker(line: str, marker: str) -> Optional[str]:
    """Return the text following ``marker`` (case-insensitive), or None."""
    index = line.lower().find(marker.lower())
    if index < 0:
        return None
    return line[index + len(marker):]


def _split_paren(text: str) -> Tuple[str, Optional[str]]:
    """Split ``"a b (c d)"`` into ``("a b", "c d")``; inner is None without a paren."""
    head, sep, tail = text.partition("(")
    if not sep:
        return text.strip(), None
    inner = tail.split(")", 1)[0]
    # newer CLI builds append ", low: ..., high: ..." inside the parens
    inner = inner.split(",", 1)[0]
    return head.strip(), inner.strip()


def _value_unit(text: Optional[str]) -> Tuple[str, str]:
    if not text:
        return "", ""
    value, sep, unit = text.strip().partition(" ")
    if not sep:
        # CLI 1.2 prints "0.42ms" inside the parens
        match = _NUMBER_UNIT.match(value)
        if not match:
            return "", ""
        value, unit = match.groups()
    return value.strip(), unit.strip()


def _strip_label(text: str, label: str) -> str:
    index = text.lower().find(label.lower())
    if index >= 0:
        text = text[:index] + text[index + len(label):]
    return text.strip().lstrip(":=").strip()


def _non_empty(**values: str) -> Fields:
    return {key: value for key, value in values.items() if value}


def extract_server(line: str) -> Optional[Fields]:
    rest = _after_marker(line, "Server:")
    if rest is None:
        return None

    name, comma, remainder = rest.partition(",")
    if not comma:
        name, remainder = rest.split("(", 1)[0], ""
    state, node = _split_paren(remainder)
    if node is None and "(" in rest:
        _, node = _split_paren(rest)

    node_id = ""
    if node:
        node_id = _strip_label(node, "id")

    return _non_empty(server=name.strip(), state=state, node_id=node_id)


def extract_isp(line: str) -> Optional[Fields]:
    rest = _after_marker(line, "ISP:")
    if rest is None:
        return None
    return _non_empty(isp=rest.strip())


def extract_latency(line: str) -> Optional[Fields]:
    rest = _after_marker(line, "Latency:")
    if rest is None:
        return None
    head, inner = _split_paren(rest)
    latency, latency_unit = _value_unit(head)
    jitter, jitter_unit = ("", "")
    if inner is not None:
        jitter, jitter_unit = _value_unit(_strip_label(inner, "jitter"))
    return _non_empty(
        latency=latency,
        latency_unit=latency_unit,
        jitter=jitter,
        jitter_unit=jitter_unit,
    )


def _extract_transfer(line: str, marker: str, prefix: str) -> Optional[Fields]:
    rest = _after_marker(line, marker)
    if rest is None:
        return None
    head, inner = _split_paren(rest)
    speed, speed_unit = _value_unit(head)
    size, size_unit = ("", "")
    if inner is not None:
        size, size_unit = _value_unit(_strip_label(inner, "data used:"))
    return _non_empty(
        **{
            f"{prefix}_speed": speed,
            f"{prefix}_speed_unit": speed_unit,
            f"{prefix}_size": size,
            f"{prefix}_size_unit": size_unit,
        }
    )


def extract_download(line: str) -> Optional[Fields]:
    return _extract_transfer(line, "Download:", "down")


def extract_upload(line: str) -> Optional[Fields]:
    return _extract_transfer(line, "Upload:", "up")


def extract_packet_loss(line: str) -> Optional[Fields]:
    rest = _after_marker(line, "Packet Loss:")
    if rest is None:
        return None
    return _non_empty(packet_loss=rest.strip())


def extract_result_url(line: str) -> Optional[Fields]:
    rest = _after_marker(line, "URL:")
    if rest is None:
        return None
    return _non_empty(result_url=rest.strip())


EXTRACTORS: List[Extractor] = [
    extract_server,
    extract_isp,
    extract_latency,
    extract_download,
    extract_upload,
    extract_packet_loss,
    extract_result_url,
]


def extract_fields(line: str) -> Fields:
    """Apply every extractor to ``line`` and merge what they found."""
    merged: Fields = {}
    for extractor in EXTRACTORS:
        found = extractor(line)
        if found:
            merged.update(found)
    return merged

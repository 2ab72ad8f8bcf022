"""Free-text place name parsing and province scoping.

Upstream reports carry a single comma-separated place name in the order
``barangay, municipality, province[, ...]``. Components are normalized with
:func:`~emergency_rollup.config.normalize_name` before they are compared or
used as rollup keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .config import normalize_name

MIN_SEGMENTS = 3


class MalformedReportError(ValueError):
    """Raised when a report's place name cannot be split into admin levels."""


@dataclass(frozen=True)
class ParsedLocation:
    barangay: str
    municipality: str
    province: str


def parse_place_name(value: str | None) -> List[str]:
    return [normalize_name(part) for part in (value or "").split(",")]


def parse_location(value: str | None) -> ParsedLocation:
    if value is None or not value.strip():
        raise MalformedReportError("report is missing a place name")
    segments = parse_place_name(value)
    if len(segments) < MIN_SEGMENTS:
        raise MalformedReportError(f"invalid place name format: {value!r}")
    barangay, municipality, province = segments[:MIN_SEGMENTS]
    return ParsedLocation(barangay=barangay, municipality=municipality, province=province)


def province_matches(province: str, target: str) -> bool:
    """Case-insensitive substring match of the target against a province segment."""
    normalized = normalize_name(province)
    if not normalized:
        return False
    return normalize_name(target) in normalized

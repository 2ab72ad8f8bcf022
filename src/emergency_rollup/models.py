"""Pydantic models for upstream emergency reports and fetch results."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, List

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .time_utils import parse_report_timestamp


def _to_count(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        count = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(count, 0)


def _to_coordinate(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        coord = float(value)
    except (TypeError, ValueError):
        return 0.0
    return coord if math.isfinite(coord) else 0.0


class EmergencyReport(BaseModel):
    """One citizen-submitted emergency report as returned by the upstream API."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    place_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("placeName", "placename", "place_name"),
    )
    number_of_people: int = Field(
        default=0,
        validation_alias=AliasChoices("numberOfPeople", "number_of_people"),
    )
    needs: List[str] = Field(default_factory=list)
    status: str | None = None
    timestamp: datetime | None = None
    latitude: float = 0.0
    longitude: float = 0.0

    @field_validator("place_name", mode="before")
    @classmethod
    def coerce_place_name(cls, value: Any) -> str | None:
        # Only free text can be split into admin levels.
        return value if isinstance(value, str) else None

    @field_validator("number_of_people", mode="before")
    @classmethod
    def coerce_number_of_people(cls, value: Any) -> int:
        return _to_count(value)

    @field_validator("needs", mode="before")
    @classmethod
    def coerce_needs(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple, set)):
            return []
        tags = []
        for tag in value:
            if tag is None:
                continue
            cleaned = str(tag).strip()
            if cleaned:
                tags.append(cleaned)
        return tags

    @field_validator("status", mode="before")
    @classmethod
    def coerce_status(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @field_validator("timestamp", mode="before")
    @classmethod
    def coerce_timestamp(cls, value: Any) -> datetime | None:
        return parse_report_timestamp(value)

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def coerce_coordinate(cls, value: Any) -> float:
        return _to_coordinate(value)

    def is_pending(self, marker: str = "pending") -> bool:
        return self.status == marker


class FetchResult(BaseModel):
    success: bool
    data: List[Any] = Field(default_factory=list)
    error: str | None = None

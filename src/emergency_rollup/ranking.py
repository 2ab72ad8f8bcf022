"""Ranked view of a rollup and pending-status severity helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal

from .config import RollupConfig
from .rollup import BarangaySummary, MunicipalitySummary, RollupResult

Severity = Literal["high", "medium", "low"]


@dataclass(frozen=True)
class RankedBarangay:
    name: str
    summary: BarangaySummary


@dataclass(frozen=True)
class RankedMunicipality:
    name: str
    summary: MunicipalitySummary
    barangays: List[RankedBarangay]


def rank_rollup(result: RollupResult) -> List[RankedMunicipality]:
    """Order municipalities, and barangays within each, by affected people.

    ``sorted`` is stable, so equal totals keep first-seen order.
    """
    municipalities = sorted(
        result.municipalities.items(),
        key=lambda item: item[1].total_people,
        reverse=True,
    )
    ranked: List[RankedMunicipality] = []
    for name, summary in municipalities:
        barangays = sorted(summary.barangays.items(), key=lambda item: item[1].total_people, reverse=True)
        ranked.append(
            RankedMunicipality(
                name=name,
                summary=summary,
                barangays=[RankedBarangay(name=b_name, summary=b_summary) for b_name, b_summary in barangays],
            )
        )
    return ranked


def status_ratio(pending: int, resolved: int) -> float:
    total = pending + resolved
    if total <= 0:
        return 0.0
    return pending / total


def classify_severity(pending: int, resolved: int, config: RollupConfig | None = None) -> Severity:
    cfg = config or RollupConfig()
    ratio = status_ratio(pending, resolved)
    if ratio > cfg.high_severity_threshold:
        return "high"
    if ratio > cfg.medium_severity_threshold:
        return "medium"
    return "low"

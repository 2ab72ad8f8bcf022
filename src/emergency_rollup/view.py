"""Input/output boundary between the rollup engine and a presentation layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Literal

from .config import RollupConfig
from .ranking import RankedMunicipality, classify_severity, rank_rollup, status_ratio
from .rollup import BarangaySummary, MunicipalitySummary, RollupResult, aggregate_reports

ViewState = Literal["loading", "unavailable", "empty", "no_matches", "ready"]


@dataclass
class SummaryView:
    state: ViewState
    message: str
    config: RollupConfig
    rollup: RollupResult | None = None
    municipalities: List[RankedMunicipality] = field(default_factory=list)


def build_summary_view(
    data: Any,
    *,
    is_loading: bool = False,
    config: RollupConfig | None = None,
    now: datetime | None = None,
) -> SummaryView:
    cfg = config or RollupConfig()
    if is_loading:
        return SummaryView(state="loading", message="Fetching emergency reports...", config=cfg)
    if not isinstance(data, (list, tuple)):
        return SummaryView(state="unavailable", message="No emergency data available", config=cfg)
    if not data:
        return SummaryView(state="empty", message="No emergency reports yet", config=cfg)

    rollup = aggregate_reports(data, cfg, now=now)
    ranked = rank_rollup(rollup)
    if not ranked:
        return SummaryView(
            state="no_matches",
            message=f"No data available for {cfg.province_label} region",
            config=cfg,
            rollup=rollup,
        )
    return SummaryView(
        state="ready",
        message="Emergency Summary by Municipality",
        config=cfg,
        rollup=rollup,
        municipalities=ranked,
    )


def summary_payload(view: SummaryView) -> dict:
    rollup = view.rollup
    return {
        "state": view.state,
        "message": view.message,
        "target_province": view.config.target_province,
        "counts": {
            "total_records": rollup.total_records if rollup else 0,
            "admitted": rollup.admitted if rollup else 0,
            "out_of_scope": rollup.out_of_scope if rollup else 0,
            "rejected": rollup.rejected if rollup else 0,
            "failed": rollup.failed if rollup else 0,
        },
        "municipalities": [
            {
                "name": m.name,
                **_bucket_payload(m.summary, view.config),
                "barangays": [
                    {
                        "name": b.name,
                        **_bucket_payload(b.summary, view.config),
                        "location": {
                            "latitude": b.summary.location.latitude,
                            "longitude": b.summary.location.longitude,
                        },
                        "report_count": len(b.summary.reports),
                    }
                    for b in m.barangays
                ],
            }
            for m in view.municipalities
        ],
        "diagnostics": [d.to_dict() for d in rollup.diagnostics] if rollup else [],
    }


def _bucket_payload(summary: MunicipalitySummary | BarangaySummary, config: RollupConfig) -> dict:
    return {
        "total_people": summary.total_people,
        "needs": sorted(summary.needs),
        "pending": summary.pending_count,
        "resolved": summary.resolved_count,
        "status_ratio": round(status_ratio(summary.pending_count, summary.resolved_count), 4),
        "severity": classify_severity(summary.pending_count, summary.resolved_count, config),
        "latest_update": summary.latest_update.isoformat(),
    }

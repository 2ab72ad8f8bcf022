"""Municipality → barangay rollup of emergency reports.

Each run folds an already-fetched list of reports into fresh summary
buckets. Records are processed independently: a record that cannot be
parsed or folded is reported as a :class:`Diagnostic` and the run moves on.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Literal, Set

from .config import RollupConfig
from .location import MalformedReportError, parse_location, province_matches
from .models import EmergencyReport
from .time_utils import EPOCH, utc_now

logger = logging.getLogger(__name__)

DiagnosticKind = Literal["malformed", "invalid_record", "processing_error"]


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass
class BarangaySummary:
    location: GeoPoint
    total_people: int = 0
    needs: Set[str] = field(default_factory=set)
    pending_count: int = 0
    resolved_count: int = 0
    latest_update: datetime = EPOCH
    reports: List[EmergencyReport] = field(default_factory=list)

    @property
    def report_count(self) -> int:
        return self.pending_count + self.resolved_count


@dataclass
class MunicipalitySummary:
    total_people: int = 0
    needs: Set[str] = field(default_factory=set)
    pending_count: int = 0
    resolved_count: int = 0
    latest_update: datetime = EPOCH
    barangays: Dict[str, BarangaySummary] = field(default_factory=dict)

    @property
    def report_count(self) -> int:
        return self.pending_count + self.resolved_count

    def barangay_for(self, name: str, report: EmergencyReport) -> BarangaySummary:
        summary = self.barangays.get(name)
        if summary is None:
            # First report seen for a barangay pins its map location.
            summary = BarangaySummary(location=GeoPoint(report.latitude, report.longitude))
            self.barangays[name] = summary
        return summary


@dataclass(frozen=True)
class Diagnostic:
    index: int
    kind: DiagnosticKind
    message: str
    place_name: str | None = None

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "kind": self.kind,
            "message": self.message,
            "place_name": self.place_name,
        }


@dataclass
class RollupResult:
    target_province: str
    municipalities: Dict[str, MunicipalitySummary] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    total_records: int = 0
    admitted: int = 0
    out_of_scope: int = 0

    @property
    def rejected(self) -> int:
        return sum(1 for d in self.diagnostics if d.kind != "processing_error")

    @property
    def failed(self) -> int:
        return sum(1 for d in self.diagnostics if d.kind == "processing_error")

    def municipality_for(self, name: str) -> MunicipalitySummary:
        summary = self.municipalities.get(name)
        if summary is None:
            summary = MunicipalitySummary()
            self.municipalities[name] = summary
        return summary


def coerce_report(record: Any) -> EmergencyReport:
    if isinstance(record, EmergencyReport):
        return record
    if not isinstance(record, Mapping):
        raise TypeError(f"expected a report mapping, got {type(record).__name__}")
    return EmergencyReport.model_validate(dict(record))


def aggregate_reports(
    reports: Iterable[Any],
    config: RollupConfig | None = None,
    *,
    now: datetime | None = None,
) -> RollupResult:
    """Fold reports into a two-level rollup for the configured province.

    ``now`` stands in for reports without a usable timestamp; it is taken
    once per run so every undated report in the run gets the same value.
    """
    cfg = config or RollupConfig()
    fallback_time = now or utc_now()
    result = RollupResult(target_province=cfg.target_province)

    for index, record in enumerate(reports):
        result.total_records += 1
        try:
            report = coerce_report(record)
        except (TypeError, ValueError, OverflowError) as exc:
            logger.warning("Skipping invalid report at index %d: %s", index, exc)
            result.diagnostics.append(Diagnostic(index=index, kind="invalid_record", message=str(exc)))
            continue

        try:
            location = parse_location(report.place_name)
        except MalformedReportError as exc:
            logger.warning("Skipping report at index %d: %s", index, exc)
            result.diagnostics.append(
                Diagnostic(index=index, kind="malformed", message=str(exc), place_name=report.place_name)
            )
            continue

        if not province_matches(location.province, cfg.target_province):
            result.out_of_scope += 1
            continue

        result.admitted += 1
        try:
            _fold_report(result, report, location.municipality, location.barangay, cfg, fallback_time)
        except Exception as exc:
            logger.error("Error processing report at index %d (%s): %s", index, report.place_name, exc)
            logger.debug("Report processing traceback", exc_info=True)
            result.diagnostics.append(
                Diagnostic(index=index, kind="processing_error", message=str(exc), place_name=report.place_name)
            )

    logger.info(
        "Rollup for %s: records=%d admitted=%d out_of_scope=%d rejected=%d failed=%d",
        result.target_province,
        result.total_records,
        result.admitted,
        result.out_of_scope,
        result.rejected,
        result.failed,
    )
    return result


def _fold_report(
    result: RollupResult,
    report: EmergencyReport,
    municipality_name: str,
    barangay_name: str,
    config: RollupConfig,
    fallback_time: datetime,
) -> None:
    municipality = result.municipality_for(municipality_name)
    barangay = municipality.barangay_for(barangay_name, report)

    effective_time = report.timestamp or fallback_time
    municipality.latest_update = max(municipality.latest_update, effective_time)
    barangay.latest_update = max(barangay.latest_update, effective_time)

    pending = report.is_pending(config.pending_marker)
    for bucket in (municipality, barangay):
        bucket.total_people += report.number_of_people
        bucket.needs.update(report.needs)
        if pending:
            bucket.pending_count += 1
        else:
            bucket.resolved_count += 1

    barangay.reports.append(report)

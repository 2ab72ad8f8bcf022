from .config import RollupConfig
from .models import EmergencyReport, FetchResult
from .ranking import classify_severity, rank_rollup, status_ratio
from .rollup import BarangaySummary, MunicipalitySummary, RollupResult, aggregate_reports
from .view import build_summary_view, summary_payload

__all__ = [
    "RollupConfig",
    "EmergencyReport",
    "FetchResult",
    "aggregate_reports",
    "rank_rollup",
    "status_ratio",
    "classify_severity",
    "RollupResult",
    "MunicipalitySummary",
    "BarangaySummary",
    "build_summary_view",
    "summary_payload",
]

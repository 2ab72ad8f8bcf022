from datetime import UTC, datetime

from emergency_rollup.config import RollupConfig
from emergency_rollup.models import EmergencyReport
from emergency_rollup.rollup import aggregate_reports
from emergency_rollup.time_utils import EPOCH

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def _report(place: str, people: int = 0, status: str = "pending", needs=None, **extra) -> dict:
    payload = {"placeName": place, "numberOfPeople": people, "status": status, "needs": needs or []}
    payload.update(extra)
    return payload


def _sample() -> list[dict]:
    return [
        _report("Lahug, Cebu City, Cebu", 10, "pending", ["food"]),
        _report("Lahug, Cebu City, Cebu", 5, "resolved", ["water"]),
        _report("Poblacion, Mandaue, Cebu", 20, "pending", ["food"]),
    ]


def test_example_rollup_totals() -> None:
    result = aggregate_reports(_sample(), now=NOW)

    assert list(result.municipalities) == ["cebu city", "mandaue"]
    cebu_city = result.municipalities["cebu city"]
    assert cebu_city.total_people == 15
    assert list(cebu_city.barangays) == ["lahug"]
    lahug = cebu_city.barangays["lahug"]
    assert lahug.total_people == 15
    assert lahug.needs == {"food", "water"}
    assert lahug.pending_count == 1
    assert lahug.resolved_count == 1
    assert len(lahug.reports) == 2
    assert result.admitted == 3
    assert result.diagnostics == []


def test_municipality_total_equals_sum_of_barangays() -> None:
    reports = _sample() + [
        _report("Talamban, Cebu City, Cebu", 7, "pending"),
        _report("Guadalupe, Cebu City, Cebu", 3, "resolved"),
    ]
    result = aggregate_reports(reports, now=NOW)
    for summary in result.municipalities.values():
        assert summary.total_people == sum(b.total_people for b in summary.barangays.values())
        assert summary.report_count == sum(b.report_count for b in summary.barangays.values())


def test_status_counts_match_admitted_reports() -> None:
    reports = _sample() + [_report("Lahug, Cebu City, Cebu", 1, "in-progress")]
    result = aggregate_reports(reports, now=NOW)
    lahug = result.municipalities["cebu city"].barangays["lahug"]
    assert lahug.pending_count == 1
    assert lahug.resolved_count == 2
    assert lahug.pending_count + lahug.resolved_count == len(lahug.reports)


def test_out_of_province_reports_never_counted() -> None:
    reports = _sample() + [_report("Dao, Tagbilaran, Bohol", 40, "pending", ["shelter"])]
    result = aggregate_reports(reports, now=NOW)
    assert "tagbilaran" not in result.municipalities
    assert result.out_of_scope == 1
    assert all("shelter" not in m.needs for m in result.municipalities.values())
    assert result.diagnostics == []


def test_target_province_is_configurable() -> None:
    reports = _sample() + [_report("Dao, Tagbilaran, Bohol", 40)]
    result = aggregate_reports(reports, RollupConfig(target_province="BOHOL"), now=NOW)
    assert list(result.municipalities) == ["tagbilaran"]
    assert result.out_of_scope == 3


def test_malformed_place_names_produce_diagnostics() -> None:
    reports = [
        _report("Invalid", 99),
        {"numberOfPeople": 4},
        "not a report",
        _report("Lahug, Cebu City, Cebu", 2),
    ]
    result = aggregate_reports(reports, now=NOW)
    assert [d.kind for d in result.diagnostics] == ["malformed", "malformed", "invalid_record"]
    assert [d.index for d in result.diagnostics] == [0, 1, 2]
    assert result.rejected == 3
    assert result.municipalities["cebu city"].total_people == 2


def test_needs_are_deduplicated() -> None:
    reports = [
        _report("Lahug, Cebu City, Cebu", 1, needs=["food", "water"]),
        _report("Lahug, Cebu City, Cebu", 1, needs=["food"]),
        _report("Apas, Cebu City, Cebu", 1, needs=["food"]),
    ]
    result = aggregate_reports(reports, now=NOW)
    assert result.municipalities["cebu city"].needs == {"food", "water"}
    assert result.municipalities["cebu city"].barangays["lahug"].needs == {"food", "water"}


def test_normalization_merges_spelling_variants() -> None:
    reports = [
        _report("Lahug, Cebu City, Cebu", 1),
        _report("  LAHUG , cebu city ,CEBU", 2),
    ]
    result = aggregate_reports(reports, now=NOW)
    assert list(result.municipalities) == ["cebu city"]
    assert result.municipalities["cebu city"].barangays["lahug"].total_people == 3


def test_latest_update_tracks_maximum_timestamp() -> None:
    reports = [
        _report("Lahug, Cebu City, Cebu", 1, timestamp="2026-10-02T00:00:00Z"),
        _report("Lahug, Cebu City, Cebu", 1, timestamp="2026-10-01T00:00:00Z"),
        _report("Apas, Cebu City, Cebu", 1, timestamp="2026-10-05T00:00:00Z"),
    ]
    result = aggregate_reports(reports, now=NOW)
    cebu_city = result.municipalities["cebu city"]
    assert cebu_city.latest_update == datetime(2026, 10, 5, tzinfo=UTC)
    assert cebu_city.barangays["lahug"].latest_update == datetime(2026, 10, 2, tzinfo=UTC)


def test_missing_timestamp_uses_processing_time() -> None:
    result = aggregate_reports([_report("Lahug, Cebu City, Cebu", 1, timestamp="garbage")], now=NOW)
    lahug = result.municipalities["cebu city"].barangays["lahug"]
    assert lahug.latest_update == NOW
    assert lahug.latest_update > EPOCH


def test_first_seen_location_wins() -> None:
    reports = [
        _report("Lahug, Cebu City, Cebu", 1, latitude=10.33, longitude=123.90),
        _report("Lahug, Cebu City, Cebu", 1, latitude=11.0, longitude=124.0),
    ]
    result = aggregate_reports(reports, now=NOW)
    location = result.municipalities["cebu city"].barangays["lahug"].location
    assert (location.latitude, location.longitude) == (10.33, 123.90)


def test_missing_people_counts_as_zero() -> None:
    result = aggregate_reports([{"placeName": "Lahug, Cebu City, Cebu", "status": "pending"}], now=NOW)
    lahug = result.municipalities["cebu city"].barangays["lahug"]
    assert lahug.total_people == 0
    assert lahug.pending_count == 1


def test_processing_fault_is_isolated(monkeypatch) -> None:
    calls = {"n": 0}
    original = EmergencyReport.is_pending

    def flaky_is_pending(self, marker: str = "pending") -> bool:
        calls["n"] += 1
        if calls["n"] == 2:
            raise RuntimeError("boom")
        return original(self, marker)

    monkeypatch.setattr(EmergencyReport, "is_pending", flaky_is_pending)
    result = aggregate_reports(_sample(), now=NOW)

    assert [d.kind for d in result.diagnostics] == ["processing_error"]
    assert result.diagnostics[0].index == 1
    assert result.failed == 1
    # Earlier and later reports are unaffected.
    assert result.municipalities["mandaue"].total_people == 20
    lahug = result.municipalities["cebu city"].barangays["lahug"]
    assert lahug.total_people == 10
    assert lahug.pending_count == 1
    assert lahug.resolved_count == 0


def test_accepts_report_models() -> None:
    reports = [EmergencyReport.model_validate(r) for r in _sample()]
    result = aggregate_reports(reports, now=NOW)
    assert result.municipalities["mandaue"].barangays["poblacion"].reports[0] is reports[2]


def test_aggregation_is_idempotent() -> None:
    reports = _sample()
    first = aggregate_reports(reports, now=NOW)
    second = aggregate_reports(reports, now=NOW)
    assert first == second
    assert first.municipalities is not second.municipalities


def test_out_of_range_timestamp_falls_back_to_processing_time() -> None:
    reports = [
        _report("Lahug, Cebu City, Cebu", 10),
        _report("Apas, Cebu City, Cebu", 2, timestamp="0001-01-01T00:00:00+01:00"),
        _report("Talamban, Cebu City, Cebu", 3, timestamp="9999-12-31T23:59:59-01:00"),
    ]
    result = aggregate_reports(reports, now=NOW)
    cebu_city = result.municipalities["cebu city"]
    assert result.diagnostics == []
    assert cebu_city.total_people == 15
    assert cebu_city.barangays["apas"].latest_update == NOW
    assert cebu_city.barangays["talamban"].latest_update == NOW


def test_list_place_name_is_rejected_as_malformed() -> None:
    reports = [
        {"placeName": ["Lahug", "Cebu City", "Cebu"], "numberOfPeople": 4},
        _report("Lahug, Cebu City, Cebu", 1),
    ]
    result = aggregate_reports(reports, now=NOW)
    assert [d.kind for d in result.diagnostics] == ["malformed"]
    assert list(result.municipalities) == ["cebu city"]
    assert list(result.municipalities["cebu city"].barangays) == ["lahug"]
    assert result.municipalities["cebu city"].total_people == 1

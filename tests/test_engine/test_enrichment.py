"""
Activity Enricher Tests.
"""

import pytest

from riskbehavior.engine.enrichment import (
    calculate_duration_days,
    enrich_activities,
    parse_date,
)
from riskbehavior.schemas.inputs import Activity


def _activity(**overrides) -> Activity:
    data = dict(id="A1", title="Work", level=2, start="2024-01-01", end="2024-01-11", cost=1000)
    data.update(overrides)
    return Activity(**data)


class TestDurationDays:
    """Calendar-day duration."""

    def test_whole_days(self):
        assert calculate_duration_days("2024-01-01", "2024-01-11") == 10

    def test_same_day_is_zero(self):
        assert calculate_duration_days("2024-03-05", "2024-03-05") == 0

    def test_partial_day_rounds_up(self):
        assert calculate_duration_days("2024-01-01T00:00:00", "2024-01-02T12:00:00") == 2

    def test_timezone_suffix(self):
        assert calculate_duration_days("2024-01-01T00:00:00Z", "2024-01-03T00:00:00Z") == 2

    @pytest.mark.parametrize("start,end", [
        ("", "2024-01-11"),
        ("2024-01-01", ""),
        (None, None),
        ("not-a-date", "2024-01-11"),
        ("2024-01-01", "2024-13-45"),
    ])
    def test_missing_or_malformed_dates_are_zero(self, start, end):
        assert calculate_duration_days(start, end) == 0

    def test_start_after_end_clamps_to_zero(self):
        assert calculate_duration_days("2024-02-01", "2024-01-01") == 0

    def test_parse_date_is_utc(self):
        parsed = parse_date("2024-01-01")
        assert parsed is not None
        assert parsed.utcoffset().total_seconds() == 0


class TestEnrichActivities:
    """Derived snapshot fields."""

    def test_level2_gets_duration_and_baseline(self):
        [enriched] = enrich_activities([_activity()])
        assert enriched.duration_days == 10
        assert enriched.baseline_cost == 1000

    def test_level1_never_has_duration(self):
        [enriched] = enrich_activities([_activity(level=1)])
        assert enriched.duration_days == 0

    def test_bad_dates_degrade_to_zero(self):
        [enriched] = enrich_activities([_activity(start="2024-05-01", end="garbage")])
        assert enriched.duration_days == 0
        assert enriched.baseline_cost == 1000

    def test_missing_level_is_not_scheduled(self):
        raw = Activity(id="A1", title="Work", start="2024-01-01", end="2024-01-11", cost=1000)
        [enriched] = enrich_activities([raw])
        assert raw.level == 0
        assert enriched.duration_days == 0

    def test_does_not_mutate_input(self):
        raw = _activity()
        enrich_activities([raw])
        assert raw.duration_days is None
        assert raw.baseline_cost is None

    def test_idempotent(self):
        once = enrich_activities([_activity(), _activity(id="A2", level=1)])
        twice = enrich_activities(once)
        assert [a.duration_days for a in twice] == [a.duration_days for a in once]
        assert [a.baseline_cost for a in twice] == [a.baseline_cost for a in once]

    def test_baseline_follows_source_cost(self):
        [enriched] = enrich_activities([_activity()])
        changed = enriched.model_copy(update={"cost": 5000})
        [re_enriched] = enrich_activities([changed])
        assert enriched.baseline_cost == 1000
        assert re_enriched.baseline_cost == 5000

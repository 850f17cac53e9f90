"""Tests for duplicate-event collapsing."""

from datetime import datetime, timezone

from backend.services.dedup import dedup_key, deduplicate, normalize_team
from backend.services.normalization import build_record


def _record(id, home="Celtics", away="Heat", day=25, hour=0, odds="-110", conf=0.7):
    return build_record(
        id, "NBA", home, away,
        datetime(2026, 1, day, hour, 30, tzinfo=timezone.utc),
        pick=home, raw_confidence=conf, raw_odds=odds,
    )


def test_normalize_team():
    assert normalize_team("  Boston   Celtics ") == "boston celtics"
    assert normalize_team("BOSTON CELTICS") == normalize_team("boston celtics")


def test_key_ignores_time_of_day():
    assert dedup_key(_record("a", hour=0)) == dedup_key(_record("b", hour=23))


def test_first_occurrence_wins_whole():
    first = _record("a", odds="+150", conf=0.80)
    second = _record("b", home=" celtics", away="HEAT", odds="-200", conf=0.55)
    result = deduplicate([first, second])
    assert result == [first]
    # nothing merged from the dropped record
    assert result[0].odds.decimal == 2.5
    assert result[0].confidence == 80


def test_different_days_are_distinct():
    records = [_record("a", day=25), _record("b", day=26)]
    assert deduplicate(records) == records


def test_swapped_home_away_are_distinct():
    records = [_record("a"), _record("b", home="Heat", away="Celtics")]
    assert len(deduplicate(records)) == 2


def test_order_preserved():
    records = [
        _record("a", home="Knicks", away="Nets"),
        _record("b"),
        _record("c", home="Knicks", away="Nets"),
        _record("d", home="Lakers", away="Suns"),
    ]
    assert [r.id for r in deduplicate(records)] == ["a", "b", "d"]


def test_idempotent():
    records = [_record("a"), _record("b"), _record("c", day=26)]
    once = deduplicate(records)
    assert deduplicate(once) == once


def test_empty():
    assert deduplicate([]) == []

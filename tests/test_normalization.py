"""Tests for the ingestion boundary: odds fallback, confidence defaults, payload parsing."""

import logging
from datetime import datetime, timezone

import pytest

from backend.core.confidence import NormalizedConfidence
from backend.core.odds_math import OddsNotation
from backend.models import Result
from backend.services.normalization import (
    build_record,
    ingest_predictions,
    normalize_odds,
    normalize_record_confidence,
    parse_game_time,
    parse_prediction,
    parse_result,
)


# ---------------------------------------------------------------------------
# normalize_odds
# ---------------------------------------------------------------------------

def test_malformed_odds_fall_back_without_raising():
    odds = normalize_odds("N/A")
    assert odds.decimal == 1.91
    assert odds.is_fallback
    assert odds.notation is OddsNotation.DECIMAL


def test_malformed_odds_reported(caplog):
    with caplog.at_level(logging.WARNING, logger="backend.data_quality"):
        normalize_odds("garbage")
    assert "malformed_odds" in caplog.text


@pytest.mark.parametrize("raw", [None, "", "+20", "0.8", "5/0", float("nan")])
def test_out_of_range_odds_use_fallback(raw):
    odds = normalize_odds(raw)
    assert odds.is_fallback
    assert odds.decimal >= 1.0


def test_custom_fallback():
    assert normalize_odds("?", fallback=1.85).decimal == 1.85


def test_valid_odds_not_flagged():
    odds = normalize_odds("+150")
    assert odds.decimal == pytest.approx(2.5)
    assert not odds.is_fallback


# ---------------------------------------------------------------------------
# normalize_record_confidence
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("raw, expected", [
    (0.73, 73),
    (73, 73),
    ("0.73", 73),
    ("1%", 1),        # explicit percentage is never rescaled
    ("72.4%", 72),
    (None, 65),
    ("high", 65),
    (True, 65),
])
def test_record_confidence(raw, expected):
    result = normalize_record_confidence(raw)
    assert result == expected
    assert isinstance(result, NormalizedConfidence)


def test_missing_confidence_reported(caplog):
    with caplog.at_level(logging.WARNING, logger="backend.data_quality"):
        normalize_record_confidence(None, default=60)
    assert "missing_confidence" in caplog.text


def test_boundary_confidence_reported_at_debug(caplog):
    with caplog.at_level(logging.DEBUG, logger="backend.data_quality"):
        assert normalize_record_confidence(1.0) == 100
    assert "ambiguous_confidence_unit" in caplog.text


# ---------------------------------------------------------------------------
# parse_result / parse_game_time
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("raw, expected", [
    ("win", Result.WIN),
    ("WON", Result.WIN),
    ("loss", Result.LOSS),
    ("pending", Result.PENDING),
    (None, Result.PENDING),
    (True, Result.WIN),
    (False, Result.LOSS),
    ("push", Result.PENDING),
])
def test_parse_result(raw, expected):
    assert parse_result(raw) is expected


def test_parse_game_time_z_suffix():
    ts = parse_game_time("2026-01-25T00:30:00Z")
    assert ts == datetime(2026, 1, 25, 0, 30, tzinfo=timezone.utc)


def test_parse_game_time_invalid():
    assert parse_game_time("tomorrow") is None
    assert parse_game_time(None) is None


# ---------------------------------------------------------------------------
# parse_prediction / ingest_predictions
# ---------------------------------------------------------------------------

_CAMEL = {
    "id": "p-1",
    "sport": "NBA",
    "homeTeam": "Boston Celtics",
    "awayTeam": "Miami Heat",
    "gameTime": "2026-01-25T00:30:00Z",
    "prediction": {"type": "moneyline", "pick": "Celtics", "odds": "-110"},
    "confidence": 0.72,
    "result": "win",
}

_SNAKE = {
    "id": 42,
    "home_team": "Rangers",
    "away_team": "Bruins",
    "games": {"commence_time": "2026-01-26T23:00:00+00:00"},
    "predicted_winner": "Rangers",
    "odds": "2.10",
    "confidence": 64,
    "is_correct": False,
}


def test_parse_camel_case_payload():
    r = parse_prediction(_CAMEL)
    assert r.id == "p-1"
    assert r.sport == "NBA"
    assert r.pick == "Celtics"
    assert r.bet_type == "moneyline"
    assert r.raw_odds == "-110"
    assert r.odds.decimal == pytest.approx(1.909, abs=1e-3)
    assert r.raw_confidence == 0.72
    assert r.confidence == 72
    assert r.result is Result.WIN


def test_parse_snake_case_payload():
    r = parse_prediction(_SNAKE)
    assert r.id == "42"
    assert r.sport == "unknown"
    assert r.pick == "Rangers"
    assert r.odds.decimal == pytest.approx(2.10)
    assert r.confidence == 64
    assert r.result is Result.LOSS
    assert r.game_date.isoformat() == "2026-01-26"


def test_parse_prediction_missing_teams_skipped():
    assert parse_prediction({"id": "x", "gameTime": "2026-01-25T00:30:00Z"}) is None


def test_ingest_keeps_order_and_drops_unusable():
    records = ingest_predictions([_CAMEL, {"id": None}, _SNAKE])
    assert [r.id for r in records] == ["p-1", "42"]


def test_build_record_naive_time_is_utc():
    r = build_record("a", "NHL", "A", "B", datetime(2026, 2, 1, 19, 0), raw_odds="+120")
    assert r.game_time.tzinfo is timezone.utc
    assert r.result is Result.PENDING
    assert r.confidence == 65


# ---------------------------------------------------------------------------
# Extreme values never raise
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("raw", [1e30, "1e40", "1e40%"])
def test_huge_confidence_clamps(raw):
    assert normalize_record_confidence(raw) == 100


def test_absurd_odds_fall_back(caplog):
    with caplog.at_level(logging.WARNING, logger="backend.data_quality"):
        odds = normalize_odds("+" + "1" * 32)
    assert odds.is_fallback
    assert odds.decimal == 1.91
    assert "malformed_odds" in caplog.text


@pytest.mark.parametrize("raw, microsecond", [
    ("2026-01-15T19:00:00.12+00:00", 120000),
    ("2026-01-15T19:00:00.1234Z", 123400),
])
def test_parse_game_time_short_fraction(raw, microsecond):
    ts = parse_game_time(raw)
    assert ts == datetime(2026, 1, 15, 19, 0, 0, microsecond, tzinfo=timezone.utc)


def test_trimmed_fraction_timestamp_is_ingested():
    payload = dict(_CAMEL, gameTime="2026-01-15T19:00:00.12+00:00")
    assert [r.id for r in ingest_predictions([payload])] == ["p-1"]

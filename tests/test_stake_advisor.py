"""Tests for Kelly stake recommendations."""

import logging
import math
from datetime import datetime, timezone

import pytest

from backend.core.confidence import NormalizedConfidence
from backend.core.odds_math import CanonicalOdds, OddsNotation
from backend.services.normalization import build_record
from backend.services.stake_advisor import recommend_for_record, recommend_stake


def test_worked_example():
    rec = recommend_stake(10000, 70, 1.91)
    assert rec.raw_kelly_fraction == pytest.approx(0.3703, abs=1e-4)
    assert rec.capped_fraction == 0.10
    assert rec.recommended_stake == 1000
    assert rec.potential_profit == 910


def test_fraction_confidence_and_american_odds():
    rec = recommend_stake(10000, 0.70, "-110")
    assert rec.recommended_stake == 1000


def test_raw_fraction_is_signed_but_stake_is_zero():
    rec = recommend_stake(10000, 50, 1.91)
    assert rec.raw_kelly_fraction < 0
    assert rec.capped_fraction == 0.0
    assert rec.recommended_stake == 0
    assert rec.potential_profit == 0


def test_small_edge_below_cap():
    # at evens f* = 2p - 1
    rec = recommend_stake(5000, 53, "+100")
    assert rec.capped_fraction == pytest.approx(0.06)
    assert rec.recommended_stake == 300
    assert rec.potential_profit == 300


def test_custom_cap():
    rec = recommend_stake(10000, 70, 1.91, cap=0.25)
    assert rec.capped_fraction == 0.25
    assert rec.recommended_stake == 2500


@pytest.mark.parametrize("bankroll", [0, -200, None, float("nan")])
def test_invalid_bankroll_gives_zero_stake(bankroll, caplog):
    with caplog.at_level(logging.WARNING, logger="backend.data_quality"):
        rec = recommend_stake(bankroll, 70, 1.91)
    assert rec.recommended_stake == 0
    assert rec.potential_profit == 0
    # fractions are still shown
    assert rec.capped_fraction == 0.10
    assert math.isfinite(rec.bankroll)
    assert "invalid_bankroll" in caplog.text


def test_degenerate_odds(caplog):
    odds = CanonicalOdds(1.0, OddsNotation.DECIMAL)
    with caplog.at_level(logging.INFO, logger="backend.data_quality"):
        rec = recommend_stake(10000, NormalizedConfidence(90), odds, prediction_id="x")
    assert rec.raw_kelly_fraction == 0.0
    assert rec.recommended_stake == 0
    assert "degenerate_odds" in caplog.text


def test_malformed_odds_use_fallback():
    rec = recommend_stake(10000, 70, "N/A")
    assert rec.recommended_stake == 1000
    assert rec.potential_profit == 910


def test_recommend_for_record():
    record = build_record(
        "p-9", "NHL", "Rangers", "Bruins",
        datetime(2026, 2, 1, 0, 0, tzinfo=timezone.utc),
        raw_confidence=0.70, raw_odds="-110",
    )
    rec = recommend_for_record(record, 10000)
    assert rec.prediction_id == "p-9"
    assert rec.recommended_stake == 1000

"""
Kelly stake recommendations for the calculator widget.

The bankroll is whatever the user is typing, so it is often transiently
empty, zero or negative; that yields a zero recommendation, never an error.
The confidence of the pick is used as the win probability.
"""

import logging
import math
from typing import Optional

from backend.core.confidence import NormalizedConfidence
from backend.core.kelly import (
    DEFAULT_KELLY_CAP,
    cap_fraction,
    kelly_fraction,
    potential_profit,
    stake_from_fraction,
)
from backend.core.odds_math import CanonicalOdds
from backend.models import PredictionRecord, StakeRecommendation
from backend.services.data_quality import DataQualityIssue, report_issue
from backend.services.normalization import normalize_odds, normalize_record_confidence

logger = logging.getLogger(__name__)


def recommend_stake(
    bankroll: float,
    confidence,
    odds,
    *,
    cap: float = DEFAULT_KELLY_CAP,
    prediction_id: Optional[str] = None,
) -> StakeRecommendation:
    """
    Kelly stake for one pick.

    ``confidence`` may be raw (fraction or percentage) or a
    NormalizedConfidence; ``odds`` may be a raw string or CanonicalOdds.

    bankroll=10000, confidence=70, odds=1.91
        -> raw 0.3703, capped 0.10, stake 1000, potential profit 910
    """
    if not isinstance(confidence, NormalizedConfidence):
        confidence = normalize_record_confidence(confidence)
    if not isinstance(odds, CanonicalOdds):
        odds = normalize_odds(odds)

    if odds.decimal == 1.0:
        report_issue(
            DataQualityIssue.DEGENERATE_ODDS,
            "decimal odds 1.0 for %r; no edge",
            prediction_id,
        )

    raw = kelly_fraction(confidence.probability, odds.decimal)
    capped = cap_fraction(raw, cap)

    if bankroll is None or not math.isfinite(bankroll) or bankroll <= 0:
        report_issue(
            DataQualityIssue.INVALID_BANKROLL,
            "bankroll %r not positive; recommending 0",
            bankroll,
        )
        stake = 0
    else:
        stake = stake_from_fraction(bankroll, capped)

    return StakeRecommendation(
        prediction_id=prediction_id,
        bankroll=float(bankroll) if bankroll is not None and math.isfinite(bankroll) else 0.0,
        raw_kelly_fraction=raw,
        capped_fraction=capped,
        recommended_stake=stake,
        potential_profit=potential_profit(stake, odds.decimal),
    )


def recommend_for_record(
    record: PredictionRecord,
    bankroll: float,
    *,
    cap: float = DEFAULT_KELLY_CAP,
) -> StakeRecommendation:
    """Kelly stake for an ingested prediction record."""
    return recommend_stake(
        bankroll,
        record.confidence,
        record.odds,
        cap=cap,
        prediction_id=record.id,
    )

"""
Ingestion boundary: raw feed values -> normalized domain objects.

This is the only place where odds strings and confidence numbers are read.
Everything downstream works on ``CanonicalOdds`` and ``NormalizedConfidence``
and never sees the raw encodings again.  Nothing here raises on dirty data;
fallbacks are applied and reported through ``data_quality``.
"""

import logging
import math
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from backend.core.confidence import NormalizedConfidence, normalize_confidence
from backend.core.ledger_config import DEFAULT_CONFIDENCE, DEFAULT_FALLBACK_ODDS
from backend.core.odds_math import CanonicalOdds, OddsNotation, parse_odds, round_half_up
from backend.models import PredictionRecord, Result
from backend.services.data_quality import DataQualityIssue, report_issue

logger = logging.getLogger(__name__)

_RESULT_ALIASES = {
    "pending": Result.PENDING,
    "win": Result.WIN,
    "won": Result.WIN,
    "loss": Result.LOSS,
    "lost": Result.LOSS,
}


# ---------------------------------------------------------------------------
# Odds
# ---------------------------------------------------------------------------

def normalize_odds(raw, fallback: float = DEFAULT_FALLBACK_ODDS) -> CanonicalOdds:
    """
    Parse odds in any notation; never raises.

    '+150' -> 2.50, '-110' -> 1.909, '1.91' -> 1.91, '10/11' -> 1.909.
    Unparseable or out-of-range input returns ``fallback`` flagged with
    ``is_fallback=True`` and reports MALFORMED_ODDS.
    """
    if isinstance(raw, CanonicalOdds):
        return raw
    try:
        return parse_odds(raw)
    except (TypeError, ValueError) as exc:
        report_issue(
            DataQualityIssue.MALFORMED_ODDS,
            "odds %r unreadable (%s); using fallback %.2f",
            raw, exc, fallback,
        )
        return CanonicalOdds(fallback, OddsNotation.DECIMAL, is_fallback=True)


# ---------------------------------------------------------------------------
# Confidence
# ---------------------------------------------------------------------------

def _confidence_number(raw) -> Optional[float]:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def normalize_record_confidence(
    raw,
    default: int = DEFAULT_CONFIDENCE,
) -> NormalizedConfidence:
    """
    Normalize a feed confidence value; never raises.

    Numbers go through ``normalize_confidence`` (fraction or percentage).
    Strings with an explicit '%' suffix are percentages, so '1%' stays 1.
    Missing or non-numeric values take ``default`` and report
    MISSING_CONFIDENCE.
    """
    if isinstance(raw, NormalizedConfidence):
        return raw

    if isinstance(raw, str) and raw.strip().endswith("%"):
        value = _confidence_number(raw.strip()[:-1])
        if value is not None:
            return NormalizedConfidence(max(0, min(100, round_half_up(value))))

    value = _confidence_number(raw)
    if value is None:
        report_issue(
            DataQualityIssue.MISSING_CONFIDENCE,
            "confidence %r unusable; using default %d",
            raw, default,
        )
        return NormalizedConfidence(default)

    if value == 1.0:
        report_issue(
            DataQualityIssue.AMBIGUOUS_CONFIDENCE_UNIT,
            "confidence 1.0 read as 100%%",
        )
    return normalize_confidence(value)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

def parse_result(raw) -> Result:
    """Map a feed result (string or is_correct bool) to ``Result``."""
    if isinstance(raw, Result):
        return raw
    if raw is None:
        return Result.PENDING
    if isinstance(raw, bool):
        return Result.WIN if raw else Result.LOSS
    result = _RESULT_ALIASES.get(str(raw).strip().lower())
    if result is None:
        report_issue(
            DataQualityIssue.UNKNOWN_RESULT,
            "result %r not win/loss/pending; treated as pending",
            raw,
        )
        return Result.PENDING
    return result


def parse_game_time(raw) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (any fractional-second width) or pass a datetime through."""
    if isinstance(raw, datetime):
        return raw
    if not raw:
        return None
    text = str(raw).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def build_record(
    id: str,
    sport: str,
    home_team: str,
    away_team: str,
    game_time: datetime,
    pick: str = "",
    raw_confidence=None,
    raw_odds=None,
    result=Result.PENDING,
    bet_type: Optional[str] = None,
    *,
    fallback_odds: float = DEFAULT_FALLBACK_ODDS,
    default_confidence: int = DEFAULT_CONFIDENCE,
) -> PredictionRecord:
    """Create a ``PredictionRecord`` with odds and confidence normalized."""
    return PredictionRecord(
        id=str(id),
        sport=sport,
        home_team=home_team,
        away_team=away_team,
        game_time=game_time,
        pick=pick,
        raw_confidence=_confidence_number(raw_confidence),
        raw_odds=None if raw_odds is None else str(raw_odds),
        confidence=normalize_record_confidence(raw_confidence, default_confidence),
        odds=normalize_odds(raw_odds, fallback_odds),
        result=parse_result(result),
        bet_type=bet_type,
    )


def parse_prediction(
    payload: Dict,
    *,
    fallback_odds: float = DEFAULT_FALLBACK_ODDS,
    default_confidence: int = DEFAULT_CONFIDENCE,
) -> Optional[PredictionRecord]:
    """
    Build a record from one upstream payload, or None if it is unusable.

    Accepts the public camelCase shape:
        {"id", "sport", "homeTeam", "awayTeam", "gameTime",
         "prediction": {"type", "pick", "odds"}, "confidence", "result"}
    and the admin snake_case shape:
        {"id", "home_team", "away_team", "game_time" | games.commence_time,
         "predicted_winner", "odds", "confidence", "is_correct"}
    """
    game = payload.get("games")
    game = game if isinstance(game, dict) else {}
    prediction = payload.get("prediction")
    prediction = prediction if isinstance(prediction, dict) else {}

    record_id = payload.get("id")
    home = payload.get("homeTeam") or payload.get("home_team") or game.get("home_team")
    away = payload.get("awayTeam") or payload.get("away_team") or game.get("away_team")
    game_time = parse_game_time(
        payload.get("gameTime")
        or payload.get("game_time")
        or game.get("commence_time")
        or payload.get("created_at")
    )

    if record_id is None or not home or not away or game_time is None:
        report_issue(
            DataQualityIssue.MALFORMED_RECORD,
            "skipping prediction %r: missing id, teams or game time",
            record_id,
        )
        return None

    if "result" in payload and payload["result"] is not None:
        result = parse_result(payload["result"])
    else:
        result = parse_result(payload.get("is_correct"))

    return build_record(
        id=record_id,
        sport=str(payload.get("sport") or payload.get("league") or "unknown"),
        home_team=str(home),
        away_team=str(away),
        game_time=game_time,
        pick=str(prediction.get("pick") or payload.get("pick") or payload.get("predicted_winner") or ""),
        raw_confidence=payload.get("confidence"),
        raw_odds=prediction.get("odds", payload.get("odds")),
        result=result,
        bet_type=prediction.get("type") or payload.get("bet_type"),
        fallback_odds=fallback_odds,
        default_confidence=default_confidence,
    )


def ingest_predictions(
    payloads: Iterable[Dict],
    *,
    fallback_odds: float = DEFAULT_FALLBACK_ODDS,
    default_confidence: int = DEFAULT_CONFIDENCE,
) -> List[PredictionRecord]:
    """Parse a feed snapshot, dropping unusable payloads, keeping order."""
    records = []
    skipped = 0
    for payload in payloads:
        record = parse_prediction(
            payload,
            fallback_odds=fallback_odds,
            default_confidence=default_confidence,
        )
        if record is None:
            skipped += 1
            continue
        records.append(record)

    logger.debug("Ingested %d predictions (%d skipped)", len(records), skipped)
    return records

"""
Duplicate-event collapsing.

The feed regularly publishes the same game more than once (re-runs of the
model, a league alias, a second market for the same fixture).  Records are
keyed by (home team, away team, calendar date) and the first occurrence of
each key is kept as-is.  Colliding records are dropped whole, never merged:
mixing the odds of one upstream entry with the confidence of another would
produce a pick nobody published.
"""

import logging
import re
from datetime import date
from typing import Iterable, List, Tuple

from backend.models import PredictionRecord

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_team(name: str) -> str:
    """'  Boston   Celtics ' -> 'boston celtics'."""
    return _WHITESPACE_RE.sub(" ", (name or "").strip()).casefold()


def dedup_key(record: PredictionRecord) -> Tuple[str, str, date]:
    return (
        normalize_team(record.home_team),
        normalize_team(record.away_team),
        record.game_date,
    )


def deduplicate(records: Iterable[PredictionRecord]) -> List[PredictionRecord]:
    """
    Keep the first record for every dedup key, in first-occurrence order.

    Idempotent: deduplicate(deduplicate(x)) == deduplicate(x).
    """
    seen = set()
    unique = []
    dropped = 0
    for record in records:
        key = dedup_key(record)
        if key in seen:
            dropped += 1
            continue
        seen.add(key)
        unique.append(record)

    if dropped:
        logger.debug("Dropped %d duplicate predictions", dropped)
    return unique

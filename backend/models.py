"""
Domain value objects for the Edge Ledger engine.

Plain frozen dataclasses: the engine owns no storage, so every object here
is created from a record snapshot, returned to the caller and discarded.
All of them serialize with ``dataclasses.asdict`` or the Pydantic response
schemas in ``backend.schemas``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from backend.core.confidence import NormalizedConfidence
from backend.core.odds_math import CanonicalOdds


class Result(str, Enum):
    """Grading state of a prediction.  ``PENDING`` → ``WIN``/``LOSS`` once."""

    PENDING = "pending"
    WIN = "win"
    LOSS = "loss"

    @property
    def is_graded(self) -> bool:
        return self is not Result.PENDING


@dataclass(frozen=True)
class PredictionRecord:
    """One published pick, as normalized at the ingestion boundary.

    ``raw_confidence`` and ``raw_odds`` keep exactly what the feed sent, for
    auditing; ``confidence`` and ``odds`` are the normalized values every
    computation uses.
    """

    id: str
    sport: str
    home_team: str
    away_team: str
    game_time: datetime
    pick: str
    raw_confidence: Optional[float]
    raw_odds: Optional[str]
    confidence: NormalizedConfidence
    odds: CanonicalOdds
    result: Result = Result.PENDING
    bet_type: Optional[str] = None

    def __post_init__(self) -> None:
        # Naive timestamps from the feed are UTC.
        if self.game_time.tzinfo is None:
            object.__setattr__(self, "game_time", self.game_time.replace(tzinfo=timezone.utc))

    @property
    def game_date(self) -> date:
        """Calendar date of the game in the timestamp's own offset."""
        return self.game_time.date()

    @property
    def is_graded(self) -> bool:
        return self.result.is_graded

    def graded(self, result: Result) -> PredictionRecord:
        """Return a copy graded as ``result``.

        Raises:
            ValueError: If this record is already graded or ``result`` is
                ``PENDING``.  Re-grades arrive as a new snapshot instead.
        """
        result = Result(result)
        if self.is_graded:
            raise ValueError(f"Prediction {self.id!r} is already graded as {self.result.value}.")
        if not result.is_graded:
            raise ValueError("A prediction can only be graded as win or loss.")
        return replace(self, result=result)


@dataclass(frozen=True)
class LedgerEntry:
    """Profit/loss of one graded prediction and the running total after it."""

    prediction_id: str
    position: int
    stake: int
    decimal_odds: float
    result: Result
    profit_loss: int
    running_total: int


@dataclass(frozen=True)
class LedgerSummary:
    """Totals over a ledger."""

    entries: int
    total_staked: int
    net_profit: int
    roi_pct: float
    peak_total: int
    max_drawdown: int


@dataclass(frozen=True)
class DailyAggregate:
    """Accuracy for one calendar day (optionally one sport on that day)."""

    date: date
    sport: Optional[str]
    total_graded: int
    wins: int
    losses: int
    accuracy_pct: float
    moving_avg: float


@dataclass(frozen=True)
class StakeRecommendation:
    """Kelly stake suggestion for the calculator widget."""

    prediction_id: Optional[str]
    bankroll: float
    raw_kelly_fraction: float
    capped_fraction: float
    recommended_stake: int
    potential_profit: int

"""
Pydantic request/response schemas for the Edge Ledger API.

Prediction payloads are accepted as free-form dicts on purpose: the feed
mixes odds notations and confidence units, and the ingestion boundary
(backend.services.normalization) repairs what it can instead of rejecting
the request.  Only caller-supplied settings are validated strictly.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from backend.models import Result


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class SnapshotRequest(BaseModel):
    """A snapshot of raw prediction payloads plus display settings."""

    predictions: list[dict[str, Any]] = Field(
        default_factory=list, description="Raw prediction payloads from the feed"
    )
    stake: Optional[int] = Field(
        None, gt=0, description="Flat stake override; defaults to the locale profile"
    )
    locale: Optional[Literal["en", "cz"]] = Field(
        None, description="Settings locale; defaults to LEDGER_LOCALE"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "predictions": [
                    {
                        "id": "p-1",
                        "sport": "NBA",
                        "homeTeam": "Boston Celtics",
                        "awayTeam": "Miami Heat",
                        "gameTime": "2026-01-25T00:30:00Z",
                        "prediction": {"type": "moneyline", "pick": "Celtics", "odds": "-110"},
                        "confidence": 0.72,
                        "result": "win",
                    }
                ],
                "stake": 1000,
                "locale": "cz",
            }
        }
    }


class DailyRequest(SnapshotRequest):
    """Snapshot plus moving-average options."""

    window: Optional[int] = Field(None, ge=1, le=90, description="Moving-average window (days)")
    by_sport: bool = Field(False, description="Split each day by sport")


class SummaryRequest(SnapshotRequest):
    """Snapshot plus the reference time for profit windows."""

    now: Optional[datetime] = Field(None, description="Anchor for today/week/month windows")


class StakeRequest(BaseModel):
    """
    Payload for POST /api/stake.

    bankroll is live user input and is deliberately not range-checked:
    a non-positive value yields a zero recommendation.
    """

    bankroll: Optional[float] = Field(None, description="Current bankroll")
    confidence: Optional[float | str] = Field(None, description="0-1 fraction or 0-100 percentage")
    odds: Optional[float | str] = Field(None, description="American, decimal or fractional odds")
    prediction_id: Optional[str] = None
    cap: Optional[float] = Field(None, gt=0, le=1, description="Kelly cap override")


class OddsRequest(BaseModel):
    """Payload for POST /api/odds/normalize."""

    raw_odds: Optional[float | str] = None
    format: Optional[Literal["american", "decimal", "fractional"]] = None
    locale: Optional[Literal["en", "cz"]] = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class OddsResponse(BaseModel):
    decimal: float
    notation: str
    is_fallback: bool
    display: str


class LedgerEntryResponse(BaseModel):
    """One ledger row."""
    prediction_id: str
    position: int
    stake: int
    decimal_odds: float
    result: Result
    profit_loss: int
    running_total: int

    model_config = {"from_attributes": True}


class LedgerSummaryResponse(BaseModel):
    entries: int
    total_staked: int
    net_profit: int
    roi_pct: float
    peak_total: int
    max_drawdown: int

    model_config = {"from_attributes": True}


class LedgerResponse(BaseModel):
    """Structure for the /api/ledger endpoints."""
    currency: str
    stake: int
    entries: list[LedgerEntryResponse]
    summary: LedgerSummaryResponse


class DailyAggregateResponse(BaseModel):
    date: date
    sport: Optional[str]
    total_graded: int
    wins: int
    losses: int
    accuracy_pct: float
    moving_avg: float

    model_config = {"from_attributes": True}


class DailyAggregatesResponse(BaseModel):
    window: int
    by_sport: bool
    days: list[DailyAggregateResponse]


class StakeResponse(BaseModel):
    prediction_id: Optional[str]
    bankroll: float
    raw_kelly_fraction: float
    capped_fraction: float
    recommended_stake: int
    potential_profit: int
    currency: str

    model_config = {"from_attributes": True}

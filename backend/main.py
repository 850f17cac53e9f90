"""
FastAPI application for the Edge Ledger engine
Stateless: every request carries (or fetches) its own record snapshot
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from dataclasses import asdict, replace
from datetime import datetime, timezone
from typing import Optional
import logging
import os

import requests

from backend.core.ledger_config import LedgerConfig
from backend.core.odds_math import OddsNotation, format_odds
from backend.services.ledger import build_ledger, summarize_ledger
from backend.services.normalization import ingest_predictions, normalize_odds
from backend.services.performance import calculate_summary_stats, daily_aggregates
from backend.services.export import export_csv
from backend.services.predictions_source import fetch_predictions
from backend.services.stake_advisor import recommend_stake
from backend.schemas import (
    DailyAggregateResponse,
    DailyAggregatesResponse,
    DailyRequest,
    LedgerEntryResponse,
    LedgerResponse,
    LedgerSummaryResponse,
    OddsRequest,
    OddsResponse,
    SnapshotRequest,
    StakeRequest,
    StakeResponse,
    SummaryRequest,
)

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Edge Ledger",
    description="Prediction performance ledger and wagering analytics",
    version="1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_methods=["*"],
    allow_headers=["*"],
)


def _config(locale: Optional[str] = None, stake: Optional[int] = None) -> LedgerConfig:
    """Environment config, optionally switched to another locale profile."""
    cfg = LedgerConfig.from_env()
    if locale and locale != cfg.locale:
        cfg = LedgerConfig.for_locale(locale)
    if stake:
        cfg = replace(cfg, flat_stake=stake)
    return cfg


def _ingest(payloads, cfg: LedgerConfig):
    return ingest_predictions(
        payloads,
        fallback_odds=cfg.fallback_decimal_odds,
        default_confidence=cfg.default_confidence,
    )


def _ledger_response(records, cfg: LedgerConfig) -> LedgerResponse:
    entries = build_ledger(records, cfg.flat_stake)
    return LedgerResponse(
        currency=cfg.currency,
        stake=cfg.flat_stake,
        entries=[LedgerEntryResponse.model_validate(e) for e in entries],
        summary=LedgerSummaryResponse.model_validate(summarize_ledger(entries)),
    )


# ============================================================================
# PUBLIC ENDPOINTS
# ============================================================================

@app.get("/")
async def root():
    """Banner"""
    return {
        "app": "Edge Ledger",
        "version": "1.0",
        "status": "operational",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    health = {"status": "healthy", "config": "ok"}
    try:
        LedgerConfig.from_env()
    except ValueError as e:
        logger.error(f"Health check config error: {e}")
        health["status"] = "degraded"
        health["config"] = f"error: {str(e)}"
    return health


# ============================================================================
# ODDS & STAKE
# ============================================================================

@app.post("/api/odds/normalize", response_model=OddsResponse)
async def normalize_odds_endpoint(payload: OddsRequest):
    """Canonical decimal odds plus the display string for the user's format."""
    cfg = _config(payload.locale)
    odds = normalize_odds(payload.raw_odds, cfg.fallback_decimal_odds)
    notation = OddsNotation(payload.format) if payload.format else cfg.odds_format
    return OddsResponse(
        decimal=odds.decimal,
        notation=odds.notation.value,
        is_fallback=odds.is_fallback,
        display=format_odds(odds, notation, decimal_separator=cfg.decimal_separator),
    )


@app.post("/api/stake", response_model=StakeResponse)
async def stake_recommendation(payload: StakeRequest):
    """Kelly stake for the calculator widget. Invalid bankroll -> zero stake."""
    cfg = _config()
    rec = recommend_stake(
        payload.bankroll,
        payload.confidence,
        payload.odds,
        cap=payload.cap or cfg.kelly_cap,
        prediction_id=payload.prediction_id,
    )
    return StakeResponse(**asdict(rec), currency=cfg.currency)


# ============================================================================
# LEDGER & PERFORMANCE
# ============================================================================

@app.post("/api/ledger", response_model=LedgerResponse)
async def ledger(payload: SnapshotRequest):
    """Flat-stake ledger with running total for a supplied snapshot."""
    cfg = _config(payload.locale, payload.stake)
    return _ledger_response(_ingest(payload.predictions, cfg), cfg)


@app.get("/api/ledger/live", response_model=LedgerResponse)
def live_ledger():
    """Ledger for the current feed snapshot."""
    cfg = _config()
    try:
        records = fetch_predictions(cfg)
    except (requests.RequestException, ValueError) as exc:
        logger.error(f"Predictions feed unavailable: {exc}")
        raise HTTPException(status_code=502, detail="Predictions feed unavailable")
    return _ledger_response(records, cfg)


@app.post("/api/performance/daily", response_model=DailyAggregatesResponse)
async def performance_daily(payload: DailyRequest):
    """Daily accuracy series with N-day moving average."""
    cfg = _config(payload.locale, payload.stake)
    window = payload.window or cfg.moving_average_window
    days = daily_aggregates(
        _ingest(payload.predictions, cfg),
        window=window,
        by_sport=payload.by_sport,
    )
    return DailyAggregatesResponse(
        window=window,
        by_sport=payload.by_sport,
        days=[DailyAggregateResponse.model_validate(d) for d in days],
    )


@app.post("/api/performance/summary")
async def performance_summary(payload: SummaryRequest):
    """
    Full performance summary: overall, by sport, by confidence tier,
    streaks and today/week/month profit.
    """
    cfg = _config(payload.locale, payload.stake)
    summary = calculate_summary_stats(
        _ingest(payload.predictions, cfg), cfg.flat_stake, now=payload.now
    )
    summary["currency"] = cfg.currency
    summary["stake"] = cfg.flat_stake
    return summary


@app.post("/api/export/csv")
async def export_ledger_csv(payload: SnapshotRequest):
    """Ledger export, one row per graded prediction."""
    cfg = _config(payload.locale, payload.stake)
    body = export_csv(_ingest(payload.predictions, cfg), cfg)
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=ledger.csv"},
    )


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Catch-all exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "type": type(exc).__name__}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

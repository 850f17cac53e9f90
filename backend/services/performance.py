"""
Performance analytics computation.

All public functions receive a record snapshot (already ingested) and
return plain dataclasses or dicts, so they can be called from FastAPI
endpoints, exports or tests without any web-layer code.

Daily accuracy only exists for days that had at least one graded game.
A day without results is absent from the series rather than a 0% day, and
therefore never drags the moving average down.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from backend.core.confidence import CONFIDENCE_TIERS, confidence_tier
from backend.core.ledger_config import DEFAULT_MOVING_AVERAGE_WINDOW
from backend.models import DailyAggregate, LedgerEntry, PredictionRecord, Result
from backend.services.data_quality import DataQualityIssue, report_issue
from backend.services.dedup import deduplicate
from backend.services.ledger import chronological, settled_ledger, summarize_ledger

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _accuracy(wins: int, total: int) -> float:
    return wins / total * 100 if total > 0 else 0.0


def _safe_roi(profit: float, risked: float) -> float:
    return round(profit / risked * 100, 2) if risked > 0 else 0.0


def _mean(values: List[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def moving_average(values: List[float], window: int) -> List[float]:
    """
    Trailing mean over the last ``window`` values (current one included).

    The window shrinks at the start of the series instead of padding:
    moving_average([60, 80, 70], 2) -> [60.0, 70.0, 75.0]
    """
    if window < 1:
        raise ValueError(f"Moving-average window must be >= 1, got {window!r}.")
    return [_mean(values[max(0, i - window + 1): i + 1]) for i in range(len(values))]


# ---------------------------------------------------------------------------
# daily_aggregates
# ---------------------------------------------------------------------------

def daily_aggregates(
    records: Iterable[PredictionRecord],
    *,
    window: int = DEFAULT_MOVING_AVERAGE_WINDOW,
    by_sport: bool = False,
    dedupe: bool = True,
) -> List[DailyAggregate]:
    """
    Per-day (optionally per-day-per-sport) accuracy with an N-day moving average.

    Output is ordered by date, then sport.  With ``by_sport`` each sport is its
    own series for the moving average.
    """
    if window < 1:
        raise ValueError(f"Moving-average window must be >= 1, got {window!r}.")

    records = list(records)
    if dedupe:
        records = deduplicate(records)
    graded = [r for r in records if r.is_graded]
    if not graded:
        report_issue(DataQualityIssue.EMPTY_INPUT, "no graded predictions for daily aggregates")
        return []

    buckets: Dict[Tuple[Optional[str], date], List[int]] = {}
    for r in graded:
        key = (r.sport if by_sport else None, r.game_date)
        counts = buckets.setdefault(key, [0, 0])
        if r.result is Result.WIN:
            counts[0] += 1
        else:
            counts[1] += 1

    series: Dict[Optional[str], List[date]] = {}
    for sport, day in sorted(buckets, key=lambda k: (k[0] or "", k[1])):
        series.setdefault(sport, []).append(day)

    aggregates = []
    for sport, days in series.items():
        accuracies = []
        for day in days:
            wins, losses = buckets[(sport, day)]
            accuracies.append(_accuracy(wins, wins + losses))
        averages = moving_average(accuracies, window)
        for day, acc, avg in zip(days, accuracies, averages):
            wins, losses = buckets[(sport, day)]
            aggregates.append(DailyAggregate(
                date=day,
                sport=sport,
                total_graded=wins + losses,
                wins=wins,
                losses=losses,
                accuracy_pct=acc,
                moving_avg=avg,
            ))

    aggregates.sort(key=lambda a: (a.date, a.sport or ""))
    return aggregates


# ---------------------------------------------------------------------------
# Streaks and profit windows
# ---------------------------------------------------------------------------

def win_streaks(records: Iterable[PredictionRecord]) -> Dict[str, int]:
    """Current and best run of consecutive wins, in game order."""
    current = best = 0
    for r in chronological(records):
        if r.result is Result.WIN:
            current += 1
            best = max(best, current)
        else:
            current = 0
    return {"current": current, "best": best}


def profit_windows(
    records: Iterable[PredictionRecord],
    stake: int,
    now: Optional[datetime] = None,
    *,
    settled: Optional[List[Tuple[PredictionRecord, LedgerEntry]]] = None,
) -> Dict[str, Dict]:
    """
    Flat-stake profit for today, the last 7 days and month-to-date.

    Windows are anchored on midnight of ``now`` (default: current UTC time)
    in ``now``'s own timezone.  Pass ``settled`` (from ``settled_ledger``)
    to reuse a ledger that was already built for ``records``.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    starts = {
        "today": today_start,
        "week": today_start - timedelta(days=7),
        "month": today_start.replace(day=1),
    }

    if settled is None:
        settled = settled_ledger(records, stake)
    windows = {name: {"profit": 0, "count": 0} for name in starts}
    for record, entry in settled:
        for name, start in starts.items():
            if record.game_time >= start:
                windows[name]["profit"] += entry.profit_loss
                windows[name]["count"] += 1
    return windows


# ---------------------------------------------------------------------------
# calculate_summary_stats
# ---------------------------------------------------------------------------

def calculate_summary_stats(
    records: Iterable[PredictionRecord],
    stake: int,
    *,
    now: Optional[datetime] = None,
) -> Dict:
    """
    Full performance summary including:
      - overall metrics (accuracy, ROI, profit, drawdown)
      - by_sport breakdown
      - by_confidence tier breakdown (lock / high / medium / low)
      - win streaks
      - profit windows (today / week / month)
    """
    records = deduplicate(records)
    graded = [r for r in records if r.is_graded]
    settled = settled_ledger(records, stake, dedupe=False)
    ledger = summarize_ledger([entry for _, entry in settled])
    profit_by_sport: Dict[str, int] = {}
    for record, entry in settled:
        profit_by_sport[record.sport] = profit_by_sport.get(record.sport, 0) + entry.profit_loss

    wins = sum(1 for r in graded if r.result is Result.WIN)
    overall = {
        "total_predictions": len(records),
        "graded": len(graded),
        "pending": len(records) - len(graded),
        "wins": wins,
        "losses": len(graded) - wins,
        "accuracy_pct": round(_accuracy(wins, len(graded)), 2),
        "roi_pct": ledger.roi_pct,
        "net_profit": ledger.net_profit,
        "total_staked": ledger.total_staked,
        "max_drawdown": ledger.max_drawdown,
    }

    # --- By sport ---
    by_sport_groups: Dict[str, List[PredictionRecord]] = {}
    for r in records:
        by_sport_groups.setdefault(r.sport, []).append(r)

    by_sport = []
    for sport in sorted(by_sport_groups):
        grp = by_sport_groups[sport]
        g_graded = [r for r in grp if r.is_graded]
        g_wins = sum(1 for r in g_graded if r.result is Result.WIN)
        g_profit = profit_by_sport.get(sport, 0)
        by_sport.append({
            "sport": sport,
            "predictions": len(grp),
            "wins": g_wins,
            "losses": len(g_graded) - g_wins,
            "accuracy_pct": round(_accuracy(g_wins, len(g_graded)), 2),
            "roi_pct": _safe_roi(g_profit, stake * len(g_graded)),
        })

    # --- By confidence tier ---
    by_confidence = {tier: {"total": 0, "wins": 0} for tier in CONFIDENCE_TIERS}
    for r in graded:
        tier = by_confidence[confidence_tier(r.confidence)]
        tier["total"] += 1
        if r.result is Result.WIN:
            tier["wins"] += 1
    for tier in by_confidence.values():
        tier["accuracy_pct"] = round(_accuracy(tier["wins"], tier["total"]), 2)

    summary = {
        "overall": overall,
        "by_sport": by_sport,
        "by_confidence": by_confidence,
        "streaks": win_streaks(graded),
        "profit_windows": profit_windows(records, stake, now=now, settled=settled),
    }

    logger.debug(
        "Summary: %d predictions, W%d-L%d, ROI %.1f%%",
        len(records), wins, len(graded) - wins, ledger.roi_pct,
    )
    return summary

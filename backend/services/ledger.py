"""
Flat-stake profit/loss ledger.

Every graded prediction is settled as if the same flat stake S had been
placed on it at the published odds:

    win  ->  round(S * (decimal_odds - 1))
    loss ->  -S

and a running total is carried in chronological order.  Each entry is
rounded once; the running total is the exact integer prefix sum of the
rounded entries, so the last running total always equals the sum of the
profit/loss column shown next to it.

The ledger is rebuilt from scratch on every call: same snapshot in, same
entries out, regardless of what was computed before.
"""

import logging
from typing import Iterable, List, Tuple

from backend.core.kelly import potential_profit
from backend.models import LedgerEntry, LedgerSummary, PredictionRecord, Result
from backend.services.data_quality import DataQualityIssue, report_issue
from backend.services.dedup import deduplicate

logger = logging.getLogger(__name__)


def chronological(records: Iterable[PredictionRecord]) -> List[PredictionRecord]:
    """Graded records sorted by game time; ties keep input order."""
    return sorted((r for r in records if r.is_graded), key=lambda r: r.game_time)


def settle(record: PredictionRecord, stake: int) -> int:
    """Profit/loss of one graded record at a flat stake."""
    if record.result is Result.WIN:
        return potential_profit(stake, record.odds.decimal)
    if record.result is Result.LOSS:
        return -stake
    raise ValueError(f"Prediction {record.id!r} is not graded.")


def settled_ledger(
    records: Iterable[PredictionRecord],
    stake: int,
    *,
    dedupe: bool = True,
) -> List[Tuple[PredictionRecord, LedgerEntry]]:
    """
    Ledger entries paired with the record each one settles, oldest first.

    Pending records are skipped.  Input is deduplicated (unless ``dedupe`` is
    False, for callers that already did) and sorted defensively, so any
    slice of a snapshot can be passed in.  Callers that need record fields
    next to an entry use the pair; ids are not guaranteed unique.

    Raises:
        ValueError: If ``stake`` is not positive.
    """
    if stake <= 0:
        raise ValueError(f"Flat stake must be > 0, got {stake!r}.")

    records = list(records)
    if dedupe:
        records = deduplicate(records)
    graded = chronological(records)

    if not graded:
        report_issue(DataQualityIssue.EMPTY_INPUT, "no graded predictions for ledger")
        return []

    settled = []
    running = 0
    for position, record in enumerate(graded):
        pl = settle(record, stake)
        running += pl
        settled.append((record, LedgerEntry(
            prediction_id=record.id,
            position=position,
            stake=stake,
            decimal_odds=record.odds.decimal,
            result=record.result,
            profit_loss=pl,
            running_total=running,
        )))

    logger.debug(
        "Ledger: %d entries, stake %d, final total %d",
        len(settled), stake, running,
    )
    return settled


def build_ledger(
    records: Iterable[PredictionRecord],
    stake: int,
    *,
    dedupe: bool = True,
) -> List[LedgerEntry]:
    """
    Ledger entries for every graded record, oldest first.

    See ``settled_ledger`` for ordering, dedup and empty-input handling.

    Raises:
        ValueError: If ``stake`` is not positive.
    """
    return [entry for _, entry in settled_ledger(records, stake, dedupe=dedupe)]


def summarize_ledger(entries: List[LedgerEntry]) -> LedgerSummary:
    """Totals, ROI and peak-to-trough drawdown of the running total."""
    if not entries:
        return LedgerSummary(
            entries=0, total_staked=0, net_profit=0,
            roi_pct=0.0, peak_total=0, max_drawdown=0,
        )

    total_staked = sum(e.stake for e in entries)
    net_profit = entries[-1].running_total

    peak = max_dd = 0
    for e in entries:
        if e.running_total > peak:
            peak = e.running_total
        if peak - e.running_total > max_dd:
            max_dd = peak - e.running_total

    return LedgerSummary(
        entries=len(entries),
        total_staked=total_staked,
        net_profit=net_profit,
        roi_pct=round(net_profit / total_staked * 100, 2),
        peak_total=peak,
        max_drawdown=max_dd,
    )

"""
Tabular export of the ledger.

One row per graded prediction, in ledger order, joining each LedgerEntry
with the fields of the record it settles:

    date | sport | teams | pick | confidence_pct | odds | result | profit_loss

Odds are rendered in the configured display notation; profit/loss is the
ledger value itself, so the export always reconciles with the running total
shown on the results page.
"""

import logging
from typing import Dict, Iterable, List, Optional

import pandas as pd

from backend.core.ledger_config import LedgerConfig
from backend.core.odds_math import format_odds
from backend.models import PredictionRecord
from backend.services.ledger import settled_ledger

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "date",
    "sport",
    "teams",
    "pick",
    "confidence_pct",
    "odds",
    "result",
    "profit_loss",
]


def export_rows(
    records: Iterable[PredictionRecord],
    config: Optional[LedgerConfig] = None,
    stake: Optional[int] = None,
) -> List[Dict]:
    """Export rows as plain dicts (keys = EXPORT_COLUMNS)."""
    config = config or LedgerConfig.english()

    rows = []
    for r, entry in settled_ledger(records, stake or config.flat_stake):
        rows.append({
            "date": r.game_date.isoformat(),
            "sport": r.sport,
            "teams": f"{r.home_team} vs {r.away_team}",
            "pick": r.pick,
            "confidence_pct": int(r.confidence),
            "odds": format_odds(
                r.odds, config.odds_format, decimal_separator=config.decimal_separator
            ),
            "result": entry.result.value,
            "profit_loss": entry.profit_loss,
        })
    return rows


def export_dataframe(
    records: Iterable[PredictionRecord],
    config: Optional[LedgerConfig] = None,
    stake: Optional[int] = None,
) -> pd.DataFrame:
    """Export rows as a DataFrame with a fixed column order."""
    rows = export_rows(records, config, stake)
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def export_csv(
    records: Iterable[PredictionRecord],
    config: Optional[LedgerConfig] = None,
    stake: Optional[int] = None,
) -> str:
    """Export rows as CSV text (header included, no index column)."""
    df = export_dataframe(records, config, stake)
    logger.info("Exporting %d ledger rows", len(df))
    return df.to_csv(index=False)

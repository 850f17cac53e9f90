"""
Data-quality reporting.

Dirty upstream data never blocks a number from rendering: each condition
below has a fixed fallback applied where it is detected, and is reported
here so it shows up in the logs instead of in the dashboard.

    MALFORMED_ODDS             -> fallback decimal price
    AMBIGUOUS_CONFIDENCE_UNIT  -> 1.0 read as 100%
    MISSING_CONFIDENCE         -> configured default confidence
    DEGENERATE_ODDS            -> zero Kelly edge
    INVALID_BANKROLL           -> zero stake recommendation
    EMPTY_INPUT                -> empty / zero results
    UNKNOWN_RESULT             -> treated as pending
    MALFORMED_RECORD           -> record skipped
"""

import logging
from enum import Enum

logger = logging.getLogger("backend.data_quality")


class DataQualityIssue(str, Enum):
    MALFORMED_ODDS = "malformed_odds"
    AMBIGUOUS_CONFIDENCE_UNIT = "ambiguous_confidence_unit"
    MISSING_CONFIDENCE = "missing_confidence"
    DEGENERATE_ODDS = "degenerate_odds"
    INVALID_BANKROLL = "invalid_bankroll"
    EMPTY_INPUT = "empty_input"
    UNKNOWN_RESULT = "unknown_result"
    MALFORMED_RECORD = "malformed_record"


_LEVELS = {
    DataQualityIssue.MALFORMED_ODDS: logging.WARNING,
    DataQualityIssue.MISSING_CONFIDENCE: logging.WARNING,
    DataQualityIssue.MALFORMED_RECORD: logging.WARNING,
    DataQualityIssue.INVALID_BANKROLL: logging.WARNING,
    DataQualityIssue.UNKNOWN_RESULT: logging.INFO,
    DataQualityIssue.DEGENERATE_ODDS: logging.INFO,
    DataQualityIssue.EMPTY_INPUT: logging.INFO,
    DataQualityIssue.AMBIGUOUS_CONFIDENCE_UNIT: logging.DEBUG,
}


def report_issue(issue: DataQualityIssue, detail: str, *args) -> None:
    """Log a data-quality event; ``detail`` uses %-style ``args``."""
    logger.log(_LEVELS[issue], "[%s] " + detail, issue.value, *args)

"""Confidence normalization — resolves the 0–1 vs 0–100 unit ambiguity.

The prediction feed publishes a pick's win probability either as a fraction
(``0.73``) or as a percentage (``73``), sometimes within the same payload.
:func:`normalize_confidence` maps both onto a canonical integer percentage
and wraps it in :class:`NormalizedConfidence`, so code further downstream
can tell a normalized value apart from a raw one and never divides a 1%
confidence by 100 a second time.

Policy for the boundary value ``1.0``: it is read as the fraction 100%,
not as 1%.  A 1% pick is never published, whereas ``1.0`` from a model
that emits fractions is a saturated probability.

Run tests with::

    pytest tests/test_confidence.py -v
"""

from __future__ import annotations

import math
from typing import Final

from backend.core.odds_math import round_half_up

#: Tier floors (inclusive) used by the results page breakdown.
LOCK_FLOOR: Final[int] = 75
HIGH_FLOOR: Final[int] = 65
MEDIUM_FLOOR: Final[int] = 55

#: Tier names in display order.
CONFIDENCE_TIERS: Final[tuple] = ("lock", "high", "medium", "low")


class NormalizedConfidence(int):
    """Confidence as an integer percentage in ``[0, 100]``.

    Behaves as a plain ``int`` in arithmetic and comparisons.  Its type is
    the marker that :func:`normalize_confidence` has already run.

    Raises:
        ValueError: If constructed from a value outside ``[0, 100]``.
    """

    def __new__(cls, value: int) -> NormalizedConfidence:
        if not 0 <= value <= 100:
            raise ValueError(f"Normalized confidence must be in [0, 100], got {value!r}.")
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"NormalizedConfidence({int(self)})"

    @property
    def probability(self) -> float:
        """Win probability in ``[0, 1]``."""
        return int(self) / 100.0


def normalize_confidence(value: float | NormalizedConfidence) -> NormalizedConfidence:
    """Map a fraction or a percentage onto a canonical integer percentage.

    Rule: ``value ≤ 1`` is a fraction and is multiplied by 100; the result is
    rounded (halves up) and clamped to ``[0, 100]``.  A
    :class:`NormalizedConfidence` is returned unchanged, which makes the
    function idempotent even for a normalized 1%.

    Examples::

        normalize_confidence(0.73)  → 73
        normalize_confidence(73)    → 73
        normalize_confidence(1.0)   → 100
        normalize_confidence(140)   → 100
        normalize_confidence(-0.2)  → 0

    Raises:
        ValueError: If ``value`` is NaN or infinite.  Missing values are the
            ingestion boundary's concern (see
            :func:`backend.services.normalization.normalize_record_confidence`).
    """
    if isinstance(value, NormalizedConfidence):
        return value
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"Confidence must be finite, got {value!r}.")
    if value <= 1.0:
        value *= 100.0
    return NormalizedConfidence(max(0, min(100, round_half_up(value))))


def confidence_tier(confidence: float | NormalizedConfidence) -> str:
    """Return the display tier (``lock``/``high``/``medium``/``low``)."""
    pct = normalize_confidence(confidence)
    if pct >= LOCK_FLOOR:
        return "lock"
    if pct >= HIGH_FLOOR:
        return "high"
    if pct >= MEDIUM_FLOOR:
        return "medium"
    return "low"

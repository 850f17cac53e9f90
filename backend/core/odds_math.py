"""Odds arithmetic — the single source of truth for odds notation.

Every function here is **pure**: no I/O, no logging, no side effects.
Import from this module; never re-parse odds strings in services or views.

The three pillars exposed are:

1. **Parsing** — American, decimal and fractional strings (or numbers) to one
   canonical decimal value, tagged with the notation it was written in.
2. **Conversion** — American ↔ decimal ↔ fractional.
3. **Presentation** — decimal back to the notation a user prefers, with a
   locale-specific decimal separator.

Design decisions
----------------
* Decimal odds are the canonical form because the ledger and the Kelly
  sizing both need the profit multiplier ``decimal − 1`` directly.  The
  notation tag on :class:`CanonicalOdds` is kept only so a value can be
  shown back the way it arrived; it never feeds into arithmetic.
* :func:`parse_odds` raises ``ValueError`` on anything it cannot read.  The
  no-raise fallback policy belongs to the ingestion boundary
  (:func:`backend.services.normalization.normalize_odds`), which also reports
  the data-quality event.  Keeping the policy out of this module keeps it
  testable in isolation.
* An unsigned integer ≥ 100 (``"150"``) is read as American underdog odds.
  A decimal price of 150.0 does not occur in the prediction feed, whereas a
  moneyline with its ``+`` stripped by a spreadsheet export does.

Run tests with::

    pytest tests/test_odds_math.py -v
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext
from enum import Enum
from fractions import Fraction
from typing import Final

# ---------------------------------------------------------------------------
# Module-level constants
# ---------------------------------------------------------------------------

#: American-odds magnitude floor.  ``|odds| < 100`` is not a representable
#: moneyline and indicates a data error upstream.
_MIN_AMERICAN_MAGNITUDE: Final[int] = 100

#: Largest denominator used when rendering fractional odds.  Bookmaker
#: fractions never exceed this (``100/30``, ``10/11``, ``4/6`` …).
_MAX_FRACTION_DENOMINATOR: Final[int] = 100

#: Highest decimal price accepted from the feed (American +999900).  Larger
#: values are typos or concatenated fields, not prices.
MAX_DECIMAL_ODDS: Final[float] = 10_000.0

#: Working precision for rounding; enough digits for any finite float.
_ROUNDING_PRECISION: Final[int] = 400

#: Words that bookmakers print instead of a number for an even-money price.
_EVEN_MONEY_AMERICAN: Final[frozenset] = frozenset({"even", "ev"})
_EVEN_MONEY_FRACTIONAL: Final[frozenset] = frozenset({"evens", "evs"})

_FRACTIONAL_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*/\s*(\d+(?:\.\d+)?)$")
_SIGNED_RE = re.compile(r"^([+-])\s*(\d+(?:\.\d+)?)$")
_UNSIGNED_RE = re.compile(r"^\d+(?:\.\d+)?$")
_THOUSANDS_RE = re.compile(r"^[+-]?\d{1,3}(?:,\d{3})+$")


class OddsNotation(str, Enum):
    """Notation an odds value was written in."""

    AMERICAN = "american"
    DECIMAL = "decimal"
    FRACTIONAL = "fractional"


@dataclass(frozen=True, slots=True)
class CanonicalOdds:
    """Decimal odds ≥ 1.0 plus the notation they were parsed from.

    Attributes:
        decimal: Total payout per unit staked, stake included.  Always
            finite and ≥ 1.0; construction fails otherwise.
        notation: Notation detected on input.  Display only.
        is_fallback: True when the value is the documented substitute for
            malformed input rather than something read from the feed.
    """

    decimal: float
    notation: OddsNotation = OddsNotation.DECIMAL
    is_fallback: bool = False

    def __post_init__(self) -> None:
        if not math.isfinite(self.decimal) or self.decimal < 1.0:
            raise ValueError(
                f"Canonical decimal odds must be finite and ≥ 1.0, got {self.decimal!r}."
            )

    def __float__(self) -> float:
        return self.decimal

    @property
    def profit_multiplier(self) -> float:
        """Profit per unit staked on a win (``decimal − 1``)."""
        return self.decimal - 1.0


# ---------------------------------------------------------------------------
# Shared rounding
# ---------------------------------------------------------------------------


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero.

    Python's built-in :func:`round` uses banker's rounding, which would make
    ``2.5 → 2`` but ``3.5 → 4``.  Ledger amounts are shown to users next to
    the odds they came from, so the familiar schoolbook rule is used.  The
    float is routed through its shortest ``repr`` so the same input always
    yields the same integer on every platform.

    Examples::

        round_half_up(909.9999999999999) → 910
        round_half_up(666.6666666666667) → 667
        round_half_up(-2.5)              → -3
        round_half_up(1e30)              → 10**30

    Raises:
        ValueError: If ``value`` is NaN or infinite.
    """
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"Cannot round a non-finite value, got {value!r}.")
    with localcontext() as ctx:
        ctx.prec = _ROUNDING_PRECISION
        return int(Decimal(repr(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


def american_to_decimal(american: int | float) -> float:
    """Convert American odds to decimal (European) format.

    Examples::

        american_to_decimal(-110) → 1.9091   (risk 110 to win 100)
        american_to_decimal(+150) → 2.5000   (risk 100 to win 150)

    Raises:
        ValueError: If ``|american| < 100``.

    Note:
        Even-money (+100 / -100) returns 2.0 in both conventions.
    """
    if abs(american) < _MIN_AMERICAN_MAGNITUDE:
        raise ValueError(
            f"Invalid American odds {american!r}: magnitude must be ≥ 100."
        )
    if american > 0:
        return american / 100.0 + 1.0
    return 100.0 / abs(american) + 1.0


def fractional_to_decimal(numerator: float, denominator: float) -> float:
    """Convert fractional odds ``a/b`` to decimal ``1 + a/b``.

    Raises:
        ValueError: If the denominator is not positive or the numerator is
            negative.
    """
    if denominator <= 0:
        raise ValueError(f"Fractional odds denominator must be > 0, got {denominator!r}.")
    if numerator < 0:
        raise ValueError(f"Fractional odds numerator must be ≥ 0, got {numerator!r}.")
    return 1.0 + numerator / denominator


def decimal_to_american(decimal_odds: float) -> int:
    """Convert decimal odds to the nearest American integer.

    Values ≥ 2.0 are returned as positive (underdog); values < 2.0 as
    negative (favourite).  Use the result for display only.

    Raises:
        ValueError: If ``decimal_odds ≤ 1.0``; a price that returns only the
            stake has no American equivalent.
    """
    if decimal_odds <= 1.0:
        raise ValueError(
            f"Decimal odds {decimal_odds!r} have no American equivalent (must be > 1.0)."
        )
    if decimal_odds >= 2.0:
        return round_half_up((decimal_odds - 1.0) * 100)
    return round_half_up(-100.0 / (decimal_odds - 1.0))


def decimal_to_fractional(
    decimal_odds: float,
    max_denominator: int = _MAX_FRACTION_DENOMINATOR,
) -> tuple[int, int]:
    """Convert decimal odds to a reduced ``(numerator, denominator)`` pair.

    Examples::

        decimal_to_fractional(2.5)      → (3, 2)
        decimal_to_fractional(1.90909)  → (10, 11)
        decimal_to_fractional(1.0)      → (0, 1)

    Raises:
        ValueError: If ``decimal_odds < 1.0``.
    """
    if decimal_odds < 1.0:
        raise ValueError(f"Decimal odds {decimal_odds!r} must be ≥ 1.0.")
    frac = Fraction(repr(decimal_odds - 1.0)).limit_denominator(max_denominator)
    return frac.numerator, frac.denominator


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _clean(raw: str | int | float) -> str:
    if isinstance(raw, bool):
        raise ValueError(f"Odds cannot be a boolean, got {raw!r}.")
    if isinstance(raw, float):
        if not math.isfinite(raw):
            raise ValueError(f"Odds must be finite, got {raw!r}.")
        text = repr(raw)
    else:
        text = str(raw)
    text = text.strip().replace("−", "-")
    if _THOUSANDS_RE.match(text):
        return text.replace(",", "")
    # Czech display form uses a comma as decimal separator ("1,91").
    return text.replace(",", ".")


def parse_odds(raw: str | int | float | None) -> CanonicalOdds:
    """Parse odds in any supported notation into :class:`CanonicalOdds`.

    Accepted forms::

        "+150" / "-110" / "-110.0"   American  → 2.50 / 1.909
        "1.91" / "1,91" / 1.91       decimal   → 1.91
        "10/11" / "6 / 4"            fractional → 1.909 / 2.50
        "EVEN" / "evens"             even money → 2.00
        "150" / 150                  unsigned ≥ 100 read as American +150

    Raises:
        ValueError: For empty, non-numeric, non-finite or out-of-range input
            (American magnitude < 100, decimal ≤ 1.0 or above
            ``MAX_DECIMAL_ODDS``, zero denominator).
    """
    odds = _parse_odds(raw)
    if odds.decimal > MAX_DECIMAL_ODDS:
        raise ValueError(
            f"Odds {raw!r} give decimal {odds.decimal!r}, above {MAX_DECIMAL_ODDS:.0f}."
        )
    return odds


def _parse_odds(raw: str | int | float | None) -> CanonicalOdds:
    if raw is None:
        raise ValueError("Odds value is missing.")

    text = _clean(raw)
    if not text:
        raise ValueError("Odds value is empty.")

    lowered = text.lower()
    if lowered in _EVEN_MONEY_AMERICAN:
        return CanonicalOdds(2.0, OddsNotation.AMERICAN)
    if lowered in _EVEN_MONEY_FRACTIONAL:
        return CanonicalOdds(2.0, OddsNotation.FRACTIONAL)

    match = _FRACTIONAL_RE.match(text)
    if match:
        decimal_odds = fractional_to_decimal(float(match.group(1)), float(match.group(2)))
        return CanonicalOdds(decimal_odds, OddsNotation.FRACTIONAL)

    match = _SIGNED_RE.match(text)
    if match:
        magnitude = float(match.group(2))
        american = magnitude if match.group(1) == "+" else -magnitude
        return CanonicalOdds(american_to_decimal(american), OddsNotation.AMERICAN)

    if _UNSIGNED_RE.match(text):
        value = float(text)
        if value >= _MIN_AMERICAN_MAGNITUDE and value.is_integer():
            return CanonicalOdds(american_to_decimal(value), OddsNotation.AMERICAN)
        if value > 1.0:
            return CanonicalOdds(value, OddsNotation.DECIMAL)
        raise ValueError(f"Decimal odds must be > 1.0, got {text!r}.")

    raise ValueError(f"Unrecognised odds notation: {raw!r}.")


# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------


def format_odds(
    odds: CanonicalOdds | float,
    notation: OddsNotation | str = OddsNotation.AMERICAN,
    *,
    decimal_separator: str = ".",
) -> str:
    """Render canonical odds in the requested notation.

    Pure display: the returned string never feeds back into ledger math.
    A price of exactly 1.0 cannot be written as a moneyline, so American
    output falls back to the decimal form for it.

    Examples::

        format_odds(2.5)                                   → "+150"
        format_odds(1.9090909, "american")                 → "-110"
        format_odds(1.91, "decimal", decimal_separator=",") → "1,91"
        format_odds(2.5, "fractional")                     → "3/2"
    """
    decimal_odds = float(odds)
    notation = OddsNotation(notation)

    if notation is OddsNotation.AMERICAN and decimal_odds > 1.0:
        american = decimal_to_american(decimal_odds)
        return f"+{american}" if american > 0 else str(american)
    if notation is OddsNotation.FRACTIONAL:
        numerator, denominator = decimal_to_fractional(decimal_odds)
        return f"{numerator}/{denominator}"
    return f"{decimal_odds:.2f}".replace(".", decimal_separator)

"""Kelly criterion sizing — the single source of truth for stake math.

All functions here are **pure**: no I/O, no logging.
Import from this module; never reimplement Kelly locally in services or
calculator widgets.

The functions cover the three steps of a stake recommendation:

1. :func:`kelly_fraction` — full (raw) Kelly for a win/loss bet.
2. :func:`cap_fraction` — clamp to ``[0, cap]``; negative edge → 0.
3. :func:`stake_from_fraction` / :func:`potential_profit` — money amounts.

Design decisions
----------------
* The raw fraction is returned **signed**.  The calculator shows a negative
  raw Kelly as "no edge" next to the zero stake, so clamping happens in a
  separate step rather than inside :func:`kelly_fraction`.
* A **fixed cap** (default 10% of bankroll) replaces the fractional-Kelly
  divisor.  Published confidence values are not calibrated probabilities,
  so full Kelly on them routinely suggests a third of the bankroll on one
  game; the cap bounds that without pretending to know the estimation error.
* Degenerate odds (decimal exactly 1.0) mean no profit on a win.  The Kelly
  denominator vanishes; the bet has no edge and the fraction is 0.

Run tests with::

    pytest tests/test_kelly.py -v
"""

from __future__ import annotations

from typing import Final

from backend.core.odds_math import round_half_up

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: Hard cap on any single recommendation, as a fraction of bankroll.
DEFAULT_KELLY_CAP: Final[float] = 0.10


# ---------------------------------------------------------------------------
# Standard Kelly
# ---------------------------------------------------------------------------


def kelly_fraction(win_prob: float, decimal_odds: float) -> float:
    """Full Kelly fraction for a simple win/loss outcome.

    The Kelly criterion maximises the expected logarithm of wealth.  With
    win probability ``p`` and decimal odds ``d`` the closed form is::

        f*  =  (p · d − 1) / (d − 1)                              (1)

    which is the familiar ``(p · b − q) / b`` with ``b = d − 1`` and
    ``q = 1 − p``.

    Args:
        win_prob: Win probability in ``[0, 1]``.
        decimal_odds: Decimal odds ≥ 1.0.

    Returns:
        The signed full-Kelly fraction.  Negative values mean the price
        offers no edge.  Exactly ``0.0`` for degenerate odds (``d == 1``).

    Raises:
        ValueError: If ``win_prob`` is outside ``[0, 1]`` or
            ``decimal_odds < 1.0``.

    Examples::

        kelly_fraction(0.70, 1.91)  →  0.3703
        kelly_fraction(0.50, 1.91)  → -0.0495
        kelly_fraction(0.60, 1.00)  →  0.0     (degenerate)

    References:
        Kelly, J. L. (1956). A New Interpretation of Information Rate.
        *Bell System Technical Journal*, 35(4), 917–926.
    """
    if not 0.0 <= win_prob <= 1.0:
        raise ValueError(f"win_prob must be in [0, 1], got {win_prob!r}.")
    if decimal_odds < 1.0:
        raise ValueError(f"decimal_odds must be ≥ 1.0, got {decimal_odds!r}.")

    profit_per_unit = decimal_odds - 1.0
    if profit_per_unit == 0.0:
        return 0.0
    return (win_prob * decimal_odds - 1.0) / profit_per_unit


def cap_fraction(raw_fraction: float, cap: float = DEFAULT_KELLY_CAP) -> float:
    """Clamp a raw Kelly fraction to ``[0, cap]``.

    Negative fractions (no perceived edge) become 0; fractions above the cap
    are silently reduced to it, never rejected.

    Raises:
        ValueError: If ``cap`` is not in ``(0, 1]``.
    """
    if not 0.0 < cap <= 1.0:
        raise ValueError(f"Kelly cap must be in (0, 1], got {cap!r}.")
    return max(0.0, min(raw_fraction, cap))


# ---------------------------------------------------------------------------
# Money amounts
# ---------------------------------------------------------------------------


def stake_from_fraction(bankroll: float, fraction: float) -> int:
    """Whole-currency stake for a bankroll fraction (``round(B × f)``).

    A non-positive bankroll yields 0.

    Examples::

        stake_from_fraction(10000, 0.10) → 1000
        stake_from_fraction(0, 0.10)     → 0
    """
    if bankroll <= 0:
        return 0
    return round_half_up(bankroll * fraction)


def potential_profit(stake: int, decimal_odds: float) -> int:
    """Profit if a stake wins at the given decimal odds (``round(S × (d − 1))``).

    Examples::

        potential_profit(1000, 1.91) → 910
        potential_profit(1000, 2.50) → 1500
    """
    return round_half_up(stake * (decimal_odds - 1.0))

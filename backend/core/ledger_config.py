"""Ledger configuration — every stake and display constant in one place.

This module is the **registry** for values that the dashboard used to
hard-code per view (a 1000 Kč flat stake in the profit tracker, a 100 $
stake in the bet calculator, a 1.91 fallback price in three places).
Nowhere else in the codebase should a flat stake, Kelly cap or odds
fallback be written as a literal.

Architecture
------------
:class:`LedgerConfig` is a frozen dataclass.  Named constructors
(:meth:`LedgerConfig.english`, :meth:`LedgerConfig.czech`) return the
locale profiles the dashboard ships with; :meth:`LedgerConfig.from_env`
picks a profile from ``LEDGER_LOCALE`` and applies environment overrides.

Typical usage::

    from backend.core.ledger_config import LedgerConfig

    cfg = LedgerConfig.from_env()
    entries = build_ledger(records, stake=cfg.flat_stake)

    # Override a single constant for one request:
    from dataclasses import replace
    custom_cfg = replace(cfg, flat_stake=250)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Final

from dotenv import load_dotenv

from backend.core.kelly import DEFAULT_KELLY_CAP
from backend.core.odds_math import OddsNotation

#: Locale identifiers used by the settings collaborator.
LOCALE_EN: Final[str] = "en"
LOCALE_CZ: Final[str] = "cz"

#: Substitute decimal price for odds that cannot be parsed (-110 rounded).
DEFAULT_FALLBACK_ODDS: Final[float] = 1.91

#: Confidence assumed when the feed omits it entirely.
DEFAULT_CONFIDENCE: Final[int] = 65

#: Trailing window (in graded days) for the accuracy moving average.
DEFAULT_MOVING_AVERAGE_WINDOW: Final[int] = 7


@dataclass(frozen=True)
class LedgerConfig:
    """Immutable configuration bundle for the ledger and stake advisor.

    Attributes:
        locale: Settings locale (``"en"`` or ``"cz"``).
        currency: ISO currency code shown next to money amounts.
        flat_stake: Per-event stake ``S`` for the ledger, in whole currency
            units.  One value for every view.
        odds_format: Preferred odds notation for display.
        decimal_separator: ``"."`` or ``","``; display only.
        kelly_cap: Ceiling on the recommended bankroll fraction.
        fallback_decimal_odds: Price substituted for malformed odds.
        default_confidence: Confidence substituted when the feed omits it.
        moving_average_window: N for the N-day accuracy moving average.
    """

    locale: str = LOCALE_EN
    currency: str = "USD"
    flat_stake: int = 100
    odds_format: OddsNotation = OddsNotation.AMERICAN
    decimal_separator: str = "."
    kelly_cap: float = DEFAULT_KELLY_CAP
    fallback_decimal_odds: float = DEFAULT_FALLBACK_ODDS
    default_confidence: int = DEFAULT_CONFIDENCE
    moving_average_window: int = DEFAULT_MOVING_AVERAGE_WINDOW

    def __post_init__(self) -> None:
        if self.flat_stake <= 0:
            raise ValueError(f"flat_stake must be > 0, got {self.flat_stake!r}.")
        if not 0.0 < self.kelly_cap <= 1.0:
            raise ValueError(f"kelly_cap must be in (0, 1], got {self.kelly_cap!r}.")
        if self.fallback_decimal_odds < 1.0:
            raise ValueError(
                f"fallback_decimal_odds must be ≥ 1.0, got {self.fallback_decimal_odds!r}."
            )
        if not 0 <= self.default_confidence <= 100:
            raise ValueError(
                f"default_confidence must be in [0, 100], got {self.default_confidence!r}."
            )
        if self.moving_average_window < 1:
            raise ValueError(
                f"moving_average_window must be ≥ 1, got {self.moving_average_window!r}."
            )

    # ------------------------------------------------------------------ #
    #  Named constructors                                                  #
    # ------------------------------------------------------------------ #

    @classmethod
    def english(cls) -> LedgerConfig:
        """English profile: USD, 100 per pick, American odds."""
        return cls()

    @classmethod
    def czech(cls) -> LedgerConfig:
        """Czech profile: CZK, 1000 Kč per pick, decimal odds with a comma."""
        return cls(
            locale=LOCALE_CZ,
            currency="CZK",
            flat_stake=1000,
            odds_format=OddsNotation.DECIMAL,
            decimal_separator=",",
        )

    @classmethod
    def for_locale(cls, locale: str) -> LedgerConfig:
        """Return the profile for ``locale``; unknown locales get English."""
        if (locale or "").strip().lower() == LOCALE_CZ:
            return cls.czech()
        return cls.english()

    @classmethod
    def from_env(cls) -> LedgerConfig:
        """Build a config from the environment (and ``.env`` if present).

        Reads ``LEDGER_LOCALE`` to choose the profile, then applies any of
        ``LEDGER_FLAT_STAKE``, ``LEDGER_KELLY_CAP``, ``LEDGER_MA_WINDOW`` and
        ``LEDGER_ODDS_FORMAT`` that are set.

        Raises:
            ValueError: If an override cannot be parsed or is out of range.
        """
        load_dotenv()
        cfg = cls.for_locale(os.getenv("LEDGER_LOCALE", LOCALE_EN))

        overrides = {}
        if os.getenv("LEDGER_FLAT_STAKE"):
            overrides["flat_stake"] = int(os.getenv("LEDGER_FLAT_STAKE"))
        if os.getenv("LEDGER_KELLY_CAP"):
            overrides["kelly_cap"] = float(os.getenv("LEDGER_KELLY_CAP"))
        if os.getenv("LEDGER_MA_WINDOW"):
            overrides["moving_average_window"] = int(os.getenv("LEDGER_MA_WINDOW"))
        if os.getenv("LEDGER_ODDS_FORMAT"):
            overrides["odds_format"] = OddsNotation(os.getenv("LEDGER_ODDS_FORMAT").lower())

        return replace(cfg, **overrides) if overrides else cfg

    def __repr__(self) -> str:
        return (
            f"LedgerConfig(locale={self.locale!r}, "
            f"stake={self.flat_stake} {self.currency}, "
            f"odds={self.odds_format.value}, "
            f"cap={self.kelly_cap})"
        )

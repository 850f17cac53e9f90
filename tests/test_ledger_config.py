"""Tests for LedgerConfig profiles and environment overrides."""

from dataclasses import FrozenInstanceError, replace

import pytest

from backend.core.ledger_config import DEFAULT_FALLBACK_ODDS, LedgerConfig
from backend.core.odds_math import OddsNotation

_ENV_VARS = (
    "LEDGER_LOCALE",
    "LEDGER_FLAT_STAKE",
    "LEDGER_KELLY_CAP",
    "LEDGER_MA_WINDOW",
    "LEDGER_ODDS_FORMAT",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # ignore any developer .env
    monkeypatch.setattr("backend.core.ledger_config.load_dotenv", lambda: False)
    return monkeypatch


def test_english_profile():
    cfg = LedgerConfig.english()
    assert cfg.currency == "USD"
    assert cfg.flat_stake == 100
    assert cfg.odds_format is OddsNotation.AMERICAN
    assert cfg.kelly_cap == 0.10
    assert cfg.fallback_decimal_odds == DEFAULT_FALLBACK_ODDS


def test_czech_profile():
    cfg = LedgerConfig.czech()
    assert cfg.currency == "CZK"
    assert cfg.flat_stake == 1000
    assert cfg.odds_format is OddsNotation.DECIMAL
    assert cfg.decimal_separator == ","


@pytest.mark.parametrize("locale, currency", [
    ("cz", "CZK"),
    ("CZ", "CZK"),
    ("en", "USD"),
    ("de", "USD"),
    (None, "USD"),
])
def test_for_locale(locale, currency):
    assert LedgerConfig.for_locale(locale).currency == currency


def test_frozen():
    with pytest.raises(FrozenInstanceError):
        LedgerConfig.english().flat_stake = 5


@pytest.mark.parametrize("field, value", [
    ("flat_stake", 0),
    ("kelly_cap", 0.0),
    ("kelly_cap", 1.5),
    ("fallback_decimal_odds", 0.9),
    ("default_confidence", 101),
    ("moving_average_window", 0),
])
def test_validation(field, value):
    with pytest.raises(ValueError):
        replace(LedgerConfig.english(), **{field: value})


def test_from_env_defaults(clean_env):
    assert LedgerConfig.from_env() == LedgerConfig.english()


def test_from_env_locale(clean_env):
    clean_env.setenv("LEDGER_LOCALE", "cz")
    assert LedgerConfig.from_env() == LedgerConfig.czech()


def test_from_env_overrides(clean_env):
    clean_env.setenv("LEDGER_LOCALE", "cz")
    clean_env.setenv("LEDGER_FLAT_STAKE", "500")
    clean_env.setenv("LEDGER_KELLY_CAP", "0.05")
    clean_env.setenv("LEDGER_MA_WINDOW", "14")
    clean_env.setenv("LEDGER_ODDS_FORMAT", "Fractional")
    cfg = LedgerConfig.from_env()
    assert cfg.currency == "CZK"
    assert cfg.flat_stake == 500
    assert cfg.kelly_cap == 0.05
    assert cfg.moving_average_window == 14
    assert cfg.odds_format is OddsNotation.FRACTIONAL


def test_from_env_invalid_override(clean_env):
    clean_env.setenv("LEDGER_FLAT_STAKE", "-10")
    with pytest.raises(ValueError):
        LedgerConfig.from_env()


def test_repr():
    assert repr(LedgerConfig.czech()) == (
        "LedgerConfig(locale='cz', stake=1000 CZK, odds=decimal, cap=0.1)"
    )

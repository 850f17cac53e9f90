"""Core mathematics and configuration for the Edge Ledger engine.

This package contains pure building blocks:

- ``odds_math``     — odds parsing, notation conversion, display, rounding
- ``confidence``    — 0–1 vs 0–100 confidence normalization and tiers
- ``kelly``         — Kelly criterion fraction, cap and stake amounts
- ``ledger_config`` — flat stake, Kelly cap, fallbacks and locale profiles

Nothing in this package imports from ``backend.services``.
Apart from ``LedgerConfig.from_env`` all modules are side-effect-free and
unit-testable in isolation.
"""

"""
Predictions feed client.

Reads the current prediction snapshot from the predictions API.  Fetch
cadence and caching belong to the caller; this module only performs one
read and hands the payloads to the ingestion boundary.
"""

import logging
import os
from typing import Dict, List, Optional

import requests

from backend.core.ledger_config import LedgerConfig
from backend.models import PredictionRecord
from backend.services.normalization import ingest_predictions

logger = logging.getLogger(__name__)

BASE_URL = os.getenv("PREDICTIONS_API_URL", "https://api.edge88.net/api/v1")
TIMEOUT_SECONDS = float(os.getenv("PREDICTIONS_API_TIMEOUT", "15"))


def _fetch_payloads(path: str = "/predictions/active", params: Optional[Dict] = None) -> List[Dict]:
    """Return raw prediction payloads from the feed."""
    url = f"{BASE_URL}{path}"
    resp = requests.get(url, params=params, timeout=TIMEOUT_SECONDS)
    resp.raise_for_status()
    data = resp.json()

    # The feed returns either a bare list or {"predictions": [...]}
    if isinstance(data, dict):
        data = data.get("predictions") or []
    if not isinstance(data, list):
        raise ValueError(f"Unexpected predictions payload type: {type(data).__name__}")

    logger.info("Predictions API: %d payloads from %s", len(data), path)
    return data


def fetch_predictions(
    config: Optional[LedgerConfig] = None,
    path: str = "/predictions/active",
    params: Optional[Dict] = None,
) -> List[PredictionRecord]:
    """
    Fetch and ingest one snapshot of predictions.

    Raises:
        requests.RequestException: On network or HTTP errors.
        ValueError: If the feed returns something other than a list.
    """
    config = config or LedgerConfig.english()
    payloads = _fetch_payloads(path, params)
    return ingest_predictions(
        payloads,
        fallback_odds=config.fallback_decimal_odds,
        default_confidence=config.default_confidence,
    )

"""
Token price table - USD prices of listed super tokens, per network.

The file is produced by ``update-token-prices`` and has the shape
``{"<network>": {"<token address>": <usd price>, ...}, ...}``.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path

from graphinator.errors import ConfigurationError

logger = logging.getLogger(__name__)

__all__ = ["load_token_prices", "DEFAULT_TOKEN_PRICES_FILE"]

DEFAULT_TOKEN_PRICES_FILE = Path("data") / "token_prices.json"


def load_token_prices(path: str | Path, network: str) -> dict[str, float]:
    """
    Load the USD prices of one network, keyed by lower-cased token address.

    A missing file or network yields an empty table: every flow then falls
    back to the fallback gas price limit.

    Raises:
        ConfigurationError: If the file exists but isn't valid price JSON
    """
    path = Path(path)
    if not path.exists():
        logger.warning("Token prices file %s not found, all flows get the fallback gas price limit", path)
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            all_networks = json.load(f)
        prices = all_networks.get(network) or {}
        table = {address.lower(): float(price) for address, price in prices.items()}
    except (json.JSONDecodeError, AttributeError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid token prices file {path}: {e}") from e

    if not table:
        logger.warning(
            "No token prices for %s in %s, all flows get the fallback gas price limit. Run update-token-prices",
            network, path,
        )
    else:
        logger.info("Loaded %d token prices", len(table))
    return table

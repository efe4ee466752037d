#!/usr/bin/env python3
"""
update_token_prices.py
======================
Creates a json file with the current USD price of all listed Super Tokens of
all Superfluid mainnets known to CoinGecko.

1. Fetches networks.json and keeps mainnets with a CoinGecko platform id.
2. For each network, gets the listed Super Tokens from the protocol subgraph.
3. Prices the native token wrapper by the native coin, pure Super Tokens by
   their own address and wrapper Super Tokens by their underlying address.
4. Writes the data to json.

Usage:
    COINGECKO_API_KEY=… python -m graphinator.setup.update_token_prices [--output data/token_prices.json]
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

import requests
from dotenv import load_dotenv

from graphinator.config.logging_config import setup_logger
from graphinator.config.network import load_networks_metadata
from graphinator.errors import ConfigurationError, SubgraphError
from graphinator.helpers.subgraph import SubgraphClient
from graphinator.helpers.token_prices import DEFAULT_TOKEN_PRICES_FILE

logger = logging.getLogger("graphinator.setup.update_token_prices")

DEFAULT_COINGECKO_BASE_URL = "https://pro-api.coingecko.com/api/v3"
SUBGRAPH_URL_TEMPLATE = "https://{network}.subgraph.x.superfluid.dev"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# CoinGecko lists these native coins under another symbol
NATIVE_SYMBOL_OVERRIDES = {"xDAI": "DAI", "MATIC": "POL"}

LISTED_SUPER_TOKENS_QUERY = """
query {
  tokens(first: 1000, where: {isSuperToken: true, isListed: true, isNativeAssetSuperToken: false}) {
    id
    underlyingAddress
    name
    symbol
  }
}
"""


def categorize_tokens(tokens: list[dict[str, Any]], native_token_wrapper: str | None) -> tuple[list[dict], list[dict]]:
    """Split listed tokens into (pure super tokens, wrapper super tokens).

    The native token wrapper is excluded from both, it's priced by the native coin.
    """
    wrapper = (native_token_wrapper or "").lower()
    pure = [t for t in tokens if t["underlyingAddress"].lower() == ZERO_ADDRESS]
    wrappers = [
        t for t in tokens
        if t["underlyingAddress"].lower() != ZERO_ADDRESS and t["id"].lower() != wrapper
    ]
    return pure, wrappers


class CoinGeckoClient:
    def __init__(self, base_url: str, api_key: str, timeout: int = 30):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"x-cg-pro-api-key": api_key})

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        response = self.session.get(f"{self.base_url}{path}", params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def token_prices(self, platform: str, addresses: list[str]) -> dict[str, float]:
        """USD prices keyed by lower-cased contract address. Empty on failure."""
        try:
            data = self._get(
                f"/simple/token_price/{platform}",
                {"contract_addresses": ",".join(addresses), "vs_currencies": "usd"},
            )
        except requests.RequestException as e:
            logger.error("Error fetching prices for tokens on %s: %s", platform, e)
            return {}
        return {addr.lower(): entry["usd"] for addr, entry in data.items() if entry.get("usd")}

    def native_coin_id(self, symbol: str) -> str | None:
        symbol = NATIVE_SYMBOL_OVERRIDES.get(symbol, symbol)
        try:
            coins = self._get("/search", {"query": symbol}).get("coins", [])
        except requests.RequestException as e:
            logger.error("Error searching for native token %s: %s", symbol, e)
            return None
        # prefer coins with a market cap ranking
        for coin in coins:
            if coin["symbol"].lower() == symbol.lower() and coin.get("market_cap_rank"):
                return coin["id"]
        return None

    def native_coin_price(self, coin_id: str) -> float | None:
        try:
            return self._get("/simple/price", {"ids": coin_id, "vs_currencies": "usd"}).get(coin_id, {}).get("usd")
        except requests.RequestException as e:
            logger.error("Error fetching price for native coin %s: %s", coin_id, e)
            return None


def fetch_network_prices(network: dict[str, Any], coingecko: CoinGeckoClient) -> dict[str, float]:
    subgraph = SubgraphClient(SUBGRAPH_URL_TEMPLATE.format(network=network["name"]))
    tokens = subgraph.query(LISTED_SUPER_TOKENS_QUERY).get("tokens", [])
    platform = network["coinGeckoId"]
    native_token_wrapper = network.get("nativeTokenWrapper")
    prices: dict[str, float] = {}

    # 1. native token wrapper
    if native_token_wrapper and network.get("nativeTokenSymbol"):
        coin_id = coingecko.native_coin_id(network["nativeTokenSymbol"])
        price = coingecko.native_coin_price(coin_id) if coin_id else None
        if price:
            prices[native_token_wrapper.lower()] = price
            logger.info("  Native token wrapper %s (%sx) price: %s", native_token_wrapper, network["nativeTokenSymbol"], price)

    pure, wrappers = categorize_tokens(tokens, native_token_wrapper)

    # 2. pure super tokens, priced by their own address
    if pure:
        found = coingecko.token_prices(platform, [t["id"] for t in pure])
        for token in pure:
            price = found.get(token["id"].lower())
            if price:
                prices[token["id"].lower()] = price
                logger.info("  Pure super token %s (%s) price: %s", token["id"], token["symbol"], price)

    # 3. wrapper super tokens, priced by their underlying
    if wrappers:
        found = coingecko.token_prices(platform, [t["underlyingAddress"] for t in wrappers])
        for token in wrappers:
            price = found.get(token["underlyingAddress"].lower())
            if price:
                prices[token["id"].lower()] = price
                logger.info("  Wrapper super token %s (%s) price: %s", token["id"], token["symbol"], price)

    return prices


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Update the token prices file from CoinGecko")
    parser.add_argument("--output", type=Path, default=DEFAULT_TOKEN_PRICES_FILE)
    parser.add_argument("--networks-metadata", type=Path, default=None, help="Local networks.json")
    args = parser.parse_args(argv)

    load_dotenv()
    setup_logger("graphinator")

    api_key = os.getenv("COINGECKO_API_KEY")
    if not api_key:
        logger.error("COINGECKO_API_KEY is not set")
        return 1
    coingecko = CoinGeckoClient(os.getenv("COINGECKO_BASE_URL") or DEFAULT_COINGECKO_BASE_URL, api_key)

    try:
        networks = [n for n in load_networks_metadata(args.networks_metadata) if not n.get("isTestnet")]
    except ConfigurationError as e:
        logger.error("%s", e)
        return 1

    token_prices: dict[str, dict[str, float]] = {}
    for network in networks:
        if not network.get("coinGeckoId"):
            logger.info("Skipping network %s - no Coingecko ID found", network["name"])
            continue
        logger.info("Processing network %s (Coingecko platform: %s)", network["name"], network["coinGeckoId"])
        try:
            token_prices[network["name"]] = fetch_network_prices(network, coingecko)
        except SubgraphError as e:
            logger.error("Error fetching tokens for %s: %s", network["name"], e)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    with open(args.output, "w", encoding="utf-8") as f:
        json.dump(token_prices, f, indent=2)
    logger.info("Output saved to %s", args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())

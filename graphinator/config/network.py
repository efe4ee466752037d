"""
Network configuration for the liquidation bot.

Superfluid deployments are described by the protocol's ``networks.json``
metadata (chain id, native token wrapper, contract addresses, CoinGecko
platform id). The file is read from disk when a path is given, otherwise it
is fetched from the protocol monorepo.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import requests

from graphinator.errors import ConfigurationError

logger = logging.getLogger(__name__)


# =============================================================================
# ENDPOINTS
# =============================================================================

NETWORKS_METADATA_URL: str = (
    "https://raw.githubusercontent.com/superfluid-finance/protocol-monorepo/"
    "dev/packages/metadata/networks.json"
)
RPC_URL_TEMPLATE: str = "https://rpc-endpoints.superfluid.dev/{network}?app=graphinator"
SUBGRAPH_URL_TEMPLATE: str = "https://subgraph-endpoints.superfluid.dev/{network}/protocol-v1"

# Network timeouts
RPC_TIMEOUT: int = 30  # seconds
HTTP_TIMEOUT: int = 30  # seconds


@dataclass(frozen=True)
class NetworkEndpoints:
    """Resolved contract addresses and URLs for one network."""
    name: str
    chain_id: int
    rpc_url: str
    subgraph_url: str
    batch_liquidator: str
    gda_forwarder: str


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def load_networks_metadata(path: str | Path | None = None, timeout: int = HTTP_TIMEOUT) -> list[dict[str, Any]]:
    """Load the Superfluid networks metadata.

    Args:
        path: Local ``networks.json``. If None, the canonical file is downloaded.
        timeout: HTTP timeout in seconds for the download.

    Returns:
        List of network entries.

    Raises:
        ConfigurationError: If the metadata can't be read or parsed.
    """
    if path is not None:
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read networks metadata from {path}: {e}") from e

    logger.debug("Fetching networks metadata from %s", NETWORKS_METADATA_URL)
    try:
        response = requests.get(NETWORKS_METADATA_URL, timeout=timeout)
        response.raise_for_status()
        return response.json()
    except (requests.RequestException, ValueError) as e:
        raise ConfigurationError(f"Cannot fetch networks metadata: {e}") from e


def get_network_metadata(name: str, networks: list[dict[str, Any]]) -> dict[str, Any]:
    """Get the metadata entry for a network by its canonical name (e.g. 'base-mainnet').

    Raises:
        ConfigurationError: If the network is unknown.
    """
    for network in networks:
        if network.get("name") == name:
            return network
    raise ConfigurationError(
        f"network {name} unknown - not in metadata. If the name is correct, you may need to update."
    )


def resolve_endpoints(name: str, networks: list[dict[str, Any]]) -> NetworkEndpoints:
    """Resolve RPC/subgraph URLs and liquidation contracts for a network.

    ``RPC_URL`` and ``SUBGRAPH_URL`` environment variables override the
    default Superfluid endpoints.

    Raises:
        ConfigurationError: If the network or one of its contracts is missing.
    """
    network = get_network_metadata(name, networks)
    contracts = network.get("contractsV1") or {}

    gda_forwarder = contracts.get("gdaV1Forwarder")
    if not gda_forwarder:
        raise ConfigurationError("GDA Forwarder contract address not found in metadata")
    batch_liquidator = contracts.get("batchLiquidator")
    if not batch_liquidator:
        raise ConfigurationError("Batch Liquidator contract address not found in metadata")

    return NetworkEndpoints(
        name=name,
        chain_id=int(network["chainId"]),
        rpc_url=os.getenv("RPC_URL") or RPC_URL_TEMPLATE.format(network=name),
        subgraph_url=os.getenv("SUBGRAPH_URL") or SUBGRAPH_URL_TEMPLATE.format(network=name),
        batch_liquidator=batch_liquidator,
        gda_forwarder=gda_forwarder,
    )


def check_chain_id(endpoints: NetworkEndpoints, chain_id: int) -> None:
    """Make sure the RPC endpoint serves the chain the metadata describes.

    Raises:
        ConfigurationError: On a chain id mismatch.
    """
    if int(chain_id) != endpoints.chain_id:
        raise ConfigurationError(
            f"RPC endpoint is on chain {chain_id}, but {endpoints.name} has chain id {endpoints.chain_id}"
        )

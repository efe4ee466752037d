"""
Configuration package for the liquidation bot.
"""

from graphinator.config.network import (
    NETWORKS_METADATA_URL,
    NetworkEndpoints,
    check_chain_id,
    get_network_metadata,
    load_networks_metadata,
    resolve_endpoints,
)

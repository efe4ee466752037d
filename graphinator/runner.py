"""
runner.py
=========
Entry point of the liquidation bot: wires settings into a Graphinator and
runs it once or in a loop.

Usage
-----
    PRIVATE_KEY=0x… \
    python -m graphinator --network base-mainnet [--token 0x…] [--batchSize 10] [--loop] [--dry-run]
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, Sequence

from graphinator.config.abis import BATCH_LIQUIDATOR_ABI, GDA_V1_FORWARDER_ABI
from graphinator.config.cli import load_environment, parse_settings
from graphinator.config.logging_config import setup_logger
from graphinator.config.network import check_chain_id, load_networks_metadata, resolve_endpoints
from graphinator.config.settings import Settings
from graphinator.errors import ConfigurationError
from graphinator.helpers.subgraph import SubgraphClient
from graphinator.helpers.token_prices import load_token_prices
from graphinator.helpers.web3_setup import get_web3_instance, load_account
from graphinator.liquidation.data_fetcher import DataFetcher
from graphinator.liquidation.network_client import Web3NetworkClient
from graphinator.liquidation.orchestrator import Graphinator
from graphinator.liquidation.submitter import LiquidationSubmitter
from graphinator.liquidation.tx_assembler import TransactionAssembler

logger = logging.getLogger("graphinator")


def create_graphinator(settings: Settings) -> Graphinator:
    """
    Build a Graphinator and all its collaborators from settings.

    Raises:
        ConfigurationError: On unknown network, missing contracts or invalid key
    """
    networks = load_networks_metadata(settings.networks_metadata_file)
    endpoints = resolve_endpoints(settings.network, networks)

    w3 = get_web3_instance(endpoints.rpc_url)
    account = load_account(settings.private_key)
    logger.info("Initialized wallet: %s", account.address)

    network = Web3NetworkClient(w3, account)
    check_chain_id(endpoints, network.get_chain_id())
    gda_forwarder = w3.eth.contract(address=w3.to_checksum_address(endpoints.gda_forwarder), abi=GDA_V1_FORWARDER_ABI)
    batch_liquidator = w3.eth.contract(address=w3.to_checksum_address(endpoints.batch_liquidator), abi=BATCH_LIQUIDATOR_ABI)
    logger.info("Initialized batch contract at %s", batch_liquidator.address)

    data_fetcher = DataFetcher(SubgraphClient(endpoints.subgraph_url), w3)
    assembler = TransactionAssembler(batch_liquidator, network, settings.gas_multiplier)
    submitter = LiquidationSubmitter(network, assembler, dry_run=settings.dry_run, receipt_timeout=settings.receipt_timeout)
    if settings.dry_run:
        logger.info("Dry run - transactions will not be signed nor broadcast")

    return Graphinator(
        flow_source=data_fetcher,
        token_source=data_fetcher,
        network=network,
        submitter=submitter,
        token_prices=load_token_prices(settings.token_prices_file, settings.network),
        policy=settings.policy,
        gda_forwarder=gda_forwarder,
        batch_size=settings.batch_size,
        deposit_consumed_pct_threshold=settings.deposit_consumed_pct_threshold,
        is_listed=settings.is_listed,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    load_environment(argv)

    try:
        settings = parse_settings(argv)
    except ConfigurationError as e:
        setup_logger("graphinator")
        logger.error("Configuration error: %s", e)
        return 1

    setup_logger("graphinator", verbose=settings.verbose, log_dir=settings.log_dir, network=settings.network)

    try:
        ghr = create_graphinator(settings)
        if settings.loop:
            ghr.run_loop(settings.token, settings.loop_interval)
        else:
            logger.info("run liquidations...")
            ghr.process_all(settings.token)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Stopped")
    return 0

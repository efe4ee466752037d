"""
Graphinator - drives a liquidation run.

If no token is given, all listed super tokens are processed. For each token,
the outgoing flows of critical accounts are fetched, filtered by what we're
willing to pay at the current gas price, and batch-liquidated highest ceiling
first. Batches and tokens are processed strictly one after another: all
transactions are signed by one key, and the nonce is fetched right before
each signature.
"""
from __future__ import annotations

import logging
import math
import time
from typing import Callable, Mapping

from web3 import Web3
from web3.contract import Contract

from graphinator.errors import ConfigurationError, MissingGasPriceError
from graphinator.liquidation.batch_selector import select_batches
from graphinator.liquidation.data_fetcher import FlowSource, TokenListingSource
from graphinator.liquidation.gas_policy import GasPricePolicyConfig, max_gas_price
from graphinator.liquidation.network_client import NetworkClient
from graphinator.liquidation.submitter import LiquidationSubmitter
from graphinator.liquidation.types import Flow, RunReport

logger = logging.getLogger(__name__)

__all__ = ["Graphinator", "BID_MARGIN"]

# leave some margin to avoid getting stuck if the gas price is ticking up
BID_MARGIN = 1.2


class Graphinator:
    """Processes tokens and liquidates their flows worth liquidating."""

    def __init__(
        self,
        flow_source: FlowSource,
        token_source: TokenListingSource,
        network: NetworkClient,
        submitter: LiquidationSubmitter,
        token_prices: Mapping[str, float],
        policy: GasPricePolicyConfig,
        gda_forwarder: Contract,
        batch_size: int = 1,
        deposit_consumed_pct_threshold: float = 20,
        is_listed: bool = True,
    ):
        if batch_size < 1:
            raise ConfigurationError(f"batch size must be at least 1, got {batch_size}")
        self.flow_source = flow_source
        self.token_source = token_source
        self.network = network
        self.submitter = submitter
        self.token_prices = token_prices
        self.policy = policy
        self.gda_forwarder = gda_forwarder
        self.batch_size = batch_size
        self.deposit_consumed_pct_threshold = deposit_consumed_pct_threshold
        self.is_listed = is_listed

        for line in policy.describe():
            logger.info(line)
        logger.info(
            "Will liquidate outflows of accounts with more than %s%% of the deposit consumed",
            deposit_consumed_pct_threshold,
        )

    def calculate_max_gas_price(self, flow: Flow) -> int:
        return max_gas_price(flow, self.token_prices, self.policy)

    def resolve_tokens(self, token: str | None = None) -> list[str]:
        """The given token, or all (listed) super tokens. Addresses are lower-cased."""
        if token:
            if not Web3.is_address(token):
                raise ConfigurationError(f"invalid token address: {token}")
            return [token.lower()]
        return [t["id"].lower() for t in self.token_source.get_super_tokens(self.is_listed)]

    def current_gas_price(self) -> int:
        gas_price = self.network.get_gas_price()
        if not gas_price:
            raise MissingGasPriceError("Current gas price not found")
        return int(gas_price)

    def process_all(self, token: str | None = None) -> RunReport:
        """
        Process all tokens or a specific token to find and liquidate flows.

        Args:
            token: Address of the token to process. If not provided, all
                (listed) tokens are processed.

        Returns:
            RunReport with per-batch outcomes
        """
        report = RunReport()
        token_addrs = self.resolve_tokens(token)
        report.tokens = len(token_addrs)
        logger.info("Processing %d tokens, isListed: %s", len(token_addrs), str(self.is_listed).lower())

        for token_addr in token_addrs:
            try:
                self.process_token(token_addr, report)
            except MissingGasPriceError as e:
                logger.error("Skipping token %s: %s", token_addr, e)
                report.tokens_without_gas_price.append(token_addr)

        logger.info("Run done - %s", report.summary())
        return report

    def process_token(self, token: str, report: RunReport) -> None:
        flows_to_liquidate = self.flow_source.get_flows_to_liquidate(
            token,
            self.gda_forwarder,
            self.deposit_consumed_pct_threshold,
            self.calculate_max_gas_price,
        )
        if not flows_to_liquidate:
            logger.info("No critical accounts for token: %s", token)
            return
        report.flows_found += len(flows_to_liquidate)
        logger.info("Found %d flows to liquidate", len(flows_to_liquidate))

        current_gas_price = self.current_gas_price()
        logger.info("Current network gas price: %s gwei", current_gas_price / 1e9)

        batches = select_batches(
            token, flows_to_liquidate, current_gas_price, self.batch_size, self.calculate_max_gas_price
        )
        selected = sum(len(b) for b in batches)
        report.flows_selected += selected
        logger.info("%d flows with max gas price in range, %d batches", selected, len(batches))

        bid_gas_price = math.floor(current_gas_price * BID_MARGIN)
        for batch in batches:
            report.outcomes.append(self.submitter.liquidate_batch(token, batch, bid_gas_price))

    def run_loop(
        self,
        token: str | None = None,
        interval: float = 30,
        max_runs: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Run ``process_all`` repeatedly. Errors of one run are logged, the next run still happens."""
        runs = 0
        while max_runs is None or runs < max_runs:
            try:
                self.process_all(token)
            except ConfigurationError:
                raise
            except Exception:
                logger.exception("Run failed")
            runs += 1
            if max_runs is not None and runs >= max_runs:
                break
            logger.info("run again in %ss", interval)
            sleep(interval)

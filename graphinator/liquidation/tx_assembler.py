"""
Builds the ``BatchLiquidator.deleteFlows`` transaction for one batch.
"""
from __future__ import annotations

import logging
import math

from web3 import Web3
from web3.contract import Contract

from graphinator.errors import ConfigurationError, InvariantViolation
from graphinator.liquidation.network_client import NetworkClient
from graphinator.liquidation.types import Batch, Flow, TransactionRequest

logger = logging.getLogger(__name__)

__all__ = ["TransactionAssembler"]


class TransactionAssembler:
    """Encodes batch liquidation calls and sizes their gas limit.

    Args:
        batch_liquidator: web3 contract bound to the BatchLiquidator address
        network: Network client used for gas estimation
        gas_multiplier: Margin applied on top of the gas estimate. Batches
            involving SuperApp receivers can consume a lot more than estimated.
    """

    def __init__(self, batch_liquidator: Contract, network: NetworkClient, gas_multiplier: float = 1.2):
        if gas_multiplier < 1.0:
            raise ConfigurationError(f"gas multiplier must be >= 1.0, got {gas_multiplier}")
        self.batch_liquidator = batch_liquidator
        self.network = network
        self.gas_multiplier = gas_multiplier

    def encode_delete_flows(self, token: str, flows: list[Flow]) -> str:
        """Return the calldata for ``deleteFlows(token, flows)``."""
        if not all(flow.token == token for flow in flows):
            raise InvariantViolation("flow with wrong token")
        struct_params = [
            (int(flow.agreement_type), Web3.to_checksum_address(flow.sender), Web3.to_checksum_address(flow.receiver))
            for flow in flows
        ]
        function = self.batch_liquidator.functions.deleteFlows(Web3.to_checksum_address(token), struct_params)
        return function._encode_transaction_data()

    def estimate_gas_limit(self, to: str, data: str) -> int:
        gas_estimate = self.network.estimate_gas({"to": to, "data": data})
        return math.floor(gas_estimate * self.gas_multiplier)

    def assemble(self, token: str, batch: Batch, gas_price: int) -> TransactionRequest:
        """
        Build the transaction request liquidating all flows of a batch.

        Args:
            token: Lower-cased token address
            batch: Flows to liquidate, all of ``token``
            gas_price: Bid price for the whole batch (wei)

        Returns:
            TransactionRequest without chain id and nonce

        Raises:
            InvariantViolation: If the batch contains a flow of another token
        """
        if batch.token != token:
            raise InvariantViolation(f"batch of token {batch.token} assembled for {token}")
        data = self.encode_delete_flows(token, batch.flows)
        to = self.batch_liquidator.address
        gas = self.estimate_gas_limit(to, data)
        logger.debug("Estimated gas limit %s for %d flows of %s", gas, len(batch), token)
        return TransactionRequest(to=to, data=data, gas=gas, gas_price=gas_price)

"""
Signs and broadcasts liquidation transactions, one batch at a time.

Each batch is an independent unit of failure: whatever goes wrong while
assembling, signing, broadcasting or confirming it is logged and reported as
a FAILED outcome, and never stops the batches that follow.
"""
from __future__ import annotations

import dataclasses
import json
import logging

from graphinator.config.logging_config import log_outcome
from graphinator.errors import SubmissionError
from graphinator.liquidation.network_client import NetworkClient
from graphinator.liquidation.tx_assembler import TransactionAssembler
from graphinator.liquidation.types import (
    Batch,
    OutcomeStatus,
    SubmissionOutcome,
    TransactionRequest,
)

logger = logging.getLogger(__name__)

__all__ = ["LiquidationSubmitter"]

DEFAULT_RECEIPT_TIMEOUT = 120  # seconds


class LiquidationSubmitter:
    def __init__(
        self,
        network: NetworkClient,
        assembler: TransactionAssembler,
        dry_run: bool = False,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
    ):
        self.network = network
        self.assembler = assembler
        self.dry_run = dry_run
        self.receipt_timeout = receipt_timeout

    def finalize(self, request: TransactionRequest) -> TransactionRequest:
        """Fill in chain id and the sender's current nonce."""
        return dataclasses.replace(
            request,
            chain_id=self.network.get_chain_id(),
            nonce=self.network.get_transaction_count(self.network.address),
        )

    def submit(self, request: TransactionRequest, token: str = "", flow_count: int = 0) -> SubmissionOutcome:
        """
        Sign, broadcast and wait for one transaction (or only log it in dry-run mode).

        Raises whatever the network client raises. ``liquidate_batch`` is the
        failure-isolating entry point.
        """
        tx = self.finalize(request)

        if self.dry_run:
            logger.info("Dry run - tx: %s", json.dumps(tx.as_dict()))
            return SubmissionOutcome(OutcomeStatus.DRY_RUN, token, flow_count, request=tx)

        signed_tx = self.network.sign_transaction(tx.as_dict())
        tx_hash = self.network.broadcast_transaction(signed_tx)
        logger.info("Broadcast tx %s (nonce %s, gas price %s)", tx_hash, tx.nonce, tx.gas_price)
        receipt = self.network.wait_for_receipt(tx_hash, self.receipt_timeout)
        if receipt["status"] != 1:
            raise SubmissionError(f"transaction {tx_hash} reverted", tx_hash=tx_hash)
        logger.info("Transaction successful: %s", tx_hash)
        return SubmissionOutcome(OutcomeStatus.BROADCAST, token, flow_count, tx_hash=tx_hash, request=tx)

    def liquidate_batch(self, token: str, batch: Batch, gas_price: int) -> SubmissionOutcome:
        """
        Liquidate all flows of a batch in one transaction.

        Never raises: failures are logged with the batch contents and returned
        as a FAILED outcome.
        """
        try:
            request = self.assembler.assemble(token, batch, gas_price)
            outcome = self.submit(request, token=token, flow_count=len(batch))
        except Exception as e:
            logger.error(
                "Error processing chunk of %d flows for token %s: %s | flows: %s",
                len(batch), token, e, json.dumps(batch.describe()),
                exc_info=True,
            )
            outcome = SubmissionOutcome(
                OutcomeStatus.FAILED,
                token,
                len(batch),
                tx_hash=getattr(e, "tx_hash", None),
                error=str(e),
            )
        log_outcome(logger, outcome)
        return outcome

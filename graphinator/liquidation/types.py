"""
Data types shared across the liquidation pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any


class AgreementType(IntEnum):
    """Matches ``BatchLiquidator.FlowType``."""
    CFA = 0
    GDA = 1


@dataclass(frozen=True)
class Flow:
    """Snapshot of one open flow. Addresses are lower-cased hex strings."""
    token: str
    sender: str
    receiver: str
    agreement_type: AgreementType
    flowrate: int
    consumed_deposit_percentage: float | None = None

    def as_log_dict(self) -> dict[str, Any]:
        return {
            "agreementType": self.agreement_type.name,
            "sender": self.sender,
            "receiver": self.receiver,
            "flowrate": str(self.flowrate),
            "consumedDepositPercentage": self.consumed_deposit_percentage,
        }


@dataclass(frozen=True)
class PricedFlow:
    """A flow together with the max gas price we'd bid for liquidating it."""
    flow: Flow
    max_gas_price: int


@dataclass(frozen=True)
class Batch:
    """Flows of one token to be liquidated in a single transaction, highest ceiling first."""
    token: str
    entries: tuple[PricedFlow, ...]

    @property
    def flows(self) -> list[Flow]:
        return [entry.flow for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def describe(self) -> list[dict[str, Any]]:
        return [
            {**entry.flow.as_log_dict(), "maxGasPrice": entry.max_gas_price}
            for entry in self.entries
        ]


@dataclass(frozen=True)
class TransactionRequest:
    """Fully specified, not yet signed transaction.

    ``chain_id`` and ``nonce`` stay unset until right before signing.
    """
    to: str
    data: str
    gas: int
    gas_price: int
    chain_id: int | None = None
    nonce: int | None = None
    value: int = 0

    def as_dict(self) -> dict[str, Any]:
        tx = {
            "to": self.to,
            "data": self.data,
            "gas": self.gas,
            "gasPrice": self.gas_price,
            "value": self.value,
        }
        if self.chain_id is not None:
            tx["chainId"] = self.chain_id
        if self.nonce is not None:
            tx["nonce"] = self.nonce
        return tx


class OutcomeStatus(Enum):
    BROADCAST = "broadcast"
    DRY_RUN = "dry_run"
    FAILED = "failed"


@dataclass
class SubmissionOutcome:
    """Result of processing one batch."""
    status: OutcomeStatus
    token: str
    flow_count: int
    tx_hash: str | None = None
    request: TransactionRequest | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.status is OutcomeStatus.FAILED


@dataclass
class RunReport:
    """Aggregated counters of one ``process_all`` run."""
    tokens: int = 0
    flows_found: int = 0
    flows_selected: int = 0
    tokens_without_gas_price: list[str] = field(default_factory=list)
    outcomes: list[SubmissionOutcome] = field(default_factory=list)

    def count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    @property
    def batches(self) -> int:
        return len(self.outcomes)

    def summary(self) -> str:
        return (
            f"tokens: {self.tokens}, flows found: {self.flows_found}, "
            f"flows selected: {self.flows_selected}, batches: {self.batches} "
            f"(broadcast: {self.count(OutcomeStatus.BROADCAST)}, "
            f"dry run: {self.count(OutcomeStatus.DRY_RUN)}, "
            f"failed: {self.count(OutcomeStatus.FAILED)}), "
            f"skipped for missing gas price: {len(self.tokens_without_gas_price)}"
        )

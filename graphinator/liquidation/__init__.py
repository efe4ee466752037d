"""
Liquidation pipeline: gas price policy, batch selection, transaction
assembly, submission and the run orchestrator.
"""

from graphinator.liquidation.batch_selector import select_batches
from graphinator.liquidation.gas_policy import GasPricePolicyConfig, max_gas_price
from graphinator.liquidation.orchestrator import Graphinator
from graphinator.liquidation.submitter import LiquidationSubmitter
from graphinator.liquidation.tx_assembler import TransactionAssembler
from graphinator.liquidation.types import (
    AgreementType,
    Batch,
    Flow,
    OutcomeStatus,
    PricedFlow,
    RunReport,
    SubmissionOutcome,
    TransactionRequest,
)

__all__ = [
    'AgreementType',
    'Batch',
    'Flow',
    'GasPricePolicyConfig',
    'Graphinator',
    'LiquidationSubmitter',
    'OutcomeStatus',
    'PricedFlow',
    'RunReport',
    'SubmissionOutcome',
    'TransactionAssembler',
    'TransactionRequest',
    'max_gas_price',
    'select_batches',
]

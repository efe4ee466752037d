from __future__ import annotations

from typing import Any

import pytest
from eth_account import Account
from web3 import Web3

from graphinator.config.abis import BATCH_LIQUIDATOR_ABI
from graphinator.liquidation.gas_policy import GasPricePolicyConfig
from graphinator.liquidation.types import AgreementType, Flow

TEST_PRIVATE_KEY = "0x" + "4c" * 32
TOKEN = "0x" + "aa" * 20
OTHER_TOKEN = "0x" + "bb" * 20
BATCH_LIQUIDATOR = "0x" + "ee" * 20
GWEI = 10**9
MWEI = 10**6


def make_flow(
    sender: str = "0x" + "01" * 20,
    receiver: str = "0x" + "fe" * 20,
    flowrate: int = 10**12,
    pct: float | None = 150,
    token: str = TOKEN,
    agreement_type: AgreementType = AgreementType.CFA,
) -> Flow:
    return Flow(
        token=token,
        sender=sender,
        receiver=receiver,
        agreement_type=agreement_type,
        flowrate=flowrate,
        consumed_deposit_percentage=pct,
    )


class FakeNetworkClient:
    """Records every call; signs with a real local account."""

    def __init__(self, gas_price: int | None = 1 * GWEI, estimate: int = 100_000):
        self.account = Account.from_key(TEST_PRIVATE_KEY)
        self.address = self.account.address
        self.gas_price = gas_price
        self.gas_prices: list[int | None] = []
        self.estimate = estimate
        self.estimate_results: list[Any] = []
        self.receipt_status = 1
        self.chain_id = 8453
        self.nonce = 7
        self.calls: list[tuple[str, Any]] = []

    def called(self, name: str) -> list[Any]:
        return [args for call, args in self.calls if call == name]

    def get_gas_price(self):
        self.calls.append(("get_gas_price", None))
        if self.gas_prices:
            return self.gas_prices.pop(0)
        return self.gas_price

    def estimate_gas(self, call):
        self.calls.append(("estimate_gas", call))
        if self.estimate_results:
            result = self.estimate_results.pop(0)
            if isinstance(result, Exception):
                raise result
            return result
        return self.estimate

    def get_transaction_count(self, address):
        self.calls.append(("get_transaction_count", address))
        return self.nonce

    def get_chain_id(self):
        self.calls.append(("get_chain_id", None))
        return self.chain_id

    def sign_transaction(self, tx):
        self.calls.append(("sign_transaction", tx))
        return self.account.sign_transaction(tx).raw_transaction

    def broadcast_transaction(self, raw_transaction):
        self.calls.append(("broadcast_transaction", raw_transaction))
        tx_hash = "0x" + f"{self.nonce:064x}"
        self.nonce += 1
        return tx_hash

    def wait_for_receipt(self, tx_hash, timeout):
        self.calls.append(("wait_for_receipt", tx_hash))
        return {"status": self.receipt_status, "transactionHash": tx_hash}


@pytest.fixture
def network():
    return FakeNetworkClient()


@pytest.fixture
def batch_liquidator():
    return Web3().eth.contract(address=Web3.to_checksum_address(BATCH_LIQUIDATOR), abi=BATCH_LIQUIDATOR_ABI)


@pytest.fixture
def policy():
    # reference 1000 mwei, fallback 10000 mwei, min 100 mwei
    return GasPricePolicyConfig.from_mwei(1000, 10000, 100)

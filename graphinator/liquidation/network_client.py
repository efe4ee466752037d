"""
Chain RPC boundary: fee data, nonces, gas estimation, signing and broadcast.

``Web3NetworkClient`` wraps a web3.py instance and the local signing account.
The pipeline only depends on the ``NetworkClient`` protocol, so tests can
pass in a fake.
"""
from __future__ import annotations

import logging
from typing import Any, Protocol

from eth_account.signers.local import LocalAccount
from web3 import Web3

logger = logging.getLogger(__name__)

__all__ = ["NetworkClient", "Web3NetworkClient"]


class NetworkClient(Protocol):
    address: str

    def get_gas_price(self) -> int | None: ...

    def estimate_gas(self, call: dict[str, Any]) -> int: ...

    def get_transaction_count(self, address: str) -> int: ...

    def get_chain_id(self) -> int: ...

    def sign_transaction(self, tx: dict[str, Any]) -> bytes: ...

    def broadcast_transaction(self, raw_transaction: bytes) -> str: ...

    def wait_for_receipt(self, tx_hash: str, timeout: float) -> Any: ...


class Web3NetworkClient:
    """NetworkClient backed by web3.py and an eth-account LocalAccount."""

    def __init__(self, w3: Web3, account: LocalAccount):
        self.w3 = w3
        self.account = account

    @property
    def address(self) -> str:
        return self.account.address

    def get_gas_price(self) -> int | None:
        return self.w3.eth.gas_price

    def estimate_gas(self, call: dict[str, Any]) -> int:
        return self.w3.eth.estimate_gas({"from": self.account.address, **call})

    def get_transaction_count(self, address: str) -> int:
        # pending: don't reuse the nonce of a tx whose receipt wait timed out
        return self.w3.eth.get_transaction_count(Web3.to_checksum_address(address), "pending")

    def get_chain_id(self) -> int:
        return self.w3.eth.chain_id

    def sign_transaction(self, tx: dict[str, Any]) -> bytes:
        signed_tx = self.account.sign_transaction(tx)
        return signed_tx.raw_transaction

    def broadcast_transaction(self, raw_transaction: bytes) -> str:
        return Web3.to_hex(self.w3.eth.send_raw_transaction(raw_transaction))

    def wait_for_receipt(self, tx_hash: str, timeout: float) -> Any:
        return self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)

"""
Web3 setup helper - web3 instance and signing account.

Public API
----------
get_web3_instance(rpc_url, timeout)
    Return a Web3 instance connected to the given RPC URL.
load_account(private_key)
    Return the LocalAccount for a hex private key.
"""
from __future__ import annotations

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

from graphinator.config.network import RPC_TIMEOUT
from graphinator.errors import ConfigurationError

__all__ = ["get_web3_instance", "load_account"]


def get_web3_instance(rpc_url: str, timeout: int = RPC_TIMEOUT) -> Web3:
    """
    Get a Web3 instance connected to the specified RPC URL.

    POA middleware is injected so that chains with long extraData
    (Polygon, Gnosis, BNB) decode blocks.

    Args:
        rpc_url: JSON-RPC endpoint
        timeout: connect/response timeout of the HTTP provider in seconds
    """
    w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
    w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
    return w3


def _normalize_privkey_hex(pk: str) -> str:
    pk = pk.strip()
    if pk.startswith("0x"):
        pk = pk[2:]
    if len(pk) != 64:
        raise ValueError("private key hex must be 64 characters (32 bytes)")
    int(pk, 16)  # validate hex
    return "0x" + pk


def load_account(private_key: str | None) -> LocalAccount:
    """
    Raises:
        ConfigurationError: If no key is provided or it isn't a valid key
    """
    if not private_key:
        raise ConfigurationError("No private key provided")
    try:
        return Account.from_key(_normalize_privkey_hex(private_key))
    except ValueError as e:
        raise ConfigurationError(f"Invalid private key: {e}") from e

"""
Flow source and token listing backed by the protocol subgraph and on-chain reads.

The subgraph narrows down candidate accounts (negative net flowrate and a
critical-at estimate in the past). Solvency is then checked on-chain with
``realtimeBalanceOfNow``, and all outgoing flows of accounts with enough
deposit consumed are returned.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Protocol

from web3 import Web3
from web3.contract import Contract

from graphinator.config.abis import SUPER_TOKEN_ABI
from graphinator.helpers.subgraph import SubgraphClient
from graphinator.liquidation.types import AgreementType, Flow

logger = logging.getLogger(__name__)

__all__ = ["DataFetcher", "FlowSource", "TokenListingSource"]


class FlowSource(Protocol):
    def get_flows_to_liquidate(
        self,
        token: str,
        gda_forwarder: Contract,
        deposit_consumed_pct_threshold: float,
        gas_price_fn: Callable[[Flow], int],
    ) -> list[Flow]: ...


class TokenListingSource(Protocol):
    def get_super_tokens(self, is_listed: bool) -> list[dict[str, Any]]: ...


# --------------------------------------------------------------------------- #
# queries                                                                     #
# --------------------------------------------------------------------------- #

LISTED_TOKENS_QUERY = """
query ($first: Int!, $lastId: ID!) {
  tokens(first: $first, orderBy: id, where: {isSuperToken: true, isListed: true, id_gt: $lastId}) {
    id
    symbol
  }
}
"""

ALL_TOKENS_QUERY = """
query ($first: Int!, $lastId: ID!) {
  tokens(first: $first, orderBy: id, where: {isSuperToken: true, id_gt: $lastId}) {
    id
    symbol
  }
}
"""

CRITICAL_ACCOUNTS_QUERY = """
query ($token: String!, $now: BigInt!, $first: Int!, $lastId: ID!) {
  accountTokenSnapshots(
    first: $first
    orderBy: id
    where: {token: $token, totalNetFlowRate_lt: "0", maybeCriticalAtTimestamp_lt: $now, id_gt: $lastId}
  ) {
    id
    totalNetFlowRate
    account { id }
    token { id }
  }
}
"""

OUTGOING_STREAMS_QUERY = """
query ($sender: String!, $token: String!, $first: Int!, $lastId: ID!) {
  streams(
    first: $first
    orderBy: id
    where: {sender: $sender, token: $token, currentFlowRate_gt: "0", id_gt: $lastId}
  ) {
    id
    currentFlowRate
    receiver { id }
  }
}
"""

POOL_DISTRIBUTORS_QUERY = """
query ($account: String!, $token: String!, $first: Int!, $lastId: ID!) {
  poolDistributors(
    first: $first
    orderBy: id
    where: {account: $account, flowRate_gt: "0", pool_: {token: $token}, id_gt: $lastId}
  ) {
    id
    flowRate
    pool { id }
  }
}
"""


class DataFetcher:
    """Implements both FlowSource and TokenListingSource."""

    def __init__(self, subgraph: SubgraphClient, w3: Web3, clock: Callable[[], float] = time.time):
        self.subgraph = subgraph
        self.w3 = w3
        self.clock = clock

    def super_token(self, token: str) -> Contract:
        return self.w3.eth.contract(address=Web3.to_checksum_address(token), abi=SUPER_TOKEN_ABI)

    def get_super_tokens(self, is_listed: bool) -> list[dict[str, Any]]:
        query = LISTED_TOKENS_QUERY if is_listed else ALL_TOKENS_QUERY
        return self.subgraph.query_all("tokens", query)

    def get_critical_accounts(self, token: str) -> list[dict[str, Any]]:
        return self.subgraph.query_all(
            "accountTokenSnapshots",
            CRITICAL_ACCOUNTS_QUERY,
            {"token": token, "now": str(int(self.clock()))},
        )

    def get_flows_to_liquidate(
        self,
        token: str,
        gda_forwarder: Contract,
        deposit_consumed_pct_threshold: float,
        gas_price_fn: Callable[[Flow], int],
    ) -> list[Flow]:
        """
        Get the outgoing flows of all accounts of ``token`` which consumed more
        than ``deposit_consumed_pct_threshold`` percent of their deposit.

        Args:
            token: Lower-cased super token address
            gda_forwarder: GDAv1Forwarder contract, used to confirm pool distributions
            deposit_consumed_pct_threshold: Min consumed deposit percentage
            gas_price_fn: Max gas price per flow, only logged here

        Returns:
            Flows to liquidate
        """
        flows: list[Flow] = []
        critical_accounts = self.get_critical_accounts(token)
        logger.info("Found %d possibly critical accounts for token %s", len(critical_accounts), token)
        if not critical_accounts:
            return flows

        token_contract = self.super_token(token)
        for snapshot in critical_accounts:
            account = snapshot["account"]["id"].lower()
            available_balance, deposit, _owed_deposit, _ts = (
                token_contract.functions.realtimeBalanceOfNow(Web3.to_checksum_address(account)).call()
            )
            if available_balance >= 0:
                logger.debug("Account %s is solvent again, skipping", account)
                continue
            if deposit == 0:
                logger.warning("Account %s is insolvent without deposit, skipping", account)
                continue

            consumed_pct = (-available_balance * 100) // deposit
            if consumed_pct <= deposit_consumed_pct_threshold:
                logger.debug("Account %s consumed %s%% of deposit, below threshold", account, consumed_pct)
                continue

            logger.info(
                "Account %s net flowrate %s consumed %s%% of deposit",
                account, snapshot.get("totalNetFlowRate"), consumed_pct,
            )
            account_flows = (
                self._get_cfa_flows(token, account, consumed_pct)
                + self._get_gda_flows(token, account, consumed_pct, gda_forwarder)
            )
            for flow in account_flows:
                logger.debug(
                    "  %s flow %s -> %s flowrate %s max gas price %s",
                    flow.agreement_type.name, flow.sender, flow.receiver, flow.flowrate, gas_price_fn(flow),
                )
            flows.extend(account_flows)

        return flows

    def _get_cfa_flows(self, token: str, account: str, consumed_pct: float) -> list[Flow]:
        streams = self.subgraph.query_all(
            "streams", OUTGOING_STREAMS_QUERY, {"sender": account, "token": token}
        )
        return [
            Flow(
                token=token,
                sender=account,
                receiver=stream["receiver"]["id"].lower(),
                agreement_type=AgreementType.CFA,
                flowrate=int(stream["currentFlowRate"]),
                consumed_deposit_percentage=consumed_pct,
            )
            for stream in streams
        ]

    def _get_gda_flows(self, token: str, account: str, consumed_pct: float, gda_forwarder: Contract) -> list[Flow]:
        distributors = self.subgraph.query_all(
            "poolDistributors", POOL_DISTRIBUTORS_QUERY, {"account": account, "token": token}
        )
        flows = []
        for distributor in distributors:
            pool = distributor["pool"]["id"].lower()
            flowrate = gda_forwarder.functions.getFlowDistributionFlowRate(
                Web3.to_checksum_address(token),
                Web3.to_checksum_address(account),
                Web3.to_checksum_address(pool),
            ).call()
            if flowrate <= 0:
                logger.debug("Distribution %s -> pool %s already closed on-chain", account, pool)
                continue
            flows.append(Flow(
                token=token,
                sender=account,
                receiver=pool,
                agreement_type=AgreementType.GDA,
                flowrate=int(flowrate),
                consumed_deposit_percentage=consumed_pct,
            ))
        return flows

"""
Batch selection: which flows are worth liquidating at the current gas price,
and in which order.
"""
from __future__ import annotations

from typing import Callable, Iterable, Sequence, TypeVar

from graphinator.errors import InvariantViolation
from graphinator.liquidation.types import Batch, Flow, PricedFlow

__all__ = ["select_batches", "chunk"]

T = TypeVar("T")


def chunk(items: Sequence[T], size: int) -> list[list[T]]:
    """Split a sequence into consecutive chunks of at most ``size`` items."""
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def select_batches(
    token: str,
    flows: Iterable[Flow],
    current_gas_price: int,
    batch_size: int,
    max_gas_price_fn: Callable[[Flow], int],
) -> list[Batch]:
    """
    Filter, sort and batch flows of one token.

    Flows whose max gas price is below ``current_gas_price`` are skipped for
    this run. The rest are sorted by max gas price descending (stable) and
    split into batches of at most ``batch_size`` flows.

    Args:
        token: Lower-cased token address all flows must belong to
        flows: Flows to liquidate
        current_gas_price: Gas price currently observed on the network (wei)
        batch_size: Max flows per transaction
        max_gas_price_fn: Per-flow gas price ceiling

    Returns:
        Ordered list of batches

    Raises:
        InvariantViolation: If a flow of another token is passed or batch_size < 1
    """
    if batch_size < 1:
        raise InvariantViolation(f"batch size must be at least 1, got {batch_size}")

    priced = []
    for flow in flows:
        if flow.token != token:
            raise InvariantViolation(f"flow with wrong token: {flow.token} (expected {token})")
        priced.append(PricedFlow(flow, max_gas_price_fn(flow)))

    worth_liquidating = [p for p in priced if p.max_gas_price >= current_gas_price]
    worth_liquidating.sort(key=lambda p: p.max_gas_price, reverse=True)

    return [Batch(token=token, entries=tuple(c)) for c in chunk(worth_liquidating, batch_size)]

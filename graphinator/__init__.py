"""
Graphinator - liquidates insolvent Superfluid flows.

Finds critical accounts through the protocol subgraph, decides per flow whether
liquidation is worth the current gas price, and submits batched
``BatchLiquidator.deleteFlows`` transactions.
"""

__version__ = "0.4.0"

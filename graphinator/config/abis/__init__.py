"""
Contract ABI package for the liquidation bot.
"""

from .superfluid import (
    BATCH_LIQUIDATOR_ABI,
    GDA_V1_FORWARDER_ABI,
    SUPER_TOKEN_ABI,
)

__all__ = [
    'BATCH_LIQUIDATOR_ABI',
    'GDA_V1_FORWARDER_ABI',
    'SUPER_TOKEN_ABI',
]

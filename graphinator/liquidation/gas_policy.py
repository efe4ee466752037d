"""
Gas price policy: how much are we willing to bid for liquidating a flow?

The ceiling scales with the flow's USD-denominated daily value. A flow worth
1 USD/day gets ``reference_gas_price_limit``. Flows of tokens without a known
price get ``fallback_gas_price_limit``. ``min_gas_price_limit`` keeps dust
flows from existing in perpetuity.

The ceiling grows with time since insolvency: +100% per day, capped at 10
days (11x). Time since insolvency is derived from the consumed deposit
percentage: 100% = just insolvent, 200% = 4 hours insolvent (the liquidation
period is 4 hours per deposit).
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Mapping

from graphinator.errors import ConfigurationError
from graphinator.liquidation.types import Flow

__all__ = [
    "GasPricePolicyConfig",
    "max_gas_price",
    "time_decay_multiplier",
    "MWEI",
    "SECONDS_PER_DAY",
    "REFERENCE_DAILY_NORMALIZED_FLOWRATE",
]

MWEI: int = 10**6
SECONDS_PER_DAY: int = 86400
# 1 USD/day, in the same 18-decimals fixed-point scale as flowrates
REFERENCE_DAILY_NORMALIZED_FLOWRATE: int = 10**18

LIQUIDATION_PERIOD_HOURS: int = 4
MAX_DAYS_INSOLVENT: int = 10

DEFAULT_FALLBACK_FACTOR = Decimal(10)
DEFAULT_MIN_FACTOR = Decimal("0.1")


@dataclass(frozen=True)
class GasPricePolicyConfig:
    """Gas price limits in wei."""
    reference_gas_price_limit: int
    fallback_gas_price_limit: int
    min_gas_price_limit: int

    def __post_init__(self):
        if (self.min_gas_price_limit > self.fallback_gas_price_limit
                or self.min_gas_price_limit > self.reference_gas_price_limit):
            raise ConfigurationError(
                "minGasPriceLimit must be less than fallbackGasPriceLimit and less than referenceGasPriceLimit"
            )

    @classmethod
    def from_mwei(
        cls,
        reference: float,
        fallback: float | None = None,
        minimum: float | None = None,
    ) -> "GasPricePolicyConfig":
        """Build from limits given in mwei (milli wei).

        If not set, the fallback defaults to 10x the reference limit and the
        minimum to 0.1x the reference limit.
        """
        reference_wei = _to_int(Decimal(str(reference)) * MWEI)
        fallback_wei = (
            _to_int(Decimal(str(fallback)) * MWEI) if fallback is not None
            else _to_int(reference_wei * DEFAULT_FALLBACK_FACTOR)
        )
        min_wei = (
            _to_int(Decimal(str(minimum)) * MWEI) if minimum is not None
            else _to_int(reference_wei * DEFAULT_MIN_FACTOR)
        )
        return cls(reference_wei, fallback_wei, min_wei)

    def describe(self) -> list[str]:
        return [
            f"{label}: {value} ({value / 1e9} gwei)"
            for label, value in (
                ("referenceGasPriceLimit", self.reference_gas_price_limit),
                ("fallbackGasPriceLimit", self.fallback_gas_price_limit),
                ("minGasPriceLimit", self.min_gas_price_limit),
            )
        ]


def _to_int(value: Decimal) -> int:
    """Round half up to an integer (same semantics as JS Math.round for positives)."""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def time_decay_multiplier(consumed_deposit_percentage: float | None) -> Decimal:
    """Multiplier applied to the base ceiling, from 1 (not insolvent) up to 11."""
    if consumed_deposit_percentage is None or consumed_deposit_percentage <= 100:
        return Decimal(1)
    pct = Decimal(str(consumed_deposit_percentage))
    hours_since_insolvent = (pct - 100) * LIQUIDATION_PERIOD_HOURS / 100
    days_since_insolvent = hours_since_insolvent / 24
    return 1 + min(days_since_insolvent, Decimal(MAX_DAYS_INSOLVENT))


def max_gas_price(
    flow: Flow,
    token_prices: Mapping[str, float],
    config: GasPricePolicyConfig,
) -> int:
    """
    Calculate the max gas price (wei) we're willing to bid for liquidating this flow.

    Args:
        flow: Flow snapshot
        token_prices: USD price per lower-cased token address. Missing = unknown.
        config: Gas price limits

    Returns:
        Gas price ceiling in wei
    """
    token_price = token_prices.get(flow.token.lower())

    with localcontext() as ctx:
        ctx.prec = 80
        if token_price is not None:
            daily_nfr = _to_int(Decimal(flow.flowrate) * SECONDS_PER_DAY * Decimal(str(token_price)))
            scaled = _to_int(
                Decimal(daily_nfr) * config.reference_gas_price_limit / REFERENCE_DAILY_NORMALIZED_FLOWRATE
            )
            base_max_gas_price = max(config.min_gas_price_limit, scaled)
        else:
            base_max_gas_price = config.fallback_gas_price_limit

        return _to_int(base_max_gas_price * time_decay_multiplier(flow.consumed_deposit_percentage))

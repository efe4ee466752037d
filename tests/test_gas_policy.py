from decimal import Decimal

import pytest

from conftest import GWEI, MWEI, TOKEN, make_flow
from graphinator.errors import ConfigurationError
from graphinator.liquidation.gas_policy import (
    GasPricePolicyConfig,
    max_gas_price,
    time_decay_multiplier,
)

# 23148148148148 wei/s * 86400 s ~= 2e18 per day, i.e. 2 USD/day at a price of 1
TWO_USD_PER_DAY = 23148148148148
HALF_USD_PER_DAY = 5787037037037


@pytest.mark.parametrize("pct", [None, 0, 20, 99.9, 100])
def test_multiplier_is_one_until_insolvent(pct):
    assert time_decay_multiplier(pct) == 1


def test_multiplier_after_four_hours_insolvent():
    assert float(time_decay_multiplier(200)) == pytest.approx(1 + 4 / 24)


@pytest.mark.parametrize("pct", [6100, 6101, 20000, 10**6])
def test_multiplier_capped_after_ten_days(pct):
    assert time_decay_multiplier(pct) == Decimal(11)


def test_known_price_scales_with_daily_value(policy):
    flow = make_flow(flowrate=TWO_USD_PER_DAY, pct=None)
    assert max_gas_price(flow, {TOKEN: 1.0}, policy) == 2 * GWEI

    flow = make_flow(flowrate=HALF_USD_PER_DAY, pct=None)
    assert max_gas_price(flow, {TOKEN: 1.0}, policy) == GWEI // 2


def test_dust_flow_gets_min_limit(policy):
    flow = make_flow(flowrate=1, pct=None)
    assert max_gas_price(flow, {TOKEN: 1.0}, policy) == 100 * MWEI


def test_price_lookup_lowercases_token(policy):
    flow = make_flow(flowrate=TWO_USD_PER_DAY, pct=None, token="0x" + "AA" * 20)
    assert max_gas_price(flow, {TOKEN: 1.0}, policy) == 2 * GWEI


@pytest.mark.parametrize("flowrate", [1, 10**9, 10**15, 10**24])
def test_unknown_price_resolves_to_fallback_times_multiplier(policy, flowrate):
    assert max_gas_price(make_flow(flowrate=flowrate, pct=100), {}, policy) == 10_000 * MWEI
    assert max_gas_price(make_flow(flowrate=flowrate, pct=200), {}, policy) == 11_666_666_667
    assert max_gas_price(make_flow(flowrate=flowrate, pct=6100), {}, policy) == 110_000 * MWEI


def test_monotonic_in_consumed_deposit(policy):
    pcts = [None, 0, 50, 100, 101, 150, 200, 1000, 3000, 6100, 10_000]
    prices = [max_gas_price(make_flow(flowrate=TWO_USD_PER_DAY, pct=p), {TOKEN: 1.0}, policy) for p in pcts]
    assert prices == sorted(prices)


def test_monotonic_in_token_price(policy):
    token_prices = [0.0, 0.001, 0.1, 1.0, 10.0, 1000.0]
    prices = [max_gas_price(make_flow(flowrate=TWO_USD_PER_DAY), {TOKEN: p}, policy) for p in token_prices]
    assert prices == sorted(prices)


def test_deterministic(policy):
    flow = make_flow(flowrate=TWO_USD_PER_DAY, pct=345.5)
    assert max_gas_price(flow, {TOKEN: 3.3}, policy) == max_gas_price(flow, {TOKEN: 3.3}, policy)


def test_config_defaults_derived_from_reference():
    config = GasPricePolicyConfig.from_mwei(1000)
    assert config.reference_gas_price_limit == 1000 * MWEI
    assert config.fallback_gas_price_limit == 10_000 * MWEI
    assert config.min_gas_price_limit == 100 * MWEI


def test_config_rejects_min_above_other_limits():
    with pytest.raises(ConfigurationError):
        GasPricePolicyConfig.from_mwei(1000, 10_000, 2000)
    with pytest.raises(ConfigurationError):
        GasPricePolicyConfig.from_mwei(1000, 500, 800)
    with pytest.raises(ConfigurationError):
        GasPricePolicyConfig(reference_gas_price_limit=10, fallback_gas_price_limit=100, min_gas_price_limit=11)

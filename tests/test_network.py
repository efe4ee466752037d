import json

import pytest

from graphinator.config.network import (
    RPC_URL_TEMPLATE,
    check_chain_id,
    get_network_metadata,
    load_networks_metadata,
    resolve_endpoints,
)
from graphinator.errors import ConfigurationError

NETWORKS = [
    {
        "name": "base-mainnet",
        "chainId": 8453,
        "contractsV1": {"gdaV1Forwarder": "0x" + "6d" * 20, "batchLiquidator": "0x" + "b1" * 20},
    },
    {"name": "no-batch-mainnet", "chainId": 1, "contractsV1": {"gdaV1Forwarder": "0x" + "6d" * 20}},
    {"name": "no-gda-mainnet", "chainId": 2, "contractsV1": {"batchLiquidator": "0x" + "b1" * 20}},
]


@pytest.fixture(autouse=True)
def no_url_overrides(monkeypatch):
    monkeypatch.delenv("RPC_URL", raising=False)
    monkeypatch.delenv("SUBGRAPH_URL", raising=False)


def test_resolve_endpoints():
    endpoints = resolve_endpoints("base-mainnet", NETWORKS)

    assert endpoints.chain_id == 8453
    assert endpoints.rpc_url == RPC_URL_TEMPLATE.format(network="base-mainnet")
    assert endpoints.subgraph_url.endswith("/base-mainnet/protocol-v1")
    assert endpoints.batch_liquidator == "0x" + "b1" * 20
    assert endpoints.gda_forwarder == "0x" + "6d" * 20


def test_url_overrides(monkeypatch):
    monkeypatch.setenv("RPC_URL", "http://localhost:8545")
    monkeypatch.setenv("SUBGRAPH_URL", "http://localhost:8000")

    endpoints = resolve_endpoints("base-mainnet", NETWORKS)

    assert endpoints.rpc_url == "http://localhost:8545"
    assert endpoints.subgraph_url == "http://localhost:8000"


@pytest.mark.parametrize("name", ["unknown-mainnet", "no-batch-mainnet", "no-gda-mainnet"])
def test_unresolvable_network(name):
    with pytest.raises(ConfigurationError):
        resolve_endpoints(name, NETWORKS)


def test_get_network_metadata():
    assert get_network_metadata("base-mainnet", NETWORKS)["chainId"] == 8453


def test_load_local_metadata(tmp_path):
    path = tmp_path / "networks.json"
    path.write_text(json.dumps(NETWORKS))
    assert load_networks_metadata(path) == NETWORKS


def test_load_broken_metadata(tmp_path):
    path = tmp_path / "networks.json"
    path.write_text("{not json")
    with pytest.raises(ConfigurationError):
        load_networks_metadata(path)
    with pytest.raises(ConfigurationError):
        load_networks_metadata(tmp_path / "missing.json")


def test_check_chain_id():
    endpoints = resolve_endpoints("base-mainnet", NETWORKS)
    check_chain_id(endpoints, 8453)
    with pytest.raises(ConfigurationError, match="chain 10"):
        check_chain_id(endpoints, 10)

import json
from types import SimpleNamespace

from conftest import TEST_PRIVATE_KEY
from graphinator import runner

ENV_KEYS = ("NETWORK", "TOKEN", "PRIVATE_KEY", "LOOP", "BATCH_SIZE", "RPC_URL", "SUBGRAPH_URL")


def _clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_missing_private_key_exits_with_error(monkeypatch, tmp_path):
    _clean_env(monkeypatch, tmp_path)
    assert runner.main(["--network", "base-mainnet"]) == 1


def test_unknown_network_exits_with_error(monkeypatch, tmp_path):
    _clean_env(monkeypatch, tmp_path)
    monkeypatch.setenv("PRIVATE_KEY", TEST_PRIVATE_KEY)
    metadata = tmp_path / "networks.json"
    metadata.write_text(json.dumps([{"name": "base-mainnet", "chainId": 8453, "contractsV1": {}}]))

    assert runner.main(["--network", "celo-mainnet", "--networks-metadata", str(metadata)]) == 1


def test_runs_once(monkeypatch, tmp_path):
    _clean_env(monkeypatch, tmp_path)
    monkeypatch.setenv("PRIVATE_KEY", TEST_PRIVATE_KEY)
    calls = []

    class FakeGraphinator:
        def process_all(self, token=None):
            calls.append(("process_all", token))

        def run_loop(self, token=None, interval=30):
            calls.append(("run_loop", token, interval))

    monkeypatch.setattr(runner, "create_graphinator", lambda settings: FakeGraphinator())

    assert runner.main(["--network", "base-mainnet", "--token", "0x" + "aa" * 20]) == 0
    assert runner.main(["--network", "base-mainnet", "--loop", "--loopInterval", "5"]) == 0
    assert calls == [("process_all", "0x" + "aa" * 20), ("run_loop", None, 5.0)]


def test_rpc_on_wrong_chain_exits_with_error(monkeypatch, tmp_path):
    _clean_env(monkeypatch, tmp_path)
    monkeypatch.setenv("PRIVATE_KEY", TEST_PRIVATE_KEY)
    metadata = tmp_path / "networks.json"
    metadata.write_text(json.dumps([{
        "name": "base-mainnet",
        "chainId": 8453,
        "contractsV1": {"gdaV1Forwarder": "0x" + "6d" * 20, "batchLiquidator": "0x" + "b1" * 20},
    }]))
    monkeypatch.setattr(runner, "get_web3_instance", lambda rpc_url: SimpleNamespace(eth=SimpleNamespace(chain_id=10)))

    assert runner.main(["--network", "base-mainnet", "--networks-metadata", str(metadata)]) == 1

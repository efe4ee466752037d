from graphinator.setup import update_token_prices
from graphinator.setup.update_token_prices import ZERO_ADDRESS, categorize_tokens, fetch_network_prices

WRAPPER = "0x" + "4e" * 20
PURE = {"id": "0x" + "01" * 20, "underlyingAddress": ZERO_ADDRESS, "symbol": "PURE"}
USDCX = {"id": "0x" + "02" * 20, "underlyingAddress": "0x" + "0C" * 20, "symbol": "USDCx"}
ETHX = {"id": WRAPPER.upper().replace("0X", "0x"), "underlyingAddress": "0x" + "e0" * 20, "symbol": "ETHx"}


def test_categorize_tokens():
    pure, wrappers = categorize_tokens([PURE, USDCX, ETHX], WRAPPER)
    assert pure == [PURE]
    assert wrappers == [USDCX]


class FakeCoinGecko:
    def __init__(self):
        self.requests = []

    def token_prices(self, platform, addresses):
        self.requests.append((platform, addresses))
        return {a.lower(): 1.0 for a in addresses}

    def native_coin_id(self, symbol):
        return "ethereum"

    def native_coin_price(self, coin_id):
        return 2500.0


class FakeSubgraph:
    def __init__(self, url):
        self.url = url

    def query(self, query, variables=None):
        return {"tokens": [PURE, USDCX, ETHX]}


def test_fetch_network_prices(monkeypatch):
    monkeypatch.setattr(update_token_prices, "SubgraphClient", FakeSubgraph)
    coingecko = FakeCoinGecko()
    network = {"name": "base-mainnet", "coinGeckoId": "base", "nativeTokenWrapper": WRAPPER, "nativeTokenSymbol": "ETH"}

    prices = fetch_network_prices(network, coingecko)

    assert prices == {WRAPPER: 2500.0, PURE["id"]: 1.0, USDCX["id"]: 1.0}
    # wrappers are priced by their underlying token
    assert coingecko.requests == [("base", [PURE["id"]]), ("base", [USDCX["underlyingAddress"]])]


def test_main_requires_api_key(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("COINGECKO_API_KEY", raising=False)
    assert update_token_prices.main(["--output", str(tmp_path / "out.json")]) == 1
    assert not (tmp_path / "out.json").exists()

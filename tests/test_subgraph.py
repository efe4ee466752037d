import pytest
import requests

from graphinator.errors import SubgraphError
from graphinator.helpers.subgraph import PAGE_SIZE, SubgraphClient


class FakeResponse:
    def __init__(self, body, status=200):
        self.body = body
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        if isinstance(self.body, Exception):
            raise self.body
        return self.body


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.posts = []

    def post(self, url, json=None, timeout=None):
        self.posts.append(json)
        return self.responses.pop(0)


def _page(start, n):
    return FakeResponse({"data": {"streams": [{"id": f"{i:06d}"} for i in range(start, start + n)]}})


def test_query_all_follows_id_cursor():
    session = FakeSession([_page(0, PAGE_SIZE), _page(PAGE_SIZE, 3)])
    client = SubgraphClient("http://subgraph", session=session)

    items = client.query_all("streams", "query", {"token": "0xabc"})

    assert len(items) == PAGE_SIZE + 3
    assert [p["variables"]["lastId"] for p in session.posts] == ["", f"{PAGE_SIZE - 1:06d}"]
    assert all(p["variables"]["token"] == "0xabc" and p["variables"]["first"] == PAGE_SIZE for p in session.posts)


def test_graphql_errors_raise():
    client = SubgraphClient("http://subgraph", session=FakeSession([FakeResponse({"errors": [{"message": "bad"}]})]))
    with pytest.raises(SubgraphError, match="bad"):
        client.query("query")


def test_http_failure_raises():
    client = SubgraphClient("http://subgraph", session=FakeSession([FakeResponse({}, status=502)]))
    with pytest.raises(SubgraphError):
        client.query("query")


def test_invalid_json_raises():
    client = SubgraphClient("http://subgraph", session=FakeSession([FakeResponse(ValueError("no json"))]))
    with pytest.raises(SubgraphError):
        client.query("query")

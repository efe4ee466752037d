"""
Minimal GraphQL client for the Superfluid protocol subgraph.
"""
from __future__ import annotations

import logging
from typing import Any

import requests

from graphinator.errors import SubgraphError

logger = logging.getLogger(__name__)

__all__ = ["SubgraphClient", "PAGE_SIZE"]

PAGE_SIZE = 1000


class SubgraphClient:
    def __init__(self, url: str, timeout: int = 30, session: requests.Session | None = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def query(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run a GraphQL query and return its ``data`` object.

        Raises:
            SubgraphError: On HTTP failures or GraphQL errors
        """
        payload = {"query": query, "variables": variables or {}}
        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            raise SubgraphError(f"subgraph request to {self.url} failed: {e}") from e

        if body.get("errors"):
            raise SubgraphError(f"subgraph returned errors: {body['errors']}")
        return body.get("data") or {}

    def query_all(self, entity: str, query: str, variables: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Page through a collection using an ``id_gt`` cursor.

        The query must accept ``$first`` and ``$lastId`` variables and order
        ``entity`` by ``id``.
        """
        items: list[dict[str, Any]] = []
        last_id = ""
        while True:
            page = self.query(query, {**(variables or {}), "first": PAGE_SIZE, "lastId": last_id}).get(entity, [])
            items.extend(page)
            if len(page) < PAGE_SIZE:
                break
            last_id = page[-1]["id"]
            logger.debug("Fetched %d %s so far", len(items), entity)
        return items

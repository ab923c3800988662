"""
Pytest configuration and shared fixtures.

HTTP traffic is served by ``httpx.MockTransport`` handlers, so no Solr
instance or network access is needed.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterator

import httpx
import pytest

from heliotrope.client import SolrClient
from heliotrope.config import SolrConfig

BASE_URL = "http://solr:8983/solr/test"

UPDATE_OK = {"responseHeader": {"status": 0, "QTime": 4}}

QUERY_OK = {
    "responseHeader": {"status": 0, "QTime": 1},
    "response": {
        "numFound": 57,
        "start": 0,
        "docs": [
            {"id": 1, "_version_": "1478235317501689856"},
            {"id": 3, "_version_": "1478235317504835584"},
        ],
    },
}


@pytest.fixture(autouse=True)
def _reset_heliotrope_logger() -> Iterator[None]:
    """Undo configure_logging() so caplog keeps seeing heliotrope records."""
    yield
    logger = logging.getLogger("heliotrope")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


Handler = Callable[[httpx.Request], httpx.Response]


def json_handler(payload: object, status: int = 200) -> Handler:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, content=json.dumps(payload).encode())

    return handler


@pytest.fixture
def make_client() -> Iterator[Callable[[Handler], SolrClient]]:
    """Build SolrClients whose HTTP layer is the given handler."""
    clients: list[SolrClient] = []

    def factory(handler: Handler) -> SolrClient:
        client = SolrClient(
            SolrConfig(base_url=BASE_URL),
            _http_transport=httpx.MockTransport(handler),
        )
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()

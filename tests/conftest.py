"""Shared fixtures: a mocked client for unit tests, a live gateway for integration tests."""

import os
import uuid
from unittest.mock import MagicMock

import elasticsearch
import pytest

from esgateway import Gateway


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: needs a live engine (set ESGATEWAY_TEST_HOSTS)"
    )


def api_error(cls=elasticsearch.NotFoundError, status=404, body=None):
    """Build a client ApiError the way the transport raises it."""
    meta = MagicMock()
    meta.status = status
    return cls(message="error", meta=meta, body=body if body is not None else {})


def search_response(sources, took=3, highlights=None):
    """Canned search response; ids are the 1-based positions as strings."""
    hits = []
    for position, source in enumerate(sources, 1):
        hit = {"_index": "test", "_id": str(position), "_score": 1.0, "_source": source}
        if highlights is not None:
            hit["highlight"] = highlights[position - 1]
        hits.append(hit)
    return {
        "took": took,
        "hits": {"total": {"value": len(hits), "relation": "eq"}, "hits": hits},
    }


@pytest.fixture
def client():
    """MagicMock standing in for an Elasticsearch client."""
    return MagicMock()


@pytest.fixture
def gateway(client):
    return Gateway(client=client)


@pytest.fixture
def live_gateway():
    hosts = os.getenv("ESGATEWAY_TEST_HOSTS")
    if not hosts:
        pytest.skip("ESGATEWAY_TEST_HOSTS not set")
    with Gateway(hosts=hosts.split(",")) as gw:
        yield gw


@pytest.fixture
def index_name(live_gateway):
    name = f"esgateway-test-{uuid.uuid4().hex[:8]}"
    yield name
    if live_gateway.indices.exists(name):
        live_gateway.indices.delete(name)

"""Tests for client exception translation."""

import elasticsearch
import pytest

from esgateway.errors import (
    GatewayError,
    NotFoundError,
    RequestError,
    TransportError,
    api_call,
)

from conftest import api_error


def test_not_found_is_translated_with_context():
    cause = api_error()
    with pytest.raises(NotFoundError) as info:
        with api_call("get_document", index="products", id="7"):
            raise cause

    assert info.value.operation == "get_document"
    assert info.value.context == {"index": "products", "id": "7"}
    assert info.value.__cause__ is cause


def test_other_api_errors_become_request_errors():
    with pytest.raises(RequestError) as info:
        with api_call("create_index", index="products"):
            raise api_error(elasticsearch.BadRequestError, status=400)

    assert info.value.status == 400


def test_connection_failures_become_transport_errors():
    with pytest.raises(TransportError):
        with api_call("exists", index="products"):
            raise elasticsearch.ConnectionError("connection refused")


def test_timeouts_become_transport_errors():
    with pytest.raises(TransportError):
        with api_call("search", index="products"):
            raise elasticsearch.ConnectionTimeout("timed out")


def test_all_errors_share_a_base_class():
    for cls in (TransportError, NotFoundError, RequestError):
        assert issubclass(cls, GatewayError)


def test_unrelated_exceptions_pass_through():
    with pytest.raises(KeyError):
        with api_call("search", index="products"):
            raise KeyError("hits")


def test_failures_are_logged(caplog):
    with pytest.raises(TransportError):
        with api_call("flush", index="products"):
            raise elasticsearch.ConnectionError("down")

    assert "flush" in caplog.text
    assert "index=products" in caplog.text

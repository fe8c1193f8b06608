"""Tests for index lifecycle operations."""

import json

import pytest

from esgateway.errors import NotFoundError
from esgateway.indices import IndexManager
from esgateway.mapping import keyword_field, long_field, nested_field, type_mapping

from conftest import api_error


@pytest.fixture
def manager(client):
    return IndexManager(client)


def shards(total, failed, failures=None):
    return {
        "_shards": {
            "total": total,
            "successful": total - failed,
            "failed": failed,
            "failures": failures or [{"shard": n, "reason": {}} for n in range(failed)],
        }
    }


def test_exists(manager, client):
    client.indices.exists.return_value = True
    assert manager.exists("products") is True
    client.indices.exists.assert_called_once_with(index="products")


def test_create_new_index(manager, client):
    client.indices.exists.return_value = False
    client.indices.create.return_value = {"acknowledged": True}

    assert manager.create("products") is True

    client.indices.delete.assert_not_called()
    client.indices.create.assert_called_once_with(index="products")


def test_create_replaces_existing_index(manager, client):
    client.indices.exists.return_value = True
    client.indices.delete.return_value = {"acknowledged": True}
    client.indices.create.return_value = {"acknowledged": True}

    assert manager.create("products") is True

    client.indices.delete.assert_called_once_with(index="products")
    client.indices.create.assert_called_once()


def test_create_with_mapping_tree(manager, client):
    client.indices.exists.return_value = False
    client.indices.create.return_value = {"acknowledged": True}
    mapping = type_mapping({
        "id": long_field(),
        "user": nested_field({"first": keyword_field(), "last": keyword_field()}),
    })

    manager.create("groups", mapping, settings={"number_of_shards": 1})

    kwargs = client.indices.create.call_args.kwargs
    assert kwargs["mappings"]["properties"]["user"]["type"] == "nested"
    assert kwargs["settings"] == {"number_of_shards": 1}


def test_create_wraps_bare_properties(manager, client):
    client.indices.exists.return_value = False
    client.indices.create.return_value = {"acknowledged": True}

    manager.create("products", {"id": long_field()})

    assert client.indices.create.call_args.kwargs["mappings"] == {
        "properties": {"id": {"type": "long", "index": True}}
    }


def test_create_with_json_mapping_script(manager, client):
    client.indices.exists.return_value = False
    client.indices.create.return_value = {"acknowledged": False}
    script = json.dumps({"properties": {"skuName": {"type": "text"}}})

    assert manager.create("products", script) is False
    assert client.indices.create.call_args.kwargs["mappings"] == {
        "properties": {"skuName": {"type": "text"}}
    }


def test_create_rejects_empty_name(manager):
    with pytest.raises(ValueError):
        manager.create("")


def test_delete_missing_index_raises(manager, client):
    client.indices.delete.side_effect = api_error(body={"error": {"type": "index_not_found_exception"}})
    with pytest.raises(NotFoundError):
        manager.delete("missing")


def test_get_and_detail(manager, client):
    client.indices.get.return_value = {
        "products": {
            "aliases": {},
            "mappings": {"properties": {"id": {"type": "long"}, "skus": {"properties": {}}}},
            "settings": {},
        }
    }
    assert set(manager.get("products")) == {"aliases", "mappings", "settings"}
    assert manager.get_detail("products") == {"id": "long", "skus": "object"}


def test_get_all_indices(manager, client):
    client.cat.indices.return_value = [{"index": "products"}, {"index": "groups"}]
    assert [r["index"] for r in manager.get_all_indices()] == ["products", "groups"]
    client.cat.indices.assert_called_once_with(format="json")


def test_mappings(manager, client):
    client.indices.get_mapping.return_value = {
        "products": {"mappings": {"properties": {"id": {"type": "long"}}}},
        "groups": {"mappings": {}},
    }
    assert manager.get_mapping("products") == {"properties": {"id": {"type": "long"}}}
    assert manager.get_all_mappings() == {
        "products": {"properties": {"id": {"type": "long"}}},
        "groups": {},
    }


def test_refresh_healthy_index(manager, client):
    client.indices.refresh.return_value = shards(total=1, failed=0)
    assert manager.refresh("products") is True


def test_refresh_total_shard_failure(manager, client):
    client.indices.refresh.return_value = shards(total=2, failed=2)
    assert manager.refresh("products") is False


def test_refresh_partial_shard_failure_is_still_success(manager, client, caplog):
    client.indices.refresh.return_value = shards(total=2, failed=1)
    assert manager.refresh("products") is True
    assert "partial shard failure" in caplog.text


def test_flush_follows_the_same_rule(manager, client):
    client.indices.flush.return_value = shards(total=2, failed=1)
    assert manager.flush("products") is True

    client.indices.flush.return_value = shards(total=2, failed=2)
    assert manager.flush("products") is False


def test_failed_count_defaults_to_failures_list(manager, client):
    client.indices.flush.return_value = {"_shards": {"total": 1, "failures": [{"shard": 0}]}}
    assert manager.flush("products") is False

"""
esgateway Indices — Index Lifecycle Management
==============================================

Create, delete and inspect indices and their mappings, and run the
refresh/flush consistency operations.

Creation is idempotent in the destructive sense: creating an index that
already exists deletes it first, so no documents survive ``create``.
The exists-then-delete-then-create sequence is not atomic; a concurrent
caller may interleave.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from elasticsearch import Elasticsearch

from .errors import api_call
from .mapper import parse_mapping
from .results import response_body

logger = logging.getLogger(__name__)


def _shards_ok(operation: str, index: str, response: Mapping[str, Any]) -> bool:
    """
    Collapse shard statistics into a boolean.

    Only total failure (failed == total) is False. A partial failure is
    logged and still counts as success.
    """
    shards = response_body(response).get("_shards") or {}
    failures = shards.get("failures") or []
    total = int(shards.get("total", 0))
    failed = int(shards.get("failed", len(failures)))

    if failed == total:
        logger.error("Index %s %s failure: %s", index, operation, failures)
        return False
    if failed > 0:
        logger.warning(
            "Index %s %s partial shard failure (%d/%d): %s",
            index, operation, failed, total, failures
        )
    logger.info("Index %s %s succeeded", index, operation)
    return True


class IndexManager:
    """
    Index lifecycle operations over a shared client handle.

    Example:
        manager = IndexManager(client)
        manager.create("products", type_mapping({"id": long_field()}))
        manager.refresh("products")
    """

    def __init__(self, client: Elasticsearch):
        self._client = client

    def exists(self, index: str) -> bool:
        """Check whether an index exists."""
        with api_call("exists", index=index):
            exists = bool(self._client.indices.exists(index=index))
        logger.info("Index %s exists: %s", index, exists)
        return exists

    def create(
        self,
        index: str,
        mapping: Optional[Union[Dict[str, Any], str]] = None,
        settings: Optional[Dict[str, Any]] = None
    ) -> bool:
        """
        Create an index, replacing any existing one of the same name.

        Args:
            index: Index name
            mapping: Field mapping dict ({"properties": ...} or a bare
                properties dict) or a raw JSON mapping string
            settings: Optional index settings (shards, replicas, ...)

        Returns:
            True if the engine acknowledged the creation
        """
        if not index:
            raise ValueError("index name must not be empty")

        if self.exists(index):
            self.delete(index)

        kwargs: Dict[str, Any] = {"index": index}
        if mapping is not None:
            if isinstance(mapping, str):
                mapping = parse_mapping(mapping)
            if "properties" not in mapping and "dynamic" not in mapping:
                mapping = {"properties": mapping}
            kwargs["mappings"] = mapping
        if settings:
            kwargs["settings"] = settings

        with api_call("create_index", index=index):
            response = self._client.indices.create(**kwargs)

        acknowledged = bool(response_body(response).get("acknowledged"))
        logger.info("Index %s created: %s", index, acknowledged)
        return acknowledged

    def delete(self, index: str) -> bool:
        """
        Delete an index.

        Raises:
            NotFoundError: The index does not exist
        """
        with api_call("delete_index", index=index):
            response = self._client.indices.delete(index=index)

        acknowledged = bool(response_body(response).get("acknowledged"))
        logger.info("Index %s deleted: %s", index, acknowledged)
        return acknowledged

    def get(self, index: str) -> Dict[str, Any]:
        """Full description (aliases, mappings, settings) of one index."""
        with api_call("get_index", index=index):
            response = self._client.indices.get(index=index)

        info = dict(response_body(response).get(index) or {})
        logger.info("Index %s information: %s", index, info)
        return info

    def get_detail(self, index: str) -> Dict[str, str]:
        """
        Top-level field types of an index.

        Returns:
            Dict of field name -> mapped type ("long", "text", "nested", ...)
        """
        properties = self.get(index).get("mappings", {}).get("properties", {})

        detail = {}
        for name, prop in properties.items():
            kind = prop.get("type", "object")
            logger.info("Index %s field: %s, type: %s", index, name, kind)
            detail[name] = kind
        return detail

    def get_all_indices(self) -> List[Dict[str, Any]]:
        """All ``_cat/indices`` records."""
        with api_call("get_all_indices"):
            records = list(self._client.cat.indices(format="json"))
        logger.info("Index count: %d", len(records))
        return records

    def get_mapping(self, index: str) -> Dict[str, Any]:
        """Mapping of one index."""
        with api_call("get_mapping", index=index):
            response = self._client.indices.get_mapping(index=index)

        mapping = (response_body(response).get(index) or {}).get("mappings", {})
        logger.info("Index %s mapping: %s", index, mapping)
        return mapping

    def get_all_mappings(self) -> Dict[str, Dict[str, Any]]:
        """Mappings of every index, keyed by index name."""
        with api_call("get_all_mappings"):
            response = self._client.indices.get_mapping()

        result = {}
        for name, record in response_body(response).items():
            result[name] = record.get("mappings", {})
            logger.info("Index %s mapping: %s", name, result[name])
        return result

    def refresh(self, index: str) -> bool:
        """
        Make recent writes searchable.

        Returns:
            False only if every shard failed
        """
        with api_call("refresh", index=index):
            response = self._client.indices.refresh(index=index)
        return _shards_ok("refresh", index, response)

    def flush(self, index: str) -> bool:
        """
        Persist the index to disk.

        Returns:
            False only if every shard failed
        """
        with api_call("flush", index=index):
            response = self._client.indices.flush(index=index)
        return _shards_ok("flush", index, response)

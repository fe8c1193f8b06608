"""
esgateway Documents — Document Store Gateway
============================================

Single and batched writes, reads and deletes of documents addressed by
index name and id.

Batch operations go out as one bulk request. Item failures are collected
into a ``BulkOutcome`` and never stop the other items; the batch is not
rolled back.

Known limits:
    - ``get_all`` / ``get_all_ids`` run an unfiltered search with the
      engine's default window (10 hits). Use ``SearchApi`` for more.
    - ``delete_all`` lists ids and then bulk-deletes them. A write landing
      between the two calls is not deleted.
"""

import logging
from typing import Any, List, Optional, Sequence

from elasticsearch import Elasticsearch
from elasticsearch.helpers import bulk

from .errors import api_call
from .mapper import DocumentMapper, ResultType
from .results import (
    BulkOutcome,
    Hit,
    bulk_outcome,
    extract_ids,
    extract_sources,
    response_body,
    to_hit,
)

logger = logging.getLogger(__name__)


class DocumentStore:
    """
    Document CRUD over a shared client handle.

    Example:
        store = DocumentStore(client)
        store.add("products", {"id": 1, "skuName": "City bike"}, id="1")
        hit = store.get("products", "1")
        outcome = store.batch_add("products", skus)
        if outcome.failed:
            for error in outcome.errors:
                print(error.id, error.reason)
    """

    def __init__(self, client: Elasticsearch, mapper: Optional[DocumentMapper] = None):
        self._client = client
        self._mapper = mapper or DocumentMapper()

    def add(self, index: str, doc: Any, id: Optional[str] = None) -> str:
        """
        Write one document.

        Args:
            index: Index name
            doc: Document (dict, dataclass or model object)
            id: Document id; the engine assigns one when omitted

        Returns:
            The document id
        """
        kwargs = {"index": index, "document": self._mapper.to_source(doc)}
        if id is not None:
            kwargs["id"] = id

        with api_call("add_document", index=index, id=id):
            response = self._client.index(**kwargs)

        body = response_body(response)
        logger.info("Document %s/%s %s", index, body.get("_id"), body.get("result"))
        return body["_id"]

    def update(
        self,
        index: str,
        id: str,
        doc: Any,
        result_type: Optional[ResultType] = None
    ) -> Hit:
        """
        Merge ``doc`` into the stored document.

        Returns:
            The merged document as a Hit

        Raises:
            NotFoundError: No document with this id
        """
        with api_call("update_document", index=index, id=id):
            response = self._client.update(
                index=index,
                id=id,
                doc=self._mapper.to_source(doc),
                source=True
            )

        body = response_body(response)
        logger.info("Document %s/%s %s", index, id, body.get("result"))

        merged = dict(body.get("get") or {})
        merged.setdefault("_id", body.get("_id", id))
        merged.setdefault("_index", body.get("_index", index))
        return to_hit(merged, result_type, self._mapper)

    def get(
        self,
        index: str,
        id: str,
        result_type: Optional[ResultType] = None
    ) -> Hit:
        """
        Fetch one document by id.

        Raises:
            NotFoundError: Unknown index or id
        """
        with api_call("get_document", index=index, id=id):
            response = self._client.get(index=index, id=id)

        body = response_body(response)
        logger.info("Document %s/%s source: %s", index, id, body.get("_source"))
        return to_hit(body, result_type, self._mapper)

    def get_all(
        self,
        index: str,
        result_type: Optional[ResultType] = None
    ) -> List[Any]:
        """Documents of an unfiltered search (default window only)."""
        with api_call("get_all_documents", index=index):
            response = self._client.search(index=index, query={"match_all": {}})
        return extract_sources(response, result_type, self._mapper)

    def get_all_ids(self, index: str) -> List[str]:
        """Ids of an unfiltered search (default window only)."""
        with api_call("get_all_document_ids", index=index):
            response = self._client.search(
                index=index,
                query={"match_all": {}},
                source=False
            )
        return extract_ids(response)

    def delete(self, index: str, id: str) -> bool:
        """
        Delete one document.

        Returns:
            True if the engine reports the document deleted

        Raises:
            NotFoundError: Unknown index or id
        """
        with api_call("delete_document", index=index, id=id):
            response = self._client.delete(index=index, id=id)

        result = response_body(response).get("result")
        logger.info("Document %s/%s %s", index, id, result)
        return result == "deleted"

    def delete_all(self, index: str) -> BulkOutcome:
        """
        Delete the documents returned by ``get_all_ids``.

        Not atomic: documents written after the id listing survive.
        """
        return self.batch_delete(index, self.get_all_ids(index))

    def batch_add(
        self,
        index: str,
        docs: Sequence[Any],
        ids: Optional[Sequence[Optional[str]]] = None
    ) -> BulkOutcome:
        """
        Write many documents in one bulk request.

        Args:
            index: Index name
            docs: Documents to write
            ids: Optional ids, parallel to ``docs`` (None entries let the
                engine assign)

        Returns:
            BulkOutcome; ``failed`` is True if any item failed
        """
        if ids is not None and len(ids) != len(docs):
            raise ValueError("ids must have the same length as docs")

        def generate_actions():
            for position, doc in enumerate(docs):
                action = {
                    "_op_type": "index",
                    "_index": index,
                    "_source": self._mapper.to_source(doc)
                }
                if ids is not None and ids[position] is not None:
                    action["_id"] = ids[position]
                yield action

        return self._bulk("batch_add", index, generate_actions(), len(docs))

    def batch_delete(self, index: str, ids: Sequence[str]) -> BulkOutcome:
        """
        Delete many documents in one bulk request.

        Ids that are already gone are not counted as failures.
        """
        actions = (
            {"_op_type": "delete", "_index": index, "_id": doc_id}
            for doc_id in ids
        )
        return self._bulk("batch_delete", index, actions, len(ids), ignore_status=(404,))

    def _bulk(self, operation, index, actions, count, ignore_status=()) -> BulkOutcome:
        with api_call(operation, index=index, items=count):
            succeeded, errors = bulk(
                self._client,
                actions,
                chunk_size=max(count, 1),
                raise_on_error=False
            )

        # helpers.bulk reports every non-2xx item; ignored statuses count as done
        failures = []
        for entry in errors:
            item = next(iter(entry.values()))
            if item.get("status") in ignore_status and "error" not in item:
                succeeded += 1
            else:
                failures.append(entry)

        outcome = bulk_outcome(succeeded, failures)
        if outcome.failed:
            logger.error("Bulk %s on %s had errors", operation, index)
            for error in outcome.errors:
                logger.error("%s %s: %s", error.action, error.id, error.reason)
        else:
            logger.info("Bulk %s on %s success: %d items", operation, index, succeeded)
        return outcome

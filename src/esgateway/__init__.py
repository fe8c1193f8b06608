"""
esgateway — Search Engine Client Gateway
========================================

A thin, typed layer over an Elasticsearch / OpenSearch compatible cluster:

- Index lifecycle: create (replacing), delete, mappings, refresh, flush
- Documents: add, update, get, delete and bulk writes with per-item errors
- Queries: immutable query trees (match, term, range, bool, nested, span,
  dis_max, ...) with pagination, single-field sort, highlight and
  histogram aggregation
- Results: hits, sources, ids and highlight fragments as plain Python values

Usage:
    from esgateway import Gateway, query as q

    with Gateway(hosts=["http://localhost:9200"]) as gw:
        gw.indices.create("products")
        gw.documents.batch_add("products", skus)
        gw.indices.refresh("products")

        hits = gw.search.execute(
            "products", q.match("skuName", "bike"), "id", 0, 10, False
        )

License: MIT
"""

__version__ = "0.1.0"

from . import query
from .cluster import ClusterManager
from .config import ConnectionConfig, create_client
from .core import Gateway
from .documents import DocumentStore
from .errors import GatewayError, NotFoundError, RequestError, TransportError
from .indices import IndexManager
from .mapper import DocumentMapper
from .results import Bucket, BulkItemError, BulkOutcome, Hit, SearchResult
from .search import SearchApi

__all__ = [
    "Gateway",
    "ConnectionConfig",
    "create_client",
    "IndexManager",
    "DocumentStore",
    "SearchApi",
    "ClusterManager",
    "DocumentMapper",
    "query",
    "Hit",
    "Bucket",
    "BulkItemError",
    "BulkOutcome",
    "SearchResult",
    "GatewayError",
    "TransportError",
    "NotFoundError",
    "RequestError",
]

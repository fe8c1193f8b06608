"""
esgateway Core — Gateway Facade
===============================

One object owning a client handle and the four components built on it:

    Gateway
      ├── indices    IndexManager   create / delete / mappings / refresh / flush
      ├── documents  DocumentStore  add / update / get / delete / batch ops
      ├── search     SearchApi      query variants, highlight, histogram
      └── cluster    ClusterManager nodes / health / info

Components hold no state besides the shared client, so one gateway can be
used from several threads; the engine serializes writes, but sequences of
calls (check-then-create, list-then-delete) are not atomic.
"""

from typing import Optional, List

from elasticsearch import Elasticsearch

from .cluster import ClusterManager
from .config import ConnectionConfig, create_client
from .documents import DocumentStore
from .indices import IndexManager
from .mapper import DocumentMapper
from .search import SearchApi


class Gateway:
    """
    Entry point to a search engine cluster.

    Example:
        # Local node
        with Gateway() as gw:
            gw.indices.create("products")
            gw.documents.add("products", {"id": 1, "skuName": "City bike"}, id="1")
            gw.indices.refresh("products")
            skus = gw.search.match_query("products", "bike", "skuName", "id", 0, 10, False)

        # Production cluster
        gw = Gateway(
            hosts=["https://es1:9200", "https://es2:9200"],
            api_key="your-api-key",
            ca_certs="/etc/ssl/cluster-ca.pem"
        )
    """

    def __init__(
        self,
        hosts: Optional[List[str]] = None,
        api_key: Optional[str] = None,
        basic_auth: Optional[tuple] = None,
        verify_certs: bool = True,
        ca_certs: Optional[str] = None,
        config: Optional[ConnectionConfig] = None,
        client: Optional[Elasticsearch] = None,
        mapper: Optional[DocumentMapper] = None
    ):
        """
        Open a gateway.

        Args:
            hosts: List of node URLs (default: ["http://localhost:9200"])
            api_key: API key for authentication
            basic_auth: Tuple of (username, password)
            verify_certs: Verify SSL certificates
            ca_certs: Trust store for this gateway's connections
            config: Full connection settings (overrides the arguments above)
            client: Pre-built client handle (overrides everything else)
            mapper: Document converter shared by all components
        """
        if client is None:
            if config is None:
                config = ConnectionConfig(
                    verify_certs=verify_certs,
                    ca_certs=ca_certs,
                    api_key=api_key
                )
                if hosts:
                    config.hosts = list(hosts)
                if basic_auth:
                    config.username, config.password = basic_auth
            client = create_client(config)

        self._client = client
        mapper = mapper or DocumentMapper()

        self.indices = IndexManager(client)
        self.documents = DocumentStore(client, mapper)
        self.search = SearchApi(client, mapper)
        self.cluster = ClusterManager(client)

    @property
    def client(self) -> Elasticsearch:
        return self._client

    def close(self):
        """Close the client connection."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

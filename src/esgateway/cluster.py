"""
esgateway Cluster — Node Inspection
===================================

Read-only views of the cluster the handle points at. Topology is never
changed from here.
"""

import logging
from typing import Any, Dict, List

from elasticsearch import Elasticsearch

from .errors import api_call
from .results import response_body

logger = logging.getLogger(__name__)


class ClusterManager:
    """
    Cluster information over a shared client handle.

    Example:
        manager = ClusterManager(client)
        print(manager.health()["status"])
        for node in manager.get_all_nodes():
            print(node["name"], node["ip"])
    """

    def __init__(self, client: Elasticsearch):
        self._client = client

    def get_all_nodes(self) -> List[Dict[str, Any]]:
        """
        List all nodes.

        Returns:
            ``_cat/nodes`` records (name, ip, roles, heap, ...)
        """
        with api_call("get_all_nodes"):
            nodes = list(self._client.cat.nodes(format="json"))
        logger.info("Node count: %d", len(nodes))
        return nodes

    def health(self) -> Dict[str, Any]:
        """Cluster health (status, node and shard counts)."""
        with api_call("cluster_health"):
            return dict(response_body(self._client.cluster.health()))

    def info(self) -> Dict[str, Any]:
        """Cluster name and engine version."""
        with api_call("cluster_info"):
            return dict(response_body(self._client.info()))

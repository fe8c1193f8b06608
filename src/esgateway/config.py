"""
esgateway Config — Connection Handle Construction
=================================================

Builds the ``Elasticsearch`` client the rest of the package consumes as an
opaque handle. Settings come from keyword arguments or from the environment
(optionally a ``.env`` file):

    ESGATEWAY_HOSTS                 comma-separated scheme://host:port list
    ESGATEWAY_USERNAME              basic auth user
    ESGATEWAY_PASSWORD              basic auth password
    ESGATEWAY_API_KEY               API key (takes precedence over basic auth)
    ESGATEWAY_REQUEST_TIMEOUT       seconds
    ESGATEWAY_CONNECTIONS_PER_NODE  connection pool size per node
    ESGATEWAY_VERIFY_CERTS          true/false
    ESGATEWAY_VERIFY_HOSTNAME       true/false
    ESGATEWAY_CA_CERTS              path to a PEM trust store

The trust store belongs to each ``ConnectionConfig``: every client gets its
own ``ssl.SSLContext``, so handles with different trust stores coexist.
"""

import logging
import os
import ssl
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from dotenv import find_dotenv, load_dotenv
from elasticsearch import Elasticsearch

logger = logging.getLogger(__name__)

DEFAULT_HOSTS = ["http://localhost:9200"]

_TRUE = ("true", "1", "yes", "on")


def parse_hosts(value: str) -> List[str]:
    """
    Split a comma-separated host list.

    Entries without a scheme default to ``http://``; blanks are dropped.
    """
    hosts = []
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        if "://" not in item:
            item = f"http://{item}"
        hosts.append(item)
    return hosts


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in _TRUE


@dataclass
class ConnectionConfig:
    """
    Connection settings for one client handle.

    Attributes:
        hosts: Node URLs (scheme://host:port)
        username: Basic auth user
        password: Basic auth password
        api_key: API key, used instead of basic auth when set
        request_timeout: Per-request timeout in seconds
        connections_per_node: Connection pool size per node
        max_retries: Transport-level retries (0: fail on first error)
        retry_on_timeout: Let the transport retry timed out requests
        verify_certs: Verify server certificates over https
        verify_hostname: Check the certificate hostname over https
        ca_certs: Path to a PEM trust store for this handle only
    """

    hosts: List[str] = field(default_factory=lambda: list(DEFAULT_HOSTS))
    username: Optional[str] = None
    password: Optional[str] = None
    api_key: Optional[str] = None
    request_timeout: float = 10.0
    connections_per_node: int = 10
    max_retries: int = 0
    retry_on_timeout: bool = False
    verify_certs: bool = True
    verify_hostname: bool = True
    ca_certs: Optional[str] = None

    @classmethod
    def from_env(
        cls,
        prefix: str = "ESGATEWAY_",
        env_file: Optional[str] = None
    ) -> "ConnectionConfig":
        """
        Read settings from environment variables.

        Args:
            prefix: Variable name prefix
            env_file: .env file loaded first (existing variables win); when
                omitted, the nearest .env from the working directory upward

        Returns:
            ConnectionConfig
        """
        load_dotenv(env_file or find_dotenv(usecwd=True))

        def get(name: str) -> Optional[str]:
            return os.getenv(prefix + name) or None

        hosts = get("HOSTS")
        timeout = get("REQUEST_TIMEOUT")
        per_node = get("CONNECTIONS_PER_NODE")

        return cls(
            hosts=parse_hosts(hosts) if hosts else list(DEFAULT_HOSTS),
            username=get("USERNAME"),
            password=get("PASSWORD"),
            api_key=get("API_KEY"),
            request_timeout=float(timeout) if timeout else 10.0,
            connections_per_node=int(per_node) if per_node else 10,
            verify_certs=_env_bool(prefix + "VERIFY_CERTS", True),
            verify_hostname=_env_bool(prefix + "VERIFY_HOSTNAME", True),
            ca_certs=get("CA_CERTS")
        )

    @property
    def uses_tls(self) -> bool:
        return any(h.lower().startswith("https://") for h in self.hosts)

    def check_schemes(self):
        """
        Raise ValueError if the hosts mix http and https.

        The TLS context applies to every node, and the transport refuses TLS
        options on plain http nodes.
        """
        schemes = {h.split("://", 1)[0].lower() for h in self.hosts}
        if len(schemes) > 1:
            raise ValueError(
                f"hosts mix schemes {sorted(schemes)}; use all http or all https: "
                f"{', '.join(self.hosts)}"
            )

    def ssl_context(self) -> Optional[ssl.SSLContext]:
        """
        Build the TLS context for this handle, or None for plain http.

        The context is created fresh on every call and never installed
        globally.
        """
        if not self.uses_tls:
            return None

        context = ssl.create_default_context(cafile=self.ca_certs)
        if not self.verify_certs:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        elif not self.verify_hostname:
            context.check_hostname = False
        return context

    def client_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for the ``Elasticsearch`` constructor."""
        self.check_schemes()

        conn_kwargs: Dict[str, Any] = {
            "hosts": self.hosts,
            "request_timeout": self.request_timeout,
            "connections_per_node": self.connections_per_node,
            "max_retries": self.max_retries,
            "retry_on_timeout": self.retry_on_timeout
        }

        if self.api_key:
            conn_kwargs["api_key"] = self.api_key
        elif self.username:
            conn_kwargs["basic_auth"] = (self.username, self.password or "")

        context = self.ssl_context()
        if context is not None:
            conn_kwargs["ssl_context"] = context

        return conn_kwargs


def create_client(config: Optional[ConnectionConfig] = None) -> Elasticsearch:
    """
    Create a client handle.

    Args:
        config: Connection settings (default: local node, no auth)

    Returns:
        Configured Elasticsearch client
    """
    config = config or ConnectionConfig()
    logger.info("Connecting to %s", ", ".join(config.hosts))
    return Elasticsearch(**config.client_kwargs())

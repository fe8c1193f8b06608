"""
esgateway Errors — Failure Taxonomy
===================================

Every remote call made by the gateway runs inside :func:`api_call`, which
turns client exceptions into one of three types:

    TransportError   connectivity or timeout, never retried here
    NotFoundError    absent index or document (HTTP 404)
    RequestError     any other error reported by the engine

Partial bulk failures and partial shard failures are not exceptions. They
are reported through ``BulkOutcome`` and the refresh/flush boolean.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import elasticsearch

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Base class for all errors raised by esgateway."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.operation = operation
        self.context = context or {}


class TransportError(GatewayError):
    """The engine could not be reached or did not answer in time."""


class NotFoundError(GatewayError):
    """The index or document does not exist."""


class RequestError(GatewayError):
    """The engine rejected the request."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        status: Optional[int] = None
    ):
        super().__init__(message, operation=operation, context=context)
        self.status = status


def _describe(context: Dict[str, Any]) -> str:
    return ", ".join(f"{k}={v}" for k, v in context.items() if v is not None)


@contextmanager
def api_call(operation: str, **context: Any) -> Iterator[None]:
    """
    Run one remote call, translating client exceptions.

    Args:
        operation: Name of the gateway operation (e.g. "create_index")
        **context: Identifiers logged with any failure (index, id, ...)

    Raises:
        NotFoundError: The engine answered 404
        RequestError: The engine answered with any other error status
        TransportError: Connection failure or timeout
    """
    try:
        yield
    except elasticsearch.NotFoundError as exc:
        logger.info("%s: not found (%s): %s", operation, _describe(context), exc)
        raise NotFoundError(
            f"{operation}: not found ({_describe(context)})",
            operation=operation,
            context=context
        ) from exc
    except elasticsearch.ApiError as exc:
        logger.error("%s failed (%s): %s", operation, _describe(context), exc)
        raise RequestError(
            f"{operation} failed with status {exc.status_code} ({_describe(context)})",
            operation=operation,
            context=context,
            status=exc.status_code
        ) from exc
    except elasticsearch.TransportError as exc:
        logger.error(
            "%s: transport failure (%s): %s", operation, _describe(context), exc
        )
        raise TransportError(
            f"{operation}: transport failure ({_describe(context)}): {exc}",
            operation=operation,
            context=context
        ) from exc

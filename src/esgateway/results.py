"""
esgateway Results — Response Normalization
==========================================

Shared by the document store and the search API. Raw engine responses go
in, ordered typed values come out:

    extract_hits        -> List[Hit]
    extract_sources     -> List[T]           (engine order = requested sort)
    extract_ids         -> List[str]
    extract_highlights  -> List[Dict[str, List[str]]]
    extract_buckets     -> List[Bucket]

None of the extractors ever returns None; zero hits give an empty list.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .mapper import DocumentMapper, ResultType

logger = logging.getLogger(__name__)

_default_mapper = DocumentMapper()


@dataclass
class Hit:
    """One matched (or fetched) document."""

    id: str
    source: Any
    index: Optional[str] = None
    score: Optional[float] = None
    highlight: Dict[str, List[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class Bucket:
    """One histogram bucket: lower-bound key and document count."""

    key: float
    doc_count: int


@dataclass(frozen=True)
class BulkItemError:
    action: str
    id: Optional[str]
    status: Optional[int]
    reason: str


@dataclass
class BulkOutcome:
    """
    Aggregate result of a bulk request.

    The batch is never rolled back: ``succeeded`` items were written even
    when ``failed`` is True. Truthiness follows overall success.
    """

    succeeded: int = 0
    errors: List[BulkItemError] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.errors)

    def __bool__(self) -> bool:
        return not self.failed


@dataclass
class SearchResult:
    hits: List[Hit] = field(default_factory=list)
    total: int = 0
    took: Optional[int] = None
    buckets: Dict[str, List[Bucket]] = field(default_factory=dict)

    @property
    def sources(self) -> List[Any]:
        return [hit.source for hit in self.hits]

    @property
    def ids(self) -> List[str]:
        return [hit.id for hit in self.hits]


def response_body(response: Any) -> Mapping[str, Any]:
    # ObjectApiResponse exposes the decoded JSON as .body
    return getattr(response, "body", response)


def to_hit(
    raw: Mapping[str, Any],
    result_type: Optional[ResultType] = None,
    mapper: Optional[DocumentMapper] = None
) -> Hit:
    """Convert one raw hit (or get response) into a ``Hit``."""
    mapper = mapper or _default_mapper
    return Hit(
        id=raw.get("_id"),
        source=mapper.from_source(raw.get("_source"), result_type),
        index=raw.get("_index"),
        score=raw.get("_score"),
        highlight=dict(raw.get("highlight") or {})
    )


def extract_hits(
    response: Any,
    result_type: Optional[ResultType] = None,
    mapper: Optional[DocumentMapper] = None
) -> List[Hit]:
    body = response_body(response)
    logger.info("consume times %s ms", body.get("took"))

    raw_hits = (body.get("hits") or {}).get("hits") or []
    return [to_hit(raw, result_type, mapper) for raw in raw_hits]


def extract_sources(
    response: Any,
    result_type: Optional[ResultType] = None,
    mapper: Optional[DocumentMapper] = None
) -> List[Any]:
    return [hit.source for hit in extract_hits(response, result_type, mapper)]


def extract_ids(response: Any) -> List[str]:
    return [hit.id for hit in extract_hits(response)]


def extract_highlights(response: Any) -> List[Dict[str, List[str]]]:
    """Per hit, highlight fragments keyed by field ({} when none)."""
    return [hit.highlight for hit in extract_hits(response)]


def extract_total(response: Any) -> int:
    total = (response_body(response).get("hits") or {}).get("total") or 0
    # track_total_hits gives {"value": n, "relation": "eq"}
    if isinstance(total, dict):
        return int(total.get("value", 0))
    return int(total)


def extract_buckets(response: Any, key: str) -> List[Bucket]:
    """Histogram buckets of aggregation ``key`` ([] when absent)."""
    aggregations = response_body(response).get("aggregations") or {}
    raw_buckets = (aggregations.get(key) or {}).get("buckets") or []
    return [Bucket(key=b["key"], doc_count=b["doc_count"]) for b in raw_buckets]


def extract_result(
    response: Any,
    result_type: Optional[ResultType] = None,
    mapper: Optional[DocumentMapper] = None,
    aggregation_keys: Tuple[str, ...] = ()
) -> SearchResult:
    body = response_body(response)
    return SearchResult(
        hits=extract_hits(body, result_type, mapper),
        total=extract_total(body),
        took=body.get("took"),
        buckets={key: extract_buckets(body, key) for key in aggregation_keys}
    )


def bulk_outcome(succeeded: int, errors: List[Dict[str, Any]]) -> BulkOutcome:
    """
    Build a ``BulkOutcome`` from ``helpers.bulk`` output.

    Args:
        succeeded: Count of successful items
        errors: Failed items as ``{action: item}`` dicts

    Returns:
        BulkOutcome with one BulkItemError per failed item
    """
    outcome = BulkOutcome(succeeded=succeeded)
    for entry in errors:
        for action, item in entry.items():
            error = item.get("error")
            if isinstance(error, dict):
                reason = error.get("reason") or error.get("type") or str(error)
            else:
                reason = str(error) if error is not None else "unknown"
            outcome.errors.append(
                BulkItemError(
                    action=action,
                    id=item.get("_id"),
                    status=item.get("status"),
                    reason=reason
                )
            )
    return outcome

"""
esgateway Query — Immutable Query Trees
=======================================

Queries are frozen dataclasses. Leaves test one field against a value;
composites hold their children in tuples and never modify them. A query can
be built once and reused in any number of searches.

    q = bool_([
        match("user.first", "junshen"),
        match("user.last", "wu"),
    ])
    request = SearchRequest("groups", nested("user", q), sort=Sort("id", True))
    body = request.to_body()

Every node renders to engine DSL with ``to_dict()``.
"""

import enum
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple, Union


class Query:
    """Base class of all query nodes."""

    def to_dict(self) -> Dict[str, Any]:
        raise NotImplementedError


QueryLike = Union[Query, Iterable[Query]]


def _queries(value: QueryLike) -> Tuple[Query, ...]:
    if isinstance(value, Query):
        return (value,)
    return tuple(value)


class ChildScoreMode(str, enum.Enum):
    """How matching nested children contribute to the parent's score."""

    NONE = "none"
    AVG = "avg"
    MAX = "max"
    MIN = "min"
    SUM = "sum"


# -- leaves -----------------------------------------------------------------

@dataclass(frozen=True)
class MatchAll(Query):
    def to_dict(self):
        return {"match_all": {}}


@dataclass(frozen=True)
class Match(Query):
    """Analyzed full-text match on one field."""

    field: str
    text: Any

    def to_dict(self):
        return {"match": {self.field: {"query": self.text}}}


@dataclass(frozen=True)
class MultiMatch(Query):
    """Analyzed match across several fields; any field may match."""

    fields: Tuple[str, ...]
    text: Any

    def to_dict(self):
        return {"multi_match": {"query": self.text, "fields": list(self.fields)}}


@dataclass(frozen=True)
class MatchPhrasePrefix(Query):
    field: str
    text: str

    def to_dict(self):
        return {"match_phrase_prefix": {self.field: {"query": self.text}}}


@dataclass(frozen=True)
class Ids(Query):
    values: Tuple[str, ...]

    def to_dict(self):
        return {"ids": {"values": list(self.values)}}


@dataclass(frozen=True)
class Term(Query):
    """Exact, unanalyzed match."""

    field: str
    value: Any

    def to_dict(self):
        return {"term": {self.field: {"value": self.value}}}


@dataclass(frozen=True)
class Fuzzy(Query):
    field: str
    value: Any
    fuzziness: Optional[str] = None

    def to_dict(self):
        body: Dict[str, Any] = {"value": self.value}
        if self.fuzziness is not None:
            body["fuzziness"] = self.fuzziness
        return {"fuzzy": {self.field: body}}


@dataclass(frozen=True)
class Range(Query):
    """
    Bounded match on one field.

    ``gte``/``lte`` are inclusive bounds, ``gt``/``lt`` exclusive. Unset
    bounds are open.
    """

    field: str
    gte: Any = None
    gt: Any = None
    lte: Any = None
    lt: Any = None

    @classmethod
    def between(cls, field: str, lower: Any, upper: Any) -> "Range":
        """Inclusive ``lower..upper``."""
        return cls(field, gte=lower, lte=upper)

    def to_dict(self):
        bounds = {
            name: value
            for name, value in (
                ("gte", self.gte), ("gt", self.gt), ("lte", self.lte), ("lt", self.lt)
            )
            if value is not None
        }
        return {"range": {self.field: bounds}}


@dataclass(frozen=True)
class Wildcard(Query):
    """Glob match: ``*`` any run of characters, ``?`` one character."""

    field: str
    pattern: str

    def to_dict(self):
        return {"wildcard": {self.field: {"value": self.pattern}}}


@dataclass(frozen=True)
class QueryString(Query):
    """Query syntax string (``+term -term "a phrase"``)."""

    query: str
    fields: Optional[Tuple[str, ...]] = None

    def to_dict(self):
        body: Dict[str, Any] = {"query": self.query}
        if self.fields:
            body["fields"] = list(self.fields)
        return {"query_string": body}


@dataclass(frozen=True)
class SpanTerm(Query):
    field: str
    value: str

    def to_dict(self):
        return {"span_term": {self.field: {"value": self.value}}}


# -- composites -------------------------------------------------------------

@dataclass(frozen=True)
class ConstantScore(Query):
    """Runs ``filter`` without scoring; every match scores ``boost``."""

    filter: Query
    boost: float = 1.0

    def to_dict(self):
        return {"constant_score": {"filter": self.filter.to_dict(), "boost": self.boost}}


@dataclass(frozen=True)
class DisMax(Query):
    """
    Best single sub-query score, plus ``tie_breaker`` times the scores of
    the other matching sub-queries.
    """

    queries: Tuple[Query, ...]
    tie_breaker: float = 0.0
    boost: float = 1.0

    def to_dict(self):
        return {
            "dis_max": {
                "queries": [q.to_dict() for q in self.queries],
                "tie_breaker": self.tie_breaker,
                "boost": self.boost
            }
        }


@dataclass(frozen=True)
class SpanFirst(Query):
    """``match`` must end within the first ``end`` token positions."""

    match: SpanTerm
    end: int

    def to_dict(self):
        return {"span_first": {"match": self.match.to_dict(), "end": self.end}}


@dataclass(frozen=True)
class Bool(Query):
    must: Tuple[Query, ...] = ()
    filter: Tuple[Query, ...] = ()
    should: Tuple[Query, ...] = ()
    must_not: Tuple[Query, ...] = ()

    def to_dict(self):
        body = {}
        for clause in ("must", "filter", "should", "must_not"):
            children = getattr(self, clause)
            if children:
                body[clause] = [q.to_dict() for q in children]
        return {"bool": body}


@dataclass(frozen=True)
class Nested(Query):
    """Runs ``query`` inside the nested scope at ``path``."""

    path: str
    query: Query
    score_mode: ChildScoreMode = ChildScoreMode.AVG

    def to_dict(self):
        return {
            "nested": {
                "path": self.path,
                "query": self.query.to_dict(),
                "score_mode": ChildScoreMode(self.score_mode).value
            }
        }


# -- constructors -----------------------------------------------------------

def match_all() -> MatchAll:
    return MatchAll()


def match(field: str, text: Any) -> Match:
    return Match(field, text)


def multi_match(fields: Iterable[str], text: Any) -> MultiMatch:
    return MultiMatch(tuple(fields), text)


def match_phrase_prefix(field: str, text: str) -> MatchPhrasePrefix:
    return MatchPhrasePrefix(field, text)


def ids(values: Iterable[str]) -> Ids:
    return Ids(tuple(values))


def term(field: str, value: Any) -> Term:
    return Term(field, value)


def fuzzy(field: str, value: Any, fuzziness: Optional[str] = None) -> Fuzzy:
    return Fuzzy(field, value, fuzziness)


def range_(field: str, gte=None, gt=None, lte=None, lt=None) -> Range:
    return Range(field, gte=gte, gt=gt, lte=lte, lt=lt)


def wildcard(field: str, pattern: str) -> Wildcard:
    return Wildcard(field, pattern)


def query_string(query: str, fields: Optional[Iterable[str]] = None) -> QueryString:
    return QueryString(query, tuple(fields) if fields else None)


def span_term(field: str, value: str) -> SpanTerm:
    return SpanTerm(field, value)


def span_first(match: SpanTerm, end: int) -> SpanFirst:
    return SpanFirst(match, end)


def constant_score(filter: Query, boost: float = 1.0) -> ConstantScore:
    return ConstantScore(filter, boost)


def dis_max(queries: QueryLike, tie_breaker: float = 0.0, boost: float = 1.0) -> DisMax:
    return DisMax(_queries(queries), tie_breaker, boost)


def bool_(
    must: QueryLike = (),
    filter: QueryLike = (),
    should: QueryLike = (),
    must_not: QueryLike = ()
) -> Bool:
    return Bool(_queries(must), _queries(filter), _queries(should), _queries(must_not))


def nested(
    path: str,
    query: Query,
    score_mode: Union[ChildScoreMode, str] = ChildScoreMode.AVG
) -> Nested:
    return Nested(path, query, ChildScoreMode(score_mode))


# -- request shape ----------------------------------------------------------

@dataclass(frozen=True)
class Sort:
    field: str
    descending: bool = False

    def to_list(self):
        return [{self.field: {"order": "desc" if self.descending else "asc"}}]


@dataclass(frozen=True)
class Highlight:
    """Highlight one field, wrapping matches in caller-chosen markers."""

    field: str
    pre_tag: str = "<em>"
    post_tag: str = "</em>"

    def to_dict(self):
        return {
            "fields": {
                self.field: {"pre_tags": [self.pre_tag], "post_tags": [self.post_tag]}
            }
        }


@dataclass(frozen=True)
class HistogramAggregation:
    key: str
    field: str
    interval: float

    def to_dict(self):
        return {self.key: {"histogram": {"field": self.field, "interval": self.interval}}}


@dataclass(frozen=True)
class SearchRequest:
    """
    One search: index, query, window, sort, highlight, aggregation.

    ``size=None`` leaves the window to the engine default.
    """

    index: str
    query: Query = MatchAll()
    from_: int = 0
    size: Optional[int] = None
    sort: Optional[Sort] = None
    highlight: Optional[Highlight] = None
    aggregation: Optional[HistogramAggregation] = None

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"query": self.query.to_dict()}
        if self.from_:
            body["from"] = self.from_
        if self.size is not None:
            body["size"] = self.size
        if self.sort is not None:
            body["sort"] = self.sort.to_list()
        if self.highlight is not None:
            body["highlight"] = self.highlight.to_dict()
        if self.aggregation is not None:
            body["aggs"] = self.aggregation.to_dict()
        return body

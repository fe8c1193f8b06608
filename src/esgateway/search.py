"""
esgateway Search — Query Execution
==================================

Runs query trees against an index and normalizes the responses.

Every variant shares one request shape:

    execute(index, query, sorted_field, from_index, page_size, desc, result_type)

plus one convenience method per query variant, a histogram aggregation,
a highlight search and a lookup by id. Sorting is on a single field.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from elasticsearch import Elasticsearch
from elasticsearch import NotFoundError as _ClientNotFoundError

from . import query as q
from .errors import api_call
from .mapper import DocumentMapper, ResultType
from .results import (
    Bucket,
    Hit,
    SearchResult,
    extract_buckets,
    extract_highlights,
    extract_result,
    response_body,
    to_hit,
)

logger = logging.getLogger(__name__)

# request body keys that the client takes under another keyword
_KWARG_NAMES = {"from": "from_", "aggs": "aggregations"}


def _search_kwargs(body: Dict[str, Any]) -> Dict[str, Any]:
    return {_KWARG_NAMES.get(key, key): value for key, value in body.items()}


class SearchApi:
    """
    Query execution over a shared client handle.

    Example:
        api = SearchApi(client)
        skus = api.match_query("products", "bike", "skuName", "id", 0, 10, False, Sku)
        buckets = api.aggs_by_histogram(
            "products", "bike", "skuName", "skuPrice", "price-histogram", 50.0
        )
    """

    def __init__(self, client: Elasticsearch, mapper: Optional[DocumentMapper] = None):
        self._client = client
        self._mapper = mapper or DocumentMapper()

    def search(
        self,
        request: q.SearchRequest,
        result_type: Optional[ResultType] = None
    ) -> SearchResult:
        """
        Run a full search request.

        Args:
            request: Index, query, window, sort, highlight and aggregation
            result_type: Type each hit's source is converted to

        Returns:
            SearchResult with hits in engine order, total and buckets
        """
        body = request.to_body()
        logger.debug("Search %s: %s", request.index, body)

        with api_call("search", index=request.index):
            response = self._client.search(index=request.index, **_search_kwargs(body))

        keys = (request.aggregation.key,) if request.aggregation else ()
        return extract_result(response, result_type, self._mapper, keys)

    def execute(
        self,
        index: str,
        query: q.Query,
        sorted_field: Optional[str],
        from_index: int,
        page_size: int,
        desc: bool,
        result_type: Optional[ResultType] = None
    ) -> List[Any]:
        """
        Run ``query`` with pagination and a single-field sort.

        Args:
            index: Index name
            query: Query tree
            sorted_field: Field to sort on (None keeps relevance order)
            from_index: Offset of the first hit
            page_size: Number of hits
            desc: Sort descending when True
            result_type: Type each source is converted to

        Returns:
            Sources in the requested order
        """
        request = q.SearchRequest(
            index=index,
            query=query,
            from_=from_index,
            size=page_size,
            sort=q.Sort(sorted_field, desc) if sorted_field else None
        )
        return self.search(request, result_type).sources

    def count(self, index: str, query: Optional[q.Query] = None) -> int:
        """Number of documents matching ``query`` (all when None)."""
        kwargs: Dict[str, Any] = {"index": index}
        if query is not None:
            kwargs["query"] = query.to_dict()

        with api_call("count", index=index):
            response = self._client.count(**kwargs)
        return int(response_body(response)["count"])

    def search_by_id(
        self,
        index: str,
        id: str,
        result_type: Optional[ResultType] = None
    ) -> Optional[Hit]:
        """
        Fetch one document, returning None when it does not exist.

        A missing index is still an error (NotFoundError).
        """
        with api_call("search_by_id", index=index, id=id):
            try:
                response = self._client.get(index=index, id=id)
            except _ClientNotFoundError as exc:
                if isinstance(exc.body, dict) and exc.body.get("found") is False:
                    logger.info("Document %s/%s not found", index, id)
                    return None
                raise

        return to_hit(response_body(response), result_type, self._mapper)

    def aggs_by_histogram(
        self,
        index: str,
        search_text: str,
        search_field: str,
        aggs_field: str,
        aggs_key: str,
        interval: float
    ) -> List[Bucket]:
        """
        Histogram of ``aggs_field`` over documents matching the search.

        No hits are returned (size 0); each bucket has its lower bound as
        key and its document count.
        """
        request = q.SearchRequest(
            index=index,
            query=q.match(search_field, search_text),
            size=0,
            aggregation=q.HistogramAggregation(aggs_key, aggs_field, interval)
        )

        with api_call("aggs_by_histogram", index=index, field=aggs_field):
            response = self._client.search(index=index, **_search_kwargs(request.to_body()))

        buckets = extract_buckets(response, aggs_key)
        for bucket in buckets:
            logger.info("%s: %d documents under %s", aggs_key, bucket.doc_count, bucket.key)
        return buckets

    def highlight_query(
        self,
        index: str,
        query: q.Query,
        highlight_field: str,
        pre_tags: str,
        post_tags: str,
        sorted_field: Optional[str],
        from_index: int,
        page_size: int,
        desc: bool
    ) -> List[Dict[str, List[str]]]:
        """
        Run ``query`` and return highlight fragments per hit.

        Returns:
            One dict per hit: field -> fragments wrapped in the given markers
        """
        request = q.SearchRequest(
            index=index,
            query=query,
            from_=from_index,
            size=page_size,
            sort=q.Sort(sorted_field, desc) if sorted_field else None,
            highlight=q.Highlight(highlight_field, pre_tags, post_tags)
        )

        with api_call("highlight_query", index=index, field=highlight_field):
            response = self._client.search(index=index, **_search_kwargs(request.to_body()))

        return extract_highlights(response)

    # Per-variant shortcuts. All share execute()'s window and sort arguments.

    def match_all_query(self, index, sorted_field, from_index, page_size, desc,
                        result_type=None):
        return self.execute(index, q.match_all(), sorted_field, from_index,
                            page_size, desc, result_type)

    def match_query(self, index, search_text, search_field, sorted_field,
                    from_index, page_size, desc, result_type=None):
        return self.execute(index, q.match(search_field, search_text), sorted_field,
                            from_index, page_size, desc, result_type)

    def multi_match_query(self, index, search_text, search_fields: Iterable[str],
                          sorted_field, from_index, page_size, desc, result_type=None):
        return self.execute(index, q.multi_match(search_fields, search_text),
                            sorted_field, from_index, page_size, desc, result_type)

    def match_phrase_prefix_query(self, index, search_text, search_field, sorted_field,
                                  from_index, page_size, desc, result_type=None):
        return self.execute(index, q.match_phrase_prefix(search_field, search_text),
                            sorted_field, from_index, page_size, desc, result_type)

    def ids_query(self, index, search_ids: Iterable[str], sorted_field, from_index,
                  page_size, desc, result_type=None):
        return self.execute(index, q.ids(search_ids), sorted_field, from_index,
                            page_size, desc, result_type)

    def term_query(self, index, search_text, search_field, sorted_field,
                   from_index, page_size, desc, result_type=None):
        return self.execute(index, q.term(search_field, search_text), sorted_field,
                            from_index, page_size, desc, result_type)

    def fuzzy_query(self, index, search_text, search_field, sorted_field,
                    from_index, page_size, desc, result_type=None):
        return self.execute(index, q.fuzzy(search_field, search_text), sorted_field,
                            from_index, page_size, desc, result_type)

    def range_query(self, index, from_value, to_value, search_field, sorted_field,
                    from_index, page_size, desc, result_type=None):
        """Inclusive ``from_value..to_value`` on ``search_field``."""
        return self.execute(index, q.Range.between(search_field, from_value, to_value),
                            sorted_field, from_index, page_size, desc, result_type)

    def wildcard_query(self, index, pattern, search_field, sorted_field,
                       from_index, page_size, desc, result_type=None):
        return self.execute(index, q.wildcard(search_field, pattern), sorted_field,
                            from_index, page_size, desc, result_type)

    def constant_score_query(self, index, search_text, search_field, boost: float,
                             sorted_field, from_index, page_size, desc, result_type=None):
        """Term filter scored with a fixed ``boost``."""
        query = q.constant_score(q.term(search_field, search_text), boost)
        return self.execute(index, query, sorted_field, from_index, page_size, desc,
                            result_type)

    def dis_max_query(self, index, queries: Union[q.Query, Iterable[q.Query]],
                      boost: float, tie_breaker: float, sorted_field, from_index,
                      page_size, desc, result_type=None):
        query = q.dis_max(queries, tie_breaker=tie_breaker, boost=boost)
        return self.execute(index, query, sorted_field, from_index, page_size, desc,
                            result_type)

    def query_string_query(self, index, search_text, sorted_field, from_index,
                           page_size, desc, result_type=None):
        return self.execute(index, q.query_string(search_text), sorted_field,
                            from_index, page_size, desc, result_type)

    def span_first_query(self, index, search_text, search_field, end: int,
                         sorted_field, from_index, page_size, desc, result_type=None):
        query = q.span_first(q.span_term(search_field, search_text), end)
        return self.execute(index, query, sorted_field, from_index, page_size, desc,
                            result_type)

    def span_term_query(self, index, search_text, search_field, sorted_field,
                        from_index, page_size, desc, result_type=None):
        return self.execute(index, q.span_term(search_field, search_text), sorted_field,
                            from_index, page_size, desc, result_type)

    def bool_query(self, index, queries: Union[q.Query, Iterable[q.Query]],
                   sorted_field, from_index, page_size, desc, result_type=None):
        """All of ``queries`` must match."""
        return self.execute(index, q.bool_(must=queries), sorted_field, from_index,
                            page_size, desc, result_type)

    def nested_query(self, index, path, query: q.Query,
                     score_mode: Union[q.ChildScoreMode, str], sorted_field,
                     from_index, page_size, desc, result_type=None):
        return self.execute(index, q.nested(path, query, score_mode), sorted_field,
                            from_index, page_size, desc, result_type)

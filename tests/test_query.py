"""Tests for query trees and request bodies."""

import dataclasses

import pytest

from esgateway import query as q


def test_leaf_queries_render_engine_dsl():
    assert q.match_all().to_dict() == {"match_all": {}}
    assert q.match("productName", "android").to_dict() == {
        "match": {"productName": {"query": "android"}}
    }
    assert q.multi_match(["productName", "brandName"], "华为").to_dict() == {
        "multi_match": {"query": "华为", "fields": ["productName", "brandName"]}
    }
    assert q.match_phrase_prefix("productName", "人民共").to_dict() == {
        "match_phrase_prefix": {"productName": {"query": "人民共"}}
    }
    assert q.ids(["1", "2"]).to_dict() == {"ids": {"values": ["1", "2"]}}
    assert q.term("productName", "android").to_dict() == {
        "term": {"productName": {"value": "android"}}
    }
    assert q.fuzzy("brandName", "李").to_dict() == {"fuzzy": {"brandName": {"value": "李"}}}
    assert q.wildcard("productName", "an*d").to_dict() == {
        "wildcard": {"productName": {"value": "an*d"}}
    }
    assert q.query_string("+android").to_dict() == {"query_string": {"query": "+android"}}
    assert q.span_term("productName", "android").to_dict() == {
        "span_term": {"productName": {"value": "android"}}
    }


def test_fuzzy_with_fuzziness():
    assert q.fuzzy("name", "bkie", "AUTO").to_dict() == {
        "fuzzy": {"name": {"value": "bkie", "fuzziness": "AUTO"}}
    }


def test_range_bounds():
    assert q.Range.between("skuPrice", 100, 200).to_dict() == {
        "range": {"skuPrice": {"gte": 100, "lte": 200}}
    }
    assert q.range_("skuPrice", gt=100, lt=200).to_dict() == {
        "range": {"skuPrice": {"gt": 100, "lt": 200}}
    }
    assert q.range_("skuPrice", gte=0).to_dict() == {"range": {"skuPrice": {"gte": 0}}}


def test_composite_queries():
    android = q.term("productName", "android")
    clothes = q.term("productName", "运动")

    assert q.constant_score(android, 0.2).to_dict() == {
        "constant_score": {"filter": android.to_dict(), "boost": 0.2}
    }
    assert q.dis_max([android, clothes], tie_breaker=0.7, boost=1.2).to_dict() == {
        "dis_max": {
            "queries": [android.to_dict(), clothes.to_dict()],
            "tie_breaker": 0.7,
            "boost": 1.2,
        }
    }
    assert q.span_first(q.span_term("productName", "android"), 3).to_dict() == {
        "span_first": {"match": {"span_term": {"productName": {"value": "android"}}}, "end": 3}
    }
    assert q.bool_(must=[android, clothes]).to_dict() == {
        "bool": {"must": [android.to_dict(), clothes.to_dict()]}
    }


def test_bool_accepts_single_query_and_other_clauses():
    android = q.term("productName", "android")
    assert q.bool_(must=android, must_not=q.match_all()).to_dict() == {
        "bool": {"must": [android.to_dict()], "must_not": [{"match_all": {}}]}
    }


def test_nested_scope_and_score_mode():
    inner = q.bool_(must=[q.match("user.first", "junshen"), q.match("user.last", "wu")])
    assert q.nested("user", inner, "none").to_dict() == {
        "nested": {"path": "user", "query": inner.to_dict(), "score_mode": "none"}
    }
    assert q.nested("a.b", q.term("a.b.value", 8)).score_mode is q.ChildScoreMode.AVG


def test_unknown_score_mode_is_rejected():
    with pytest.raises(ValueError):
        q.nested("user", q.match_all(), "median")


def test_queries_are_immutable_and_reusable():
    child = q.match("skuName", "bike")
    parent = q.bool_(must=[child])
    first = parent.to_dict()

    with pytest.raises(dataclasses.FrozenInstanceError):
        child.text = "car"

    q.dis_max([child, parent])
    assert parent.to_dict() == first
    assert parent.must == (child,)
    assert hash(parent) == hash(q.bool_(must=[q.match("skuName", "bike")]))


def test_composites_copy_caller_lists():
    children = [q.match_all()]
    node = q.bool_(must=children)
    children.append(q.term("id", 1))
    assert len(node.must) == 1


def test_search_request_body():
    request = q.SearchRequest(
        index="products",
        query=q.match("skuName", "bike"),
        from_=10,
        size=5,
        sort=q.Sort("id", descending=True),
        highlight=q.Highlight("skuName", "<font color='red'>", "</font>"),
        aggregation=q.HistogramAggregation("price-histogram", "skuPrice", 50.0),
    )
    assert request.to_body() == {
        "query": {"match": {"skuName": {"query": "bike"}}},
        "from": 10,
        "size": 5,
        "sort": [{"id": {"order": "desc"}}],
        "highlight": {
            "fields": {
                "skuName": {"pre_tags": ["<font color='red'>"], "post_tags": ["</font>"]}
            }
        },
        "aggs": {"price-histogram": {"histogram": {"field": "skuPrice", "interval": 50.0}}},
    }


def test_default_search_request_is_match_all_with_engine_window():
    assert q.SearchRequest("products").to_body() == {"query": {"match_all": {}}}

"""Tests for response normalization."""

from dataclasses import dataclass

from esgateway.results import (
    Bucket,
    BulkOutcome,
    bulk_outcome,
    extract_buckets,
    extract_highlights,
    extract_hits,
    extract_ids,
    extract_result,
    extract_sources,
)

from conftest import search_response


@dataclass
class Sku:
    id: int
    skuName: str


def test_zero_hits_give_empty_lists():
    empty = {"took": 1, "hits": {"total": {"value": 0}, "hits": []}}
    assert extract_hits(empty) == []
    assert extract_sources(empty) == []
    assert extract_ids(empty) == []
    assert extract_highlights(empty) == []


def test_missing_hits_section_gives_empty_list():
    assert extract_hits({"took": 1}) == []


def test_sources_keep_engine_order_and_type():
    response = search_response([{"id": 3, "skuName": "c"}, {"id": 1, "skuName": "a"}])
    assert extract_sources(response, Sku) == [Sku(3, "c"), Sku(1, "a")]
    assert extract_ids(response) == ["1", "2"]


def test_hits_carry_metadata():
    hit = extract_hits(search_response([{"id": 1}]))[0]
    assert hit.id == "1"
    assert hit.index == "test"
    assert hit.score == 1.0
    assert hit.source == {"id": 1}
    assert hit.highlight == {}


def test_highlights_per_hit():
    response = search_response(
        [{"productName": "android手机"}, {"productName": "运动服装"}],
        highlights=[{"productName": ["<b>android</b>手机"]}, {}],
    )
    assert extract_highlights(response) == [{"productName": ["<b>android</b>手机"]}, {}]


def test_buckets():
    response = {
        "hits": {"total": {"value": 0}, "hits": []},
        "aggregations": {
            "price-histogram": {
                "buckets": [{"key": 0.0, "doc_count": 4}, {"key": 50.0, "doc_count": 2}]
            }
        },
    }
    assert extract_buckets(response, "price-histogram") == [Bucket(0.0, 4), Bucket(50.0, 2)]
    assert extract_buckets(response, "other") == []


def test_extract_result_totals():
    result = extract_result(search_response([{"id": 1}, {"id": 2}], took=9))
    assert result.total == 2
    assert result.took == 9
    assert result.sources == [{"id": 1}, {"id": 2}]
    assert result.ids == ["1", "2"]


def test_legacy_integer_total():
    assert extract_result({"hits": {"total": 4, "hits": []}}).total == 4


def test_empty_bulk_outcome_is_success():
    outcome = BulkOutcome()
    assert outcome.failed is False
    assert bool(outcome) is True


def test_bulk_outcome_lists_each_item_error():
    errors = [
        {"index": {"_id": "a", "status": 400,
                   "error": {"type": "mapper_parsing_exception", "reason": "failed to parse field [id]"}}},
        {"delete": {"_id": "b", "status": 404, "error": "index missing"}},
    ]
    outcome = bulk_outcome(8, errors)

    assert outcome.failed is True
    assert not outcome
    assert outcome.succeeded == 8
    assert [(e.action, e.id, e.status) for e in outcome.errors] == [
        ("index", "a", 400),
        ("delete", "b", 404),
    ]
    assert outcome.errors[0].reason == "failed to parse field [id]"
    assert outcome.errors[1].reason == "index missing"

"""
Tests for query normalization, snippet truncation and request validation.
"""

import pytest

from search_operations.config.validation import HybridSearchQuery, SearchQuery, SemanticQuery, parse_query
from search_operations.core.search_ops_exceptions import InvalidSearchParametersError
from search_operations.search.hybrid.utils.validation import (
    meaningful_tokens,
    normalize_query,
    query_hash,
    truncate_snippet,
)


@pytest.mark.parametrize("raw, expected", [
    ("  What   IS  Hybrid Search ", "what is hybrid search"),
    ("Hello what is rrf???", "what is rrf?"),
    ("can you explain breakers please!!", "explain breakers"),
    ("could you find invoices thanks", "find invoices"),
    ("wait... what ,, now !!!", "wait. what, now!"),
    ("café menu", "café menu"),
])
def test_normalize_query(raw, expected):
    assert normalize_query(raw) == expected


def test_normalize_query_caps_length():
    assert len(normalize_query("a" * 600)) == 500


def test_meaningful_tokens():
    assert meaningful_tokens("Is it the API-key?") == []
    assert meaningful_tokens("rotate the API-keys now") == ["rotate", "keys"]
    assert meaningful_tokens("abc", min_length=3) == ["abc"]


def test_truncate_snippet_leaves_short_text():
    assert truncate_snippet("short text", 280) == "short text"
    assert truncate_snippet("x" * 280, 280) == "x" * 280


def test_truncate_snippet_cuts_at_word_boundary():
    text = "alpha beta gamma delta epsilon"
    assert truncate_snippet(text, 20) == "alpha beta gamma..."


def test_truncate_snippet_hard_cut_without_late_space():
    text = "ab " + "c" * 50
    assert truncate_snippet(text, 20) == "ab " + "c" * 17 + "..."


def test_truncate_snippet_never_cuts_inside_tag():
    text = "ab <mark>hit</mark> trailing text"
    assert truncate_snippet(text, 6) == "ab..."


def test_query_hash_is_stable_and_opaque():
    assert query_hash("invoices") == query_hash("invoices")
    assert query_hash("invoices") != query_hash("receipts")
    assert "invoices" not in query_hash("invoices")
    assert len(query_hash("invoices")) == 16


def test_hybrid_query_defaults():
    query = HybridSearchQuery(tenant_id="t1", q="invoices")
    assert (query.limit, query.offset, query.rrf_k) == (10, 0, None)
    assert query.semantic_k is None
    assert query.semantic_recall is None


@pytest.mark.parametrize("params", [
    {"q": ""},
    {"q": "   "},
    {"limit": 0},
    {"limit": 51},
    {"offset": -1},
    {"rrf_k": 0},
    {"rrf_k": 101},
    {"semantic_k": 51},
    {"semantic_recall": 0},
    {"unexpected": True},
])
def test_hybrid_query_bounds(params):
    data = {"tenant_id": "t1", "q": "invoices"}
    data.update(params)
    with pytest.raises(InvalidSearchParametersError):
        parse_query(HybridSearchQuery, data)


def test_parse_query_returns_model():
    query = parse_query(SemanticQuery, {"tenant_id": "t1", "q": "invoices", "k": 3})
    assert isinstance(query, SemanticQuery)
    assert query.k == 3
    assert query.recall_k == 5


def test_search_query_is_immutable():
    query = SearchQuery(tenant_id="t1", q="invoices")
    with pytest.raises(Exception):
        query.limit = 20

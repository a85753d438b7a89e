"""
Tests for Reciprocal Rank Fusion and fetch window planning.
"""

import pytest

from search_operations.search.hybrid.core.fusion import (
    best_ranks,
    compute_rrf_scores,
    fuse_rankings,
    rank_by_score,
)
from search_operations.search.hybrid.core.window import plan_lexical_window, plan_semantic_window


def test_fused_order_for_overlapping_lists():
    fused = fuse_rankings(["docA", "docB"], ["docB", "docC"], k=60)

    assert [doc_id for doc_id, _ in fused] == ["docB", "docA", "docC"]
    scores = dict(fused)
    assert scores["docA"] == pytest.approx(1 / 61)
    assert scores["docB"] == pytest.approx(1 / 61 + 1 / 62)
    assert scores["docC"] == pytest.approx(1 / 62)


def test_best_rank_per_document():
    ranks = best_ranks(["x", "a", "y", "z", "a", "w", "v", "u", "a"])
    assert ranks["a"] == 2
    assert list(ranks) == ["x", "a", "y", "z", "w", "v", "u"]


def test_repeated_document_contributes_once():
    semantic = ["x", "a", "y", "z", "a", "w", "v", "u", "a"]
    scores = compute_rrf_scores([best_ranks(semantic)], k=60)
    assert scores["a"] == pytest.approx(1 / 62)


def test_adding_semantic_hit_never_decreases_score():
    lexical = best_ranks(["a", "b", "c"])
    without = compute_rrf_scores([lexical], k=60)
    with_semantic = compute_rrf_scores([lexical, best_ranks(["c", "d"])], k=60)

    for doc_id, score in without.items():
        assert with_semantic[doc_id] >= score
    assert with_semantic["c"] > without["c"]


def test_lower_k_favours_top_ranks():
    low = compute_rrf_scores([best_ranks(["a", "b"])], k=1)
    high = compute_rrf_scores([best_ranks(["a", "b"])], k=100)
    assert low["a"] / low["b"] > high["a"] / high["b"]


def test_ties_keep_first_seen_order():
    ranked = rank_by_score({"lex": 0.5, "sem": 0.5, "top": 0.9})
    assert [doc_id for doc_id, _ in ranked] == ["top", "lex", "sem"]


def test_invalid_k_rejected():
    with pytest.raises(ValueError):
        compute_rrf_scores([{"a": 1}], k=0)


@pytest.mark.parametrize("offset", [0, 10, 40])
def test_lexical_window_is_fixed_inside_fusion_window(offset):
    window = plan_lexical_window(offset=offset, limit=10)
    assert (window.offset, window.limit, window.expanded, window.page_start) == (0, 50, True, offset)
    assert window.lexical_page(list(range(50))) == list(range(offset, offset + 10))


def test_lexical_window_past_fusion_window():
    window = plan_lexical_window(offset=45, limit=10)
    assert (window.offset, window.limit, window.expanded, window.page_start) == (45, 10, False, 0)
    assert window.lexical_page(list(range(10))) == list(range(10))


def test_lexical_window_respects_smaller_max_window():
    window = plan_lexical_window(offset=10, limit=10, max_window=20)
    assert (window.offset, window.limit, window.expanded) == (0, 20, True)


@pytest.mark.parametrize("k, recall, expected", [
    (None, None, (50, 50)),
    (5, None, (5, 15)),
    (5, 2, (5, 5)),
    (20, 30, (20, 30)),
    (20, None, (20, 50)),
])
def test_semantic_window_defaults_and_clamping(k, recall, expected):
    window = plan_semantic_window(k, recall)
    assert (window.k, window.recall) == expected


def test_semantic_window_smaller_max_window():
    window = plan_semantic_window(max_window=20)
    assert (window.k, window.recall) == (20, 20)

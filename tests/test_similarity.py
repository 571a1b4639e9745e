import math

import pytest

from kbsearch.domain.errors import DimensionMismatchError
from kbsearch.similarity import cosine_similarity, overlap_cosine, rank


def test_cosine_of_vector_with_itself_is_one():
    v = [0.3, -1.2, 4.0]
    assert cosine_similarity(v, v) == pytest.approx(1.0)


def test_cosine_can_be_negative_for_dense_vectors():
    assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)


def test_cosine_with_zero_norm_is_zero():
    assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0
    assert cosine_similarity([1.0, 2.0], [0.0, 0.0]) == 0.0


def test_cosine_rejects_mixed_dimensions():
    with pytest.raises(DimensionMismatchError):
        cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0])


def test_overlap_cosine_ignores_unshared_terms():
    # Only "b" is shared, so both sides reduce to one positive number.
    score = overlap_cosine([0.5, 0.5], ["a", "b"], [0.1, 0.9], ["b", "c"])
    assert score == pytest.approx(1.0)


def test_overlap_cosine_disjoint_is_exactly_zero():
    score = overlap_cosine([1.0], ["a"], [1.0], ["b"])
    assert score == 0.0
    assert not math.isnan(score)


def test_overlap_cosine_empty_vocabularies():
    assert overlap_cosine([], [], [1.0], ["a"]) == 0.0


def test_overlap_cosine_matches_hand_computation():
    score = overlap_cosine([20 / 21, 1 / 21], ["alpha", "beta"], [1 / 21, 20 / 21], ["alpha", "beta"])
    assert score == pytest.approx(40 / 401)


def test_rank_sorts_descending_and_is_stable():
    ranked = rank([0.5, 0.9, 0.5, 0.9], top_k=10)
    assert ranked == [(1, 0.9), (3, 0.9), (0, 0.5), (2, 0.5)]


def test_rank_filters_before_truncating():
    ranked = rank([0.05, 0.1, 0.2, 0.3], top_k=2, min_score=0.1)
    assert ranked == [(3, 0.3), (2, 0.2)]


def test_rank_threshold_is_exclusive():
    assert rank([0.1], top_k=1, min_score=0.1) == []


@pytest.mark.parametrize("top_k", [0, -1])
def test_rank_non_positive_top_k(top_k):
    assert rank([1.0, 0.5], top_k=top_k) == []


def test_overlap_cosine_parallel_vectors_score_exactly_one():
    # query "health insurance" vs "health insurance covers you": shared terms are
    # parallel, so the score must tie (not trail) single-term matches at 1.0.
    score = overlap_cosine(
        [0.5, 0.5], ["health", "insurance"],
        [0.25, 0.25, 0.25, 0.25], ["health", "insurance", "covers", "you"],
    )
    assert score == 1.0


def test_cosine_parallel_dense_vectors_score_exactly_one():
    assert cosine_similarity([0.5, 0.5, 0.0], [0.25, 0.25, 0.0]) == 1.0

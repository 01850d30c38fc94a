"""Tests for similarity scoring, threshold filtering and source curation."""

import math

import pytest

from vectorspace.vectorstore.similarity import (
    ThresholdPolicy,
    curate_sources,
    distance_to_similarity,
    filter_by_threshold,
)


class TestDistanceToSimilarity:
    """Tests for distance_to_similarity()."""

    @pytest.mark.parametrize(
        "distance,expected",
        [
            (0, 1.0),
            (0.0, 1.0),
            (-0.5, 1.0),
            (0.25, 0.75),
            (0.9, pytest.approx(0.1)),
            (1, 0.0),
            (1.7, 0.0),
        ],
    )
    def test_mapping(self, distance, expected):
        assert distance_to_similarity(distance) == expected

    @pytest.mark.parametrize("bad", [None, "abc", True, False, float("nan"), [0.1]])
    def test_unusable_input_scores_zero(self, bad):
        assert distance_to_similarity(bad) == 0.0

    def test_numeric_string_is_parsed(self):
        assert distance_to_similarity("0.4") == pytest.approx(0.6)

    def test_monotonically_non_increasing(self):
        distances = [-1.0, 0.0, 0.1, 0.3, 0.5, 0.99, 1.0, 2.0, 10.0]
        scores = [distance_to_similarity(d) for d in distances]
        assert all(a >= b for a, b in zip(scores, scores[1:]))

    def test_result_always_in_unit_interval(self):
        for d in (-math.inf, -3.0, 0.5, 3.0, math.inf):
            assert 0.0 <= distance_to_similarity(d) <= 1.0


def _rows(*scores):
    return [{"id": f"r{i}", "metadata": {"text": f"t{i}"}, "score": s} for i, s in enumerate(scores)]


class TestFilterByThreshold:
    """Tests for filter_by_threshold()."""

    @pytest.mark.parametrize("policy", list(ThresholdPolicy))
    def test_all_above(self, policy):
        rows = _rows(0.9, 0.8, 0.7)
        assert filter_by_threshold(rows, 0.5, policy) == rows

    @pytest.mark.parametrize("policy", list(ThresholdPolicy))
    def test_all_below(self, policy):
        assert filter_by_threshold(_rows(0.3, 0.2), 0.5, policy) == []

    @pytest.mark.parametrize("policy", list(ThresholdPolicy))
    def test_exactly_at_threshold_is_kept(self, policy):
        rows = _rows(0.25)
        assert filter_by_threshold(rows, 0.25, policy) == rows

    def test_collect_skips_gaps(self):
        rows = _rows(0.9, 0.1, 0.8)
        kept = filter_by_threshold(rows, 0.5, ThresholdPolicy.COLLECT)
        assert [r["id"] for r in kept] == ["r0", "r2"]

    def test_truncate_stops_at_first_miss(self):
        rows = _rows(0.9, 0.1, 0.8)
        kept = filter_by_threshold(rows, 0.5, ThresholdPolicy.TRUNCATE)
        assert [r["id"] for r in kept] == ["r0"]

    def test_default_policy_is_collect(self):
        rows = _rows(0.1, 0.9)
        assert [r["id"] for r in filter_by_threshold(rows, 0.5)] == ["r1"]

    def test_preserves_order(self):
        rows = _rows(0.6, 0.95, 0.7)
        assert filter_by_threshold(rows, 0.5) == rows


class TestCurateSources:
    """Tests for curate_sources()."""

    def test_empty_metadata_is_dropped(self):
        rows = [
            {"id": "a", "metadata": {}, "score": 0.8},
            {"id": "b", "metadata": {"topic": "x"}, "score": 0.8},
        ]
        texts, sources = curate_sources(rows)

        assert len(sources) == 1
        assert sources[0]["topic"] == "x"
        assert texts == [""]

    def test_source_carries_text_and_score(self):
        rows = [{"id": "a", "metadata": {"text": "hello", "title": "doc"}, "score": 0.6}]
        texts, sources = curate_sources(rows)

        assert texts == ["hello"]
        assert sources == [{"text": "hello", "title": "doc", "score": 0.6}]

    def test_none_metadata_is_dropped(self):
        texts, sources = curate_sources([{"id": "a", "metadata": None, "score": 1.0}])
        assert texts == []
        assert sources == []

    def test_texts_and_sources_aligned(self):
        rows = [
            {"id": "a", "metadata": {"text": "one"}, "score": 0.9},
            {"id": "b", "metadata": {}, "score": 0.85},
            {"id": "c", "metadata": {"text": "three"}, "score": 0.8},
        ]
        texts, sources = curate_sources(rows)
        assert texts == [s["text"] for s in sources] == ["one", "three"]

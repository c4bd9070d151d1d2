"""
Set score parsing, validation and storage format tests.
"""

import json

import pytest

from clubrank.utils.exceptions import InvalidScoreFormatError
from clubrank.utils.set_scores import (
    SetScore, deserialize_set_scores, format_score_summary, parse_set_scores, serialize_set_scores
)


class TestParseSetScores:
    def test_accepts_pairs(self):
        assert parse_set_scores([(6, 4), (3, 6), (7, 5)]) == (
            SetScore(6, 4), SetScore(3, 6), SetScore(7, 5)
        )

    def test_accepts_mappings_in_either_key_style(self):
        sets = parse_set_scores([{"score_a": 6, "score_b": 2}, {"scoreA": 4, "scoreB": 6}])
        assert sets == (SetScore(6, 2), SetScore(4, 6))

    def test_accepts_set_score_objects(self):
        assert parse_set_scores([SetScore(20, 18)]) == (SetScore(20, 18),)

    def test_bounds_are_inclusive(self):
        assert parse_set_scores([(0, 20)]) == (SetScore(0, 20),)

    @pytest.mark.parametrize("raw", [
        [],
        None,
        "6-4 6-3",
        {"score_a": 6, "score_b": 4},
        [(6, 4)] * 6,
        [(21, 19)],
        [(-1, 6)],
        [(6.5, 4)],
        [(True, 4)],
        [("6", "4")],
        [(6, 4, 2)],
        [{"score_a": 6}],
        [6, 4],
        42,
    ])
    def test_rejects_malformed(self, raw):
        with pytest.raises(InvalidScoreFormatError):
            parse_set_scores(raw)

    def test_error_names_the_violation(self):
        with pytest.raises(InvalidScoreFormatError) as exc_info:
            parse_set_scores([(6, 4)] * 6)
        assert "at most 5" in str(exc_info.value)


class TestStorageFormat:
    def test_serialized_form_is_list_of_objects(self):
        stored = serialize_set_scores(parse_set_scores([(6, 4), (7, 6)]))
        assert json.loads(stored) == [
            {"score_a": 6, "score_b": 4},
            {"score_a": 7, "score_b": 6},
        ]

    def test_deserialize_restores_sets(self):
        sets = parse_set_scores([(6, 1), (2, 6), (10, 8)])
        assert deserialize_set_scores(serialize_set_scores(sets)) == sets

    def test_deserialize_rejects_garbage(self):
        with pytest.raises(InvalidScoreFormatError):
            deserialize_set_scores("[6,4")


def test_score_summary():
    assert format_score_summary(parse_set_scores([(6, 4), (3, 6), (7, 5)])) == "6-4, 3-6, 7-5"

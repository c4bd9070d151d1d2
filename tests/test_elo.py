"""
Rating model tests: expected score, K-factor policy and delta computation.
"""

import pytest
from hypothesis import given, strategies as st

from clubrank.config import Config
from clubrank.utils.elo import EloCalculator
from clubrank.utils.exceptions import InvalidScoreError


ratings = st.floats(min_value=0, max_value=3000, allow_nan=False, allow_infinity=False)
k_factors = st.sampled_from([
    Config.K_FACTOR_PROVISIONAL, Config.K_FACTOR_STANDARD, Config.K_FACTOR_MASTER
])
outcomes = st.sampled_from([(1.0, 0.0), (0.0, 1.0), (0.5, 0.5)])


class TestExpectedScore:
    def test_equal_ratings_give_half(self):
        assert EloCalculator.calculate_expected_score(1500, 1500) == pytest.approx(0.5)

    def test_higher_rating_expects_more(self):
        assert EloCalculator.calculate_expected_score(1300, 1200) > 0.5

    def test_known_value(self):
        assert EloCalculator.calculate_expected_score(1200, 1300) == pytest.approx(0.3599, abs=1e-4)

    def test_400_point_gap(self):
        assert EloCalculator.calculate_expected_score(1400, 1000) == pytest.approx(10 / 11, abs=1e-9)

    @given(ratings, ratings)
    def test_symmetric(self, a, b):
        total = EloCalculator.calculate_expected_score(a, b) + EloCalculator.calculate_expected_score(b, a)
        assert total == pytest.approx(1.0, abs=1e-9)

    @given(ratings, ratings)
    def test_strictly_between_zero_and_one(self, a, b):
        assert 0.0 < EloCalculator.calculate_expected_score(a, b) < 1.0


class TestKFactor:
    @pytest.mark.parametrize("rating, games, expected", [
        (1200, 0, 40),
        (1200, 29, 40),
        (2600, 29, 40),   # provisional wins over master
        (1200, 30, 32),
        (2399.9, 100, 32),
        (2400, 30, 16),
        (2800, 500, 16),
    ])
    def test_tiers(self, rating, games, expected):
        assert EloCalculator.get_k_factor(rating, games) == expected

    def test_match_uses_minimum(self):
        assert EloCalculator.get_match_k_factor(1200, 45, 1300, 10) == 32
        assert EloCalculator.get_match_k_factor(2500, 100, 1300, 10) == 16
        assert EloCalculator.get_match_k_factor(1300, 1, 1350, 2) == 40


class TestRounding:
    @pytest.mark.parametrize("value, expected", [
        (0.5, 1),
        (-0.5, -1),
        (2.5, 3),
        (-2.5, -3),
        (20.48, 20),
        (-20.48, -20),
        (1.4999, 1),
        (0.0, 0),
    ])
    def test_half_away_from_zero(self, value, expected):
        assert EloCalculator.round_half_away_from_zero(value) == expected


class TestMatchEloChanges:
    def test_example_underdog_win(self):
        # A 1200 (45 games) beats B 1300 (10 games): K = min(32, 40) = 32
        k_factor = EloCalculator.get_match_k_factor(1200, 45, 1300, 10)
        change_a, change_b = EloCalculator.calculate_match_elo_changes(1200, 1300, 1, 0, k_factor)
        assert (change_a, change_b) == (20, -20)
        assert 1200 + change_a == 1220
        assert 1300 + change_b == 1280

    def test_favourite_win_gains_less(self):
        change_a, change_b = EloCalculator.calculate_match_elo_changes(1300, 1200, 1, 0, 32)
        assert change_a == 12
        assert change_b == -12

    def test_draw_between_equals_is_zero(self):
        assert EloCalculator.calculate_match_elo_changes(1500, 1500, 0.5, 0.5, 32) == (0, 0)

    @pytest.mark.parametrize("score_a, score_b", [(1, 1), (0, 0), (1, 0.5), (1.5, -0.5)])
    def test_scores_must_sum_to_one(self, score_a, score_b):
        with pytest.raises(InvalidScoreError):
            EloCalculator.calculate_match_elo_changes(1200, 1200, score_a, score_b, 32)

    @given(ratings, ratings, k_factors, outcomes)
    def test_zero_sum(self, a, b, k_factor, outcome):
        change_a, change_b = EloCalculator.calculate_match_elo_changes(a, b, outcome[0], outcome[1], k_factor)
        assert change_a + change_b == 0

    @given(ratings, ratings, k_factors)
    def test_winner_never_loses_rating(self, a, b, k_factor):
        change_a, _ = EloCalculator.calculate_match_elo_changes(a, b, 1, 0, k_factor)
        assert 0 <= change_a <= k_factor


class TestPreview:
    def test_preview_matches_submission_policy(self):
        preview = EloCalculator.preview_rating_change(1, 1200, 45, 2, 1300, 10, player_a_won=True)
        assert preview.k_factor == 32
        assert preview.player_a.delta == 20
        assert preview.player_a.new_rating == 1220
        assert preview.player_b.new_rating == 1280
        assert preview.for_player(2).delta == -20

    def test_for_player_rejects_outsider(self):
        preview = EloCalculator.preview_rating_change(1, 1200, 45, 2, 1300, 10, player_a_won=False)
        with pytest.raises(KeyError):
            preview.for_player(3)


@pytest.mark.parametrize("change, text", [(20, "+20"), (-20, "-20"), (0, "±0")])
def test_format_elo_change(change, text):
    assert EloCalculator.format_elo_change(change) == text

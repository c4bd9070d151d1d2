import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Tuple

from clubrank.config import Config
from clubrank.constants import RatingConstants
from clubrank.data_models.ratings import PlayerRatingChange, RatingChange
from clubrank.utils.exceptions import InvalidScoreError

class EloCalculator:
    """Handles Elo rating calculations for ladder seasons"""

    @staticmethod
    def calculate_expected_score(rating_a: float, rating_b: float) -> float:
        """
        Calculate the expected score for player A against player B

        Args:
            rating_a: Player A's current rating
            rating_b: Player B's current rating

        Returns:
            Expected score (0.0 to 1.0) for player A
        """
        return 1 / (1 + math.pow(10, (rating_b - rating_a) / RatingConstants.ELO_SCALE))

    @staticmethod
    def get_k_factor(rating: float, matches_played: int) -> int:
        """
        Get the K-factor based on rating and number of matches played

        Provisional players move fastest, masters are stabilized.

        Args:
            rating: Player's current rating
            matches_played: Number of completed matches

        Returns:
            K-factor to use in Elo calculation
        """
        if matches_played < Config.PROVISIONAL_MATCH_COUNT:
            return Config.K_FACTOR_PROVISIONAL
        if rating >= Config.MASTER_RATING_THRESHOLD:
            return Config.K_FACTOR_MASTER
        return Config.K_FACTOR_STANDARD

    @staticmethod
    def get_match_k_factor(player_a_rating: float, player_a_matches: int,
                           player_b_rating: float, player_b_matches: int) -> int:
        """
        Get the single K-factor applied to both players of a match

        The lower of the two players' K-factors is used, so a provisional
        opponent cannot move an established player faster than that player's
        own tier allows.
        """
        return min(
            EloCalculator.get_k_factor(player_a_rating, player_a_matches),
            EloCalculator.get_k_factor(player_b_rating, player_b_matches)
        )

    @staticmethod
    def round_half_away_from_zero(value: float) -> int:
        """Round to the nearest integer, with .5 rounded away from zero"""
        return int(Decimal(value).quantize(Decimal('1'), rounding=ROUND_HALF_UP))

    @staticmethod
    def calculate_match_elo_changes(rating_a: float, rating_b: float,
                                    score_a: float, score_b: float,
                                    k_factor: int) -> Tuple[int, int]:
        """
        Calculate Elo changes for both players in a match

        Args:
            rating_a: Player A's current rating
            rating_b: Player B's current rating
            score_a: Actual score for A (1.0 win, 0.5 draw, 0.0 loss)
            score_b: Actual score for B
            k_factor: K-factor applied to both players

        Returns:
            Tuple of (player_a_change, player_b_change)

        Raises:
            InvalidScoreError: If the scores do not sum to 1
        """
        if (abs(score_a + score_b - 1) > RatingConstants.SCORE_SUM_TOLERANCE
                or not 0 <= score_a <= 1 or not 0 <= score_b <= 1):
            raise InvalidScoreError(score_a, score_b)

        expected_a = EloCalculator.calculate_expected_score(rating_a, rating_b)
        change_a = EloCalculator.round_half_away_from_zero(k_factor * (score_a - expected_a))

        # Zero-sum: B's change is always the negation of A's
        return change_a, -change_a

    @staticmethod
    def preview_rating_change(player_a_id: int, rating_a: float, matches_a: int,
                              player_b_id: int, rating_b: float, matches_b: int,
                              player_a_won: bool) -> RatingChange:
        """
        Preview the rating change for a hypothetical 1v1 outcome without applying it

        Uses the same K-factor policy as result submission.
        """
        k_factor = EloCalculator.get_match_k_factor(rating_a, matches_a, rating_b, matches_b)
        score_a = 1.0 if player_a_won else 0.0
        change_a, change_b = EloCalculator.calculate_match_elo_changes(
            rating_a, rating_b, score_a, 1.0 - score_a, k_factor
        )
        return RatingChange(
            player_a=PlayerRatingChange(player_a_id, rating_a, rating_a + change_a, change_a),
            player_b=PlayerRatingChange(player_b_id, rating_b, rating_b + change_b, change_b),
            k_factor=k_factor
        )

    @staticmethod
    def format_elo_change(elo_change: int) -> str:
        """Format Elo change for display with an explicit sign"""
        if elo_change > 0:
            return f"+{elo_change}"
        elif elo_change < 0:
            return str(elo_change)
        else:
            return "±0"

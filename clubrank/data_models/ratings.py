"""
Rating data models for the ranking engine.

Provides immutable data transfer objects describing rating changes.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PlayerRatingChange:
    """Rating change for one participant."""
    player_id: int
    old_rating: float
    new_rating: float
    delta: int


@dataclass(frozen=True)
class RatingChange:
    """Rating changes for both participants of a match."""
    player_a: PlayerRatingChange
    player_b: PlayerRatingChange
    k_factor: int

    def for_player(self, player_id: int) -> PlayerRatingChange:
        if self.player_a.player_id == player_id:
            return self.player_a
        if self.player_b.player_id == player_id:
            return self.player_b
        raise KeyError(player_id)

"""
Standings data models for the ranking engine.

Provides immutable data transfer objects for standings inputs, computed
standings rows and promotion/relegation directives.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


@dataclass(frozen=True)
class LadderMember:
    """Ladder member as seen by the standings calculator."""
    player_id: int
    rating: Optional[float]
    matches_played: int = 0


@dataclass(frozen=True)
class BoxMember:
    """Box tier member as seen by the standings calculator."""
    player_id: int
    seed: int


@dataclass(frozen=True)
class CompletedMatch:
    """A played match reduced to what standings need."""
    player_a_id: int
    player_b_id: int
    winner_id: int


@dataclass(frozen=True)
class LadderStats:
    """Stats snapshot for a ladder row."""
    rating: Optional[float]
    matches_played: int


@dataclass(frozen=True)
class BoxStats:
    """Stats snapshot for a box tier row."""
    wins: int
    losses: int
    played: int
    win_percentage: float
    seed: int


@dataclass(frozen=True)
class StandingEntry:
    """Single standings row."""
    player_id: int
    rank: int
    stats: object  # LadderStats or BoxStats


@dataclass(frozen=True)
class TierStandings:
    """Ordered standings for one box tier, top tier first in a season."""
    tier_id: int
    entries: List[StandingEntry]

    @property
    def size(self) -> int:
        return len(self.entries)


class MovementDirection(Enum):
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class MovementDirective:
    """A player moving between adjacent tiers at cycle rollover."""
    player_id: int
    from_tier_id: int
    to_tier_id: int
    direction: MovementDirection

"""
Result data models for the ranking engine.

Provides immutable data transfer objects returned from result submission and
handed to notification listeners.
"""

from dataclasses import dataclass
from typing import Optional

from clubrank.data_models.ratings import RatingChange
from clubrank.database.models import Result


@dataclass(frozen=True)
class ResultRecordedFact:
    """Fact emitted after a result commits, for the notification collaborator."""
    match_id: int
    winner_id: int
    loser_id: int
    score_summary: str
    rating_delta_winner: Optional[int] = None
    rating_delta_loser: Optional[int] = None
    new_rating_winner: Optional[float] = None
    new_rating_loser: Optional[float] = None


@dataclass(frozen=True)
class SubmissionOutcome:
    """What submit_result hands back to the caller."""
    result: Result
    rating_change: Optional[RatingChange]
    fact: ResultRecordedFact
    notification_delivered: bool

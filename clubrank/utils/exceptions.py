"""
Custom exceptions for the ranking engine with caller-friendly error messages.

Every error carries a technical message (for logs) and a user_message that the
calling web layer may show as-is.
"""

class RankingError(Exception):
    """Base exception for ranking engine errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class NotFoundError(RankingError):
    """Raised when a referenced match, player, season, box or ladder does not exist."""
    def __init__(self, entity: str, entity_id):
        super().__init__(
            f"{entity} {entity_id} not found",
            f"{entity} not found."
        )
        self.entity = entity
        self.entity_id = entity_id

class DuplicateResultError(RankingError):
    """Raised when a result already exists for the match.

    Callers may treat this as "already applied".
    """
    def __init__(self, match_id):
        super().__init__(
            f"Match {match_id} already has a result",
            "A result has already been recorded for this match."
        )
        self.match_id = match_id

class MatchStateError(RankingError):
    """Raised when a match is not in a state that accepts a result."""
    def __init__(self, match_id, status: str):
        super().__init__(
            f"Match {match_id} is {status} and cannot accept a result",
            f"This match is {status.lower()} and cannot accept a result."
        )
        self.match_id = match_id
        self.status = status

class InvalidWinnerError(RankingError):
    """Raised when the reported winner is not one of the match's players."""
    def __init__(self, match_id, winner_id):
        super().__init__(
            f"Player {winner_id} is not a participant of match {match_id}",
            "Winner must be one of the match participants."
        )
        self.match_id = match_id
        self.winner_id = winner_id

class InvalidScoreFormatError(RankingError):
    """Raised when reported set scores are empty or malformed."""
    def __init__(self, reason: str):
        super().__init__(
            f"Invalid set scores: {reason}",
            f"Invalid set scores: {reason}"
        )
        self.reason = reason

class InvalidScoreError(RankingError):
    """Raised when match scores passed to the rating model do not sum to one."""
    def __init__(self, score_a: float, score_b: float):
        super().__init__(
            f"Scores must sum to 1, got {score_a} + {score_b}",
            "Scores must sum to 1 (one winner, or 0.5 each for a draw)."
        )
        self.score_a = score_a
        self.score_b = score_b

class InvalidPromotionRuleError(RankingError):
    """Raised when a season's promotion rule cannot be applied to its tiers."""
    def __init__(self, reason: str):
        super().__init__(
            f"Invalid promotion rule: {reason}",
            "Season promotion settings are invalid. Please fix the season configuration."
        )
        self.reason = reason

class ResultTransactionError(RankingError):
    """Raised when the storage transaction for a result fails.

    No result was durably created, so the caller may retry.
    """
    def __init__(self, match_id, details: str = None):
        super().__init__(
            f"Storage error recording result for match {match_id}: {details}",
            "Failed to save the result. Please try again."
        )
        self.match_id = match_id

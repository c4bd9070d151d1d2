"""
Result Operations Module

Records match results and applies the resulting rating changes as one atomic
unit. The Result row, the PENDING -> PLAYED transition, both players' match
counts, both ratings and their history rows commit together or not at all.

At most one Result per Match is enforced by the storage layer (unique
results.match_id) together with a conditional status update, so a concurrent
second submission surfaces as DuplicateResultError instead of a second rating
change.

The conditional status update is the first write of the transaction, so the
write lock is held before player ratings are read. Results for different
matches sharing a player therefore apply one after the other, each from the
rating the previous one committed.
"""

from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from clubrank.config import Config
from clubrank.data_models.ratings import PlayerRatingChange, RatingChange
from clubrank.data_models.results import ResultRecordedFact, SubmissionOutcome
from clubrank.database.models import Match, MatchStatus, Player, RatingHistory, Result
from clubrank.services.notifications import ResultNotifier
from clubrank.utils.elo import EloCalculator
from clubrank.utils.exceptions import (
    DuplicateResultError, InvalidWinnerError, MatchStateError, NotFoundError,
    RankingError, ResultTransactionError
)
from clubrank.utils.logger import setup_logger
from clubrank.utils.set_scores import format_score_summary, parse_set_scores, serialize_set_scores

logger = setup_logger(__name__)


class ResultOperations:
    """
    Atomic result submission for 1v1 matches.

    Validation happens inside the same transaction that writes, against row
    state loaded in that transaction.
    """

    def __init__(self, database, notifier: Optional[ResultNotifier] = None):
        """Initialize with the storage context and an optional result notifier"""
        self.db = database
        self.notifier = notifier or ResultNotifier()
        self.logger = logger

    # ============================================================================
    # Result submission
    # ============================================================================

    async def submit_result(
        self,
        match_id: int,
        winner_id: int,
        set_scores: Iterable[Any],
        reporter_id: int,
        played_at: Optional[datetime] = None
    ) -> SubmissionOutcome:
        """
        Record the result of a match and update ratings for ladder seasons.

        Args:
            match_id: Match being reported
            winner_id: Winning player, must be one of the match's two players
            set_scores: 1-5 set score pairs from player A's perspective
            reporter_id: Caller identity reporting the result, stored for audit only
            played_at: When the match was played; defaults to now

        Returns:
            SubmissionOutcome with the Result, the RatingChange (None outside
            ladder seasons or when a player is unrated) and whether the
            notification was delivered

        Raises:
            NotFoundError: Match does not exist
            DuplicateResultError: Match already has a result
            MatchStateError: Match was cancelled or walked over
            InvalidWinnerError: Winner is not a participant
            InvalidScoreFormatError: Set scores are empty or malformed
            ResultTransactionError: Storage failed; nothing was written
        """
        try:
            async with self.db.transaction() as session:
                match = await self._load_match(session, match_id)
                self._validate_submission(match, match_id, winner_id)
                sets = parse_set_scores(set_scores)

                await self._mark_played(session, match)
                await self._lock_players(session, match)
                rating_change = self._calculate_rating_change(match, winner_id)

                result = Result(
                    match_id=match.id,
                    winner_id=winner_id,
                    sets_json=serialize_set_scores(sets),
                    reported_by_player_id=reporter_id,
                    reported_at=played_at or datetime.now(timezone.utc)
                )
                session.add(result)
                await session.flush()

                self._record_participation(match)
                if rating_change is not None:
                    await self._apply_rating_changes(session, match, rating_change)

        except RankingError:
            raise
        except IntegrityError as e:
            if await self._result_exists(match_id):
                self.logger.warning(f"Concurrent result for Match {match_id} rejected")
                raise DuplicateResultError(match_id) from e
            self.logger.error(f"Integrity error recording result for Match {match_id}: {e}")
            raise ResultTransactionError(match_id, str(e)) from e
        except Exception as e:
            self.logger.error(f"Failed to record result for Match {match_id}, rolled back: {e}")
            raise ResultTransactionError(match_id, str(e)) from e

        self.logger.info(
            f"Recorded result for Match {match_id}: winner {winner_id}, "
            f"sets {format_score_summary(sets)}"
            + (f", K={rating_change.k_factor}" if rating_change else ", unrated")
        )

        fact = self._build_fact(match, winner_id, sets, rating_change)
        delivered = await self._notify(fact)

        return SubmissionOutcome(
            result=result,
            rating_change=rating_change,
            fact=fact,
            notification_delivered=delivered
        )

    async def _load_match(self, session, match_id: int) -> Match:
        result = await session.execute(
            select(Match)
            .options(
                selectinload(Match.player_a),
                selectinload(Match.player_b),
                selectinload(Match.season),
                selectinload(Match.result)
            )
            .where(Match.id == match_id)
        )
        match = result.scalar_one_or_none()
        if match is None:
            raise NotFoundError("Match", match_id)
        return match

    def _validate_submission(self, match: Match, match_id: int, winner_id: int) -> None:
        if match.result is not None:
            raise DuplicateResultError(match_id)
        if match.status != MatchStatus.PENDING:
            raise MatchStateError(match_id, match.status.name)
        if winner_id not in match.player_ids:
            raise InvalidWinnerError(match_id, winner_id)

    async def _lock_players(self, session, match: Match) -> None:
        """Re-read both players under a row lock so ratings are computed from current values"""
        # NOTE: On SQLite, with_for_update() is a no-op; the lock taken by _mark_played covers these rows.
        await session.execute(
            select(Player)
            .where(Player.id.in_(match.player_ids))
            .order_by(Player.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )

    def _calculate_rating_change(self, match: Match, winner_id: int) -> Optional[RatingChange]:
        """Elo change for ladder seasons where both players are rated, else None"""
        if not match.season.is_ladder:
            return None

        player_a, player_b = match.player_a, match.player_b
        if player_a.rating is None or player_b.rating is None:
            self.logger.info(f"Match {match.id} has an unrated player; ratings unchanged")
            return None

        k_factor = EloCalculator.get_match_k_factor(
            player_a.rating, player_a.matches_played,
            player_b.rating, player_b.matches_played
        )
        score_a = 1.0 if winner_id == player_a.id else 0.0
        change_a, change_b = EloCalculator.calculate_match_elo_changes(
            player_a.rating, player_b.rating, score_a, 1.0 - score_a, k_factor
        )

        return RatingChange(
            player_a=PlayerRatingChange(player_a.id, player_a.rating, player_a.rating + change_a, change_a),
            player_b=PlayerRatingChange(player_b.id, player_b.rating, player_b.rating + change_b, change_b),
            k_factor=k_factor
        )

    async def _mark_played(self, session, match: Match) -> None:
        """Conditional PENDING -> PLAYED transition; first write, so it takes the write lock"""
        updated = await session.execute(
            update(Match)
            .where(Match.id == match.id, Match.status == MatchStatus.PENDING)
            .values(status=MatchStatus.PLAYED)
        )
        if updated.rowcount != 1:
            # Another submission moved the match out of PENDING first
            raise DuplicateResultError(match.id)

    def _record_participation(self, match: Match) -> None:
        match.player_a.matches_played += 1
        match.player_b.matches_played += 1

    async def _apply_rating_changes(self, session, match: Match, rating_change: RatingChange) -> None:
        """Write both new ratings and their history rows"""
        now = datetime.now(timezone.utc)
        for player in (match.player_a, match.player_b):
            change = rating_change.for_player(player.id)
            player.rating = change.new_rating

            if not Config.RATING_MIN <= change.new_rating <= Config.RATING_MAX:
                self.logger.warning(
                    f"Player {player.id} rating {change.new_rating} is outside "
                    f"[{Config.RATING_MIN}, {Config.RATING_MAX}]"
                )

            session.add(RatingHistory(
                player_id=player.id,
                match_id=match.id,
                season_id=match.season_id,
                opponent_id=match.opponent_of(player.id),
                old_rating=change.old_rating,
                new_rating=change.new_rating,
                rating_change=change.delta,
                k_factor=rating_change.k_factor,
                recorded_at=now
            ))
        await session.flush()

    async def _result_exists(self, match_id: int) -> bool:
        async with self.db.get_session() as session:
            existing = await session.scalar(select(Result.id).where(Result.match_id == match_id))
            return existing is not None

    # ============================================================================
    # Notification
    # ============================================================================

    def _build_fact(self, match: Match, winner_id: int, sets,
                    rating_change: Optional[RatingChange]) -> ResultRecordedFact:
        loser_id = match.opponent_of(winner_id)
        if rating_change is None:
            return ResultRecordedFact(
                match_id=match.id,
                winner_id=winner_id,
                loser_id=loser_id,
                score_summary=format_score_summary(sets)
            )
        winner_change = rating_change.for_player(winner_id)
        loser_change = rating_change.for_player(loser_id)
        return ResultRecordedFact(
            match_id=match.id,
            winner_id=winner_id,
            loser_id=loser_id,
            score_summary=format_score_summary(sets),
            rating_delta_winner=winner_change.delta,
            rating_delta_loser=loser_change.delta,
            new_rating_winner=winner_change.new_rating,
            new_rating_loser=loser_change.new_rating
        )

    async def _notify(self, fact: ResultRecordedFact) -> bool:
        """Best-effort delivery after commit; never raises"""
        try:
            delivered = await self.notifier.publish(fact)
        except Exception as e:
            self.logger.error(f"Result notification for Match {fact.match_id} failed: {e}")
            return False
        if not delivered:
            self.logger.warning(f"Result for Match {fact.match_id} recorded but notification was not delivered")
        return delivered

    # ============================================================================
    # Queries
    # ============================================================================

    async def preview_result(self, match_id: int, winner_id: int) -> Optional[RatingChange]:
        """
        Preview the rating change a result would cause, without recording it.

        Returns None where submission would not change ratings.
        """
        async with self.db.get_session() as session:
            match = await self._load_match(session, match_id)
            if winner_id not in match.player_ids:
                raise InvalidWinnerError(match_id, winner_id)
            if not match.season.is_ladder or match.player_a.rating is None or match.player_b.rating is None:
                return None
            return EloCalculator.preview_rating_change(
                match.player_a.id, match.player_a.rating, match.player_a.matches_played,
                match.player_b.id, match.player_b.rating, match.player_b.matches_played,
                player_a_won=(winner_id == match.player_a.id)
            )

    async def get_match(self, match_id: int) -> Optional[Match]:
        """Retrieve a Match with players and result loaded"""
        async with self.db.get_session() as session:
            result = await session.execute(
                select(Match)
                .options(
                    selectinload(Match.player_a),
                    selectinload(Match.player_b),
                    selectinload(Match.result)
                )
                .where(Match.id == match_id)
            )
            return result.scalar_one_or_none()

    async def get_result(self, match_id: int) -> Optional[Result]:
        async with self.db.get_session() as session:
            return await session.scalar(select(Result).where(Result.match_id == match_id))

    async def get_pending_matches(self, season_id: int, limit: int = 50) -> List[Match]:
        """Pending matches for a season, oldest first"""
        async with self.db.get_session() as session:
            result = await session.execute(
                select(Match)
                .where(Match.season_id == season_id, Match.status == MatchStatus.PENDING)
                .order_by(Match.id)
                .limit(limit)
            )
            return list(result.scalars().all())

    async def get_rating_history(self, player_id: int, limit: int = 20) -> List[RatingHistory]:
        """Most recent rating changes for a player, newest first"""
        async with self.db.get_session() as session:
            result = await session.execute(
                select(RatingHistory)
                .where(RatingHistory.player_id == player_id)
                .order_by(RatingHistory.id.desc())
                .limit(limit)
            )
            return list(result.scalars().all())

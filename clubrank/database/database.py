from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from clubrank.config import Config
from clubrank.database.models import (
    Base, Club, Player, Season, SeasonType, LadderMembership,
    Box, BoxMembership, PromotionRule, Match, MatchStatus
)
from clubrank.utils.exceptions import NotFoundError
from clubrank.utils.logger import setup_logger

class Database:
    """
    Storage context for the ranking engine.

    Constructed explicitly and passed to the operations and services that need
    it; nothing in the engine reaches for a module-level connection.
    """

    def __init__(self, database_url: Optional[str] = None, echo: Optional[bool] = None):
        self.logger = setup_logger(__name__)
        self.database_url = database_url or Config.get_async_database_url()
        self.echo = Config.DEBUG if echo is None else echo
        self.engine = None
        self.async_session = None

    async def initialize(self):
        """Initialize the database connection and create tables"""
        self.logger.info("Initializing database...")

        self.engine = create_async_engine(
            self.database_url,
            echo=self.echo,
            future=True
        )

        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        self.logger.info("Database initialized successfully")

    @asynccontextmanager
    async def get_session(self):
        """Get a database session for reads; the caller commits if it writes"""
        async with self.async_session() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    @asynccontextmanager
    async def transaction(self):
        """
        Create a transaction boundary for atomic operations.

        Everything done with the yielded session commits together when the
        block exits normally, or rolls back together when it raises.

        Usage:
            async with db.transaction() as session:
                session.add(result)
                player.rating = new_rating
                # All changes commit together here

        Exceptions must be allowed to propagate out of the context for
        rollback to occur.
        """
        async with self.async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def close(self):
        """Close the database connection"""
        if self.engine:
            await self.engine.dispose()

    # ============================================================================
    # Club and player setup (used by the club-management layer)
    # ============================================================================

    async def create_club(self, name: str) -> Club:
        async with self.transaction() as session:
            club = Club(name=name)
            session.add(club)
            await session.flush()
            self.logger.info(f"Created club {club.id} '{name}'")
            return club

    async def create_player(self, club_id: int, name: str, email: str = None,
                            rating: Optional[float] = Config.DEFAULT_RATING,
                            matches_played: int = 0) -> Player:
        """Create a player. Pass rating=None for an unrated player."""
        if rating is not None and not Config.RATING_MIN <= rating <= Config.RATING_MAX:
            raise ValueError(
                f"Rating {rating} outside [{Config.RATING_MIN}, {Config.RATING_MAX}]"
            )
        async with self.transaction() as session:
            if await session.get(Club, club_id) is None:
                raise NotFoundError("Club", club_id)
            player = Player(
                club_id=club_id,
                name=name,
                email=email,
                rating=rating,
                matches_played=matches_played
            )
            session.add(player)
            await session.flush()
            return player

    async def get_player(self, player_id: int) -> Optional[Player]:
        async with self.get_session() as session:
            return await session.get(Player, player_id)

    # ============================================================================
    # Season structure
    # ============================================================================

    async def create_season(self, club_id: int, name: str, season_type: SeasonType) -> Season:
        async with self.transaction() as session:
            if await session.get(Club, club_id) is None:
                raise NotFoundError("Club", club_id)
            season = Season(club_id=club_id, name=name, season_type=season_type)
            session.add(season)
            await session.flush()
            self.logger.info(f"Created {season_type.value} season {season.id} '{name}'")
            return season

    async def get_season(self, season_id: int) -> Optional[Season]:
        async with self.get_session() as session:
            return await session.get(Season, season_id)

    async def add_ladder_member(self, season_id: int, player_id: int) -> LadderMembership:
        async with self.transaction() as session:
            season = await session.get(Season, season_id)
            if season is None:
                raise NotFoundError("Season", season_id)
            if season.season_type != SeasonType.LADDER:
                raise ValueError(f"Season {season_id} is not a ladder season")
            if await session.get(Player, player_id) is None:
                raise NotFoundError("Player", player_id)
            membership = LadderMembership(season_id=season_id, player_id=player_id)
            session.add(membership)
            await session.flush()
            return membership

    async def create_box(self, season_id: int, name: str, position: int) -> Box:
        async with self.transaction() as session:
            season = await session.get(Season, season_id)
            if season is None:
                raise NotFoundError("Season", season_id)
            if season.season_type != SeasonType.BOX:
                raise ValueError(f"Season {season_id} is not a box season")
            box = Box(season_id=season_id, name=name, position=position)
            session.add(box)
            await session.flush()
            return box

    async def add_box_member(self, box_id: int, player_id: int, seed: int = 0) -> BoxMembership:
        async with self.transaction() as session:
            if await session.get(Box, box_id) is None:
                raise NotFoundError("Box", box_id)
            if await session.get(Player, player_id) is None:
                raise NotFoundError("Player", player_id)
            membership = BoxMembership(box_id=box_id, player_id=player_id, seed=seed)
            session.add(membership)
            await session.flush()
            return membership

    async def set_promotion_rule(self, season_id: int, up_count: int, down_count: int) -> PromotionRule:
        """Create or replace the season's promotion rule"""
        async with self.transaction() as session:
            if await session.get(Season, season_id) is None:
                raise NotFoundError("Season", season_id)
            rule = await session.scalar(
                select(PromotionRule).where(PromotionRule.season_id == season_id)
            )
            if rule is None:
                rule = PromotionRule(season_id=season_id)
                session.add(rule)
            rule.up_count = up_count
            rule.down_count = down_count
            await session.flush()
            return rule

    # ============================================================================
    # Matches
    # ============================================================================

    async def create_match(self, season_id: int, player_a_id: int, player_b_id: int,
                           box_id: Optional[int] = None,
                           scheduled_at: Optional[datetime] = None) -> Match:
        """Create a PENDING match between two distinct players"""
        if player_a_id == player_b_id:
            raise ValueError("Players must be different")
        async with self.transaction() as session:
            if await session.get(Season, season_id) is None:
                raise NotFoundError("Season", season_id)
            if box_id is not None:
                box = await session.get(Box, box_id)
                if box is None or box.season_id != season_id:
                    raise NotFoundError("Box", box_id)
            for player_id in (player_a_id, player_b_id):
                if await session.get(Player, player_id) is None:
                    raise NotFoundError("Player", player_id)
            match = Match(
                season_id=season_id,
                box_id=box_id,
                player_a_id=player_a_id,
                player_b_id=player_b_id,
                status=MatchStatus.PENDING,
                scheduled_at=scheduled_at
            )
            session.add(match)
            await session.flush()
            return match

    async def get_matches_for_season(self, season_id: int,
                                     status: Optional[MatchStatus] = None) -> List[Match]:
        async with self.get_session() as session:
            query = select(Match).where(Match.season_id == season_id)
            if status is not None:
                query = query.where(Match.status == status)
            result = await session.execute(query.order_by(Match.id))
            return list(result.scalars().all())

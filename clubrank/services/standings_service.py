"""
Standings Service

Storage-backed entry points for ladder and box standings and for box season
promotion/relegation. Loads members and played matches in one read session,
then hands plain data to StandingsCalculator and PromotionEngine.

Takes no locks: the caller keeps result submission quiet for a season while
computing its rollover.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from clubrank.data_models.standings import (
    BoxMember, CompletedMatch, LadderMember, MovementDirective, StandingEntry, TierStandings
)
from clubrank.database.models import (
    Box, BoxMembership, LadderMembership, Match, MatchStatus, PromotionRule, Season, SeasonType
)
from clubrank.operations.promotion import PromotionEngine
from clubrank.operations.standings import StandingsCalculator
from clubrank.services.base import BaseService
from clubrank.utils.exceptions import InvalidPromotionRuleError, NotFoundError

logger = logging.getLogger(__name__)

class StandingsService(BaseService):
    """Computes standings and promotion directives from stored results."""

    LADDER = "ladder"
    BOX = "box"

    async def compute_standings(self, kind: str, target_id: int) -> List[StandingEntry]:
        """
        Compute standings for a ladder season or a single box.

        Args:
            kind: "ladder" (target_id is a season id) or "box" (target_id is a box id)
            target_id: Season or box id

        Returns:
            Ordered standing entries, rank 1 first
        """
        if kind == self.LADDER:
            return await self.compute_ladder_standings(target_id)
        if kind == self.BOX:
            return await self.compute_box_standings(target_id)
        raise ValueError(f"Unknown standings kind: {kind}")

    async def compute_ladder_standings(self, season_id: int) -> List[StandingEntry]:
        async def load():
            async with self.get_session() as session:
                season = await session.get(Season, season_id)
                if season is None or season.season_type != SeasonType.LADDER:
                    raise NotFoundError("Ladder season", season_id)

                result = await session.execute(
                    select(LadderMembership)
                    .options(selectinload(LadderMembership.player))
                    .where(LadderMembership.season_id == season_id)
                )
                return [
                    LadderMember(
                        player_id=membership.player_id,
                        rating=membership.rating,
                        matches_played=membership.player.matches_played
                    )
                    for membership in result.scalars().all()
                ]

        members = await self.execute_with_retry(load)
        standings = StandingsCalculator.ladder_standings(members)
        logger.info(f"Computed ladder standings for season {season_id} ({len(standings)} players)")
        return standings

    async def compute_box_standings(self, box_id: int) -> List[StandingEntry]:
        async def load():
            async with self.get_session() as session:
                box = await session.get(Box, box_id)
                if box is None:
                    raise NotFoundError("Box", box_id)
                return await self._load_box_inputs(session, box_id)

        members, matches = await self.execute_with_retry(load)
        standings = StandingsCalculator.box_standings(members, matches)
        logger.info(f"Computed box standings for box {box_id} ({len(standings)} players)")
        return standings

    async def compute_promotions(self, season_id: int,
                                 rule: Optional[PromotionRule] = None) -> List[MovementDirective]:
        """
        Compute promotion/relegation directives for a box season.

        Args:
            season_id: Box season to roll over
            rule: Optional rule overriding the season's stored PromotionRule

        Returns:
            Movement directives; applying them is the caller's responsibility

        Raises:
            NotFoundError: Season missing or not a box season
            InvalidPromotionRuleError: No rule configured, or rule does not fit the tiers
        """
        async def load():
            async with self.get_session() as session:
                season = await session.get(Season, season_id)
                if season is None or season.season_type != SeasonType.BOX:
                    raise NotFoundError("Box season", season_id)

                stored_rule = rule or await session.scalar(
                    select(PromotionRule).where(PromotionRule.season_id == season_id)
                )
                if stored_rule is None:
                    raise InvalidPromotionRuleError(f"season {season_id} has no promotion rule")

                boxes = await session.execute(
                    select(Box).where(Box.season_id == season_id).order_by(Box.position)
                )
                tiers = []
                for box in boxes.scalars().all():
                    members, matches = await self._load_box_inputs(session, box.id)
                    tiers.append(TierStandings(
                        tier_id=box.id,
                        entries=StandingsCalculator.box_standings(members, matches)
                    ))
                return stored_rule.up_count, stored_rule.down_count, tiers

        up_count, down_count, tiers = await self.execute_with_retry(load)
        directives = PromotionEngine(up_count, down_count).compute_movements(tiers)
        logger.info(f"Computed {len(directives)} promotion directives for season {season_id}")
        return directives

    async def _load_box_inputs(self, session, box_id: int):
        memberships = await session.execute(
            select(BoxMembership).where(BoxMembership.box_id == box_id)
        )
        members = [
            BoxMember(player_id=m.player_id, seed=m.seed)
            for m in memberships.scalars().all()
        ]

        played = await session.execute(
            select(Match)
            .options(selectinload(Match.result))
            .where(Match.box_id == box_id, Match.status == MatchStatus.PLAYED)
        )
        matches = [
            CompletedMatch(
                player_a_id=match.player_a_id,
                player_b_id=match.player_b_id,
                winner_id=match.result.winner_id
            )
            for match in played.scalars().all()
            if match.result is not None
        ]
        return members, matches

"""
Foundation tests: configuration, database initialization and setup helpers.
"""

import logging

import pytest
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from clubrank.config import Config
from clubrank.database.database import Database
from clubrank.database.models import LadderMembership, MatchStatus, SeasonType
from clubrank.utils.exceptions import NotFoundError
from clubrank.utils.logger import setup_logger


class TestConfig:
    def test_rating_defaults(self):
        assert Config.DEFAULT_RATING == 1200.0
        assert (Config.RATING_MIN, Config.RATING_MAX) == (0.0, 3000.0)

    def test_k_factor_defaults(self):
        assert Config.K_FACTOR_PROVISIONAL == 40
        assert Config.K_FACTOR_STANDARD == 32
        assert Config.K_FACTOR_MASTER == 16
        assert Config.PROVISIONAL_MATCH_COUNT == 30
        assert Config.MASTER_RATING_THRESHOLD == 2400

    def test_async_url_conversion(self, monkeypatch):
        monkeypatch.setattr(Config, "DATABASE_URL", "sqlite:///ranking.db")
        assert Config.get_async_database_url() == "sqlite+aiosqlite:///ranking.db"

    def test_validate_rejects_default_outside_range(self, monkeypatch):
        Config.validate()
        monkeypatch.setattr(Config, "DEFAULT_RATING", 3500.0)
        with pytest.raises(ValueError):
            Config.validate()


class TestDatabaseSetup:
    async def test_initialize_creates_schema(self, tmp_path):
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'fresh.db'}")
        await database.initialize()
        try:
            club = await database.create_club("Hillside")
            assert club.id is not None
        finally:
            await database.close()

    async def test_player_defaults(self, db, club):
        player = await db.create_player(club.id, "Erin")
        assert player.rating == Config.DEFAULT_RATING
        assert player.matches_played == 0
        assert player.is_provisional

    async def test_player_rating_range_enforced(self, db, club):
        with pytest.raises(ValueError):
            await db.create_player(club.id, "Frank", rating=-5.0)

    async def test_player_requires_club(self, db):
        with pytest.raises(NotFoundError):
            await db.create_player(999, "Ghost")

    async def test_ladder_membership_reads_player_rating(self, db, ladder):
        async with db.get_session() as session:
            memberships = (await session.execute(
                select(LadderMembership).options(selectinload(LadderMembership.player))
            )).scalars().all()
        assert {m.player_id: m.rating for m in memberships}[ladder.bob.id] == 1300.0

    async def test_ladder_membership_requires_ladder_season(self, db, club, box_season):
        player = await db.create_player(club.id, "Hana")
        with pytest.raises(ValueError):
            await db.add_ladder_member(box_season.season.id, player.id)

    async def test_box_requires_box_season(self, db, ladder):
        with pytest.raises(ValueError):
            await db.create_box(ladder.season.id, "Box 1", 0)

    async def test_match_between_same_player_rejected(self, db, ladder):
        with pytest.raises(ValueError):
            await db.create_match(ladder.season.id, ladder.alice.id, ladder.alice.id)

    async def test_match_box_must_belong_to_season(self, db, ladder, box_season):
        with pytest.raises(NotFoundError):
            await db.create_match(ladder.season.id, ladder.alice.id, ladder.bob.id, box_id=box_season.top.id)

    async def test_new_match_is_pending(self, db, ladder):
        matches = await db.get_matches_for_season(ladder.season.id)
        assert [m.status for m in matches] == [MatchStatus.PENDING]
        assert (await db.get_season(ladder.season.id)).season_type == SeasonType.LADDER

    async def test_promotion_rule_upsert(self, db, box_season):
        await db.set_promotion_rule(box_season.season.id, 1, 1)
        rule = await db.set_promotion_rule(box_season.season.id, 2, 0)
        assert (rule.up_count, rule.down_count) == (2, 0)


class TestLogging:
    def test_handlers_attached_once_on_package_logger(self):
        first = setup_logger("clubrank.database.result_operations")
        setup_logger("clubrank.operations.promotion")

        package_logger = logging.getLogger("clubrank")
        assert first.handlers == []
        assert first.propagate
        consoles = [h for h in package_logger.handlers if type(h) is logging.StreamHandler]
        assert len(consoles) == 1

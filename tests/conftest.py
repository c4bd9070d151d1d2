"""Pytest configuration and fixtures."""

from types import SimpleNamespace

import pytest
import pytest_asyncio

from clubrank.database.database import Database
from clubrank.database.models import SeasonType
from clubrank.database.result_operations import ResultOperations
from clubrank.services.notifications import ResultNotifier
from clubrank.services.standings_service import StandingsService


@pytest_asyncio.fixture
async def db(tmp_path):
    """File-backed SQLite database, fresh per test."""
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'clubrank_test.db'}", echo=False)
    await database.initialize()
    yield database
    await database.close()


@pytest.fixture
def notifier():
    return ResultNotifier(timeout_seconds=0.5)


@pytest.fixture
def result_ops(db, notifier):
    return ResultOperations(db, notifier=notifier)


@pytest.fixture
def standings_service(db):
    return StandingsService(db)


@pytest_asyncio.fixture
async def club(db):
    return await db.create_club("Riverside Tennis Club")


@pytest_asyncio.fixture
async def ladder(db, club):
    """
    Ladder season with Alice (1200, 45 matches) and Bob (1300, 10 matches)
    and one pending match between them.
    """
    season = await db.create_season(club.id, "Spring Ladder", SeasonType.LADDER)
    alice = await db.create_player(club.id, "Alice", rating=1200.0, matches_played=45)
    bob = await db.create_player(club.id, "Bob", rating=1300.0, matches_played=10)
    carol = await db.create_player(club.id, "Carol", rating=1250.0, matches_played=60)
    for player in (alice, bob, carol):
        await db.add_ladder_member(season.id, player.id)
    match = await db.create_match(season.id, alice.id, bob.id)
    return SimpleNamespace(season=season, alice=alice, bob=bob, carol=carol, match=match)


@pytest_asyncio.fixture
async def box_season(db, club):
    """
    Box season with three boxes of four players each, seeded 1-4.

    Box players are named by box and seed: top = T1..T4, middle = M1..M4,
    bottom = B1..B4.
    """
    season = await db.create_season(club.id, "Autumn Boxes", SeasonType.BOX)
    boxes = []
    players = {}
    for position, prefix in enumerate(("T", "M", "B")):
        box = await db.create_box(season.id, f"Box {position + 1}", position)
        boxes.append(box)
        for seed in range(1, 5):
            player = await db.create_player(club.id, f"{prefix}{seed}")
            await db.add_box_member(box.id, player.id, seed=seed)
            players[f"{prefix}{seed}"] = player
    return SimpleNamespace(season=season, top=boxes[0], middle=boxes[1], bottom=boxes[2], players=players)

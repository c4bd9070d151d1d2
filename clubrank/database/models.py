from sqlalchemy import (
    Column, Integer, String, DateTime, Text, Float,
    ForeignKey, Enum as SQLEnum, UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func
from enum import Enum
from typing import Optional, Tuple

from clubrank.config import Config
from clubrank.utils.set_scores import deserialize_set_scores

Base = declarative_base()

class SeasonType(Enum):
    LADDER = "ladder"
    BOX = "box"

class MatchStatus(Enum):
    """Status of a match from creation to completion"""
    PENDING = "pending"      # Created, waiting for a result
    PLAYED = "played"        # Result recorded (terminal)
    WALKOVER = "walkover"    # Set by the club layer, never by result submission
    CANCELLED = "cancelled"  # Set by the club layer, never by result submission

class Club(Base):
    __tablename__ = 'clubs'

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False, unique=True)

    # Metadata
    created_at = Column(DateTime, default=func.now())

    # Relationships
    players = relationship("Player", back_populates="club")
    seasons = relationship("Season", back_populates="club")

    def __repr__(self):
        return f"<Club(id={self.id}, name='{self.name}')>"

class Player(Base):
    __tablename__ = 'players'

    id = Column(Integer, primary_key=True)
    club_id = Column(Integer, ForeignKey('clubs.id'), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)

    # Rating state. NULL rating means unrated; unrated players never get Elo changes.
    # Default rating comes from Database.create_player; None persists as NULL.
    rating = Column(Float, nullable=True)
    matches_played = Column(Integer, nullable=False, default=0)  # Drives K-factor selection only

    # Metadata
    created_at = Column(DateTime, default=func.now())

    # Relationships
    club = relationship("Club", back_populates="players")
    ladder_memberships = relationship("LadderMembership", back_populates="player")
    box_memberships = relationship("BoxMembership", back_populates="player")

    __table_args__ = (
        CheckConstraint('matches_played >= 0', name='non_negative_matches_played'),
    )

    @property
    def is_provisional(self) -> bool:
        return self.matches_played < Config.PROVISIONAL_MATCH_COUNT

    def __repr__(self):
        return f"<Player(id={self.id}, name='{self.name}', rating={self.rating})>"

class Season(Base):
    __tablename__ = 'seasons'

    id = Column(Integer, primary_key=True)
    club_id = Column(Integer, ForeignKey('clubs.id'), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    season_type = Column(SQLEnum(SeasonType), nullable=False)

    # Metadata
    created_at = Column(DateTime, default=func.now())

    # Relationships
    club = relationship("Club", back_populates="seasons")
    ladder_memberships = relationship("LadderMembership", back_populates="season", cascade="all, delete-orphan")
    boxes = relationship("Box", back_populates="season", cascade="all, delete-orphan", order_by="Box.position")
    promotion_rule = relationship("PromotionRule", back_populates="season", uselist=False, cascade="all, delete-orphan")
    matches = relationship("Match", back_populates="season")

    __table_args__ = (UniqueConstraint('club_id', 'name'),)

    @property
    def is_ladder(self) -> bool:
        return self.season_type == SeasonType.LADDER

    def __repr__(self):
        return f"<Season(id={self.id}, name='{self.name}', type={self.season_type.value})>"

class LadderMembership(Base):
    """
    A player's place on a ladder season.

    The ladder rating is the player's rating: there is no second stored copy,
    so the two can never diverge.
    """
    __tablename__ = 'ladder_memberships'

    id = Column(Integer, primary_key=True)
    season_id = Column(Integer, ForeignKey('seasons.id'), nullable=False, index=True)
    player_id = Column(Integer, ForeignKey('players.id'), nullable=False, index=True)
    joined_at = Column(DateTime, default=func.now())

    season = relationship("Season", back_populates="ladder_memberships")
    player = relationship("Player", back_populates="ladder_memberships")

    __table_args__ = (
        UniqueConstraint('season_id', 'player_id', name='unique_player_per_ladder'),
    )

    @property
    def rating(self) -> Optional[float]:
        return self.player.rating

    def __repr__(self):
        return f"<LadderMembership(season_id={self.season_id}, player_id={self.player_id})>"

class Box(Base):
    """An ordered tier within a box season. Position 0 is the top tier."""
    __tablename__ = 'boxes'

    id = Column(Integer, primary_key=True)
    season_id = Column(Integer, ForeignKey('seasons.id'), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    position = Column(Integer, nullable=False)

    season = relationship("Season", back_populates="boxes")
    memberships = relationship("BoxMembership", back_populates="box", cascade="all, delete-orphan")
    matches = relationship("Match", back_populates="box")

    __table_args__ = (
        UniqueConstraint('season_id', 'position', name='unique_box_position_per_season'),
        CheckConstraint('position >= 0', name='non_negative_box_position'),
    )

    def __repr__(self):
        return f"<Box(id={self.id}, name='{self.name}', position={self.position})>"

class BoxMembership(Base):
    __tablename__ = 'box_memberships'

    id = Column(Integer, primary_key=True)
    box_id = Column(Integer, ForeignKey('boxes.id'), nullable=False, index=True)
    player_id = Column(Integer, ForeignKey('players.id'), nullable=False, index=True)
    seed = Column(Integer, nullable=False, default=0)  # Initial order and tie-break only

    box = relationship("Box", back_populates="memberships")
    player = relationship("Player", back_populates="box_memberships")

    __table_args__ = (
        UniqueConstraint('box_id', 'player_id', name='unique_player_per_box'),
    )

    def __repr__(self):
        return f"<BoxMembership(box_id={self.box_id}, player_id={self.player_id}, seed={self.seed})>"

class PromotionRule(Base):
    __tablename__ = 'promotion_rules'

    id = Column(Integer, primary_key=True)
    season_id = Column(Integer, ForeignKey('seasons.id'), nullable=False, unique=True)
    up_count = Column(Integer, nullable=False, default=1)
    down_count = Column(Integer, nullable=False, default=1)

    season = relationship("Season", back_populates="promotion_rule")

    def __repr__(self):
        return f"<PromotionRule(season_id={self.season_id}, up={self.up_count}, down={self.down_count})>"

class Match(Base):
    """A scheduled or played 1v1 match within a season (and optionally a box)."""
    __tablename__ = 'matches'

    id = Column(Integer, primary_key=True)
    season_id = Column(Integer, ForeignKey('seasons.id'), nullable=False, index=True)
    box_id = Column(Integer, ForeignKey('boxes.id'), nullable=True, index=True)
    player_a_id = Column(Integer, ForeignKey('players.id'), nullable=False, index=True)
    player_b_id = Column(Integer, ForeignKey('players.id'), nullable=False, index=True)
    status = Column(SQLEnum(MatchStatus), nullable=False, default=MatchStatus.PENDING)
    scheduled_at = Column(DateTime, nullable=True)

    # Metadata
    created_at = Column(DateTime, default=func.now())

    # Relationships
    season = relationship("Season", back_populates="matches")
    box = relationship("Box", back_populates="matches")
    player_a = relationship("Player", foreign_keys=[player_a_id])
    player_b = relationship("Player", foreign_keys=[player_b_id])
    result = relationship("Result", back_populates="match", uselist=False)

    __table_args__ = (
        CheckConstraint('player_a_id <> player_b_id', name='distinct_match_players'),
    )

    @property
    def player_ids(self) -> Tuple[int, int]:
        return (self.player_a_id, self.player_b_id)

    def opponent_of(self, player_id: int) -> int:
        if player_id == self.player_a_id:
            return self.player_b_id
        if player_id == self.player_b_id:
            return self.player_a_id
        raise ValueError(f"Player {player_id} is not in match {self.id}")

    def __repr__(self):
        return f"<Match(id={self.id}, players=({self.player_a_id}, {self.player_b_id}), status={self.status.value})>"

class Result(Base):
    """The one immutable result of a match."""
    __tablename__ = 'results'

    id = Column(Integer, primary_key=True)
    match_id = Column(Integer, ForeignKey('matches.id'), nullable=False, unique=True)
    winner_id = Column(Integer, ForeignKey('players.id'), nullable=False)
    sets_json = Column(Text, nullable=False)  # JSON list of {"score_a", "score_b"}
    reported_by_player_id = Column(Integer, ForeignKey('players.id'), nullable=False)  # Audit only
    reported_at = Column(DateTime, nullable=False, default=func.now())

    match = relationship("Match", back_populates="result")
    winner = relationship("Player", foreign_keys=[winner_id])
    reported_by = relationship("Player", foreign_keys=[reported_by_player_id])

    @property
    def set_scores(self):
        return deserialize_set_scores(self.sets_json)

    def __repr__(self):
        return f"<Result(match_id={self.match_id}, winner_id={self.winner_id})>"

class RatingHistory(Base):
    """Audit trail of every rating change applied by a result."""
    __tablename__ = 'rating_history'

    id = Column(Integer, primary_key=True)
    player_id = Column(Integer, ForeignKey('players.id'), nullable=False, index=True)
    match_id = Column(Integer, ForeignKey('matches.id'), nullable=False, index=True)
    season_id = Column(Integer, ForeignKey('seasons.id'), nullable=False, index=True)
    opponent_id = Column(Integer, ForeignKey('players.id'), nullable=False)

    old_rating = Column(Float, nullable=False)
    new_rating = Column(Float, nullable=False)
    rating_change = Column(Integer, nullable=False)
    k_factor = Column(Integer, nullable=False)

    recorded_at = Column(DateTime, default=func.now())

    __table_args__ = (
        UniqueConstraint('match_id', 'player_id', name='unique_rating_change_per_match_player'),
    )

    player = relationship("Player", foreign_keys=[player_id])
    opponent = relationship("Player", foreign_keys=[opponent_id])
    match = relationship("Match")

    def __repr__(self):
        return f"<RatingHistory(player_id={self.player_id}, change={self.rating_change}, new_rating={self.new_rating})>"

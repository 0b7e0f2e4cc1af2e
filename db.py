# db.py
import os
from datetime import datetime

from dotenv import load_dotenv
from sqlalchemy import (
    create_engine,
    Column,
    Integer,
    Float,
    String,
    JSON,
    UniqueConstraint,
    DateTime,
)
from sqlalchemy.orm import declarative_base, sessionmaker

load_dotenv()

DB_URL = os.getenv("DB_URL", "sqlite:///pickem.db")

engine = create_engine(DB_URL, future=True, echo=False)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

Base = declarative_base()


class GameResultRow(Base):
    """
    One finalized game. Written once when the feed reports the game as
    final; never updated afterwards.
    """
    __tablename__ = "game_results"

    id = Column(Integer, primary_key=True)
    week = Column(Integer, index=True, nullable=False)
    game_id = Column(String, index=True, nullable=False)
    date = Column(String, nullable=True)

    home_team_id = Column(String, nullable=False)
    home_team_name = Column(String)
    home_team_abbrev = Column(String)
    home_team_color = Column(String, nullable=True)
    home_team_alt_color = Column(String, nullable=True)
    home_score = Column(Float)

    away_team_id = Column(String, nullable=False)
    away_team_name = Column(String)
    away_team_abbrev = Column(String)
    away_team_color = Column(String, nullable=True)
    away_team_alt_color = Column(String, nullable=True)
    away_score = Column(Float)

    # spread that applied when the game went final (nullable: no line set)
    spread_value = Column(Float, nullable=True)
    favored_team = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("week", "game_id", name="uix_game_results_week_game"),
    )


class SpreadRow(Base):
    __tablename__ = "spreads"

    id = Column(Integer, primary_key=True)
    week = Column(Integer, index=True, nullable=False)
    game_id = Column(String, nullable=False)
    value = Column(Float, nullable=True)
    favored_team = Column(String, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("week", "game_id", name="uix_spreads_week_game"),
    )


class Player(Base):
    __tablename__ = "players"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    # {gameId: teamId}
    selections = Column(JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Setting(Base):
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True)
    key = Column(String, nullable=False, unique=True)
    value = Column(String, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class TeamAnalytics(Base):
    """
    Cached output of the season analytics preprocessor, one row per team.
    """
    __tablename__ = "team_analytics"

    id = Column(Integer, primary_key=True)
    team_id = Column(String, nullable=False, unique=True)
    team_info = Column(JSON)
    analytics = Column(JSON)
    metrics = Column(JSON, nullable=True)
    week_start = Column(Integer)
    week_end = Column(Integer)
    last_updated = Column(String)


def init_db():
    Base.metadata.create_all(bind=engine)

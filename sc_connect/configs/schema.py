"""Centralized schema definitions for the tables the background jobs touch.

This module defines column names, types, and table structures in a single place.
The data access layer, the scraper, and the notifiers reference these
definitions so that DataFrames and SQL tables stay consistent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pandas as pd
from sqlalchemy import Column as SqlColumn
from sqlalchemy import DateTime, Integer, MetaData, String, Table

from sc_connect.configs.settings import DatabaseConfig


# =============================================================================
# Column Definitions
# =============================================================================

@dataclass(frozen=True)
class Column:
    """Definition of a single column."""
    name: str
    dtype: str  # pandas dtype string
    nullable: bool = True
    description: str = ""
    max_length: Optional[int] = None


# Sentinel stored when a score cell cannot be parsed
UNPARSED_SCORE = -1
MULTIPLE_OPPONENTS = "Multiple Opponents"


# =============================================================================
# Scheduled Sports Games Table Schema
# =============================================================================

class ScheduledGameColumns:
    """Column definitions for the scheduled sports games table."""
    SPORT_NAME = Column("sport_name", "str", nullable=False, max_length=64,
                        description="Display name of the sport")
    GAME_DATE = Column("game_date", "datetime64[ns]", nullable=False, description="Game start")
    OPPONENT_NAME = Column("opponent_name", "str", nullable=False, max_length=128,
                           description="Opponent or event name")
    LOCATION_NAME = Column("location_name", "str", max_length=64, description="Venue")

    @classmethod
    def all_columns(cls) -> list[Column]:
        return [cls.SPORT_NAME, cls.GAME_DATE, cls.OPPONENT_NAME, cls.LOCATION_NAME]

    @classmethod
    def names(cls) -> list[str]:
        return [col.name for col in cls.all_columns()]

    @classmethod
    def required(cls) -> list[str]:
        return [col.name for col in cls.all_columns() if not col.nullable]


# =============================================================================
# Sports Game Results Table Schema
# =============================================================================

class GameResultColumns:
    """Column definitions for the sports game results table.

    Scores hold UNPARSED_SCORE when the scraped cell had no readable score.
    """
    SPORT_NAME = Column("sport_name", "str", nullable=False, max_length=64,
                        description="Display name of the sport")
    GAME_DATE = Column("game_date", "datetime64[ns]", nullable=False, description="Game date")
    OPPONENT_NAME = Column("opponent_name", "str", nullable=False, max_length=128,
                           description="Opponent or event name")
    OPPONENT_SCORE = Column("opponent_score", "int64", nullable=False, description="Opponent score")
    HOME_SCORE = Column("home_score", "int64", nullable=False, description="Home team score")

    @classmethod
    def all_columns(cls) -> list[Column]:
        return [
            cls.SPORT_NAME, cls.GAME_DATE, cls.OPPONENT_NAME,
            cls.OPPONENT_SCORE, cls.HOME_SCORE,
        ]

    @classmethod
    def names(cls) -> list[str]:
        return [col.name for col in cls.all_columns()]

    @classmethod
    def required(cls) -> list[str]:
        return [col.name for col in cls.all_columns() if not col.nullable]


# =============================================================================
# Events Table Schema
# =============================================================================

class EventColumns:
    """Column definitions for moderator-created events."""
    EVENT_NAME = Column("event_name", "str", nullable=False, max_length=128)
    START_DATE = Column("start_date", "datetime64[ns]", nullable=False)
    END_DATE = Column("end_date", "datetime64[ns]", nullable=False)
    LEADERBOARD_POINTS = Column("leaderboard_points", "int64", nullable=False)
    LOCATION_NAME = Column("location_name", "str", max_length=128)

    @classmethod
    def all_columns(cls) -> list[Column]:
        return [
            cls.EVENT_NAME, cls.START_DATE, cls.END_DATE,
            cls.LEADERBOARD_POINTS, cls.LOCATION_NAME,
        ]

    @classmethod
    def names(cls) -> list[str]:
        return [col.name for col in cls.all_columns()]

    @classmethod
    def required(cls) -> list[str]:
        return [col.name for col in cls.all_columns() if not col.nullable]


# =============================================================================
# Clients Table Schema
# =============================================================================

class ClientColumns:
    """Column definitions for registered devices."""
    DEVICE_UUID = Column("device_uuid", "str", nullable=False, max_length=64)
    PUSH_TOKEN = Column("push_token", "str", max_length=64,
                        description="APNs device token as hex, null until the device registers")

    # APNs device tokens are 32 bytes rendered as hex
    PUSH_TOKEN_LENGTH = 64

    @classmethod
    def all_columns(cls) -> list[Column]:
        return [cls.DEVICE_UUID, cls.PUSH_TOKEN]

    @classmethod
    def names(cls) -> list[str]:
        return [col.name for col in cls.all_columns()]

    @classmethod
    def required(cls) -> list[str]:
        return [col.name for col in cls.all_columns() if not col.nullable]


# =============================================================================
# Schema Registry
# =============================================================================

@dataclass
class TableSchema:
    """Complete schema definition for a table."""
    name: str
    columns: list[Column]
    description: str = ""

    def column_names(self) -> list[str]:
        return [col.name for col in self.columns]

    def required_columns(self) -> list[str]:
        return [col.name for col in self.columns if not col.nullable]

    def dtype_map(self) -> dict[str, str]:
        """Return a mapping of column names to pandas dtypes."""
        return {col.name: col.dtype for col in self.columns}

    def empty_dataframe(self) -> pd.DataFrame:
        """Create an empty DataFrame with the correct columns and dtypes."""
        return pd.DataFrame({col.name: pd.Series(dtype=col.dtype) for col in self.columns})

    def sql_table(self, metadata: MetaData) -> Table:
        """Build the SQLAlchemy table with a surrogate integer primary key."""
        sql_columns = [SqlColumn("id", Integer, primary_key=True, autoincrement=True)]
        for col in self.columns:
            sql_columns.append(
                SqlColumn(col.name, _sql_type(col), nullable=col.nullable)
            )
        return Table(self.name, metadata, *sql_columns)


def _sql_type(col: Column):
    if col.dtype.startswith("datetime"):
        return DateTime()
    if col.dtype.startswith("int"):
        return Integer()
    return String(col.max_length or 255)


# Pre-defined schemas
SCHEDULED_GAMES_SCHEMA = TableSchema(
    name=DatabaseConfig.SCHEDULED_GAMES_TABLE,
    columns=ScheduledGameColumns.all_columns(),
    description="Upcoming games from the latest scrape",
)

GAME_RESULTS_SCHEMA = TableSchema(
    name=DatabaseConfig.GAME_RESULTS_TABLE,
    columns=GameResultColumns.all_columns(),
    description="Finished games from the latest scrape",
)

EVENTS_SCHEMA = TableSchema(
    name=DatabaseConfig.EVENTS_TABLE,
    columns=EventColumns.all_columns(),
    description="School events created by moderators",
)

CLIENTS_SCHEMA = TableSchema(
    name=DatabaseConfig.CLIENTS_TABLE,
    columns=ClientColumns.all_columns(),
    description="Registered devices and their push tokens",
)

ALL_SCHEMAS: list[TableSchema] = [
    SCHEDULED_GAMES_SCHEMA,
    GAME_RESULTS_SCHEMA,
    EVENTS_SCHEMA,
    CLIENTS_SCHEMA,
]


def build_metadata() -> tuple[MetaData, dict[str, Table]]:
    """Return a fresh MetaData holding every table, plus a name -> Table map."""
    metadata = MetaData()
    tables = {schema.name: schema.sql_table(metadata) for schema in ALL_SCHEMAS}
    return metadata, tables


# =============================================================================
# Helper Functions
# =============================================================================

def create_empty_scheduled_games_df() -> pd.DataFrame:
    """Create an empty scheduled games DataFrame with correct schema."""
    return SCHEDULED_GAMES_SCHEMA.empty_dataframe()


def create_empty_game_results_df() -> pd.DataFrame:
    """Create an empty game results DataFrame with correct schema."""
    return GAME_RESULTS_SCHEMA.empty_dataframe()


def validate_scheduled_games_df(df: pd.DataFrame) -> list[str]:
    """Validate a scheduled games DataFrame against the schema. Returns list of errors."""
    errors = []
    for col in ScheduledGameColumns.required():
        if col not in df.columns:
            errors.append(f"Missing required column: {col}")
    return errors


def validate_game_results_df(df: pd.DataFrame) -> list[str]:
    """Validate a game results DataFrame against the schema. Returns list of errors."""
    errors = []
    for col in GameResultColumns.required():
        if col not in df.columns:
            errors.append(f"Missing required column: {col}")
    return errors

"""Data access layer over a relational database (MySQL in production, SQLite locally)."""

from __future__ import annotations

from datetime import datetime, time
from typing import Optional

import pandas as pd
from sqlalchemy import create_engine, delete, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from sc_connect.configs.logging_config import get_logger
from sc_connect.configs.schema import (
    CLIENTS_SCHEMA,
    EVENTS_SCHEMA,
    GAME_RESULTS_SCHEMA,
    SCHEDULED_GAMES_SCHEMA,
    ClientColumns,
    EventColumns,
    GameResultColumns,
    ScheduledGameColumns,
    build_metadata,
    validate_game_results_df,
    validate_scheduled_games_df,
)
from sc_connect.configs.settings import DatabaseConfig
from sc_connect.storage.base import StorageError

logger = get_logger(__name__)


class DatabaseStore:
    """Read and write the sports, events, and clients tables."""

    # Rows per INSERT batch; SQLite caps bound variables per statement
    DEFAULT_CHUNK_SIZE: int = 200

    def __init__(
        self,
        url: Optional[str] = None,
        chunk_size: Optional[int] = None,
    ) -> None:
        self.primary_url = url or DatabaseConfig.URL
        self.fallback_url = DatabaseConfig.DEFAULT_SQLITE_URL
        self.chunk_size = chunk_size or self.DEFAULT_CHUNK_SIZE
        self.metadata, self.tables = build_metadata()
        self.scheduled_games = self.tables[SCHEDULED_GAMES_SCHEMA.name]
        self.game_results = self.tables[GAME_RESULTS_SCHEMA.name]
        self.events = self.tables[EVENTS_SCHEMA.name]
        self.clients = self.tables[CLIENTS_SCHEMA.name]
        self.url: str
        self.engine: Engine
        self._initialize_engine_with_fallback()

    # ------------------------------------------------------------------
    # Scheduled games
    # ------------------------------------------------------------------
    def delete_all_scheduled_games(self) -> int:
        return self._delete_all(self.scheduled_games)

    def delete_scheduled_games_for_sport(self, sport_name: str) -> int:
        return self._delete_all(self.scheduled_games, self.scheduled_games.c.sport_name == sport_name)

    def save_scheduled_games(self, df: pd.DataFrame) -> int:
        """Validate and append scheduled game rows."""
        if df is None or df.empty:
            return 0
        errors = validate_scheduled_games_df(df)
        if errors:
            raise StorageError("; ".join(errors))

        df = df.copy()
        if ScheduledGameColumns.LOCATION_NAME.name not in df.columns:
            df[ScheduledGameColumns.LOCATION_NAME.name] = ""
        df[ScheduledGameColumns.LOCATION_NAME.name] = (
            df[ScheduledGameColumns.LOCATION_NAME.name].fillna("")
        )
        valid = self._required_present(df, ScheduledGameColumns.required())
        valid &= self._within_length(df, ScheduledGameColumns.OPPONENT_NAME.name, 128)
        valid &= self._within_length(df, ScheduledGameColumns.LOCATION_NAME.name, 64)
        df = self._drop_invalid(df, valid, self.scheduled_games.name)
        return self._write_dataframe(
            df[ScheduledGameColumns.names()], self.scheduled_games.name
        )

    def find_all_scheduled_games(self) -> pd.DataFrame:
        query = select(self.scheduled_games).order_by(self.scheduled_games.c.game_date)
        return self._read(query)

    def find_scheduled_games_for_sport(self, sport_name: str) -> pd.DataFrame:
        query = (
            select(self.scheduled_games)
            .where(self.scheduled_games.c.sport_name == sport_name)
            .order_by(self.scheduled_games.c.game_date)
        )
        return self._read(query)

    # ------------------------------------------------------------------
    # Game results
    # ------------------------------------------------------------------
    def delete_all_game_results(self) -> int:
        return self._delete_all(self.game_results)

    def delete_game_results_for_sport(self, sport_name: str) -> int:
        return self._delete_all(self.game_results, self.game_results.c.sport_name == sport_name)

    def save_game_results(self, df: pd.DataFrame) -> int:
        """Validate and append game result rows; unparsed scores keep their -1 sentinel."""
        if df is None or df.empty:
            return 0
        errors = validate_game_results_df(df)
        if errors:
            raise StorageError("; ".join(errors))

        df = df.copy()
        valid = self._required_present(df, GameResultColumns.required())
        valid &= self._within_length(df, GameResultColumns.OPPONENT_NAME.name, 128)
        for score_col in (GameResultColumns.HOME_SCORE.name, GameResultColumns.OPPONENT_SCORE.name):
            numeric = pd.to_numeric(df[score_col], errors="coerce")
            valid &= numeric.notna() & (numeric == numeric.round())
            df[score_col] = numeric
        df = self._drop_invalid(df, valid, self.game_results.name)
        for score_col in (GameResultColumns.HOME_SCORE.name, GameResultColumns.OPPONENT_SCORE.name):
            df[score_col] = df[score_col].astype("int64")
        return self._write_dataframe(df[GameResultColumns.names()], self.game_results.name)

    def find_all_game_results(self) -> pd.DataFrame:
        query = select(self.game_results).order_by(self.game_results.c.game_date)
        return self._read(query)

    def find_game_results_for_sport(self, sport_name: str) -> pd.DataFrame:
        query = (
            select(self.game_results)
            .where(self.game_results.c.sport_name == sport_name)
            .order_by(self.game_results.c.game_date.desc())
        )
        return self._read(query)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def save_events(self, df: pd.DataFrame) -> int:
        if df is None or df.empty:
            return 0
        return self._write_dataframe(df[EventColumns.names()], self.events.name)

    def find_all_future_events(self, now: Optional[datetime] = None) -> pd.DataFrame:
        """Events that have not ended before the start of today."""
        start_of_today = datetime.combine((now or datetime.now()).date(), time.min)
        query = (
            select(self.events)
            .where(self.events.c.end_date >= start_of_today)
            .order_by(self.events.c.start_date)
        )
        return self._read(query)

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------
    def save_clients(self, df: pd.DataFrame) -> int:
        if df is None or df.empty:
            return 0
        df = df.copy()
        if ClientColumns.PUSH_TOKEN.name not in df.columns:
            df[ClientColumns.PUSH_TOKEN.name] = None
        return self._write_dataframe(df[ClientColumns.names()], self.clients.name)

    def find_all_push_tokens(self) -> list[str]:
        """Return the push token of every client that registered one."""
        query = (
            select(self.clients.c.push_token)
            .where(self.clients.c.push_token.is_not(None))
            .order_by(self.clients.c.id)
        )
        try:
            with self.engine.connect() as conn:
                return [row[0] for row in conn.execute(query) if row[0]]
        except SQLAlchemyError as exc:
            raise StorageError(f"Unable to load push tokens ({exc})") from exc

    def remove_client_by_push_token(self, push_token: str) -> int:
        """Delete the clients owning push_token. Malformed tokens are ignored."""
        if not push_token or len(push_token) != ClientColumns.PUSH_TOKEN_LENGTH:
            logger.warning("Ignoring removal request for malformed push token %r", push_token)
            return 0
        statement = delete(self.clients).where(self.clients.c.push_token == push_token)
        try:
            with self.engine.begin() as conn:
                return conn.execute(statement).rowcount
        except SQLAlchemyError as exc:
            raise StorageError(f"Unable to remove client with token {push_token} ({exc})") from exc

    def row_count(self, table_name: str) -> int:
        table = self.tables[table_name]
        try:
            with self.engine.connect() as conn:
                result = conn.execute(select(func.count()).select_from(table))
                return int(result.scalar_one())
        except SQLAlchemyError as exc:
            logger.warning("Unable to count rows for %s (%s)", table_name, exc)
            return 0

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _read(self, query) -> pd.DataFrame:
        try:
            with self.engine.connect() as conn:
                return pd.read_sql(query, conn)
        except SQLAlchemyError as exc:
            raise StorageError(f"Query failed ({exc})") from exc

    def _delete_all(self, table, *criteria) -> int:
        statement = delete(table)
        if criteria:
            statement = statement.where(*criteria)
        try:
            with self.engine.begin() as conn:
                deleted = conn.execute(statement).rowcount
        except SQLAlchemyError as exc:
            raise StorageError(f"Unable to clear {table.name} ({exc})") from exc
        logger.info("Deleted %d rows from %s", deleted, table.name)
        return deleted

    @staticmethod
    def _required_present(df: pd.DataFrame, columns: list[str]) -> pd.Series:
        valid = pd.Series(True, index=df.index)
        for col in columns:
            series = df[col]
            present = series.notna()
            is_text = not (
                pd.api.types.is_numeric_dtype(series)
                or pd.api.types.is_datetime64_any_dtype(series)
            )
            if is_text:
                present &= series.astype(str).str.strip() != ""
            valid &= present
        return valid

    @staticmethod
    def _within_length(df: pd.DataFrame, column: str, max_length: int) -> pd.Series:
        return df[column].fillna("").astype(str).str.len() <= max_length

    @staticmethod
    def _drop_invalid(df: pd.DataFrame, valid: pd.Series, table_name: str) -> pd.DataFrame:
        dropped = int((~valid).sum())
        if dropped:
            logger.warning("Dropping %d invalid rows bound for %s", dropped, table_name)
        return df.loc[valid].reset_index(drop=True)

    def _write_dataframe(self, df: pd.DataFrame, table_name: str) -> int:
        """Append DataFrame rows in chunks to avoid statement size limits."""
        if df is None or df.empty:
            logger.info("Skipping write for %s; no rows to persist", table_name)
            return 0

        total_rows = len(df)
        written = 0

        try:
            for start in range(0, total_rows, self.chunk_size):
                chunk = df.iloc[start : start + self.chunk_size]
                chunk.to_sql(
                    table_name,
                    self.engine,
                    if_exists="append",
                    index=False,
                    method="multi",
                )
                written += len(chunk)
                logger.debug(
                    "Wrote chunk of %d rows to %s (total so far: %d)",
                    len(chunk),
                    table_name,
                    written,
                )
        except SQLAlchemyError as exc:
            raise StorageError(f"Unable to write {table_name} ({exc})") from exc

        logger.info("Persisted %d rows into %s", written, table_name)
        return written

    def _initialize_engine_with_fallback(self) -> None:
        candidates = [self.primary_url]
        if not self.primary_url.startswith("sqlite"):
            candidates.append(self.fallback_url)

        last_exc: Optional[SQLAlchemyError] = None
        for candidate_url in candidates:
            try:
                engine = create_engine(candidate_url, future=True)
                self.metadata.create_all(engine)
                self.engine = engine
                self.url = candidate_url
                if candidate_url != self.primary_url:
                    logger.warning(
                        "Primary database unreachable; falling back to local SQLite at %s",
                        candidate_url,
                    )
                return
            except SQLAlchemyError as exc:
                last_exc = exc
                logger.warning(
                    "Database connection failed for %s (%s)",
                    candidate_url,
                    exc,
                )
                continue

        raise StorageError(
            "Unable to initialize database connection after attempting: "
            f"{', '.join(candidates)}. Set DATABASE_URL (and credentials) or allow the fallback to SQLite."
        ) from last_exc

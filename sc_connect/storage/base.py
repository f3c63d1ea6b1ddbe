"""Data access interface injected into the ingestion and notification jobs."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

import pandas as pd


class StorageError(Exception):
    """Raised when the data access layer cannot complete a query."""


@runtime_checkable
class SportsRepository(Protocol):
    """
    Protocol defining the operations the background jobs depend on.

    DatabaseStore is the production implementation; tests pass MagicMocks
    or a DatabaseStore on a temporary SQLite file.
    """

    def delete_all_scheduled_games(self) -> int:
        ...

    def delete_all_game_results(self) -> int:
        ...

    def delete_scheduled_games_for_sport(self, sport_name: str) -> int:
        ...

    def delete_game_results_for_sport(self, sport_name: str) -> int:
        ...

    def save_scheduled_games(self, df: pd.DataFrame) -> int:
        """Persist scheduled games. Return row count written."""
        ...

    def save_game_results(self, df: pd.DataFrame) -> int:
        """Persist game results. Return row count written."""
        ...

    def find_all_scheduled_games(self) -> pd.DataFrame:
        ...

    def find_all_game_results(self) -> pd.DataFrame:
        ...

    def find_all_future_events(self, now: Optional[datetime] = None) -> pd.DataFrame:
        ...

    def find_all_push_tokens(self) -> list[str]:
        ...

    def remove_client_by_push_token(self, push_token: str) -> int:
        ...

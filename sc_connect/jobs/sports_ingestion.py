"""Wipe-and-repopulate ingestion of every configured sport."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from sc_connect.configs.logging_config import get_logger
from sc_connect.configs.sports import SportConfig
from sc_connect.scraping.athletics_scraper import AthleticsScraper, ScraperError
from sc_connect.storage.base import SportsRepository, StorageError

logger = get_logger(__name__)


@dataclass
class IngestionResult:
    """Outcome of one ingestion run."""
    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    scheduled_games_saved: int = 0
    game_results_saved: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.failed


class SportsIngestionJob:
    """
    Refresh the sports tables from the athletics site.

    Both tables are cleared up front, then each sport's rows are inserted as
    soon as that sport has been parsed. A sport that fails to fetch, parse or
    store keeps no rows until the next run; there is no fallback to older
    data.
    """

    def __init__(
        self,
        store: SportsRepository,
        scraper: AthleticsScraper,
        sports: Sequence[SportConfig],
    ) -> None:
        self.store = store
        self.scraper = scraper
        self.sports = list(sports)

    def run(
        self,
        on_complete: Optional[Callable[[IngestionResult], None]] = None,
    ) -> IngestionResult:
        logger.info("Sports data parse started for %d sports", len(self.sports))
        result = IngestionResult()

        try:
            self.store.delete_all_scheduled_games()
            self.store.delete_all_game_results()
        except StorageError as exc:
            logger.error("Could not clear sports tables: %s", exc)
            result.error = str(exc)
        else:
            for sport in self.sports:
                self._ingest_sport(sport, result)

        logger.info(
            "Sports data parse completed: %d succeeded, %d failed, %d scheduled games, %d results",
            len(result.succeeded),
            len(result.failed),
            result.scheduled_games_saved,
            result.game_results_saved,
        )
        if on_complete is not None:
            on_complete(result)
        return result

    def _ingest_sport(self, sport: SportConfig, result: IngestionResult) -> None:
        try:
            scheduled_df, results_df = self.scraper.scrape_sport(sport)
        except ScraperError as exc:
            logger.error("Failed to scrape %s: %s", sport.name, exc)
            result.failed[sport.name] = str(exc)
            return

        try:
            result.scheduled_games_saved += self.store.save_scheduled_games(scheduled_df)
            result.game_results_saved += self.store.save_game_results(results_df)
        except StorageError as exc:
            logger.error("Failed to store %s rows: %s", sport.name, exc)
            result.failed[sport.name] = str(exc)
            self._discard_sport(sport)
            return

        result.succeeded.append(sport.name)

    def _discard_sport(self, sport: SportConfig) -> None:
        # Scheduled games may have been written before the results insert failed
        try:
            self.store.delete_scheduled_games_for_sport(sport.name)
            self.store.delete_game_results_for_sport(sport.name)
        except StorageError as exc:
            logger.error("Could not remove partial %s rows: %s", sport.name, exc)

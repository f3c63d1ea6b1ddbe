"""Sports notifications: today's games at noon and today's results at midnight."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import pandas as pd

from sc_connect.configs.logging_config import get_logger
from sc_connect.configs.schema import UNPARSED_SCORE, GameResultColumns, ScheduledGameColumns
from sc_connect.configs.settings import Config
from sc_connect.jobs.sports_ingestion import SportsIngestionJob
from sc_connect.notifications.push import PushNotifier
from sc_connect.storage.base import SportsRepository, StorageError

logger = get_logger(__name__)

NO_GAMES_MESSAGE = "There are no sports events today."


def _on_day(df: pd.DataFrame, column: str, day: date) -> pd.Series:
    return pd.to_datetime(df[column]).dt.date == day


def sports_with_games_on(scheduled_df: pd.DataFrame, day: date) -> list[str]:
    """Unique sport names with a game on ``day``, in first-seen order."""
    if scheduled_df is None or scheduled_df.empty:
        return []
    todays = scheduled_df.loc[_on_day(scheduled_df, ScheduledGameColumns.GAME_DATE.name, day)]
    return list(dict.fromkeys(todays[ScheduledGameColumns.SPORT_NAME.name]))


def format_games_message(sports: list[str]) -> str:
    if not sports:
        return NO_GAMES_MESSAGE
    return f"Sports events today: {', '.join(sports)}."


def format_result_message(
    home_team: str,
    sport_name: str,
    home_score: int,
    opponent_score: int,
    opponent_name: str,
) -> str:
    """Phrase a final score from the home team's point of view."""
    if home_score > opponent_score:
        return f"{home_team} {sport_name} won {home_score}-{opponent_score} vs. {opponent_name}"
    if home_score < opponent_score:
        return f"{home_team} {sport_name} lost {opponent_score}-{home_score} vs. {opponent_name}"
    return f"{home_team} {sport_name} tied {home_score}-{opponent_score} vs. {opponent_name}"


def scored_results_on(results_df: pd.DataFrame, day: date) -> pd.DataFrame:
    """Results dated ``day`` whose scores were both parsed."""
    if results_df is None or results_df.empty:
        return results_df
    mask = (
        _on_day(results_df, GameResultColumns.GAME_DATE.name, day)
        & (results_df[GameResultColumns.HOME_SCORE.name] != UNPARSED_SCORE)
        & (results_df[GameResultColumns.OPPONENT_SCORE.name] != UNPARSED_SCORE)
    )
    return results_df.loc[mask].reset_index(drop=True)


class SportsNotificationJob:
    """Re-scrape the sports pages, then notify every device."""

    def __init__(
        self,
        store: SportsRepository,
        notifier: PushNotifier,
        ingestion: SportsIngestionJob,
        home_team: Optional[str] = None,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.ingestion = ingestion
        self.home_team = home_team or Config.HOME_TEAM_NAME

    def send_scheduled_game_notifications(self, now: Optional[datetime] = None) -> int:
        """One combined message listing the sports playing today. Returns sends issued."""
        now = now or datetime.now()
        self.ingestion.run()
        try:
            scheduled_df = self.store.find_all_scheduled_games()
            tokens = self.store.find_all_push_tokens()
        except StorageError as exc:
            logger.error("Scheduled game notifications skipped: %s", exc)
            return 0

        message = format_games_message(sports_with_games_on(scheduled_df, now.date()))
        for token in tokens:
            self.notifier.send_notification([token], message, True)
        logger.info("Sent %r to %d devices", message, len(tokens))
        return len(tokens)

    def send_game_result_notifications(self, now: Optional[datetime] = None) -> int:
        """One message per finished, fully scored game today. Returns sends issued."""
        now = now or datetime.now()
        self.ingestion.run()
        try:
            todays_results = scored_results_on(self.store.find_all_game_results(), now.date())
            if todays_results is None or todays_results.empty:
                logger.info("No scored results on %s", now.date().isoformat())
                return 0
            tokens = self.store.find_all_push_tokens()
        except StorageError as exc:
            logger.error("Game result notifications skipped: %s", exc)
            return 0

        sent = 0
        for row in todays_results.itertuples(index=False):
            message = format_result_message(
                self.home_team,
                row.sport_name,
                int(row.home_score),
                int(row.opponent_score),
                row.opponent_name,
            )
            for token in tokens:
                self.notifier.send_notification([token], message, False)
                sent += 1
        logger.info("Sent %d game result notifications", sent)
        return sent

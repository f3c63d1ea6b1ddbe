"""Noon notifications about events happening today."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import pandas as pd

from sc_connect.configs.logging_config import get_logger
from sc_connect.configs.schema import EventColumns
from sc_connect.notifications.push import PushNotifier
from sc_connect.storage.base import SportsRepository, StorageError

logger = get_logger(__name__)


def events_happening_on(events_df: pd.DataFrame, day: date) -> pd.DataFrame:
    """Events that start on ``day``, end on ``day``, or span across it."""
    if events_df is None or events_df.empty:
        return events_df
    start_days = pd.to_datetime(events_df[EventColumns.START_DATE.name]).dt.date
    end_days = pd.to_datetime(events_df[EventColumns.END_DATE.name]).dt.date
    mask = (start_days == day) | (end_days == day) | ((start_days < day) & (end_days > day))
    return events_df.loc[mask].reset_index(drop=True)


def format_event_message(event_name: str) -> str:
    return f"Event: {event_name} is happening today."


class EventsNotificationJob:
    """Notify every registered device about each event happening today."""

    def __init__(self, store: SportsRepository, notifier: PushNotifier) -> None:
        self.store = store
        self.notifier = notifier

    def send_upcoming_event_notifications(self, now: Optional[datetime] = None) -> int:
        """Send one push per device per event today. Returns the number of sends issued."""
        now = now or datetime.now()
        try:
            events_df = self.store.find_all_future_events(now)
            todays_events = events_happening_on(events_df, now.date())
            if todays_events is None or todays_events.empty:
                logger.info("No events happening on %s", now.date().isoformat())
                return 0
            tokens = self.store.find_all_push_tokens()
        except StorageError as exc:
            logger.error("Event notifications skipped: %s", exc)
            return 0

        sent = 0
        for event_name in todays_events[EventColumns.EVENT_NAME.name]:
            message = format_event_message(event_name)
            for token in tokens:
                self.notifier.send_notification([token], message, True)
                sent += 1
        logger.info(
            "Sent %d event notifications for %d events to %d devices",
            sent,
            len(todays_events),
            len(tokens),
        )
        return sent

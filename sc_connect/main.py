"""Entry point for the SC Connect sports ingestion and notification jobs."""

from __future__ import annotations

import argparse
import signal
import threading
from dataclasses import dataclass
from typing import Optional

from sc_connect.configs.logging_config import configure_logging, get_logger
from sc_connect.configs.settings import PushConfig, SchedulerConfig
from sc_connect.configs.sports import load_sports
from sc_connect.jobs.sports_ingestion import SportsIngestionJob
from sc_connect.notifications.events_notifier import EventsNotificationJob
from sc_connect.notifications.push import PushFeedbackListener, PushNotifier
from sc_connect.notifications.sports_notifier import SportsNotificationJob
from sc_connect.scheduling.daily_scheduler import DailyNotificationScheduler, build_scheduler
from sc_connect.scraping.athletics_scraper import AthleticsScraper
from sc_connect.storage.database_store import DatabaseStore

logger = get_logger(__name__)

MODES = ["serve", "ingest", "notify-events", "notify-games", "notify-results"]


@dataclass
class Services:
    store: DatabaseStore
    notifier: PushNotifier
    ingestion: SportsIngestionJob
    events: EventsNotificationJob
    sports: SportsNotificationJob
    feedback: PushFeedbackListener


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Scrape sports schedules and send SC Connect push notifications.",
    )
    parser.add_argument(
        "--mode",
        choices=MODES,
        default="serve",
        help="serve runs the daily schedulers until interrupted; the other modes run one job once.",
    )
    parser.add_argument(
        "--database-url",
        help="SQLAlchemy URL overriding DATABASE_URL.",
    )
    parser.add_argument(
        "--sports-config",
        help="JSON file overriding the built-in sports catalogue.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO).",
    )
    parser.add_argument(
        "--log-file",
        default="logs/sc_connect.log",
        help="Path to log file (default: logs/sc_connect.log).",
    )
    return parser.parse_args(argv)


def build_services(
    database_url: Optional[str] = None,
    sports_config: Optional[str] = None,
) -> Services:
    store = DatabaseStore(url=database_url)
    logger.info("Database connection established (%s)", store.engine.dialect.name)
    notifier = PushNotifier()
    ingestion = SportsIngestionJob(store, AthleticsScraper(), load_sports(sports_config))
    return Services(
        store=store,
        notifier=notifier,
        ingestion=ingestion,
        events=EventsNotificationJob(store, notifier),
        sports=SportsNotificationJob(store, notifier, ingestion),
        feedback=PushFeedbackListener(notifier, store),
    )


def serve(services: Services) -> None:
    """Initial sports load, then the daily timers and the feedback poll until a signal."""
    services.ingestion.run()

    scheduler = build_scheduler()
    timers = [
        DailyNotificationScheduler(
            "events-noon",
            SchedulerConfig.EVENTS_HOUR,
            services.events.send_upcoming_event_notifications,
            scheduler,
        ),
        DailyNotificationScheduler(
            "sports-games-noon",
            SchedulerConfig.GAMES_HOUR,
            services.sports.send_scheduled_game_notifications,
            scheduler,
        ),
        DailyNotificationScheduler(
            "sports-results-midnight",
            SchedulerConfig.RESULTS_HOUR,
            services.sports.send_game_result_notifications,
            scheduler,
        ),
    ]
    for timer in timers:
        timer.start()
    services.feedback.start(scheduler, PushConfig.FEEDBACK_INTERVAL_SECONDS)

    stop = threading.Event()
    for signum in (signal.SIGINT, signal.SIGTERM):
        signal.signal(signum, lambda *_: stop.set())

    scheduler.start()
    logger.info("Schedulers running; waiting for shutdown signal")
    stop.wait()
    scheduler.shutdown(wait=False)
    logger.info("Schedulers stopped")


def main(
    mode: str = "serve",
    database_url: Optional[str] = None,
    sports_config: Optional[str] = None,
) -> None:
    logger.info("Starting SC Connect jobs in %s mode", mode)
    services = build_services(database_url, sports_config)

    if mode == "serve":
        serve(services)
    elif mode == "ingest":
        result = services.ingestion.run()
        for sport, error in result.failed.items():
            logger.warning("%s: %s", sport, error)
    elif mode == "notify-events":
        services.events.send_upcoming_event_notifications()
    elif mode == "notify-games":
        services.sports.send_scheduled_game_notifications()
    elif mode == "notify-results":
        services.sports.send_game_result_notifications()

    logger.info("%s completed", mode)


def run(argv: Optional[list[str]] = None) -> None:
    cli_args = _parse_args(argv)
    configure_logging(level=cli_args.log_level, log_file=cli_args.log_file, log_to_console=True)
    main(
        mode=cli_args.mode,
        database_url=cli_args.database_url,
        sports_config=cli_args.sports_config,
    )


if __name__ == "__main__":
    run()

# Contents of /sc-connect-jobs/sc_connect/configs/settings.py

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


# Configuration settings
class Config:
    BASE_URL = os.getenv(
        "ATHLETICS_BASE_URL",
        "http://www.wescoathletics.com/index.php?pid=0.3.41.",
    )
    URL_ENDING = os.getenv("ATHLETICS_URL_ENDING", ".321")
    DATA_DIR = os.path.join(os.path.dirname(__file__), '../../data')
    SPORTS_CONFIG_FILE = os.getenv("SPORTS_CONFIG_FILE")
    HOME_TEAM_NAME = os.getenv("HOME_TEAM_NAME", "Shorecrest")
    TIMEOUT = 10  # Timeout for requests in seconds
    # One attempt per page by default; a failed sport is retried on the next run
    FETCH_ATTEMPTS = int(os.getenv("ATHLETICS_FETCH_ATTEMPTS", "1"))
    FETCH_RETRY_DELAY = float(os.getenv("ATHLETICS_FETCH_RETRY_DELAY", "0"))


class DatabaseConfig:
    """Centralized database naming so table names live in one place."""

    DEFAULT_SQLITE_PATH = Path(Config.DATA_DIR).resolve() / "sc_connect.db"
    DEFAULT_SQLITE_PATH.parent.mkdir(parents=True, exist_ok=True)
    DEFAULT_SQLITE_URL = f"sqlite:///{DEFAULT_SQLITE_PATH}"

    _raw_url = os.getenv("DATABASE_URL", DEFAULT_SQLITE_URL)

    # The production server runs MySQL; pick explicit pure-python drivers
    if _raw_url.startswith("mysql://"):
        URL = _raw_url.replace("mysql://", "mysql+pymysql://", 1)
    elif _raw_url.startswith("postgresql://"):
        URL = _raw_url.replace("postgresql://", "postgresql+psycopg://", 1)
    else:
        URL = _raw_url

    SCHEDULED_GAMES_TABLE = os.getenv("DATABASE_SCHEDULED_GAMES_TABLE", "scheduled_sports_games")
    GAME_RESULTS_TABLE = os.getenv("DATABASE_GAME_RESULTS_TABLE", "sports_game_results")
    EVENTS_TABLE = os.getenv("DATABASE_EVENTS_TABLE", "events")
    CLIENTS_TABLE = os.getenv("DATABASE_CLIENTS_TABLE", "clients")


class PushConfig:
    """Settings for the HTTP push gateway that relays notifications to APNs.

    Sandbox delivery is the default; set ``PUSH_PRODUCTION=true`` on the
    production host.
    """

    GATEWAY_URL = os.getenv("PUSH_GATEWAY_URL", "http://localhost:8080")
    API_KEY = os.getenv("PUSH_GATEWAY_API_KEY")
    PRODUCTION = _env_flag("PUSH_PRODUCTION")
    TIMEOUT = 10
    FEEDBACK_INTERVAL_SECONDS = int(os.getenv("PUSH_FEEDBACK_INTERVAL_SECONDS", "10"))


class SchedulerConfig:
    EVENTS_HOUR = int(os.getenv("EVENTS_NOTIFICATION_HOUR", "12"))
    GAMES_HOUR = int(os.getenv("GAMES_NOTIFICATION_HOUR", "12"))
    RESULTS_HOUR = int(os.getenv("RESULTS_NOTIFICATION_HOUR", "0"))
    REARM_INTERVAL_HOURS = 24

"""Athletics site scraper for per-sport schedules and results."""

from __future__ import annotations

import time
from typing import Optional

import pandas as pd
import requests
from bs4 import BeautifulSoup, Tag

from sc_connect.configs.logging_config import get_logger
from sc_connect.configs.schema import (
    GameResultColumns,
    ScheduledGameColumns,
    create_empty_game_results_df,
    create_empty_scheduled_games_df,
)
from sc_connect.configs.settings import Config
from sc_connect.configs.sports import SportConfig
from sc_connect.scraping.sports_parser import (
    TableKind,
    classify_table,
    clean_text,
    parse_result_rows,
    parse_schedule_rows,
    parse_school_years,
)

logger = get_logger(__name__)

SCHEDULE_CONTAINER_ID = "ep_tab_content_schedule"
SCHEDULE_TABLE_SELECTOR = "table.nwc_schedule"
DATA_ROW_SELECTOR = "tr.nwc_schedule_row1, tr.nwc_schedule_row2"


class ScraperError(Exception):
    """Base exception for scraper errors."""


class FetchError(ScraperError):
    """Raised when no attempt to fetch a page succeeded."""


class ParseError(ScraperError):
    """Raised when the page does not have the expected schedule layout."""


class AthleticsScraper:
    """Scrapes scheduled games and game results from the athletics site."""

    RETRY_BACKOFF_FACTOR: float = 2.0
    TRANSIENT_STATUS_CODES: frozenset[int] = frozenset({429, 500, 502, 503, 504})

    def __init__(
        self,
        base_url: Optional[str] = None,
        url_ending: Optional[str] = None,
        session: Optional[requests.Session] = None,
        retry_delay: Optional[float] = None,
        attempts: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Initialize the scraper.

        Parameters
        ----------
        base_url : Optional[str]
            Page prefix that the sport's page id is appended to.
        url_ending : Optional[str]
            Suffix appended after the page id.
        session : Optional[requests.Session]
            Reusable requests session for connection pooling.
        retry_delay : Optional[float]
            Seconds before the second attempt, doubling after that.
            Defaults to ``Config.FETCH_RETRY_DELAY``.
        attempts : Optional[int]
            Attempts per page. Defaults to ``Config.FETCH_ATTEMPTS``.
        timeout : Optional[float]
            Per-request timeout in seconds.
        """
        self.base_url = base_url or Config.BASE_URL
        self.url_ending = url_ending if url_ending is not None else Config.URL_ENDING
        self.session = session or requests.Session()
        self.retry_delay = retry_delay if retry_delay is not None else Config.FETCH_RETRY_DELAY
        self.attempts = max(1, attempts if attempts is not None else Config.FETCH_ATTEMPTS)
        self.timeout = timeout or Config.TIMEOUT

    def sport_url(self, sport: SportConfig) -> str:
        return sport.url(self.base_url, self.url_ending)

    def fetch_data(self, url: str) -> str:
        """
        GET ``url`` and return the page HTML.

        Connection problems and transient statuses (429, 5xx) use up one
        attempt each. Any other non-200 status fails immediately.

        Raises
        ------
        FetchError
            If no attempt returned the page.
        """
        last_exc: Optional[Exception] = None
        problem = ""

        for attempt in range(1, self.attempts + 1):
            if attempt > 1 and self.retry_delay:
                time.sleep(self.retry_delay * self.RETRY_BACKOFF_FACTOR ** (attempt - 2))
            try:
                response = self.session.get(url, timeout=self.timeout)
            except requests.RequestException as exc:
                last_exc = exc
                problem = str(exc)
            else:
                if response.status_code == 200:
                    logger.debug("Fetched %s on attempt %d", url, attempt)
                    return response.text
                if response.status_code not in self.TRANSIENT_STATUS_CODES:
                    raise FetchError(f"HTTP {response.status_code} for {url}")
                problem = f"HTTP {response.status_code}"
            logger.warning("Attempt %d/%d for %s failed: %s", attempt, self.attempts, url, problem)

        raise FetchError(
            f"Failed to fetch {url} after {self.attempts} attempts ({problem})"
        ) from last_exc

    @staticmethod
    def _cell_texts(row: Tag) -> list[str]:
        return [clean_text(cell.get_text(" ")) for cell in row.find_all("td")]

    def parse_page(self, html: str) -> tuple[pd.DataFrame, pd.DataFrame]:
        """
        Parse a sport page into (scheduled games, game results) DataFrames.

        Raises
        ------
        ParseError
            If the schedule container or the school-year heading is missing.
        """
        soup = BeautifulSoup(html, "html.parser")
        container = soup.find(id=SCHEDULE_CONTAINER_ID)
        if container is None:
            raise ParseError("Could not get html to parse.")

        heading = container.find("h3")
        school_years = parse_school_years(heading.get_text() if heading else None)
        if school_years is None:
            raise ParseError("School years could not be parsed.")

        scheduled: list[dict] = []
        results: list[dict] = []
        for table in container.select(SCHEDULE_TABLE_SELECTOR):
            body = table.find("tbody")
            if body is None:
                continue
            headers = [clean_text(th.get_text(" ")) for th in body.find_all("th")]
            rows = [self._cell_texts(row) for row in body.select(DATA_ROW_SELECTOR)]
            kind = classify_table(headers)
            logger.debug("Table with %d headers classified as %s", len(headers), kind.value)
            if kind is TableKind.RESULTS:
                results.extend(parse_result_rows(rows, school_years))
            elif kind is TableKind.SCHEDULE:
                scheduled.extend(parse_schedule_rows(rows, school_years))

        return self._to_frame(scheduled, results)

    @staticmethod
    def _to_frame(scheduled: list[dict], results: list[dict]) -> tuple[pd.DataFrame, pd.DataFrame]:
        if scheduled:
            scheduled_df = pd.DataFrame(scheduled)
            scheduled_df[ScheduledGameColumns.GAME_DATE.name] = pd.to_datetime(
                scheduled_df[ScheduledGameColumns.GAME_DATE.name]
            )
        else:
            scheduled_df = create_empty_scheduled_games_df()

        if results:
            results_df = pd.DataFrame(results)
            results_df[GameResultColumns.GAME_DATE.name] = pd.to_datetime(
                results_df[GameResultColumns.GAME_DATE.name]
            )
        else:
            results_df = create_empty_game_results_df()

        return scheduled_df, results_df

    def scrape_sport(self, sport: SportConfig) -> tuple[pd.DataFrame, pd.DataFrame]:
        """Fetch and parse one sport's page, tagging every row with the sport name."""
        if not sport.url_number:
            raise ParseError("No data for given sport.")
        url = self.sport_url(sport)
        logger.info("Scraping %s schedule from %s", sport.name, url)
        html = self.fetch_data(url)
        scheduled_df, results_df = self.parse_page(html)
        scheduled_df[ScheduledGameColumns.SPORT_NAME.name] = sport.name
        results_df[GameResultColumns.SPORT_NAME.name] = sport.name
        logger.info(
            "Parsed %d scheduled games and %d results for %s",
            len(scheduled_df),
            len(results_df),
            sport.name,
        )
        return (
            scheduled_df[ScheduledGameColumns.names()],
            results_df[GameResultColumns.names()],
        )

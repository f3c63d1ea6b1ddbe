"""Row classifier for the athletics site's schedule tables.

The site renders every sport's season as a series of ``table.nwc_schedule``
elements whose shape tells what they hold. Everything here works on plain
cell texts so the heuristics can be exercised without fetching or parsing
HTML:

- header count 4, or 5 with "Place / Result" as the 4th header: postseason
- header count 5 otherwise: game results
- header count 6: scheduled games

Dates on the site carry no year ("Tue, Oct 5"), so the year is taken from the
"2017-18" style school-year heading at the top of the schedule.
"""

from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence

from sc_connect.configs.logging_config import get_logger
from sc_connect.configs.schema import MULTIPLE_OPPONENTS, UNPARSED_SCORE

logger = get_logger(__name__)

POSTSEASON_RESULT_HEADER = "Place / Result"

# First month of the school year; Aug-Dec games belong to the first year
SCHOOL_YEAR_START_MONTH = 8

_WHITESPACE = re.compile(r"\s+")
_DATE_PATTERN = re.compile(r"(?:[A-Za-z]+,\s*)?(?P<month>[A-Za-z]{3})[A-Za-z]*\.?\s+(?P<day>\d{1,2})")
_TIME_PATTERN = re.compile(
    r"\b(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\s*(?P<meridiem>[AaPp])\.?\s*[Mm]?\b"
)
_INTEGER = re.compile(r"[+-]?\d+")


class TableKind(str, Enum):
    POSTSEASON = "postseason"
    RESULTS = "results"
    SCHEDULE = "schedule"
    UNKNOWN = "unknown"


def clean_text(value: Optional[str]) -> str:
    """Collapse runs of whitespace (including non-breaking spaces) and trim."""
    if not value:
        return ""
    return _WHITESPACE.sub(" ", value.replace("\xa0", " ")).strip()


def classify_table(header_texts: Sequence[str]) -> TableKind:
    """Classify a schedule table by the number of header cells it carries."""
    count = len(header_texts)
    if count == 4:
        return TableKind.POSTSEASON
    if count == 5:
        if clean_text(header_texts[3]) == POSTSEASON_RESULT_HEADER:
            return TableKind.POSTSEASON
        return TableKind.RESULTS
    if count == 6:
        return TableKind.SCHEDULE
    return TableKind.UNKNOWN


def parse_school_years(text: Optional[str]) -> Optional[tuple[int, int]]:
    """Parse "2017-18" into (2017, 2018). Returns None when unreadable."""
    years = clean_text(text)
    if len(years) < 7:
        return None
    first, century, second = years[0:4], years[0:2], years[5:7]
    if not (first.isdigit() and second.isdigit()):
        return None
    return int(first), int(century + second)


def resolve_game_date(
    date_text: Optional[str],
    time_text: Optional[str],
    school_years: Optional[tuple[int, int]],
) -> Optional[datetime]:
    """
    Combine a year-less date cell and an optional time cell into a datetime.

    Games from August through December fall in the first year of the school
    year, everything else in the second. A missing or unreadable time (e.g.
    "TBA") resolves to midnight.
    """
    if not date_text or not school_years:
        return None
    match = _DATE_PATTERN.search(clean_text(date_text))
    if not match:
        return None
    try:
        month = datetime.strptime(match.group("month").title(), "%b").month
    except ValueError:
        return None
    day = int(match.group("day"))
    year = school_years[0] if month >= SCHOOL_YEAR_START_MONTH else school_years[1]

    hour, minute = _parse_time(time_text)
    try:
        return datetime(year, month, day, hour, minute)
    except ValueError:
        # Feb 29 outside a leap year and similar impossible dates
        return None


def _parse_time(time_text: Optional[str]) -> tuple[int, int]:
    match = _TIME_PATTERN.search(clean_text(time_text))
    if not match:
        return 0, 0
    hour = int(match.group("hour")) % 12
    minute = int(match.group("minute") or 0)
    if match.group("meridiem").lower() == "p":
        hour += 12
    if minute > 59:
        return 0, 0
    return hour, minute


def split_team_score(text: Optional[str]) -> tuple[Optional[str], int]:
    """
    Split a "Team Name 3" cell into ("Team Name", 3).

    The last whitespace-separated token is the score and everything before
    it is the name. Cells without a trailing integer yield (None, -1).
    """
    tokens = clean_text(text).split(" ")
    if len(tokens) < 2 or not _INTEGER.fullmatch(tokens[-1]):
        return None, UNPARSED_SCORE
    return " ".join(tokens[:-1]), int(tokens[-1])


def parse_normal_result_row(cells: Sequence[str], school_years: tuple[int, int]) -> Optional[dict]:
    """Six-cell result row: date in cell 2, home team and score in 3, opponent in 4."""
    date_text = clean_text(cells[2])
    if not date_text:
        return None
    _, home_score = split_team_score(cells[3])
    opponent_name, opponent_score = split_team_score(cells[4])
    if opponent_name is None:
        opponent_name = MULTIPLE_OPPONENTS
    return {
        "game_date": resolve_game_date(date_text, None, school_years),
        "opponent_name": opponent_name,
        "opponent_score": opponent_score,
        "home_score": home_score,
    }


def parse_short_result_row(cells: Sequence[str], school_years: tuple[int, int]) -> Optional[dict]:
    """Five-cell result row for meets and tournaments; cell 3 names the event."""
    date_text = clean_text(cells[2])
    if not date_text:
        return None
    return {
        "game_date": resolve_game_date(date_text, None, school_years),
        "opponent_name": clean_text(cells[3]),
        "opponent_score": UNPARSED_SCORE,
        "home_score": UNPARSED_SCORE,
    }


def parse_result_rows(rows: Sequence[Sequence[str]], school_years: tuple[int, int]) -> list[dict]:
    """
    Parse the data rows of a results table.

    A five-cell row is followed by a detail row that belongs to it; that row
    is consumed along with it.
    """
    results: list[dict] = []
    index = 0
    while index < len(rows):
        cells = rows[index]
        if len(cells) == 6:
            parsed = parse_normal_result_row(cells, school_years)
        elif len(cells) == 5:
            parsed = parse_short_result_row(cells, school_years)
            index += 1
        else:
            parsed = None
            logger.debug("Skipping result row with %d cells", len(cells))
        if parsed:
            results.append(parsed)
        index += 1
    return results


def parse_schedule_rows(rows: Sequence[Sequence[str]], school_years: tuple[int, int]) -> list[dict]:
    """
    Parse the data rows of a scheduled games table.

    Seven-cell rows are regular games (date 1, opponent 2, time 3, location 5).
    Three-cell rows announce a multi-team event and own the following row.
    """
    games: list[dict] = []
    index = 0
    while index < len(rows):
        cells = rows[index]
        if len(cells) == 7:
            date_text = clean_text(cells[1])
            if date_text:
                games.append({
                    "game_date": resolve_game_date(date_text, cells[3], school_years),
                    "opponent_name": clean_text(cells[2]),
                    "location_name": clean_text(cells[5]),
                })
        elif len(cells) == 3:
            date_text = clean_text(cells[1])
            if date_text:
                games.append({
                    "game_date": resolve_game_date(date_text, None, school_years),
                    "opponent_name": clean_text(cells[2]),
                    "location_name": "",
                })
                index += 1
        else:
            logger.debug("Skipping schedule row with %d cells", len(cells))
        index += 1
    return games

"""Catalogue of sports whose schedule pages are scraped."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from sc_connect.configs.logging_config import get_logger
from sc_connect.configs.settings import Config

logger = get_logger(__name__)


@dataclass(frozen=True)
class SportConfig:
    """A sport page on the athletics site, keyed by its numeric page id."""
    url_number: str
    name: str

    def url(self, base_url: str = Config.BASE_URL, url_ending: str = Config.URL_ENDING) -> str:
        return f"{base_url}{self.url_number}{url_ending}"


# Display names match the sport list in the mobile app. The page ids can be
# overridden with SPORTS_CONFIG_FILE when the athletics site renumbers pages.
SPORTS: tuple[SportConfig, ...] = (
    SportConfig("1", "Baseball"),
    SportConfig("2", "B-Basketball"),
    SportConfig("3", "Football"),
    SportConfig("4", "B-Golf"),
    SportConfig("5", "B-Soccer"),
    SportConfig("6", "B-Swim"),
    SportConfig("7", "B-Tennis"),
    SportConfig("8", "B-Track"),
    SportConfig("9", "Wrestling"),
    SportConfig("10", "B-X-Country"),
    SportConfig("11", "G-Basketball"),
    SportConfig("12", "G-Golf"),
    SportConfig("13", "Gymnastics"),
    SportConfig("14", "G-Soccer"),
    SportConfig("15", "Softball"),
    SportConfig("16", "G-Swim"),
    SportConfig("17", "G-Tennis"),
    SportConfig("18", "G-Track"),
    SportConfig("19", "Volleyball"),
    SportConfig("20", "G-X-Country"),
)


def load_sports(path: Optional[Union[str, Path]] = None) -> tuple[SportConfig, ...]:
    """
    Load the sports catalogue.

    The file is a JSON list of ``{"url_number": ..., "sport": ...}`` objects.
    Without a path (argument or SPORTS_CONFIG_FILE) the built-in catalogue
    is returned.
    """
    source = path or Config.SPORTS_CONFIG_FILE
    if not source:
        return SPORTS

    with open(source, encoding="utf-8") as handle:
        entries = json.load(handle)

    sports = tuple(
        SportConfig(str(entry["url_number"]), entry["sport"])
        for entry in entries
    )
    logger.info("Loaded %d sports from %s", len(sports), source)
    return sports

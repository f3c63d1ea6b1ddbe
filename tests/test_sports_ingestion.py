import unittest
from unittest.mock import MagicMock, call

import pandas as pd

from sc_connect.configs.sports import SportConfig
from sc_connect.jobs.sports_ingestion import IngestionResult, SportsIngestionJob
from sc_connect.scraping.athletics_scraper import FetchError, ParseError
from sc_connect.storage.base import StorageError
from sc_connect.storage.database_store import DatabaseStore

FOOTBALL = SportConfig("3", "Football")
VOLLEYBALL = SportConfig("19", "Volleyball")


def _frames(sport_name):
    scheduled = pd.DataFrame({
        "sport_name": [sport_name],
        "game_date": [pd.Timestamp(2017, 10, 6, 19, 0)],
        "opponent_name": ["Eagles"],
        "location_name": ["Shoreline Stadium"],
    })
    results = pd.DataFrame({
        "sport_name": [sport_name, sport_name],
        "game_date": [pd.Timestamp(2017, 9, 8), pd.Timestamp(2017, 9, 15)],
        "opponent_name": ["Eagles", "Lake Forest Park"],
        "opponent_score": [1, 2],
        "home_score": [3, 2],
    })
    return scheduled, results


class TestSportsIngestionJob(unittest.TestCase):
    def setUp(self):
        self.store = MagicMock()
        self.store.save_scheduled_games.side_effect = lambda df: len(df)
        self.store.save_game_results.side_effect = lambda df: len(df)
        self.scraper = MagicMock()

    def test_clears_tables_before_inserting(self):
        self.scraper.scrape_sport.return_value = _frames("Football")
        job = SportsIngestionJob(self.store, self.scraper, [FOOTBALL])

        result = job.run()

        self.assertEqual(
            self.store.mock_calls[:2],
            [call.delete_all_scheduled_games(), call.delete_all_game_results()],
        )
        self.assertEqual(result.succeeded, ["Football"])
        self.assertEqual(result.scheduled_games_saved, 1)
        self.assertEqual(result.game_results_saved, 2)
        self.assertTrue(result.ok)

    def test_failed_sport_is_recorded_and_others_continue(self):
        self.scraper.scrape_sport.side_effect = [
            ParseError("School years could not be parsed."),
            _frames("Volleyball"),
        ]
        on_complete = MagicMock()
        job = SportsIngestionJob(self.store, self.scraper, [FOOTBALL, VOLLEYBALL])

        result = job.run(on_complete=on_complete)

        self.assertEqual(result.failed, {"Football": "School years could not be parsed."})
        self.assertEqual(result.succeeded, ["Volleyball"])
        self.assertFalse(result.ok)
        on_complete.assert_called_once_with(result)
        self.assertEqual(self.store.save_scheduled_games.call_count, 1)

    def test_storage_failure_while_clearing_aborts_but_still_completes(self):
        self.store.delete_all_scheduled_games.side_effect = StorageError("gone")
        on_complete = MagicMock()
        job = SportsIngestionJob(self.store, self.scraper, [FOOTBALL, VOLLEYBALL])

        result = job.run(on_complete=on_complete)

        self.assertEqual(result.error, "gone")
        self.scraper.scrape_sport.assert_not_called()
        on_complete.assert_called_once_with(result)

    def test_storage_failure_on_insert_marks_sport_failed(self):
        self.scraper.scrape_sport.return_value = _frames("Football")
        self.store.save_game_results.side_effect = StorageError("disk full")
        job = SportsIngestionJob(self.store, self.scraper, [FOOTBALL])

        result = job.run()

        self.assertEqual(result.failed, {"Football": "disk full"})
        self.assertEqual(result.succeeded, [])
        self.store.delete_scheduled_games_for_sport.assert_called_once_with("Football")
        self.store.delete_game_results_for_sport.assert_called_once_with("Football")

    def test_failed_cleanup_is_logged_and_run_continues(self):
        self.scraper.scrape_sport.side_effect = [_frames("Football"), _frames("Volleyball")]
        self.store.save_game_results.side_effect = [StorageError("disk full"), 2]
        self.store.delete_scheduled_games_for_sport.side_effect = StorageError("locked")
        job = SportsIngestionJob(self.store, self.scraper, [FOOTBALL, VOLLEYBALL])

        with self.assertLogs("sc_connect", level="ERROR") as logs:
            result = job.run()

        self.assertEqual(result.succeeded, ["Volleyball"])
        self.assertTrue(any("partial Football rows" in line for line in logs.output))

    def test_no_sports_still_completes_once(self):
        on_complete = MagicMock()
        result = SportsIngestionJob(self.store, self.scraper, []).run(on_complete=on_complete)

        self.assertIsInstance(result, IngestionResult)
        on_complete.assert_called_once_with(result)


def test_failed_fetch_leaves_that_sport_empty(tmp_path):
    store = DatabaseStore(url=f"sqlite:///{tmp_path / 'ingest.db'}")
    # Rows from a previous run must not survive for the sport that fails now
    stale_scheduled, stale_results = _frames("Football")
    store.save_scheduled_games(stale_scheduled)
    store.save_game_results(stale_results)

    scraper = MagicMock()

    def scrape(sport):
        if sport.name == "Football":
            raise FetchError("HTTP 404 for football page")
        return _frames(sport.name)

    scraper.scrape_sport.side_effect = scrape
    completions = []
    job = SportsIngestionJob(store, scraper, [FOOTBALL, VOLLEYBALL])

    job.run(on_complete=completions.append)

    assert len(completions) == 1
    assert store.find_scheduled_games_for_sport("Football").empty
    assert store.find_game_results_for_sport("Football").empty
    assert len(store.find_scheduled_games_for_sport("Volleyball")) == 1
    assert len(store.find_game_results_for_sport("Volleyball")) == 2


def test_results_insert_failure_removes_that_sports_games(tmp_path, monkeypatch):
    store = DatabaseStore(url=f"sqlite:///{tmp_path / 'partial.db'}")
    real_save_results = store.save_game_results

    def save_results(df):
        if (df["sport_name"] == "Football").any():
            raise StorageError("constraint failed")
        return real_save_results(df)

    monkeypatch.setattr(store, "save_game_results", save_results)
    scraper = MagicMock()
    scraper.scrape_sport.side_effect = lambda sport: _frames(sport.name)

    result = SportsIngestionJob(store, scraper, [FOOTBALL, VOLLEYBALL]).run()

    assert result.failed == {"Football": "constraint failed"}
    assert store.find_scheduled_games_for_sport("Football").empty
    assert len(store.find_scheduled_games_for_sport("Volleyball")) == 1
    assert len(store.find_game_results_for_sport("Volleyball")) == 2


if __name__ == '__main__':
    unittest.main()

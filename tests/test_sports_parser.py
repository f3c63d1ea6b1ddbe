"""Tests for the header-count table classifier and the positional row parsers."""

from datetime import datetime

import pytest

from sc_connect.scraping.sports_parser import (
    TableKind,
    classify_table,
    clean_text,
    parse_result_rows,
    parse_schedule_rows,
    parse_school_years,
    resolve_game_date,
    split_team_score,
)

YEARS = (2017, 2018)


class TestClassifyTable:
    def test_four_headers_is_postseason(self):
        assert classify_table(["Place", "Date", "Event", "Result"]) is TableKind.POSTSEASON

    def test_five_headers_with_place_result_is_postseason(self):
        headers = ["", "Date", "Event", "Place / Result", "Notes"]
        assert classify_table(headers) is TableKind.POSTSEASON

    def test_five_headers_otherwise_is_results(self):
        headers = ["", "W/L", "Date", "Shorecrest", "Opponent"]
        assert classify_table(headers) is TableKind.RESULTS

    def test_six_headers_is_schedule(self):
        headers = ["", "Date", "Opponent", "Time", "Type", "Location"]
        assert classify_table(headers) is TableKind.SCHEDULE

    def test_other_counts_are_unknown(self):
        assert classify_table([]) is TableKind.UNKNOWN
        assert classify_table(["a"] * 7) is TableKind.UNKNOWN


class TestSchoolYears:
    def test_parses_short_second_year(self):
        assert parse_school_years("2017-18") == (2017, 2018)

    def test_ignores_trailing_heading_text(self):
        assert parse_school_years("2019-20 Varsity Football") == (2019, 2020)

    @pytest.mark.parametrize("text", [None, "", "2017", "Season 2017-18", "abcd-ef"])
    def test_unreadable_returns_none(self, text):
        assert parse_school_years(text) is None


class TestResolveGameDate:
    def test_fall_date_takes_first_year(self):
        assert resolve_game_date("Oct 5", None, YEARS) == datetime(2017, 10, 5)

    def test_spring_date_takes_second_year(self):
        assert resolve_game_date("Mar 2", None, YEARS) == datetime(2018, 3, 2)

    def test_august_and_december_are_first_year(self):
        assert resolve_game_date("Tue, Aug 1", None, YEARS).year == 2017
        assert resolve_game_date("Sun, Dec 31", None, YEARS).year == 2017

    def test_july_is_second_year(self):
        assert resolve_game_date("Jul 15", None, YEARS).year == 2018

    def test_weekday_prefix_and_time(self):
        assert resolve_game_date("Fri, Sep 8", "7:00 PM", YEARS) == datetime(2017, 9, 8, 19, 0)
        assert resolve_game_date("Sat, Jan 13", "12:30 pm", YEARS) == datetime(2018, 1, 13, 12, 30)
        assert resolve_game_date("Sat, Jan 13", "12:15 AM", YEARS) == datetime(2018, 1, 13, 0, 15)

    @pytest.mark.parametrize("time_text, expected", [
        ("7 PM", datetime(2017, 10, 5, 19, 0)),
        ("11am", datetime(2017, 10, 5, 11, 0)),
        ("4 p.m.", datetime(2017, 10, 5, 16, 0)),
        ("12 AM", datetime(2017, 10, 5, 0, 0)),
    ])
    def test_hour_only_times(self, time_text, expected):
        assert resolve_game_date("Oct 5", time_text, YEARS) == expected

    def test_words_starting_with_a_or_p_are_not_meridiems(self):
        assert resolve_game_date("Oct 5", "Bus 2 at school", YEARS) == datetime(2017, 10, 5)

    def test_unreadable_time_falls_back_to_midnight(self):
        assert resolve_game_date("Oct 5", "TBA", YEARS) == datetime(2017, 10, 5)

    def test_missing_inputs_return_none(self):
        assert resolve_game_date("", None, YEARS) is None
        assert resolve_game_date("Oct 5", None, None) is None
        assert resolve_game_date("Postponed", None, YEARS) is None

    def test_impossible_date_returns_none(self):
        assert resolve_game_date("Feb 29", None, YEARS) is None


class TestSplitTeamScore:
    def test_two_tokens(self):
        assert split_team_score("Eagles 1") == ("Eagles", 1)

    def test_multi_word_name(self):
        assert split_team_score("Lake Forest Park 2") == ("Lake Forest Park", 2)

    def test_extra_whitespace_is_collapsed(self):
        assert split_team_score("  Mountlake\xa0Terrace   14 ") == ("Mountlake Terrace", 14)

    @pytest.mark.parametrize("text", [None, "", "Eagles", "Lake Forest Park", "Eagles W"])
    def test_unparseable_returns_sentinel(self, text):
        assert split_team_score(text) == (None, -1)


class TestParseResultRows:
    def test_normal_row(self):
        rows = [["", "W", "Fri, Sep 8", "Shorecrest 3", "Eagles 1", ""]]
        [result] = parse_result_rows(rows, YEARS)
        assert result == {
            "game_date": datetime(2017, 9, 8),
            "opponent_name": "Eagles",
            "opponent_score": 1,
            "home_score": 3,
        }

    def test_three_token_opponent(self):
        rows = [["", "L", "Sat, Sep 16", "Shorecrest 2", "Lake Forest Park 2", ""]]
        [result] = parse_result_rows(rows, YEARS)
        assert result["opponent_name"] == "Lake Forest Park"
        assert result["opponent_score"] == 2
        assert result["home_score"] == 2

    def test_unparseable_cells_use_sentinels(self):
        rows = [["", "", "Sat, Sep 23", "Shorecrest", "Meet", ""]]
        [result] = parse_result_rows(rows, YEARS)
        assert result["opponent_name"] == "Multiple Opponents"
        assert result["opponent_score"] == -1
        assert result["home_score"] == -1

    def test_short_row_consumes_the_next_row(self):
        rows = [
            ["", "", "Sat, Sep 23", "Metro Invitational", ""],
            ["", "", "Sat, Sep 30", "Shorecrest 9", "Ignored 1", ""],
            ["", "W", "Thu, Oct 5", "Shorecrest 2", "Eagles 0", ""],
        ]
        results = parse_result_rows(rows, YEARS)
        assert [r["opponent_name"] for r in results] == ["Metro Invitational", "Eagles"]
        assert results[0]["home_score"] == -1
        assert results[0]["opponent_score"] == -1

    def test_row_without_date_is_dropped(self):
        rows = [["", "W", "", "Shorecrest 3", "Eagles 1", ""]]
        assert parse_result_rows(rows, YEARS) == []

    def test_rows_of_other_lengths_are_skipped(self):
        assert parse_result_rows([["only", "three", "cells"]], YEARS) == []


class TestParseScheduleRows:
    def test_normal_row(self):
        rows = [["", "Fri, Oct 6", "Eagles", "7:00 PM", "League", "Shoreline Stadium", ""]]
        assert parse_schedule_rows(rows, YEARS) == [{
            "game_date": datetime(2017, 10, 6, 19, 0),
            "opponent_name": "Eagles",
            "location_name": "Shoreline Stadium",
        }]

    def test_short_row_consumes_the_next_row(self):
        rows = [
            ["", "Sat, Mar 3", "Jamboree"],
            ["", "Sat, Mar 10", "Detail row", "4:00 PM", "", "Somewhere", ""],
            ["", "Tue, Mar 13", "Eagles", "3:30 PM", "League", "Home", ""],
        ]
        games = parse_schedule_rows(rows, YEARS)
        assert [g["opponent_name"] for g in games] == ["Jamboree", "Eagles"]
        assert games[0]["location_name"] == ""
        assert games[0]["game_date"] == datetime(2018, 3, 3)

    def test_short_row_without_date_does_not_consume(self):
        rows = [
            ["", "", "Heading"],
            ["", "Tue, Mar 13", "Eagles", "3:30 PM", "League", "Home", ""],
        ]
        games = parse_schedule_rows(rows, YEARS)
        assert [g["opponent_name"] for g in games] == ["Eagles"]


def test_clean_text_handles_none():
    assert clean_text(None) == ""

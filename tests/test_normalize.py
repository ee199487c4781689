"""
Tests for duration, count and date normalization.
"""
from datetime import datetime, timezone

import pytest

from playlist_probe.extractor.normalize import (
    format_count,
    format_date,
    format_duration,
    parse_abbreviated_count,
    parse_display_duration,
    parse_localized_date,
    parse_machine_duration,
)

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestMachineDuration:
    @pytest.mark.parametrize("text,expected", [
        ("PT1H2M3S", 3723),
        ("PT45S", 45),
        ("PT5M", 300),
        ("PT2H", 7200),
        ("P1DT1S", 86401),
        ("pt3m33s", 213),
    ])
    def test_parses(self, text, expected):
        assert parse_machine_duration(text) == expected

    @pytest.mark.parametrize("text", [None, "", "3:33", "garbage", "T5M"])
    def test_unparseable_is_zero(self, text):
        assert parse_machine_duration(text) == 0


class TestDisplayDuration:
    def test_shapes(self):
        assert parse_display_duration("45") == 45
        assert parse_display_duration("3:33") == 213
        assert parse_display_duration("1:02:03") == 3723

    @pytest.mark.parametrize("text", [None, "", "1:2:3:4", "a:10", "3:xx", "-1:00"])
    def test_other_shapes_are_zero(self, text):
        assert parse_display_duration(text) == 0


class TestFormatDuration:
    def test_minutes_only(self):
        assert format_duration(213) == "3:33"
        assert format_duration(5) == "0:05"

    def test_with_hours(self):
        assert format_duration(3723) == "1:02:03"
        assert format_duration(36000) == "10:00:00"

    def test_negative_clamps(self):
        assert format_duration(-12) == "0:00"

    @pytest.mark.parametrize("seconds", [0, 1, 59, 60, 213, 3599, 3600, 3723, 86399, 90061])
    def test_round_trip(self, seconds):
        assert parse_display_duration(format_duration(seconds)) == seconds


class TestAbbreviatedCount:
    @pytest.mark.parametrize("text,expected", [
        ("1.2K", 1200),
        ("4.5M", 4500000),
        ("42", 42),
        ("", 0),
        ("2,3M", 2300000),
        ("1.5b", 1500000000),
        ("1,234,567 views", 1234567),
        ("12.345 visualizações", 12345),
        ("no digits", 0),
        (None, 0),
    ])
    def test_parses(self, text, expected):
        assert parse_abbreviated_count(text) == expected

    def test_rounds_half_up(self):
        assert parse_abbreviated_count("1.0625K") == 1063

    def test_suffix_must_end_the_token(self):
        # "5 Minutes" is not 5 million
        assert parse_abbreviated_count("5 Minutes") == 5


class TestLocalizedDate:
    @pytest.mark.parametrize("text", [
        "2009-10-25T00:00:00Z",
        "2009-10-25",
        "Oct 25, 2009",
        "25 Oct 2009",
        "25 de out. de 2009",
        "25 de OUT de 2009",
        "25 out 2009",
        "Premiered Oct 25, 2009",
    ])
    def test_known_shapes(self, text):
        dt = parse_localized_date(text, now=NOW)
        assert (dt.year, dt.month, dt.day) == (2009, 10, 25)
        assert dt.tzinfo is not None
        assert dt.utcoffset().total_seconds() == 0

    def test_portuguese_months(self):
        assert parse_localized_date("10 de jan. de 2023", now=NOW).month == 1
        assert parse_localized_date("3 de dez. de 2021", now=NOW).month == 12
        assert parse_localized_date("7 de mai. de 2020", now=NOW).month == 5

    def test_offset_converted_to_utc(self):
        dt = parse_localized_date("2020-01-01T02:00:00+03:00", now=NOW)
        assert dt == datetime(2019, 12, 31, 23, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("text", [None, "", "yesterday", "32 de xyz. de 2020"])
    def test_unparseable_falls_back_to_now(self, text):
        assert parse_localized_date(text, now=NOW) == NOW

    def test_default_now_is_aware(self):
        dt = parse_localized_date("not a date")
        assert dt.tzinfo is not None


class TestDisplayFormatting:
    def test_format_date(self):
        assert format_date(datetime(2009, 10, 25, tzinfo=timezone.utc), "%d/%m/%Y") == "25/10/2009"

    def test_format_count(self):
        assert format_count(1234567) == "1,234,567"
        assert format_count(0) == "0"

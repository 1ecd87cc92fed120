"""Tests for formatting helpers."""

import pytest

from hybsearch.utils import format_duration, sanitize_error_message


@pytest.mark.parametrize("milliseconds, expected", [
    (0, "0ms"),
    (500, "500ms"),
    (1000, "1s"),
    (1500, "1.5s"),
    (65000, "1m 5s"),
    (3_600_000, "1h"),
    (90_061_000, "1d 1h 1m 1s"),
    (None, "an unknown time"),
])
def test_format_duration(milliseconds, expected):
    assert format_duration(milliseconds) == expected


def test_sanitize_error_message():
    assert sanitize_error_message(b"bad [red]\x00input") == "bad \\[red]?input"

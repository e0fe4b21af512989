"""Tests for portfolio_analytics.utils.time_utils."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from portfolio_analytics.utils.time_utils import (
    MONTH_LABELS,
    days_between,
    month_index_of,
    parse_date,
    year_of,
)


class TestParseDate:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2023-03-15", date(2023, 3, 15)),
            (" 2023-03-15 ", date(2023, 3, 15)),
            ("2023-03-15T10:30:00Z", date(2023, 3, 15)),
            ("03/15/2023", date(2023, 3, 15)),
            ("2023/03/15", date(2023, 3, 15)),
            ("15-Mar-2023", date(2023, 3, 15)),
            (date(2023, 3, 15), date(2023, 3, 15)),
            (datetime(2023, 3, 15, 8, 0), date(2023, 3, 15)),
        ],
    )
    def test_accepted_formats(self, raw, expected):
        assert parse_date(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "soon", "2023-13-01"])
    def test_unparsable_is_none(self, raw):
        assert parse_date(raw) is None


def test_days_between():
    assert days_between(date(2023, 1, 1), date(2023, 1, 31)) == 30.0
    assert days_between(date(2023, 1, 31), date(2023, 1, 1)) == -30.0
    assert days_between(None, date(2023, 1, 1)) is None


def test_year_and_month_index():
    assert year_of(date(2024, 5, 10)) == 2024
    assert year_of(None) is None
    assert month_index_of(date(2024, 1, 1)) == 0
    assert month_index_of(date(2024, 12, 31)) == 11
    assert month_index_of(None) is None


def test_month_labels():
    assert len(MONTH_LABELS) == 12
    assert MONTH_LABELS[0] == "Jan"

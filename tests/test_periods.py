"""Tests for calendar-month period arithmetic."""

from datetime import date, datetime

from couplebucks.utils.periods import (
    day_bounds,
    is_elapsed,
    local_midnight,
    month_label,
    next_period_start,
    period_bounds,
    period_end,
    period_start_for,
    previous_period_end,
)


def test_period_start_for():
    assert period_start_for(date(2024, 2, 29)) == date(2024, 2, 1)


def test_next_period_start_crosses_year():
    assert next_period_start(date(2023, 12, 1)) == date(2024, 1, 1)


def test_period_end_leap_february():
    assert period_end(date(2024, 2, 1)) == date(2024, 2, 29)
    assert period_end(date(2023, 2, 1)) == date(2023, 2, 28)


def test_previous_period_end():
    assert previous_period_end(date(2024, 3, 15)) == date(2024, 2, 29)


def test_period_bounds_are_half_open():
    start, end = period_bounds(date(2024, 1, 1))
    assert start == datetime(2024, 1, 1)
    assert end == datetime(2024, 2, 1)


def test_mid_month_period_runs_to_next_month():
    start, end = period_bounds(date(2024, 1, 20))
    assert start == datetime(2024, 1, 20)
    assert end == datetime(2024, 2, 1)


def test_is_elapsed():
    assert is_elapsed(date(2024, 1, 1), date(2024, 2, 1))
    assert is_elapsed(date(2023, 12, 1), date(2024, 1, 31))
    assert not is_elapsed(date(2024, 2, 1), date(2024, 2, 29))
    assert not is_elapsed(date(2024, 3, 1), date(2024, 2, 29))


def test_month_label():
    assert month_label(date(2024, 3, 1)) == "2024-03"


def test_period_bounds_east_of_utc():
    # CET in March until the switch to CEST on the 31st
    assert period_bounds(date(2024, 3, 1), "Europe/Berlin") == (
        datetime(2024, 2, 29, 23),
        datetime(2024, 3, 31, 22),
    )


def test_period_bounds_west_of_utc():
    assert period_bounds(date(2024, 3, 1), "America/Los_Angeles") == (
        datetime(2024, 3, 1, 8),
        datetime(2024, 4, 1, 7),
    )


def test_day_bounds_in_zone():
    assert day_bounds(date(2024, 1, 1), date(2024, 1, 20), "Asia/Tokyo") == (
        datetime(2023, 12, 31, 15),
        datetime(2024, 1, 19, 15),
    )


def test_local_midnight_defaults_to_utc():
    assert local_midnight(date(2024, 6, 1)) == datetime(2024, 6, 1)

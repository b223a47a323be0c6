from datetime import datetime, timezone

import pytest

from core.clock import Clock, ManualClock
from core.exceptions import InvalidArgument
from services.pricing_service import (
    PRICE_TABLE,
    charge_for_purchase,
    price_for_count,
    validate_board_numbers,
    validate_winning_numbers,
)
from services.calendar_service import (
    current_iso_week,
    is_past_cutoff,
    iso_weeks_in_year,
    next_iso_week,
    purchase_cutoff,
)
from services.scoring_service import is_winning_board, split_revenue

TZ = "Europe/Copenhagen"


# ============ pricing ============

@pytest.mark.parametrize("count,price", [(5, 20), (6, 40), (7, 80), (8, 160)])
def test_price_table(count, price):
    assert price_for_count(count) == price
    assert PRICE_TABLE[count] == price


@pytest.mark.parametrize("count", [0, 4, 9])
def test_price_for_unsupported_count(count):
    with pytest.raises(InvalidArgument):
        price_for_count(count)


def test_board_numbers_are_sorted():
    assert validate_board_numbers([16, 3, 9, 1, 7]) == [1, 3, 7, 9, 16]


@pytest.mark.parametrize("numbers", [
    [1, 2, 3, 4],
    [1, 2, 3, 4, 5, 6, 7, 8, 9],
    [1, 1, 2, 3, 4],
    [0, 1, 2, 3, 4],
    [1, 2, 3, 4, 17],
    [1, 2, 3, 4, "5"],
    [1, 2, 3, 4, True],
])
def test_invalid_board_numbers(numbers):
    with pytest.raises(InvalidArgument):
        validate_board_numbers(numbers)


def test_winning_numbers():
    assert validate_winning_numbers([9, 2, 14]) == [2, 9, 14]

    for bad in ([1, 2], [1, 2, 3, 4], [1, 1, 2], [0, 1, 2], [1, 2, 17]):
        with pytest.raises(InvalidArgument):
            validate_winning_numbers(bad)


def test_charge_for_purchase_prepays_repeat_span():
    assert charge_for_purchase(20, 0) == 20
    assert charge_for_purchase(20, 1) == 20
    assert charge_for_purchase(40, 3) == 120


# ============ calendar ============

def test_iso_weeks_in_year():
    assert iso_weeks_in_year(2025) == 52
    assert iso_weeks_in_year(2026) == 53


def test_next_iso_week_wraps_years():
    assert next_iso_week(2025, 13) == (2025, 14)
    assert next_iso_week(2025, 52) == (2026, 1)
    assert next_iso_week(2026, 52) == (2026, 53)
    assert next_iso_week(2026, 53) == (2027, 1)


def test_cutoff_in_winter_time():
    # 2025-W13 Saturday is March 29, still CET (UTC+1)
    assert purchase_cutoff(2025, 13, TZ) == datetime(2025, 3, 29, 16, 0, tzinfo=timezone.utc)


def test_cutoff_in_summer_time():
    # 2025-W14 Saturday is April 5, CEST (UTC+2)
    assert purchase_cutoff(2025, 14, TZ) == datetime(2025, 4, 5, 15, 0, tzinfo=timezone.utc)


def test_cutoff_boundary_is_exclusive():
    cutoff = purchase_cutoff(2025, 13, TZ)
    assert not is_past_cutoff(datetime(2025, 3, 29, 15, 59, 59, tzinfo=timezone.utc), 2025, 13, TZ)
    assert is_past_cutoff(cutoff, 2025, 13, TZ)


def test_current_iso_week_uses_local_time():
    # Sunday 23:30 UTC is already Monday in Copenhagen
    now = datetime(2025, 3, 30, 23, 30, tzinfo=timezone.utc)
    assert current_iso_week(now, "UTC") == (2025, 13)
    assert current_iso_week(now, TZ) == (2025, 14)


# ============ scoring ============

def test_board_containing_all_winning_numbers_wins():
    assert is_winning_board([1, 2, 3, 4, 5], [1, 2, 3])


def test_board_missing_a_winning_number_loses():
    assert not is_winning_board([1, 2, 3, 4, 5], [1, 2, 6])


def test_extra_numbers_do_not_disqualify():
    assert is_winning_board([2, 4, 6, 8, 10, 12, 14, 16], [4, 10, 16])


@pytest.mark.parametrize("revenue,prize,org", [(0, 0, 0), (100, 70, 30), (20, 14, 6), (35, 24, 11)])
def test_split_revenue(revenue, prize, org):
    assert split_revenue(revenue) == (prize, org)


# ============ clock ============

def test_clock_without_now_cannot_be_built():
    class Broken(Clock):
        pass

    with pytest.raises(TypeError):
        Broken()


def test_manual_clock_refuses_naive_time():
    with pytest.raises(ValueError):
        ManualClock(datetime(2025, 3, 24, 10, 0))

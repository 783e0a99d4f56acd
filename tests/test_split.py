"""Tests for split-percentage calculation."""

import pytest
from decimal import Decimal

from couplebucks.domain.entities import IncomeFrequency, SplitResult, SplitType
from couplebucks.domain.errors import ValidationError
from couplebucks.domain.split import (
    compute_split,
    monthly_equivalent,
    proportional_split,
    validate_split,
)

MONTHLY = IncomeFrequency.MONTHLY
WEEKLY = IncomeFrequency.WEEKLY
BIWEEKLY = IncomeFrequency.BIWEEKLY


def test_monthly_equivalent_factors():
    assert monthly_equivalent(Decimal("1000"), WEEKLY) == Decimal("4333.333000")
    assert monthly_equivalent(Decimal("1000"), BIWEEKLY) == Decimal("2166.667000")
    assert monthly_equivalent(Decimal("1000"), MONTHLY) == Decimal("1000")


def test_proportional_split_basic():
    result = proportional_split([(Decimal("6000"), MONTHLY)], [(Decimal("4000"), MONTHLY)])
    assert result.split == SplitResult(60, 40)
    assert result.total_income == Decimal("10000")


def test_proportional_split_rounds_half_up():
    # 1 / 8 = 12.5% rounds up to 13, partner B takes the remainder
    result = proportional_split([(Decimal("100"), MONTHLY)], [(Decimal("700"), MONTHLY)])
    assert result.split == SplitResult(13, 87)


def test_proportional_split_sums_incomes_per_partner():
    result = proportional_split(
        [(Decimal("3000"), MONTHLY), (Decimal("500"), MONTHLY)],
        [(Decimal("1500"), MONTHLY)],
    )
    assert result.user1_income == Decimal("3500")
    assert result.split == SplitResult(70, 30)


def test_proportional_split_normalizes_frequencies():
    # Weekly 1000 is about 4333 a month against a flat 4333
    result = proportional_split([(Decimal("1000"), WEEKLY)], [(Decimal("4333.333"), MONTHLY)])
    assert result.split == SplitResult(50, 50)


def test_zero_household_income_splits_evenly():
    result = proportional_split([], [])
    assert result.split == SplitResult(50, 50)
    assert result.total_income == 0


def test_one_partner_without_income():
    result = proportional_split([(Decimal("2500"), MONTHLY)], [])
    assert result.split == SplitResult(100, 0)


@pytest.mark.parametrize(
    "a,b",
    [("1", "2"), ("333", "667"), ("1", "1"), ("12345.67", "0.01"), ("5", "995"), ("0.5", "0.5")],
)
def test_percentages_always_sum_to_100(a, b):
    split = proportional_split([(Decimal(a), MONTHLY)], [(Decimal(b), BIWEEKLY)]).split
    assert split.percentage_user1 + split.percentage_user2 == 100
    assert 0 <= split.percentage_user1 <= 100


def test_compute_split_fifty_fifty():
    assert compute_split(SplitType.FIFTY_FIFTY) == SplitResult(50, 50)


def test_compute_split_single_payer():
    assert compute_split(SplitType.SINGLE_PAYER, payer_is_user1=True) == SplitResult(100, 0)
    assert compute_split(SplitType.SINGLE_PAYER, payer_is_user1=False) == SplitResult(0, 100)


def test_compute_split_custom():
    assert compute_split(SplitType.CUSTOM, custom=(65, 35)) == SplitResult(65, 35)


def test_compute_split_custom_requires_pair():
    with pytest.raises(ValidationError):
        compute_split(SplitType.CUSTOM)


def test_compute_split_proportional():
    result = compute_split(
        "proportional",
        incomes_user1=[(Decimal("3000"), MONTHLY)],
        incomes_user2=[(Decimal("1000"), MONTHLY)],
    )
    assert result == SplitResult(75, 25)


@pytest.mark.parametrize("a,b", [(60, 30), (101, -1), (50, 51), (50.0, 50), (True, 99)])
def test_validate_split_rejects(a, b):
    with pytest.raises(ValidationError):
        validate_split(a, b)


def test_validate_split_accepts_edges():
    assert validate_split(0, 100) == SplitResult(0, 100)
    assert validate_split(100, 0) == SplitResult(100, 0)

"""Split-percentage calculation."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from couplebucks.domain.entities import (
    IncomeFrequency,
    ProportionalSplit,
    SplitResult,
    SplitType,
)
from couplebucks.domain.errors import ValidationError, split_not_100

# 52 weeks / 12 months and 26 pay periods / 12 months
MONTHLY_FACTORS = {
    IncomeFrequency.WEEKLY: Decimal("4.333333"),
    IncomeFrequency.BIWEEKLY: Decimal("2.166667"),
    IncomeFrequency.MONTHLY: Decimal("1"),
}

EVEN_SPLIT = SplitResult(percentage_user1=50, percentage_user2=50)


def monthly_equivalent(amount: Decimal, frequency: IncomeFrequency) -> Decimal:
    """Normalize an income amount to its monthly equivalent."""
    return Decimal(amount) * MONTHLY_FACTORS[IncomeFrequency(frequency)]


def validate_split(percentage_user1: int, percentage_user2: int) -> SplitResult:
    """Validate a caller-supplied split.

    Raises:
        ValidationError: If a percentage is outside 0-100 or the pair does not sum to 100
    """
    for value in (percentage_user1, percentage_user2):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"Split percentages must be whole numbers, got {value!r}")
        if not 0 <= value <= 100:
            raise ValidationError(f"Split percentage {value} is outside 0-100")
    if percentage_user1 + percentage_user2 != 100:
        raise ValidationError(split_not_100(percentage_user1, percentage_user2))
    return SplitResult(percentage_user1=percentage_user1, percentage_user2=percentage_user2)


def proportional_split(
    incomes_user1: Iterable[tuple[Decimal, IncomeFrequency]],
    incomes_user2: Iterable[tuple[Decimal, IncomeFrequency]],
) -> ProportionalSplit:
    """Split in proportion to each partner's normalized monthly income.

    Args:
        incomes_user1: (amount, frequency) pairs for the first partner
        incomes_user2: (amount, frequency) pairs for the second partner

    Returns:
        ProportionalSplit; 50/50 when the household has no income
    """
    user1_income = sum(
        (monthly_equivalent(amount, freq) for amount, freq in incomes_user1), Decimal("0")
    )
    user2_income = sum(
        (monthly_equivalent(amount, freq) for amount, freq in incomes_user2), Decimal("0")
    )
    total = user1_income + user2_income

    if total == 0:
        return ProportionalSplit(
            split=EVEN_SPLIT,
            user1_income=user1_income,
            user2_income=user2_income,
            total_income=total,
        )

    share = (user1_income / total * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    percentage_user1 = int(share)
    # B takes the remainder so the pair always sums to exactly 100
    split = SplitResult(percentage_user1=percentage_user1, percentage_user2=100 - percentage_user1)
    return ProportionalSplit(
        split=split,
        user1_income=user1_income,
        user2_income=user2_income,
        total_income=total,
    )


def compute_split(
    split_type: SplitType,
    payer_is_user1: bool = True,
    custom: Optional[tuple[int, int]] = None,
    incomes_user1: Iterable[tuple[Decimal, IncomeFrequency]] = (),
    incomes_user2: Iterable[tuple[Decimal, IncomeFrequency]] = (),
) -> SplitResult:
    """Compute the two split percentages for a policy.

    Args:
        split_type: Split policy
        payer_is_user1: For single_payer, whether the first partner pays everything
        custom: For custom, the caller-supplied pair
        incomes_user1: For proportional, the first partner's income sources
        incomes_user2: For proportional, the second partner's income sources

    Returns:
        SplitResult summing to 100

    Raises:
        ValidationError: If a custom split is missing or invalid
    """
    split_type = SplitType(split_type)

    if split_type == SplitType.FIFTY_FIFTY:
        return EVEN_SPLIT

    if split_type == SplitType.SINGLE_PAYER:
        if payer_is_user1:
            return SplitResult(percentage_user1=100, percentage_user2=0)
        return SplitResult(percentage_user1=0, percentage_user2=100)

    if split_type == SplitType.CUSTOM:
        if custom is None:
            raise ValidationError("Custom split requires both percentages")
        return validate_split(*custom)

    return proportional_split(incomes_user1, incomes_user2).split

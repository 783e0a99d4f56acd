"""Status classifiers for budgets and bills."""

from datetime import date
from decimal import Decimal

from couplebucks.domain.entities import BillStatus, BillStatusResult, BudgetStatus
from couplebucks.domain.errors import ValidationError

WARNING_RATIO = Decimal("0.75")
OVER_RATIO = Decimal("1")
DUE_SOON_DAYS = 7


def budget_percentage(spent: Decimal, limit: Decimal) -> Decimal:
    """Return spent as a percentage of limit.

    Raises:
        ValidationError: If limit is not positive
    """
    if limit <= 0:
        raise ValidationError(f"Budget limit must be positive, got {limit}")
    return Decimal(spent) / Decimal(limit) * 100


def classify_budget_status(spent: Decimal, limit: Decimal) -> BudgetStatus:
    """Classify spend against a limit.

    Below 75% is on track, 75% up to and including 100% is a warning,
    anything above 100% is over.

    Args:
        spent: Amount spent in the period
        limit: Positive budget limit

    Returns:
        BudgetStatus tier

    Raises:
        ValidationError: If limit is not positive
    """
    if limit <= 0:
        raise ValidationError(f"Budget limit must be positive, got {limit}")

    ratio = Decimal(spent) / Decimal(limit)
    if ratio < WARNING_RATIO:
        return BudgetStatus.SUCCESS
    if ratio <= OVER_RATIO:
        return BudgetStatus.WARNING
    return BudgetStatus.ERROR


def classify_bill_status(due_date: date, today: date) -> BillStatusResult:
    """Classify a due date relative to today.

    Args:
        due_date: Date the bill is due
        today: Reference day, already pinned to the couple's timezone

    Returns:
        BillStatusResult with the status and whole days until due
        (negative when overdue)
    """
    days = (due_date - today).days
    if days < 0:
        return BillStatusResult(status=BillStatus.OVERDUE, days_until_due=days)
    if days <= DUE_SOON_DAYS:
        return BillStatusResult(status=BillStatus.DUE_SOON, days_until_due=days)
    return BillStatusResult(status=BillStatus.UPCOMING, days_until_due=days)

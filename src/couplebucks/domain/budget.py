"""Budget domain service."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from couplebucks.database.base import Database
from couplebucks.domain.couple import couple_timezone, couple_today
from couplebucks.domain.entities import (
    Budget as BudgetEntity,
    BudgetOverview,
    BudgetProgress,
    Expense as ExpenseEntity,
    SpendDrift,
)
from couplebucks.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    budget_not_found,
    duplicate_budget_category,
    non_positive_amount,
)
from couplebucks.domain.rollover import RolloverService
from couplebucks.domain.status import budget_percentage, classify_budget_status
from couplebucks.utils.periods import period_bounds, period_start_for

logger = logging.getLogger(__name__)


def _progress(budget: BudgetEntity) -> BudgetProgress:
    return BudgetProgress(
        budget=budget,
        remaining=budget.limit_amount - budget.current_spent,
        percentage=budget_percentage(budget.current_spent, budget.limit_amount),
        status=classify_budget_status(budget.current_spent, budget.limit_amount),
    )


def _in_period(budget: BudgetEntity, expense: ExpenseEntity, timezone: str) -> bool:
    start, end = period_bounds(budget.period_start_date, timezone)
    return start <= expense.created_at < end


class BudgetService:
    """Service for managing budgets and their cached period spend."""

    def __init__(self, db: Database):
        """Initialize budget service.

        Args:
            db: Database instance
        """
        self.db = db
        self.rollover = RolloverService(db)

    def compute_current_spend(self, couple_id: int, category: str, period_start: date) -> Decimal:
        """Sum the ledger for one category over one monthly period.

        Args:
            couple_id: Couple ID
            category: Budget category
            period_start: First day of the period

        Returns:
            Total of entries created from local midnight on period_start up to
            local midnight on the first of the next month, in the couple's timezone
        """
        start, end = period_bounds(period_start, couple_timezone(self.db, couple_id))
        total, _ = self.db.sum_expenses(couple_id, category, start, end)
        return total

    def create_budget_for_category(
        self,
        couple_id: int,
        category: str,
        limit_amount: Decimal,
        auto_reset_enabled: bool = True,
        today: Optional[date] = None,
    ) -> int:
        """Create a budget starting at the first of the current month.

        The cached spend is initialized from entries already in the ledger
        for the current month.

        Returns:
            Budget ID

        Raises:
            ValidationError: If the category is empty or the limit is not positive
            ConflictError: If the couple already budgets this category
        """
        category = (category or "").strip()
        if not category:
            raise ValidationError("Budget category is required")
        if limit_amount <= 0:
            raise ValidationError(non_positive_amount("Budget limit", limit_amount))
        if self.db.get_budget_by_category(couple_id, category) is not None:
            raise ConflictError(duplicate_budget_category(category))

        if today is None:
            today = couple_today(self.db, couple_id)
        period_start = period_start_for(today)
        current_spent = self.compute_current_spend(couple_id, category, period_start)

        budget_id = self.db.create_budget(
            couple_id=couple_id,
            category=category,
            limit_amount=limit_amount,
            current_spent=current_spent,
            period_start_date=period_start,
            auto_reset_enabled=auto_reset_enabled,
        )
        logger.info(
            "Created budget %s for '%s' with limit %s (already spent %s)",
            budget_id,
            category,
            limit_amount,
            current_spent,
        )
        return budget_id

    def get_budget(self, budget_id: int) -> Optional[BudgetEntity]:
        return self.db.get_budget(budget_id)

    def get_budget_by_category(self, couple_id: int, category: str) -> Optional[BudgetEntity]:
        return self.db.get_budget_by_category(couple_id, category)

    def list_budgets(self, couple_id: int) -> list[BudgetEntity]:
        """List budgets as stored, without rolling over elapsed periods."""
        return self.db.list_budgets(couple_id)

    def list_with_progress(self, couple_id: int, today: Optional[date] = None) -> BudgetOverview:
        """Load a couple's budgets with progress figures.

        Elapsed periods are rolled over first, so every budget returned is
        for the current month unless its rollover failed or it is reset
        manually.

        Args:
            couple_id: Couple ID
            today: Reference day (defaults to today in the couple's timezone)

        Returns:
            BudgetOverview with the progress of each budget and the rollover report
        """
        report = self.rollover.rollover_couple(couple_id, today)
        budgets = tuple(_progress(b) for b in self.db.list_budgets(couple_id))
        return BudgetOverview(budgets=budgets, rollover=report)

    def recalculate_spending(self, budget_id: int) -> BudgetEntity:
        """Recompute a budget's cached spend from the ledger.

        Raises:
            NotFoundError: If the budget doesn't exist
        """
        budget = self.db.get_budget(budget_id)
        if budget is None:
            raise NotFoundError(budget_not_found(budget_id))
        actual = self.compute_current_spend(
            budget.couple_id, budget.category, budget.period_start_date
        )
        if actual == budget.current_spent:
            return budget
        return self.db.update_budget(budget_id, current_spent=actual)

    def reconcile(self, couple_id: int) -> list[SpendDrift]:
        """Recompute every budget of a couple and report the ones that drifted."""
        drifts = []
        for budget in self.db.list_budgets(couple_id):
            actual = self.compute_current_spend(couple_id, budget.category, budget.period_start_date)
            if actual == budget.current_spent:
                continue
            logger.warning(
                "Budget %s (%s) cached spend %s differs from ledger %s; correcting",
                budget.id,
                budget.category,
                budget.current_spent,
                actual,
            )
            self.db.update_budget(budget.id, current_spent=actual)
            drifts.append(
                SpendDrift(
                    budget_id=budget.id,
                    category=budget.category,
                    cached=budget.current_spent,
                    actual=actual,
                )
            )
        return drifts

    def apply_expense_added(self, expense: ExpenseEntity) -> Optional[BudgetEntity]:
        """Add a new ledger entry to the matching budget's cached spend.

        Returns:
            The updated budget, or None if no budget covers the entry
        """
        budget = self.db.get_budget_by_category(expense.couple_id, expense.category)
        if budget is None:
            return None
        if not _in_period(budget, expense, couple_timezone(self.db, expense.couple_id)):
            return None
        return self.db.update_budget(
            budget.id, current_spent=budget.current_spent + expense.amount
        )

    def apply_expense_removed(self, expense: ExpenseEntity) -> Optional[BudgetEntity]:
        """Take a removed ledger entry out of the matching budget's cached spend.

        The cached spend never goes below zero. Hitting the floor means the
        cache had drifted from the ledger and is logged.

        Returns:
            The updated budget, or None if no budget covers the entry
        """
        budget = self.db.get_budget_by_category(expense.couple_id, expense.category)
        if budget is None:
            return None
        if not _in_period(budget, expense, couple_timezone(self.db, expense.couple_id)):
            return None
        new_spent = budget.current_spent - expense.amount
        if new_spent < 0:
            logger.warning(
                "Budget %s (%s) cached spend %s is below removed entry %s; clamping to 0",
                budget.id,
                budget.category,
                budget.current_spent,
                expense.amount,
            )
            new_spent = Decimal("0")
        return self.db.update_budget(budget.id, current_spent=new_spent)

    def update_limit(self, budget_id: int, limit_amount: Decimal) -> BudgetEntity:
        """Change a budget's limit.

        Raises:
            ValidationError: If the limit is not positive
            NotFoundError: If the budget doesn't exist
        """
        if limit_amount <= 0:
            raise ValidationError(non_positive_amount("Budget limit", limit_amount))
        return self.db.update_budget(budget_id, limit_amount=limit_amount)

    def set_auto_reset(self, budget_id: int, enabled: bool) -> BudgetEntity:
        return self.db.update_budget(budget_id, auto_reset_enabled=enabled)

    def delete_budget(self, budget_id: int) -> None:
        """Delete a budget and its history. Ledger entries are kept."""
        if self.db.get_budget(budget_id) is None:
            raise NotFoundError(budget_not_found(budget_id))
        self.db.delete_budget(budget_id)
        logger.info("Deleted budget %s", budget_id)

    def check_threshold(
        self, couple_id: int, category: str, threshold_percent: Decimal = Decimal("80")
    ) -> Optional[BudgetProgress]:
        """Return the category's progress if spend has reached threshold_percent.

        Returns:
            BudgetProgress, or None if there is no budget or it is below the threshold
        """
        budget = self.db.get_budget_by_category(couple_id, category)
        if budget is None:
            return None
        progress = _progress(budget)
        if progress.percentage < Decimal(threshold_percent):
            return None
        return progress

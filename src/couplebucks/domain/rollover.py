"""Budget period rollover.

A budget is elapsed once its period_start_date lies in a calendar month
before today's. Rolling it over freezes the elapsed period into a
BudgetHistory row and restarts the budget at the first of the current
month. Rollover runs lazily, whenever a couple's budgets are loaded, so a
period that elapsed while nobody looked is archived on the next access.
"""

import logging
from datetime import date, timedelta
from typing import Optional

from couplebucks.database.base import Database
from couplebucks.domain.couple import couple_timezone, couple_today
from couplebucks.domain.entities import (
    Budget,
    BudgetHistory,
    MonthlyBudgetLine,
    RolloverFailure,
    RolloverReport,
)
from couplebucks.domain.errors import (
    NotFoundError,
    ValidationError,
    budget_not_found,
)
from couplebucks.domain.status import classify_budget_status
from couplebucks.utils.periods import (
    day_bounds,
    is_elapsed,
    month_label,
    next_period_start,
    period_bounds,
    period_start_for,
)

logger = logging.getLogger(__name__)


class RolloverService:
    """Service archiving elapsed budget periods."""

    def __init__(self, db: Database):
        """Initialize rollover service.

        Args:
            db: Database instance
        """
        self.db = db

    def _today(self, couple_id: int, today: Optional[date]) -> date:
        return today if today is not None else couple_today(self.db, couple_id)

    def find_elapsed(self, couple_id: int, today: Optional[date] = None) -> list[Budget]:
        """List the couple's budgets whose period has elapsed.

        Args:
            couple_id: Couple ID
            today: Reference day (defaults to today in the couple's timezone)

        Returns:
            Elapsed budgets ordered by category
        """
        today = self._today(couple_id, today)
        return [
            b for b in self.db.list_budgets(couple_id) if is_elapsed(b.period_start_date, today)
        ]

    def _archive(
        self, budget: Budget, end_exclusive: date, new_start: date
    ) -> tuple[BudgetHistory, bool]:
        """Archive [period_start, end_exclusive) and restart the budget at new_start.

        Day boundaries are local midnights in the couple's timezone.
        """
        timezone = couple_timezone(self.db, budget.couple_id)
        start, end = day_bounds(budget.period_start_date, end_exclusive, timezone)
        total, count = self.db.sum_expenses(budget.couple_id, budget.category, start, end)
        status = classify_budget_status(total, budget.limit_amount)

        # Entries already posted in the new period stay counted
        new_spent, _ = self.db.sum_expenses(
            budget.couple_id, budget.category, *period_bounds(new_start, timezone)
        )

        history, created = self.db.archive_budget_period(
            budget_id=budget.id,
            period_start=budget.period_start_date,
            period_end=end_exclusive - timedelta(days=1),
            total_spent=total,
            expenses_count=count,
            status=status.value,
            new_period_start=new_start,
            new_current_spent=new_spent,
        )
        if created:
            logger.info(
                "Archived budget %s (%s) period %s: spent %s of %s, %s",
                budget.id,
                budget.category,
                budget.period_start_date,
                total,
                budget.limit_amount,
                status.value,
            )
        else:
            logger.info(
                "Budget %s period %s was already archived; restarted only",
                budget.id,
                budget.period_start_date,
            )
        return history, created

    def rollover_budget(self, budget: Budget, today: date) -> tuple[BudgetHistory, bool]:
        """Archive one elapsed budget and restart it in today's month.

        The archived range runs from the budget's period start through the
        last day of the previous month, so a budget left untouched for
        several months is archived as one record. If a record already
        exists for (budget, period_start) it is kept and only the restart
        happens.

        Args:
            budget: Elapsed budget
            today: Reference day

        Returns:
            (history record, True if written by this call)

        Raises:
            ValidationError: If the budget's period has not elapsed
            BackendError: If the store failed; nothing was changed
        """
        if not is_elapsed(budget.period_start_date, today):
            raise ValidationError(
                f"Budget {budget.id} period starting {budget.period_start_date} has not elapsed"
            )
        current_start = period_start_for(today)
        return self._archive(budget, end_exclusive=current_start, new_start=current_start)

    def rollover_couple(self, couple_id: int, today: Optional[date] = None) -> RolloverReport:
        """Roll over every elapsed budget of a couple.

        Each budget is handled on its own: a failure is recorded in the
        report and leaves that budget elapsed, so the next load retries it.
        Budgets with auto reset disabled are left alone and reported as
        manual.

        Args:
            couple_id: Couple ID
            today: Reference day (defaults to today in the couple's timezone)

        Returns:
            RolloverReport
        """
        today = self._today(couple_id, today)
        archived = []
        already_archived = []
        manual = []
        failed = []

        for budget in self.find_elapsed(couple_id, today):
            if not budget.auto_reset_enabled:
                manual.append(budget.id)
                continue
            try:
                history, created = self.rollover_budget(budget, today)
            except Exception as e:
                logger.warning(
                    "Rollover failed for budget %s (%s): %s", budget.id, budget.category, e
                )
                failed.append(
                    RolloverFailure(budget_id=budget.id, category=budget.category, error=str(e))
                )
                continue
            if created:
                archived.append(history)
            else:
                already_archived.append(budget.id)

        return RolloverReport(
            archived=tuple(archived),
            already_archived=tuple(already_archived),
            manual=tuple(manual),
            failed=tuple(failed),
        )

    def reset_budget(self, budget_id: int, today: Optional[date] = None) -> BudgetHistory:
        """Archive a budget's running period and restart it now.

        An elapsed budget is rolled over as usual. A current budget is
        archived through yesterday and restarted today.

        Returns:
            The history record of the archived period

        Raises:
            NotFoundError: If the budget doesn't exist
            ValidationError: If the period started today, leaving nothing to archive
        """
        budget = self.db.get_budget(budget_id)
        if budget is None:
            raise NotFoundError(budget_not_found(budget_id))
        today = self._today(budget.couple_id, today)

        if is_elapsed(budget.period_start_date, today):
            history, _ = self.rollover_budget(budget, today)
            return history

        if budget.period_start_date >= today:
            raise ValidationError(
                f"Budget {budget_id} period started {budget.period_start_date}; nothing to reset"
            )
        history, _ = self._archive(budget, end_exclusive=today, new_start=today)
        return history

    def list_history(
        self, couple_id: int, budget_id: Optional[int] = None
    ) -> list[BudgetHistory]:
        """List archived periods newest first."""
        return self.db.list_budget_history(couple_id, budget_id=budget_id)

    def month_report(
        self, couple_id: int, year: int, month: int, today: Optional[date] = None
    ) -> list[MonthlyBudgetLine]:
        """Per-category figures for one calendar month.

        The current month is read from the live budgets, after rolling over
        anything elapsed. Earlier months are read from history only: every archived
        period overlapping the month is listed, including one that started
        in an earlier month. A category with no such period is absent.

        Raises:
            ValidationError: If the month is invalid or lies in the future
        """
        try:
            month_start = date(year, month, 1)
        except ValueError as e:
            raise ValidationError(f"Invalid month {year}-{month}: {e}") from e
        today = self._today(couple_id, today)
        current_start = period_start_for(today)

        if month_start > current_start:
            raise ValidationError(f"No figures for future month {month_label(month_start)}")

        if month_start == current_start:
            self.rollover_couple(couple_id, today)
            lines = []
            for budget in self.db.list_budgets(couple_id):
                spent = budget.current_spent
                lines.append(
                    MonthlyBudgetLine(
                        category=budget.category,
                        limit_amount=budget.limit_amount,
                        total_spent=spent,
                        remaining=budget.limit_amount - spent,
                        status=classify_budget_status(spent, budget.limit_amount),
                        budget_id=budget.id,
                    )
                )
            return lines

        # Archived periods can span several months; keep every one overlapping this month
        records = [
            r
            for r in self.db.list_budget_history(couple_id, end=next_period_start(month_start))
            if r.period_end >= month_start
        ]
        return [
            MonthlyBudgetLine(
                category=r.category,
                limit_amount=r.limit_amount,
                total_spent=r.total_spent,
                remaining=r.limit_amount - r.total_spent,
                status=r.status,
                expenses_count=r.expenses_count,
                budget_id=r.budget_id,
            )
            for r in sorted(records, key=lambda r: (r.category, r.period_start))
        ]

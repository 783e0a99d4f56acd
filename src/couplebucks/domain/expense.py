"""Expense ledger domain service."""

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Optional, Union

from couplebucks.database.base import Database
from couplebucks.domain.budget import BudgetService
from couplebucks.domain.couple import couple_timezone
from couplebucks.domain.entities import Expense as ExpenseEntity, SplitType
from couplebucks.domain.errors import (
    NotFoundError,
    ValidationError,
    couple_not_found,
    expense_not_found,
    non_positive_amount,
)
from couplebucks.domain.income import IncomeService
from couplebucks.domain.split import validate_split
from couplebucks.storage.receipts import ReceiptStore
from couplebucks.utils.clock import to_naive_utc
from couplebucks.utils.periods import local_midnight

logger = logging.getLogger(__name__)


def _date_bounds(
    start_date: Optional[date], end_date: Optional[date], timezone: str
) -> tuple[Optional[datetime], Optional[datetime]]:
    """Convert an inclusive range of local days to half-open naive UTC bounds."""
    start = local_midnight(start_date, timezone) if start_date is not None else None
    end = None
    if end_date is not None:
        end = local_midnight(end_date + timedelta(days=1), timezone)
    return start, end


class ExpenseService:
    """Service for the shared expense ledger.

    Every write keeps the matching budget's cached spend in step with the
    ledger.
    """

    def __init__(self, db: Database, receipts: Optional[ReceiptStore] = None):
        """Initialize expense service.

        Args:
            db: Database instance
            receipts: Optional receipt store; receipts are removed with their expense
        """
        self.db = db
        self.receipts = receipts
        self.budgets = BudgetService(db)
        self.incomes = IncomeService(db)

    def _validate(self, amount: Decimal, category: str) -> str:
        if amount <= 0:
            raise ValidationError(non_positive_amount("Expense amount", amount))
        category = (category or "").strip()
        if not category:
            raise ValidationError("Expense category is required")
        return category

    def create_expense(
        self,
        couple_id: int,
        created_by: int,
        amount: Decimal,
        category: str,
        description: Optional[str] = None,
        split_type: Optional[SplitType] = None,
        custom_split: Optional[tuple[int, int]] = None,
        payer_id: Optional[int] = None,
        receipt_url: Optional[str] = None,
        bill_id: Optional[int] = None,
        created_at: Optional[datetime] = None,
    ) -> int:
        """Record an expense and add it to the category's budget.

        Args:
            couple_id: Couple ID
            created_by: Partner recording the expense
            amount: Positive amount
            category: Spending category
            description: Optional description
            split_type: Split policy (defaults to the couple's default)
            custom_split: For custom splits, the two percentages
            payer_id: For single_payer, who pays (defaults to created_by)
            receipt_url: Optional receipt location
            bill_id: Optional bill this expense settles
            created_at: Optional timestamp (defaults to now, UTC)

        Returns:
            Expense ID

        Raises:
            ValidationError: If amount, category or split is invalid
            NotFoundError: If the couple doesn't exist
        """
        category = self._validate(amount, category)
        if self.db.get_couple(couple_id) is None:
            raise NotFoundError(couple_not_found(couple_id))

        split_type, split = self.incomes.resolve_split(
            couple_id,
            split_type=split_type,
            payer_id=payer_id if payer_id is not None else created_by,
            custom=custom_split,
        )

        expense_id = self.db.create_expense(
            couple_id=couple_id,
            created_by=created_by,
            amount=amount,
            category=category,
            split_type=split_type.value,
            split_percentage_user1=split.percentage_user1,
            split_percentage_user2=split.percentage_user2,
            description=description,
            receipt_url=receipt_url,
            bill_id=bill_id,
            created_at=to_naive_utc(created_at) if created_at is not None else None,
        )
        self.budgets.apply_expense_added(self.db.get_expense(expense_id))
        return expense_id

    def get_expense(self, expense_id: int) -> Optional[ExpenseEntity]:
        return self.db.get_expense(expense_id)

    def list_expenses(
        self,
        couple_id: int,
        category: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> list[ExpenseEntity]:
        """List expenses newest first.

        Args:
            couple_id: Couple ID
            category: Optional category filter
            start_date: Optional first day (inclusive)
            end_date: Optional last day (inclusive)
            limit: Optional maximum number of entries

        Returns:
            List of expense entities
        """
        start, end = _date_bounds(start_date, end_date, couple_timezone(self.db, couple_id))
        return self.db.list_expenses(couple_id, category=category, start=start, end=end, limit=limit)

    def update_expense(
        self,
        expense_id: int,
        amount: Optional[Decimal] = None,
        category: Optional[str] = None,
        description: Optional[str] = None,
        custom_split: Optional[tuple[int, int]] = None,
        receipt_url: Optional[str] = None,
    ) -> ExpenseEntity:
        """Edit an expense and move its amount between budget caches.

        Raises:
            NotFoundError: If the expense doesn't exist
            ValidationError: If the new amount, category or split is invalid
        """
        old = self.db.get_expense(expense_id)
        if old is None:
            raise NotFoundError(expense_not_found(expense_id))

        category = self._validate(
            amount if amount is not None else old.amount,
            category if category is not None else old.category,
        )

        split_fields = {}
        if custom_split is not None:
            split = validate_split(*custom_split)
            split_fields = {
                "split_type": SplitType.CUSTOM.value,
                "split_percentage_user1": split.percentage_user1,
                "split_percentage_user2": split.percentage_user2,
            }

        self.db.update_expense(
            expense_id,
            amount=amount,
            category=category,
            description=description,
            receipt_url=receipt_url,
            **split_fields,
        )
        new = self.db.get_expense(expense_id)
        if new.amount != old.amount or new.category != old.category:
            self.budgets.apply_expense_removed(old)
            self.budgets.apply_expense_added(new)
        return new

    def delete_expense(self, expense_id: int) -> None:
        """Delete an expense, take it out of its budget and drop its receipt.

        Raises:
            NotFoundError: If the expense doesn't exist
        """
        expense = self.db.get_expense(expense_id)
        if expense is None:
            raise NotFoundError(expense_not_found(expense_id))

        self.db.delete_expense(expense_id)
        self.budgets.apply_expense_removed(expense)

        if expense.receipt_url and self.receipts is not None:
            try:
                self.receipts.delete(expense.receipt_url)
            except (OSError, ValidationError) as e:
                logger.warning("Could not remove receipt of expense %s: %s", expense_id, e)

    def attach_receipt(self, expense_id: int, source: Union[str, Path]) -> ExpenseEntity:
        """Upload a receipt file and link it to an expense, replacing any previous one.

        Raises:
            NotFoundError: If the expense doesn't exist
            ValidationError: If no receipt store is configured or the file is missing
        """
        if self.receipts is None:
            raise ValidationError("No receipt store configured")
        expense = self.db.get_expense(expense_id)
        if expense is None:
            raise NotFoundError(expense_not_found(expense_id))

        name = f"{expense_id}_{Path(source).name}"
        url = self.receipts.upload(source, expense.couple_id, name=name)
        self.db.update_expense(expense_id, receipt_url=url)
        if expense.receipt_url:
            try:
                self.receipts.delete(expense.receipt_url)
            except (OSError, ValidationError) as e:
                logger.warning("Could not remove old receipt of expense %s: %s", expense_id, e)
        return self.db.get_expense(expense_id)

    def total_spending(
        self,
        couple_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Decimal:
        """Total of all expenses between two days, both inclusive."""
        start, end = _date_bounds(start_date, end_date, couple_timezone(self.db, couple_id))
        total, _ = self.db.sum_expenses(couple_id, start=start, end=end)
        return total

    def spending_by_category(
        self,
        couple_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> dict[str, Decimal]:
        """Totals per category between two days, both inclusive."""
        start, end = _date_bounds(start_date, end_date, couple_timezone(self.db, couple_id))
        return self.db.sum_expenses_by_category(couple_id, start=start, end=end)

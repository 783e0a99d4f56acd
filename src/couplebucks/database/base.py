"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date, datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from couplebucks.domain.changes import ChangeFeed
from couplebucks.domain.entities import (
    Profile,
    Couple,
    Income,
    Expense,
    Budget,
    BudgetHistory,
    Bill,
    BillPayment,
)


class Database(ABC):
    """Abstract database interface for couplebucks.

    Every mutating method commits its own unit of work and publishes a
    change event on `changes` once the commit succeeded. Store failures
    surface as BackendError; missing rows on update or delete surface as
    NotFoundError.
    """

    changes: ChangeFeed

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Profile and couple operations
    @abstractmethod
    def create_profile(self, email: str, full_name: Optional[str], permission_tier: str) -> int:
        """Create a profile. Returns profile ID."""
        pass

    @abstractmethod
    def get_profile(self, profile_id: int) -> Optional[Profile]:
        """Get profile by ID."""
        pass

    @abstractmethod
    def create_couple(
        self,
        user1_id: int,
        invite_code: str,
        default_split_type: str,
        track_income: bool,
        timezone: str,
    ) -> int:
        """Create a couple and attach user1's profile to it. Returns couple ID."""
        pass

    @abstractmethod
    def get_couple(self, couple_id: int) -> Optional[Couple]:
        """Get couple by ID."""
        pass

    @abstractmethod
    def get_couple_by_invite_code(self, invite_code: str) -> Optional[Couple]:
        """Get couple by invite code."""
        pass

    @abstractmethod
    def pair_couple(self, couple_id: int, user2_id: int) -> None:
        """Attach user2 to the couple and mark it paired."""
        pass

    # Income operations
    @abstractmethod
    def create_income(
        self,
        couple_id: int,
        profile_id: int,
        source_name: str,
        amount: Decimal,
        frequency: str,
        is_primary: bool = False,
    ) -> int:
        """Create an income source. Returns income ID."""
        pass

    @abstractmethod
    def get_income(self, income_id: int) -> Optional[Income]:
        """Get income by ID."""
        pass

    @abstractmethod
    def list_incomes(
        self, couple_id: Optional[int] = None, profile_id: Optional[int] = None
    ) -> list[Income]:
        """List incomes, filtered by couple and/or profile."""
        pass

    @abstractmethod
    def update_income(
        self,
        income_id: int,
        source_name: Optional[str] = None,
        amount: Optional[Decimal] = None,
        frequency: Optional[str] = None,
        is_primary: Optional[bool] = None,
    ) -> None:
        """Update income fields that are not None."""
        pass

    @abstractmethod
    def delete_income(self, income_id: int) -> None:
        """Delete an income source."""
        pass

    # Ledger operations
    @abstractmethod
    def create_expense(
        self,
        couple_id: int,
        created_by: int,
        amount: Decimal,
        category: str,
        split_type: str,
        split_percentage_user1: int,
        split_percentage_user2: int,
        description: Optional[str] = None,
        receipt_url: Optional[str] = None,
        bill_id: Optional[int] = None,
        created_at: Optional[datetime] = None,
    ) -> int:
        """Create a ledger entry. Returns expense ID."""
        pass

    @abstractmethod
    def get_expense(self, expense_id: int) -> Optional[Expense]:
        """Get expense by ID."""
        pass

    @abstractmethod
    def list_expenses(
        self,
        couple_id: int,
        category: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[Expense]:
        """List expenses newest first, with created_at in [start, end)."""
        pass

    @abstractmethod
    def update_expense(
        self,
        expense_id: int,
        amount: Optional[Decimal] = None,
        category: Optional[str] = None,
        description: Optional[str] = None,
        split_type: Optional[str] = None,
        split_percentage_user1: Optional[int] = None,
        split_percentage_user2: Optional[int] = None,
        receipt_url: Optional[str] = None,
    ) -> None:
        """Update expense fields that are not None."""
        pass

    @abstractmethod
    def delete_expense(self, expense_id: int) -> None:
        """Delete an expense."""
        pass

    @abstractmethod
    def sum_expenses(
        self,
        couple_id: int,
        category: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> tuple[Decimal, int]:
        """Return (total amount, entry count) for created_at in [start, end), in one query."""
        pass

    @abstractmethod
    def sum_expenses_by_category(
        self,
        couple_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> dict[str, Decimal]:
        """Return total amount per category for created_at in [start, end)."""
        pass

    # Budget operations
    @abstractmethod
    def create_budget(
        self,
        couple_id: int,
        category: str,
        limit_amount: Decimal,
        current_spent: Decimal,
        period_start_date: date,
        auto_reset_enabled: bool = True,
    ) -> int:
        """Create a budget. Returns budget ID."""
        pass

    @abstractmethod
    def get_budget(self, budget_id: int) -> Optional[Budget]:
        """Get budget by ID."""
        pass

    @abstractmethod
    def get_budget_by_category(self, couple_id: int, category: str) -> Optional[Budget]:
        """Get a couple's budget for a category."""
        pass

    @abstractmethod
    def list_budgets(self, couple_id: int) -> list[Budget]:
        """List a couple's budgets ordered by category."""
        pass

    @abstractmethod
    def update_budget(
        self,
        budget_id: int,
        limit_amount: Optional[Decimal] = None,
        current_spent: Optional[Decimal] = None,
        period_start_date: Optional[date] = None,
        auto_reset_enabled: Optional[bool] = None,
    ) -> Budget:
        """Update budget fields that are not None. Returns the updated budget."""
        pass

    @abstractmethod
    def delete_budget(self, budget_id: int) -> None:
        """Delete a budget and its history. Ledger entries are untouched."""
        pass

    # Budget history operations
    @abstractmethod
    def get_budget_history(self, budget_id: int, period_start: date) -> Optional[BudgetHistory]:
        """Get the archive of one budget period."""
        pass

    @abstractmethod
    def list_budget_history(
        self,
        couple_id: int,
        budget_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[BudgetHistory]:
        """List archives newest first, with period_start in [start, end)."""
        pass

    @abstractmethod
    def archive_budget_period(
        self,
        budget_id: int,
        period_start: date,
        period_end: date,
        total_spent: Decimal,
        expenses_count: int,
        status: str,
        new_period_start: date,
        new_current_spent: Decimal = Decimal("0"),
    ) -> tuple[BudgetHistory, bool]:
        """Archive a budget period and restart the budget, in one transaction.

        Writes the history row unless one already exists for
        (budget_id, period_start), then sets current_spent to new_current_spent (whatever
        the ledger already holds for the new period, normally zero) and
        moves period_start_date to new_period_start.

        Returns:
            (history record, True if it was written by this call)
        """
        pass

    # Bill operations
    @abstractmethod
    def create_bill(
        self,
        couple_id: int,
        name: str,
        amount: Decimal,
        due_date: date,
        frequency: str,
        split_type: str,
        split_percentage_user1: int,
        split_percentage_user2: int,
        custom_frequency_days: Optional[int] = None,
        category: Optional[str] = None,
        reminder_days: int = 3,
        receipt_url: Optional[str] = None,
    ) -> int:
        """Create a bill. Returns bill ID."""
        pass

    @abstractmethod
    def get_bill(self, bill_id: int) -> Optional[Bill]:
        """Get bill by ID."""
        pass

    @abstractmethod
    def list_bills(
        self,
        couple_id: int,
        include_inactive: bool = False,
        category: Optional[str] = None,
        due_from: Optional[date] = None,
        due_to: Optional[date] = None,
    ) -> list[Bill]:
        """List bills ordered by due date, with due_date in [due_from, due_to]."""
        pass

    @abstractmethod
    def update_bill(self, bill_id: int, **fields) -> Bill:
        """Replace the given bill fields. Returns the updated bill."""
        pass

    @abstractmethod
    def delete_bill(self, bill_id: int) -> None:
        """Delete a bill and its payment history."""
        pass

    @abstractmethod
    def record_bill_payment(
        self,
        bill_id: int,
        payment_date: date,
        amount_paid: Decimal,
        period_start: date,
        period_end: date,
        recorded_by: int,
        next_due_date: date,
        payment_method: Optional[str] = None,
        notes: Optional[str] = None,
        receipt_url: Optional[str] = None,
    ) -> BillPayment:
        """Append a payment and advance the bill, in one transaction.

        Sets last_paid_date to payment_date and due_date to next_due_date.
        Either both writes persist or neither does.
        """
        pass

    @abstractmethod
    def list_bill_payments(
        self, couple_id: int, bill_id: Optional[int] = None
    ) -> list[BillPayment]:
        """List payments newest first."""
        pass

"""Tests for the Database interface returning domain models."""

import pytest
from datetime import date, datetime, UTC
from decimal import Decimal

from sqlalchemy.exc import OperationalError

from couplebucks.domain import entities
from couplebucks.domain.errors import BackendError, ConflictError, NotFoundError


class TestDatabaseInterface:
    """Tests to verify the Database interface returns domain models."""

    def test_get_couple_returns_domain_model(self, temp_db, paired_couple):
        couple = temp_db.get_couple(paired_couple.id)

        assert isinstance(couple, entities.Couple)
        assert couple.is_paired
        assert couple.user2_id == paired_couple.user2_id
        assert isinstance(couple.default_split_type, entities.SplitType)
        assert isinstance(couple.created_at, datetime)

    def test_get_missing_rows_return_none(self, temp_db):
        assert temp_db.get_profile(1) is None
        assert temp_db.get_couple(1) is None
        assert temp_db.get_expense(1) is None
        assert temp_db.get_budget(1) is None
        assert temp_db.get_bill(1) is None

    def test_expense_created_at_defaults_to_now(self, temp_db, paired_couple):
        before = datetime.now(UTC).replace(tzinfo=None, microsecond=0)
        expense_id = temp_db.create_expense(
            couple_id=paired_couple.id,
            created_by=paired_couple.user1_id,
            amount=Decimal("10"),
            category="Dining",
            split_type="fifty_fifty",
            split_percentage_user1=50,
            split_percentage_user2=50,
        )
        expense = temp_db.get_expense(expense_id)

        assert isinstance(expense, entities.Expense)
        assert expense.created_at.tzinfo is None
        assert expense.created_at >= before

    def test_sum_expenses_half_open(self, temp_db, add_expense, paired_couple):
        add_expense("10", on=date(2024, 1, 1))
        add_expense("20", on=date(2024, 1, 31))
        add_expense("40", on=date(2024, 2, 1))

        total, count = temp_db.sum_expenses(
            paired_couple.id, "Groceries", datetime(2024, 1, 1), datetime(2024, 2, 1)
        )

        assert total == Decimal("30")
        assert count == 2

    def test_sum_expenses_empty_is_zero(self, temp_db, paired_couple):
        total, count = temp_db.sum_expenses(paired_couple.id, "Groceries")
        assert total == Decimal("0")
        assert count == 0

    def test_read_failure_becomes_backend_error(self, temp_db, paired_couple, monkeypatch):
        def broken_query(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(temp_db, "_expense_query", broken_query)

        with pytest.raises(BackendError, match="sum expenses"):
            temp_db.sum_expenses(paired_couple.id)
        with pytest.raises(BackendError):
            temp_db.list_expenses(paired_couple.id)

        monkeypatch.undo()
        assert temp_db.sum_expenses(paired_couple.id) == (Decimal("0"), 0)

    def test_duplicate_budget_category_conflicts(self, temp_db, paired_couple):
        kwargs = dict(
            couple_id=paired_couple.id,
            category="Groceries",
            limit_amount=Decimal("500"),
            current_spent=Decimal("0"),
            period_start_date=date(2024, 1, 1),
            auto_reset_enabled=True,
        )
        temp_db.create_budget(**kwargs)
        with pytest.raises(ConflictError):
            temp_db.create_budget(**kwargs)

    def test_update_missing_budget(self, temp_db):
        with pytest.raises(NotFoundError):
            temp_db.update_budget(42, limit_amount=Decimal("10"))

    def test_archive_budget_period_is_idempotent(self, temp_db, paired_couple):
        budget_id = temp_db.create_budget(
            couple_id=paired_couple.id,
            category="Groceries",
            limit_amount=Decimal("500"),
            current_spent=Decimal("120"),
            period_start_date=date(2024, 1, 1),
            auto_reset_enabled=True,
        )
        archive = dict(
            budget_id=budget_id,
            period_start=date(2024, 1, 1),
            period_end=date(2024, 1, 31),
            total_spent=Decimal("120"),
            expenses_count=2,
            status="success",
            new_period_start=date(2024, 2, 1),
        )

        history, created = temp_db.archive_budget_period(**archive)
        assert created
        assert isinstance(history, entities.BudgetHistory)

        again, created = temp_db.archive_budget_period(**archive)
        assert not created
        assert again.id == history.id
        assert len(temp_db.list_budget_history(paired_couple.id)) == 1

        budget = temp_db.get_budget(budget_id)
        assert budget.period_start_date == date(2024, 2, 1)
        assert budget.current_spent == Decimal("0")

    def test_unknown_bill_field_rejected(self, temp_db, bill_service, paired_couple):
        bill_id = bill_service.create_bill(paired_couple.id, "Rent", Decimal("1200"), date(2024, 1, 15))
        with pytest.raises(ValueError):
            temp_db.update_bill(bill_id, couple_id=2)

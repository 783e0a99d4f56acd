"""Shared pytest fixtures for couplebucks tests."""

import os
import tempfile
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

import pytest

from couplebucks.database.factories import create_sqlite_database
from couplebucks.domain.bill import BillService
from couplebucks.domain.budget import BudgetService
from couplebucks.domain.couple import CoupleService
from couplebucks.domain.expense import ExpenseService
from couplebucks.domain.income import IncomeService
from couplebucks.domain.rollover import RolloverService
from couplebucks.storage.receipts import LocalReceiptStore


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def couple_service(temp_db):
    return CoupleService(temp_db)


@pytest.fixture
def budget_service(temp_db):
    return BudgetService(temp_db)


@pytest.fixture
def rollover_service(temp_db):
    return RolloverService(temp_db)


@pytest.fixture
def income_service(temp_db):
    return IncomeService(temp_db)


@pytest.fixture
def bill_service(temp_db):
    return BillService(temp_db)


@pytest.fixture
def receipt_store(tmp_path):
    """Create a receipt store in a temporary directory."""
    return LocalReceiptStore(tmp_path / "receipts")


@pytest.fixture
def expense_service(temp_db, receipt_store):
    return ExpenseService(temp_db, receipts=receipt_store)


@dataclass
class PairedCouple:
    id: int
    user1_id: int
    user2_id: int


@pytest.fixture
def paired_couple(couple_service):
    """Create two profiles joined into one couple."""
    alex = couple_service.create_profile("alex@example.com", full_name="Alex")
    sam = couple_service.create_profile("sam@example.com", full_name="Sam")
    couple_id = couple_service.create_couple(alex)
    couple = couple_service.require_couple(couple_id)
    couple_service.join_couple(sam, couple.invite_code)
    return PairedCouple(id=couple_id, user1_id=alex, user2_id=sam)


@pytest.fixture
def add_expense(expense_service, paired_couple):
    """Return a helper recording an expense at a given day."""

    def _add(amount, category="Groceries", on=date(2024, 1, 15), created_by=None):
        return expense_service.create_expense(
            couple_id=paired_couple.id,
            created_by=created_by or paired_couple.user1_id,
            amount=Decimal(str(amount)),
            category=category,
            created_at=datetime.combine(on, datetime.min.time()).replace(hour=12),
        )

    return _add


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()

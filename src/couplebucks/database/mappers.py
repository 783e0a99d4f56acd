"""Mapper functions to convert between domain models and SQLAlchemy models.

Enum-valued columns are stored as plain strings; the mappers restore the
domain enums so nothing above the database layer sees raw column values.
"""

from couplebucks.domain import entities as domain
from couplebucks.database.models import (
    Profile as ORMProfile,
    Couple as ORMCouple,
    Income as ORMIncome,
    Expense as ORMExpense,
    Budget as ORMBudget,
    BudgetHistory as ORMBudgetHistory,
    Bill as ORMBill,
    BillPayment as ORMBillPayment,
)


def profile_to_domain(orm_profile: ORMProfile) -> domain.Profile:
    """Convert SQLAlchemy Profile model to domain Profile entity."""
    return domain.Profile(
        id=orm_profile.id,
        email=orm_profile.email,
        full_name=orm_profile.full_name,
        permission_tier=domain.PermissionTier(orm_profile.permission_tier),
        couple_id=orm_profile.couple_id,
        created_at=orm_profile.created_at,
    )


def couple_to_domain(orm_couple: ORMCouple) -> domain.Couple:
    """Convert SQLAlchemy Couple model to domain Couple entity."""
    return domain.Couple(
        id=orm_couple.id,
        user1_id=orm_couple.user1_id,
        user2_id=orm_couple.user2_id,
        default_split_type=domain.SplitType(orm_couple.default_split_type),
        track_income=orm_couple.track_income,
        invite_code=orm_couple.invite_code,
        is_paired=orm_couple.is_paired,
        timezone=orm_couple.timezone,
        created_at=orm_couple.created_at,
    )


def income_to_domain(orm_income: ORMIncome) -> domain.Income:
    """Convert SQLAlchemy Income model to domain Income entity."""
    return domain.Income(
        id=orm_income.id,
        couple_id=orm_income.couple_id,
        profile_id=orm_income.profile_id,
        source_name=orm_income.source_name,
        amount=orm_income.amount,
        frequency=domain.IncomeFrequency(orm_income.frequency),
        is_primary=orm_income.is_primary,
        created_at=orm_income.created_at,
    )


def expense_to_domain(orm_expense: ORMExpense) -> domain.Expense:
    """Convert SQLAlchemy Expense model to domain Expense entity."""
    return domain.Expense(
        id=orm_expense.id,
        couple_id=orm_expense.couple_id,
        created_by=orm_expense.created_by,
        amount=orm_expense.amount,
        category=orm_expense.category,
        description=orm_expense.description,
        split_type=domain.SplitType(orm_expense.split_type),
        split_percentage_user1=orm_expense.split_percentage_user1,
        split_percentage_user2=orm_expense.split_percentage_user2,
        receipt_url=orm_expense.receipt_url,
        bill_id=orm_expense.bill_id,
        created_at=orm_expense.created_at,
    )


def budget_to_domain(orm_budget: ORMBudget) -> domain.Budget:
    """Convert SQLAlchemy Budget model to domain Budget entity."""
    return domain.Budget(
        id=orm_budget.id,
        couple_id=orm_budget.couple_id,
        category=orm_budget.category,
        limit_amount=orm_budget.limit_amount,
        current_spent=orm_budget.current_spent,
        period_start_date=orm_budget.period_start_date,
        period_type=domain.PeriodType(orm_budget.period_type),
        auto_reset_enabled=orm_budget.auto_reset_enabled,
        created_at=orm_budget.created_at,
    )


def budget_history_to_domain(orm_history: ORMBudgetHistory) -> domain.BudgetHistory:
    """Convert SQLAlchemy BudgetHistory model to domain BudgetHistory entity."""
    return domain.BudgetHistory(
        id=orm_history.id,
        budget_id=orm_history.budget_id,
        couple_id=orm_history.couple_id,
        period_start=orm_history.period_start,
        period_end=orm_history.period_end,
        category=orm_history.category,
        limit_amount=orm_history.limit_amount,
        total_spent=orm_history.total_spent,
        expenses_count=orm_history.expenses_count,
        status=domain.BudgetStatus(orm_history.status),
        created_at=orm_history.created_at,
    )


def bill_to_domain(orm_bill: ORMBill) -> domain.Bill:
    """Convert SQLAlchemy Bill model to domain Bill entity."""
    return domain.Bill(
        id=orm_bill.id,
        couple_id=orm_bill.couple_id,
        name=orm_bill.name,
        amount=orm_bill.amount,
        category=orm_bill.category,
        due_date=orm_bill.due_date,
        frequency=domain.BillFrequency(orm_bill.frequency),
        custom_frequency_days=orm_bill.custom_frequency_days,
        split_type=domain.SplitType(orm_bill.split_type),
        split_percentage_user1=orm_bill.split_percentage_user1,
        split_percentage_user2=orm_bill.split_percentage_user2,
        reminder_days=orm_bill.reminder_days,
        receipt_url=orm_bill.receipt_url,
        is_active=orm_bill.is_active,
        last_paid_date=orm_bill.last_paid_date,
        created_at=orm_bill.created_at,
    )


def bill_payment_to_domain(orm_payment: ORMBillPayment) -> domain.BillPayment:
    """Convert SQLAlchemy BillPayment model to domain BillPayment entity."""
    return domain.BillPayment(
        id=orm_payment.id,
        bill_id=orm_payment.bill_id,
        couple_id=orm_payment.couple_id,
        payment_date=orm_payment.payment_date,
        amount_paid=orm_payment.amount_paid,
        payment_method=orm_payment.payment_method,
        notes=orm_payment.notes,
        receipt_url=orm_payment.receipt_url,
        period_start=orm_payment.period_start,
        period_end=orm_payment.period_end,
        recorded_by=orm_payment.recorded_by,
        created_at=orm_payment.created_at,
    )

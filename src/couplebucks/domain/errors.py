"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input, rejected before any write."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class BackendError(RuntimeError):
    """The store failed to complete a read or write. Callers may retry."""


def budget_not_found(budget_id: int) -> str:
    """Return message for missing budget."""
    return f"Budget {budget_id} not found"


def bill_not_found(bill_id: int) -> str:
    """Return message for missing bill."""
    return f"Bill {bill_id} not found"


def expense_not_found(expense_id: int) -> str:
    """Return message for missing expense."""
    return f"Expense {expense_id} not found"


def couple_not_found(couple_id: int) -> str:
    """Return message for missing couple."""
    return f"Couple {couple_id} not found"


def profile_not_found(profile_id: int) -> str:
    """Return message for missing profile."""
    return f"Profile {profile_id} not found"


def income_not_found(income_id: int) -> str:
    """Return message for missing income."""
    return f"Income {income_id} not found"


def duplicate_budget_category(category: str) -> str:
    """Return message when a couple already budgets a category."""
    return f"A budget for category '{category}' already exists"


def non_positive_amount(label: str, amount: Decimal) -> str:
    """Return message for an amount that must be positive."""
    return f"{label} must be a positive number, got {amount}"


def split_not_100(percentage_user1: int, percentage_user2: int) -> str:
    """Return message for split percentages that do not add up."""
    return (
        f"Split percentages must add up to 100 "
        f"(got {percentage_user1} + {percentage_user2})"
    )


def missing_custom_frequency_days() -> str:
    """Return message for a custom bill without an interval."""
    return "Custom frequency requires a positive number of days"

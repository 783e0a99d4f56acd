"""Domain layer for couplebucks application."""

# Services are imported lazily so the database layer can import entities
# without pulling the services (which import the database layer) in first.
_SERVICES = {
    "BudgetService": "couplebucks.domain.budget",
    "RolloverService": "couplebucks.domain.rollover",
    "ExpenseService": "couplebucks.domain.expense",
    "BillService": "couplebucks.domain.bill",
    "IncomeService": "couplebucks.domain.income",
    "CoupleService": "couplebucks.domain.couple",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")

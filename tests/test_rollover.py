"""Tests for budget period rollover."""

import pytest
from datetime import date
from decimal import Decimal

from sqlalchemy.exc import OperationalError

from couplebucks.domain.entities import BudgetStatus
from couplebucks.domain.errors import BackendError, ValidationError

JAN_10 = date(2024, 1, 10)
FEB_5 = date(2024, 2, 5)


@pytest.fixture
def groceries_id(budget_service, paired_couple):
    return budget_service.create_budget_for_category(
        paired_couple.id, "Groceries", Decimal("500"), today=JAN_10
    )


def test_nothing_elapsed_within_month(rollover_service, paired_couple, groceries_id):
    report = rollover_service.rollover_couple(paired_couple.id, today=date(2024, 1, 31))
    assert report.rolled_over_count == 0
    assert rollover_service.find_elapsed(paired_couple.id, today=date(2024, 1, 31)) == []


def test_rollover_archives_and_restarts(
    rollover_service, budget_service, paired_couple, groceries_id, add_expense
):
    add_expense("200", on=date(2024, 1, 5))
    add_expense("220", on=date(2024, 1, 31))

    report = rollover_service.rollover_couple(paired_couple.id, today=FEB_5)

    assert len(report.archived) == 1
    history = report.archived[0]
    assert history.budget_id == groceries_id
    assert history.period_start == date(2024, 1, 1)
    assert history.period_end == date(2024, 1, 31)
    assert history.total_spent == Decimal("420")
    assert history.expenses_count == 2
    assert history.limit_amount == Decimal("500")
    assert history.status == BudgetStatus.WARNING

    budget = budget_service.get_budget(groceries_id)
    assert budget.period_start_date == date(2024, 2, 1)
    assert budget.current_spent == 0


def test_rollover_is_idempotent(rollover_service, paired_couple, groceries_id, add_expense):
    add_expense("100", on=date(2024, 1, 5))
    rollover_service.rollover_couple(paired_couple.id, today=FEB_5)

    again = rollover_service.rollover_couple(paired_couple.id, today=FEB_5)
    assert again.rolled_over_count == 0
    assert len(rollover_service.list_history(paired_couple.id)) == 1


def test_rollover_after_partial_failure_keeps_existing_history(
    rollover_service, budget_service, temp_db, paired_couple, groceries_id, add_expense
):
    add_expense("100", on=date(2024, 1, 5))
    rollover_service.rollover_couple(paired_couple.id, today=FEB_5)
    # Budget left behind as if the restart never happened
    temp_db.update_budget(groceries_id, period_start_date=date(2024, 1, 1), current_spent=Decimal("1"))

    report = rollover_service.rollover_couple(paired_couple.id, today=FEB_5)

    assert report.archived == ()
    assert report.already_archived == (groceries_id,)
    assert report.rolled_over_count == 1
    (history,) = rollover_service.list_history(paired_couple.id)
    assert history.total_spent == Decimal("100")
    budget = budget_service.get_budget(groceries_id)
    assert budget.period_start_date == date(2024, 2, 1)
    assert budget.current_spent == 0


def test_rollover_spanning_several_months(rollover_service, budget_service, paired_couple, groceries_id, add_expense):
    add_expense("100", on=date(2024, 1, 20))
    add_expense("150", on=date(2024, 2, 20))
    add_expense("300", on=date(2024, 3, 20))
    add_expense("30", on=date(2024, 4, 2))

    report = rollover_service.rollover_couple(paired_couple.id, today=date(2024, 4, 10))

    (history,) = report.archived
    assert history.period_start == date(2024, 1, 1)
    assert history.period_end == date(2024, 3, 31)
    assert history.total_spent == Decimal("550")
    assert history.status == BudgetStatus.ERROR
    budget = budget_service.get_budget(groceries_id)
    assert budget.period_start_date == date(2024, 4, 1)
    # Spend already posted in the new month carries into it
    assert budget.current_spent == Decimal("30")


def test_manual_budgets_are_skipped(rollover_service, budget_service, paired_couple, groceries_id):
    budget_service.set_auto_reset(groceries_id, False)

    report = rollover_service.rollover_couple(paired_couple.id, today=FEB_5)

    assert report.manual == (groceries_id,)
    assert report.archived == ()
    assert budget_service.get_budget(groceries_id).period_start_date == date(2024, 1, 1)


def test_failure_is_isolated_per_budget(
    rollover_service, budget_service, temp_db, paired_couple, groceries_id, monkeypatch
):
    dining_id = budget_service.create_budget_for_category(
        paired_couple.id, "Dining", Decimal("200"), today=JAN_10
    )
    real_archive = temp_db.archive_budget_period

    def flaky_archive(budget_id, **kwargs):
        if budget_id == groceries_id:
            raise BackendError("connection lost")
        return real_archive(budget_id=budget_id, **kwargs)

    monkeypatch.setattr(temp_db, "archive_budget_period", flaky_archive)

    report = rollover_service.rollover_couple(paired_couple.id, today=FEB_5)

    assert [h.budget_id for h in report.archived] == [dining_id]
    assert len(report.failed) == 1
    assert report.failed[0].budget_id == groceries_id
    assert "connection lost" in report.failed[0].error
    # The failed budget stays elapsed so the next load retries it
    assert [b.id for b in rollover_service.find_elapsed(paired_couple.id, today=FEB_5)] == [groceries_id]

    monkeypatch.setattr(temp_db, "archive_budget_period", real_archive)
    retry = rollover_service.rollover_couple(paired_couple.id, today=FEB_5)
    assert [h.budget_id for h in retry.archived] == [groceries_id]


def test_read_failure_is_isolated_per_budget(
    rollover_service, budget_service, temp_db, paired_couple, groceries_id, add_expense, monkeypatch
):
    dining_id = budget_service.create_budget_for_category(
        paired_couple.id, "Dining", Decimal("200"), today=JAN_10
    )
    add_expense("120", on=date(2024, 1, 8))
    real_query = temp_db._expense_query

    def query_failing_for_dining(couple_id, category, start, end, query=None):
        if category == "Dining":
            raise OperationalError("SELECT", {}, Exception("disk I/O error"))
        return real_query(couple_id, category, start, end, query=query)

    monkeypatch.setattr(temp_db, "_expense_query", query_failing_for_dining)

    report = rollover_service.rollover_couple(paired_couple.id, today=FEB_5)

    assert [h.budget_id for h in report.archived] == [groceries_id]
    assert report.archived[0].total_spent == Decimal("120")
    (failure,) = report.failed
    assert failure.budget_id == dining_id
    assert "sum expenses" in failure.error
    assert budget_service.get_budget(dining_id).period_start_date == date(2024, 1, 1)


def test_unexpected_error_is_isolated_per_budget(
    rollover_service, temp_db, paired_couple, groceries_id, monkeypatch
):
    def broken_archive(budget_id, **kwargs):
        raise KeyError("status")

    monkeypatch.setattr(temp_db, "archive_budget_period", broken_archive)

    report = rollover_service.rollover_couple(paired_couple.id, today=FEB_5)

    assert report.archived == ()
    assert [f.budget_id for f in report.failed] == [groceries_id]


def test_list_with_progress_rolls_over_first(budget_service, paired_couple, groceries_id, add_expense):
    add_expense("480", on=date(2024, 1, 5))

    overview = budget_service.list_with_progress(paired_couple.id, today=FEB_5)

    assert len(overview.rollover.archived) == 1
    (progress,) = overview.budgets
    assert progress.budget.period_start_date == date(2024, 2, 1)
    assert progress.budget.current_spent == 0
    assert progress.status == BudgetStatus.SUCCESS


def test_rollover_budget_rejects_current_period(rollover_service, budget_service, groceries_id):
    budget = budget_service.get_budget(groceries_id)
    with pytest.raises(ValidationError):
        rollover_service.rollover_budget(budget, date(2024, 1, 25))


def test_reset_current_period(rollover_service, budget_service, groceries_id, add_expense):
    add_expense("90", on=date(2024, 1, 5))
    add_expense("15", on=date(2024, 1, 20))

    history = rollover_service.reset_budget(groceries_id, today=date(2024, 1, 20))

    assert history.period_start == date(2024, 1, 1)
    assert history.period_end == date(2024, 1, 19)
    assert history.total_spent == Decimal("90")
    budget = budget_service.get_budget(groceries_id)
    assert budget.period_start_date == date(2024, 1, 20)
    assert budget.current_spent == Decimal("15")


def test_reset_on_period_start_rejected(rollover_service, groceries_id):
    with pytest.raises(ValidationError):
        rollover_service.reset_budget(groceries_id, today=date(2024, 1, 1))


def test_reset_elapsed_budget_rolls_over(rollover_service, budget_service, groceries_id):
    history = rollover_service.reset_budget(groceries_id, today=FEB_5)
    assert history.period_end == date(2024, 1, 31)
    assert budget_service.get_budget(groceries_id).period_start_date == date(2024, 2, 1)


def test_month_report_past_month_from_history(rollover_service, paired_couple, groceries_id, add_expense):
    add_expense("510", on=date(2024, 1, 5))
    add_expense("40", on=date(2024, 2, 3))
    rollover_service.rollover_couple(paired_couple.id, today=FEB_5)

    (line,) = rollover_service.month_report(paired_couple.id, 2024, 1, today=FEB_5)
    assert line.category == "Groceries"
    assert line.total_spent == Decimal("510")
    assert line.remaining == Decimal("-10")
    assert line.status == BudgetStatus.ERROR
    assert line.expenses_count == 1


def test_month_report_current_month_is_live(rollover_service, paired_couple, groceries_id, add_expense):
    add_expense("100", on=date(2024, 1, 5))
    add_expense("40", on=date(2024, 2, 3))

    (line,) = rollover_service.month_report(paired_couple.id, 2024, 2, today=FEB_5)
    assert line.budget_id == groceries_id
    assert line.total_spent == Decimal("40")
    assert line.remaining == Decimal("460")


def test_month_report_without_history(rollover_service, paired_couple, groceries_id):
    assert rollover_service.month_report(paired_couple.id, 2023, 11, today=FEB_5) == []


def test_month_report_future_rejected(rollover_service, paired_couple, groceries_id):
    with pytest.raises(ValidationError):
        rollover_service.month_report(paired_couple.id, 2024, 3, today=FEB_5)


def test_month_report_includes_periods_spanning_the_month(
    rollover_service, paired_couple, groceries_id, add_expense
):
    add_expense("100", on=date(2024, 1, 5))
    add_expense("60", on=date(2024, 3, 12))
    april_5 = date(2024, 4, 5)
    rollover_service.rollover_couple(paired_couple.id, today=april_5)

    for month in (1, 2, 3):
        (line,) = rollover_service.month_report(paired_couple.id, 2024, month, today=april_5)
        assert line.budget_id == groceries_id
        assert line.total_spent == Decimal("160")

    assert rollover_service.month_report(paired_couple.id, 2023, 12, today=april_5) == []

"""Tests for the change feed."""

import logging
from decimal import Decimal

from couplebucks.domain.changes import ChangeFeed
from couplebucks.domain.entities import ChangeType


def test_subscribers_receive_events_for_their_couple_and_table():
    feed = ChangeFeed()
    received = []
    feed.subscribe(1, "expenses", received.append)

    feed.publish(1, "expenses", ChangeType.INSERT, {"id": 7})
    feed.publish(2, "expenses", ChangeType.INSERT)
    feed.publish(1, "bills", ChangeType.UPDATE)

    assert len(received) == 1
    assert received[0].couple_id == 1
    assert received[0].table == "expenses"
    assert received[0].event_type == ChangeType.INSERT
    assert received[0].row == {"id": 7}


def test_unsubscribe_stops_delivery():
    feed = ChangeFeed()
    received = []
    subscription = feed.subscribe(1, "budgets", received.append)

    subscription.unsubscribe()
    subscription.unsubscribe()
    feed.publish(1, "budgets", ChangeType.UPDATE)

    assert received == []
    assert not subscription.active
    assert feed.subscriber_count(1, "budgets") == 0


def test_failing_subscriber_does_not_block_others(caplog):
    feed = ChangeFeed()
    received = []

    def broken(event):
        raise RuntimeError("boom")

    feed.subscribe(1, "bills", broken)
    feed.subscribe(1, "bills", received.append)

    with caplog.at_level(logging.ERROR):
        feed.publish(1, "bills", ChangeType.DELETE)

    assert len(received) == 1
    assert "Change subscriber failed" in caplog.text


def test_database_writes_publish_changes(temp_db, expense_service, paired_couple):
    received = []
    temp_db.changes.subscribe(paired_couple.id, "expenses", received.append)

    expense_id = expense_service.create_expense(
        paired_couple.id, paired_couple.user1_id, Decimal("12"), "Dining"
    )
    expense_service.delete_expense(expense_id)

    assert [e.event_type for e in received] == [ChangeType.INSERT, ChangeType.DELETE]
    assert received[0].row.id == expense_id

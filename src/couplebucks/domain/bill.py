"""Recurring bill domain service."""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Optional

from dateutil.relativedelta import relativedelta

from couplebucks.database.base import Database
from couplebucks.domain.couple import couple_today
from couplebucks.domain.entities import (
    Bill as BillEntity,
    BillFrequency,
    BillPayment as BillPaymentEntity,
    BillStatus,
    BillWithStatus,
    SplitType,
)
from couplebucks.domain.errors import (
    NotFoundError,
    ValidationError,
    bill_not_found,
    missing_custom_frequency_days,
    non_positive_amount,
)
from couplebucks.domain.income import IncomeService
from couplebucks.domain.split import validate_split
from couplebucks.domain.status import classify_bill_status

logger = logging.getLogger(__name__)

FREQUENCY_STEPS = {
    BillFrequency.WEEKLY: relativedelta(weeks=1),
    BillFrequency.MONTHLY: relativedelta(months=1),
    BillFrequency.QUARTERLY: relativedelta(months=3),
    BillFrequency.ANNUAL: relativedelta(years=1),
}


def next_due_date(
    current_due_date: date, frequency: BillFrequency, custom_days: Optional[int] = None
) -> date:
    """Advance a due date by one cycle.

    Month-based steps clamp to the last day of a shorter month, so a bill
    due January 31 next falls due on the last day of February.

    Args:
        current_due_date: Due date being settled
        frequency: Bill frequency
        custom_days: Interval in days, required for custom frequency

    Returns:
        The next due date

    Raises:
        ValidationError: If frequency is custom and custom_days is missing or not positive
    """
    frequency = BillFrequency(frequency)
    if frequency == BillFrequency.CUSTOM:
        if custom_days is None or custom_days <= 0:
            raise ValidationError(missing_custom_frequency_days())
        return current_due_date + timedelta(days=custom_days)
    return current_due_date + FREQUENCY_STEPS[frequency]


def _check_frequency(frequency: BillFrequency, custom_days: Optional[int]) -> None:
    if frequency == BillFrequency.CUSTOM:
        if custom_days is None or custom_days <= 0:
            raise ValidationError(missing_custom_frequency_days())
    elif custom_days is not None:
        raise ValidationError("Only custom frequency takes a number of days")


class BillService:
    """Service for managing recurring bills and their payments."""

    def __init__(self, db: Database):
        """Initialize bill service.

        Args:
            db: Database instance
        """
        self.db = db
        self.incomes = IncomeService(db)

    def _require_bill(self, bill_id: int) -> BillEntity:
        bill = self.db.get_bill(bill_id)
        if bill is None:
            raise NotFoundError(bill_not_found(bill_id))
        return bill

    def create_bill(
        self,
        couple_id: int,
        name: str,
        amount: Decimal,
        due_date: date,
        frequency: BillFrequency = BillFrequency.MONTHLY,
        custom_frequency_days: Optional[int] = None,
        category: Optional[str] = None,
        split_type: Optional[SplitType] = None,
        custom_split: Optional[tuple[int, int]] = None,
        payer_id: Optional[int] = None,
        reminder_days: int = 3,
        receipt_url: Optional[str] = None,
    ) -> int:
        """Create a recurring bill.

        Args:
            couple_id: Couple ID
            name: Bill name
            amount: Positive amount per cycle
            due_date: First due date
            frequency: Recurrence
            custom_frequency_days: Interval in days, only for custom frequency
            category: Optional category label (does not feed budgets)
            split_type: Split policy (defaults to the couple's default)
            custom_split: For custom splits, the two percentages
            payer_id: For single_payer, who pays
            reminder_days: Days before due date to remind
            receipt_url: Optional receipt location

        Returns:
            Bill ID

        Raises:
            ValidationError: If name, amount, frequency or split is invalid
            NotFoundError: If the couple doesn't exist
        """
        if not name or not name.strip():
            raise ValidationError("Bill name is required")
        if amount <= 0:
            raise ValidationError(non_positive_amount("Bill amount", amount))
        frequency = BillFrequency(frequency)
        _check_frequency(frequency, custom_frequency_days)
        if reminder_days < 0:
            raise ValidationError(f"Reminder days cannot be negative, got {reminder_days}")

        split_type, split = self.incomes.resolve_split(
            couple_id, split_type=split_type, payer_id=payer_id, custom=custom_split
        )
        bill_id = self.db.create_bill(
            couple_id=couple_id,
            name=name.strip(),
            amount=amount,
            due_date=due_date,
            frequency=frequency.value,
            split_type=split_type.value,
            split_percentage_user1=split.percentage_user1,
            split_percentage_user2=split.percentage_user2,
            custom_frequency_days=custom_frequency_days,
            category=category,
            reminder_days=reminder_days,
            receipt_url=receipt_url,
        )
        logger.info("Created bill %s '%s' due %s (%s)", bill_id, name, due_date, frequency.value)
        return bill_id

    def get_bill(self, bill_id: int) -> Optional[BillEntity]:
        return self.db.get_bill(bill_id)

    def list_bills(
        self, couple_id: int, include_inactive: bool = False, category: Optional[str] = None
    ) -> list[BillEntity]:
        """List bills ordered by due date."""
        return self.db.list_bills(couple_id, include_inactive=include_inactive, category=category)

    def list_with_status(
        self, couple_id: int, include_inactive: bool = False, today: Optional[date] = None
    ) -> list[BillWithStatus]:
        """List bills with their urgency relative to today.

        Args:
            couple_id: Couple ID
            include_inactive: Include deactivated bills
            today: Reference day (defaults to today in the couple's timezone)

        Returns:
            Bills ordered by due date, each with days until due and status
        """
        if today is None:
            today = couple_today(self.db, couple_id)
        result = []
        for bill in self.db.list_bills(couple_id, include_inactive=include_inactive):
            classified = classify_bill_status(bill.due_date, today)
            result.append(
                BillWithStatus(
                    bill=bill,
                    days_until_due=classified.days_until_due,
                    status=classified.status,
                )
            )
        return result

    def grouped_by_status(
        self, couple_id: int, today: Optional[date] = None
    ) -> dict[BillStatus, list[BillWithStatus]]:
        """Group active bills by status. Every status is present, possibly empty."""
        groups = {status: [] for status in BillStatus}
        for item in self.list_with_status(couple_id, today=today):
            groups[item.status].append(item)
        return groups

    def upcoming(
        self, couple_id: int, limit: int = 3, today: Optional[date] = None
    ) -> list[BillWithStatus]:
        """Next bills not yet overdue, soonest first."""
        pending = [
            b
            for b in self.list_with_status(couple_id, today=today)
            if b.status != BillStatus.OVERDUE
        ]
        pending.sort(key=lambda b: b.days_until_due)
        return pending[:limit]

    def due_within(
        self, couple_id: int, days: int, today: Optional[date] = None
    ) -> list[BillEntity]:
        """Active bills due between today and today + days, both inclusive."""
        if today is None:
            today = couple_today(self.db, couple_id)
        return self.db.list_bills(
            couple_id, due_from=today, due_to=today + timedelta(days=days)
        )

    def update_bill(self, bill_id: int, **fields: Any) -> BillEntity:
        """Update bill fields.

        Frequency and custom days are checked together against the stored
        bill, and a custom split is checked to add up to 100.

        Raises:
            NotFoundError: If the bill doesn't exist
            ValidationError: If the resulting bill would be invalid
        """
        bill = self._require_bill(bill_id)

        if "amount" in fields and fields["amount"] <= 0:
            raise ValidationError(non_positive_amount("Bill amount", fields["amount"]))
        if "name" in fields:
            if not fields["name"] or not fields["name"].strip():
                raise ValidationError("Bill name is required")
            fields["name"] = fields["name"].strip()

        if "frequency" in fields or "custom_frequency_days" in fields:
            frequency = BillFrequency(fields.get("frequency", bill.frequency))
            if frequency != BillFrequency.CUSTOM and "custom_frequency_days" not in fields:
                fields["custom_frequency_days"] = None
            custom_days = fields.get("custom_frequency_days", bill.custom_frequency_days)
            _check_frequency(frequency, custom_days)
            fields["frequency"] = frequency.value

        if "split_percentage_user1" in fields or "split_percentage_user2" in fields:
            split = validate_split(
                fields.get("split_percentage_user1", bill.split_percentage_user1),
                fields.get("split_percentage_user2", bill.split_percentage_user2),
            )
            fields["split_percentage_user1"] = split.percentage_user1
            fields["split_percentage_user2"] = split.percentage_user2
            fields.setdefault("split_type", SplitType.CUSTOM.value)

        return self.db.update_bill(bill_id, **fields)

    def mark_paid(
        self,
        bill_id: int,
        recorded_by: int,
        payment_date: Optional[date] = None,
        amount_paid: Optional[Decimal] = None,
        payment_method: Optional[str] = None,
        notes: Optional[str] = None,
        receipt_url: Optional[str] = None,
        today: Optional[date] = None,
    ) -> BillPaymentEntity:
        """Record a payment and advance the bill to its next due date.

        The payment covers [payment_date, next due date). The payment row
        and the bill update are written in one transaction: if either fails
        neither is kept, and the bill still shows its old due date.

        Args:
            bill_id: Bill ID
            recorded_by: Partner recording the payment
            payment_date: Day paid (defaults to today in the couple's timezone)
            amount_paid: Amount paid (defaults to the bill amount)
            payment_method: Optional method label
            notes: Optional notes
            receipt_url: Optional receipt location
            today: Reference day used when payment_date is omitted

        Returns:
            The recorded payment

        Raises:
            NotFoundError: If the bill doesn't exist
            ValidationError: If the bill is inactive or the amount is not positive
            BackendError: If the store failed; nothing was changed
        """
        bill = self._require_bill(bill_id)
        if not bill.is_active:
            raise ValidationError(f"Bill {bill_id} is inactive")
        if amount_paid is None:
            amount_paid = bill.amount
        if amount_paid <= 0:
            raise ValidationError(non_positive_amount("Payment amount", amount_paid))
        if payment_date is None:
            payment_date = today if today is not None else couple_today(self.db, bill.couple_id)

        due = next_due_date(bill.due_date, bill.frequency, bill.custom_frequency_days)
        payment = self.db.record_bill_payment(
            bill_id=bill_id,
            payment_date=payment_date,
            amount_paid=amount_paid,
            period_start=payment_date,
            period_end=due,
            recorded_by=recorded_by,
            next_due_date=due,
            payment_method=payment_method,
            notes=notes,
            receipt_url=receipt_url,
        )
        logger.info(
            "Bill %s paid %s on %s; next due %s", bill_id, amount_paid, payment_date, due
        )
        return payment

    def deactivate(self, bill_id: int) -> BillEntity:
        self._require_bill(bill_id)
        return self.db.update_bill(bill_id, is_active=False)

    def reactivate(self, bill_id: int) -> BillEntity:
        self._require_bill(bill_id)
        return self.db.update_bill(bill_id, is_active=True)

    def delete_bill(self, bill_id: int) -> None:
        """Delete a bill and its payment history. Linked expenses are kept."""
        self._require_bill(bill_id)
        self.db.delete_bill(bill_id)
        logger.info("Deleted bill %s", bill_id)

    def list_payments(
        self, couple_id: int, bill_id: Optional[int] = None
    ) -> list[BillPaymentEntity]:
        """List payments newest first, optionally for one bill."""
        return self.db.list_bill_payments(couple_id, bill_id=bill_id)

"""Domain model entities for couplebucks.

These are pure data classes representing household finance records,
independent of the database schema. Services and the CLI only ever see
these types; the ORM models stay behind the database layer.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class PermissionTier(str, Enum):
    """How involved a partner is in managing the household finances."""

    LOGGER = "logger"
    MANAGER = "manager"


class SplitType(str, Enum):
    """Rule deciding what share of an expense each partner owes."""

    FIFTY_FIFTY = "fifty_fifty"
    SINGLE_PAYER = "single_payer"
    CUSTOM = "custom"
    PROPORTIONAL = "proportional"


class BillFrequency(str, Enum):
    """Recurrence of a bill."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"
    CUSTOM = "custom"


class IncomeFrequency(str, Enum):
    """Pay frequency of an income source."""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


class PeriodType(str, Enum):
    """Budget period length. Only calendar months are supported."""

    MONTHLY = "monthly"


class BudgetStatus(str, Enum):
    """Tri-state budget health: on track, warning, over."""

    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class BillStatus(str, Enum):
    """Tri-state bill urgency."""

    UPCOMING = "upcoming"
    DUE_SOON = "due_soon"
    OVERDUE = "overdue"


class ChangeType(str, Enum):
    """Kind of row change published on the change feed."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class Profile:
    """A partner's identity record."""

    id: int
    email: str
    full_name: Optional[str]
    permission_tier: PermissionTier
    couple_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class Couple:
    """The two-user household owning all financial records."""

    id: int
    user1_id: int
    user2_id: Optional[int]
    default_split_type: SplitType
    track_income: bool
    invite_code: Optional[str]
    is_paired: bool
    timezone: str
    created_at: datetime


@dataclass(frozen=True)
class Income:
    """One income source of one partner."""

    id: int
    couple_id: int
    profile_id: int
    source_name: str
    amount: Decimal
    frequency: IncomeFrequency
    is_primary: bool
    created_at: datetime


@dataclass(frozen=True)
class Budget:
    """Spending ceiling for one category within one couple."""

    id: int
    couple_id: int
    category: str
    limit_amount: Decimal
    current_spent: Decimal
    period_start_date: date
    period_type: PeriodType
    auto_reset_enabled: bool
    created_at: datetime


@dataclass(frozen=True)
class BudgetHistory:
    """Immutable snapshot of one elapsed budget period."""

    id: int
    budget_id: int
    couple_id: int
    period_start: date
    period_end: date
    category: str
    limit_amount: Decimal
    total_spent: Decimal
    expenses_count: int
    status: BudgetStatus
    created_at: datetime


@dataclass(frozen=True)
class Expense:
    """Ledger entry: one spend event."""

    id: int
    couple_id: int
    created_by: int
    amount: Decimal
    category: str
    description: Optional[str]
    split_type: SplitType
    split_percentage_user1: int
    split_percentage_user2: int
    receipt_url: Optional[str]
    bill_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class Bill:
    """Recurring obligation, independent of budget categories."""

    id: int
    couple_id: int
    name: str
    amount: Decimal
    category: Optional[str]
    due_date: date
    frequency: BillFrequency
    custom_frequency_days: Optional[int]
    split_type: SplitType
    split_percentage_user1: int
    split_percentage_user2: int
    reminder_days: int
    receipt_url: Optional[str]
    is_active: bool
    last_paid_date: Optional[date]
    created_at: datetime


@dataclass(frozen=True)
class BillPayment:
    """Settlement of one bill cycle."""

    id: int
    bill_id: int
    couple_id: int
    payment_date: date
    amount_paid: Decimal
    payment_method: Optional[str]
    notes: Optional[str]
    receipt_url: Optional[str]
    period_start: date
    period_end: date
    recorded_by: int
    created_at: datetime


@dataclass(frozen=True)
class BudgetProgress:
    """Budget with its progress figures for the active period."""

    budget: Budget
    remaining: Decimal
    percentage: Decimal
    status: BudgetStatus


@dataclass(frozen=True)
class BillStatusResult:
    """Outcome of classifying a due date against today."""

    status: BillStatus
    days_until_due: int


@dataclass(frozen=True)
class BillWithStatus:
    """Bill with its urgency relative to a given day."""

    bill: Bill
    days_until_due: int
    status: BillStatus


@dataclass(frozen=True)
class SplitResult:
    """Percentages owed by each partner. Always sums to 100."""

    percentage_user1: int
    percentage_user2: int


@dataclass(frozen=True)
class ProportionalSplit:
    """Income-proportional split with the incomes it was derived from."""

    split: SplitResult
    user1_income: Decimal
    user2_income: Decimal
    total_income: Decimal


@dataclass(frozen=True)
class RolloverFailure:
    """A budget whose period could not be archived."""

    budget_id: int
    category: str
    error: str


@dataclass(frozen=True)
class RolloverReport:
    """Outcome of scanning a couple's budgets for elapsed periods."""

    archived: tuple[BudgetHistory, ...] = ()
    already_archived: tuple[int, ...] = ()
    manual: tuple[int, ...] = ()
    failed: tuple[RolloverFailure, ...] = ()

    @property
    def rolled_over_count(self) -> int:
        return len(self.archived) + len(self.already_archived)


@dataclass(frozen=True)
class MonthlyBudgetLine:
    """One category's figures for a reported month."""

    category: str
    limit_amount: Decimal
    total_spent: Decimal
    remaining: Decimal
    status: BudgetStatus
    expenses_count: Optional[int] = None
    budget_id: Optional[int] = None


@dataclass(frozen=True)
class ChangeEvent:
    """Row change notification. Consumers use it only to trigger a re-fetch."""

    couple_id: int
    table: str
    event_type: ChangeType
    row: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class BudgetOverview:
    """A couple's budgets after the on-access rollover scan."""

    budgets: tuple[BudgetProgress, ...]
    rollover: RolloverReport


@dataclass(frozen=True)
class SpendDrift:
    """A budget whose cached spend disagreed with the ledger."""

    budget_id: int
    category: str
    cached: Decimal
    actual: Decimal


@dataclass(frozen=True)
class IncomeLine:
    """An income source with its monthly equivalent."""

    income: Income
    monthly_equivalent: Decimal


@dataclass(frozen=True)
class IncomeSummary:
    """A partner's income sources normalized to a monthly total."""

    profile_id: int
    total_monthly_income: Decimal
    sources: tuple[IncomeLine, ...]

"""SQLAlchemy models for couplebucks database."""

from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    CheckConstraint,
    UniqueConstraint,
    Index,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

from couplebucks.utils.clock import utcnow

Base = declarative_base()


class Profile(Base):
    """Partner profile model."""

    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True)
    email = Column(String, unique=True, nullable=False)
    full_name = Column(String, nullable=True)
    permission_tier = Column(String, nullable=False, default="manager")
    couple_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class Couple(Base):
    """Household model."""

    __tablename__ = "couples"

    id = Column(Integer, primary_key=True)
    user1_id = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    user2_id = Column(Integer, ForeignKey("profiles.id"), nullable=True)
    default_split_type = Column(String, nullable=False, default="fifty_fifty")
    track_income = Column(Boolean, default=False, nullable=False)
    invite_code = Column(String, unique=True, nullable=True)
    is_paired = Column(Boolean, default=False, nullable=False)
    timezone = Column(String, default="UTC", nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (CheckConstraint("user1_id != user2_id", name="different_users"),)

    budgets = relationship("Budget", back_populates="couple", cascade="all, delete-orphan")
    bills = relationship("Bill", back_populates="couple", cascade="all, delete-orphan")


class Income(Base):
    """Income source model."""

    __tablename__ = "incomes"

    id = Column(Integer, primary_key=True)
    couple_id = Column(Integer, ForeignKey("couples.id"), nullable=False)
    profile_id = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    source_name = Column(String, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    frequency = Column(String, nullable=False)
    is_primary = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (CheckConstraint("amount >= 0", name="income_amount_non_negative"),)


class Expense(Base):
    """Ledger entry model."""

    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True)
    couple_id = Column(Integer, ForeignKey("couples.id"), nullable=False)
    created_by = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    category = Column(String, nullable=False)
    description = Column(String, nullable=True)
    split_type = Column(String, nullable=False, default="fifty_fifty")
    split_percentage_user1 = Column(Integer, nullable=False, default=50)
    split_percentage_user2 = Column(Integer, nullable=False, default=50)
    receipt_url = Column(String, nullable=True)
    bill_id = Column(Integer, ForeignKey("bills.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("amount > 0", name="expense_amount_positive"),
        CheckConstraint(
            "split_percentage_user1 + split_percentage_user2 = 100", name="valid_split"
        ),
        Index("ix_expenses_couple_category_created", "couple_id", "category", "created_at"),
    )


class Budget(Base):
    """Monthly category budget model."""

    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True)
    couple_id = Column(Integer, ForeignKey("couples.id"), nullable=False)
    category = Column(String, nullable=False)
    limit_amount = Column(Numeric(10, 2), nullable=False)
    current_spent = Column(Numeric(10, 2), nullable=False, default=0)
    period_start_date = Column(Date, nullable=False)
    period_type = Column(String, nullable=False, default="monthly")
    auto_reset_enabled = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("couple_id", "category", name="uq_budget_couple_category"),
        CheckConstraint("limit_amount > 0", name="budget_limit_positive"),
        CheckConstraint("current_spent >= 0", name="budget_spent_non_negative"),
    )

    couple = relationship("Couple", back_populates="budgets")
    history = relationship("BudgetHistory", back_populates="budget", cascade="all, delete-orphan")


class BudgetHistory(Base):
    """Archived budget period model."""

    __tablename__ = "budget_history"

    id = Column(Integer, primary_key=True)
    budget_id = Column(Integer, ForeignKey("budgets.id"), nullable=False)
    couple_id = Column(Integer, ForeignKey("couples.id"), nullable=False)
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    category = Column(String, nullable=False)
    limit_amount = Column(Numeric(10, 2), nullable=False)
    total_spent = Column(Numeric(10, 2), nullable=False)
    expenses_count = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # One archive per budget period
    __table_args__ = (
        UniqueConstraint("budget_id", "period_start", name="uq_budget_history_period"),
    )

    budget = relationship("Budget", back_populates="history")


class Bill(Base):
    """Recurring bill model."""

    __tablename__ = "bills"

    id = Column(Integer, primary_key=True)
    couple_id = Column(Integer, ForeignKey("couples.id"), nullable=False)
    name = Column(String, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    category = Column(String, nullable=True)
    due_date = Column(Date, nullable=False)
    frequency = Column(String, nullable=False)
    custom_frequency_days = Column(Integer, nullable=True)
    split_type = Column(String, nullable=False, default="fifty_fifty")
    split_percentage_user1 = Column(Integer, nullable=False, default=50)
    split_percentage_user2 = Column(Integer, nullable=False, default=50)
    reminder_days = Column(Integer, nullable=False, default=3)
    receipt_url = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    last_paid_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("amount > 0", name="bill_amount_positive"),
        CheckConstraint(
            "split_percentage_user1 + split_percentage_user2 = 100", name="valid_bill_split"
        ),
        CheckConstraint(
            "(frequency = 'custom') = (custom_frequency_days IS NOT NULL)",
            name="custom_frequency_days_iff_custom",
        ),
    )

    couple = relationship("Couple", back_populates="bills")
    payments = relationship("BillPayment", back_populates="bill", cascade="all, delete-orphan")


class BillPayment(Base):
    """Bill payment history model."""

    __tablename__ = "bill_payment_history"

    id = Column(Integer, primary_key=True)
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=False)
    couple_id = Column(Integer, ForeignKey("couples.id"), nullable=False)
    payment_date = Column(Date, nullable=False)
    amount_paid = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    receipt_url = Column(String, nullable=True)
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    recorded_by = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (CheckConstraint("amount_paid > 0", name="amount_paid_positive"),)

    bill = relationship("Bill", back_populates="payments")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine: Engine = create_engine(database_url, echo=False)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)

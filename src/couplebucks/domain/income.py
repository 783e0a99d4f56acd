"""Income domain service."""

import logging
from decimal import Decimal
from typing import Optional

from couplebucks.database.base import Database
from couplebucks.domain.entities import (
    Couple,
    Income as IncomeEntity,
    IncomeFrequency,
    IncomeLine,
    IncomeSummary,
    ProportionalSplit,
    SplitResult,
    SplitType,
)
from couplebucks.domain.errors import (
    NotFoundError,
    ValidationError,
    couple_not_found,
    income_not_found,
)
from couplebucks.domain.split import compute_split, monthly_equivalent, proportional_split

logger = logging.getLogger(__name__)


class IncomeService:
    """Service for managing income sources and income-based splits."""

    def __init__(self, db: Database):
        """Initialize income service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_couple(self, couple_id: int) -> Couple:
        couple = self.db.get_couple(couple_id)
        if couple is None:
            raise NotFoundError(couple_not_found(couple_id))
        return couple

    def create_income(
        self,
        couple_id: int,
        profile_id: int,
        source_name: str,
        amount: Decimal,
        frequency: IncomeFrequency = IncomeFrequency.MONTHLY,
        is_primary: bool = False,
    ) -> int:
        """Create an income source for a partner.

        Args:
            couple_id: Couple ID
            profile_id: Partner the income belongs to
            source_name: Employer or other label
            amount: Amount per pay period
            frequency: Pay frequency
            is_primary: Whether this is the partner's main income

        Returns:
            Income ID

        Raises:
            ValidationError: If the amount is negative, the name is empty or
                the profile is not a member of the couple
            NotFoundError: If the couple doesn't exist
        """
        couple = self._require_couple(couple_id)
        if profile_id not in (couple.user1_id, couple.user2_id):
            raise ValidationError(f"Profile {profile_id} is not a member of couple {couple_id}")
        if not source_name or not source_name.strip():
            raise ValidationError("Income source name is required")
        if amount < 0:
            raise ValidationError(f"Income amount cannot be negative, got {amount}")

        return self.db.create_income(
            couple_id=couple_id,
            profile_id=profile_id,
            source_name=source_name.strip(),
            amount=amount,
            frequency=IncomeFrequency(frequency).value,
            is_primary=is_primary,
        )

    def get_income(self, income_id: int) -> Optional[IncomeEntity]:
        return self.db.get_income(income_id)

    def list_for_profile(self, profile_id: int) -> list[IncomeEntity]:
        """List a partner's incomes, primary first."""
        return self.db.list_incomes(profile_id=profile_id)

    def primary_for_profile(self, profile_id: int) -> Optional[IncomeEntity]:
        for income in self.db.list_incomes(profile_id=profile_id):
            if income.is_primary:
                return income
        return None

    def list_for_couple(self, couple_id: int) -> list[IncomeEntity]:
        return self.db.list_incomes(couple_id=couple_id)

    def update_income(
        self,
        income_id: int,
        source_name: Optional[str] = None,
        amount: Optional[Decimal] = None,
        frequency: Optional[IncomeFrequency] = None,
        is_primary: Optional[bool] = None,
    ) -> IncomeEntity:
        """Update an income source.

        Raises:
            NotFoundError: If the income doesn't exist
            ValidationError: If the new amount is negative
        """
        if self.db.get_income(income_id) is None:
            raise NotFoundError(income_not_found(income_id))
        if amount is not None and amount < 0:
            raise ValidationError(f"Income amount cannot be negative, got {amount}")
        self.db.update_income(
            income_id,
            source_name=source_name,
            amount=amount,
            frequency=IncomeFrequency(frequency).value if frequency is not None else None,
            is_primary=is_primary,
        )
        return self.db.get_income(income_id)

    def delete_income(self, income_id: int) -> None:
        if self.db.get_income(income_id) is None:
            raise NotFoundError(income_not_found(income_id))
        self.db.delete_income(income_id)
        logger.info("Deleted income %s", income_id)

    def _pairs(self, profile_id: Optional[int]) -> list[tuple[Decimal, IncomeFrequency]]:
        if profile_id is None:
            return []
        return [(i.amount, i.frequency) for i in self.db.list_incomes(profile_id=profile_id)]

    def proportional_split_for_couple(self, couple_id: int) -> ProportionalSplit:
        """Split in proportion to the partners' monthly incomes.

        An unpaired couple, or one without any recorded income, splits 50/50.

        Raises:
            NotFoundError: If the couple doesn't exist
        """
        couple = self._require_couple(couple_id)
        return proportional_split(self._pairs(couple.user1_id), self._pairs(couple.user2_id))

    def resolve_split(
        self,
        couple_id: int,
        split_type: Optional[SplitType] = None,
        payer_id: Optional[int] = None,
        custom: Optional[tuple[int, int]] = None,
    ) -> tuple[SplitType, SplitResult]:
        """Resolve a split policy into percentages for a couple.

        Args:
            couple_id: Couple ID
            split_type: Policy; the couple's default when None
            payer_id: For single_payer, the partner paying everything
                (defaults to the first partner)
            custom: For custom, the caller-supplied pair

        Returns:
            (policy applied, SplitResult)

        Raises:
            NotFoundError: If the couple doesn't exist
            ValidationError: If a custom split is missing or invalid
        """
        couple = self._require_couple(couple_id)
        split_type = SplitType(split_type) if split_type is not None else couple.default_split_type

        if split_type == SplitType.PROPORTIONAL:
            return split_type, self.proportional_split_for_couple(couple_id).split

        payer_is_user1 = payer_id is None or payer_id == couple.user1_id
        return split_type, compute_split(split_type, payer_is_user1=payer_is_user1, custom=custom)

    def income_summary(self, profile_id: int) -> IncomeSummary:
        """Summarize a partner's income sources as monthly figures."""
        lines = tuple(
            IncomeLine(income=i, monthly_equivalent=monthly_equivalent(i.amount, i.frequency))
            for i in self.db.list_incomes(profile_id=profile_id)
        )
        total = sum((line.monthly_equivalent for line in lines), Decimal("0"))
        return IncomeSummary(profile_id=profile_id, total_monthly_income=total, sources=lines)

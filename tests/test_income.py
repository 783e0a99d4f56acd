"""Tests for income sources and income-based splits."""

import pytest
from decimal import Decimal

from couplebucks.domain.entities import IncomeFrequency, SplitType
from couplebucks.domain.errors import NotFoundError, ValidationError


def test_create_and_list_incomes(income_service, paired_couple):
    primary = income_service.create_income(
        paired_couple.id, paired_couple.user1_id, " Acme ", Decimal("5000"), is_primary=True
    )
    income_service.create_income(
        paired_couple.id, paired_couple.user1_id, "Tutoring", Decimal("200"), IncomeFrequency.WEEKLY
    )
    income_service.create_income(paired_couple.id, paired_couple.user2_id, "Studio", Decimal("3000"))

    assert income_service.get_income(primary).source_name == "Acme"
    assert len(income_service.list_for_profile(paired_couple.user1_id)) == 2
    assert len(income_service.list_for_couple(paired_couple.id)) == 3
    assert income_service.primary_for_profile(paired_couple.user1_id).id == primary
    assert income_service.primary_for_profile(paired_couple.user2_id) is None


def test_income_must_belong_to_partner(income_service, couple_service, paired_couple):
    outsider = couple_service.create_profile("kim@example.com")
    with pytest.raises(ValidationError):
        income_service.create_income(paired_couple.id, outsider, "Acme", Decimal("100"))


def test_negative_income_rejected(income_service, paired_couple):
    with pytest.raises(ValidationError):
        income_service.create_income(paired_couple.id, paired_couple.user1_id, "Acme", Decimal("-1"))


def test_zero_income_allowed(income_service, paired_couple):
    income_id = income_service.create_income(
        paired_couple.id, paired_couple.user1_id, "Sabbatical", Decimal("0")
    )
    assert income_service.get_income(income_id).amount == 0


def test_update_and_delete_income(income_service, paired_couple):
    income_id = income_service.create_income(
        paired_couple.id, paired_couple.user1_id, "Acme", Decimal("5000")
    )

    updated = income_service.update_income(
        income_id, amount=Decimal("2600"), frequency=IncomeFrequency.BIWEEKLY
    )
    assert updated.amount == Decimal("2600")
    assert updated.frequency == IncomeFrequency.BIWEEKLY
    assert updated.source_name == "Acme"

    with pytest.raises(ValidationError):
        income_service.update_income(income_id, amount=Decimal("-5"))

    income_service.delete_income(income_id)
    assert income_service.get_income(income_id) is None
    with pytest.raises(NotFoundError):
        income_service.delete_income(income_id)


def test_proportional_split_for_couple(income_service, paired_couple):
    income_service.create_income(paired_couple.id, paired_couple.user1_id, "Acme", Decimal("6000"))
    income_service.create_income(paired_couple.id, paired_couple.user2_id, "Studio", Decimal("4000"))

    result = income_service.proportional_split_for_couple(paired_couple.id)

    assert (result.split.percentage_user1, result.split.percentage_user2) == (60, 40)
    assert result.total_income == Decimal("10000")


def test_proportional_split_without_income_is_even(income_service, paired_couple):
    result = income_service.proportional_split_for_couple(paired_couple.id)
    assert (result.split.percentage_user1, result.split.percentage_user2) == (50, 50)


def test_proportional_split_for_unpaired_couple(income_service, couple_service):
    solo = couple_service.create_profile("solo@example.com")
    couple_id = couple_service.create_couple(solo)
    income_service.create_income(couple_id, solo, "Acme", Decimal("1000"))

    result = income_service.proportional_split_for_couple(couple_id)

    assert (result.split.percentage_user1, result.split.percentage_user2) == (100, 0)


def test_resolve_split_single_payer(income_service, paired_couple):
    split_type, split = income_service.resolve_split(
        paired_couple.id, SplitType.SINGLE_PAYER, payer_id=paired_couple.user2_id
    )
    assert split_type == SplitType.SINGLE_PAYER
    assert (split.percentage_user1, split.percentage_user2) == (0, 100)


def test_resolve_split_uses_couple_default(income_service, couple_service):
    alex = couple_service.create_profile("alex@example.com")
    couple_id = couple_service.create_couple(alex, default_split_type=SplitType.PROPORTIONAL)

    split_type, split = income_service.resolve_split(couple_id)

    assert split_type == SplitType.PROPORTIONAL
    assert (split.percentage_user1, split.percentage_user2) == (50, 50)


def test_resolve_split_unknown_couple(income_service):
    with pytest.raises(NotFoundError):
        income_service.resolve_split(999)


def test_income_summary(income_service, paired_couple):
    income_service.create_income(paired_couple.id, paired_couple.user1_id, "Acme", Decimal("3000"))
    income_service.create_income(
        paired_couple.id, paired_couple.user1_id, "Tutoring", Decimal("100"), IncomeFrequency.WEEKLY
    )

    summary = income_service.income_summary(paired_couple.user1_id)

    assert len(summary.sources) == 2
    assert summary.total_monthly_income == Decimal("3000") + Decimal("433.3333")

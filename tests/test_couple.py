"""Tests for couple and profile service."""

import pytest

from couplebucks.domain.couple import INVITE_ALPHABET, generate_invite_code
from couplebucks.domain.entities import SplitType
from couplebucks.domain.errors import ConflictError, NotFoundError, ValidationError


def test_generate_invite_code():
    code = generate_invite_code()
    assert len(code) == 8
    assert all(c in INVITE_ALPHABET for c in code)
    assert "O" not in INVITE_ALPHABET and "0" not in INVITE_ALPHABET


def test_create_couple(couple_service):
    alex = couple_service.create_profile("alex@example.com", full_name="Alex")
    couple_id = couple_service.create_couple(alex, default_split_type=SplitType.PROPORTIONAL)

    couple = couple_service.require_couple(couple_id)
    assert couple.user1_id == alex
    assert couple.user2_id is None
    assert not couple.is_paired
    assert couple.default_split_type == SplitType.PROPORTIONAL
    assert couple.timezone == "UTC"
    assert couple_service.get_profile(alex).couple_id == couple_id


def test_create_profile_requires_email(couple_service):
    with pytest.raises(ValidationError):
        couple_service.create_profile("  ")


def test_create_couple_twice_rejected(couple_service):
    alex = couple_service.create_profile("alex@example.com")
    couple_service.create_couple(alex)
    with pytest.raises(ConflictError):
        couple_service.create_couple(alex)


def test_create_couple_unknown_timezone(couple_service):
    alex = couple_service.create_profile("alex@example.com")
    with pytest.raises(ValidationError):
        couple_service.create_couple(alex, timezone="Nowhere/Special")


def test_join_couple(paired_couple, couple_service):
    couple = couple_service.require_couple(paired_couple.id)
    assert couple.is_paired
    assert couple.user2_id == paired_couple.user2_id
    assert couple_service.get_profile(paired_couple.user2_id).couple_id == paired_couple.id


def test_join_is_case_insensitive(couple_service):
    alex = couple_service.create_profile("alex@example.com")
    sam = couple_service.create_profile("sam@example.com")
    couple = couple_service.require_couple(couple_service.create_couple(alex))

    joined = couple_service.join_couple(sam, f"  {couple.invite_code.lower()} ")
    assert joined.is_paired


def test_join_unknown_code(couple_service):
    sam = couple_service.create_profile("sam@example.com")
    with pytest.raises(NotFoundError):
        couple_service.join_couple(sam, "ZZZZZZZZ")


def test_join_complete_couple_rejected(paired_couple, couple_service):
    third = couple_service.create_profile("third@example.com")
    couple = couple_service.require_couple(paired_couple.id)
    with pytest.raises(ConflictError):
        couple_service.join_couple(third, couple.invite_code)


def test_join_own_couple_rejected(couple_service):
    alex = couple_service.create_profile("alex@example.com")
    couple = couple_service.require_couple(couple_service.create_couple(alex))
    with pytest.raises(ConflictError):
        couple_service.join_couple(alex, couple.invite_code)


def test_partner_of(paired_couple, couple_service):
    assert couple_service.partner_of(paired_couple.id, paired_couple.user1_id) == paired_couple.user2_id
    assert couple_service.partner_of(paired_couple.id, paired_couple.user2_id) == paired_couple.user1_id
    with pytest.raises(ValidationError):
        couple_service.partner_of(paired_couple.id, 999)

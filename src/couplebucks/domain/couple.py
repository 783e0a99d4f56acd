"""Couple and profile domain service."""

import logging
import secrets
from datetime import date
from typing import Optional

from couplebucks.database.base import Database
from couplebucks.domain.entities import (
    Couple as CoupleEntity,
    PermissionTier,
    Profile as ProfileEntity,
    SplitType,
)
from couplebucks.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    couple_not_found,
    profile_not_found,
)
from couplebucks.utils import clock
from couplebucks.utils.clock import DEFAULT_TIMEZONE, resolve_timezone

logger = logging.getLogger(__name__)

# No 0/O or 1/I, they are easy to confuse when read aloud
INVITE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
INVITE_CODE_LENGTH = 8


def generate_invite_code() -> str:
    """Return a random invite code."""
    return "".join(secrets.choice(INVITE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))


class CoupleService:
    """Service for managing profiles and the couples they belong to."""

    def __init__(self, db: Database):
        """Initialize couple service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_profile(
        self,
        email: str,
        full_name: Optional[str] = None,
        permission_tier: PermissionTier = PermissionTier.MANAGER,
    ) -> int:
        """Create a profile.

        Returns:
            Profile ID

        Raises:
            ValidationError: If email is empty
        """
        if not email or not email.strip():
            raise ValidationError("Email is required")
        return self.db.create_profile(
            email=email.strip(),
            full_name=full_name,
            permission_tier=PermissionTier(permission_tier).value,
        )

    def get_profile(self, profile_id: int) -> Optional[ProfileEntity]:
        return self.db.get_profile(profile_id)

    def require_profile(self, profile_id: int) -> ProfileEntity:
        """Get a profile or raise NotFoundError."""
        profile = self.db.get_profile(profile_id)
        if profile is None:
            raise NotFoundError(profile_not_found(profile_id))
        return profile

    def create_couple(
        self,
        user1_id: int,
        default_split_type: SplitType = SplitType.FIFTY_FIFTY,
        track_income: bool = False,
        timezone: str = DEFAULT_TIMEZONE,
    ) -> int:
        """Create a couple initiated by user1.

        Args:
            user1_id: Profile ID of the initiating partner
            default_split_type: Split policy applied when none is given
            track_income: Whether income tracking is enabled
            timezone: IANA zone that pins the household's calendar days

        Returns:
            Couple ID

        Raises:
            NotFoundError: If the profile doesn't exist
            ConflictError: If the profile already belongs to a couple
            ValidationError: If the timezone is unknown
        """
        profile = self.require_profile(user1_id)
        if profile.couple_id is not None:
            raise ConflictError(f"Profile {user1_id} already belongs to couple {profile.couple_id}")
        try:
            resolve_timezone(timezone)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        couple_id = self.db.create_couple(
            user1_id=user1_id,
            invite_code=generate_invite_code(),
            default_split_type=SplitType(default_split_type).value,
            track_income=track_income,
            timezone=timezone,
        )
        logger.info("Created couple %s for profile %s", couple_id, user1_id)
        return couple_id

    def join_couple(self, user2_id: int, invite_code: str) -> CoupleEntity:
        """Join a couple using its invite code.

        Returns:
            The paired couple

        Raises:
            NotFoundError: If the profile or invite code doesn't exist
            ConflictError: If the couple is already paired or the profile is taken
        """
        profile = self.require_profile(user2_id)
        couple = self.db.get_couple_by_invite_code(invite_code.strip().upper())
        if couple is None:
            raise NotFoundError("Invalid invite code")
        if couple.is_paired:
            raise ConflictError("This couple is already complete")
        if couple.user1_id == user2_id:
            raise ConflictError("You cannot join your own couple")
        if profile.couple_id is not None:
            raise ConflictError(f"Profile {user2_id} already belongs to couple {profile.couple_id}")

        self.db.pair_couple(couple.id, user2_id)
        logger.info("Profile %s joined couple %s", user2_id, couple.id)
        return self.require_couple(couple.id)

    def get_couple(self, couple_id: int) -> Optional[CoupleEntity]:
        return self.db.get_couple(couple_id)

    def require_couple(self, couple_id: int) -> CoupleEntity:
        """Get a couple or raise NotFoundError."""
        couple = self.db.get_couple(couple_id)
        if couple is None:
            raise NotFoundError(couple_not_found(couple_id))
        return couple

    def partner_of(self, couple_id: int, profile_id: int) -> Optional[int]:
        """Return the other partner's profile ID, or None if unpaired."""
        couple = self.require_couple(couple_id)
        if profile_id == couple.user1_id:
            return couple.user2_id
        if profile_id == couple.user2_id:
            return couple.user1_id
        raise ValidationError(f"Profile {profile_id} is not a member of couple {couple_id}")


def couple_timezone(db: Database, couple_id: int) -> str:
    """Return the IANA zone that pins the couple's calendar days.

    Raises:
        NotFoundError: If the couple doesn't exist
    """
    couple = db.get_couple(couple_id)
    if couple is None:
        raise NotFoundError(couple_not_found(couple_id))
    return couple.timezone


def couple_today(db: Database, couple_id: int) -> date:
    """Return the current calendar day in the couple's timezone."""
    return clock.today(couple_timezone(db, couple_id))

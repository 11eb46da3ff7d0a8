"""
Service-layer operations for professional profiles.

Profiles are plain field read/writes; the only invariants enforced here are
ownership (a profile is edited by the professional it belongs to, or an admin)
and the one-profile-per-user rule for shared-role lawyers.
"""

import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from legal_eagle.database.core.principal import Principal, SharedUser
from legal_eagle.database.core.serializers import lawyer_to_dict
from legal_eagle.database.daos.lawyer_dao import LawyerDao
from legal_eagle.database.daos.user_dao import UserDao
from legal_eagle.database.entities.lawyer import Lawyer
from legal_eagle.database.entities.user import UserRole
from legal_eagle.database.helpers.transactionManagement import transactional
from legal_eagle.errors import AuthorizationError, ConflictError, NotFoundError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {
    "name": "name",
    "specialization": "specialization",
    "experience": "experience",
    "pricePerSession": "price_per_session",
    "bio": "bio",
}
"""Request field -> entity attribute for `update_lawyer`."""


def _require_lawyer(session: Session, lawyer_id: UUID) -> Lawyer:
    lawyer = LawyerDao().fetchLawyerById(session, lawyer_id)
    if lawyer is None:
        raise NotFoundError("Lawyer not found")
    return lawyer


def _require_owner(principal: Principal, lawyer: Lawyer) -> None:
    if principal.is_admin:
        return
    if principal.acting_lawyer_id != lawyer.id:
        raise AuthorizationError("Not authorized to modify this lawyer profile")


@transactional
def create_lawyer_profile(
    session: Session,
    principal: Principal,
    specialization: str = "",
    experience: int = 0,
    price_per_session: Decimal = Decimal("0"),
    bio: Optional[str] = None,
    availability: Optional[list] = None,
    name: Optional[str] = None,
) -> dict:
    """
    Create the profile of a shared-role lawyer, linked to the calling user.

    Raises
    ------
    AuthorizationError
        If the caller is not a `lawyer`-role user.
    ConflictError
        If the user already has a profile, or the email is taken by another profile.
    """
    if not isinstance(principal, SharedUser) or principal.role != UserRole.LAWYER.value:
        raise AuthorizationError("Only lawyer accounts can create a lawyer profile")

    lawyer_dao = LawyerDao()
    if lawyer_dao.fetchLawyerByUserId(session, principal.user_id) is not None:
        raise ConflictError("Lawyer profile already exists for this user")

    user = UserDao().fetchUserById(session, principal.user_id)
    if user is None:
        raise NotFoundError("User not found")
    if lawyer_dao.fetchLawyerByEmail(session, user.email) is not None:
        raise ConflictError("Email already exists")

    lawyer = lawyer_dao.createLawyer(
        session,
        Lawyer(
            name=name or user.name,
            email=user.email,
            user_id=user.id,
            specialization=specialization,
            experience=experience,
            price_per_session=price_per_session,
            bio=bio,
            availability=availability,
        ),
    )
    logger.info(f"Created lawyer profile {lawyer.id} for user {user.id}")
    return lawyer_to_dict(lawyer)


@transactional
def list_lawyers(session: Session, specialization: Optional[str] = None) -> List[dict]:
    return [lawyer_to_dict(lawyer) for lawyer in LawyerDao().fetchLawyers(session, specialization)]


@transactional
def get_lawyer(session: Session, lawyer_id: UUID) -> dict:
    return lawyer_to_dict(_require_lawyer(session, lawyer_id))


@transactional
def get_lawyer_by_user(session: Session, user_id: UUID) -> dict:
    lawyer = LawyerDao().fetchLawyerByUserId(session, user_id)
    if lawyer is None:
        raise NotFoundError("Lawyer profile not found")
    return lawyer_to_dict(lawyer)


@transactional
def update_lawyer(session: Session, principal: Principal, lawyer_id: UUID, changes: dict) -> dict:
    """
    Apply the editable fields present in `changes` (keys as in `EDITABLE_FIELDS`).
    """
    lawyer = _require_lawyer(session, lawyer_id)
    _require_owner(principal, lawyer)
    for field, attribute in EDITABLE_FIELDS.items():
        if field in changes and changes[field] is not None:
            setattr(lawyer, attribute, changes[field])
    session.flush()
    return lawyer_to_dict(lawyer)


@transactional
def update_availability(session: Session, principal: Principal, lawyer_id: UUID, availability: List[dict]) -> dict:
    """Replace the ordered availability list of a profile."""
    lawyer = _require_lawyer(session, lawyer_id)
    _require_owner(principal, lawyer)
    lawyer.availability = list(availability)
    session.flush()
    return lawyer_to_dict(lawyer)

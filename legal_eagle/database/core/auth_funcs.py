"""
Identity & session store.

Registration, login, token validation and logout for the two principal kinds:
users (`app_user`) and direct lawyers (`lawyer` rows with their own password).

All functions are wrapped with `@transactional` and receive the active
`session` from the decorator; call them with keyword arguments only.

Token validation order is fixed: the direct-lawyer sessions are searched first,
the user sessions second, and the first match wins.
"""

import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from legal_eagle.api.utils import create_access_token, verify_token
from legal_eagle.crypt.encrypt_decrypt import EncryptionDec
from legal_eagle.database.config.config import settings
from legal_eagle.database.core.principal import DirectProfessional, Principal, SharedUser
from legal_eagle.database.core.serializers import lawyer_to_dict, user_to_dict
from legal_eagle.database.daos.lawyer_dao import LawyerDao
from legal_eagle.database.daos.session_dao import SessionDao
from legal_eagle.database.daos.user_dao import UserDao
from legal_eagle.database.entities.auth_session import AuthSession
from legal_eagle.database.entities.lawyer import Lawyer
from legal_eagle.database.entities.user import User, UserRole
from legal_eagle.database.helpers.time_utils import utc_now
from legal_eagle.database.helpers.transactionManagement import transactional
from legal_eagle.errors import AuthenticationError, AuthorizationError, ConflictError, ValidationError

logger = logging.getLogger(__name__)


def _issue_session(session: Session, user_id=None, lawyer_id=None) -> str:
    """Create a signed token and its session row; purge the owner's expired sessions."""
    session_dao = SessionDao()
    now = utc_now()
    expires_at = now + timedelta(hours=settings.SESSION_TTL_HOURS)
    if lawyer_id is not None:
        claims = {"sub": str(lawyer_id), "kind": DirectProfessional.kind}
    else:
        claims = {"sub": str(user_id), "kind": SharedUser.kind}
    token = create_access_token(claims, expires_at=expires_at)
    session_dao.deleteExpiredSessions(session, now, user_id=user_id, lawyer_id=lawyer_id)
    session_dao.createSession(
        session,
        AuthSession(token=token, expires_at=expires_at, user_id=user_id, lawyer_id=lawyer_id, created_at=now),
    )
    return token


@transactional
def register_user(
    session: Session,
    name: str,
    email: str,
    password: str,
    role: str = UserRole.USER.value,
    admin_key: Optional[str] = None,
) -> dict:
    """
    Register a user and open a first session.

    Returns
    -------
    dict
        {'token', 'userId', 'role', 'user'}

    Raises
    ------
    ConflictError
        If the email is already registered.
    ValidationError
        If the role is unknown.
    AuthorizationError
        If `admin` is requested without the configured registration key.
    """
    if role not in {r.value for r in UserRole}:
        raise ValidationError(f"Unknown role '{role}'")
    if role == UserRole.ADMIN.value and (
        not settings.ADMIN_REGISTRATION_KEY or admin_key != settings.ADMIN_REGISTRATION_KEY
    ):
        raise AuthorizationError("Admin registration is not allowed")

    user_dao = UserDao()
    if user_dao.fetchUserByEmail(session, email) is not None:
        raise ConflictError("Email already exists")

    user = user_dao.createUser(session, User(name=name, email=email, password=password, role=role))
    token = _issue_session(session, user_id=user.id)
    logger.info(f"Registered user {user.id} with role {user.role}")
    return {"token": token, "userId": str(user.id), "role": user.role, "user": user_to_dict(user)}


@transactional
def login_user(session: Session, email: str, password: str) -> dict:
    """
    Authenticate a user by email and password and append a new session.

    Earlier sessions of the same user stay valid (multi-device).

    Raises
    ------
    AuthenticationError
        Unknown email or wrong password (same message for both).
    """
    user = UserDao().fetchUserByEmail(session, email)
    if user is None or not EncryptionDec().check_passwords(password, user.password):
        raise AuthenticationError("Invalid credentials")
    token = _issue_session(session, user_id=user.id)
    lawyer = LawyerDao().fetchLawyerByUserId(session, user.id) if user.role == UserRole.LAWYER.value else None
    return {
        "token": token,
        "userId": str(user.id),
        "role": user.role,
        "lawyerId": str(lawyer.id) if lawyer else None,
        "user": user_to_dict(user),
    }


@transactional
def register_lawyer(
    session: Session,
    name: str,
    email: str,
    password: str,
    specialization: str = "",
    experience: int = 0,
    price_per_session=0,
    bio: Optional[str] = None,
) -> dict:
    """
    Register a direct lawyer (own credentials, no linked user) and open a first session.
    """
    lawyer_dao = LawyerDao()
    if lawyer_dao.fetchLawyerByEmail(session, email) is not None:
        raise ConflictError("Email already exists")
    lawyer = lawyer_dao.createLawyer(
        session,
        Lawyer(
            name=name,
            email=email,
            password=password,
            specialization=specialization,
            experience=experience,
            price_per_session=price_per_session,
            bio=bio,
        ),
    )
    token = _issue_session(session, lawyer_id=lawyer.id)
    logger.info(f"Registered direct lawyer {lawyer.id}")
    return {"token": token, "lawyerId": str(lawyer.id), "role": UserRole.LAWYER.value, "lawyer": lawyer_to_dict(lawyer)}


@transactional
def login_lawyer(session: Session, email: str, password: str) -> dict:
    """
    Authenticate a direct lawyer. Shared-role lawyers log in through `login_user`.
    """
    lawyer = LawyerDao().fetchLawyerByEmail(session, email)
    if lawyer is None or not lawyer.is_direct or not EncryptionDec().check_passwords(password, lawyer.password):
        raise AuthenticationError("Invalid credentials")
    token = _issue_session(session, lawyer_id=lawyer.id)
    return {"token": token, "lawyerId": str(lawyer.id), "role": UserRole.LAWYER.value, "lawyer": lawyer_to_dict(lawyer)}


@transactional
def validate_token(session: Session, token: Optional[str]) -> Optional[Principal]:
    """
    Resolve a session token to its principal.

    Parameters
    ----------
    token : str | None
        Raw token from the `Authorization` header or a socket `authenticate` event.

    Returns
    -------
    Principal | None
        `DirectProfessional` if a direct lawyer holds the token, else `SharedUser`
        if a user holds it, else None (bad signature, expired, revoked or unknown).
    """
    if not isinstance(token, str) or not token or verify_token(token) is None:
        return None

    session_dao = SessionDao()
    now = utc_now()

    lawyer_session = session_dao.fetchLawyerSession(session, token, now)
    if lawyer_session is not None:
        lawyer = LawyerDao().fetchLawyerById(session, lawyer_session.lawyer_id)
        if lawyer is not None:
            return DirectProfessional(lawyer_id=lawyer.id, name=lawyer.name)

    user_session = session_dao.fetchUserSession(session, token, now)
    if user_session is not None:
        user = UserDao().fetchUserById(session, user_session.user_id)
        if user is not None:
            lawyer_id = None
            if user.role == UserRole.LAWYER.value:
                profile = LawyerDao().fetchLawyerByUserId(session, user.id)
                lawyer_id = profile.id if profile else None
            return SharedUser(user_id=user.id, role=user.role, name=user.name, lawyer_id=lawyer_id)

    return None


@transactional
def revoke_session(session: Session, principal: Principal, token: str) -> bool:
    """
    Log out one session of `principal`. Other sessions remain valid.
    """
    session_dao = SessionDao()
    if isinstance(principal, DirectProfessional):
        removed = session_dao.deleteSession(session, token, lawyer_id=principal.lawyer_id)
    else:
        removed = session_dao.deleteSession(session, token, user_id=principal.user_id)
    return removed > 0

"""
AuthSession ORM Model
=====================

One row per issued session token (``auth_session`` table). A session belongs to
either a user (``user_id``) or a direct lawyer (``lawyer_id``), never both, and
expires at ``expires_at`` whether or not it is explicitly revoked. Multiple
concurrent sessions per principal are allowed (one per device).
"""

from typing import Optional
from uuid import UUID
import uuid
from datetime import datetime

from sqlalchemy import TEXT, DateTime, ForeignKey, Uuid, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from legal_eagle.database.config.connection_engine import declarativeBase
from legal_eagle.database.helpers.time_utils import utc_now


class AuthSession(declarativeBase):
    """ORM model for the `auth_session` table."""

    __tablename__ = "auth_session"
    __table_args__ = (
        CheckConstraint(
            "(user_id IS NULL) <> (lawyer_id IS NULL)", name="ck_auth_session_single_owner"
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    token: Mapped[str] = mapped_column(TEXT, nullable=False, unique=True)
    user_id: Mapped[Optional[UUID]] = mapped_column(Uuid, ForeignKey("app_user.id"), nullable=True, index=True)
    lawyer_id: Mapped[Optional[UUID]] = mapped_column(Uuid, ForeignKey("lawyer.id"), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __init__(
        self,
        token: str,
        expires_at: datetime,
        user_id: Optional[UUID] = None,
        lawyer_id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
    ):
        self.id = uuid.uuid4()
        self.token = token
        self.user_id = user_id
        self.lawyer_id = lawyer_id
        self.created_at = created_at or utc_now()
        self.expires_at = expires_at

"""
Lawyer ORM Model
================

The ``Lawyer`` model is a professional profile stored in the ``lawyer`` table.
A profile exists in one of two shapes:

- **Shared-role**: linked 1:1 to an ``app_user`` row through ``user_id``; the
  user's own credentials and sessions are used. ``password`` is NULL.
- **Direct**: registered on its own with a ``password`` and its own sessions;
  ``user_id`` is NULL.

``user_id`` is unique, so a user can back at most one profile.
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID
import uuid
from datetime import datetime

from sqlalchemy import VARCHAR, TEXT, JSON, DateTime, Float, ForeignKey, Integer, Numeric, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from legal_eagle.database.config.connection_engine import declarativeBase
from legal_eagle.database.helpers.time_utils import utc_now


class Lawyer(declarativeBase):
    """
    ORM model for the `lawyer` table.

    Attributes
    ----------
    id : UUID
        Primary key.
    user_id : UUID | None
        Back-reference to the owning `app_user` for shared-role lawyers.
    name, email : str
        Identity; email is unique.
    password : str | None
        bcrypt hash, only for direct lawyers.
    specialization : str
    experience : int
        Years of practice.
    price_per_session : Decimal
        Amount charged per booked consultation.
    bio : str | None
    availability : list[dict]
        Ordered ``{"day", "startTime", "endTime"}`` entries.
    rating_average : float
    rating_count : int
    """

    __tablename__ = "lawyer"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)

    user_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("app_user.id"), nullable=True, unique=True
    )
    """Owning user for shared-role lawyers; NULL for direct lawyers."""

    name: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    email: Mapped[str] = mapped_column(VARCHAR(255), nullable=False, unique=True)
    password: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    specialization: Mapped[str] = mapped_column(VARCHAR(255), nullable=False, default="")
    experience: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price_per_session: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    bio: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    availability: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    rating_average: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    date_created_on: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    def __init__(
        self,
        name: str,
        email: str,
        specialization: str = "",
        experience: int = 0,
        price_per_session: Decimal = Decimal("0"),
        user_id: Optional[UUID] = None,
        password: Optional[str] = None,
        bio: Optional[str] = None,
        availability: Optional[list] = None,
    ):
        self.id = uuid.uuid4()
        self.user_id = user_id
        self.name = name
        self.email = email.strip().lower()
        self.password = password
        self.specialization = specialization
        self.experience = experience
        self.price_per_session = Decimal(price_per_session)
        self.bio = bio
        self.availability = list(availability or [])
        self.rating_average = 0.0
        self.rating_count = 0
        self.date_created_on = utc_now()

    @property
    def is_direct(self) -> bool:
        """True when the profile carries its own credentials."""
        return self.user_id is None

    def __str__(self) -> str:
        return f"Lawyer: id:{self.id}, name: {self.name}, direct: {self.is_direct}"

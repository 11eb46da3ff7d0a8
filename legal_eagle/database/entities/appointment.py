"""
Appointment ORM Model
=====================

The ``Appointment`` model is a booked, paid consultation slot between a client
(``app_user``) and a professional (``lawyer``), stored in the ``appointment``
table.

Key features
~~~~~~~~~~~~
- ``slot_date`` / ``slot_time`` keep the wall-clock slot as booked
- ``starts_at`` pins that slot to an explicit UTC instant, resolved in the
  configured appointment timezone at booking time
- ``amount`` is fixed at creation
- Activity window is ``[starts_at, starts_at + duration)``; see `is_active`
"""

from enum import Enum
from decimal import Decimal
from uuid import UUID
import uuid
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import VARCHAR, TEXT, Boolean, Date, DateTime, ForeignKey, Index, Integer, Numeric, Time, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from legal_eagle.database.config.connection_engine import declarativeBase
from legal_eagle.database.helpers.time_utils import as_utc, utc_now


class AppointmentStatus(str, Enum):
    """Appointment lifecycle status"""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"


QUALIFYING_STATUSES = (AppointmentStatus.CONFIRMED.value, AppointmentStatus.COMPLETED.value)
"""Statuses that, together with ``is_paid``, make an appointment qualify for chat access."""


class Appointment(declarativeBase):
    """
    ORM model for the `appointment` table.

    Attributes
    ----------
    id : UUID
    user_id : UUID
        The client.
    lawyer_id : UUID
        The professional.
    slot_date : date
    slot_time : time
    starts_at : datetime
        UTC instant of the slot start.
    duration : int
        Minutes.
    amount : Decimal
        Amount charged at booking.
    is_paid : bool
    status : str
        One of `AppointmentStatus`.
    notes : str
    date_created_on : datetime
    """

    __tablename__ = "appointment"
    __table_args__ = (
        Index("ix_appointment_user_date", "user_id", "slot_date"),
        Index("ix_appointment_lawyer_date", "lawyer_id", "slot_date"),
        Index("ix_appointment_status", "status"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    user_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("app_user.id"), nullable=False)
    lawyer_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("lawyer.id"), nullable=False)
    slot_date: Mapped[date] = mapped_column(Date, nullable=False)
    slot_time: Mapped[time] = mapped_column(Time, nullable=False)
    starts_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(VARCHAR(16), nullable=False, default=AppointmentStatus.PENDING.value)
    notes: Mapped[str] = mapped_column(TEXT, nullable=False, default="")
    date_created_on: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    def __init__(
        self,
        user_id: UUID,
        lawyer_id: UUID,
        slot_date: date,
        slot_time: time,
        starts_at: datetime,
        amount: Decimal,
        duration: int = 60,
        notes: Optional[str] = None,
        is_paid: bool = False,
        status: str = AppointmentStatus.PENDING.value,
    ):
        self.id = uuid.uuid4()
        self.user_id = user_id
        self.lawyer_id = lawyer_id
        self.slot_date = slot_date
        self.slot_time = slot_time
        self.starts_at = starts_at
        self.amount = Decimal(amount)
        self.duration = duration
        self.notes = notes or ""
        self.is_paid = is_paid
        self.status = status
        self.date_created_on = utc_now()

    @property
    def ends_at(self) -> datetime:
        return as_utc(self.starts_at) + timedelta(minutes=self.duration)

    @property
    def is_qualifying(self) -> bool:
        """Paid and confirmed/completed: the pair may use chat."""
        return bool(self.is_paid) and self.status in QUALIFYING_STATUSES

    def is_active(self, now: Optional[datetime] = None) -> bool:
        """
        Whether the slot's window is still open.

        Evaluated fresh on every call; the appointment is active iff
        ``now < starts_at + duration``.
        """
        now = as_utc(now) if now is not None else utc_now()
        return now < self.ends_at

    def __str__(self) -> str:
        return (
            f"Appointment: id:{self.id}, user: {self.user_id}, lawyer: {self.lawyer_id}, "
            f"slot: {self.slot_date} {self.slot_time}, status: {self.status}"
        )

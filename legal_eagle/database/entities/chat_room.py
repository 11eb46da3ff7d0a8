"""
ChatRoom ORM Model
==================

One room per (client, professional) pair, enforced by a unique constraint on
``(user_id, lawyer_id)``. The room owns its message log (see ``chat_message``).

``status`` is the request lifecycle; ``is_chat_unlocked`` is the separate gate
that permits sending. A room only becomes unlocked through the professional's
accept decision or a manual unlock.
"""

from enum import Enum
from typing import Optional
from uuid import UUID
import uuid
from datetime import datetime

from sqlalchemy import VARCHAR, Boolean, DateTime, ForeignKey, Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from legal_eagle.database.config.connection_engine import declarativeBase
from legal_eagle.database.helpers.time_utils import utc_now


class ChatStatus(str, Enum):
    """Chat request lifecycle status"""

    PENDING = "pending"  # Waiting for the lawyer's decision
    ACCEPTED = "accepted"
    DECLINED = "declined"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    PAID = "paid"
    UNPAID = "unpaid"


class ChatRoom(declarativeBase):
    """
    ORM model for the `chat_room` table.

    Attributes
    ----------
    id : UUID
    user_id : UUID
        The client.
    lawyer_id : UUID
        The professional profile.
    is_chat_unlocked : bool
    status : str
        One of `ChatStatus`.
    payment_status : str
        Snapshot taken when the room was created.
    appointment_id : UUID | None
        Qualifying appointment the room was opened under, if any.
    message_count : int
        Number of messages appended so far; the next message's position.
    last_activity : datetime
    date_created_on : datetime
    """

    __tablename__ = "chat_room"
    __table_args__ = (UniqueConstraint("user_id", "lawyer_id", name="uq_chat_room_pair"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    user_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("app_user.id"), nullable=False, index=True)
    lawyer_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("lawyer.id"), nullable=False, index=True)
    is_chat_unlocked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(VARCHAR(16), nullable=False, default=ChatStatus.PENDING.value)
    payment_status: Mapped[str] = mapped_column(VARCHAR(16), nullable=False, default=PaymentStatus.UNPAID.value)
    appointment_id: Mapped[Optional[UUID]] = mapped_column(Uuid, ForeignKey("appointment.id"), nullable=True)
    message_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_activity: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    date_created_on: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __init__(
        self,
        user_id: UUID,
        lawyer_id: UUID,
        payment_status: str,
        appointment_id: Optional[UUID] = None,
    ):
        now = utc_now()
        self.id = uuid.uuid4()
        self.user_id = user_id
        self.lawyer_id = lawyer_id
        self.is_chat_unlocked = False
        self.status = ChatStatus.PENDING.value
        self.payment_status = payment_status
        self.appointment_id = appointment_id
        self.message_count = 0
        self.last_activity = now
        self.date_created_on = now

    def __str__(self) -> str:
        return (
            f"ChatRoom: id:{self.id}, user: {self.user_id}, lawyer: {self.lawyer_id}, "
            f"status: {self.status}, unlocked: {self.is_chat_unlocked}"
        )

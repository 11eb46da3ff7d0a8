"""
ChatMessage ORM Model
=====================

A single message in a chat room (``chat_message`` table). ``position`` is the
message's index in the room's log; ``(chat_room_id, position)`` is unique, so
two concurrent appends can never claim the same slot and the log order never
changes once written.

``is_read`` only ever goes from False to True. System messages are created read.
"""

from enum import Enum
from uuid import UUID
import uuid
from datetime import datetime

from sqlalchemy import VARCHAR, TEXT, Boolean, DateTime, ForeignKey, Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from legal_eagle.database.config.connection_engine import declarativeBase
from legal_eagle.database.helpers.time_utils import utc_now


class SenderRole(str, Enum):
    USER = "user"
    LAWYER = "lawyer"
    SYSTEM = "system"


class ChatMessage(declarativeBase):
    """
    ORM model for the `chat_message` table.

    Attributes
    ----------
    id : UUID
    chat_room_id : UUID
    position : int
        Zero-based index in the room's log.
    sender : str
        One of `SenderRole`.
    text : str
    is_read : bool
    timestamp : datetime
    """

    __tablename__ = "chat_message"
    __table_args__ = (UniqueConstraint("chat_room_id", "position", name="uq_chat_message_position"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    chat_room_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("chat_room.id"), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    sender: Mapped[str] = mapped_column(VARCHAR(16), nullable=False)
    text: Mapped[str] = mapped_column(TEXT, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __init__(self, chat_room_id: UUID, position: int, sender: str, text: str):
        self.id = uuid.uuid4()
        self.chat_room_id = chat_room_id
        self.position = position
        self.sender = sender
        self.text = text
        self.is_read = sender == SenderRole.SYSTEM.value
        self.timestamp = utc_now()

    def __str__(self) -> str:
        return (
            f"Message: room:{self.chat_room_id}, "
            f"position: {self.position}, "
            f"sender: {self.sender}, "
            f"text: {self.text}"
        )

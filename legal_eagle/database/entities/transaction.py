"""
Transaction ORM Model
=====================

Append-only wallet ledger entry (``wallet_transaction`` table). A row is never
updated after insert: a refund is recorded as a new ``refund`` row referencing
the same appointment, not as a mutation of the original ``payment`` row.
"""

from enum import Enum
from decimal import Decimal
from typing import Optional
from uuid import UUID
import uuid
from datetime import datetime

from sqlalchemy import VARCHAR, TEXT, DateTime, ForeignKey, Index, Numeric, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from legal_eagle.database.config.connection_engine import declarativeBase
from legal_eagle.database.helpers.time_utils import utc_now


class TransactionType(str, Enum):
    DEPOSIT = "deposit"
    PAYMENT = "payment"
    REFUND = "refund"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class Transaction(declarativeBase):
    """
    ORM model for the `wallet_transaction` table.

    Attributes
    ----------
    user_id : UUID
        Wallet owner.
    recipient_id : UUID | None
        Counterparty lawyer, for payments and refunds.
    type : str
        One of `TransactionType`.
    amount : Decimal
        Always positive; `type` carries the direction.
    status : str
        One of `TransactionStatus`.
    balance_after : Decimal
        Owner's wallet balance right after this entry was applied.
    appointment_id : UUID | None
    """

    __tablename__ = "wallet_transaction"
    __table_args__ = (
        Index("ix_wallet_transaction_user_created", "user_id", "date_created_on"),
        Index("ix_wallet_transaction_recipient_created", "recipient_id", "date_created_on"),
        Index("ix_wallet_transaction_appointment", "appointment_id"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    user_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("app_user.id"), nullable=False)
    recipient_id: Mapped[Optional[UUID]] = mapped_column(Uuid, ForeignKey("lawyer.id"), nullable=True)
    type: Mapped[str] = mapped_column(VARCHAR(16), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(VARCHAR(16), nullable=False, default=TransactionStatus.PENDING.value)
    description: Mapped[str] = mapped_column(TEXT, nullable=False, default="")
    balance_after: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    appointment_id: Mapped[Optional[UUID]] = mapped_column(Uuid, ForeignKey("appointment.id"), nullable=True)
    date_created_on: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __init__(
        self,
        user_id: UUID,
        type: str,
        amount: Decimal,
        status: str = TransactionStatus.COMPLETED.value,
        description: str = "",
        recipient_id: Optional[UUID] = None,
        appointment_id: Optional[UUID] = None,
        balance_after: Optional[Decimal] = None,
    ):
        self.id = uuid.uuid4()
        self.user_id = user_id
        self.recipient_id = recipient_id
        self.type = type
        self.amount = Decimal(amount)
        self.status = status
        self.description = description
        self.appointment_id = appointment_id
        self.balance_after = balance_after
        self.date_created_on = utc_now()

    def __str__(self) -> str:
        return f"Transaction: id:{self.id}, user: {self.user_id}, type: {self.type}, amount: {self.amount}"

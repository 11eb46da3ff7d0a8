"""
User ORM Model
==============

The ``User`` ORM model represents a registered client, a shared-role lawyer or
an administrator. It maps to the ``app_user`` table.

Key features
~~~~~~~~~~~~
- UUID primary key (``id``)
- Unique, lower-cased email and bcrypt-hashed password
- Role (``user`` | ``lawyer`` | ``admin``)
- Wallet balance, mutated only by the wallet/appointment services
"""

from enum import Enum
from decimal import Decimal
from uuid import UUID
import uuid
from datetime import datetime

from sqlalchemy import VARCHAR, TEXT, DateTime, Numeric, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from legal_eagle.database.config.connection_engine import declarativeBase
from legal_eagle.database.helpers.time_utils import utc_now


class UserRole(str, Enum):
    """Roles a registered account may hold."""

    USER = "user"
    LAWYER = "lawyer"
    ADMIN = "admin"


class User(declarativeBase):
    """
    ORM model for the `app_user` table.

    Attributes
    ----------
    id : UUID
        Primary key.
    name : str
        Display name.
    email : str
        Unique email address, stored lower-case.
    password : str
        bcrypt hash of the password.
    role : str
        One of `UserRole`.
    wallet_balance : Decimal
        Non-negative balance in currency units.
    date_created_on : datetime
        Registration time (UTC).
    """

    __tablename__ = "app_user"
    __table_args__ = (CheckConstraint("wallet_balance >= 0", name="ck_app_user_wallet_non_negative"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    """Primary key. UUID of the user."""

    name: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    """Display name."""

    email: Mapped[str] = mapped_column(VARCHAR(255), nullable=False, unique=True)
    """Unique email address."""

    password: Mapped[str] = mapped_column(TEXT, nullable=False)
    """Hashed password of the user."""

    role: Mapped[str] = mapped_column(VARCHAR(16), nullable=False, default=UserRole.USER.value)
    """Role assigned to the user."""

    wallet_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    """Wallet balance in currency units."""

    date_created_on: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    """Registration timestamp (UTC)."""

    def __init__(self, name: str, email: str, password: str, role: str = UserRole.USER.value):
        """
        Initialize a new User object with an empty wallet.

        Parameters
        ----------
        name : str
            Display name.
        email : str
            Email address (normalised to lower-case).
        password : str
            Already-hashed password.
        role : str
            One of `UserRole` values.
        """
        self.id = uuid.uuid4()
        self.name = name
        self.email = email.strip().lower()
        self.password = password
        self.role = role
        self.wallet_balance = Decimal("0")
        self.date_created_on = utc_now()

    def __str__(self) -> str:
        return f"User: id:{self.id}, email: {self.email}, role: {self.role}"

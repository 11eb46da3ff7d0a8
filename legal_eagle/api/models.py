"""
Pydantic models used for request validation and API data contracts.

Field names follow the JSON the frontend sends (camelCase); the service layer
receives plain Python values extracted from these models.
"""

from datetime import date as Date, time as Time
from decimal import Decimal
from typing import Any, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class UserRegistration(BaseModel):
    """
    Data for a new shared account (client, shared-role lawyer or admin).
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)
    role: Literal["user", "lawyer", "admin"] = "user"
    admin_key: Optional[str] = Field(None, alias="adminKey")
    """Required when `role` is `admin`; compared with `ADMIN_REGISTRATION_KEY`."""


class UserCredentials(BaseModel):
    """
    Represents login credentials, for both the shared and the direct-lawyer path.
    """
    email: str
    """The account email (case-insensitive)."""
    password: str
    """The plaintext password provided for authentication."""


class LawyerRegistration(BaseModel):
    """
    Data for a direct lawyer account (own credentials, no linked user).
    """
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)
    specialization: str = ""
    experience: int = Field(0, ge=0)
    pricePerSession: Decimal = Field(Decimal("0"), ge=0)
    bio: Optional[str] = None


class AvailabilityEntry(BaseModel):
    day: str
    startTime: str
    endTime: str


class LawyerProfileCreation(BaseModel):
    """Profile of a shared-role lawyer; the email is taken from the calling account."""
    name: Optional[str] = None
    specialization: str = ""
    experience: int = Field(0, ge=0)
    pricePerSession: Decimal = Field(Decimal("0"), ge=0)
    bio: Optional[str] = None
    availability: List[AvailabilityEntry] = []


class LawyerProfileUpdate(BaseModel):
    """Editable profile fields; omitted fields are left unchanged."""
    name: Optional[str] = None
    specialization: Optional[str] = None
    experience: Optional[int] = Field(None, ge=0)
    pricePerSession: Optional[Decimal] = Field(None, ge=0)
    bio: Optional[str] = None


class AvailabilityUpdate(BaseModel):
    availability: List[AvailabilityEntry]


class AppointmentBooking(BaseModel):
    """
    A booking request. The client is the authenticated principal.
    """
    lawyerId: UUID
    date: Date
    """Calendar date of the slot (YYYY-MM-DD)."""
    time: Time
    """Wall-clock start of the slot (HH:MM) in the configured appointment timezone."""
    notes: Optional[str] = None
    duration: Optional[int] = Field(None, gt=0)
    """Minutes; the configured default applies when omitted."""
    userId: Optional[UUID] = None


class AppointmentUpdate(BaseModel):
    status: Optional[Literal["pending", "confirmed", "completed", "cancelled", "rescheduled"]] = None
    notes: Optional[str] = None


class WalletDeposit(BaseModel):
    amount: Any = None
    """Validated by the wallet service so every malformed amount maps to INVALID_AMOUNT."""
    userId: Optional[UUID] = None


class ChatCreation(BaseModel):
    lawyerId: UUID
    forceCreation: bool = False
    userId: Optional[UUID] = None
    """Client to open the room for; only honoured for admins."""


class NewMessage(BaseModel):
    text: str


class ChatRequestDecision(BaseModel):
    action: Literal["accept", "decline", "complete"]

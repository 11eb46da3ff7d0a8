"""
Chat access gate.

Decides, for a principal and a chat room, what the principal may do:

- **membership**: only the room's client, the room's lawyer (matched through
  the acting profile id, which covers both shared-role and direct lawyers) and
  admins get in at all;
- **history**: clients additionally need a qualifying appointment (paid and
  confirmed/completed) with the room's lawyer;
- **send**: clients need a qualifying appointment whose window is still open,
  then an unlocked room; lawyers only need an unlocked room.

The activity check is recomputed from the clock on every call and never stored.

Room request lifecycle (`transition`)::

    pending  --accept-->  accepted (unlocked)
    pending  --decline--> declined (locked)
    accepted --decline--> declined
    declined --accept-->  accepted
    accepted --complete-> completed (locked, terminal)
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from legal_eagle.database.core.principal import Principal, SharedUser
from legal_eagle.database.daos.appointment_dao import AppointmentDao
from legal_eagle.database.entities.appointment import Appointment
from legal_eagle.database.entities.chat_room import ChatRoom, ChatStatus
from legal_eagle.database.entities.chat_message import SenderRole
from legal_eagle.errors import (
    AppointmentEndedError,
    AppointmentRequiredError,
    AuthorizationError,
    ChatLockedError,
    ValidationError,
)

SIDE_ADMIN = "admin"

ACTIONS = {
    "accept": (ChatStatus.ACCEPTED.value, True),
    "decline": (ChatStatus.DECLINED.value, False),
    "complete": (ChatStatus.COMPLETED.value, False),
}
"""Lawyer action -> (resulting status, resulting unlock flag)."""

ALLOWED_FROM = {
    "accept": {ChatStatus.PENDING.value, ChatStatus.DECLINED.value, ChatStatus.ACCEPTED.value},
    "decline": {ChatStatus.PENDING.value, ChatStatus.ACCEPTED.value, ChatStatus.DECLINED.value},
    "complete": {ChatStatus.ACCEPTED.value},
}


@dataclass(frozen=True)
class ChatAccess:
    """Snapshot of what a member may do in a room right now."""

    side: str
    has_qualifying_appointment: bool
    appointment_active: bool
    unlocked: bool

    @property
    def is_client(self) -> bool:
        return self.side == SenderRole.USER.value

    @property
    def can_send(self) -> bool:
        if not self.unlocked:
            return False
        if self.is_client:
            return self.has_qualifying_appointment and self.appointment_active
        return True


def resolve_side(principal: Principal, room: ChatRoom) -> str:
    """
    Return which side of the room `principal` is on: `user`, `lawyer` or `admin`.

    Raises
    ------
    AuthorizationError
        If the principal is not a member of the room.
    """
    if isinstance(principal, SharedUser) and principal.user_id == room.user_id:
        return SenderRole.USER.value
    if principal.acting_lawyer_id is not None and principal.acting_lawyer_id == room.lawyer_id:
        return SenderRole.LAWYER.value
    if principal.is_admin:
        return SIDE_ADMIN
    raise AuthorizationError("Not authorized to access this chat")


def qualifying_appointments(session: Session, room: ChatRoom) -> List[Appointment]:
    return AppointmentDao().fetchQualifyingAppointments(session, room.user_id, room.lawyer_id)


def evaluate_access(session: Session, principal: Principal, room: ChatRoom, now: Optional[datetime] = None) -> ChatAccess:
    """Membership check plus a fresh evaluation of the appointment state of the pair."""
    side = resolve_side(principal, room)
    appointments = qualifying_appointments(session, room)
    return ChatAccess(
        side=side,
        has_qualifying_appointment=bool(appointments),
        appointment_active=any(a.is_active(now) for a in appointments),
        unlocked=room.is_chat_unlocked,
    )


def require_history_access(access: ChatAccess) -> None:
    if access.is_client and not access.has_qualifying_appointment:
        raise AppointmentRequiredError("You must have a paid appointment with this lawyer to access this chat")


def require_send_access(access: ChatAccess) -> None:
    """
    Raises
    ------
    AppointmentRequiredError
        Client without any qualifying appointment.
    AppointmentEndedError
        Client whose qualifying appointments have all ended (history stays readable).
    ChatLockedError
        Room not unlocked.
    """
    if access.is_client:
        if not access.has_qualifying_appointment:
            raise AppointmentRequiredError("You must have a paid appointment with this lawyer to send messages")
        if not access.appointment_active:
            raise AppointmentEndedError(
                "Your appointment has ended. You can view this chat but cannot send new messages."
            )
    if not access.unlocked:
        raise ChatLockedError("This chat is locked until the lawyer accepts the request")


def require_lawyer_side(access: ChatAccess) -> None:
    if access.side != SenderRole.LAWYER.value:
        raise AuthorizationError("Only the lawyer of this chat can respond to the request")


def require_unlock_permission(access: ChatAccess) -> None:
    if access.side not in (SenderRole.LAWYER.value, SIDE_ADMIN):
        raise AuthorizationError("Only the lawyer of this chat or an admin can unlock it")


def transition(status: str, action: str) -> Tuple[str, bool]:
    """
    Apply a lawyer decision to a room status.

    Returns
    -------
    tuple[str, bool]
        The new status and unlock flag.

    Raises
    ------
    ValidationError
        Unknown action, or an action not allowed from `status`.
    """
    if action not in ACTIONS:
        raise ValidationError(f"Unknown chat request action '{action}'")
    if status not in ALLOWED_FROM[action]:
        raise ValidationError(f"Cannot {action} a chat that is {status}")
    return ACTIONS[action]

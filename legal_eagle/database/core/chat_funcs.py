"""
Chat rooms and message log.

Every operation resolves the caller's side of the room through the access gate
(`access_gate.evaluate_access`) before touching the log, so the REST routes and
the WebSocket handler share the same rules.

Functions that change a room return, next to the payload, the registry keys of
the parties to notify (``recipients``); delivery is the caller's job.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from legal_eagle.database.core.access_gate import (
    SIDE_ADMIN,
    evaluate_access,
    qualifying_appointments,
    require_history_access,
    require_lawyer_side,
    require_send_access,
    require_unlock_permission,
    transition,
)
from legal_eagle.database.core.principal import (
    DirectProfessional,
    Principal,
    SharedUser,
    principal_key,
)
from legal_eagle.database.core.serializers import chat_room_to_dict, message_to_dict
from legal_eagle.database.daos.chat_message_dao import ChatMessageDao
from legal_eagle.database.daos.chat_room_dao import ChatRoomDao
from legal_eagle.database.daos.lawyer_dao import LawyerDao
from legal_eagle.database.daos.user_dao import UserDao
from legal_eagle.database.entities.chat_message import ChatMessage, SenderRole
from legal_eagle.database.entities.chat_room import ChatRoom, PaymentStatus
from legal_eagle.database.entities.lawyer import Lawyer
from legal_eagle.database.entities.user import UserRole
from legal_eagle.database.helpers.time_utils import utc_now
from legal_eagle.database.helpers.transactionManagement import transactional
from legal_eagle.errors import (
    AppointmentRequiredError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 5000


def _require_room(session: Session, chat_id: UUID) -> ChatRoom:
    room = ChatRoomDao().fetchChatRoomById(session, chat_id)
    if room is None:
        raise NotFoundError("Chat not found")
    return room


def _lawyer_key(lawyer: Lawyer) -> str:
    if lawyer.user_id is not None:
        return principal_key(SharedUser.kind, lawyer.user_id)
    return principal_key(DirectProfessional.kind, lawyer.id)


def _party_keys(session: Session, room: ChatRoom) -> dict:
    """Registry keys of the two members of `room`, by side."""
    lawyer = LawyerDao().fetchLawyerById(session, room.lawyer_id)
    return {
        SenderRole.USER.value: principal_key(SharedUser.kind, room.user_id),
        SenderRole.LAWYER.value: _lawyer_key(lawyer) if lawyer is not None else None,
    }


def _append(session: Session, room: ChatRoom, sender: str, text: str) -> ChatMessage:
    position = ChatRoomDao().reserveMessagePosition(session, room, utc_now())
    return ChatMessageDao().createMessage(
        session, ChatMessage(chat_room_id=room.id, position=position, sender=sender, text=text)
    )


@transactional
def create_chat_room(
    session: Session,
    principal: Principal,
    lawyer_id: UUID,
    force_creation: bool = False,
    user_id: Optional[UUID] = None,
) -> dict:
    """
    Open (or return) the chat room of a client with a lawyer.

    Parameters
    ----------
    principal : Principal
        A client, or an admin acting for `user_id`.
    lawyer_id : UUID
    force_creation : bool
        Skip the qualifying-appointment check. The room is still created
        locked and pending, so no message can be sent before the lawyer accepts.
    user_id : UUID, optional
        Client to open the room for; only honoured for admins.

    Returns
    -------
    dict
        {'chat', 'created', 'recipients'}; `recipients` holds the lawyer's
        registry key when the room was just created.

    Raises
    ------
    AuthorizationError
        If the caller is neither a client nor an admin.
    NotFoundError
        If the client or the lawyer does not exist.
    AppointmentRequiredError
        If there is no qualifying appointment and `force_creation` is not set.
    """
    if principal.is_admin and user_id is not None:
        client_id = user_id
    elif isinstance(principal, SharedUser) and principal.role == UserRole.USER.value:
        client_id = principal.user_id
    else:
        raise AuthorizationError("Only clients can open a chat with a lawyer")

    # Serializes racing requests for one client, so the pair lookup below sees a room created by another.
    if not UserDao().lockUser(session, client_id):
        raise NotFoundError("User not found")
    lawyer = LawyerDao().fetchLawyerById(session, lawyer_id)
    if lawyer is None:
        raise NotFoundError("Lawyer not found")

    room_dao = ChatRoomDao()
    room = room_dao.fetchChatRoomByPair(session, client_id, lawyer.id)
    candidate = room or ChatRoom(user_id=client_id, lawyer_id=lawyer.id, payment_status=PaymentStatus.UNPAID.value)
    appointments = qualifying_appointments(session, candidate)
    if not appointments and not force_creation:
        raise AppointmentRequiredError("You must book and pay for an appointment before starting a chat")

    if room is not None:
        return {"chat": chat_room_to_dict(room), "created": False, "recipients": []}

    candidate.payment_status = PaymentStatus.PAID.value if appointments else PaymentStatus.UNPAID.value
    candidate.appointment_id = appointments[0].id if appointments else None
    room = room_dao.createChatRoom(session, candidate)
    message = _append(session, room, SenderRole.SYSTEM.value, "Chat request created")
    logger.info(f"Chat {room.id} created for user {client_id} and lawyer {lawyer.id} ({room.payment_status})")
    return {
        "chat": chat_room_to_dict(room, messages=[message]),
        "created": True,
        "recipients": [_lawyer_key(lawyer)],
    }


@transactional
def get_chat_history(session: Session, principal: Principal, chat_id: UUID) -> dict:
    """
    Return the room with its full message log, oldest first.

    Clients need a qualifying appointment but not an open window: after the
    appointment has ended the history stays readable.
    """
    room = _require_room(session, chat_id)
    access = evaluate_access(session, principal, room)
    require_history_access(access)
    messages = ChatMessageDao().fetchMessagesByChatRoomId(session, room.id)
    data = chat_room_to_dict(room, messages=messages)
    data["canSend"] = access.can_send
    return data


@transactional
def get_chat_status(session: Session, principal: Principal, chat_id: UUID) -> dict:
    room = _require_room(session, chat_id)
    access = evaluate_access(session, principal, room)
    return {
        "chatId": str(room.id),
        "status": room.status,
        "isChatUnlocked": room.is_chat_unlocked,
        "paymentStatus": room.payment_status,
        "hasQualifyingAppointment": access.has_qualifying_appointment,
        "appointmentActive": access.appointment_active,
        "canSend": access.can_send,
    }


@transactional
def send_message(session: Session, principal: Principal, chat_id: UUID, text: str) -> dict:
    """
    Append a message to a room's log.

    Returns
    -------
    dict
        {'message', 'chatId', 'recipients'}; `recipients` are the registry
        keys of the other members.

    Raises
    ------
    ValidationError
        Invalid text (not a non-empty string, or over `MAX_MESSAGE_LENGTH`).
    AuthorizationError
        Caller is not a member of the room.
    AppointmentRequiredError, AppointmentEndedError, ChatLockedError
        See `access_gate.require_send_access`.
    """
    if text is not None and not isinstance(text, str):
        raise ValidationError("Message text must be a string")
    text = (text or "").strip()
    if not text:
        raise ValidationError("Message text is required")
    if len(text) > MAX_MESSAGE_LENGTH:
        raise ValidationError(f"Message text exceeds {MAX_MESSAGE_LENGTH} characters")

    room = _require_room(session, chat_id)
    access = evaluate_access(session, principal, room)
    if access.side != SIDE_ADMIN:
        require_send_access(access)

    message = _append(session, room, principal.sender_role, text)
    parties = _party_keys(session, room)
    recipients = [key for side, key in parties.items() if key and side != access.side]
    return {"message": message_to_dict(message), "chatId": str(room.id), "recipients": recipients}


@transactional
def mark_as_read(session: Session, principal: Principal, chat_id: UUID) -> dict:
    """
    Flip to read every message of the room not authored by the caller's side and
    touch the room's last activity. Membership is the only requirement.
    """
    room = _require_room(session, chat_id)
    access = evaluate_access(session, principal, room)
    if access.side == SIDE_ADMIN:
        return {"chatId": str(room.id), "updated": 0, "reader": SIDE_ADMIN, "recipients": []}
    updated = ChatMessageDao().markMessagesRead(session, room.id, access.side)
    room.last_activity = utc_now()
    session.flush()
    parties = _party_keys(session, room)
    recipients = [key for side, key in parties.items() if key and side != access.side]
    return {"chatId": str(room.id), "updated": updated, "reader": access.side, "recipients": recipients}


@transactional
def decide_chat_request(session: Session, principal: Principal, chat_id: UUID, action: str) -> dict:
    """
    Lawyer's answer to a chat request: `accept`, `decline` or `complete`.

    The room is unlocked exactly when the resulting status is `accepted`. A
    system message recording the decision is appended to the log.
    """
    room = _require_room(session, chat_id)
    access = evaluate_access(session, principal, room)
    require_lawyer_side(access)

    status, unlocked = transition(room.status, action)
    room.status = status
    room.is_chat_unlocked = unlocked
    message = _append(session, room, SenderRole.SYSTEM.value, f"Chat request {status}")
    logger.info(f"Chat {room.id} {status} by lawyer {room.lawyer_id}")
    return {
        "chat": chat_room_to_dict(room),
        "message": message_to_dict(message),
        "recipients": [_party_keys(session, room)[SenderRole.USER.value]],
    }


@transactional
def unlock_chat(session: Session, principal: Principal, chat_id: UUID) -> dict:
    room = _require_room(session, chat_id)
    access = evaluate_access(session, principal, room)
    require_unlock_permission(access)
    room.is_chat_unlocked = True
    session.flush()
    logger.info(f"Chat {room.id} unlocked by {principal.key}")
    recipients = [key for key in _party_keys(session, room).values() if key and key != principal.key]
    return {"chat": chat_room_to_dict(room), "recipients": recipients}


def _with_unread(session: Session, rooms: List[ChatRoom], reader: str) -> List[dict]:
    message_dao = ChatMessageDao()
    return [chat_room_to_dict(room, unread=message_dao.countUnread(session, room.id, reader)) for room in rooms]


@transactional
def list_user_chats(session: Session, principal: Principal, user_id: UUID) -> List[dict]:
    if not principal.is_admin and not (isinstance(principal, SharedUser) and principal.user_id == user_id):
        raise AuthorizationError("Not authorized to view these chats")
    rooms = ChatRoomDao().fetchChatRoomsByUserId(session, user_id)
    return _with_unread(session, rooms, SenderRole.USER.value)


@transactional
def list_lawyer_chats(session: Session, principal: Principal, lawyer_id: UUID) -> List[dict]:
    if not principal.is_admin and principal.acting_lawyer_id != lawyer_id:
        raise AuthorizationError("Not authorized to view these chats")
    rooms = ChatRoomDao().fetchChatRoomsByLawyerId(session, lawyer_id)
    return _with_unread(session, rooms, SenderRole.LAWYER.value)


@transactional
def list_room_ids(session: Session, principal: Principal) -> List[str]:
    """Ids of every room the principal is a member of (client side and lawyer side)."""
    room_dao = ChatRoomDao()
    rooms: List[ChatRoom] = []
    if isinstance(principal, SharedUser) and principal.role == UserRole.USER.value:
        rooms.extend(room_dao.fetchChatRoomsByUserId(session, principal.user_id))
    if principal.acting_lawyer_id is not None:
        rooms.extend(room_dao.fetchChatRoomsByLawyerId(session, principal.acting_lawyer_id))
    return [str(room.id) for room in rooms]


@transactional
def check_membership(session: Session, principal: Principal, chat_id: UUID) -> str:
    """Return the caller's side of the room, raising if it is not a member."""
    room = _require_room(session, chat_id)
    return evaluate_access(session, principal, room).side

"""
Entity -> JSON-ready dict conversion.

Outputs only JSON-native values (str ids, ISO timestamps, float amounts) so the
same dicts can be returned by FastAPI routes and sent over WebSockets.
"""

from decimal import Decimal
from typing import Iterable, Optional

from legal_eagle.database.entities import Appointment, ChatMessage, ChatRoom, Lawyer, Transaction, User
from legal_eagle.database.helpers.time_utils import as_utc


def _amount(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def _iso(value):
    return as_utc(value).isoformat() if value is not None else None


def _id(value):
    return str(value) if value is not None else None


def user_to_dict(user: User) -> dict:
    return {
        "id": _id(user.id),
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "walletBalance": _amount(user.wallet_balance),
    }


def lawyer_to_dict(lawyer: Lawyer) -> dict:
    return {
        "id": _id(lawyer.id),
        "userId": _id(lawyer.user_id),
        "name": lawyer.name,
        "email": lawyer.email,
        "specialization": lawyer.specialization,
        "experience": lawyer.experience,
        "pricePerSession": _amount(lawyer.price_per_session),
        "bio": lawyer.bio,
        "availability": list(lawyer.availability or []),
        "rating": {"average": lawyer.rating_average, "count": lawyer.rating_count},
        "isDirect": lawyer.is_direct,
    }


def appointment_to_dict(appointment: Appointment) -> dict:
    return {
        "id": _id(appointment.id),
        "userId": _id(appointment.user_id),
        "lawyerId": _id(appointment.lawyer_id),
        "date": appointment.slot_date.isoformat(),
        "time": appointment.slot_time.strftime("%H:%M"),
        "startsAt": _iso(appointment.starts_at),
        "endsAt": _iso(appointment.ends_at),
        "duration": appointment.duration,
        "amount": _amount(appointment.amount),
        "isPaid": appointment.is_paid,
        "status": appointment.status,
        "notes": appointment.notes,
        "createdAt": _iso(appointment.date_created_on),
    }


def transaction_to_dict(transaction: Transaction) -> dict:
    return {
        "id": _id(transaction.id),
        "userId": _id(transaction.user_id),
        "recipientId": _id(transaction.recipient_id),
        "type": transaction.type,
        "amount": _amount(transaction.amount),
        "status": transaction.status,
        "description": transaction.description,
        "balanceAfter": _amount(transaction.balance_after),
        "appointmentId": _id(transaction.appointment_id),
        "createdAt": _iso(transaction.date_created_on),
    }


def message_to_dict(message: ChatMessage) -> dict:
    return {
        "id": _id(message.id),
        "chatId": _id(message.chat_room_id),
        "position": message.position,
        "sender": message.sender,
        "text": message.text,
        "read": message.is_read,
        "timestamp": _iso(message.timestamp),
    }


def chat_room_to_dict(
    room: ChatRoom,
    messages: Optional[Iterable[ChatMessage]] = None,
    unread: Optional[int] = None,
) -> dict:
    data = {
        "id": _id(room.id),
        "userId": _id(room.user_id),
        "lawyerId": _id(room.lawyer_id),
        "isChatUnlocked": room.is_chat_unlocked,
        "status": room.status,
        "paymentStatus": room.payment_status,
        "appointmentId": _id(room.appointment_id),
        "lastActivity": _iso(room.last_activity),
        "createdAt": _iso(room.date_created_on),
    }
    if messages is not None:
        data["messages"] = [message_to_dict(message) for message in messages]
    if unread is not None:
        data["unreadCount"] = unread
    return data

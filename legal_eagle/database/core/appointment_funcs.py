"""
Appointment ledger.

Booking and status changes touch several rows (appointment, wallet balance,
ledger entry). Each operation below is a single `@transactional` call, so the
rows are committed together or not at all: a failed debit or ledger insert
rolls the new appointment back instead of leaving a charged-for but
unrecorded slot.
"""

import logging
from datetime import date, time
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from legal_eagle.database.config.config import settings
from legal_eagle.database.core.principal import Principal, SharedUser
from legal_eagle.database.core.serializers import appointment_to_dict
from legal_eagle.database.daos.appointment_dao import AppointmentDao
from legal_eagle.database.daos.lawyer_dao import LawyerDao
from legal_eagle.database.daos.transaction_dao import TransactionDao
from legal_eagle.database.daos.user_dao import UserDao
from legal_eagle.database.entities.appointment import Appointment, AppointmentStatus
from legal_eagle.database.entities.transaction import Transaction, TransactionStatus, TransactionType
from legal_eagle.database.entities.user import UserRole
from legal_eagle.database.helpers.time_utils import local_slot_to_utc
from legal_eagle.database.helpers.transactionManagement import transactional
from legal_eagle.errors import AuthorizationError, InsufficientFundsError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _require_appointment(session: Session, appointment_id: UUID) -> Appointment:
    appointment = AppointmentDao().fetchAppointmentById(session, appointment_id)
    if appointment is None:
        raise NotFoundError("Appointment not found")
    return appointment


def _is_client(principal: Principal, appointment: Appointment) -> bool:
    return isinstance(principal, SharedUser) and principal.user_id == appointment.user_id


def _is_lawyer(principal: Principal, appointment: Appointment) -> bool:
    return principal.acting_lawyer_id is not None and principal.acting_lawyer_id == appointment.lawyer_id


def _require_party(principal: Principal, appointment: Appointment) -> None:
    if not (principal.is_admin or _is_client(principal, appointment) or _is_lawyer(principal, appointment)):
        raise AuthorizationError("Not authorized to access this appointment")


@transactional
def book_appointment(
    session: Session,
    principal: Principal,
    lawyer_id: UUID,
    slot_date: date,
    slot_time: time,
    notes: Optional[str] = None,
    duration: Optional[int] = None,
) -> Tuple[dict, bool]:
    """
    Book and pay a consultation slot.

    Parameters
    ----------
    principal : Principal
        The booking client (a `user`-role account).
    lawyer_id : UUID
        The professional.
    slot_date, slot_time : date, time
        Wall-clock slot in the configured appointment timezone.
    notes : str, optional
    duration : int, optional
        Minutes; defaults to `DEFAULT_APPOINTMENT_DURATION`.

    Returns
    -------
    tuple[dict, bool]
        The appointment and whether it was created by this call. When a
        qualifying appointment already exists for the same client, lawyer and
        date, that appointment is returned with `False` and nothing is charged.

    Raises
    ------
    AuthorizationError
        If the caller is not a client account.
    NotFoundError
        If the client or the lawyer does not exist.
    InsufficientFundsError
        If the wallet balance is below the lawyer's price per session.
    """
    if not isinstance(principal, SharedUser) or principal.role != UserRole.USER.value:
        raise AuthorizationError("Only clients can book appointments")

    user_dao = UserDao()
    # Held until commit: concurrent bookings of one client run the replay check one at a time.
    if not user_dao.lockUser(session, principal.user_id):
        raise NotFoundError("User not found")
    user = user_dao.fetchUserById(session, principal.user_id)
    lawyer = LawyerDao().fetchLawyerById(session, lawyer_id)
    if lawyer is None:
        raise NotFoundError("Lawyer not found")

    appointment_dao = AppointmentDao()
    existing = appointment_dao.fetchQualifyingAppointments(session, user.id, lawyer.id, slot_date=slot_date)
    if existing:
        logger.info(f"Booking replay for user {user.id}, lawyer {lawyer.id} on {slot_date}")
        return appointment_to_dict(existing[0]), False

    price = lawyer.price_per_session
    new_balance = user_dao.debitWallet(session, user.id, price)
    if new_balance is None:
        raise InsufficientFundsError("Insufficient wallet balance")

    appointment = appointment_dao.createAppointment(
        session,
        Appointment(
            user_id=user.id,
            lawyer_id=lawyer.id,
            slot_date=slot_date,
            slot_time=slot_time,
            starts_at=local_slot_to_utc(slot_date, slot_time, settings.APPOINTMENT_TIMEZONE),
            amount=price,
            duration=duration or settings.DEFAULT_APPOINTMENT_DURATION,
            notes=notes,
            is_paid=True,
            status=AppointmentStatus.CONFIRMED.value,
        ),
    )
    TransactionDao().createTransaction(
        session,
        Transaction(
            user_id=user.id,
            recipient_id=lawyer.id,
            type=TransactionType.PAYMENT.value,
            amount=price,
            status=TransactionStatus.COMPLETED.value,
            description=f"Consultation with {lawyer.name} on {slot_date.isoformat()} {slot_time.strftime('%H:%M')}",
            appointment_id=appointment.id,
            balance_after=new_balance,
        ),
    )
    logger.info(f"Booked appointment {appointment.id} for user {user.id} with lawyer {lawyer.id} ({price})")
    return appointment_to_dict(appointment), True


@transactional
def update_appointment(
    session: Session,
    principal: Principal,
    appointment_id: UUID,
    status: Optional[str] = None,
    notes: Optional[str] = None,
) -> dict:
    """
    Change the status and/or notes of an appointment.

    Cancelling a paid appointment credits `amount` back to the client's wallet
    and appends a `refund` ledger entry. `cancelled` is terminal. Clients may
    only cancel; the lawyer and admins may set any status.
    """
    appointment = _require_appointment(session, appointment_id)
    _require_party(principal, appointment)

    if status is not None and status != appointment.status:
        if status not in {s.value for s in AppointmentStatus}:
            raise ValidationError(f"Unknown appointment status '{status}'")
        if appointment.status == AppointmentStatus.CANCELLED.value:
            raise ValidationError("Cancelled appointments cannot be changed")
        if (
            _is_client(principal, appointment)
            and not principal.is_admin
            and status != AppointmentStatus.CANCELLED.value
        ):
            raise AuthorizationError("Clients can only cancel appointments")

        appointment.status = status
        if status == AppointmentStatus.CANCELLED.value and appointment.is_paid:
            _refund(session, appointment)

    if notes is not None:
        appointment.notes = notes

    session.flush()
    return appointment_to_dict(appointment)


def _refund(session: Session, appointment: Appointment) -> None:
    new_balance = UserDao().creditWallet(session, appointment.user_id, appointment.amount)
    TransactionDao().createTransaction(
        session,
        Transaction(
            user_id=appointment.user_id,
            recipient_id=appointment.lawyer_id,
            type=TransactionType.REFUND.value,
            amount=appointment.amount,
            status=TransactionStatus.COMPLETED.value,
            description=f"Refund for cancelled appointment on {appointment.slot_date.isoformat()}",
            appointment_id=appointment.id,
            balance_after=new_balance,
        ),
    )
    logger.info(f"Refunded {appointment.amount} to user {appointment.user_id} for appointment {appointment.id}")


@transactional
def get_appointment(session: Session, principal: Principal, appointment_id: UUID) -> dict:
    appointment = _require_appointment(session, appointment_id)
    _require_party(principal, appointment)
    return appointment_to_dict(appointment)


@transactional
def list_user_appointments(session: Session, principal: Principal, user_id: UUID) -> List[dict]:
    if not principal.is_admin and not (isinstance(principal, SharedUser) and principal.user_id == user_id):
        raise AuthorizationError("Not authorized to view these appointments")
    return [appointment_to_dict(a) for a in AppointmentDao().fetchAppointmentsByUserId(session, user_id)]


@transactional
def list_lawyer_appointments(session: Session, principal: Principal, lawyer_id: UUID) -> List[dict]:
    if not principal.is_admin and principal.acting_lawyer_id != lawyer_id:
        raise AuthorizationError("Not authorized to view these appointments")
    return [appointment_to_dict(a) for a in AppointmentDao().fetchAppointmentsByLawyerId(session, lawyer_id)]

"""
Appointment DAO

Purpose
-------
Data-access layer for the `Appointment` ORM entity:
- Create appointments
- Fetch by id, by client, by lawyer (newest slot first)
- Fetch the *qualifying* appointments of a (client, lawyer) pair, i.e. paid
  and confirmed/completed, optionally restricted to one calendar date

Design
------
- Requires an active SQLAlchemy `Session` supplied by the caller.
- The activity window is not evaluated here; callers use
  `Appointment.is_active(now)` on the returned rows so the check is always
  computed against the current clock.
"""

import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy import desc
from sqlalchemy.orm import Session

from legal_eagle.database.entities.appointment import Appointment, QUALIFYING_STATUSES

logger = logging.getLogger(__name__)


class AppointmentDao:
    """
    Data Access Object (DAO) for managing Appointment entities.
    """

    def createAppointment(self, session: Session, appointment: Appointment) -> Appointment:
        """
        Stage a new appointment and flush it so dependent rows can reference it.
        """
        try:
            session.add(appointment)
            session.flush()
            return appointment
        except Exception as e:
            logger.error(f"Error in AppointmentDao.createAppointment. Error Message: {e}")
            raise e

    def fetchAppointmentById(self, session: Session, appointment_id: UUID) -> Optional[Appointment]:
        try:
            return session.get(Appointment, appointment_id)
        except Exception as e:
            logger.error(f"Error in AppointmentDao.fetchAppointmentById. Error Message: {e}")
            raise e

    def fetchAppointmentsByUserId(self, session: Session, user_id: UUID) -> List[Appointment]:
        try:
            return (
                session.query(Appointment)
                .filter(Appointment.user_id == user_id)
                .order_by(desc(Appointment.starts_at))
                .all()
            )
        except Exception as e:
            logger.error(f"Error in AppointmentDao.fetchAppointmentsByUserId. Error Message: {e}")
            raise e

    def fetchAppointmentsByLawyerId(self, session: Session, lawyer_id: UUID) -> List[Appointment]:
        try:
            return (
                session.query(Appointment)
                .filter(Appointment.lawyer_id == lawyer_id)
                .order_by(desc(Appointment.starts_at))
                .all()
            )
        except Exception as e:
            logger.error(f"Error in AppointmentDao.fetchAppointmentsByLawyerId. Error Message: {e}")
            raise e

    def fetchQualifyingAppointments(
        self,
        session: Session,
        user_id: UUID,
        lawyer_id: UUID,
        slot_date: Optional[date] = None,
    ) -> List[Appointment]:
        """
        Fetch the paid, confirmed/completed appointments of a pair, most recent
        slot first.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        user_id : UUID
            The client.
        lawyer_id : UUID
            The professional.
        slot_date : date, optional
            Restrict to one calendar date (used by the booking idempotency guard).

        Returns
        -------
        list[Appointment]
        """
        try:
            query = session.query(Appointment).filter(
                Appointment.user_id == user_id,
                Appointment.lawyer_id == lawyer_id,
                Appointment.is_paid.is_(True),
                Appointment.status.in_(QUALIFYING_STATUSES),
            )
            if slot_date is not None:
                query = query.filter(Appointment.slot_date == slot_date)
            return query.order_by(desc(Appointment.starts_at)).all()
        except Exception as e:
            logger.error(f"Error in AppointmentDao.fetchQualifyingAppointments. Error Message: {e}")
            raise e

"""
Lawyer DAO

Data-access layer for the `Lawyer` ORM entity: create profiles (hashing the
password of direct lawyers), look them up by id, email or owning user, and list
them with an optional specialization filter.

The caller owns the session and the transaction boundary.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from legal_eagle.crypt.encrypt_decrypt import EncryptionDec
from legal_eagle.database.entities.lawyer import Lawyer

logger = logging.getLogger(__name__)


class LawyerDao:
    """
    Data Access Object (DAO) for managing Lawyer profiles.
    """

    def createLawyer(self, session: Session, lawyer: Lawyer) -> Lawyer:
        """
        Stage a new profile. A direct lawyer's plaintext password is hashed here.
        """
        try:
            if lawyer.password is not None:
                lawyer.password = EncryptionDec().hash_password(text=lawyer.password)
            session.add(lawyer)
            session.flush()
            return lawyer
        except Exception as e:
            logger.error(f"Error in LawyerDao.createLawyer. Error Message: {e}")
            raise e

    def fetchLawyerById(self, session: Session, lawyer_id: UUID) -> Optional[Lawyer]:
        try:
            return session.get(Lawyer, lawyer_id)
        except Exception as e:
            logger.error(f"Error in LawyerDao.fetchLawyerById. Error Message: {e}")
            raise e

    def fetchLawyerByEmail(self, session: Session, email: str) -> Optional[Lawyer]:
        try:
            return (
                session.query(Lawyer)
                .filter(Lawyer.email == email.strip().lower())
                .limit(1)
                .one_or_none()
            )
        except Exception as e:
            logger.error(f"Error in LawyerDao.fetchLawyerByEmail. Error Message: {e}")
            raise e

    def fetchLawyerByUserId(self, session: Session, user_id: UUID) -> Optional[Lawyer]:
        """
        Resolve the profile a shared-role user acts as, via the back-reference.
        """
        try:
            return session.query(Lawyer).filter(Lawyer.user_id == user_id).one_or_none()
        except Exception as e:
            logger.error(f"Error in LawyerDao.fetchLawyerByUserId. Error Message: {e}")
            raise e

    def fetchLawyers(self, session: Session, specialization: Optional[str] = None) -> List[Lawyer]:
        """
        List profiles ordered by name, optionally filtered by a case-insensitive
        substring of the specialization.
        """
        try:
            query = session.query(Lawyer)
            if specialization:
                pattern = f"%{specialization.strip().lower()}%"
                query = query.filter(func.lower(Lawyer.specialization).like(pattern))
            return query.order_by(Lawyer.name).all()
        except Exception as e:
            logger.error(f"Error in LawyerDao.fetchLawyers. Error Message: {e}")
            raise e

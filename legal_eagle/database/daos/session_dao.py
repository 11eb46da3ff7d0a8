"""
Session DAO

Persistence for issued session tokens (`AuthSession`). Token lookup is split by
owner kind so the identity layer can search the direct-lawyer sessions first
and the user sessions second.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from legal_eagle.database.entities.auth_session import AuthSession

logger = logging.getLogger(__name__)


class SessionDao:

    def createSession(self, session: Session, auth_session: AuthSession) -> AuthSession:
        try:
            session.add(auth_session)
            return auth_session
        except Exception as e:
            logger.error(f"Error in SessionDao.createSession. Error Message: {e}")
            raise e

    def fetchLawyerSession(self, session: Session, token: str, now: datetime) -> Optional[AuthSession]:
        """Unexpired session held by a direct lawyer for `token`."""
        try:
            return (
                session.query(AuthSession)
                .filter(
                    AuthSession.token == token,
                    AuthSession.lawyer_id.is_not(None),
                    AuthSession.expires_at > now,
                )
                .one_or_none()
            )
        except Exception as e:
            logger.error(f"Error in SessionDao.fetchLawyerSession. Error Message: {e}")
            raise e

    def fetchUserSession(self, session: Session, token: str, now: datetime) -> Optional[AuthSession]:
        """Unexpired session held by a user for `token`."""
        try:
            return (
                session.query(AuthSession)
                .filter(
                    AuthSession.token == token,
                    AuthSession.user_id.is_not(None),
                    AuthSession.expires_at > now,
                )
                .one_or_none()
            )
        except Exception as e:
            logger.error(f"Error in SessionDao.fetchUserSession. Error Message: {e}")
            raise e

    def deleteSession(
        self,
        session: Session,
        token: str,
        user_id: Optional[UUID] = None,
        lawyer_id: Optional[UUID] = None,
    ) -> int:
        """Remove the owner's session for `token`; returns the number of rows removed."""
        try:
            query = session.query(AuthSession).filter(AuthSession.token == token)
            if user_id is not None:
                query = query.filter(AuthSession.user_id == user_id)
            if lawyer_id is not None:
                query = query.filter(AuthSession.lawyer_id == lawyer_id)
            return query.delete(synchronize_session=False)
        except Exception as e:
            logger.error(f"Error in SessionDao.deleteSession. Error Message: {e}")
            raise e

    def deleteExpiredSessions(
        self,
        session: Session,
        now: datetime,
        user_id: Optional[UUID] = None,
        lawyer_id: Optional[UUID] = None,
    ) -> int:
        try:
            query = session.query(AuthSession).filter(AuthSession.expires_at <= now)
            if user_id is not None:
                query = query.filter(AuthSession.user_id == user_id)
            if lawyer_id is not None:
                query = query.filter(AuthSession.lawyer_id == lawyer_id)
            return query.delete(synchronize_session=False)
        except Exception as e:
            logger.error(f"Error in SessionDao.deleteExpiredSessions. Error Message: {e}")
            raise e

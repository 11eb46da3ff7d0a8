"""
User DAO

Purpose
-------
Thin data-access layer for the `User` ORM entity. Provides:
- Creation with password hashing
- Lookup by id or email
- A per-user row lock serializing check-then-insert service calls
- Wallet balance debit/credit as single conditional UPDATE statements

Design
------
- The DAO expects an active SQLAlchemy `Session` supplied by the caller
  (normally injected by `@transactional`); it never commits.
- Wallet mutations run as one UPDATE so the balance check and the write are
  atomic at the row level: `debitWallet` only matches rows whose balance covers
  the amount, which prevents two concurrent bookings from overdrawing a wallet.

Error Handling
--------------
- Each method logs unexpected errors with its name and re-raises them.
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import NoResultFound
from sqlalchemy.orm import Session

from legal_eagle.crypt.encrypt_decrypt import EncryptionDec
from legal_eagle.database.entities.user import User

logger = logging.getLogger(__name__)


class UserDao:
    """
    Data Access Object (DAO) for managing User entities.
    """

    def createUser(self, session: Session, user_data: User) -> User:
        """
        Add a new user, hashing its plaintext password first.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        user_data : User
            User entity whose `password` still holds the plaintext value.

        Returns
        -------
        User
            The staged entity (flushed, so unique constraints are checked).
        """
        try:
            enc = EncryptionDec()
            user_data.password = enc.hash_password(text=user_data.password)
            session.add(user_data)
            session.flush()
            return user_data
        except Exception as e:
            logger.error(f"Error in UserDao.createUser. Error Message: {e}")
            raise e

    def fetchUserById(self, session: Session, user_id: UUID) -> Optional[User]:
        try:
            return session.get(User, user_id)
        except Exception as e:
            logger.error(f"Error in UserDao.fetchUserById. Error Message: {e}")
            raise e

    def fetchUserByEmail(self, session: Session, email: str) -> Optional[User]:
        """
        Fetch a user by email (case-insensitive, emails are stored lower-case).
        """
        try:
            return (
                session.query(User)
                .filter(User.email == email.strip().lower())
                .limit(1)
                .one_or_none()
            )
        except Exception as e:
            logger.error(f"Error in UserDao.fetchUserByEmail. Error Message: {e}")
            raise e

    def fetchBalance(self, session: Session, user_id: UUID) -> Optional[Decimal]:
        try:
            return session.query(User.wallet_balance).filter(User.id == user_id).scalar()
        except Exception as e:
            logger.error(f"Error in UserDao.fetchBalance. Error Message: {e}")
            raise e

    def lockUser(self, session: Session, user_id: UUID) -> bool:
        """
        Take the write lock on a user's row for the rest of the transaction.

        Issued as a no-op UPDATE rather than `SELECT ... FOR UPDATE`, which
        SQLite ignores. Reads made after this call see every transaction that
        held the lock before it.

        Returns
        -------
        bool
            False if the user does not exist.
        """
        try:
            updated = (
                session.query(User)
                .filter(User.id == user_id)
                .update({User.wallet_balance: User.wallet_balance}, synchronize_session=False)
            )
            return updated > 0
        except Exception as e:
            logger.error(f"Error in UserDao.lockUser. Error Message: {e}")
            raise e

    def debitWallet(self, session: Session, user_id: UUID, amount: Decimal) -> Optional[Decimal]:
        """
        Subtract `amount` from the wallet if, and only if, the balance covers it.

        Returns
        -------
        Decimal | None
            The new balance, or None when the balance was insufficient
            (no row was updated).
        """
        try:
            updated = (
                session.query(User)
                .filter(User.id == user_id, User.wallet_balance >= amount)
                .update({User.wallet_balance: User.wallet_balance - amount}, synchronize_session=False)
            )
            if updated == 0:
                return None
            return self.fetchBalance(session, user_id)
        except Exception as e:
            logger.error(f"Error in UserDao.debitWallet. Error Message: {e}")
            raise e

    def creditWallet(self, session: Session, user_id: UUID, amount: Decimal) -> Decimal:
        """
        Add `amount` to the wallet and return the new balance.

        Raises
        ------
        NoResultFound
            If the user does not exist.
        """
        try:
            updated = (
                session.query(User)
                .filter(User.id == user_id)
                .update({User.wallet_balance: User.wallet_balance + amount}, synchronize_session=False)
            )
            if updated == 0:
                raise NoResultFound(f"No user with id {user_id}")
            return self.fetchBalance(session, user_id)
        except Exception as e:
            logger.error(f"Error in UserDao.creditWallet. Error Message: {e}")
            raise e

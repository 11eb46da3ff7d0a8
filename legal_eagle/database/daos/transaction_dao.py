"""
Transaction DAO

Append/read access to the wallet ledger. There is intentionally no update or
delete method: ledger rows are immutable once written.
"""

import logging
from typing import List, Tuple
from uuid import UUID

from sqlalchemy import desc
from sqlalchemy.orm import Session

from legal_eagle.database.entities.transaction import Transaction

logger = logging.getLogger(__name__)


class TransactionDao:

    def createTransaction(self, session: Session, transaction: Transaction) -> Transaction:
        try:
            session.add(transaction)
            return transaction
        except Exception as e:
            logger.error(f"Error in TransactionDao.createTransaction. Error Message: {e}")
            raise e

    def fetchTransactionsByUserId(
        self, session: Session, user_id: UUID, page: int, page_size: int
    ) -> Tuple[List[Transaction], int]:
        """
        One page of a user's ledger, newest first.

        Returns
        -------
        tuple[list[Transaction], int]
            The page items and the total number of rows for the user.
        """
        try:
            query = session.query(Transaction).filter(Transaction.user_id == user_id)
            total = query.count()
            items = (
                query.order_by(desc(Transaction.date_created_on))
                .offset((page - 1) * page_size)
                .limit(page_size)
                .all()
            )
            return items, total
        except Exception as e:
            logger.error(f"Error in TransactionDao.fetchTransactionsByUserId. Error Message: {e}")
            raise e

    def fetchTransactionsByAppointmentId(self, session: Session, appointment_id: UUID) -> List[Transaction]:
        try:
            return (
                session.query(Transaction)
                .filter(Transaction.appointment_id == appointment_id)
                .order_by(Transaction.date_created_on)
                .all()
            )
        except Exception as e:
            logger.error(f"Error in TransactionDao.fetchTransactionsByAppointmentId. Error Message: {e}")
            raise e

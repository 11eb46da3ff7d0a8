"""
Wallet / transaction ledger operations.

The wallet balance is the single mutable aggregate; every change made here is
paired with an immutable `Transaction` row inside the same transaction.
"""

import logging
import math
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from legal_eagle.database.config.config import settings
from legal_eagle.database.core.principal import Principal, SharedUser
from legal_eagle.database.core.serializers import transaction_to_dict
from legal_eagle.database.daos.transaction_dao import TransactionDao
from legal_eagle.database.daos.user_dao import UserDao
from legal_eagle.database.entities.transaction import Transaction, TransactionStatus, TransactionType
from legal_eagle.database.helpers.transactionManagement import transactional
from legal_eagle.errors import AuthorizationError, InvalidAmountError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def parse_amount(raw: Any) -> Decimal:
    """
    Coerce a request amount to a positive, finite Decimal with at most 2 decimals.

    Raises
    ------
    InvalidAmountError
        For non-numeric, non-finite, non-positive or over-precise values.
    """
    if isinstance(raw, bool) or raw is None:
        raise InvalidAmountError("Amount must be a positive number")
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmountError("Amount must be a positive number") from None
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmountError("Amount must be a positive number")
    try:
        exact = amount == amount.quantize(Decimal("0.01"))
    except InvalidOperation:
        raise InvalidAmountError("Amount is too large") from None
    if not exact:
        raise InvalidAmountError("Amount cannot have more than two decimal places")
    return amount


def _resolve_wallet_owner(principal: Principal, user_id: Optional[UUID]) -> UUID:
    if not isinstance(principal, SharedUser):
        raise AuthorizationError("Only user accounts hold a wallet")
    target = user_id or principal.user_id
    if target != principal.user_id and not principal.is_admin:
        raise AuthorizationError("Not authorized to access this wallet")
    return target


@transactional
def deposit(session: Session, principal: Principal, amount: Any, user_id: Optional[UUID] = None) -> dict:
    """
    Credit a wallet and append a `deposit` ledger entry.

    Returns
    -------
    dict
        {'balance': float, 'transaction': dict}
    """
    value = parse_amount(amount)
    owner_id = _resolve_wallet_owner(principal, user_id)
    user_dao = UserDao()
    if user_dao.fetchUserById(session, owner_id) is None:
        raise NotFoundError("User not found")

    new_balance = user_dao.creditWallet(session, owner_id, value)
    transaction = TransactionDao().createTransaction(
        session,
        Transaction(
            user_id=owner_id,
            type=TransactionType.DEPOSIT.value,
            amount=value,
            status=TransactionStatus.COMPLETED.value,
            description="Wallet deposit",
            balance_after=new_balance,
        ),
    )
    logger.info(f"Deposited {value} into wallet of user {owner_id}")
    return {"balance": float(new_balance), "transaction": transaction_to_dict(transaction)}


@transactional
def get_balance(session: Session, principal: Principal, user_id: UUID) -> dict:
    owner_id = _resolve_wallet_owner(principal, user_id)
    balance = UserDao().fetchBalance(session, owner_id)
    if balance is None:
        raise NotFoundError("User not found")
    return {"userId": str(owner_id), "balance": float(balance)}


@transactional
def list_transactions(
    session: Session,
    principal: Principal,
    user_id: UUID,
    page: int = 1,
    page_size: Optional[int] = None,
) -> dict:
    """
    Reverse-chronological, paginated ledger of one wallet.

    Returns
    -------
    dict
        {'transactions': [...], 'page': int, 'totalPages': int, 'total': int}
    """
    page_size = page_size or settings.TRANSACTIONS_PAGE_SIZE
    if page < 1 or page_size < 1:
        raise ValidationError("page and limit must be positive integers")
    owner_id = _resolve_wallet_owner(principal, user_id)
    if UserDao().fetchUserById(session, owner_id) is None:
        raise NotFoundError("User not found")

    items, total = TransactionDao().fetchTransactionsByUserId(session, owner_id, page, page_size)
    return {
        "transactions": [transaction_to_dict(t) for t in items],
        "page": page,
        "totalPages": math.ceil(total / page_size),
        "total": total,
    }

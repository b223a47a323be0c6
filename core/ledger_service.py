"""
Ledger Service: manual deposits and the derived balance

Responsibilities:
1. Record deposit requests (Pending)
2. Move them to Approved or Rejected, exactly once
3. Compute a player's balance

Balance is never stored. Every read recomputes
    sum(Approved transaction.amount) - sum(non-deleted board.price)
so it cannot drift away from the ledger. Callers that need it at high
frequency should cache at the edge, not here.
"""
from typing import List, Optional
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import Board, Player, Transaction, TransactionStatus
from core.clock import Clock
from core.locks import with_transaction_lock
from core.exceptions import (
    DuplicateExternalReference,
    InvalidArgument,
    PlayerNotFound,
    TransactionNotFound,
    TransactionNotPending,
)
from database import transactional

logger = logging.getLogger(__name__)


def compute_balance(db: Session, player_id: str) -> int:
    """
    Balance formula shared by LedgerService and WagerEngine

    Does not check that the player exists; callers do that first.
    """
    approved = db.query(func.coalesce(func.sum(Transaction.amount), 0)).filter(
        Transaction.player_id == player_id,
        Transaction.deleted_at.is_(None),
        Transaction.status == TransactionStatus.APPROVED
    ).scalar()

    spent = db.query(func.coalesce(func.sum(Board.price), 0)).filter(
        Board.player_id == player_id,
        Board.deleted_at.is_(None)
    ).scalar()

    return int(approved) - int(spent)


class LedgerService:
    """Deposit ledger with a Pending -> {Approved, Rejected} state machine"""

    def __init__(self, clock: Clock):
        self.clock = clock

    @transactional
    def submit_transaction(self, db: Session, player_id: str,
                           external_reference: str, amount: int) -> Transaction:
        """
        Record a deposit request

        Validation:
        1. amount is a positive integer
        2. external_reference is non-empty
        3. the player exists
        4. no non-deleted transaction already uses the reference
           (guards against client retries submitting twice)

        Returns:
            the new Transaction, status Pending

        Raises:
            InvalidArgument: bad amount or empty reference
            DuplicateExternalReference: reference already used
            PlayerNotFound: player missing or soft-deleted
        """
        # 1-2. input
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidArgument(f"Amount must be a positive integer, got {amount!r}")

        reference = (external_reference or "").strip()
        if not reference:
            raise InvalidArgument("External reference is required")

        # 3. player
        _get_live_player(db, player_id)

        # 4. duplicate guard
        duplicate = db.query(Transaction.id).filter(
            Transaction.external_reference == reference,
            Transaction.deleted_at.is_(None)
        ).first()
        if duplicate:
            raise DuplicateExternalReference(reference)

        transaction = Transaction(
            player_id=player_id,
            external_reference=reference,
            amount=amount,
            status=TransactionStatus.PENDING,
            created_at=self.clock.now(),
        )
        db.add(transaction)
        try:
            db.flush()
        except IntegrityError as e:
            # a concurrent submit with the same reference won the unique index
            raise DuplicateExternalReference(reference) from e

        logger.info(
            f"Transaction {transaction.id} submitted for player {player_id}: "
            f"{amount} (ref {reference})"
        )
        return transaction

    @transactional
    def approve(self, db: Session, transaction_id: str) -> Transaction:
        """
        Pending -> Approved, sets approved_at

        Raises:
            TransactionNotFound: missing or soft-deleted
            TransactionNotPending: already Approved or Rejected
        """
        transaction = self._lock_pending(db, transaction_id)

        transaction.status = TransactionStatus.APPROVED
        transaction.approved_at = self.clock.now()

        logger.info(
            f"Transaction {transaction_id} approved: {transaction.amount} "
            f"for player {transaction.player_id}"
        )
        return transaction

    @transactional
    def reject(self, db: Session, transaction_id: str,
               reason: Optional[str] = None) -> Transaction:
        """
        Pending -> Rejected, approved_at stays empty

        Raises:
            TransactionNotFound: missing or soft-deleted
            TransactionNotPending: already Approved or Rejected
        """
        transaction = self._lock_pending(db, transaction_id)

        transaction.status = TransactionStatus.REJECTED
        transaction.approved_at = None
        transaction.rejection_reason = reason.strip() if reason and reason.strip() else None

        logger.info(f"Transaction {transaction_id} rejected: {transaction.rejection_reason}")
        return transaction

    @staticmethod
    def _lock_pending(db: Session, transaction_id: str) -> Transaction:
        transaction = with_transaction_lock(transaction_id, db).first()
        if not transaction:
            raise TransactionNotFound(transaction_id)

        if transaction.status != TransactionStatus.PENDING:
            raise TransactionNotPending(transaction_id, transaction.status.value)

        return transaction

    def get_balance(self, db: Session, player_id: str) -> int:
        """
        Current balance of a player

        Raises:
            PlayerNotFound: missing or soft-deleted
        """
        _get_live_player(db, player_id)
        return compute_balance(db, player_id)

    def get_transaction(self, db: Session, transaction_id: str) -> Transaction:
        transaction = db.query(Transaction).filter(
            Transaction.id == transaction_id,
            Transaction.deleted_at.is_(None)
        ).first()
        if not transaction:
            raise TransactionNotFound(transaction_id)
        return transaction

    def list_pending(self, db: Session) -> List[Transaction]:
        """Review queue, oldest first"""
        return db.query(Transaction).filter(
            Transaction.deleted_at.is_(None),
            Transaction.status == TransactionStatus.PENDING
        ).order_by(Transaction.created_at.asc()).all()

    def list_history(self, db: Session, player_id: Optional[str] = None,
                     status: Optional[TransactionStatus] = None) -> List[Transaction]:
        """
        Processed transactions, newest first

        Pending ones are left out unless `status` asks for them explicitly.
        """
        query = db.query(Transaction).filter(Transaction.deleted_at.is_(None))

        if player_id is not None:
            query = query.filter(Transaction.player_id == player_id)

        if status is not None:
            query = query.filter(Transaction.status == status)
        else:
            query = query.filter(Transaction.status != TransactionStatus.PENDING)

        return query.order_by(Transaction.created_at.desc()).all()

    def list_for_player(self, db: Session, player_id: str) -> List[Transaction]:
        """Every transaction of one player, any status, newest first"""
        _get_live_player(db, player_id)
        return db.query(Transaction).filter(
            Transaction.player_id == player_id,
            Transaction.deleted_at.is_(None)
        ).order_by(Transaction.created_at.desc()).all()


def _get_live_player(db: Session, player_id: str) -> Player:
    player = db.query(Player).filter(
        Player.id == player_id,
        Player.deleted_at.is_(None)
    ).first()
    if not player:
        raise PlayerNotFound(player_id)
    return player

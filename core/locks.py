"""
Concurrency helpers

Database-level row locks to prevent races between requests, using
SELECT ... FOR UPDATE (pessimistic locking). SQLite ignores FOR UPDATE and
serializes writers on its own.

Soft-deleted rows are never locked: every helper filters deleted_at IS NULL,
so a missing row and a deleted row look the same to the caller.
"""
from sqlalchemy.orm import Session, Query

from models import Round, Player, Transaction, Board


def with_round_lock(round_id: str, db: Session) -> Query:
    """
    Lock one Round (row lock)

    Use cases:
    - closing a round (prevents double scoring / double rollover)
    - re-checking is_active / winning_numbers inside the same transaction

    Example:
        round_obj = with_round_lock(round_id, db).first()
        if round_obj is None:
            raise RoundNotFound(round_id)
        if round_obj.winning_numbers is not None:
            raise WinningNumbersAlreadySet(round_id)

    Returns:
        Query object (call .first() / .one())

    Notes:
        - nowait=False waits for the lock instead of failing
        - must be used inside a transaction that commits or rolls back
    """
    return db.query(Round).filter(
        Round.id == round_id,
        Round.deleted_at.is_(None)
    ).with_for_update(nowait=False)


def with_player_lock(player_id: str, db: Session) -> Query:
    """
    Lock one Player (row lock)

    Board purchase holds this lock between the balance check and the insert,
    so two concurrent purchases cannot both spend the same balance.
    """
    return db.query(Player).filter(
        Player.id == player_id,
        Player.deleted_at.is_(None)
    ).with_for_update(nowait=False)


def with_transaction_lock(transaction_id: str, db: Session) -> Query:
    """Lock one ledger Transaction while its status changes"""
    return db.query(Transaction).filter(
        Transaction.id == transaction_id,
        Transaction.deleted_at.is_(None)
    ).with_for_update(nowait=False)


def with_board_lock(board_id: str, db: Session) -> Query:
    return db.query(Board).filter(
        Board.id == board_id,
        Board.deleted_at.is_(None)
    ).with_for_update(nowait=False)

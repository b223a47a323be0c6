"""
Transaction API Endpoints

Responsibilities:
1. Players submit deposits and read their balance / transactions
2. Admins submit on behalf of a player, approve, reject, browse history
"""
from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from models import TransactionStatus
from schemas import (
    AdminTransactionSubmit,
    BalanceResponse,
    TransactionReject,
    TransactionResponse,
    TransactionSubmit,
)
from core.ledger_service import LedgerService
from core.exceptions import LotteryException
from api.deps import get_current_player_id, get_ledger_service
from api.errors import to_http_exception

router = APIRouter(prefix="/api/transactions", tags=["transactions"])
logger = logging.getLogger(__name__)


@router.post("/me", response_model=TransactionResponse, status_code=201)
def submit_my_transaction(
    data: TransactionSubmit,
    player_id: str = Depends(get_current_player_id),
    db: Session = Depends(get_db),
    ledger: LedgerService = Depends(get_ledger_service),
):
    """Submit a deposit for the caller; it stays Pending until an admin decides"""
    try:
        return ledger.submit_transaction(db, player_id, data.external_reference, data.amount)
    except LotteryException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to submit transaction: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/me", response_model=List[TransactionResponse])
def list_my_transactions(
    player_id: str = Depends(get_current_player_id),
    db: Session = Depends(get_db),
    ledger: LedgerService = Depends(get_ledger_service),
):
    try:
        return ledger.list_for_player(db, player_id)
    except LotteryException as e:
        raise to_http_exception(e)


@router.get("/me/balance", response_model=BalanceResponse)
def my_balance(
    player_id: str = Depends(get_current_player_id),
    db: Session = Depends(get_db),
    ledger: LedgerService = Depends(get_ledger_service),
):
    try:
        return BalanceResponse(player_id=player_id, balance=ledger.get_balance(db, player_id))
    except LotteryException as e:
        raise to_http_exception(e)


@router.post("", response_model=TransactionResponse, status_code=201)
def submit_transaction(
    data: AdminTransactionSubmit,
    db: Session = Depends(get_db),
    ledger: LedgerService = Depends(get_ledger_service),
):
    """Submit a deposit on behalf of a player (admin endpoint)"""
    try:
        return ledger.submit_transaction(db, data.player_id, data.external_reference, data.amount)
    except LotteryException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to submit transaction: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/pending", response_model=List[TransactionResponse])
def list_pending(
    db: Session = Depends(get_db),
    ledger: LedgerService = Depends(get_ledger_service),
):
    """Review queue, oldest first (admin endpoint)"""
    return ledger.list_pending(db)


@router.get("/history", response_model=List[TransactionResponse])
def list_history(
    player_id: Optional[str] = Query(None),
    status: Optional[TransactionStatus] = Query(None),
    db: Session = Depends(get_db),
    ledger: LedgerService = Depends(get_ledger_service),
):
    """
    Processed transactions, newest first (admin endpoint)

    Pending ones only show up with status=Pending.
    """
    return ledger.list_history(db, player_id=player_id, status=status)


@router.post("/{transaction_id}/approve", response_model=TransactionResponse)
def approve(
    transaction_id: str,
    db: Session = Depends(get_db),
    ledger: LedgerService = Depends(get_ledger_service),
):
    try:
        return ledger.approve(db, transaction_id)
    except LotteryException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to approve transaction {transaction_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{transaction_id}/reject", response_model=TransactionResponse)
def reject(
    transaction_id: str,
    data: Optional[TransactionReject] = None,
    db: Session = Depends(get_db),
    ledger: LedgerService = Depends(get_ledger_service),
):
    try:
        reason = data.reason if data else None
        return ledger.reject(db, transaction_id, reason)
    except LotteryException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to reject transaction {transaction_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")

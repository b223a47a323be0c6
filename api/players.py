"""
Player API Endpoints

Responsibilities:
1. Register / update players
2. Activate, deactivate, soft-delete (admin)
3. Query players and a player's balance
"""
from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from schemas import BalanceResponse, PlayerCreate, PlayerResponse, PlayerUpdate
from core.ledger_service import LedgerService
from core.player_manager import PlayerManager
from core.exceptions import LotteryException
from api.deps import get_current_player_id, get_ledger_service, get_player_manager
from api.errors import to_http_exception

router = APIRouter(prefix="/api/players", tags=["players"])
logger = logging.getLogger(__name__)


@router.post("", response_model=PlayerResponse, status_code=201)
def create_player(
    data: PlayerCreate,
    db: Session = Depends(get_db),
    manager: PlayerManager = Depends(get_player_manager),
):
    """
    Register a player

    New players are inactive and cannot buy boards until an admin activates them.
    """
    try:
        return manager.create_player(db, data.full_name, data.email, data.phone)
    except LotteryException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to create player: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("", response_model=List[PlayerResponse])
def list_players(
    is_active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    return PlayerManager.list_players(db, is_active)


@router.get("/me", response_model=PlayerResponse)
def get_me(
    player_id: str = Depends(get_current_player_id),
    db: Session = Depends(get_db),
):
    return PlayerManager.get_player(db, player_id)


@router.get("/{player_id}", response_model=PlayerResponse)
def get_player(player_id: str, db: Session = Depends(get_db)):
    try:
        return PlayerManager.get_player(db, player_id)
    except LotteryException as e:
        raise to_http_exception(e)


@router.put("/{player_id}", response_model=PlayerResponse)
def update_player(
    player_id: str,
    data: PlayerUpdate,
    db: Session = Depends(get_db),
    manager: PlayerManager = Depends(get_player_manager),
):
    try:
        return manager.update_player(db, player_id, data.full_name, data.phone, data.email)
    except LotteryException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to update player {player_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{player_id}/activate", response_model=PlayerResponse)
def activate_player(
    player_id: str,
    db: Session = Depends(get_db),
    manager: PlayerManager = Depends(get_player_manager),
):
    try:
        return manager.activate_player(db, player_id)
    except LotteryException as e:
        raise to_http_exception(e)


@router.post("/{player_id}/deactivate", response_model=PlayerResponse)
def deactivate_player(
    player_id: str,
    db: Session = Depends(get_db),
    manager: PlayerManager = Depends(get_player_manager),
):
    try:
        return manager.deactivate_player(db, player_id)
    except LotteryException as e:
        raise to_http_exception(e)


@router.delete("/{player_id}", status_code=204)
def delete_player(
    player_id: str,
    db: Session = Depends(get_db),
    manager: PlayerManager = Depends(get_player_manager),
):
    try:
        manager.soft_delete_player(db, player_id)
    except LotteryException as e:
        raise to_http_exception(e)


@router.get("/{player_id}/balance", response_model=BalanceResponse)
def get_player_balance(
    player_id: str,
    db: Session = Depends(get_db),
    ledger: LedgerService = Depends(get_ledger_service),
):
    try:
        return BalanceResponse(player_id=player_id, balance=ledger.get_balance(db, player_id))
    except LotteryException as e:
        raise to_http_exception(e)

"""
Board API Endpoints

Responsibilities:
1. Buy a board for the current player
2. List the player's boards and their history (and any player's, for admins)
3. Stop a repeating board
4. Publish the price table
"""
from typing import List
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from schemas import (
    BoardPurchase,
    BoardResponse,
    PlayerHistoryItem,
    PriceTableResponse,
)
from core.player_manager import PlayerManager
from core.round_manager import RoundManager
from core.wager_engine import WagerEngine
from core.exceptions import LotteryException
from services.history_service import get_player_round_history
from services.pricing_service import PRICE_TABLE
from api.deps import get_current_player_id, get_wager_engine
from api.errors import to_http_exception

router = APIRouter(prefix="/api/boards", tags=["boards"])
logger = logging.getLogger(__name__)


@router.get("/prices", response_model=PriceTableResponse)
def get_prices():
    return PriceTableResponse(prices=PRICE_TABLE)


@router.post("", response_model=BoardResponse, status_code=201)
def purchase_board(
    data: BoardPurchase,
    player_id: str = Depends(get_current_player_id),
    db: Session = Depends(get_db),
    engine: WagerEngine = Depends(get_wager_engine),
):
    """
    Buy a board (player endpoint)

    The round defaults to the active one. The owner is always the caller,
    never a player id sent by the client.
    """
    try:
        round_id = data.round_id or RoundManager.get_active_round(db).id

        board = engine.purchase_board(
            db, player_id, round_id, data.numbers, data.repeat_weeks
        )
        return board

    except LotteryException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to purchase board: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/me", response_model=List[BoardResponse])
def list_my_boards(
    player_id: str = Depends(get_current_player_id),
    db: Session = Depends(get_db),
    engine: WagerEngine = Depends(get_wager_engine),
):
    return engine.list_boards_for_player(db, player_id)


@router.get("/me/history", response_model=List[PlayerHistoryItem])
def my_history(
    player_id: str = Depends(get_current_player_id),
    db: Session = Depends(get_db),
):
    """Per-round results of the caller's boards, newest round first"""
    try:
        return get_player_round_history(player_id, db)
    except LotteryException as e:
        raise to_http_exception(e)


@router.get("/player/{player_id}", response_model=List[BoardResponse])
def list_player_boards(
    player_id: str,
    db: Session = Depends(get_db),
    engine: WagerEngine = Depends(get_wager_engine),
):
    """Boards of one player, newest first (admin endpoint)"""
    try:
        PlayerManager.get_player(db, player_id)
        return engine.list_boards_for_player(db, player_id)
    except LotteryException as e:
        raise to_http_exception(e)


@router.post("/{board_id}/stop-repeating", response_model=BoardResponse)
def stop_repeating(
    board_id: str,
    player_id: str = Depends(get_current_player_id),
    db: Session = Depends(get_db),
    engine: WagerEngine = Depends(get_wager_engine),
):
    """
    Stop a repeating board (player endpoint)

    No refund: the prepaid weeks are kept by the club.
    """
    try:
        return engine.stop_repeating(db, player_id, board_id)

    except LotteryException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to stop repeating board {board_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")

"""
Round API Endpoints

Responsibilities:
1. Show the active round and its purchase deadline
2. Round history
3. Close a round with its winning numbers (admin)
4. Boards of a round (admin overview)

All business logic lives in RoundManager / WagerEngine.
"""
from typing import List
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db, get_settings
from schemas import (
    ActiveRoundResponse,
    BoardResponse,
    RoundClosureResponse,
    RoundResponse,
    WinningNumbersSubmit,
)
from core.round_manager import RoundManager
from core.wager_engine import WagerEngine
from core.exceptions import LotteryException
from services.calendar_service import purchase_cutoff
from api.deps import get_round_manager, get_wager_engine
from api.errors import to_http_exception

router = APIRouter(prefix="/api/rounds", tags=["rounds"])
logger = logging.getLogger(__name__)


@router.get("/active", response_model=ActiveRoundResponse)
def get_active_round(db: Session = Depends(get_db)):
    """
    The round currently open for purchases

    Returns the round plus the UTC instant of its Saturday 17:00 cutoff.
    """
    try:
        round_obj = RoundManager.get_active_round(db)
        settings = get_settings()
        cutoff = purchase_cutoff(
            round_obj.year, round_obj.week_number, settings.club_timezone,
            settings.cutoff_weekday, settings.cutoff_hour
        )
        return ActiveRoundResponse(
            **RoundResponse.model_validate(round_obj).model_dump(),
            purchase_cutoff=cutoff
        )

    except LotteryException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to get active round: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("", response_model=List[RoundResponse])
def get_round_history(db: Session = Depends(get_db)):
    """All rounds, newest first"""
    try:
        return RoundManager.get_round_history(db)
    except Exception as e:
        logger.error(f"Failed to get round history: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/{round_id}", response_model=RoundResponse)
def get_round(round_id: str, db: Session = Depends(get_db)):
    try:
        return RoundManager.get_round(db, round_id)
    except LotteryException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to get round {round_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{round_id}/winning-numbers", response_model=RoundClosureResponse)
def close_round(
    round_id: str,
    data: WinningNumbersSubmit,
    db: Session = Depends(get_db),
    manager: RoundManager = Depends(get_round_manager),
):
    """
    Close a round (admin endpoint)

    Effects, all in one transaction:
    - stores the winning numbers and closes the round
    - scores every board
    - activates the next round
    - rolls repeating boards into it

    A second call on the same round returns 409.
    """
    try:
        summary = manager.close_round_and_assign_winning_numbers(
            db, round_id, data.winning_numbers
        )
        return summary

    except LotteryException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to close round {round_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/{round_id}/boards", response_model=List[BoardResponse])
def list_round_boards(
    round_id: str,
    db: Session = Depends(get_db),
    engine: WagerEngine = Depends(get_wager_engine),
):
    """Boards of a round, oldest first (admin endpoint)"""
    try:
        RoundManager.get_round(db, round_id)
        return engine.list_boards_for_round(db, round_id)

    except LotteryException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to list boards for round {round_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")

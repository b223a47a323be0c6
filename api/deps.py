"""
Shared FastAPI dependencies

Services are built per request from the settings and the injected clock;
tests override get_clock to pin time.
"""
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from database import get_db, get_settings
from api.errors import to_http_exception
from core.clock import Clock, SystemClock
from core.exceptions import LotteryException
from core.ledger_service import LedgerService
from core.player_manager import PlayerManager
from core.round_manager import RoundManager
from core.wager_engine import WagerEngine

_system_clock = SystemClock()


def get_clock() -> Clock:
    return _system_clock


def get_round_manager(clock: Clock = Depends(get_clock)) -> RoundManager:
    return RoundManager(clock)


def get_wager_engine(clock: Clock = Depends(get_clock)) -> WagerEngine:
    settings = get_settings()
    return WagerEngine(
        clock,
        tz_name=settings.club_timezone,
        cutoff_weekday=settings.cutoff_weekday,
        cutoff_hour=settings.cutoff_hour,
        max_repeat_weeks=settings.max_repeat_weeks,
    )


def get_ledger_service(clock: Clock = Depends(get_clock)) -> LedgerService:
    return LedgerService(clock)


def get_player_manager(clock: Clock = Depends(get_clock)) -> PlayerManager:
    return PlayerManager(clock)


def get_current_player_id(
    x_player_email: str = Header(...),
    db: Session = Depends(get_db),
) -> str:
    """
    Resolve the caller to a Player id

    The auth gateway in front of this service puts the authenticated email
    in X-Player-Email; no token handling happens here.
    """
    try:
        return PlayerManager.resolve_player_id(db, x_player_email)
    except LotteryException as e:
        raise to_http_exception(e)

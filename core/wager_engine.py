"""
Wager Engine: board purchase

Responsibilities:
1. Validate and price a board purchase
2. Enforce round activity, the Saturday cutoff and the player's balance
3. List boards per round / per player
4. Stop a repeating board (no refund)

Rollover boards created at round closure do not come through here: they are
system continuations and skip the cutoff and balance checks.
"""
from typing import Iterable, List
import logging

from sqlalchemy.orm import Session

from models import Board
from core.clock import Clock
from core.locks import with_board_lock, with_player_lock, with_round_lock
from core.ledger_service import compute_balance
from core.exceptions import (
    BoardNotFound,
    DeadlinePassed,
    Forbidden,
    InactivePlayer,
    InsufficientBalance,
    InvalidArgument,
    PlayerNotFound,
    RoundNotActive,
    RoundNotFound,
)
from services.pricing_service import (
    validate_board_numbers,
    price_for_count,
    charge_for_purchase,
)
from services.calendar_service import purchase_cutoff
from database import transactional

logger = logging.getLogger(__name__)


class WagerEngine:
    """Board purchase rules"""

    def __init__(self, clock: Clock, tz_name: str = "Europe/Copenhagen",
                 cutoff_weekday: int = 6, cutoff_hour: int = 17,
                 max_repeat_weeks: int = 52):
        self.clock = clock
        self.tz_name = tz_name
        self.cutoff_weekday = cutoff_weekday
        self.cutoff_hour = cutoff_hour
        self.max_repeat_weeks = max_repeat_weeks

    @transactional
    def purchase_board(self, db: Session, player_id: str, round_id: str,
                       numbers: Iterable[int], repeat_weeks: int = 0) -> Board:
        """
        Buy a board for a round

        Flow:
        1. Validate numbers (5-8 distinct ints in [1, 16]) and repeat_weeks
        2. Lock the Player, must exist and be active
        3. Load the Round, must exist and be active
        4. Cutoff: now must be before Saturday 17:00 club time of the round's week
        5. Price from the count table
        6. Balance must cover the charge (price x repeat_weeks when repeating)
        7. Create the Board with sorted numbers
        8. Re-read the Round after the insert; a closure that committed in
           between turns the purchase into RoundNotActive

        The player row stays locked from step 2 until commit, so the balance
        read in step 6 cannot be spent twice by concurrent purchases. The
        round row stays locked from step 3, so closure cannot score the
        round while a purchase into it is in flight. SQLite ignores the
        lock; step 8 covers it there.

        Args:
            db: SQLAlchemy Session
            player_id: buyer
            round_id: round to join
            numbers: chosen numbers, any order
            repeat_weeks: future rounds the board should roll into, prepaid now

        Returns:
            the new Board

        Raises:
            InvalidArgument: bad numbers or repeat_weeks
            PlayerNotFound / RoundNotFound: missing or soft-deleted
            InactivePlayer: player is not active
            RoundNotActive: round is closed or not yet open
            DeadlinePassed: cutoff reached
            InsufficientBalance: balance below the charge
        """
        # 1. input
        sorted_numbers = validate_board_numbers(numbers)
        self._validate_repeat_weeks(repeat_weeks)

        # 2. player
        player = with_player_lock(player_id, db).first()
        if not player:
            raise PlayerNotFound(player_id)
        if not player.is_active:
            raise InactivePlayer(player_id)

        # 3. round, locked so a concurrent closure waits for this purchase
        round_obj = with_round_lock(round_id, db).first()
        if not round_obj:
            raise RoundNotFound(round_id)
        if not round_obj.is_active:
            raise RoundNotActive(round_id)

        # 4. cutoff
        now = self.clock.now()
        cutoff = purchase_cutoff(
            round_obj.year, round_obj.week_number, self.tz_name,
            self.cutoff_weekday, self.cutoff_hour
        )
        if now >= cutoff:
            raise DeadlinePassed(
                f"Round {round_obj.year}-W{round_obj.week_number:02d} closed for purchases "
                f"at {cutoff.isoformat()}"
            )

        # 5. price
        weekly_price = price_for_count(len(sorted_numbers))
        charge = charge_for_purchase(weekly_price, repeat_weeks)

        # 6. balance
        balance = compute_balance(db, player_id)
        if balance < charge:
            raise InsufficientBalance(balance, charge)

        # 7. board
        board = Board(
            player_id=player_id,
            round_id=round_id,
            numbers=sorted_numbers,
            price=charge,
            is_winning=False,
            repeat_weeks_remaining=repeat_weeks,
            repeat_active=repeat_weeks > 0,
            created_at=now,
        )
        db.add(board)
        db.flush()

        # 8. the round must still be open once the board row is written
        db.refresh(round_obj)
        if not round_obj.is_active:
            raise RoundNotActive(round_id)

        logger.info(
            f"Player {player_id} bought board {board.id} {sorted_numbers} "
            f"for round {round_obj.year}-W{round_obj.week_number:02d}: "
            f"charged {charge}, repeat {repeat_weeks}"
        )
        return board

    def _validate_repeat_weeks(self, repeat_weeks: int) -> None:
        if isinstance(repeat_weeks, bool) or not isinstance(repeat_weeks, int):
            raise InvalidArgument(f"Repeat weeks must be an integer, got {repeat_weeks!r}")
        if repeat_weeks < 0:
            raise InvalidArgument("Repeat weeks cannot be negative")
        if repeat_weeks > self.max_repeat_weeks:
            raise InvalidArgument(f"Repeat weeks cannot be more than {self.max_repeat_weeks}")

    @transactional
    def stop_repeating(self, db: Session, player_id: str, board_id: str) -> Board:
        """
        Disable auto-repeat for one of the player's boards

        Nothing is refunded: the prepaid span is kept. Calling it on a board
        that is not repeating returns the board unchanged.

        Raises:
            BoardNotFound: missing or soft-deleted
            Forbidden: the board belongs to someone else
        """
        board = with_board_lock(board_id, db).first()
        if not board:
            raise BoardNotFound(board_id)

        if board.player_id != player_id:
            raise Forbidden("You can only stop repeating for your own boards")

        if not board.repeat_active and board.repeat_weeks_remaining == 0:
            return board

        board.repeat_active = False
        board.repeat_weeks_remaining = 0

        logger.info(f"Player {player_id} stopped repeating board {board_id}")
        return board

    def get_board(self, db: Session, board_id: str) -> Board:
        board = db.query(Board).filter(
            Board.id == board_id,
            Board.deleted_at.is_(None)
        ).first()
        if not board:
            raise BoardNotFound(board_id)
        return board

    def list_boards_for_round(self, db: Session, round_id: str) -> List[Board]:
        """Non-deleted boards of a round, oldest first"""
        return db.query(Board).filter(
            Board.round_id == round_id,
            Board.deleted_at.is_(None)
        ).order_by(Board.created_at.asc()).all()

    def list_boards_for_player(self, db: Session, player_id: str) -> List[Board]:
        """Non-deleted boards of a player, newest first"""
        return db.query(Board).filter(
            Board.player_id == player_id,
            Board.deleted_at.is_(None)
        ).order_by(Board.created_at.desc()).all()

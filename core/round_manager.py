"""
Round Manager: lifecycle of the weekly Round

Responsibilities:
1. Find the single active round
2. Close it with three winning numbers
3. Score every board of the closed round
4. Activate the next round and roll repeating boards into it

Rules:
- Exactly one non-deleted round is active at any time; the row itself is the
  source of truth, never in-memory state, since several service instances
  may share the database
- Closure is one-shot: a second attempt fails, it never re-scores or
  re-rolls boards
- Closure commits as one unit or not at all
"""
from dataclasses import dataclass, field
from typing import List, Optional
import logging

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from models import Board, Round
from core.clock import Clock
from core.locks import with_round_lock
from core.exceptions import (
    NoActiveRound,
    RoundNotActive,
    RoundNotFound,
    WinningNumbersAlreadySet,
)
from services.pricing_service import validate_winning_numbers
from services.scoring_service import is_winning_board, split_revenue
from database import transactional

logger = logging.getLogger(__name__)


@dataclass
class RoundClosureSummary:
    round_id: str
    year: int
    week_number: int
    winning_numbers: List[int]
    total_boards: int
    winning_boards: int
    # gross, before the informational 70/30 split
    digital_revenue: int
    prize_pool: int
    organization_share: int
    next_round_id: Optional[str] = None
    rollover_board_ids: List[str] = field(default_factory=list)


class RoundManager:
    """Round lifecycle manager"""

    def __init__(self, clock: Clock):
        self.clock = clock

    @staticmethod
    def get_active_round(db: Session) -> Round:
        """
        The round currently open for purchases

        Raises:
            NoActiveRound: seeding never ran or data is broken
        """
        round_obj = db.query(Round).filter(
            Round.deleted_at.is_(None),
            Round.is_active.is_(True)
        ).order_by(Round.year, Round.week_number).first()

        if not round_obj:
            raise NoActiveRound()
        return round_obj

    @staticmethod
    def get_round(db: Session, round_id: str) -> Round:
        round_obj = db.query(Round).filter(
            Round.id == round_id,
            Round.deleted_at.is_(None)
        ).first()
        if not round_obj:
            raise RoundNotFound(round_id)
        return round_obj

    @staticmethod
    def get_round_history(db: Session) -> List[Round]:
        """All non-deleted rounds, newest (year, week) first"""
        return db.query(Round).filter(
            Round.deleted_at.is_(None)
        ).order_by(Round.year.desc(), Round.week_number.desc()).all()

    @transactional
    def close_round_and_assign_winning_numbers(self, db: Session, round_id: str,
                                               winning_numbers: List[int]) -> RoundClosureSummary:
        """
        Close the active round with its three winning numbers

        Flow:
        1. Validate: 3 distinct ints in [1, 16], sorted
        2. Lock the Round; it must exist, be active and have no winning numbers yet
        3. Store winning numbers and closed_at, deactivate
        4. Score: a board wins iff it contains all three numbers
        5. Activate the next (year, week) round, if one exists
        6. Roll repeating boards into the next round, free of charge
        7. Build the summary

        Args:
            db: SQLAlchemy Session
            round_id: round to close
            winning_numbers: the three drawn numbers, any order

        Returns:
            RoundClosureSummary

        Raises:
            InvalidArgument: bad winning numbers
            RoundNotFound: missing or soft-deleted
            RoundNotActive: round is not the active one (includes already closed)
            WinningNumbersAlreadySet: closure already happened
        """
        # 1. validate
        numbers = validate_winning_numbers(winning_numbers)

        # 2. lock and check preconditions inside the transaction
        round_obj = with_round_lock(round_id, db).first()
        if not round_obj:
            raise RoundNotFound(round_id)
        if not round_obj.is_active:
            raise RoundNotActive(round_id)
        if round_obj.winning_numbers is not None:
            raise WinningNumbersAlreadySet(round_id)

        now = self.clock.now()

        # 3. close
        round_obj.winning_numbers = numbers
        round_obj.closed_at = now
        round_obj.is_active = False
        db.flush()

        logger.info(
            f"Closing round {round_obj.year}-W{round_obj.week_number:02d} "
            f"with winning numbers {numbers}"
        )

        # 4. score
        live_boards = [b for b in round_obj.boards if b.deleted_at is None]
        for board in live_boards:
            board.is_winning = is_winning_board(board.numbers, numbers)

        # 5. next round
        next_round = self._find_next_round(db, round_obj)
        if next_round is not None:
            next_round.is_active = True
            logger.info(
                f"Activated round {next_round.year}-W{next_round.week_number:02d}"
            )
        else:
            logger.warning(
                f"No round after {round_obj.year}-W{round_obj.week_number:02d}, "
                f"nothing activated. Run round seeding."
            )

        # 6. rollover
        rollover_ids = []
        if next_round is not None:
            rollover_ids = self._roll_over_repeating_boards(db, live_boards, next_round, now)

        # 7. summary
        winning_count = sum(1 for b in live_boards if b.is_winning)
        revenue = sum(b.price for b in live_boards)
        prize_pool, organization_share = split_revenue(revenue)

        logger.info(
            f"Round {round_obj.id} closed: {len(live_boards)} boards, "
            f"{winning_count} winning, revenue {revenue}, {len(rollover_ids)} rolled over"
        )

        return RoundClosureSummary(
            round_id=round_obj.id,
            year=round_obj.year,
            week_number=round_obj.week_number,
            winning_numbers=numbers,
            total_boards=len(live_boards),
            winning_boards=winning_count,
            digital_revenue=revenue,
            prize_pool=prize_pool,
            organization_share=organization_share,
            next_round_id=next_round.id if next_round is not None else None,
            rollover_board_ids=rollover_ids,
        )

    @staticmethod
    def _find_next_round(db: Session, round_obj: Round) -> Optional[Round]:
        """Chronologically next non-deleted, inactive round, locked"""
        return db.query(Round).filter(
            Round.deleted_at.is_(None),
            Round.is_active.is_(False),
            or_(
                Round.year > round_obj.year,
                and_(Round.year == round_obj.year, Round.week_number > round_obj.week_number)
            )
        ).order_by(Round.year, Round.week_number).with_for_update(nowait=False).first()

    @staticmethod
    def _roll_over_repeating_boards(db: Session, boards: List[Board],
                                    next_round: Round, now) -> List[str]:
        """
        Copy every still-repeating board into the next round

        The copy costs nothing: the player prepaid the whole repeat span when
        buying the original. It skips the cutoff and balance checks, it is a
        continuation and not a new purchase.
        """
        created = []
        for board in boards:
            if not board.repeat_active or board.repeat_weeks_remaining <= 0:
                continue

            remaining = board.repeat_weeks_remaining - 1
            copy = Board(
                player_id=board.player_id,
                round_id=next_round.id,
                numbers=list(board.numbers),
                price=0,
                is_winning=False,
                repeat_weeks_remaining=remaining,
                repeat_active=remaining > 0,
                created_at=now,
            )
            db.add(copy)
            created.append(copy)

        db.flush()
        for copy in created:
            logger.info(
                f"Rolled board for player {copy.player_id} into round "
                f"{next_round.year}-W{next_round.week_number:02d}, {copy.repeat_weeks_remaining} weeks left"
            )
        return [copy.id for copy in created]

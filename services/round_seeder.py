"""
Round seeder: pre-generate rounds so no scheduler is ever needed

Idempotent, safe to run on every startup:
- guarantees exactly one active round
- guarantees a contiguous run of future (year, week) rounds after it

Run it in a SERIALIZABLE session (database.serializable_session) so two
processes starting at once cannot both activate a first round.
"""
import logging
from datetime import datetime
from typing import Set, Tuple

from sqlalchemy.orm import Session

from models import Round
from core.clock import Clock
from core.exceptions import ActiveRoundInvariantViolated
from services.calendar_service import current_iso_week, next_iso_week
from database import transactional

logger = logging.getLogger(__name__)

DEFAULT_WEEKS_AHEAD = 20 * 52


@transactional
def seed_rounds(db: Session, clock: Clock, tz_name: str,
                weeks_ahead: int = DEFAULT_WEEKS_AHEAD) -> Round:
    """
    Make sure the round table is ready for the core to run

    Flow:
    1. Collect every existing (year, week), soft-deleted rows included,
       since the unique constraint covers them too
    2. Ensure exactly one active round
    3. Create the missing rounds for the next `weeks_ahead` ISO weeks

    Args:
        db: SQLAlchemy Session
        clock: time source, decides which week is "current"
        tz_name: club time zone, ISO weeks are taken in local time
        weeks_ahead: how far past the active round to seed

    Returns:
        the active Round

    Raises:
        ActiveRoundInvariantViolated: more than one round is already active
    """
    now = clock.now()

    # 1. existing keys
    existing: Set[Tuple[int, int]] = {
        (year, week) for year, week in db.query(Round.year, Round.week_number).all()
    }

    # 2. exactly one active
    active = _ensure_exactly_one_active(db, now, tz_name, existing)

    # 3. future rounds
    created = _ensure_future_rounds(db, active, now, existing, weeks_ahead)

    logger.info(
        f"Round seeding done: active round {active.year}-W{active.week_number:02d}, "
        f"{created} new future rounds"
    )
    return active


def _ensure_exactly_one_active(db: Session, now: datetime, tz_name: str,
                               existing: Set[Tuple[int, int]]) -> Round:
    active_rounds = db.query(Round).filter(
        Round.deleted_at.is_(None),
        Round.is_active.is_(True)
    ).order_by(Round.year, Round.week_number).all()

    if len(active_rounds) > 1:
        logger.warning(f"Found {len(active_rounds)} active rounds, refusing to seed")
        raise ActiveRoundInvariantViolated(
            f"Invariant violated: {len(active_rounds)} active rounds exist"
        )

    if active_rounds:
        return active_rounds[0]

    # No active round: activate the current week, skipping weeks that were already closed
    year, week = current_iso_week(now, tz_name)
    while True:
        candidate = db.query(Round).filter(
            Round.year == year,
            Round.week_number == week
        ).first()

        if candidate is None:
            candidate = Round(year=year, week_number=week, is_active=True, created_at=now)
            db.add(candidate)
            existing.add((year, week))
            db.flush()
            logger.info(f"Created and activated round {year}-W{week:02d}")
            return candidate

        if candidate.closed_at is None:
            if candidate.deleted_at is not None:
                logger.warning(f"Undeleting round {year}-W{week:02d} to make it active")
                candidate.deleted_at = None
            candidate.is_active = True
            db.flush()
            logger.info(f"Activated existing round {year}-W{week:02d}")
            return candidate

        year, week = next_iso_week(year, week)


def _ensure_future_rounds(db: Session, active: Round, now: datetime,
                          existing: Set[Tuple[int, int]], weeks_ahead: int) -> int:
    year, week = active.year, active.week_number
    new_rounds = []

    for _ in range(weeks_ahead):
        year, week = next_iso_week(year, week)
        if (year, week) in existing:
            continue

        new_rounds.append(Round(year=year, week_number=week, is_active=False, created_at=now))
        existing.add((year, week))

    db.add_all(new_rounds)
    db.flush()
    return len(new_rounds)

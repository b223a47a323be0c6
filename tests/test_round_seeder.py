from datetime import datetime, timezone

import pytest

from models import Round
from core.exceptions import ActiveRoundInvariantViolated
from services.round_seeder import seed_rounds

TZ = "Europe/Copenhagen"


def _keys(db):
    return [(r.year, r.week_number) for r in db.query(Round).order_by(Round.year, Round.week_number)]


def test_seeding_empty_database(db, clock):
    active = seed_rounds(db, clock, TZ, weeks_ahead=10)

    assert (active.year, active.week_number) == (2025, 13)
    assert len(_keys(db)) == 11
    assert _keys(db)[-1] == (2025, 23)
    assert db.query(Round).filter(Round.is_active.is_(True)).count() == 1


def test_seeding_is_idempotent(db, clock):
    first = seed_rounds(db, clock, TZ, weeks_ahead=10)
    keys = _keys(db)

    second = seed_rounds(db, clock, TZ, weeks_ahead=10)

    assert second.id == first.id
    assert _keys(db) == keys


def test_seeding_extends_from_existing_active_round(db, clock, make_round):
    make_round(2025, 10, active=True)

    active = seed_rounds(db, clock, TZ, weeks_ahead=3)

    assert (active.year, active.week_number) == (2025, 10)
    assert _keys(db) == [(2025, 10), (2025, 11), (2025, 12), (2025, 13)]


def test_seeding_crosses_a_53_week_year(db, make_round, clock):
    make_round(2026, 52, active=True)

    seed_rounds(db, clock, TZ, weeks_ahead=3)

    assert _keys(db) == [(2026, 52), (2026, 53), (2027, 1), (2027, 2)]


def test_seeding_skips_a_closed_current_week(db, clock, make_round):
    closed = make_round(2025, 13)
    closed.winning_numbers = [1, 2, 3]
    closed.closed_at = clock.now()
    db.commit()

    active = seed_rounds(db, clock, TZ, weeks_ahead=2)

    assert (active.year, active.week_number) == (2025, 14)


def test_seeding_refuses_two_active_rounds(db, clock, make_round):
    make_round(2025, 13, active=True)
    make_round(2025, 14, active=True)

    with pytest.raises(ActiveRoundInvariantViolated):
        seed_rounds(db, clock, TZ, weeks_ahead=2)

    assert len(_keys(db)) == 2


def test_current_week_is_taken_in_club_time(db, clock):
    # Sunday 23:30 UTC = Monday 01:30 in Copenhagen
    clock.set(datetime(2025, 3, 30, 23, 30, tzinfo=timezone.utc))

    active = seed_rounds(db, clock, TZ, weeks_ahead=1)

    assert (active.year, active.week_number) == (2025, 14)

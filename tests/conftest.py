"""
Shared fixtures

Each test gets its own in-memory SQLite database, a ManualClock pinned to
Monday 2025-03-24 10:00 UTC (ISO week 2025-W13) and small factories for
players, rounds and approved deposits.
"""
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401  registers tables on Base.metadata
from database import Base
from models import Player, Round
from core.clock import ManualClock
from core.ledger_service import LedgerService
from core.round_manager import RoundManager
from core.wager_engine import WagerEngine

TZ = "Europe/Copenhagen"
START = datetime(2025, 3, 24, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return ManualClock(START)


@pytest.fixture
def ledger(clock):
    return LedgerService(clock)


@pytest.fixture
def wager(clock):
    return WagerEngine(clock, tz_name=TZ)


@pytest.fixture
def round_manager(clock):
    return RoundManager(clock)


@pytest.fixture
def make_player(db):
    counter = {"n": 0}

    def _make(email=None, active=True, full_name="Test Player"):
        counter["n"] += 1
        player = Player(
            full_name=full_name,
            email=email or f"player{counter['n']}@club.test",
            phone="12345678",
            is_active=active,
            activated_at=START if active else None,
            created_at=START,
        )
        db.add(player)
        db.commit()
        return player

    return _make


@pytest.fixture
def make_round(db):
    def _make(year, week, active=False):
        round_obj = Round(year=year, week_number=week, is_active=active, created_at=START)
        db.add(round_obj)
        db.commit()
        return round_obj

    return _make


@pytest.fixture
def rounds(make_round):
    """2025-W13 active, W14..W17 waiting"""
    return [make_round(2025, week, active=(week == 13)) for week in range(13, 18)]


@pytest.fixture
def fund(db, ledger, clock):
    """Approved deposit of `amount` for `player`"""
    counter = {"n": 0}

    def _fund(player, amount):
        counter["n"] += 1
        tx = ledger.submit_transaction(db, player.id, f"MP-{player.id[:8]}-{counter['n']}", amount)
        clock.advance()
        return ledger.approve(db, tx.id)

    return _fund

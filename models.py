"""
ORM models

Soft delete everywhere: rows are never removed, deleted_at is set instead and
every read filters on deleted_at IS NULL.

Balance is intentionally not a column. It is always derived from Transaction
and Board rows (see core.ledger_service).
"""
import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship

from database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransactionStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class Player(Base):
    __tablename__ = "player"

    id = Column(String(36), primary_key=True, default=_uuid)
    full_name = Column(String(200), nullable=False)
    # stored lower-cased, uniqueness is case-insensitive
    email = Column(String(320), nullable=False)
    phone = Column(String(50), nullable=False)
    is_active = Column(Boolean, nullable=False, default=False)
    activated_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    boards = relationship("Board", back_populates="player")
    transactions = relationship("Transaction", back_populates="player")

    __table_args__ = (
        Index(
            "ux_player_email_live",
            "email",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    def __repr__(self):
        return f"<Player(id={self.id}, email={self.email}, is_active={self.is_active})>"


class Round(Base):
    """One week of the lottery, identified by ISO (year, week_number)"""
    __tablename__ = "game"

    id = Column(String(36), primary_key=True, default=_uuid)
    year = Column(Integer, nullable=False)
    week_number = Column(Integer, nullable=False)
    # set exactly once at closure: 3 distinct sorted ints in [1, 16]
    winning_numbers = Column(JSON(none_as_null=True), nullable=True)
    is_active = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    closed_at = Column(DateTime(timezone=True), nullable=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    boards = relationship(
        "Board",
        back_populates="round",
        cascade="all, delete-orphan",
        order_by="Board.created_at",
    )

    __table_args__ = (
        UniqueConstraint("year", "week_number", name="uq_game_year_week"),
    )

    def __repr__(self):
        return (
            f"<Round(id={self.id}, year={self.year}, week={self.week_number}, "
            f"is_active={self.is_active})>"
        )


class Board(Base):
    __tablename__ = "board"

    id = Column(String(36), primary_key=True, default=_uuid)
    player_id = Column(String(36), ForeignKey("player.id"), nullable=False, index=True)
    round_id = Column(String(36), ForeignKey("game.id", ondelete="CASCADE"), nullable=False, index=True)
    # sorted ascending, 5-8 distinct ints in [1, 16]
    numbers = Column(JSON, nullable=False)
    # fixed at creation, never recomputed
    price = Column(Integer, nullable=False)
    is_winning = Column(Boolean, nullable=False, default=False)
    repeat_weeks_remaining = Column(Integer, nullable=False, default=0)
    repeat_active = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    player = relationship("Player", back_populates="boards")
    round = relationship("Round", back_populates="boards")

    def __repr__(self):
        return f"<Board(id={self.id}, numbers={self.numbers}, price={self.price})>"


class Transaction(Base):
    """Manual deposit: Pending -> Approved | Rejected, terminal after that"""
    __tablename__ = "transaction"

    id = Column(String(36), primary_key=True, default=_uuid)
    player_id = Column(String(36), ForeignKey("player.id"), nullable=False, index=True)
    external_reference = Column(String(100), nullable=False)
    amount = Column(Integer, nullable=False)
    status = Column(Enum(TransactionStatus), nullable=False, default=TransactionStatus.PENDING, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(String(500), nullable=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    player = relationship("Player", back_populates="transactions")

    __table_args__ = (
        Index(
            "ux_transaction_reference_live",
            "external_reference",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
        Index("ix_transaction_player_created", "player_id", "created_at"),
    )

    def __repr__(self):
        return (
            f"<Transaction(id={self.id}, amount={self.amount}, "
            f"status={self.status.value if self.status else None})>"
        )

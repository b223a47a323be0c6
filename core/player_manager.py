"""
Player Manager: player records and identity resolution

The auth collaborator only knows an email; resolve_player_id is the seam that
turns it into a Player id for the rest of the core.
"""
from typing import List, Optional
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from models import Player
from core.clock import Clock
from core.exceptions import (
    EmailAlreadyRegistered,
    InvalidArgument,
    NotFound,
    PlayerNotFound,
)
from database import transactional

logger = logging.getLogger(__name__)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class PlayerManager:
    """Player lifecycle manager"""

    def __init__(self, clock: Clock):
        self.clock = clock

    @staticmethod
    def resolve_player_id(db: Session, email: str) -> str:
        """
        Map an authenticated principal's email to a Player id

        Matching is case-insensitive and ignores soft-deleted players. An
        inactive player still resolves; the purchase gate rejects them later.

        Raises:
            NotFound: no player for this email
        """
        normalized = normalize_email(email)
        if not normalized:
            raise NotFound("Player not found for the current user")

        player_id = db.query(Player.id).filter(
            func.lower(Player.email) == normalized,
            Player.deleted_at.is_(None)
        ).scalar()

        if player_id is None:
            raise NotFound("Player not found for the current user")
        return player_id

    @transactional
    def create_player(self, db: Session, full_name: str, email: str, phone: str) -> Player:
        """
        Register a player, inactive until an administrator activates them

        Raises:
            InvalidArgument: missing name, email or phone
            EmailAlreadyRegistered: email taken by a non-deleted player
        """
        full_name = (full_name or "").strip()
        phone = (phone or "").strip()
        normalized = normalize_email(email)

        if not full_name or not normalized or not phone:
            raise InvalidArgument("Full name, email and phone are required")
        if "@" not in normalized:
            raise InvalidArgument(f"Invalid email {email!r}")

        self._ensure_email_free(db, normalized)

        player = Player(
            full_name=full_name,
            email=normalized,
            phone=phone,
            is_active=False,
            activated_at=None,
            created_at=self.clock.now(),
        )
        db.add(player)
        db.flush()

        logger.info(f"Created player {player.id} ({normalized})")
        return player

    @transactional
    def update_player(self, db: Session, player_id: str, full_name: str,
                      phone: str, email: Optional[str] = None) -> Player:
        player = self.get_player(db, player_id)

        full_name = (full_name or "").strip()
        phone = (phone or "").strip()
        if not full_name or not phone:
            raise InvalidArgument("Full name and phone are required")

        normalized = normalize_email(email)
        if normalized and normalized != player.email:
            self._ensure_email_free(db, normalized, exclude_id=player.id)
            player.email = normalized

        player.full_name = full_name
        player.phone = phone
        return player

    @transactional
    def activate_player(self, db: Session, player_id: str) -> Player:
        """Idempotent; activated_at keeps the first activation time"""
        player = self.get_player(db, player_id)

        if not player.is_active:
            player.is_active = True
            if player.activated_at is None:
                player.activated_at = self.clock.now()
            logger.info(f"Activated player {player_id}")

        return player

    @transactional
    def deactivate_player(self, db: Session, player_id: str) -> Player:
        player = self.get_player(db, player_id)

        if player.is_active:
            player.is_active = False
            logger.info(f"Deactivated player {player_id}")

        return player

    @transactional
    def soft_delete_player(self, db: Session, player_id: str) -> Player:
        player = self.get_player(db, player_id)
        player.deleted_at = self.clock.now()
        logger.info(f"Soft-deleted player {player_id}")
        return player

    @staticmethod
    def get_player(db: Session, player_id: str) -> Player:
        player = db.query(Player).filter(
            Player.id == player_id,
            Player.deleted_at.is_(None)
        ).first()
        if not player:
            raise PlayerNotFound(player_id)
        return player

    @staticmethod
    def list_players(db: Session, is_active: Optional[bool] = None) -> List[Player]:
        query = db.query(Player).filter(Player.deleted_at.is_(None))
        if is_active is not None:
            query = query.filter(Player.is_active.is_(is_active))
        return query.order_by(Player.full_name).all()

    @staticmethod
    def _ensure_email_free(db: Session, email: str, exclude_id: Optional[str] = None) -> None:
        query = db.query(Player.id).filter(
            func.lower(Player.email) == email,
            Player.deleted_at.is_(None)
        )
        if exclude_id is not None:
            query = query.filter(Player.id != exclude_id)
        if query.first():
            raise EmailAlreadyRegistered(email)

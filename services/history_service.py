"""
Player history service.

Builds a per-player board history across rounds so the frontend can render
results (winning numbers, winning flag, price) directly from the server.
"""
from typing import List, Dict, Any

from sqlalchemy.orm import Session

from models import Board, Player, Round
from core.exceptions import PlayerNotFound


def get_player_round_history(player_id: str, db: Session) -> List[Dict[str, Any]]:
    """
    Return one entry per non-deleted board of the player, newest round first.

    Rounds that are still open carry winning_numbers = None and
    is_winning = False.
    """
    player_exists = db.query(Player.id).filter(
        Player.id == player_id,
        Player.deleted_at.is_(None)
    ).first()
    if not player_exists:
        raise PlayerNotFound(player_id)

    rows = (
        db.query(Board, Round)
        .join(Round, Board.round_id == Round.id)
        .filter(
            Board.player_id == player_id,
            Board.deleted_at.is_(None),
            Round.deleted_at.is_(None),
        )
        .order_by(Round.year.desc(), Round.week_number.desc(), Board.created_at.desc())
        .all()
    )

    history: List[Dict[str, Any]] = []

    for board, round_obj in rows:
        history.append({
            "round_id": round_obj.id,
            "year": round_obj.year,
            "week_number": round_obj.week_number,
            "round_closed_at": round_obj.closed_at,
            "board_id": board.id,
            "numbers": list(board.numbers),
            "price": board.price,
            "board_created_at": board.created_at,
            "winning_numbers": list(round_obj.winning_numbers) if round_obj.winning_numbers else None,
            "is_winning": board.is_winning,
        })

    return history

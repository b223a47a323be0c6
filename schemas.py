"""
Request / response models for the HTTP adapter

Validation of business rules stays in the core; these models only describe
shapes, so rule violations come back as the core's InvalidArgument (400).
"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models import TransactionStatus


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ============ Player ============

class PlayerCreate(BaseModel):
    full_name: str
    email: str
    phone: str


class PlayerUpdate(BaseModel):
    full_name: str
    phone: str
    email: Optional[str] = None


class PlayerResponse(ORMModel):
    id: str
    full_name: str
    email: str
    phone: str
    is_active: bool
    activated_at: Optional[datetime] = None
    created_at: datetime


# ============ Round ============

class RoundResponse(ORMModel):
    id: str
    year: int
    week_number: int
    winning_numbers: Optional[List[int]] = None
    is_active: bool
    created_at: datetime
    closed_at: Optional[datetime] = None


class ActiveRoundResponse(RoundResponse):
    purchase_cutoff: datetime


class WinningNumbersSubmit(BaseModel):
    winning_numbers: List[int]


class RoundClosureResponse(ORMModel):
    round_id: str
    year: int
    week_number: int
    winning_numbers: List[int]
    total_boards: int
    winning_boards: int
    digital_revenue: int
    prize_pool: int
    organization_share: int
    next_round_id: Optional[str] = None
    rollover_board_ids: List[str] = Field(default_factory=list)


# ============ Board ============

class BoardPurchase(BaseModel):
    numbers: List[int]
    repeat_weeks: int = 0
    # defaults to the active round
    round_id: Optional[str] = None


class BoardResponse(ORMModel):
    id: str
    player_id: str
    round_id: str
    numbers: List[int]
    price: int
    is_winning: bool
    repeat_weeks_remaining: int
    repeat_active: bool
    created_at: datetime


class PriceTableResponse(BaseModel):
    prices: Dict[int, int]


class PlayerHistoryItem(BaseModel):
    round_id: str
    year: int
    week_number: int
    round_closed_at: Optional[datetime] = None
    board_id: str
    numbers: List[int]
    price: int
    board_created_at: datetime
    winning_numbers: Optional[List[int]] = None
    is_winning: bool


# ============ Transaction ============

class TransactionSubmit(BaseModel):
    external_reference: str
    amount: int


class AdminTransactionSubmit(TransactionSubmit):
    player_id: str


class TransactionReject(BaseModel):
    reason: Optional[str] = None


class TransactionResponse(ORMModel):
    id: str
    player_id: str
    external_reference: str
    amount: int
    status: TransactionStatus
    created_at: datetime
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None


class BalanceResponse(BaseModel):
    player_id: str
    balance: int

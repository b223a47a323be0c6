"""
Scoring service: winning rule and revenue reporting

Pure computation, the Round/Board state changes are done by RoundManager
"""
from typing import Iterable, Tuple

PRIZE_POOL_PERCENT = 70
ORGANIZATION_PERCENT = 30


def is_winning_board(board_numbers: Iterable[int], winning_numbers: Iterable[int]) -> bool:
    """
    A board wins when it contains all three winning numbers

    The rule is "superset", not "equal": extra numbers on a 6-8 number board
    never disqualify it, which is why bigger boards cost more.

    Examples:
        is_winning_board([1, 2, 3, 4, 5], [1, 2, 3]) -> True
        is_winning_board([1, 2, 3, 4, 5], [1, 2, 6]) -> False
    """
    return set(board_numbers).issuperset(winning_numbers)


def split_revenue(revenue: int) -> Tuple[int, int]:
    """
    Informational 70/30 split of gross digital revenue

    Returns (prize_pool, organization). Integer amounts: the prize pool is
    rounded down and the organization share takes the remainder, so the two
    always add up to `revenue`.
    """
    prize_pool = revenue * PRIZE_POOL_PERCENT // 100
    return prize_pool, revenue - prize_pool

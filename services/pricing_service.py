"""
Pricing service: board number validation and the count -> price table

Pure computation, no state transitions
"""
from typing import Iterable, List

from core.exceptions import InvalidArgument

MIN_NUMBER = 1
MAX_NUMBER = 16

# public constant, every consumer displaying prices must mirror it
PRICE_TABLE = {5: 20, 6: 40, 7: 80, 8: 160}

WINNING_NUMBER_COUNT = 3


def _validate_distinct_in_range(numbers: List[int], what: str) -> None:
    if any(isinstance(n, bool) or not isinstance(n, int) for n in numbers):
        raise InvalidArgument(f"{what} must be integers")

    if len(set(numbers)) != len(numbers):
        raise InvalidArgument(f"{what} must be distinct")

    if any(n < MIN_NUMBER or n > MAX_NUMBER for n in numbers):
        raise InvalidArgument(f"{what} must be between {MIN_NUMBER} and {MAX_NUMBER}")


def validate_board_numbers(numbers: Iterable[int]) -> List[int]:
    """
    Validate a board's numbers and return them in canonical (ascending) order

    Rules:
    - 5 to 8 numbers
    - all distinct
    - each in [1, 16]

    Raises:
        InvalidArgument: any rule is broken
    """
    numbers = list(numbers)

    if len(numbers) not in PRICE_TABLE:
        raise InvalidArgument(
            f"Board must have between {min(PRICE_TABLE)} and {max(PRICE_TABLE)} numbers, "
            f"got {len(numbers)}"
        )

    _validate_distinct_in_range(numbers, "Board numbers")
    return sorted(numbers)


def validate_winning_numbers(numbers: Iterable[int]) -> List[int]:
    """Exactly 3 distinct numbers in [1, 16], returned sorted"""
    numbers = list(numbers)

    if len(numbers) != WINNING_NUMBER_COUNT:
        raise InvalidArgument(
            f"Exactly {WINNING_NUMBER_COUNT} winning numbers are required, got {len(numbers)}"
        )

    _validate_distinct_in_range(numbers, "Winning numbers")
    return sorted(numbers)


def price_for_count(count: int) -> int:
    """
    Weekly price of a board with `count` numbers

    5 -> 20, 6 -> 40, 7 -> 80, 8 -> 160 (doubles per extra number)
    """
    try:
        return PRICE_TABLE[count]
    except KeyError:
        raise InvalidArgument(f"No price for a board with {count} numbers")


def charge_for_purchase(weekly_price: int, repeat_weeks: int) -> int:
    """
    Amount charged at purchase time

    A repeating board prepays the whole repeat span up front; rollover boards
    created at round closure are free.
    """
    return weekly_price * repeat_weeks if repeat_weeks > 0 else weekly_price

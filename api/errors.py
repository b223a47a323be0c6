"""
Map core error kinds to HTTP status codes

The core only raises; deciding what the client sees happens here.
"""
from fastapi import HTTPException

from core.exceptions import (
    DeadlinePassed,
    Forbidden,
    InsufficientBalance,
    InvalidArgument,
    InvalidState,
    LotteryException,
    NotFound,
)

STATUS_BY_KIND = [
    (InvalidArgument, 400),
    (InsufficientBalance, 402),
    (Forbidden, 403),
    (NotFound, 404),
    (InvalidState, 409),
    (DeadlinePassed, 409),
]


def to_http_exception(exc: LotteryException) -> HTTPException:
    for kind, status_code in STATUS_BY_KIND:
        if isinstance(exc, kind):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))

"""
Custom exception classes

All business rule errors live here so the API layer can map them in one place.
Every concrete error derives from exactly one of the six error kinds:
InvalidArgument, NotFound, Forbidden, InvalidState, DeadlinePassed,
InsufficientBalance.
"""


class LotteryException(Exception):
    """Base class for every lottery error"""
    pass


# ============ Error kinds ============

class InvalidArgument(LotteryException):
    """Malformed input (numbers, counts, amounts), always fixable by the caller"""
    pass


class NotFound(LotteryException):
    """A Player / Round / Transaction / Board does not exist or is soft-deleted"""
    pass


class Forbidden(LotteryException):
    """The caller may not perform this action"""
    pass


class InvalidState(LotteryException):
    """The entity is not in a state that allows this action"""
    pass


class DeadlinePassed(LotteryException):
    """The purchase cutoff for the round has passed"""
    pass


class InsufficientBalance(LotteryException):
    """The player's balance does not cover the charge"""
    def __init__(self, balance: int, required: int):
        self.balance = balance
        self.required = required
        super().__init__(
            f"Not enough balance: {balance} available, {required} required"
        )


# ============ Player ============

class PlayerNotFound(NotFound):
    def __init__(self, player_id):
        self.player_id = player_id
        super().__init__(f"Player {player_id} not found")


class InactivePlayer(Forbidden):
    """Only active players can buy boards"""
    def __init__(self, player_id):
        self.player_id = player_id
        super().__init__(f"Player {player_id} is not active")


class EmailAlreadyRegistered(InvalidArgument):
    def __init__(self, email):
        self.email = email
        super().__init__(f"Player with email {email} already exists")


# ============ Round ============

class RoundNotFound(NotFound):
    def __init__(self, round_id):
        self.round_id = round_id
        super().__init__(f"Round {round_id} not found")


class NoActiveRound(NotFound):
    """No active round exists, which means seeding has not run or data is broken"""
    def __init__(self):
        super().__init__("No active round found")


class RoundNotActive(InvalidState):
    def __init__(self, round_id):
        self.round_id = round_id
        super().__init__(f"Round {round_id} is not active")


class WinningNumbersAlreadySet(InvalidState):
    def __init__(self, round_id):
        self.round_id = round_id
        super().__init__(f"Winning numbers already set for round {round_id}")


class ActiveRoundInvariantViolated(InvalidState):
    """More than one round is flagged active"""
    pass


# ============ Board ============

class BoardNotFound(NotFound):
    def __init__(self, board_id):
        self.board_id = board_id
        super().__init__(f"Board {board_id} not found")


# ============ Transaction ============

class TransactionNotFound(NotFound):
    def __init__(self, transaction_id):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found")


class TransactionNotPending(InvalidState):
    """Approved and Rejected are terminal"""
    def __init__(self, transaction_id, status):
        self.transaction_id = transaction_id
        self.status = status
        super().__init__(
            f"Transaction {transaction_id} is {status}, only pending transactions can change"
        )


class DuplicateExternalReference(InvalidArgument):
    """A non-deleted transaction already uses this payment reference"""
    def __init__(self, reference):
        self.reference = reference
        super().__init__(f"A transaction with reference {reference} already exists")

"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Caller identity / permission
  2xxx: Ledger balances
  3xxx: Bill (listing)
  4xxx: Order (deal)
  5xxx: Challenge
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


class NotFoundError(AppError):
    """Referenced Bill/Order/Challenge does not exist."""


# --- 1xxx: Caller ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid or expired token", 401)


class PermissionDeniedError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(1002, f"Permission denied: {detail}", 403)


# --- 2xxx: Ledger ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required}, available {available}",
            422,
        )


class InsufficientFundsError(AppError):
    def __init__(self, account: str, amount: int) -> None:
        super().__init__(2002, f"Insufficient funds in {account} to transfer {amount}", 422)


# --- 3xxx: Bill ---

class BillNotFoundError(NotFoundError):
    def __init__(self, bill_id: int) -> None:
        super().__init__(3001, f"Bill not found: {bill_id}", 404)


# --- 4xxx: Order ---

class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: int) -> None:
        super().__init__(4001, f"Order not found: {order_id}", 404)


class InvalidRangeError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4002, f"Invalid range: {detail}", 422)


class InvalidStateError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4003, f"Invalid state: {detail}", 409)


class CommitmentMismatchError(AppError):
    def __init__(self, order_id: int) -> None:
        super().__init__(
            4004, f"Commitment does not match the one proposed for order {order_id}", 409
        )


# --- 5xxx: Challenge ---

class ChallengeNotFoundError(NotFoundError):
    def __init__(self, challenge_id: int) -> None:
        super().__init__(5001, f"Challenge not found: {challenge_id}", 404)


class ChallengeVerificationFailedError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5002, f"Challenge verification failed: {detail}", 422)


class TimeoutNotElapsedError(AppError):
    def __init__(self, challenge_id: int, deadline: int) -> None:
        super().__init__(
            5003,
            f"Challenge {challenge_id} response window open until {deadline}",
            409,
        )


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)

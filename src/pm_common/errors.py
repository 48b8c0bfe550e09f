"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth
  3xxx: Pool lifecycle (phase, timing, authorization)
  5xxx: Position / token balances
  9xxx: System

Every settlement rejection is terminal for that single operation; nothing here
is retried by the service.
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


# --- 1xxx: Auth ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid or expired credentials", 401)


# --- 3xxx: Pool ---

class PoolNotFoundError(AppError):
    def __init__(self, pool_id: str) -> None:
        super().__init__(3001, f"Pool not found: {pool_id}", 404)


class InvalidParametersError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3002, f"Invalid pool parameters: {detail}", 422)


class PoolClosedError(AppError):
    def __init__(self, pool_id: str) -> None:
        super().__init__(3003, f"Pool is closed for funding: {pool_id}", 422)


class UnauthorizedError(AppError):
    def __init__(self, caller: str) -> None:
        super().__init__(3004, f"Caller {caller} is not the pool authority", 403)


class TooEarlyError(AppError):
    def __init__(self, pool_id: str) -> None:
        super().__init__(3005, f"Betting period has not ended yet: {pool_id}", 422)


class AlreadyProposedError(AppError):
    def __init__(self, pool_id: str) -> None:
        super().__init__(3006, f"Solution has already been proposed: {pool_id}", 409)


class NotProposedError(AppError):
    def __init__(self, pool_id: str) -> None:
        super().__init__(3007, f"No solution has been proposed yet: {pool_id}", 422)


class DisputeWindowClosedError(AppError):
    def __init__(self, pool_id: str) -> None:
        super().__init__(3008, f"Dispute period has ended: {pool_id}", 422)


class AlreadyDisputedError(AppError):
    def __init__(self, pool_id: str) -> None:
        super().__init__(3009, f"Pool is already disputed: {pool_id}", 409)


class InsufficientStakeToDisputeError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            3010,
            f"Insufficient losing-side tokens to dispute: required {required}, "
            f"available {available}",
            422,
        )


class NotReadyError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3011, f"Pool cannot be finalized yet: {detail}", 422)


class AlreadyFinalizedError(AppError):
    def __init__(self, pool_id: str) -> None:
        super().__init__(3012, f"Pool is already finalized: {pool_id}", 409)


class NotDisputedError(AppError):
    def __init__(self, pool_id: str) -> None:
        super().__init__(3013, f"Pool is not disputed: {pool_id}", 422)


class PoolNotFinalizedError(AppError):
    def __init__(self, pool_id: str) -> None:
        super().__init__(3014, f"Pool has not been finalized yet: {pool_id}", 422)


# --- 5xxx: Position ---

class InvalidAmountError(AppError):
    def __init__(self, amount: int, detail: str = "must be positive") -> None:
        super().__init__(5001, f"Invalid amount {amount}: {detail}", 422)


class NothingToClaimError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(5002, f"User {user_id} holds no winning tokens", 422)


class InsufficientTokenBalanceError(AppError):
    def __init__(self, token_kind: str, required: int, available: int) -> None:
        super().__init__(
            5003,
            f"Insufficient {token_kind} balance: required {required}, available {available}",
            422,
        )


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)

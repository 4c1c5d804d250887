"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Phase violations (operation outside its phase)
  2xxx: Encoding violations (lengths, bounds, malformed fields)
  3xxx: Cross-check violations (decoded value != ledger expectation)
  4xxx: State violations (double actions, missing records, gate/owner)
  5xxx: Custody violations (escrow, liquidity, transfers)
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


# --- 1xxx: Phase ---

class WrongPhaseError(AppError):
    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(1001, f"Wrong phase: expected {expected}, actual {actual}", 409)


class ActiveBatchExistsError(AppError):
    def __init__(self, market_id: str, batch_id: int) -> None:
        super().__init__(
            1002, f"Market {market_id} already has active batch {batch_id}", 409
        )


class BatchNotFoundError(AppError):
    def __init__(self, market_id: str, batch_id: int) -> None:
        super().__init__(1003, f"Batch not found: {market_id}/{batch_id}", 404)


# --- 2xxx: Encoding ---

class PublicInputLengthError(AppError):
    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            2001, f"Public input length mismatch: expected {expected}, got {actual}", 422
        )


class PublicInputOverflowError(AppError):
    def __init__(self, index: int, value: int, bound: int) -> None:
        self.index = index
        self.value = value
        self.bound = bound
        super().__init__(
            2002,
            f"Public input [{index}] out of range: value {value}, bound {bound}",
            422,
        )


class InvalidPoolConfigError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2003, f"Invalid pool config: {detail}", 422)


class InvalidOrderError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2004, f"Invalid order: {detail}", 422)


class ZeroCommitmentError(AppError):
    def __init__(self) -> None:
        super().__init__(2005, "Commitment hash must be non-zero", 422)


class InvalidAddressError(AppError):
    def __init__(self, value: str) -> None:
        super().__init__(2006, f"Invalid address: {value}", 422)


# --- 3xxx: Cross-check ---

class CrossCheckError(AppError):
    """A submitted value disagrees with what the ledger expects."""

    code_value = 3000
    field_name = "value"

    def __init__(self, expected: object, actual: object) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            self.code_value,
            f"{self.field_name} mismatch: expected {expected}, got {actual}",
            422,
        )


class CommitmentMismatchError(CrossCheckError):
    code_value = 3001
    field_name = "Commitment hash"


class BatchIdMismatchError(CrossCheckError):
    code_value = 3002
    field_name = "Batch id"


class OrderCountMismatchError(CrossCheckError):
    code_value = 3003
    field_name = "Order count"


class OrdersRootMismatchError(CrossCheckError):
    code_value = 3004
    field_name = "Orders root"


class AllowListRootMismatchError(CrossCheckError):
    code_value = 3005
    field_name = "Allow-list root"


class FeeRateMismatchError(CrossCheckError):
    code_value = 3006
    field_name = "Fee rate"


class ProtocolFeeMismatchError(CrossCheckError):
    code_value = 3007
    field_name = "Protocol fee"


class PhantomMatchError(AppError):
    def __init__(self, buy_volume: int, sell_volume: int) -> None:
        super().__init__(
            3008,
            f"Zero clearing price with non-zero volume: buy {buy_volume}, sell {sell_volume}",
            422,
        )


class FillVolumeMismatchError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3009, f"Fills inconsistent with volumes: {detail}", 422)


class InvalidProofError(AppError):
    def __init__(self) -> None:
        super().__init__(3010, "Proof rejected by verifier", 422)


# --- 4xxx: State ---

class MarketNotConfiguredError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(4001, f"Market not configured: {market_id}", 404)


class MarketAlreadyConfiguredError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(4002, f"Market already configured: {market_id}", 409)


class CommitmentExistsError(AppError):
    def __init__(self, trader: str, batch_id: int) -> None:
        super().__init__(4003, f"Trader {trader} already committed to batch {batch_id}", 409)


class CommitmentNotFoundError(AppError):
    def __init__(self, trader: str, batch_id: int) -> None:
        super().__init__(4004, f"No commitment for trader {trader} in batch {batch_id}", 404)


class InvalidStatusTransitionError(AppError):
    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(4005, f"Illegal status transition: {current} -> {target}", 409)


class AlreadyRefundedError(AppError):
    def __init__(self, trader: str, batch_id: int) -> None:
        super().__init__(4006, f"Trader {trader} already refunded for batch {batch_id}", 409)


class AlreadyClaimedError(AppError):
    def __init__(self, trader: str, batch_id: int) -> None:
        super().__init__(4007, f"Trader {trader} already claimed batch {batch_id}", 409)


class NothingToClaimError(AppError):
    def __init__(self, trader: str, batch_id: int) -> None:
        super().__init__(4008, f"Nothing to claim for trader {trader} in batch {batch_id}", 404)


class BatchAlreadySettledError(AppError):
    def __init__(self, batch_id: int) -> None:
        super().__init__(4009, f"Batch {batch_id} already settled", 409)


class BatchNotSettledError(AppError):
    def __init__(self, batch_id: int) -> None:
        super().__init__(4010, f"Batch {batch_id} not settled", 409)


class BatchAlreadyFinalizedError(AppError):
    def __init__(self, batch_id: int) -> None:
        super().__init__(4011, f"Batch {batch_id} already finalized", 409)


class BatchFullError(AppError):
    def __init__(self, capacity: int) -> None:
        super().__init__(4012, f"Batch is full: capacity {capacity}", 409)


class NotAllowListedError(AppError):
    def __init__(self, account: str) -> None:
        super().__init__(4013, f"Account {account} is not on the allow-list", 403)


class ProofGateDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(4014, "Proof verification is disabled", 503)


class NotOwnerError(AppError):
    def __init__(self, caller: str) -> None:
        super().__init__(4015, f"Caller {caller} is not the owner", 403)


class AccumulatorFullError(AppError):
    def __init__(self, capacity: int) -> None:
        super().__init__(4016, f"Order accumulator full: capacity {capacity}", 409)


# --- 5xxx: Custody ---

class InsufficientDepositError(AppError):
    def __init__(self, required: int, provided: int) -> None:
        self.required = required
        self.provided = provided
        super().__init__(
            5001, f"Insufficient deposit: required {required}, provided {provided}", 422
        )


class FillExceedsDepositError(AppError):
    def __init__(self, index: int, fill: int, deposit: int) -> None:
        super().__init__(
            5002, f"Fill [{index}] of {fill} exceeds deposit {deposit}", 422
        )


class TransferFailedError(AppError):
    def __init__(self, direction: str, token: str, account: str, amount: int) -> None:
        self.direction = direction
        super().__init__(
            5003, f"{direction} of {amount} {token} for {account} failed", 502
        )


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)

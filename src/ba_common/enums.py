"""Global enums — status sets are closed; transitions live with the domain models."""

from enum import Enum


class PoolMode(str, Enum):
    OPEN = "OPEN"
    GATED = "GATED"


class BatchPhase(str, Enum):
    """Declaration order is lifecycle order."""

    INACTIVE = "INACTIVE"
    COMMIT = "COMMIT"
    REVEAL = "REVEAL"
    SETTLE = "SETTLE"
    CLAIM = "CLAIM"
    FINALIZED = "FINALIZED"

    @property
    def rank(self) -> int:
        return list(BatchPhase).index(self)


class CommitmentStatus(str, Enum):
    NONE = "NONE"
    PENDING = "PENDING"
    REVEALED = "REVEALED"
    REFUNDED = "REFUNDED"


class ClaimStatus(str, Enum):
    NONE = "NONE"
    PENDING = "PENDING"
    CLAIMED = "CLAIMED"


class CustodyEntryType(str, Enum):
    ESCROW = "ESCROW"
    PAYOUT = "PAYOUT"

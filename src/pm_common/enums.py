"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class Side(str, Enum):
    YES = "YES"
    NO = "NO"

    @property
    def opposite(self) -> "Side":
        return Side.NO if self is Side.YES else Side.YES


class PoolPhase(str, Enum):
    """Derived lifecycle phase; not stored, computed from the pool flags."""
    FUNDING = "FUNDING"
    PROPOSED = "PROPOSED"
    DISPUTED = "DISPUTED"
    FINALIZED = "FINALIZED"


class Role(str, Enum):
    """Capability an operation requires of its caller."""
    ANY = "ANY"
    AUTHORITY = "AUTHORITY"
    LOSING_SIDE_STAKER = "LOSING_SIDE_STAKER"
    WINNING_SIDE_HOLDER = "WINNING_SIDE_HOLDER"


class PoolOperation(str, Enum):
    MINT = "MINT"
    PROPOSE = "PROPOSE"
    DISPUTE = "DISPUTE"
    RESOLVE = "RESOLVE"
    FINALIZE = "FINALIZE"
    CLAIM = "CLAIM"

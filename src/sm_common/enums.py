"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class OrderPhase(str, Enum):
    """Lifecycle phase derived from an order's commitment state."""
    UNCOMMITTED = "UNCOMMITTED"
    PROPOSED = "PROPOSED"
    ACTIVE = "ACTIVE"


class ChallengeOutcome(str, Enum):
    PROVED = "PROVED"
    SLASHED = "SLASHED"
    TIMED_OUT = "TIMED_OUT"


class DealEventType(str, Enum):
    BILL_CREATED = "BILL_CREATED"
    BILL_CANCELLED = "BILL_CANCELLED"
    BILL_EXHAUSTED = "BILL_EXHAUSTED"
    ORDER_CREATED = "ORDER_CREATED"
    ORDER_CANCELLED = "ORDER_CANCELLED"
    ORDER_PREPARED = "ORDER_PREPARED"
    ORDER_ACTIVATED = "ORDER_ACTIVATED"
    ORDER_WITHDRAWN = "ORDER_WITHDRAWN"
    ORDER_FINISHED = "ORDER_FINISHED"
    CHALLENGE_STARTED = "CHALLENGE_STARTED"
    CHALLENGE_PROVED = "CHALLENGE_PROVED"
    ORDER_SLASHED = "ORDER_SLASHED"


class LedgerEntryType(str, Enum):
    TRANSFER_OUT = "TRANSFER_OUT"
    TRANSFER_IN = "TRANSFER_IN"

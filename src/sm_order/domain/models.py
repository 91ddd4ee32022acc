"""Order domain model — pure dataclasses, no SQLAlchemy dependency.

An order's data commitment moves through a tagged variant instead of loose
optional fields:

    Uncommitted ──prepare──▶ Proposed(commitment, by) ──prepare(same)──▶ Activated(commitment, by, at)

`Activated` can only be built from a `Commitment`, and a `Commitment` refuses
a zero root, so an active order always carries a non-zero merkle root.
"""

from dataclasses import dataclass, field

from src.sm_common.enums import OrderPhase

ZERO_ROOT = bytes(32)


@dataclass(frozen=True)
class Commitment:
    merkle_root: bytes
    piece_size: int
    leaf_count: int

    def __post_init__(self) -> None:
        if len(self.merkle_root) != 32:
            raise ValueError(f"merkle_root must be 32 bytes, got {len(self.merkle_root)}")
        if self.merkle_root == ZERO_ROOT:
            raise ValueError("merkle_root must be non-zero")


@dataclass(frozen=True)
class Uncommitted:
    pass


@dataclass(frozen=True)
class Proposed:
    commitment: Commitment
    proposed_by: str


@dataclass(frozen=True)
class Activated:
    commitment: Commitment
    proposed_by: str
    active_time: int


CommitmentState = Uncommitted | Proposed | Activated


@dataclass
class Order:
    id: int
    user: str               # consumer
    storager: str           # provider
    asset: int
    price: int
    service_week: int
    user_deposit_amount: int
    storage_deposit_amount: int
    start_time: int
    last_withdraw_time: int
    bill_id: int            # originating listing, may no longer exist
    state: CommitmentState = field(default_factory=Uncommitted)

    @property
    def phase(self) -> OrderPhase:
        if isinstance(self.state, Activated):
            return OrderPhase.ACTIVE
        if isinstance(self.state, Proposed):
            return OrderPhase.PROPOSED
        return OrderPhase.UNCOMMITTED

    @property
    def is_active(self) -> bool:
        return isinstance(self.state, Activated)

    @property
    def commitment(self) -> Commitment | None:
        if isinstance(self.state, (Proposed, Activated)):
            return self.state.commitment
        return None

    @property
    def merkle_root(self) -> bytes:
        c = self.commitment
        return c.merkle_root if c else ZERO_ROOT

    @property
    def piece_size(self) -> int:
        c = self.commitment
        return c.piece_size if c else 0

    @property
    def leaf_count(self) -> int:
        c = self.commitment
        return c.leaf_count if c else 0

    @property
    def active_time(self) -> int:
        return self.state.active_time if isinstance(self.state, Activated) else 0

    @property
    def first_prepare(self) -> str | None:
        if isinstance(self.state, (Proposed, Activated)):
            return self.state.proposed_by
        return None

    def is_party(self, account: str) -> bool:
        return account in (self.user, self.storager)

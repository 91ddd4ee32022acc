"""Challenge domain model — pure dataclass, no SQLAlchemy dependency."""

from dataclasses import dataclass

from src.sm_common.clock import CHALLENGE_WINDOW_SECONDS


@dataclass
class Challenge:
    id: int
    order_id: int
    index: int          # advisory: the proof path does not bind it
    mhash: bytes        # committed piece hash, root of that piece's chunk tree
    start_time: int

    @property
    def deadline(self) -> int:
        """Last instant at which the response window is still open."""
        return self.start_time + CHALLENGE_WINDOW_SECONDS

    def has_expired(self, now: int) -> bool:
        return now > self.deadline

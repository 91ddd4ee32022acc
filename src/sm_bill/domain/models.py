"""Bill domain model — pure dataclass, no SQLAlchemy dependency."""

from dataclasses import dataclass


@dataclass
class Bill:
    id: int
    owner: str
    asset: int              # remaining listable capacity units
    price: int              # per unit, per week
    capacity: int           # minimum tradeable unit; orders buy exact multiples
    min_service_week: int
    max_service_week: int
    deposit_amount: int     # remaining collateral locked in escrow
    start_time: int

    def accepts_week(self, service_week: int) -> bool:
        return self.min_service_week <= service_week <= self.max_service_week

    def collateral_for(self, asset: int) -> int:
        """Collateral slice for `asset` units; floor division leaves the remainder here."""
        return self.deposit_amount * asset // self.asset

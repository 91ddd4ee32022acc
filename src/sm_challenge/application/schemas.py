# src/sm_challenge/application/schemas.py
from pydantic import BaseModel, Field

from src.sm_challenge.domain.models import Challenge
from src.sm_common.hexcodec import HexBytes, HexHash
from src.sm_common.limits import PG_BIGINT_MAX
from src.sm_engine.engine.engine import ChallengeResolution


class StartChallengeRequest(BaseModel):
    order_id: int = Field(..., gt=0, le=PG_BIGINT_MAX)
    piece_index: int = Field(..., ge=0, le=PG_BIGINT_MAX)
    mhash: HexHash = Field(..., description="Claimed hash of the challenged piece")
    proofs: list[HexHash] = Field(default_factory=list, description="Siblings from piece to root")


class ProveChallengeRequest(BaseModel):
    chunk_data: HexBytes = Field(..., description="Raw bytes of the answering chunk")
    subpath: list[HexHash] = Field(default_factory=list, description="Siblings from chunk to mhash")


class ChallengeResponse(BaseModel):
    id: int
    order_id: int
    piece_index: int
    mhash: str
    start_time: int
    deadline: int

    @classmethod
    def from_domain(cls, challenge: Challenge) -> "ChallengeResponse":
        return cls(
            id=challenge.id,
            order_id=challenge.order_id,
            piece_index=challenge.index,
            mhash=challenge.mhash.hex(),
            start_time=challenge.start_time,
            deadline=challenge.deadline,
        )


class SettlementResponse(BaseModel):
    user_payout: int
    user_compensation: int
    forfeited: int


class ChallengeResolutionResponse(BaseModel):
    challenge_id: int
    order_id: int
    outcome: str
    settlement: SettlementResponse | None = None

    @classmethod
    def from_result(cls, result: ChallengeResolution) -> "ChallengeResolutionResponse":
        settlement = None
        if result.settlement is not None:
            settlement = SettlementResponse(
                user_payout=result.settlement.user_payout,
                user_compensation=result.settlement.user_compensation,
                forfeited=result.settlement.forfeited,
            )
        return cls(
            challenge_id=result.challenge_id,
            order_id=result.order_id,
            outcome=result.outcome.value,
            settlement=settlement,
        )

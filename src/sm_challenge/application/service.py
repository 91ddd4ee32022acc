# src/sm_challenge/application/service.py
from src.sm_challenge.application.schemas import (
    ChallengeResolutionResponse,
    ChallengeResponse,
    ProveChallengeRequest,
    StartChallengeRequest,
)
from src.sm_common.errors import ChallengeNotFoundError
from src.sm_engine.engine.engine import MarketEngine


async def start_challenge(
    engine: MarketEngine, req: StartChallengeRequest, account: str
) -> ChallengeResponse:
    challenge = await engine.start_challenge(
        account, req.order_id, req.piece_index, req.mhash, req.proofs
    )
    return ChallengeResponse.from_domain(challenge)


async def prove_challenge(
    engine: MarketEngine, challenge_id: int, req: ProveChallengeRequest, account: str
) -> ChallengeResolutionResponse:
    result = await engine.prove_challenge(account, challenge_id, req.chunk_data, req.subpath)
    return ChallengeResolutionResponse.from_result(result)


async def end_challenge(
    engine: MarketEngine, challenge_id: int, account: str
) -> ChallengeResolutionResponse:
    result = await engine.end_challenge(account, challenge_id)
    return ChallengeResolutionResponse.from_result(result)


async def get_challenge(engine: MarketEngine, challenge_id: int) -> ChallengeResponse:
    challenge = await engine.get_challenge(challenge_id)
    if challenge is None:
        raise ChallengeNotFoundError(challenge_id)
    return ChallengeResponse.from_domain(challenge)

"""sm_challenge REST API — proof-of-storage challenges. All endpoints require JWT."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from src.sm_challenge.application import service as svc
from src.sm_challenge.application.schemas import ProveChallengeRequest, StartChallengeRequest
from src.sm_common.response import ApiResponse, success_response
from src.sm_engine.application.service import get_market_engine
from src.sm_engine.engine.engine import MarketEngine
from src.sm_gateway.auth.dependencies import get_current_account

router = APIRouter(prefix="/challenges", tags=["challenges"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def start_challenge(
    body: StartChallengeRequest,
    account: Annotated[str, Depends(get_current_account)],
    engine: Annotated[MarketEngine, Depends(get_market_engine)],
    request: Request,
) -> ApiResponse:
    data = await svc.start_challenge(engine, body, account)
    return success_response(data, request)


@router.post("/{challenge_id}/proof")
async def prove_challenge(
    challenge_id: int,
    body: ProveChallengeRequest,
    account: Annotated[str, Depends(get_current_account)],
    engine: Annotated[MarketEngine, Depends(get_market_engine)],
    request: Request,
) -> ApiResponse:
    data = await svc.prove_challenge(engine, challenge_id, body, account)
    return success_response(data, request)


@router.post("/{challenge_id}/end")
async def end_challenge(
    challenge_id: int,
    account: Annotated[str, Depends(get_current_account)],
    engine: Annotated[MarketEngine, Depends(get_market_engine)],
    request: Request,
) -> ApiResponse:
    data = await svc.end_challenge(engine, challenge_id, account)
    return success_response(data, request)


@router.get("/{challenge_id}")
async def get_challenge(
    challenge_id: int,
    account: Annotated[str, Depends(get_current_account)],
    engine: Annotated[MarketEngine, Depends(get_market_engine)],
    request: Request,
) -> ApiResponse:
    data = await svc.get_challenge(engine, challenge_id)
    return success_response(data, request)

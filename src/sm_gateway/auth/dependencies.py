"""FastAPI dependency: get_current_account.

Usage in any protected router:
    from src.sm_gateway.auth.dependencies import get_current_account

    @router.post("/bills")
    async def create(account: Annotated[str, Depends(get_current_account)]):
        ...
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from src.sm_common.errors import InvalidCredentialsError
from src.sm_gateway.auth.jwt_handler import decode_access_token

# Tokens come from the external identity service; tokenUrl only feeds Swagger UI.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_account(
    request: Request,
    token: str = Depends(oauth2_scheme),
) -> str:
    """Return the ledger account id named by the Bearer token.

    Raises HTTP 401 if the token is missing, invalid, or expired. The account
    id is also stored on request.state for the rate limiter and request log.
    """
    try:
        account_id = decode_access_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None
    request.state.account_id = account_id
    return account_id

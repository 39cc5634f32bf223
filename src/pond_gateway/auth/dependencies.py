"""FastAPI dependencies: the optional and the required caller.

Anonymous requests are allowed on settlement and queries. Tosses and top-ups
pull funds from the token subject, so they require a token. Role-gated engine
operations reject anonymous callers with PermissionDeniedError.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.pond_common.errors import InvalidCredentialsError
from src.pond_gateway.auth.jwt_handler import caller_from_token
from src.pond_gateway.auth.roles import ANONYMOUS, Caller

_bearer = HTTPBearer(auto_error=False)

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_optional_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> Caller:
    """Caller from the Bearer token, or ANONYMOUS when no token was sent.

    A token that is present but invalid is still a 401.
    """
    if credentials is None:
        return ANONYMOUS
    try:
        return caller_from_token(credentials.credentials)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None


async def get_current_caller(caller: Caller = Depends(get_optional_caller)) -> Caller:
    if caller is ANONYMOUS:
        raise _CREDENTIALS_EXCEPTION
    return caller

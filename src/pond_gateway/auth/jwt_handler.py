"""JWT token creation and verification.

HS256 with the shared JWT_SECRET. Tokens carry the caller address in `sub`
and the granted role names in `roles`. There is no revocation: a token is
valid until it expires, so keep JWT_EXPIRE_MINUTES short for admin tokens.
"""

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from config.settings import settings
from src.pond_common.enums import Role
from src.pond_common.errors import InvalidCredentialsError
from src.pond_gateway.auth.roles import Caller

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)


def create_access_token(address: str, roles: Iterable[Role] = ()) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": address,
        "roles": sorted(r.value for r in roles),
        "type": "access",
        "iat": now,
        "exp": now + _ACCESS_EXPIRE,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Raises:
        InvalidCredentialsError: bad signature, expired, wrong type or no subject.
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type") != "access" or not payload.get("sub"):
        raise InvalidCredentialsError()
    return payload


def caller_from_token(token: str) -> Caller:
    payload = decode_token(token)
    roles: set[Role] = set()
    for name in payload.get("roles") or []:
        try:
            roles.add(Role(name))
        except ValueError:
            # unknown role names grant nothing
            continue
    return Caller(address=str(payload["sub"]), roles=frozenset(roles))

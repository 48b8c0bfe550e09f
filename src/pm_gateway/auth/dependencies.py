"""FastAPI dependency: get_caller_identity.

Usage in any protected router:
    from src.pm_gateway.auth.dependencies import get_caller_identity

    @router.post("/pools/{pool_id}/dispute")
    async def dispute(caller: str = Depends(get_caller_identity)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.pm_common.errors import InvalidCredentialsError
from src.pm_gateway.auth.jwt_handler import decode_token

# tokenUrl is only advertised to Swagger UI; tokens are issued out of band.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_caller_identity(token: str = Depends(oauth2_scheme)) -> str:
    """Extract and validate the JWT Bearer token, return its subject.

    Raises HTTP 401 if the token is missing, invalid, or expired.
    """
    try:
        payload = decode_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    identity: str | None = payload.get("sub")
    if not identity:
        raise _CREDENTIALS_EXCEPTION
    return identity

"""
FastAPI dependencies for authentication.
"""
from typing import Annotated, Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from slowapi import Limiter

from catalog.features.users.auth import verify_jwt_token
from catalog.features.users.models import Principal


# auto_error=False: unauthenticated requests become the anonymous principal
security = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)]
) -> Principal:
    """
    Resolve the principal for the current request.

    Without credentials the anonymous principal (no roles) is returned and
    the policy guards deny every guarded action. A token that does not
    verify is rejected with 401.

    Usage:
        @router.get("/me")
        async def get_me(principal: Principal = Depends(get_current_principal)):
            return principal
    """
    if credentials is None:
        return Principal.anonymous()

    payload = verify_jwt_token(credentials.credentials)
    if not (payload.get("sub") or payload.get("id")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )
    return Principal.from_claims(payload)


def get_authorization_header(request) -> str:
    """
    Extract authorization header for rate limiting.
    Used with slowapi Limiter.
    """
    auth = request.headers.get("Authorization", "")
    return auth or "anonymous"


limiter = Limiter(key_func=get_authorization_header)

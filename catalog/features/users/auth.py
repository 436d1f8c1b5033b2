"""
Authentication utilities for bearer JWT verification and issuing.
"""
from datetime import datetime, timedelta, timezone
import jwt
from fastapi import HTTPException, status

from catalog.core import config
from catalog.features.users.models import Principal


def verify_jwt_token(token: str) -> dict:
    """
    Verify a bearer JWT and return its payload.

    Args:
        token: JWT token from Authorization header

    Returns:
        Decoded JWT payload containing the principal's claims

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        return jwt.decode(
            token,
            config.JWT_SECRET,
            algorithms=[config.JWT_ALGORITHM],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )


def create_jwt_token(principal: Principal, expires_in: int | None = None) -> str:
    """Issue a signed token carrying ``principal``'s claims."""
    now = datetime.now(timezone.utc)
    lifetime = config.JWT_EXPIRES_IN if expires_in is None else expires_in
    payload = principal.to_claims()
    payload["iat"] = now
    payload["exp"] = now + timedelta(seconds=lifetime)
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)

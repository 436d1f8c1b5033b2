"""
User feature routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, Request

from catalog.core import config
from catalog.features.permissions.actions import Action
from catalog.features.permissions.dependencies import check_instance_policy, check_policies, policy
from catalog.features.users.auth import create_jwt_token
from catalog.features.users.dependencies import get_current_principal, limiter
from catalog.features.users.models import Principal
from catalog.features.users.schemas import PrincipalResponse, TokenResponse


router = APIRouter(tags=["users"])


@router.get("/me", response_model=PrincipalResponse)
async def get_current_user_profile(
    principal: Annotated[Principal, Depends(check_instance_policy(Action.UserReadOwn, get_current_principal))]
):
    """Get the authenticated principal."""
    return PrincipalResponse(
        id=principal.id,
        username=principal.username,
        email=principal.email,
        roles=list(principal.roles),
        groups=sorted(principal.groups),
    )


@router.post(
    "/jwt",
    response_model=TokenResponse,
    dependencies=[Depends(check_policies(policy(Action.UserCreateJwt, "User")))],
)
@limiter.limit(config.JWT_RATE_LIMIT)
async def create_user_jwt(
    request: Request,
    principal: Annotated[Principal, Depends(get_current_principal)],
):
    """Issue a new token carrying the current principal's claims."""
    return TokenResponse(
        access_token=create_jwt_token(principal),
        expires_in=config.JWT_EXPIRES_IN,
    )

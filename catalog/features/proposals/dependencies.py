"""
Proposal dependency injection functions.
"""
from typing import Annotated
from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.database.engine import get_db
from catalog.features.proposals.models import Proposal
from catalog.features.proposals.service import ProposalsService
from catalog.features.users.dependencies import get_current_principal
from catalog.features.users.models import Principal


async def get_proposals_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> ProposalsService:
    return ProposalsService(db, principal.username)


async def get_proposal_or_404(
    proposal_id: str,
    service: Annotated[ProposalsService, Depends(get_proposals_service)],
) -> Proposal:
    """
    Get proposal by ID or raise 404.

    Raises:
        HTTPException: 404 if proposal not found
    """
    proposal = await service.find_one({"proposal_id": proposal_id})
    if proposal is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Proposal not found"
        )
    return proposal

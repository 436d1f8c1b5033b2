"""
Datablock dependency injection functions.
"""
from typing import Annotated
from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.database.engine import get_db
from catalog.features.datablocks.models import Datablock
from catalog.features.datablocks.service import DatablocksService
from catalog.features.users.dependencies import get_current_principal
from catalog.features.users.models import Principal


async def get_datablocks_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> DatablocksService:
    return DatablocksService(db, principal.username)


async def get_datablock_or_404(
    datablock_id: str,
    service: Annotated[DatablocksService, Depends(get_datablocks_service)],
) -> Datablock:
    datablock = await service.find_one({"id": datablock_id})
    if datablock is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Datablock not found"
        )
    return datablock

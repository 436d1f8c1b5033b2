"""
Attachment dependency injection functions.
"""
from typing import Annotated
from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.database.engine import get_db
from catalog.features.attachments.models import Attachment
from catalog.features.attachments.service import AttachmentsService
from catalog.features.users.dependencies import get_current_principal
from catalog.features.users.models import Principal


async def get_attachments_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> AttachmentsService:
    return AttachmentsService(db, principal.username)


async def get_attachment_or_404(
    attachment_id: str,
    service: Annotated[AttachmentsService, Depends(get_attachments_service)],
) -> Attachment:
    attachment = await service.find_one({"id": attachment_id})
    if attachment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Attachment not found"
        )
    return attachment

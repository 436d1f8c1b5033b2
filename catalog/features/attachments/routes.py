"""
Attachment routes by attachment ID.

Attachments are created through their parent (``/proposals/{id}/attachments``,
``/datasets/{pid}/attachments``).
"""
from typing import Annotated
from fastapi import APIRouter, Depends

from catalog.features.attachments.dependencies import get_attachment_or_404, get_attachments_service
from catalog.features.attachments.models import Attachment
from catalog.features.attachments.schemas import AttachmentResponse, AttachmentUpdate
from catalog.features.attachments.service import AttachmentsService
from catalog.features.permissions.actions import Action
from catalog.features.permissions.dependencies import check_instance_policy, check_policies, policy


router = APIRouter(tags=["attachments"])

AttachmentsServiceDep = Annotated[AttachmentsService, Depends(get_attachments_service)]

can_read_attachments = check_policies(policy(Action.Read, "Attachment"))


@router.get("/{attachment_id}", response_model=AttachmentResponse, dependencies=[Depends(can_read_attachments)])
async def get_attachment(attachment: Annotated[Attachment, Depends(get_attachment_or_404)]):
    """Get attachment by ID."""
    return attachment


@router.patch("/{attachment_id}", response_model=AttachmentResponse, dependencies=[Depends(can_read_attachments)])
async def update_attachment(
    update_data: AttachmentUpdate,
    attachment: Annotated[Attachment, Depends(check_instance_policy(Action.Update, get_attachment_or_404))],
    service: AttachmentsServiceDep,
):
    """Update an attachment (any with an update grant, otherwise only your own)."""
    return await service.apply_update(attachment, update_data)


@router.delete("/{attachment_id}", dependencies=[Depends(can_read_attachments)])
async def delete_attachment(
    attachment: Annotated[Attachment, Depends(check_instance_policy(Action.Delete, get_attachment_or_404))],
    service: AttachmentsServiceDep,
):
    """Delete an attachment."""
    await service.delete(attachment)
    return {"message": "Attachment deleted successfully"}

"""
Proposal feature routes, including nested attachments and datasets.
"""
from typing import Annotated, Any
from fastapi import APIRouter, Depends, HTTPException, Request, status

from catalog.core.database.service import parse_json_param, query_filters
from catalog.features.attachments.dependencies import get_attachments_service
from catalog.features.attachments.schemas import AttachmentCreate, AttachmentResponse, AttachmentUpdate
from catalog.features.attachments.service import AttachmentsService
from catalog.features.datasets.dependencies import can_read_datasets, get_dataset_scope, get_datasets_service
from catalog.features.datasets.schemas import DatasetResponse
from catalog.features.datasets.service import DatasetsService
from catalog.features.permissions.actions import Action
from catalog.features.permissions.dependencies import check_policies, policy
from catalog.features.proposals.dependencies import get_proposal_or_404, get_proposals_service
from catalog.features.proposals.models import Proposal
from catalog.features.proposals.schemas import ProposalCreate, ProposalResponse, ProposalUpdate
from catalog.features.proposals.service import ProposalsService


router = APIRouter(tags=["proposals"])

ProposalsServiceDep = Annotated[ProposalsService, Depends(get_proposals_service)]
AttachmentsServiceDep = Annotated[AttachmentsService, Depends(get_attachments_service)]


@router.post(
    "",
    response_model=ProposalResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_policies(policy(Action.Create, "Proposal")))],
)
async def create_proposal(proposal_data: ProposalCreate, service: ProposalsServiceDep):
    """Create a proposal."""
    return await service.create(proposal_data)


@router.get(
    "",
    response_model=list[ProposalResponse],
    dependencies=[Depends(check_policies(policy(Action.Read, "Proposal")))],
)
async def list_proposals(request: Request, service: ProposalsServiceDep):
    """List proposals; every query parameter is an equality filter on that field."""
    return await service.find_all(query_filters(request))


@router.get(
    "/fullquery",
    response_model=list[ProposalResponse],
    dependencies=[Depends(check_policies(policy(Action.Read, "Proposal")))],
)
async def fullquery_proposals(
    service: ProposalsServiceDep,
    fields: str | None = None,
    limits: str | None = None,
):
    """
    Search proposals.

    Parameters:
        fields (str): JSON object, e.g. {"text": "beam", "owner_group": "p1"}
        limits (str): JSON object with skip, limit and order ("start_time:desc")
    """
    return await service.fullquery(
        parse_json_param(fields, {}, "fields"),
        parse_json_param(limits, {}, "limits"),
    )


@router.get(
    "/fullfacet",
    response_model=list[dict[str, Any]],
    dependencies=[Depends(check_policies(policy(Action.Read, "Proposal")))],
)
async def fullfacet_proposals(
    service: ProposalsServiceDep,
    fields: str | None = None,
    facets: str | None = None,
):
    """Count proposals matching ``fields`` grouped by each column in ``facets`` (JSON list)."""
    return await service.fullfacet(
        parse_json_param(fields, {}, "fields"),
        parse_json_param(facets, [], "facets"),
    )


@router.get(
    "/{proposal_id}",
    response_model=ProposalResponse,
    dependencies=[Depends(check_policies(policy(Action.Read, "Proposal")))],
)
async def get_proposal(proposal: Annotated[Proposal, Depends(get_proposal_or_404)]):
    """Get proposal by ID."""
    return proposal


@router.patch(
    "/{proposal_id}",
    response_model=ProposalResponse,
    dependencies=[Depends(check_policies(policy(Action.Update, "Proposal")))],
)
async def update_proposal(
    update_data: ProposalUpdate,
    proposal: Annotated[Proposal, Depends(get_proposal_or_404)],
    service: ProposalsServiceDep,
):
    """Update proposal fields that are present in the body."""
    return await service.apply_update(proposal, update_data)


@router.delete(
    "/{proposal_id}",
    dependencies=[Depends(check_policies(policy(Action.Delete, "Proposal")))],
)
async def delete_proposal(
    proposal: Annotated[Proposal, Depends(get_proposal_or_404)],
    service: ProposalsServiceDep,
):
    """Delete a proposal."""
    await service.delete(proposal)
    return {"message": "Proposal deleted successfully"}


# Attachments of a proposal
@router.post(
    "/{proposal_id}/attachments",
    response_model=AttachmentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_policies(policy(Action.Create, "Attachment")))],
)
async def create_proposal_attachment(
    attachment_data: AttachmentCreate,
    proposal: Annotated[Proposal, Depends(get_proposal_or_404)],
    attachments: AttachmentsServiceDep,
):
    """Attach an image to a proposal."""
    return await attachments.create({**attachment_data.model_dump(), "proposal_id": proposal.proposal_id})


@router.get(
    "/{proposal_id}/attachments",
    response_model=list[AttachmentResponse],
    dependencies=[Depends(check_policies(policy(Action.Read, "Attachment")))],
)
async def list_proposal_attachments(proposal_id: str, attachments: AttachmentsServiceDep):
    """List the attachments of a proposal."""
    return await attachments.find_all({"proposal_id": proposal_id})


@router.patch(
    "/{proposal_id}/attachments/{attachment_id}",
    response_model=AttachmentResponse,
    dependencies=[Depends(check_policies(policy(Action.Update, "Attachment")))],
)
async def update_proposal_attachment(
    proposal_id: str,
    attachment_id: str,
    update_data: AttachmentUpdate,
    attachments: AttachmentsServiceDep,
):
    """Update one attachment of a proposal."""
    attachment = await attachments.find_one_and_update(
        {"id": attachment_id, "proposal_id": proposal_id}, update_data
    )
    if attachment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attachment not found")
    return attachment


@router.delete(
    "/{proposal_id}/attachments/{attachment_id}",
    dependencies=[Depends(check_policies(policy(Action.Delete, "Attachment")))],
)
async def delete_proposal_attachment(
    proposal_id: str,
    attachment_id: str,
    attachments: AttachmentsServiceDep,
):
    """Remove one attachment of a proposal."""
    attachment = await attachments.find_one_and_remove({"id": attachment_id, "proposal_id": proposal_id})
    if attachment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attachment not found")
    return {"message": "Attachment deleted successfully"}


@router.get(
    "/{proposal_id}/datasets",
    response_model=list[DatasetResponse],
    dependencies=[Depends(can_read_datasets)],
)
async def list_proposal_datasets(
    proposal_id: str,
    datasets: Annotated[DatasetsService, Depends(get_datasets_service)],
    scope: Annotated[dict[str, Any], Depends(get_dataset_scope)],
):
    """List the datasets measured under a proposal that the caller may list."""
    return await datasets.find_all({"proposal_id": proposal_id}, scope=scope)

"""
Dataset feature routes.

Listings are limited to the caller's groups unless they hold ``listall``.
Reads, updates and deletes are checked against the loaded dataset, so that
owners may change their own datasets without a blanket update grant.
"""
from typing import Annotated, Any
from fastapi import APIRouter, Depends, Request, status

from catalog.core.database.service import parse_json_param, query_filters
from catalog.features.attachments.dependencies import get_attachments_service
from catalog.features.attachments.schemas import AttachmentCreate, AttachmentResponse
from catalog.features.attachments.service import AttachmentsService
from catalog.features.datablocks.dependencies import get_datablocks_service
from catalog.features.datablocks.schemas import DatablockContent, DatablockResponse
from catalog.features.datablocks.service import DatablocksService
from catalog.features.datasets.dependencies import (
    can_read_datasets,
    get_dataset_or_404,
    get_dataset_scope,
    get_datasets_service,
    get_readable_dataset,
)
from catalog.features.datasets.models import Dataset
from catalog.features.datasets.schemas import DatasetCreate, DatasetResponse, DatasetUpdate
from catalog.features.datasets.service import DatasetsService
from catalog.features.permissions.actions import Action
from catalog.features.permissions.dependencies import check_instance_policy, check_policies, policy


router = APIRouter(tags=["datasets"])

DatasetsServiceDep = Annotated[DatasetsService, Depends(get_datasets_service)]
DatasetDep = Annotated[Dataset, Depends(get_dataset_or_404)]
DatasetScope = Annotated[dict[str, Any], Depends(get_dataset_scope)]


@router.post(
    "",
    response_model=DatasetResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_policies(policy(Action.Create, "Dataset")))],
)
async def create_dataset(dataset_data: DatasetCreate, service: DatasetsServiceDep):
    """Register a dataset. The caller becomes its ``created_by`` owner."""
    return await service.create(dataset_data)


@router.get("", response_model=list[DatasetResponse], dependencies=[Depends(can_read_datasets)])
async def list_datasets(request: Request, service: DatasetsServiceDep, scope: DatasetScope):
    """List datasets; every query parameter is an equality filter on that field."""
    return await service.find_all(query_filters(request), scope=scope)


@router.get("/fullquery", response_model=list[DatasetResponse], dependencies=[Depends(can_read_datasets)])
async def fullquery_datasets(
    service: DatasetsServiceDep,
    scope: DatasetScope,
    fields: str | None = None,
    limits: str | None = None,
):
    """Search datasets with JSON ``fields`` and ``limits``."""
    return await service.fullquery(
        parse_json_param(fields, {}, "fields"),
        parse_json_param(limits, {}, "limits"),
        scope,
    )


@router.get("/fullfacet", response_model=list[dict[str, Any]], dependencies=[Depends(can_read_datasets)])
async def fullfacet_datasets(
    service: DatasetsServiceDep,
    scope: DatasetScope,
    fields: str | None = None,
    facets: str | None = None,
):
    """Facet counts for datasets matching ``fields``."""
    return await service.fullfacet(
        parse_json_param(fields, {}, "fields"),
        parse_json_param(facets, [], "facets"),
        scope,
    )


@router.get("/{pid}", response_model=DatasetResponse, dependencies=[Depends(can_read_datasets)])
async def get_dataset(dataset: Annotated[Dataset, Depends(get_readable_dataset)]):
    """Get dataset by pid: any dataset with a readall grant, otherwise one of your groups'."""
    return dataset


@router.patch("/{pid}", response_model=DatasetResponse, dependencies=[Depends(can_read_datasets)])
async def update_dataset(
    update_data: DatasetUpdate,
    dataset: Annotated[Dataset, Depends(check_instance_policy(Action.Update, get_dataset_or_404))],
    service: DatasetsServiceDep,
):
    """Update a dataset (any dataset with an update grant, otherwise only your own)."""
    return await service.apply_update(dataset, update_data)


@router.delete("/{pid}", dependencies=[Depends(can_read_datasets)])
async def delete_dataset(
    dataset: Annotated[Dataset, Depends(check_instance_policy(Action.Delete, get_dataset_or_404))],
    service: DatasetsServiceDep,
):
    """Delete a dataset (any dataset with a delete grant, otherwise only your own)."""
    await service.delete(dataset)
    return {"message": "Dataset deleted successfully"}


# Datablocks of a dataset
@router.post(
    "/{pid}/datablocks",
    response_model=DatablockResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_policies(policy(Action.Create, "Datablock")))],
)
async def create_dataset_datablock(
    datablock_data: DatablockContent,
    dataset: DatasetDep,
    datablocks: Annotated[DatablocksService, Depends(get_datablocks_service)],
):
    """Add a datablock to a dataset."""
    return await datablocks.create({**datablock_data.model_dump(), "dataset_id": dataset.pid})


@router.get(
    "/{pid}/datablocks",
    response_model=list[DatablockResponse],
    dependencies=[Depends(check_policies(policy(Action.Read, "Datablock")))],
)
async def list_dataset_datablocks(
    pid: str,
    datablocks: Annotated[DatablocksService, Depends(get_datablocks_service)],
):
    """List the datablocks of a dataset."""
    return await datablocks.find_all({"dataset_id": pid})


# Attachments of a dataset
@router.post(
    "/{pid}/attachments",
    response_model=AttachmentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_policies(policy(Action.Create, "Attachment")))],
)
async def create_dataset_attachment(
    attachment_data: AttachmentCreate,
    dataset: DatasetDep,
    attachments: Annotated[AttachmentsService, Depends(get_attachments_service)],
):
    """Attach an image to a dataset."""
    return await attachments.create({**attachment_data.model_dump(), "dataset_id": dataset.pid})


@router.get(
    "/{pid}/attachments",
    response_model=list[AttachmentResponse],
    dependencies=[Depends(check_policies(policy(Action.Read, "Attachment")))],
)
async def list_dataset_attachments(
    pid: str,
    attachments: Annotated[AttachmentsService, Depends(get_attachments_service)],
):
    """List the attachments of a dataset."""
    return await attachments.find_all({"dataset_id": pid})

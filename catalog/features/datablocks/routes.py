"""
Datablock feature routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, Request, status

from catalog.core.database.service import query_filters
from catalog.features.datablocks.dependencies import get_datablock_or_404, get_datablocks_service
from catalog.features.datablocks.models import Datablock
from catalog.features.datablocks.schemas import DatablockCreate, DatablockResponse, DatablockUpdate
from catalog.features.datablocks.service import DatablocksService
from catalog.features.permissions.actions import Action
from catalog.features.permissions.dependencies import check_policies, policy


router = APIRouter(tags=["datablocks"])

DatablocksServiceDep = Annotated[DatablocksService, Depends(get_datablocks_service)]
DatablockDep = Annotated[Datablock, Depends(get_datablock_or_404)]


@router.post(
    "",
    response_model=DatablockResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_policies(policy(Action.Create, "Datablock")))],
)
async def create_datablock(datablock_data: DatablockCreate, service: DatablocksServiceDep):
    """Create a datablock."""
    return await service.create(datablock_data)


@router.get(
    "",
    response_model=list[DatablockResponse],
    dependencies=[Depends(check_policies(policy(Action.Read, "Datablock")))],
)
async def list_datablocks(
    request: Request,
    service: DatablocksServiceDep,
):
    """List datablocks; every query parameter is an equality filter on that field."""
    return await service.find_all(query_filters(request))


@router.get(
    "/{datablock_id}",
    response_model=DatablockResponse,
    dependencies=[Depends(check_policies(policy(Action.Read, "Datablock")))],
)
async def get_datablock(datablock: DatablockDep):
    """Get datablock by ID."""
    return datablock


@router.patch(
    "/{datablock_id}",
    response_model=DatablockResponse,
    dependencies=[Depends(check_policies(policy(Action.Update, "Datablock")))],
)
async def update_datablock(
    update_data: DatablockUpdate,
    datablock: DatablockDep,
    service: DatablocksServiceDep,
):
    """Update datablock fields present in the body."""
    return await service.apply_update(datablock, update_data)


@router.delete(
    "/{datablock_id}",
    dependencies=[Depends(check_policies(policy(Action.Delete, "Datablock")))],
)
async def delete_datablock(datablock: DatablockDep, service: DatablocksServiceDep):
    """Delete a datablock."""
    await service.delete(datablock)
    return {"message": "Datablock deleted successfully"}

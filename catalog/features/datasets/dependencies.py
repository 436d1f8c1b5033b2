"""
Dataset dependency injection functions.
"""
from typing import Annotated, Any
from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.database.engine import get_db
from catalog.features.datasets.models import Dataset
from catalog.features.datasets.service import DatasetsService
from catalog.features.permissions.ability import Ability
from catalog.features.permissions.actions import Action
from catalog.features.permissions.dependencies import (
    AuthorizationDenied,
    check_instance_policy,
    check_policies,
    policy,
)
from catalog.features.users.dependencies import get_current_principal
from catalog.features.users.models import Principal
from catalog.utils import get_logger


log = get_logger(__name__)

can_read_datasets = check_policies(policy(Action.Read, "Dataset"))


async def get_datasets_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> DatasetsService:
    return DatasetsService(db, principal.username)


async def get_dataset_or_404(
    pid: str,
    service: Annotated[DatasetsService, Depends(get_datasets_service)],
) -> Dataset:
    """
    Get dataset by pid or raise 404.

    Raises:
        HTTPException: 404 if dataset not found
    """
    dataset = await service.find_one({"pid": pid})
    if dataset is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Dataset not found"
        )
    return dataset


# Any dataset with ``readall``, otherwise only those owned by one of the caller's groups
get_readable_dataset = check_instance_policy((Action.ReadAll, Action.ReadOwn), get_dataset_or_404)


async def get_dataset_scope(
    principal: Annotated[Principal, Depends(get_current_principal)],
    ability: Annotated[Ability, Depends(can_read_datasets)],
) -> dict[str, Any]:
    """
    Filter limiting dataset listings to what the caller may list.

    ``listall`` lists everything, ``listown`` the datasets whose owner group
    is one of the caller's groups. Without either, listing is refused.
    """
    if ability.can(Action.ListAll, "Dataset"):
        return {}
    if ability.can(Action.ListOwn, "Dataset"):
        return {"owner_group": sorted(principal.groups)}
    log.info("Denied dataset listing for principal %s", principal.id)
    raise AuthorizationDenied()

"""
Attachment persistence service.
"""
from typing import Any, Mapping, Optional

from pydantic import BaseModel

from catalog.core.database.service import CatalogService
from catalog.features.attachments.models import Attachment


class AttachmentsService(CatalogService[Attachment]):
    model = Attachment

    async def find_one_and_update(
        self,
        filters: Mapping[str, Any],
        dto: BaseModel | Mapping[str, Any],
    ) -> Optional[Attachment]:
        return await self.update(filters, dto)

    async def find_one_and_remove(self, filters: Mapping[str, Any]) -> Optional[Attachment]:
        return await self.remove(filters)

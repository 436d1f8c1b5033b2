"""
Datablock persistence service.
"""
from catalog.core.database.service import CatalogService
from catalog.features.datablocks.models import Datablock


class DatablocksService(CatalogService[Datablock]):
    model = Datablock

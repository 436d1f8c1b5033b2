"""
Proposal persistence service.
"""
from catalog.core.database.service import CatalogService
from catalog.features.proposals.models import Proposal


class ProposalsService(CatalogService[Proposal]):
    model = Proposal

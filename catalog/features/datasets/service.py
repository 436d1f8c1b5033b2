"""
Dataset persistence service.

Besides the common filters, dataset searches accept ``fields.scientific``:
a list of conditions on values stored in ``scientific_metadata``.
"""
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from catalog.core.database.service import CatalogService, bad_request
from catalog.features.datasets.models import Dataset
from catalog.features.datasets.schemas import ScientificFilter, ScientificRelation


def scientific_clauses(condition: ScientificFilter) -> list:
    path = tuple(condition.lhs.split("."))
    value = Dataset.scientific_metadata[path + ("value",)]
    relation = condition.relation
    rhs = condition.rhs

    if relation is ScientificRelation.EqualTo:
        relation = ScientificRelation.EqualToString if isinstance(rhs, str) else ScientificRelation.EqualToNumeric

    if relation is ScientificRelation.EqualToString:
        clauses = [value.as_string() == str(rhs)]
    else:
        try:
            number = float(rhs)
        except ValueError:
            raise bad_request(f"'{condition.lhs}' needs a numeric value for {relation.value}")
        if relation is ScientificRelation.GreaterThan:
            clauses = [value.as_float() > number]
        elif relation is ScientificRelation.LessThan:
            clauses = [value.as_float() < number]
        else:
            clauses = [value.as_float() == number]

    if condition.unit is not None:
        clauses.append(Dataset.scientific_metadata[path + ("unit",)].as_string() == condition.unit)
    return clauses


class DatasetsService(CatalogService[Dataset]):
    model = Dataset

    def search(self, fields: Mapping[str, Any], scope: Optional[Mapping[str, Any]] = None) -> list:
        fields = dict(fields)
        conditions = fields.pop("scientific", None) or []
        if not isinstance(conditions, list):
            raise bad_request("'scientific' must be a list of conditions")

        clauses = super().search(fields, scope)
        for raw in conditions:
            try:
                condition = ScientificFilter.model_validate(raw)
            except ValidationError:
                raise bad_request(f"Invalid scientific condition: {raw!r}")
            clauses.extend(scientific_clauses(condition))
        return clauses

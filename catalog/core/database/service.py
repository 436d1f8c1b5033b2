"""
Request-scoped CRUD service over one SQLAlchemy model.

Filters are plain dicts keyed by column name:
    {"owner_group": "p1234"}                 equality
    {"type": ["raw", "derived"]}             one of
    {"creation_time": {"begin": ..., "end": ...}}   inclusive range

Unknown columns and values that cannot be coerced to the column type are
rejected with 400.
"""
import json
from datetime import datetime
from typing import Any, Generic, Mapping, Optional, TypeVar

from fastapi import HTTPException, Request, status
from pydantic import BaseModel
from sqlalchemy import Column, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.database.base import Base
from catalog.utils import get_logger


log = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


def bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def parse_json_param(raw: Optional[str], default: Any, name: str) -> Any:
    """Decode a JSON-encoded query parameter, or 400."""
    if raw is None or raw == "":
        return default
    try:
        value = json.loads(raw)
    except ValueError:
        raise bad_request(f"Invalid JSON in '{name}'")
    if not isinstance(value, type(default)):
        raise bad_request(f"'{name}' must be a JSON {type(default).__name__}")
    return value


def query_filters(request: Request) -> dict[str, Any]:
    """Turn the request's query string into a filter; repeated keys become lists."""
    grouped: dict[str, list[str]] = {}
    for key, value in request.query_params.multi_items():
        grouped.setdefault(key, []).append(value)
    return {key: values[0] if len(values) == 1 else values for key, values in grouped.items()}


def integrity_error(model: type, exc: IntegrityError) -> HTTPException:
    """Map a failed constraint to 400 (dangling reference or missing value) or 409."""
    message = str(exc.orig).lower()
    if "foreign key" in message:
        return bad_request(f"{model.__name__} references a document that does not exist")
    if "not null" in message or "null value" in message:
        return bad_request(f"{model.__name__} is missing a required field")
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"{model.__name__} already exists",
    )


def _python_type(column: Column) -> Optional[type]:
    try:
        return column.type.python_type
    except NotImplementedError:
        return None


def _coerce(column: Column, value: Any) -> Any:
    if value is not None and not isinstance(value, (str, int, float, bool)):
        raise bad_request(f"Invalid value for '{column.key}': {value!r}")
    python_type = _python_type(column)
    if value is None or not isinstance(value, str) or python_type in (None, str):
        return value
    try:
        if python_type is bool:
            return value.lower() in ("1", "true", "yes")
        if python_type is datetime:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        return python_type(value)
    except (TypeError, ValueError):
        raise bad_request(f"Invalid value for '{column.key}': {value!r}")


class CatalogService(Generic[ModelT]):
    """
    Thin wrapper around the ORM for one document type.

    ``username`` is the requesting principal; it is stamped into
    ``created_by`` / ``updated_by``.
    """
    model: type[ModelT]

    def __init__(self, db: AsyncSession, username: str):
        self.db = db
        self.username = username

    # ------------------------------------------------------------------
    # Filter construction
    # ------------------------------------------------------------------

    def column(self, name: str) -> Column:
        column = self.model.__table__.columns.get(name)
        if column is None:
            raise bad_request(f"Unknown field '{name}'")
        if _python_type(column) in (dict, list):
            raise bad_request(f"Field '{name}' cannot be filtered")
        return column

    def where(self, filters: Optional[Mapping[str, Any]]) -> list:
        clauses = []
        for name, value in (filters or {}).items():
            column = self.column(name)
            if isinstance(value, (list, tuple, set)):
                clauses.append(column.in_([_coerce(column, item) for item in value]))
            elif isinstance(value, Mapping):
                if not set(value) <= {"begin", "end"}:
                    raise bad_request(f"Invalid range for '{name}'")
                if value.get("begin") is not None:
                    clauses.append(column >= _coerce(column, value["begin"]))
                if value.get("end") is not None:
                    clauses.append(column <= _coerce(column, value["end"]))
            else:
                clauses.append(column == _coerce(column, value))
        return clauses

    def search(self, fields: Mapping[str, Any], scope: Optional[Mapping[str, Any]] = None) -> list:
        """
        Filter clauses for a fullquery/fullfacet ``fields`` object.

        ``scope`` is a filter imposed by the caller's permissions; it is
        applied on top of the requested fields.
        """
        fields = dict(fields)
        text = fields.pop("text", None)
        if text is not None and not isinstance(text, str):
            raise bad_request("'text' must be a string")
        clauses = self.where(fields) + self.where(scope)
        if text:
            columns = [self.model.__table__.columns[name] for name in self.model.__text_search__]
            if columns:
                clauses.append(or_(*[column.ilike(f"%{text}%") for column in columns]))
        return clauses

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def create(self, dto: BaseModel | Mapping[str, Any]) -> ModelT:
        data = dto.model_dump() if isinstance(dto, BaseModel) else dict(dto)
        document = self.model(**data, created_by=self.username, updated_by=self.username)
        self.db.add(document)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            log.info("Rejected %s: %s", self.model.__name__, exc.orig)
            raise integrity_error(self.model, exc)
        await self.db.refresh(document)
        log.debug("Created %s by %s", document, self.username)
        return document

    async def find_all(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        skip: int = 0,
        limit: Optional[int] = None,
        scope: Optional[Mapping[str, Any]] = None,
    ) -> list[ModelT]:
        stmt = select(self.model).where(*self.where(filters), *self.where(scope)).offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_one(self, filters: Mapping[str, Any]) -> Optional[ModelT]:
        result = await self.db.execute(select(self.model).where(*self.where(filters)).limit(1))
        return result.scalar_one_or_none()

    async def apply_update(self, document: ModelT, dto: BaseModel | Mapping[str, Any]) -> ModelT:
        changes = dto.model_dump(exclude_unset=True) if isinstance(dto, BaseModel) else dict(dto)
        for key, value in changes.items():
            setattr(document, key, value)
        document.updated_by = self.username
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            log.info("Rejected %s update: %s", self.model.__name__, exc.orig)
            raise integrity_error(self.model, exc)
        await self.db.refresh(document)
        return document

    async def update(self, filters: Mapping[str, Any], dto: BaseModel | Mapping[str, Any]) -> Optional[ModelT]:
        """Update the first document matching ``filters``; None if there is none."""
        document = await self.find_one(filters)
        if document is None:
            return None
        return await self.apply_update(document, dto)

    async def delete(self, document: ModelT) -> ModelT:
        await self.db.delete(document)
        await self.db.commit()
        log.debug("Removed %s by %s", document, self.username)
        return document

    async def remove(self, filters: Mapping[str, Any]) -> Optional[ModelT]:
        """Remove the first document matching ``filters``; None if there is none."""
        document = await self.find_one(filters)
        if document is None:
            return None
        return await self.delete(document)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def fullquery(
        self,
        fields: Mapping[str, Any],
        limits: Mapping[str, Any],
        scope: Optional[Mapping[str, Any]] = None,
    ) -> list[ModelT]:
        stmt = select(self.model).where(*self.search(fields, scope))

        order = limits.get("order")
        if order:
            name, _, direction = str(order).partition(":")
            column = self.column(name)
            if direction not in ("", "asc", "desc"):
                raise bad_request(f"Invalid order direction '{direction}'")
            stmt = stmt.order_by(column.desc() if direction == "desc" else column.asc())

        try:
            skip = int(limits.get("skip", 0))
            limit = limits.get("limit")
            limit = int(limit) if limit is not None else None
        except (TypeError, ValueError):
            raise bad_request("Invalid 'skip' or 'limit'")
        if skip < 0 or (limit is not None and limit < 0):
            raise bad_request("'skip' and 'limit' must not be negative")

        stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def fullfacet(
        self,
        fields: Mapping[str, Any],
        facets: list[str],
        scope: Optional[Mapping[str, Any]] = None,
    ) -> list[dict[str, Any]]:
        """
        Count matching documents overall and per value of each facet column.

        Returns a single-element list:
            [{"all": [{"totalSets": 3}], "type": [{"_id": "raw", "count": 2}, ...]}]
        """
        clauses = self.search(fields, scope)
        if not all(isinstance(facet, str) for facet in facets):
            raise bad_request("'facets' must be a list of field names")
        columns = {facet: self.column(facet) for facet in facets}

        total = await self.db.scalar(
            select(func.count()).select_from(self.model).where(*clauses)
        )
        facet_result: dict[str, Any] = {"all": [{"totalSets": total or 0}]}

        for facet, column in columns.items():
            count = func.count()
            rows = await self.db.execute(
                select(column, count)
                .select_from(self.model)
                .where(*clauses)
                .group_by(column)
                .order_by(count.desc(), column)
            )
            facet_result[facet] = [{"_id": value, "count": n} for value, n in rows.all()]

        return [facet_result]

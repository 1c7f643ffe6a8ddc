"""
DevFlow Backend: Model Registry
================================

What:  Compiles document schemas into storage bindings and keeps one binding
       per model name for the lifetime of the process.
Why:   Model modules declare their binding at import time. Compiling the same
       name twice would try to define the same table on the shared metadata a
       second time, so repeated module evaluation (hot reload, test re-imports)
       must get the binding that already exists.
How:   `ModelRegistry.get_or_compile(name, schema)` returns the registered
       binding when the name is known, otherwise compiles the schema into a
       SQLAlchemy `Table` and wraps it in a `Model`.
Who:   Every module under devflow/models/; services use the resulting
       `Model` objects for all reads and writes.

Compilation rules:
    str -> Text, int -> Integer, bool -> Boolean, UUID -> Uuid,
    datetime -> DateTime(timezone=True), list[...] -> JSON
    Optional[...] -> nullable column
    Field(json_schema_extra={"unique": True}) -> unique constraint
    __unique_together__ = (("a", "b"),) -> composite unique constraint
    Ref("X") -> plain Uuid column, `info["ref"] = "X"`, no foreign key

Concurrency:
    Registration happens at import time on the event loop thread. The
    registry is a plain dict with no locking.
"""

import logging
import types
import uuid
from datetime import datetime, timezone
from typing import (
    Annotated,
    Any,
    Dict,
    FrozenSet,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Type,
    Union,
    get_args,
    get_origin,
)

from pydantic import BaseModel, create_model
from pydantic import ValidationError as SchemaValidationError
from pydantic.fields import FieldInfo
from pydantic_core import PydanticUndefined
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
    Uuid,
    delete,
    func,
    insert,
    select,
    update,
)
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from devflow.database import metadata as default_metadata
from devflow.exceptions import DuplicateKeyError, DuplicateModelError, ValidationError
from devflow.models.document import DocumentSchema, reference_target

logger = logging.getLogger(__name__)

TIMESTAMP_FIELDS = ("created_at", "updated_at")

Filters = Optional[Mapping[str, Any]]
Sort = Optional[Sequence[Tuple[str, int]]]

# INSERT ... ON CONFLICT DO NOTHING, per dialect
CONFLICT_IGNORING_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _unwrap_optional(annotation: Any) -> Tuple[Any, bool]:
    """Returns (inner type, is_optional) for `X | None` / Optional[X]."""
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = get_args(annotation)
        non_null = [arg for arg in args if arg is not type(None)]
        if len(non_null) == 1 and len(non_null) < len(args):
            return non_null[0], True
    return annotation, False


def _column_for(name: str, field: FieldInfo) -> Column:
    annotation, optional = _unwrap_optional(field.annotation)
    ref = reference_target(field.metadata)

    if get_origin(annotation) is Annotated:
        annotation, *extras = get_args(annotation)
        ref = ref or reference_target(extras)

    if get_origin(annotation) is list:
        item_args = get_args(annotation)
        if item_args and get_origin(item_args[0]) is Annotated:
            ref = reference_target(get_args(item_args[0])[1:])
        column_type: Any = JSON
    elif annotation is bool:
        column_type = Boolean
    elif annotation is int:
        column_type = Integer
    elif annotation is str:
        column_type = Text
    elif annotation is uuid.UUID:
        column_type = Uuid
    elif annotation is datetime:
        column_type = DateTime(timezone=True)
    else:
        raise TypeError(f"Unsupported type for document field '{name}': {annotation!r}")

    extra = field.json_schema_extra if isinstance(field.json_schema_extra, dict) else {}
    # Writes always carry the validated value; the column default only serves
    # rows inserted outside the model layer (migrations, manual fixes)
    default = None
    if field.default is not PydanticUndefined and isinstance(field.default, (str, int, bool)):
        default = field.default

    return Column(
        name,
        column_type,
        nullable=optional,
        unique=bool(extra.get("unique")),
        index=bool(extra.get("index")),
        default=default,
        comment=f"ref: {ref}" if ref else field.description,
        info={"ref": ref} if ref else {},
    )


def collection_name(name: str, schema: Type[DocumentSchema]) -> str:
    """Account -> accounts, unless the schema sets __collection__."""
    return schema.__collection__ or f"{name.lower()}s"


def compile_table(name: str, schema: Type[DocumentSchema], metadata: MetaData) -> Table:
    """Builds the storage table for `schema` on `metadata`."""
    for reserved in ("id",) + TIMESTAMP_FIELDS:
        if reserved in schema.model_fields:
            raise TypeError(f"{schema.__name__} must not declare storage field '{reserved}'")

    columns: List[Column] = [Column("id", Uuid, primary_key=True, default=uuid.uuid4)]
    columns.extend(_column_for(field_name, field) for field_name, field in schema.model_fields.items())
    if schema.__timestamps__:
        columns.append(Column("created_at", DateTime(timezone=True), nullable=False, default=_utcnow))
        columns.append(
            Column("updated_at", DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
        )

    constraints = []
    for field_names in schema.__unique_together__:
        missing = [field_name for field_name in field_names if field_name not in schema.model_fields]
        if missing:
            raise TypeError(f"{schema.__name__}.__unique_together__ names unknown field(s): {missing}")
        constraints.append(UniqueConstraint(*field_names))
    return Table(collection_name(name, schema), metadata, *columns, *constraints)


class Model:
    """
    Compiled binding between a document schema and its storage table.

    Every operation takes the caller's AsyncSession, so a request's reads and
    writes share one transaction (committed by get_db_session). Documents are
    returned as instances of `self.document`: the schema plus `id`,
    `created_at` and `updated_at`.
    """

    def __init__(self, name: str, schema: Type[DocumentSchema], table: Table):
        self.name = name
        self.schema = schema
        self.table = table
        self.document: Type[BaseModel] = create_model(
            f"{name}Document",
            __base__=schema,
            id=(uuid.UUID, ...),
            created_at=(Optional[datetime], None),
            updated_at=(Optional[datetime], None),
        )
        self.fields: Tuple[str, ...] = tuple(schema.model_fields)
        self.counter_fields: FrozenSet[str] = frozenset(
            field_name
            for field_name in self.fields
            if isinstance(table.c[field_name].type, Integer)
        )
        self.json_fields: FrozenSet[str] = frozenset(
            field_name for field_name in self.fields if isinstance(table.c[field_name].type, JSON)
        )
        self.references: Dict[str, str] = {
            column.name: column.info["ref"] for column in table.columns if column.info.get("ref")
        }

    def __repr__(self) -> str:
        return f"<Model {self.name} -> {self.table.name}>"

    # ── Validation & conversion ───────────────────────────────────────────

    def validate(self, data: Any) -> DocumentSchema:
        """Validates `data` against the schema, applying defaults."""
        if isinstance(data, BaseModel):
            data = data.model_dump()
        try:
            return self.schema.model_validate(data)
        except SchemaValidationError as exc:
            errors = [
                {
                    "loc": ".".join(str(part) for part in error["loc"]),
                    "msg": error["msg"],
                    "type": error["type"],
                }
                for error in exc.errors()
            ]
            first = errors[0]
            raise ValidationError(
                message=f"{self.name}.{first['loc']}: {first['msg']}",
                field=first["loc"] or None,
                context={"model": self.name, "errors": errors},
            ) from exc

    def _to_row(self, doc: DocumentSchema) -> Dict[str, Any]:
        row = doc.model_dump(exclude=set(self.json_fields))
        if self.json_fields:
            # JSON columns hold identifiers as strings
            row.update(doc.model_dump(mode="json", include=set(self.json_fields)))
        return row

    def _from_row(self, row: Any) -> BaseModel:
        return self.document.model_validate(dict(row._mapping))

    def _coerce_id(self, value: Any, field: str = "id") -> uuid.UUID:
        if isinstance(value, uuid.UUID):
            return value
        try:
            return uuid.UUID(str(value))
        except ValueError as exc:
            raise ValidationError(
                message=f"{self.name}.{field}: '{value}' is not a valid identifier",
                field=field,
                context={"model": self.name},
            ) from exc

    def _where(self, filters: Filters) -> List[Any]:
        clauses = []
        for key, value in (filters or {}).items():
            if key not in self.table.c:
                raise ValidationError(
                    message=f"Unknown field '{key}' for {self.name}",
                    field=key,
                    context={"model": self.name},
                )
            if key in self.json_fields:
                raise ValidationError(
                    message=f"{self.name}.{key} is a list field and cannot be matched by equality",
                    field=key,
                    context={"model": self.name},
                )
            column = self.table.c[key]
            if value is None:
                clauses.append(column.is_(None))
                continue
            if isinstance(column.type, Uuid):
                value = self._coerce_id(value, key)
            clauses.append(column == value)
        return clauses

    async def _execute(self, session: AsyncSession, statement: Any) -> Any:
        try:
            return await session.execute(statement)
        except IntegrityError as exc:
            logger.info("Unique index violated on %s: %s", self.table.name, exc.orig)
            raise DuplicateKeyError(self.name, context={"collection": self.table.name}) from exc

    # ── Operations ────────────────────────────────────────────────────────

    def _new_row(self, data: Any) -> Dict[str, Any]:
        row = self._to_row(self.validate(data))
        row["id"] = uuid.uuid4()
        if self.schema.__timestamps__:
            now = _utcnow()
            row["created_at"] = now
            row["updated_at"] = now
        return row

    async def create(self, session: AsyncSession, data: Any) -> BaseModel:
        """Validates and inserts one document, assigning id and timestamps."""
        row = self._new_row(data)
        await self._execute(session, insert(self.table).values(**row))
        logger.debug("Created %s %s", self.name, row["id"])
        return self.document.model_validate(row)

    async def get_or_create(
        self, session: AsyncSession, filters: Mapping[str, Any], data: Filters = None
    ) -> BaseModel:
        """
        Returns the document matching `filters`, inserting `filters` + `data`
        when there is none.

        Meant for lookups on a unique key. The insert ignores a conflict on
        that key, so a concurrent insert of the same document yields the
        stored one instead of DuplicateKeyError.
        """
        existing = await self.find_one(session, filters)
        if existing is not None:
            return existing

        conflict_ignoring_insert = CONFLICT_IGNORING_INSERTS.get(session.get_bind().dialect.name)
        if conflict_ignoring_insert is None:
            return await self.create(session, {**filters, **(data or {})})

        row = self._new_row({**filters, **(data or {})})
        await self._execute(
            session, conflict_ignoring_insert(self.table).values(**row).on_conflict_do_nothing()
        )
        stored = await self.find_one(session, filters)
        if stored is None:
            # Conflict on a unique key outside `filters`
            raise DuplicateKeyError(self.name, context={"collection": self.table.name})
        if stored.id != row["id"]:
            logger.info("%s matching %s was inserted concurrently; using %s", self.name, dict(filters), stored.id)
        return stored

    async def find_by_id(self, session: AsyncSession, document_id: Any) -> Optional[BaseModel]:
        result = await session.execute(
            select(self.table).where(self.table.c.id == self._coerce_id(document_id))
        )
        row = result.first()
        return self._from_row(row) if row is not None else None

    async def find_one(self, session: AsyncSession, filters: Filters) -> Optional[BaseModel]:
        result = await session.execute(select(self.table).where(*self._where(filters)).limit(1))
        row = result.first()
        return self._from_row(row) if row is not None else None

    async def find(
        self,
        session: AsyncSession,
        filters: Filters = None,
        sort: Sort = None,
        limit: Optional[int] = None,
        skip: int = 0,
    ) -> List[BaseModel]:
        """
        Returns documents matching `filters` (equality on each key).

        `sort` is a sequence of (field, direction) pairs, direction 1 for
        ascending and -1 for descending, e.g. [("created_at", -1)].
        """
        query = select(self.table).where(*self._where(filters))
        for key, direction in sort or ():
            if key not in self.table.c:
                raise ValidationError(message=f"Cannot sort {self.name} by '{key}'", field=key)
            column = self.table.c[key]
            query = query.order_by(column.desc() if direction < 0 else column.asc())
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)

        result = await session.execute(query)
        return [self._from_row(row) for row in result]

    async def count(self, session: AsyncSession, filters: Filters = None) -> int:
        result = await session.execute(
            select(func.count()).select_from(self.table).where(*self._where(filters))
        )
        return result.scalar_one()

    async def update_by_id(
        self, session: AsyncSession, document_id: Any, changes: Mapping[str, Any]
    ) -> Optional[BaseModel]:
        """
        Applies `changes` to a stored document.

        The merged document is validated in full, so an edit cannot clear a
        required field. Returns None when the document does not exist.
        """
        unknown = set(changes) - set(self.fields)
        if unknown:
            raise ValidationError(
                message=f"Unknown field(s) for {self.name}: {', '.join(sorted(unknown))}",
                context={"model": self.name, "fields": sorted(unknown)},
            )

        current = await self.find_by_id(session, document_id)
        if current is None:
            return None

        merged = current.model_dump(include=set(self.fields))
        merged.update(changes)
        row = self._to_row(self.validate(merged))

        values = {key: row[key] for key in changes}
        if self.schema.__timestamps__:
            values["updated_at"] = _utcnow()
        await self._execute(
            session, update(self.table).where(self.table.c.id == current.id).values(**values)
        )
        return await self.find_by_id(session, current.id)

    async def increment(
        self, session: AsyncSession, document_id: Any, **deltas: int
    ) -> Optional[BaseModel]:
        """
        Atomically adds `deltas` to integer fields, e.g. increment(s, id, views=1).

        A counter never drops below zero: the update is refused with
        ValidationError when it would. Returns None for a missing document.
        """
        invalid = [key for key in deltas if key not in self.counter_fields]
        if invalid:
            raise ValidationError(
                message=f"{self.name} has no counter field(s): {', '.join(sorted(invalid))}",
                context={"model": self.name, "fields": sorted(invalid)},
            )

        document_id = self._coerce_id(document_id)
        statement = update(self.table).where(self.table.c.id == document_id)
        values: Dict[str, Any] = {}
        for key, delta in deltas.items():
            column = self.table.c[key]
            values[key] = column + delta
            if delta < 0:
                statement = statement.where(column + delta >= 0)
        if self.schema.__timestamps__:
            values["updated_at"] = _utcnow()

        result = await session.execute(statement.values(**values))
        if result.rowcount == 0:
            current = await self.find_by_id(session, document_id)
            if current is None:
                return None
            raise ValidationError(
                message=f"{self.name} counters cannot go below zero",
                context={"model": self.name, "deltas": dict(deltas)},
            )
        return await self.find_by_id(session, document_id)

    async def delete_by_id(self, session: AsyncSession, document_id: Any) -> bool:
        result = await session.execute(
            delete(self.table).where(self.table.c.id == self._coerce_id(document_id))
        )
        return result.rowcount > 0


class ModelRegistry:
    """
    Process-wide map of model name -> compiled Model.

    Lookups are exact: "Account" and "account" are different keys.
    """

    def __init__(self, metadata: MetaData = default_metadata):
        self.metadata = metadata
        self.models: Dict[str, Model] = {}

    def __contains__(self, name: object) -> bool:
        return name in self.models

    def __iter__(self) -> Iterator[Model]:
        return iter(self.models.values())

    def names(self) -> List[str]:
        return sorted(self.models)

    def get(self, name: str) -> Optional[Model]:
        return self.models.get(name)

    def model(self, name: str, schema: Type[DocumentSchema]) -> Model:
        """Compiles and registers `schema` under `name`; the name must be new."""
        if name in self.models:
            raise DuplicateModelError(name)
        binding = Model(name, schema, compile_table(name, schema, self.metadata))
        self.models[name] = binding
        logger.debug("Compiled model %s -> table %s", name, binding.table.name)
        return binding

    def get_or_compile(self, name: str, schema: Type[DocumentSchema]) -> Model:
        """Returns the existing binding for `name`, compiling it on first use."""
        existing = self.get(name)
        if existing is not None:
            return existing
        return self.model(name, schema)


# Shared registry, bound to the application metadata
models = ModelRegistry()

"""Canonical in-memory schema representation.

Every ingestion path (JSON documents, SQL DDL) produces these models, and the
analyzers consume nothing else.
"""

from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from schemacaps.global_models import Cardinality, FieldKind


class RelationInfo(BaseModel):
    """Relation metadata carried by a relation field."""

    model_config = ConfigDict(frozen=True)

    target_model: str = Field(..., description="Name of the referenced model")
    fk_field_names: Tuple[str, ...] = Field(
        default=(),
        description="Local scalar fields holding the foreign key (empty on a back-reference)",
    )
    references: Tuple[str, ...] = Field(
        default=(), description="Target fields the foreign key points at"
    )
    relation_name: Optional[str] = Field(
        None, description="Explicit name pairing both sides of the relation"
    )


class SchemaField(BaseModel):
    """A named, typed attribute of a model."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: FieldKind = FieldKind.SCALAR
    type: str = Field(..., description="Scalar type, enum name or target model name")
    cardinality: Cardinality = Cardinality.SINGLE
    required: bool = True
    unique: bool = False
    has_default: bool = False
    default: Optional[str] = Field(
        None, description="Default expression, e.g. 'autoincrement()' or 'uuid()'"
    )
    is_id: bool = False
    relation: Optional[RelationInfo] = None

    @field_validator("kind", mode="before")
    @classmethod
    def _coerce_unknown_kind(cls, value: Any) -> Any:
        if isinstance(value, str) and value not in {k.value for k in FieldKind}:
            return FieldKind.UNSUPPORTED
        return value

    @model_validator(mode="after")
    def _check_relation(self) -> "SchemaField":
        if self.kind == FieldKind.RELATION and self.relation is None:
            raise ValueError(f"Relation field '{self.name}' is missing relation metadata")
        if self.kind != FieldKind.RELATION and self.relation is not None:
            raise ValueError(
                f"Field '{self.name}' of kind '{self.kind.value}' cannot carry relation metadata"
            )
        return self

    @property
    def is_list(self) -> bool:
        return self.cardinality == Cardinality.LIST

    @property
    def is_relation(self) -> bool:
        return self.kind == FieldKind.RELATION

    @property
    def is_owner(self) -> bool:
        """True when this relation field stores the foreign key."""
        return self.relation is not None and len(self.relation.fk_field_names) > 0


class Model(BaseModel):
    """One entity type in the schema."""

    model_config = ConfigDict(frozen=True)

    name: str
    fields: Tuple[SchemaField, ...] = ()
    primary_key: Tuple[str, ...] = Field(
        default=(), description="Composite primary key field names"
    )
    unique_constraints: Tuple[Tuple[str, ...], ...] = Field(
        default=(), description="Unique constraints, each a tuple of field names"
    )

    @model_validator(mode="after")
    def _check_field_names(self) -> "Model":
        seen = set()
        for f in self.fields:
            if f.name in seen:
                raise ValueError(f"Model '{self.name}' declares field '{f.name}' twice")
            seen.add(f.name)
        return self

    @property
    def scalar_fields(self) -> List[SchemaField]:
        return [f for f in self.fields if f.kind == FieldKind.SCALAR]

    @property
    def enum_fields(self) -> List[SchemaField]:
        return [f for f in self.fields if f.kind == FieldKind.ENUM]

    @property
    def relation_fields(self) -> List[SchemaField]:
        return [f for f in self.fields if f.kind == FieldKind.RELATION]

    @property
    def id_field(self) -> Optional[SchemaField]:
        """The single primary identifier field, if the model has one."""
        for f in self.fields:
            if f.is_id:
                return f
        if len(self.primary_key) == 1:
            return self.get_field(self.primary_key[0])
        return None

    def get_field(self, name: str) -> Optional[SchemaField]:
        for f in self.fields:
            if f.name == name:
                return f
        return None


class EnumDef(BaseModel):
    """An enum type declared by the schema."""

    model_config = ConfigDict(frozen=True)

    name: str
    values: Tuple[str, ...] = ()


class RelationRef(BaseModel):
    """A relation field elsewhere in the schema that targets a given model."""

    model_config = ConfigDict(frozen=True)

    source_model: str
    field_name: str
    target_model: str
    relation_name: Optional[str] = None
    fk_field_names: Tuple[str, ...] = ()
    cardinality: Cardinality = Cardinality.SINGLE


def build_reverse_relation_map(
    models: Iterable[Model],
) -> Dict[str, Tuple[RelationRef, ...]]:
    """Map each model name to the relation fields that reference it.

    Relations pointing at undeclared models are not recorded. Each relation is
    recorded once even if the same field is seen twice.

    Args:
        models: All models of the schema

    Returns:
        Dict of model name to RelationRef tuple (empty for unreferenced models)
    """
    models = list(models)
    names = {m.name for m in models}
    collected: Dict[str, List[RelationRef]] = {m.name: [] for m in models}
    seen = set()

    for model in models:
        for f in model.relation_fields:
            target = f.relation.target_model
            if target not in names:
                continue
            key = (
                model.name,
                f.name,
                f.relation.relation_name or "implicit",
                target,
                len(f.relation.fk_field_names),
            )
            if key in seen:
                continue
            seen.add(key)
            collected[target].append(
                RelationRef(
                    source_model=model.name,
                    field_name=f.name,
                    target_model=target,
                    relation_name=f.relation.relation_name,
                    fk_field_names=f.relation.fk_field_names,
                    cardinality=f.cardinality,
                )
            )

    return {name: tuple(refs) for name, refs in collected.items()}


class Schema:
    """Immutable snapshot of a loaded schema with its lookup maps.

    The maps are built once here and exposed as read-only views, so a single
    Schema can be shared by concurrent per-model analyses.
    """

    def __init__(self, models: Iterable[Model], enums: Iterable[EnumDef] = ()):
        """
        Build the schema snapshot.

        Args:
            models: Models of the schema
            enums: Enum declarations

        Raises:
            ValueError: If two models or two enums share a name
        """
        self._models: Tuple[Model, ...] = tuple(models)
        self._enums: Tuple[EnumDef, ...] = tuple(enums)

        model_map: Dict[str, Model] = {}
        for model in self._models:
            if model.name in model_map:
                raise ValueError(f"Duplicate model name: {model.name}")
            model_map[model.name] = model

        enum_map: Dict[str, EnumDef] = {}
        for enum_def in self._enums:
            if enum_def.name in enum_map:
                raise ValueError(f"Duplicate enum name: {enum_def.name}")
            enum_map[enum_def.name] = enum_def

        self._model_map = MappingProxyType(model_map)
        self._enum_map = MappingProxyType(enum_map)
        self._reverse_relation_map = MappingProxyType(
            build_reverse_relation_map(self._models)
        )

    @property
    def models(self) -> Tuple[Model, ...]:
        return self._models

    @property
    def enums(self) -> Tuple[EnumDef, ...]:
        return self._enums

    @property
    def model_map(self) -> Mapping[str, Model]:
        return self._model_map

    @property
    def enum_map(self) -> Mapping[str, EnumDef]:
        return self._enum_map

    @property
    def reverse_relation_map(self) -> Mapping[str, Tuple[RelationRef, ...]]:
        return self._reverse_relation_map

    def get_model(self, name: str) -> Optional[Model]:
        return self._model_map.get(name)

    def __len__(self) -> int:
        return len(self._models)

    def __iter__(self):
        return iter(self._models)

    def __repr__(self) -> str:
        return f"Schema(models={[m.name for m in self._models]!r})"

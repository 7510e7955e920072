"""Pydantic models for model analysis results."""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from schemacaps.global_models import (
    Cardinality,
    DiagnosticCode,
    FilterType,
    IdStrategy,
    RelationKind,
)


class Diagnostic(BaseModel):
    """A non-fatal finding reported while analyzing a model."""

    model_config = ConfigDict(frozen=True)

    model: str = Field(..., description="Model being analyzed")
    field: Optional[str] = Field(None, description="Field the finding is about")
    code: DiagnosticCode
    message: str


class FilterField(BaseModel):
    """Filter descriptor for one filterable field."""

    model_config = ConfigDict(frozen=True)

    name: str
    filter_type: FilterType
    field_type: str = Field(..., description="Declared scalar or enum type")
    required: bool = True


class FieldAnalysis(BaseModel):
    """Output of the single field classification pass."""

    model_config = ConfigDict(frozen=True)

    scalar_fields: Tuple[str, ...] = ()
    enum_fields: Tuple[str, ...] = ()
    relation_fields: Tuple[str, ...] = ()
    opaque_fields: Tuple[str, ...] = ()
    filter_fields: Tuple[FilterField, ...] = ()
    search_fields: Tuple[str, ...] = ()
    sort_fields: Tuple[str, ...] = ()
    sensitive_fields: Tuple[str, ...] = ()
    exposed_fields: Tuple[str, ...] = Field(
        default=(), description="Scalar and enum fields safe to return in read responses"
    )


class SpecialFields(BaseModel):
    """Capability key resolved to a field name, or None when absent."""

    model_config = ConfigDict(frozen=True)

    slug: Optional[str] = None
    published: Optional[str] = None
    views: Optional[str] = None
    likes: Optional[str] = None
    approved: Optional[str] = None
    deleted_at: Optional[str] = None
    parent_id: Optional[str] = None
    featured: Optional[str] = None
    active: Optional[str] = None


class SpecialFieldsResult(BaseModel):
    """Resolved special fields plus the diagnostics raised while resolving them."""

    model_config = ConfigDict(frozen=True)

    special_fields: SpecialFields = Field(default_factory=SpecialFields)
    diagnostics: Tuple[Diagnostic, ...] = ()


class BackReference(BaseModel):
    """Pairing of a relation field with its counterpart on the target model."""

    model_config = ConfigDict(frozen=True)

    field_name: str = Field(..., description="Relation field being paired")
    target_model: str
    reciprocal_field_name: str = Field(
        ..., description="Counterpart field on the target model"
    )
    reciprocal_cardinality: Cardinality
    fk_field_names: Tuple[str, ...] = Field(
        default=(), description="Foreign key fields of whichever side owns the relation"
    )
    relation_name: Optional[str] = None


class RelationshipInfo(BaseModel):
    """Classification of one relation field."""

    model_config = ConfigDict(frozen=True)

    field_name: str
    target_model: str
    cardinality: Cardinality
    required: bool = Field(
        ..., description="Relation is non-nullable (or all its FK fields are required)"
    )
    is_owner: bool = Field(..., description="This side stores the foreign key")
    fk_field_names: Tuple[str, ...] = ()
    references: Tuple[str, ...] = ()
    relation_name: Optional[str] = None
    is_self_reference: bool = False
    is_hierarchy_candidate: bool = False
    kind: Optional[RelationKind] = Field(
        None, description="Resolved multiplicity (set once back-references are matched)"
    )
    reciprocal_field: Optional[str] = None

    @property
    def is_list(self) -> bool:
        return self.cardinality == Cardinality.LIST


class RelationshipAnalysis(BaseModel):
    """Output of relationship classification for one model."""

    model_config = ConfigDict(frozen=True)

    relationships: Tuple[RelationshipInfo, ...] = ()
    is_junction_table: bool = False

    def get(self, field_name: str) -> Optional[RelationshipInfo]:
        for rel in self.relationships:
            if rel.field_name == field_name:
                return rel
        return None


class ForeignKeyInfo(BaseModel):
    """Physical foreign key behind an owning relation field."""

    model_config = ConfigDict(frozen=True)

    fields: Tuple[str, ...] = Field(..., description="Local FK field names")
    relation_field: str = Field(..., description="Relation field the FK backs")
    target: str = Field(..., description="Referenced model")
    references: Tuple[str, ...] = ()
    relation_name: Optional[str] = None


class IncludeEntry(BaseModel):
    """One related model to eager-load, always at depth 1."""

    model_config = ConfigDict(frozen=True)

    relation: str = Field(..., description="Relation field name")
    target_model: str
    cardinality: Cardinality
    select: Tuple[str, ...] = Field(
        default=(), description="Target fields projected into the include"
    )
    depth: int = 1


class IncludePlan(BaseModel):
    """Flat eager-load plan; entries never nest further includes."""

    model_config = ConfigDict(frozen=True)

    entries: Tuple[IncludeEntry, ...] = ()

    @property
    def relations(self) -> List[str]:
        return [entry.relation for entry in self.entries]

    def get(self, relation: str) -> Optional[IncludeEntry]:
        for entry in self.entries:
            if entry.relation == relation:
                return entry
        return None

    def to_include_object(self) -> Dict[str, Any]:
        """Render as an ORM include mapping.

        Example:
            {"author": {"select": {"id": True, "name": True}}, "tags": True}
        """
        include: Dict[str, Any] = {}
        for entry in self.entries:
            if entry.select:
                include[entry.relation] = {"select": {name: True for name in entry.select}}
            else:
                include[entry.relation] = True
        return include

    def __len__(self) -> int:
        return len(self.entries)


class IncludePlans(BaseModel):
    """Default (summary) and detailed eager-load plans of a model."""

    model_config = ConfigDict(frozen=True)

    default: IncludePlan = Field(default_factory=IncludePlan)
    detailed: IncludePlan = Field(default_factory=IncludePlan)


class ModelCapabilities(BaseModel):
    """Complete analysis result for a single model."""

    model_config = ConfigDict(frozen=True)

    model: str

    # Field classification
    scalar_fields: Tuple[str, ...] = ()
    enum_fields: Tuple[str, ...] = ()
    relation_fields: Tuple[str, ...] = ()
    opaque_fields: Tuple[str, ...] = ()
    filter_fields: Tuple[FilterField, ...] = ()
    search_fields: Tuple[str, ...] = ()
    sort_fields: Tuple[str, ...] = ()
    sensitive_fields: Tuple[str, ...] = ()
    exposed_fields: Tuple[str, ...] = ()

    # Special fields and derived capability flags
    special_fields: SpecialFields = Field(default_factory=SpecialFields)
    has_search: bool = False
    has_filters: bool = False
    has_find_by_slug: bool = False
    has_published: bool = False
    has_soft_delete: bool = False
    has_views: bool = False
    has_approval: bool = False
    has_featured: bool = False
    has_active: bool = False

    # Relationships
    relationships: Tuple[RelationshipInfo, ...] = ()
    foreign_keys: Tuple[ForeignKeyInfo, ...] = ()
    has_parent_child: bool = False
    is_junction_table: bool = False

    # Identity and uniqueness
    id_field: Optional[str] = None
    id_strategy: IdStrategy = IdStrategy.NONE
    unique_fields: Tuple[str, ...] = Field(
        default=(), description="Fields that guarantee at most one matching record"
    )

    includes: IncludePlans = Field(default_factory=IncludePlans)
    diagnostics: Tuple[Diagnostic, ...] = ()

    @property
    def filterable_names(self) -> List[str]:
        return [f.name for f in self.filter_fields]

    def get_relationship(self, field_name: str) -> Optional[RelationshipInfo]:
        for rel in self.relationships:
            if rel.field_name == field_name:
                return rel
        return None

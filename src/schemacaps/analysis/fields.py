"""Single-pass field classification for search, filter and sort support."""

import re
from typing import Iterable, List, Set

from schemacaps.analysis.config import AnalyzerConfig
from schemacaps.analysis.models import FieldAnalysis, FilterField
from schemacaps.global_models import FieldKind, FilterType
from schemacaps.schema.models import Model, SchemaField

FILTERABLE_SCALAR_TYPES = {
    "String",
    "Int",
    "BigInt",
    "Float",
    "Decimal",
    "Boolean",
    "DateTime",
    "Uuid",
}
RANGE_TYPES = {"Int", "BigInt", "Float", "Decimal", "DateTime"}
UNSORTABLE_TYPES = {"Json", "Bytes"}


def normalize_field_name(name: str) -> str:
    """Lower-case a field name and drop '_' and '-' (is_published -> ispublished)."""
    return name.replace("_", "").replace("-", "").lower()


def is_sensitive_field(name: str, patterns: Iterable[str]) -> bool:
    """Check a field name against sensitive patterns (case-insensitive, normalized)."""
    normalized = normalize_field_name(name)
    return any(re.search(p, normalized, re.IGNORECASE) for p in patterns)


def foreign_key_field_names(model: Model) -> Set[str]:
    """Scalar fields used as foreign keys by the model's owning relations."""
    names: Set[str] = set()
    for f in model.relation_fields:
        names.update(f.relation.fk_field_names)
    return names


def get_filter_type(field: SchemaField, is_foreign_key: bool = False) -> FilterType:
    """
    Pick the filter strategy for a scalar or enum field.

    Args:
        field: Scalar or enum field
        is_foreign_key: Whether the field stores a foreign key

    Returns:
        ARRAY for lists, EQUALS for strings, enums and foreign keys, RANGE for
        numbers and dates, BOOLEAN for booleans
    """
    if field.is_list:
        return FilterType.ARRAY
    if field.kind == FieldKind.ENUM or is_foreign_key:
        return FilterType.EQUALS
    if field.type == "Boolean":
        return FilterType.BOOLEAN
    if field.type in RANGE_TYPES:
        return FilterType.RANGE
    return FilterType.EQUALS


class FieldDetector:
    """Classify a model's fields in one pass."""

    def __init__(self, config: AnalyzerConfig):
        self.config = config

    def is_sensitive(self, name: str) -> bool:
        return is_sensitive_field(name, self.config.sensitive_field_patterns)

    def analyze(self, model: Model) -> FieldAnalysis:
        """
        Classify fields and build the filterable, searchable and sortable sets.

        Primary identifiers are left out of filters and search (they have their
        own lookups). Sensitive fields are left out of every set and out of the
        exposed field list. Fields of unknown kind are opaque.

        Args:
            model: Model to analyze

        Returns:
            FieldAnalysis for the model
        """
        fk_names = foreign_key_field_names(model)

        scalars: List[str] = []
        enums: List[str] = []
        relations: List[str] = []
        opaque: List[str] = []
        filters: List[FilterField] = []
        search: List[str] = []
        sort: List[str] = []
        sensitive: List[str] = []
        exposed: List[str] = []

        for field in model.fields:
            if field.kind == FieldKind.RELATION:
                relations.append(field.name)
                continue
            if field.kind == FieldKind.SCALAR:
                scalars.append(field.name)
            elif field.kind == FieldKind.ENUM:
                enums.append(field.name)
            else:
                opaque.append(field.name)
                continue

            if self.is_sensitive(field.name):
                sensitive.append(field.name)
                continue
            exposed.append(field.name)

            is_fk = field.name in fk_names
            is_enum = field.kind == FieldKind.ENUM

            if not field.is_id and (is_enum or field.type in FILTERABLE_SCALAR_TYPES):
                filters.append(
                    FilterField(
                        name=field.name,
                        filter_type=get_filter_type(field, is_foreign_key=is_fk),
                        field_type=field.type,
                        required=field.required,
                    )
                )

            if (
                not is_enum
                and field.type == "String"
                and not field.is_list
                and not field.is_id
                and not is_fk
            ):
                search.append(field.name)

            if not is_enum and not field.is_list and field.type not in UNSORTABLE_TYPES:
                sort.append(field.name)

        return FieldAnalysis(
            scalar_fields=tuple(scalars),
            enum_fields=tuple(enums),
            relation_fields=tuple(relations),
            opaque_fields=tuple(opaque),
            filter_fields=tuple(filters),
            search_fields=tuple(search),
            sort_fields=tuple(sort),
            sensitive_fields=tuple(sensitive),
            exposed_fields=tuple(exposed),
        )

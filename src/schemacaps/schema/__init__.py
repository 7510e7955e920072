"""Canonical schema representation and ingestion."""

from schemacaps.schema.ddl import parse_ddl_to_schema
from schemacaps.schema.loader import (
    SchemaLoadError,
    load_schema,
    load_schema_json,
    load_schema_yaml,
    parse_schema_document,
)
from schemacaps.schema.models import (
    EnumDef,
    Model,
    RelationInfo,
    RelationRef,
    Schema,
    SchemaField,
)
from schemacaps.schema.validation import SchemaValidationResult, validate_schema

__all__ = [
    "Schema",
    "Model",
    "SchemaField",
    "RelationInfo",
    "RelationRef",
    "EnumDef",
    "SchemaLoadError",
    "load_schema",
    "load_schema_json",
    "load_schema_yaml",
    "parse_schema_document",
    "parse_ddl_to_schema",
    "SchemaValidationResult",
    "validate_schema",
]

"""Shared models and enums used across schemacaps modules."""

from enum import Enum


class FieldKind(str, Enum):
    """Declared kind of a model field."""

    SCALAR = "scalar"
    ENUM = "enum"
    RELATION = "relation"
    OBJECT = "object"
    UNSUPPORTED = "unsupported"


class Cardinality(str, Enum):
    """Whether a field holds one value or a list of values."""

    SINGLE = "single"
    LIST = "list"


class FilterType(str, Enum):
    """Filter strategy generated for a filterable field."""

    EQUALS = "equals"
    RANGE = "range"
    BOOLEAN = "boolean"
    ARRAY = "array"


class RelationKind(str, Enum):
    """Resolved multiplicity of a relation."""

    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_ONE = "many_to_one"
    MANY_TO_MANY = "many_to_many"


class IdStrategy(str, Enum):
    """Parsing strategy for a model's primary identifier."""

    NUMERIC = "numeric"
    UUID = "uuid"
    STRING = "string"
    NONE = "none"


class DiagnosticCode(str, Enum):
    """Codes of non-fatal analysis diagnostics."""

    MULTIPLE_SPECIAL_FIELD_CANDIDATES = "multiple_special_field_candidates"
    SENSITIVE_FIELD_DROPPED = "sensitive_field_dropped"

"""Capability analysis of schema models."""

from schemacaps.analysis.back_references import BackReferenceMatcher
from schemacaps.analysis.builder import (
    AnalysisFailure,
    CapabilitiesBuilder,
    SchemaAnalysis,
    analyze_schema,
)
from schemacaps.analysis.cache import AnalysisCache
from schemacaps.analysis.config import (
    DEFAULT_SPECIAL_FIELD_MATCHERS,
    AnalyzerConfig,
    SpecialFieldMatcher,
    validate_config,
)
from schemacaps.analysis.errors import (
    AmbiguousRelationError,
    AnalysisError,
    ConfigurationError,
    ModelNotFoundError,
    RelationIntegrityError,
)
from schemacaps.analysis.fields import FieldDetector
from schemacaps.analysis.includes import IncludeGenerator
from schemacaps.analysis.models import (
    BackReference,
    Diagnostic,
    FieldAnalysis,
    FilterField,
    ForeignKeyInfo,
    IncludeEntry,
    IncludePlan,
    IncludePlans,
    ModelCapabilities,
    RelationshipAnalysis,
    RelationshipInfo,
    SpecialFields,
)
from schemacaps.analysis.relationships import RelationshipClassifier
from schemacaps.analysis.special_fields import SpecialFieldsDetector
from schemacaps.analysis.unique import UniqueValidator

__all__ = [
    # Stages
    "FieldDetector",
    "RelationshipClassifier",
    "SpecialFieldsDetector",
    "BackReferenceMatcher",
    "UniqueValidator",
    "IncludeGenerator",
    # Orchestration
    "CapabilitiesBuilder",
    "AnalysisCache",
    "analyze_schema",
    "SchemaAnalysis",
    "AnalysisFailure",
    # Configuration
    "AnalyzerConfig",
    "SpecialFieldMatcher",
    "DEFAULT_SPECIAL_FIELD_MATCHERS",
    "validate_config",
    # Results
    "ModelCapabilities",
    "FieldAnalysis",
    "FilterField",
    "SpecialFields",
    "RelationshipInfo",
    "RelationshipAnalysis",
    "BackReference",
    "ForeignKeyInfo",
    "IncludeEntry",
    "IncludePlan",
    "IncludePlans",
    "Diagnostic",
    # Errors
    "AnalysisError",
    "ConfigurationError",
    "ModelNotFoundError",
    "RelationIntegrityError",
    "AmbiguousRelationError",
]

"""Orchestrate the analysis stages into one ModelCapabilities per model."""

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field
from rich.console import Console

from schemacaps.analysis.back_references import BackReferenceMatcher
from schemacaps.analysis.cache import AnalysisCache
from schemacaps.analysis.config import AnalyzerConfig
from schemacaps.analysis.errors import AnalysisError, ModelNotFoundError
from schemacaps.analysis.fields import FieldDetector
from schemacaps.analysis.includes import IncludeGenerator
from schemacaps.analysis.models import (
    ForeignKeyInfo,
    ModelCapabilities,
    RelationshipAnalysis,
    SpecialFields,
)
from schemacaps.analysis.relationships import RelationshipClassifier
from schemacaps.analysis.special_fields import SpecialFieldsDetector
from schemacaps.analysis.unique import UniqueValidator
from schemacaps.schema.models import Model, Schema


class AnalysisFailure(BaseModel):
    """A model whose analysis raised an AnalysisError."""

    model: str
    error_type: str = Field(..., description="Exception class name")
    message: str


class SchemaAnalysis(BaseModel):
    """Results of analyzing every model of a schema."""

    results: Dict[str, ModelCapabilities] = Field(default_factory=dict)
    failures: List[AnalysisFailure] = Field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)


class CapabilitiesBuilder:
    """Build ModelCapabilities for the models of one schema snapshot."""

    def __init__(
        self,
        schema: Schema,
        config: Optional[AnalyzerConfig] = None,
        cache: Optional[AnalysisCache] = None,
    ):
        """
        Initialize the builder.

        Args:
            schema: Immutable schema snapshot shared by every analysis
            config: Analyzer configuration (defaults when not given)
            cache: Result cache for this run (a fresh one when not given)
        """
        self.schema = schema
        self.config = config or AnalyzerConfig()
        self.cache = cache if cache is not None else AnalysisCache()

        self.unique_validator = UniqueValidator()
        self.field_detector = FieldDetector(self.config)
        self.relationship_classifier = RelationshipClassifier(
            schema, self.config, self.unique_validator
        )
        self.special_fields_detector = SpecialFieldsDetector(self.config)
        self.back_reference_matcher = BackReferenceMatcher(schema)
        self.include_generator = IncludeGenerator(schema, self.config)

    def build(self, model: Union[Model, str]) -> ModelCapabilities:
        """
        Analyze one model.

        Args:
            model: Model or model name

        Returns:
            Immutable ModelCapabilities

        Raises:
            ModelNotFoundError: If a model name is not part of the schema
            RelationIntegrityError: If a relation targets an undefined model
            AmbiguousRelationError: If a back-reference pairing is ambiguous
        """
        if isinstance(model, str):
            resolved = self.schema.get_model(model)
            if resolved is None:
                raise ModelNotFoundError(f"Model '{model}' not found in schema")
            model = resolved

        cached = self.cache.get(model.name, self.config)
        if cached is not None:
            return cached

        capabilities = self._analyze(model)
        self.cache.set(model.name, self.config, capabilities)
        return capabilities

    def build_all(self) -> Dict[str, ModelCapabilities]:
        """Analyze every model in schema order; the first failure propagates."""
        return {model.name: self.build(model) for model in self.schema.models}

    def _analyze(self, model: Model) -> ModelCapabilities:
        fields = self.field_detector.analyze(model)
        relationships = self.relationship_classifier.classify(model)
        special = self.special_fields_detector.detect(model)
        back_references = self.back_reference_matcher.match(model)
        relationships = self.relationship_classifier.resolve(
            model, relationships, back_references
        )

        unique_fields = self.unique_validator.unique_fields(model)
        includes, include_diagnostics = self.include_generator.generate(
            model, relationships
        )

        sf = special.special_fields
        id_field = model.id_field

        return ModelCapabilities(
            model=model.name,
            scalar_fields=fields.scalar_fields,
            enum_fields=fields.enum_fields,
            relation_fields=fields.relation_fields,
            opaque_fields=fields.opaque_fields,
            filter_fields=fields.filter_fields,
            search_fields=fields.search_fields,
            sort_fields=fields.sort_fields,
            sensitive_fields=fields.sensitive_fields,
            exposed_fields=fields.exposed_fields,
            special_fields=sf,
            has_search=bool(fields.search_fields),
            has_filters=bool(fields.filter_fields),
            has_find_by_slug=sf.slug is not None and sf.slug in unique_fields,
            has_published=sf.published is not None,
            has_soft_delete=sf.deleted_at is not None,
            has_views=sf.views is not None,
            has_approval=sf.approved is not None,
            has_featured=sf.featured is not None,
            has_active=sf.active is not None,
            relationships=relationships.relationships,
            foreign_keys=tuple(self._foreign_keys(relationships)),
            has_parent_child=self._has_parent_child(relationships, sf),
            is_junction_table=relationships.is_junction_table,
            id_field=id_field.name if id_field else None,
            id_strategy=self.unique_validator.id_strategy(model),
            unique_fields=tuple(unique_fields),
            includes=includes,
            diagnostics=special.diagnostics + tuple(include_diagnostics),
        )

    @staticmethod
    def _foreign_keys(relationships: RelationshipAnalysis) -> List[ForeignKeyInfo]:
        return [
            ForeignKeyInfo(
                fields=rel.fk_field_names,
                relation_field=rel.field_name,
                target=rel.target_model,
                references=rel.references,
                relation_name=rel.relation_name,
            )
            for rel in relationships.relationships
            if rel.is_owner
        ]

    @staticmethod
    def _has_parent_child(
        relationships: RelationshipAnalysis, special_fields: SpecialFields
    ) -> bool:
        """A named hierarchy self-relation, or a parent id backing a self-relation."""
        for rel in relationships.relationships:
            if not rel.is_self_reference:
                continue
            if rel.is_hierarchy_candidate:
                return True
            if special_fields.parent_id and special_fields.parent_id in rel.fk_field_names:
                return True
        return False


def analyze_schema(
    schema: Schema,
    config: Optional[AnalyzerConfig] = None,
    collect_errors: bool = False,
    console: Optional[Console] = None,
) -> SchemaAnalysis:
    """
    Analyze every model of a schema.

    Args:
        schema: Schema snapshot
        config: Analyzer configuration (defaults when not given)
        collect_errors: Record per-model failures and keep analyzing the other
            models instead of raising the first one
        console: Optional console to report diagnostics and failures on

    Returns:
        SchemaAnalysis with results by model name and any recorded failures

    Raises:
        AnalysisError: The first per-model failure, unless collect_errors is set
    """
    builder = CapabilitiesBuilder(schema, config)
    analysis = SchemaAnalysis()

    for model in schema.models:
        try:
            capabilities = builder.build(model)
        except AnalysisError as e:
            if not collect_errors:
                raise
            analysis.failures.append(
                AnalysisFailure(
                    model=model.name, error_type=type(e).__name__, message=str(e)
                )
            )
            if console:
                console.print(f"[red]Error:[/red] {model.name}: {e}")
            continue

        analysis.results[model.name] = capabilities
        if console:
            for diagnostic in capabilities.diagnostics:
                console.print(
                    f"[yellow]Warning:[/yellow] {diagnostic.model}: {diagnostic.message}"
                )

    return analysis

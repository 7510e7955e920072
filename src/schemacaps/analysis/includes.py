"""Bounded eager-load (include) plans.

Plans only ever cover a model's direct relations (depth 1), so their size is
bounded by the number of relation fields whatever the schema topology, and
self-referential or cyclic schemas cannot cause nested expansion.
"""

from typing import List, Tuple

from schemacaps.analysis.config import AnalyzerConfig
from schemacaps.analysis.fields import is_sensitive_field
from schemacaps.analysis.models import (
    Diagnostic,
    IncludeEntry,
    IncludePlan,
    IncludePlans,
    RelationshipAnalysis,
    RelationshipInfo,
)
from schemacaps.global_models import DiagnosticCode, FieldKind, RelationKind
from schemacaps.schema.models import Model, Schema

MAX_INCLUDE_DEPTH = 1

_HAS_ONE_KINDS = (RelationKind.MANY_TO_ONE, RelationKind.ONE_TO_ONE)


class IncludeGenerator:
    """Build default and detailed include plans for a model."""

    def __init__(self, schema: Schema, config: AnalyzerConfig):
        self.schema = schema
        self.config = config

    def generate(
        self, model: Model, relationships: RelationshipAnalysis
    ) -> Tuple[IncludePlans, List[Diagnostic]]:
        """
        Build both include plans.

        Args:
            model: Model being analyzed
            relationships: Resolved relationship analysis of the model

        Returns:
            Tuple of (IncludePlans, diagnostics raised while projecting)
        """
        diagnostics: List[Diagnostic] = []
        default_entries: List[IncludeEntry] = []
        detailed_entries: List[IncludeEntry] = []

        for rel in relationships.relationships:
            target = self.schema.model_map[rel.target_model]

            if not relationships.is_junction_table and self._auto_include(rel):
                default_entries.append(
                    IncludeEntry(
                        relation=rel.field_name,
                        target_model=target.name,
                        cardinality=rel.cardinality,
                        select=tuple(self._display_projection(model, rel, target, diagnostics)),
                        depth=MAX_INCLUDE_DEPTH,
                    )
                )

            detailed_entries.append(
                IncludeEntry(
                    relation=rel.field_name,
                    target_model=target.name,
                    cardinality=rel.cardinality,
                    select=tuple(self._exposed_projection(target)),
                    depth=MAX_INCLUDE_DEPTH,
                )
            )

        plans = IncludePlans(
            default=IncludePlan(entries=tuple(default_entries)),
            detailed=IncludePlan(entries=tuple(detailed_entries)),
        )
        return plans, diagnostics

    def _auto_include(self, rel: RelationshipInfo) -> bool:
        """Owning has-one relations, required ones only unless configured otherwise."""
        if not rel.is_owner or rel.is_list or rel.kind not in _HAS_ONE_KINDS:
            return False
        return rel.required or not self.config.auto_include_required_only

    def _is_sensitive(self, name: str) -> bool:
        return is_sensitive_field(name, self.config.sensitive_field_patterns)

    def _display_projection(
        self,
        model: Model,
        rel: RelationshipInfo,
        target: Model,
        diagnostics: List[Diagnostic],
    ) -> List[str]:
        """Target id field(s) plus up to max_display_fields display fields."""
        id_field = target.id_field
        id_names = [id_field.name] if id_field else list(target.primary_key)

        projection = [
            name
            for name in id_names
            if not self._drop_sensitive(model, rel, target, name, diagnostics)
        ]

        # Sensitive candidates are dropped before they take a display slot
        display: List[str] = []
        for name in self.config.display_field_names:
            if len(display) >= self.config.max_display_fields:
                break
            field = target.get_field(name)
            if field is None or field.name in id_names or field.name in display:
                continue
            if field.kind not in (FieldKind.SCALAR, FieldKind.ENUM) or field.is_list:
                continue
            if self._drop_sensitive(model, rel, target, field.name, diagnostics):
                continue
            display.append(field.name)

        return projection + display

    def _drop_sensitive(
        self,
        model: Model,
        rel: RelationshipInfo,
        target: Model,
        name: str,
        diagnostics: List[Diagnostic],
    ) -> bool:
        """Report and reject a sensitive field proposed for a default include."""
        if not self._is_sensitive(name):
            return False
        diagnostics.append(
            Diagnostic(
                model=model.name,
                field=rel.field_name,
                code=DiagnosticCode.SENSITIVE_FIELD_DROPPED,
                message=(
                    f"Dropped sensitive field '{target.name}.{name}' from the "
                    f"default include of '{rel.field_name}'"
                ),
            )
        )
        return True

    def _exposed_projection(self, target: Model) -> List[str]:
        """Every non-sensitive scalar and enum field of the target."""
        return [
            f.name
            for f in target.fields
            if f.kind in (FieldKind.SCALAR, FieldKind.ENUM)
            and not self._is_sensitive(f.name)
        ]

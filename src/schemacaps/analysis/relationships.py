"""Relationship classification: direction, ownership, hierarchy and junctions."""

import re
from typing import List, Mapping, Optional

from schemacaps.analysis.config import AnalyzerConfig
from schemacaps.analysis.errors import RelationIntegrityError
from schemacaps.analysis.fields import normalize_field_name
from schemacaps.analysis.models import (
    BackReference,
    RelationshipAnalysis,
    RelationshipInfo,
)
from schemacaps.analysis.unique import UniqueValidator
from schemacaps.global_models import Cardinality, FieldKind, RelationKind
from schemacaps.schema.models import Model, Schema, SchemaField


class RelationshipClassifier:
    """Classify the relation fields of a model against the schema."""

    def __init__(
        self,
        schema: Schema,
        config: AnalyzerConfig,
        unique_validator: Optional[UniqueValidator] = None,
    ):
        """
        Initialize the classifier.

        Args:
            schema: Schema snapshot used for target model lookups
            config: Analyzer configuration (hierarchy patterns, junction limits)
            unique_validator: Validator used to tell 1:1 from M:1 foreign keys
        """
        self.schema = schema
        self.config = config
        self.unique_validator = unique_validator or UniqueValidator()

    def classify(self, model: Model) -> RelationshipAnalysis:
        """
        Classify every relation field of a model.

        Relation kinds are left unresolved here; call resolve() once the
        back-references are known.

        Args:
            model: Model to classify

        Returns:
            RelationshipAnalysis with one entry per relation field

        Raises:
            RelationIntegrityError: If a relation targets an undefined model
        """
        relationships: List[RelationshipInfo] = []
        for field in model.relation_fields:
            target_name = field.relation.target_model
            if target_name not in self.schema.model_map:
                raise RelationIntegrityError(model.name, field.name, target_name)

            is_self = target_name == model.name
            relationships.append(
                RelationshipInfo(
                    field_name=field.name,
                    target_model=target_name,
                    cardinality=field.cardinality,
                    required=self._is_required(model, field),
                    is_owner=field.is_owner,
                    fk_field_names=field.relation.fk_field_names,
                    references=field.relation.references,
                    relation_name=field.relation.relation_name,
                    is_self_reference=is_self,
                    is_hierarchy_candidate=is_self and self._matches_hierarchy(field),
                )
            )

        return RelationshipAnalysis(
            relationships=tuple(relationships),
            is_junction_table=self.is_junction_table(model),
        )

    def resolve(
        self,
        model: Model,
        analysis: RelationshipAnalysis,
        back_references: Mapping[str, BackReference],
    ) -> RelationshipAnalysis:
        """
        Resolve relation kinds using matched back-references.

        Bidirectional relations are classified from both cardinalities.
        Unidirectional relations fall back to FK uniqueness and junction
        heuristics.

        Args:
            model: Model the relations belong to
            analysis: Result of classify()
            back_references: Matched back-references keyed by field name

        Returns:
            New RelationshipAnalysis with kind and reciprocal_field set
        """
        resolved: List[RelationshipInfo] = []
        for rel in analysis.relationships:
            back_ref = back_references.get(rel.field_name)
            resolved.append(
                rel.model_copy(
                    update={
                        "kind": self._resolve_kind(model, rel, back_ref),
                        "reciprocal_field": (
                            back_ref.reciprocal_field_name if back_ref else None
                        ),
                    }
                )
            )
        return analysis.model_copy(update={"relationships": tuple(resolved)})

    def _resolve_kind(
        self,
        model: Model,
        rel: RelationshipInfo,
        back_ref: Optional[BackReference],
    ) -> RelationKind:
        if back_ref is not None:
            other_is_list = back_ref.reciprocal_cardinality == Cardinality.LIST
            if rel.is_list and other_is_list:
                return RelationKind.MANY_TO_MANY
            if rel.is_list:
                return RelationKind.ONE_TO_MANY
            if other_is_list:
                return RelationKind.MANY_TO_ONE
            return RelationKind.ONE_TO_ONE

        if rel.is_owner:
            if self.unique_validator.are_fields_unique(model, rel.fk_field_names):
                return RelationKind.ONE_TO_ONE
            return RelationKind.MANY_TO_ONE
        if rel.is_list:
            target = self.schema.model_map[rel.target_model]
            if self.is_junction_table(target):
                return RelationKind.MANY_TO_MANY
            return RelationKind.ONE_TO_MANY
        return RelationKind.ONE_TO_ONE

    def _is_required(self, model: Model, field: SchemaField) -> bool:
        if field.is_list:
            return False
        if not field.is_owner:
            return field.required
        fk_fields = [model.get_field(name) for name in field.relation.fk_field_names]
        if any(f is None for f in fk_fields):
            return field.required
        return field.required and all(f.required for f in fk_fields)

    def _matches_hierarchy(self, field: SchemaField) -> bool:
        """Name heuristic separating parent/child links from other self-relations."""
        candidates = [field.name, *field.relation.fk_field_names]
        if field.relation.relation_name:
            candidates.append(field.relation.relation_name)
        patterns = (self.config.parent_field_pattern, self.config.child_field_pattern)
        return any(
            re.search(pattern, normalize_field_name(name), re.IGNORECASE)
            for name in candidates
            for pattern in patterns
        )

    def is_junction_table(self, model: Model) -> bool:
        """
        Check whether a model only associates two other models.

        A junction has exactly two owning relations to two distinct models, no
        other relation fields, and at most junction_max_extra_fields further
        scalar fields, each of them incidental (DateTime typed or a configured
        system field name such as createdAt).

        Args:
            model: Model to check

        Returns:
            True for a junction table
        """
        relation_fields = model.relation_fields
        owners = [f for f in relation_fields if f.is_owner]
        if len(owners) != 2 or len(relation_fields) != 2:
            return False
        if owners[0].relation.target_model == owners[1].relation.target_model:
            return False

        key_fields = set(model.primary_key)
        for owner in owners:
            key_fields.update(owner.relation.fk_field_names)

        extras = [
            f
            for f in model.fields
            if f.kind in (FieldKind.SCALAR, FieldKind.ENUM)
            and not f.is_id
            and f.name not in key_fields
        ]
        if len(extras) > self.config.junction_max_extra_fields:
            return False

        system_names = {
            normalize_field_name(n) for n in self.config.junction_system_field_names
        }
        return all(
            f.type == "DateTime" or normalize_field_name(f.name) in system_names
            for f in extras
        )

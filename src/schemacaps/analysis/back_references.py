"""Pair relation fields with their counterparts on the target model."""

from typing import Dict, List, Optional

from schemacaps.analysis.errors import AmbiguousRelationError, RelationIntegrityError
from schemacaps.analysis.models import BackReference
from schemacaps.schema.models import Model, RelationRef, Schema, SchemaField


class BackReferenceMatcher:
    """Match back-references through the schema's reverse relation map."""

    def __init__(self, schema: Schema):
        self.schema = schema

    def match(self, model: Model) -> Dict[str, BackReference]:
        """
        Match every relation field of a model.

        Args:
            model: Model whose relation fields are paired

        Returns:
            Dict of field name to BackReference, for paired fields only

        Raises:
            RelationIntegrityError: If a relation targets an undefined model
            AmbiguousRelationError: If a pairing needs an explicit relation name
        """
        matched: Dict[str, BackReference] = {}
        for field in model.relation_fields:
            back_ref = self.find_back_reference(model, field)
            if back_ref is not None:
                matched[field.name] = back_ref
        return matched

    def find_back_reference(
        self, model: Model, field: SchemaField
    ) -> Optional[BackReference]:
        """
        Find the counterpart of a relation field on its target model.

        Candidates are the target's relation fields pointing back at `model`.
        When either side links the two models through more than one relation
        field, both sides must carry the same relation name; the pairing is
        never guessed.

        Args:
            model: Model declaring the field
            field: Relation field to pair

        Returns:
            BackReference, or None for a unidirectional relation

        Raises:
            RelationIntegrityError: If the target model is undefined
            AmbiguousRelationError: If the models are linked several times and
                the field or its candidates lack a relation name
        """
        target_name = field.relation.target_model
        target = self.schema.model_map.get(target_name)
        if target is None:
            raise RelationIntegrityError(model.name, field.name, target_name)

        candidates: List[RelationRef] = [
            ref
            for ref in self.schema.reverse_relation_map.get(model.name, ())
            if ref.source_model == target_name
            and not (target_name == model.name and ref.field_name == field.name)
        ]
        if not candidates:
            return None

        # Own fields linking to the same target; a self-relation has none
        # beyond the candidates themselves
        siblings: List[str] = []
        if target_name != model.name:
            siblings = [
                ref.field_name
                for ref in self.schema.reverse_relation_map.get(target_name, ())
                if ref.source_model == model.name
            ]

        relation_name = field.relation.relation_name
        if len(candidates) > 1 or len(siblings) > 1:
            unnamed = [ref.field_name for ref in candidates if not ref.relation_name]
            if not relation_name or unnamed:
                linked = (
                    [ref.field_name for ref in candidates] if len(candidates) > 1 else siblings
                )
                raise AmbiguousRelationError(model.name, field.name, target_name, linked)

        if relation_name:
            named = [ref for ref in candidates if ref.relation_name == relation_name]
            if len(named) > 1:
                raise AmbiguousRelationError(
                    model.name, field.name, target_name, [ref.field_name for ref in named]
                )
            if not named:
                if len(candidates) == 1 and not candidates[0].relation_name:
                    named = candidates
                else:
                    return None
            candidates = named

        partner = candidates[0]
        return BackReference(
            field_name=field.name,
            target_model=target_name,
            reciprocal_field_name=partner.field_name,
            reciprocal_cardinality=partner.cardinality,
            fk_field_names=field.relation.fk_field_names or partner.fk_field_names,
            relation_name=relation_name or partner.relation_name,
        )

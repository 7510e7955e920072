"""Structural validation of a loaded schema."""

from typing import List

from pydantic import BaseModel, Field

from schemacaps.global_models import FieldKind
from schemacaps.schema.models import Model, Schema


class SchemaValidationResult(BaseModel):
    """Errors and warnings found in a schema."""

    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _check_model(model: Model, schema: Schema, result: SchemaValidationResult) -> None:
    field_names = {f.name for f in model.fields}

    if model.id_field is None and not model.primary_key:
        result.errors.append(f"Model '{model.name}' has no id field or primary key")

    for name in model.primary_key:
        if name not in field_names:
            result.errors.append(
                f"Primary key of model '{model.name}' references missing field '{name}'"
            )

    for constraint in model.unique_constraints:
        for name in constraint:
            if name not in field_names:
                result.errors.append(
                    f"Unique constraint ({', '.join(constraint)}) of model "
                    f"'{model.name}' references missing field '{name}'"
                )

    for field in model.fields:
        if field.kind == FieldKind.ENUM and field.type not in schema.enum_map:
            result.warnings.append(
                f"Field '{model.name}.{field.name}' uses undefined enum '{field.type}'"
            )
        if field.kind == FieldKind.UNSUPPORTED:
            result.warnings.append(
                f"Field '{model.name}.{field.name}' has unsupported type '{field.type}' "
                "and is left out of filters, search and sorting"
            )
        if field.relation is None:
            continue

        relation = field.relation
        if relation.target_model not in schema.model_map:
            result.errors.append(
                f"Relation '{model.name}.{field.name}' points to undefined model "
                f"'{relation.target_model}'"
            )
        for name in relation.fk_field_names:
            if name not in field_names:
                result.errors.append(
                    f"Relation '{model.name}.{field.name}' uses missing foreign key "
                    f"field '{name}'"
                )
        if relation.references and len(relation.references) != len(relation.fk_field_names):
            result.errors.append(
                f"Relation '{model.name}.{field.name}' has {len(relation.fk_field_names)} "
                f"foreign key field(s) but {len(relation.references)} referenced field(s)"
            )


def validate_schema(schema: Schema) -> SchemaValidationResult:
    """
    Validate the structure of a schema.

    Args:
        schema: Schema to check

    Returns:
        SchemaValidationResult; is_valid is False when any error was found
    """
    # Imported here: the graph package depends on the schema package
    from schemacaps.graph.builder import RelationGraphBuilder

    result = SchemaValidationResult()

    for enum_def in schema.enums:
        if not enum_def.values:
            result.errors.append(f"Enum '{enum_def.name}' has no values")

    for model in schema.models:
        _check_model(model, schema, result)

    for cycle in RelationGraphBuilder(schema).find_required_cycles():
        if len(cycle) == 1:
            result.errors.append(
                f"Model '{cycle[0]}' has a required relation to itself; "
                "no record could ever be created"
            )
        else:
            result.errors.append(
                f"Circular required relations between {', '.join(cycle)}; make at "
                "least one of them optional"
            )

    return result

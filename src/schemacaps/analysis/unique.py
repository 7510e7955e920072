"""Single-record lookup safety: which fields are guaranteed unique."""

from typing import Iterable, List

from schemacaps.global_models import FieldKind, IdStrategy
from schemacaps.schema.models import Model

FORMATTED_ID_DEFAULTS = ("uuid(", "cuid(", "ulid(", "nanoid(")


class UniqueValidator:
    """Decide which fields of a model guarantee at-most-one-match lookups."""

    def is_field_unique(self, model: Model, field_name: str) -> bool:
        """
        Check whether a single field is safely unique.

        A field qualifies when it is the primary identifier, carries its own
        unique flag, or is the only member of the primary key or of a unique
        constraint. Members of multi-field constraints do not qualify.

        Args:
            model: Model owning the field
            field_name: Field to check

        Returns:
            True if a lookup by this field matches at most one record
        """
        field = model.get_field(field_name)
        if field is None or field.kind == FieldKind.RELATION:
            return False
        if field.is_id or field.unique:
            return True
        if model.primary_key == (field_name,):
            return True
        return any(constraint == (field_name,) for constraint in model.unique_constraints)

    def are_fields_unique(self, model: Model, field_names: Iterable[str]) -> bool:
        """
        Check whether a set of fields jointly identifies at most one record.

        Args:
            model: Model owning the fields
            field_names: Field names, e.g. the FK fields of a relation

        Returns:
            True if any single member is unique, or the set exactly matches the
            primary key or a unique constraint
        """
        names = tuple(field_names)
        if not names:
            return False
        if any(self.is_field_unique(model, name) for name in names):
            return True
        wanted = set(names)
        if model.primary_key and set(model.primary_key) == wanted:
            return True
        return any(set(c) == wanted for c in model.unique_constraints)

    def unique_fields(self, model: Model) -> List[str]:
        """All safely-unique scalar and enum fields, in declaration order."""
        return [
            f.name
            for f in model.fields
            if f.kind in (FieldKind.SCALAR, FieldKind.ENUM)
            and self.is_field_unique(model, f.name)
        ]

    def id_strategy(self, model: Model) -> IdStrategy:
        """
        Choose how generated code should parse the primary identifier.

        Returns:
            NUMERIC for integer ids, UUID for fixed-format generated ids,
            STRING for other ids, NONE when the model has no single id field
        """
        id_field = model.id_field
        if id_field is None:
            return IdStrategy.NONE
        if id_field.type in ("Int", "BigInt"):
            return IdStrategy.NUMERIC
        default = (id_field.default or "").lower()
        if id_field.type == "Uuid" or default.startswith(FORMATTED_ID_DEFAULTS):
            return IdStrategy.UUID
        return IdStrategy.STRING

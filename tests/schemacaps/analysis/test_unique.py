"""Unit tests for unique field validation."""

import pytest

from schemacaps.analysis.unique import UniqueValidator
from schemacaps.global_models import IdStrategy
from schemacaps.schema.models import Model, SchemaField


@pytest.fixture
def validator():
    return UniqueValidator()


@pytest.fixture
def membership():
    """Membership with single-field and composite unique constraints."""
    return Model(
        name="Membership",
        fields=[
            SchemaField(name="id", type="Int", is_id=True),
            SchemaField(name="code", type="String"),
            SchemaField(name="email", type="String", unique=True),
            SchemaField(name="orgId", type="Int"),
            SchemaField(name="userId", type="Int"),
            SchemaField(name="role", kind="enum", type="Role"),
        ],
        unique_constraints=[("code",), ("orgId", "userId")],
    )


class TestUniqueValidator:
    """Tests for UniqueValidator."""

    def test_id_is_unique(self, validator, membership):
        """Test that the primary identifier is unique."""
        assert validator.is_field_unique(membership, "id") is True

    def test_field_unique_flag(self, validator, membership):
        """Test that a field-level unique flag qualifies."""
        assert validator.is_field_unique(membership, "email") is True

    def test_single_field_constraint(self, validator, membership):
        """Test that the sole member of a unique constraint qualifies."""
        assert validator.is_field_unique(membership, "code") is True

    def test_composite_members_not_unique(self, validator, membership):
        """Test that members of a two-field constraint are not individually unique."""
        assert validator.is_field_unique(membership, "orgId") is False
        assert validator.is_field_unique(membership, "userId") is False

    def test_plain_and_unknown_fields(self, validator, membership):
        """Test that plain and missing fields are not unique."""
        assert validator.is_field_unique(membership, "role") is False
        assert validator.is_field_unique(membership, "missing") is False

    def test_composite_set_is_unique(self, validator, membership):
        """Test that the exact composite set identifies one record."""
        assert validator.are_fields_unique(membership, ["userId", "orgId"]) is True
        assert validator.are_fields_unique(membership, ["orgId"]) is False
        assert validator.are_fields_unique(membership, []) is False

    def test_unique_fields_in_declaration_order(self, validator, membership):
        """Test the list of safely unique fields."""
        assert validator.unique_fields(membership) == ["id", "code", "email"]

    def test_single_column_primary_key(self, validator):
        """Test that a one-column primary_key acts as the identifier."""
        model = Model(
            name="Country",
            fields=[SchemaField(name="isoCode", type="String")],
            primary_key=["isoCode"],
        )
        assert validator.is_field_unique(model, "isoCode") is True
        assert validator.id_strategy(model) == IdStrategy.STRING

    def test_composite_primary_key_members(self, validator):
        """Test that composite primary key members are not individually unique."""
        model = Model(
            name="Enrollment",
            fields=[
                SchemaField(name="studentId", type="Int"),
                SchemaField(name="courseId", type="Int"),
            ],
            primary_key=["studentId", "courseId"],
        )
        assert validator.is_field_unique(model, "studentId") is False
        assert validator.are_fields_unique(model, ["courseId", "studentId"]) is True
        assert validator.id_strategy(model) == IdStrategy.NONE


class TestIdStrategy:
    """Tests for primary id parsing strategy."""

    @pytest.mark.parametrize(
        "field_type,default,expected",
        [
            ("Int", "autoincrement()", IdStrategy.NUMERIC),
            ("BigInt", None, IdStrategy.NUMERIC),
            ("Uuid", None, IdStrategy.UUID),
            ("String", "uuid()", IdStrategy.UUID),
            ("String", "cuid()", IdStrategy.UUID),
            ("String", "nanoid(16)", IdStrategy.UUID),
            ("String", None, IdStrategy.STRING),
        ],
    )
    def test_strategy_by_type_and_default(self, validator, field_type, default, expected):
        """Test strategy selection from id type and default."""
        model = Model(
            name="Thing",
            fields=[
                SchemaField(
                    name="id",
                    type=field_type,
                    is_id=True,
                    has_default=default is not None,
                    default=default,
                )
            ],
        )
        assert validator.id_strategy(model) == expected

"""Tests for structural schema validation."""

from schemacaps.schema.models import EnumDef, Model, RelationInfo, Schema, SchemaField
from schemacaps.schema.validation import validate_schema


def _required_link(name, target, fk):
    return SchemaField(
        name=name,
        kind="relation",
        type=target,
        relation=RelationInfo(target_model=target, fk_field_names=(fk,)),
    )


class TestValidateSchema:
    """Tests for validate_schema."""

    def test_valid_schema(self, blog_schema):
        """Test that a well-formed schema has no errors."""
        result = validate_schema(blog_schema)

        assert result.is_valid is True
        assert result.errors == []

    def test_hierarchy_with_optional_parent_is_valid(self, category_schema):
        """Test that an optional self-reference is not a cycle error."""
        assert validate_schema(category_schema).is_valid is True

    def test_missing_identifier(self):
        """Test that a model without id or primary key is an error."""
        schema = Schema([Model(name="Log", fields=[SchemaField(name="line", type="String")])])
        result = validate_schema(schema)

        assert result.is_valid is False
        assert "Model 'Log' has no id field or primary key" in result.errors

    def test_missing_key_fields(self):
        """Test that key and constraint members must exist."""
        model = Model(
            name="Enrollment",
            fields=[SchemaField(name="studentId", type="Int")],
            primary_key=["studentId", "courseId"],
            unique_constraints=[("studentId", "term")],
        )
        result = validate_schema(Schema([model]))

        assert any("missing field 'courseId'" in e for e in result.errors)
        assert any("missing field 'term'" in e for e in result.errors)

    def test_relation_problems(self):
        """Test undefined targets, missing FK fields and reference mismatches."""
        post = Model(
            name="Post",
            fields=[
                SchemaField(name="id", type="Int", is_id=True),
                SchemaField(
                    name="writer",
                    kind="relation",
                    type="Writer",
                    relation=RelationInfo(target_model="Writer"),
                ),
                SchemaField(
                    name="editor",
                    kind="relation",
                    type="Post",
                    required=False,
                    relation=RelationInfo(
                        target_model="Post",
                        fk_field_names=("editorId",),
                        references=("id", "slug"),
                    ),
                ),
            ],
        )
        errors = validate_schema(Schema([post])).errors

        assert any("undefined model 'Writer'" in e for e in errors)
        assert any("missing foreign key field 'editorId'" in e for e in errors)
        assert any("1 foreign key field(s) but 2 referenced field(s)" in e for e in errors)

    def test_empty_enum(self):
        """Test that enums must declare values."""
        schema = Schema(
            [Model(name="A", fields=[SchemaField(name="id", type="Int", is_id=True)])],
            [EnumDef(name="Status")],
        )
        assert "Enum 'Status' has no values" in validate_schema(schema).errors

    def test_warnings(self):
        """Test warnings for undefined enums and unsupported fields."""
        model = Model(
            name="Place",
            fields=[
                SchemaField(name="id", type="Int", is_id=True),
                SchemaField(name="kind", kind="enum", type="PlaceKind"),
                SchemaField(name="area", kind="unsupported", type="geometry"),
            ],
        )
        result = validate_schema(Schema([model]))

        assert result.is_valid is True
        assert len(result.warnings) == 2
        assert "undefined enum 'PlaceKind'" in result.warnings[0]
        assert "unsupported type 'geometry'" in result.warnings[1]

    def test_required_cycle(self):
        """Test that mutually required relations are reported."""
        a = Model(
            name="A",
            fields=[
                SchemaField(name="id", type="Int", is_id=True),
                SchemaField(name="bId", type="Int"),
                _required_link("b", "B", "bId"),
            ],
        )
        b = Model(
            name="B",
            fields=[
                SchemaField(name="id", type="Int", is_id=True),
                SchemaField(name="aId", type="Int"),
                _required_link("a", "A", "aId"),
            ],
        )
        errors = validate_schema(Schema([a, b])).errors

        assert errors == [
            "Circular required relations between A, B; make at least one of them optional"
        ]

    def test_required_self_cycle(self):
        """Test that a required relation to the model itself is reported."""
        node = Model(
            name="Node",
            fields=[
                SchemaField(name="id", type="Int", is_id=True),
                SchemaField(name="nextId", type="Int"),
                _required_link("next", "Node", "nextId"),
            ],
        )
        errors = validate_schema(Schema([node])).errors

        assert len(errors) == 1
        assert "required relation to itself" in errors[0]

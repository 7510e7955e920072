"""Unit tests for back-reference matching."""

import pytest

from schemacaps.analysis.back_references import BackReferenceMatcher
from schemacaps.analysis.errors import AmbiguousRelationError, RelationIntegrityError
from schemacaps.global_models import Cardinality
from schemacaps.schema.models import Model, RelationInfo, Schema, SchemaField


def _relation(name, target, fk=(), list_=False, relation_name=None, required=True):
    return SchemaField(
        name=name,
        kind="relation",
        type=target,
        cardinality="list" if list_ else "single",
        required=required and not list_,
        relation=RelationInfo(
            target_model=target, fk_field_names=fk, relation_name=relation_name
        ),
    )


def _two_link_schema(user_names=(None, None), post_names=(None, None)):
    """User with authored and edited posts; names optionally disambiguate."""
    user = Model(
        name="User",
        fields=[
            SchemaField(name="id", type="Int", is_id=True),
            _relation("posts", "Post", list_=True, relation_name=user_names[0]),
            _relation("editedPosts", "Post", list_=True, relation_name=user_names[1]),
        ],
    )
    post = Model(
        name="Post",
        fields=[
            SchemaField(name="id", type="Int", is_id=True),
            SchemaField(name="authorId", type="Int"),
            SchemaField(name="editorId", type="Int", required=False),
            _relation("author", "User", fk=("authorId",), relation_name=post_names[0]),
            _relation(
                "editor",
                "User",
                fk=("editorId",),
                relation_name=post_names[1],
                required=False,
            ),
        ],
    )
    return Schema([user, post])


def _owning_side_schema(user_name=None, post_names=(None, None)):
    """Post links to User twice while User declares a single back-reference."""
    user = Model(
        name="User",
        fields=[
            SchemaField(name="id", type="Int", is_id=True),
            _relation("posts", "Post", list_=True, relation_name=user_name),
        ],
    )
    post = Model(
        name="Post",
        fields=[
            SchemaField(name="id", type="Int", is_id=True),
            SchemaField(name="authorId", type="Int"),
            SchemaField(name="editorId", type="Int", required=False),
            _relation("author", "User", fk=("authorId",), relation_name=post_names[0]),
            _relation(
                "editor",
                "User",
                fk=("editorId",),
                relation_name=post_names[1],
                required=False,
            ),
        ],
    )
    return Schema([user, post])


class TestBackReferenceMatcher:
    """Tests for BackReferenceMatcher."""

    def test_single_candidate_pairs(self, blog_schema):
        """Test that one counterpart pairs without a relation name."""
        matcher = BackReferenceMatcher(blog_schema)
        post = blog_schema.get_model("Post")

        back_ref = matcher.find_back_reference(post, post.get_field("author"))

        assert back_ref is not None
        assert back_ref.reciprocal_field_name == "posts"
        assert back_ref.reciprocal_cardinality == Cardinality.LIST
        assert back_ref.fk_field_names == ("authorId",)

    def test_back_reference_side_gets_partner_fks(self, blog_schema):
        """Test that the list side reports the owning side's FK fields."""
        matcher = BackReferenceMatcher(blog_schema)
        author = blog_schema.get_model("Author")

        matched = matcher.match(author)

        assert set(matched) == {"posts"}
        assert matched["posts"].reciprocal_field_name == "author"
        assert matched["posts"].reciprocal_cardinality == Cardinality.SINGLE
        assert matched["posts"].fk_field_names == ("authorId",)

    def test_self_relation_excludes_itself(self, category_schema):
        """Test that parent pairs with children, not with itself."""
        matcher = BackReferenceMatcher(category_schema)
        category = category_schema.get_model("Category")

        matched = matcher.match(category)

        assert matched["parent"].reciprocal_field_name == "children"
        assert matched["children"].reciprocal_field_name == "parent"
        assert matched["children"].relation_name == "CategoryHierarchy"

    def test_unidirectional_relation(self):
        """Test that a relation without a counterpart is not paired."""
        user = Model(name="User", fields=[SchemaField(name="id", type="Int", is_id=True)])
        post = Model(
            name="Post",
            fields=[
                SchemaField(name="id", type="Int", is_id=True),
                SchemaField(name="authorId", type="Int"),
                _relation("author", "User", fk=("authorId",)),
            ],
        )
        schema = Schema([user, post])

        assert BackReferenceMatcher(schema).match(post) == {}

    def test_ambiguous_without_names_raises(self):
        """Test that two unnamed counterparts are never guessed."""
        schema = _two_link_schema()
        post = schema.get_model("Post")

        with pytest.raises(AmbiguousRelationError) as exc_info:
            BackReferenceMatcher(schema).match(post)

        assert exc_info.value.model == "Post"
        assert exc_info.value.target == "User"
        assert set(exc_info.value.candidates) == {"posts", "editedPosts"}

    def test_ambiguous_when_only_one_side_named(self):
        """Test that names on the field alone do not disambiguate."""
        schema = _two_link_schema(post_names=("Authored", "Edited"))

        with pytest.raises(AmbiguousRelationError):
            BackReferenceMatcher(schema).match(schema.get_model("Post"))

    def test_named_relations_pair(self):
        """Test that names on both sides resolve every pairing."""
        schema = _two_link_schema(
            user_names=("Authored", "Edited"), post_names=("Authored", "Edited")
        )
        matcher = BackReferenceMatcher(schema)

        post_refs = matcher.match(schema.get_model("Post"))
        user_refs = matcher.match(schema.get_model("User"))

        assert post_refs["author"].reciprocal_field_name == "posts"
        assert post_refs["editor"].reciprocal_field_name == "editedPosts"
        assert user_refs["editedPosts"].reciprocal_field_name == "editor"
        assert user_refs["editedPosts"].fk_field_names == ("editorId",)

    def test_ambiguous_on_owning_side_raises(self):
        """Test that two owning fields never share one unnamed back-reference."""
        schema = _owning_side_schema()

        with pytest.raises(AmbiguousRelationError) as exc_info:
            BackReferenceMatcher(schema).match(schema.get_model("Post"))

        assert exc_info.value.model == "Post"
        assert exc_info.value.field == "author"
        assert exc_info.value.target == "User"
        assert exc_info.value.candidates == ["author", "editor"]

    def test_owning_side_ambiguity_is_symmetric(self):
        """Test that both models of the pair reject the same schema."""
        schema = _owning_side_schema()
        matcher = BackReferenceMatcher(schema)

        for model_name in ("Post", "User"):
            with pytest.raises(AmbiguousRelationError):
                matcher.match(schema.get_model(model_name))

    def test_owning_side_named_relation_pairs(self):
        """Test that matching names pair one owning field and leave the other unpaired."""
        schema = _owning_side_schema(
            user_name="Authored", post_names=("Authored", "Edited")
        )
        matcher = BackReferenceMatcher(schema)

        post_refs = matcher.match(schema.get_model("Post"))
        user_refs = matcher.match(schema.get_model("User"))

        assert set(post_refs) == {"author"}
        assert post_refs["author"].reciprocal_field_name == "posts"
        assert user_refs["posts"].reciprocal_field_name == "author"
        assert user_refs["posts"].fk_field_names == ("authorId",)

    def test_owning_side_partly_named_raises(self):
        """Test that an unnamed owning field stays ambiguous beside a named one."""
        schema = _owning_side_schema(user_name="Authored", post_names=("Authored", None))
        post = schema.get_model("Post")

        with pytest.raises(AmbiguousRelationError) as exc_info:
            BackReferenceMatcher(schema).find_back_reference(post, post.get_field("editor"))

        assert exc_info.value.field == "editor"

    def test_missing_target_raises(self):
        """Test that a relation to an undefined model is an integrity error."""
        post = Model(
            name="Post",
            fields=[
                SchemaField(name="id", type="Int", is_id=True),
                SchemaField(name="authorId", type="Int"),
                _relation("author", "Ghost", fk=("authorId",)),
            ],
        )
        schema = Schema([post])

        with pytest.raises(RelationIntegrityError) as exc_info:
            BackReferenceMatcher(schema).match(post)

        assert exc_info.value.target == "Ghost"

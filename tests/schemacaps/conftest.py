"""Shared schema fixtures for schemacaps tests."""

import pytest

from schemacaps.schema.models import Model, RelationInfo, Schema, SchemaField


@pytest.fixture
def blog_schema():
    """Author/Post schema with one owning relation and its back-reference."""
    author = Model(
        name="Author",
        fields=[
            SchemaField(
                name="id", type="Int", is_id=True, has_default=True, default="autoincrement()"
            ),
            SchemaField(name="name", type="String"),
            SchemaField(name="email", type="String", unique=True),
            SchemaField(
                name="posts",
                kind="relation",
                type="Post",
                cardinality="list",
                required=False,
                relation=RelationInfo(target_model="Post"),
            ),
        ],
    )
    post = Model(
        name="Post",
        fields=[
            SchemaField(
                name="id", type="Int", is_id=True, has_default=True, default="autoincrement()"
            ),
            SchemaField(name="title", type="String"),
            SchemaField(name="slug", type="String", unique=True),
            SchemaField(name="publishedAt", type="DateTime", required=False),
            SchemaField(name="authorId", type="Int"),
            SchemaField(
                name="author",
                kind="relation",
                type="Author",
                relation=RelationInfo(
                    target_model="Author", fk_field_names=("authorId",), references=("id",)
                ),
            ),
            SchemaField(name="views", type="Int", has_default=True, default="0"),
        ],
    )
    return Schema([author, post])


@pytest.fixture
def category_schema():
    """Self-referential Category with a parent/children hierarchy."""
    category = Model(
        name="Category",
        fields=[
            SchemaField(name="id", type="String", is_id=True, has_default=True, default="cuid()"),
            SchemaField(name="name", type="String"),
            SchemaField(name="parentId", type="String", required=False),
            SchemaField(
                name="parent",
                kind="relation",
                type="Category",
                required=False,
                relation=RelationInfo(
                    target_model="Category",
                    fk_field_names=("parentId",),
                    references=("id",),
                    relation_name="CategoryHierarchy",
                ),
            ),
            SchemaField(
                name="children",
                kind="relation",
                type="Category",
                cardinality="list",
                required=False,
                relation=RelationInfo(
                    target_model="Category", relation_name="CategoryHierarchy"
                ),
            ),
        ],
    )
    return Schema([category])


@pytest.fixture
def junction_schema():
    """Post/Tag many-to-many through an explicit PostTag junction model."""
    post = Model(
        name="Post",
        fields=[
            SchemaField(name="id", type="Int", is_id=True),
            SchemaField(name="title", type="String"),
            SchemaField(
                name="tags",
                kind="relation",
                type="PostTag",
                cardinality="list",
                required=False,
                relation=RelationInfo(target_model="PostTag"),
            ),
        ],
    )
    tag = Model(
        name="Tag",
        fields=[
            SchemaField(name="id", type="Int", is_id=True),
            SchemaField(name="label", type="String", unique=True),
            SchemaField(
                name="posts",
                kind="relation",
                type="PostTag",
                cardinality="list",
                required=False,
                relation=RelationInfo(target_model="PostTag"),
            ),
        ],
    )
    post_tag = Model(
        name="PostTag",
        fields=[
            SchemaField(name="id", type="Int", is_id=True),
            SchemaField(name="postId", type="Int"),
            SchemaField(name="tagId", type="Int"),
            SchemaField(
                name="post",
                kind="relation",
                type="Post",
                relation=RelationInfo(target_model="Post", fk_field_names=("postId",)),
            ),
            SchemaField(
                name="tag",
                kind="relation",
                type="Tag",
                relation=RelationInfo(target_model="Tag", fk_field_names=("tagId",)),
            ),
        ],
        unique_constraints=[("postId", "tagId")],
    )
    return Schema([post, tag, post_tag])

"""Pydantic models for the model relationship graph."""

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from schemacaps.global_models import Cardinality


class NodeAttribute(BaseModel):
    """A scalar or enum field shown on a model node."""

    name: str
    type: str
    key: Optional[str] = Field(
        None, description="Key marker: 'PK', 'FK' or 'UK' (None for plain fields)"
    )


class ModelNode(BaseModel):
    """Represents a node in the relationship graph (a model)."""

    name: str = Field(..., description="Model name")
    attributes: List[NodeAttribute] = Field(default_factory=list)


class RelationEdge(BaseModel):
    """Represents an edge in the relationship graph (one relation field)."""

    source_model: str = Field(..., description="Model declaring the relation field")
    target_model: str = Field(..., description="Model the relation points at")
    field_name: str
    cardinality: Cardinality
    is_owner: bool = Field(..., description="Source side stores the foreign key")
    required: bool = Field(
        ..., description="Relation and all of its FK fields are required"
    )
    fk_unique: bool = Field(
        False, description="Foreign key is unique (at most one source per target)"
    )
    fk_field_names: Tuple[str, ...] = ()
    relation_name: Optional[str] = None


class RelationGraph(BaseModel):
    """Complete relationship graph of a schema."""

    nodes: List[ModelNode] = Field(default_factory=list)
    edges: List[RelationEdge] = Field(default_factory=list)

    @property
    def owning_edges(self) -> List[RelationEdge]:
        return [edge for edge in self.edges if edge.is_owner]

    def get_node(self, name: str) -> Optional[ModelNode]:
        for node in self.nodes:
            if node.name == name:
                return node
        return None

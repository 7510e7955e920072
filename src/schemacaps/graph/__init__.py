"""Model relationship graph and diagram rendering."""

from schemacaps.graph.builder import RelationGraphBuilder, build_relation_graph
from schemacaps.graph.diagram_formatters import (
    DotFormatter,
    MermaidFormatter,
    MermaidMarkdownFormatter,
)
from schemacaps.graph.models import ModelNode, NodeAttribute, RelationEdge, RelationGraph

__all__ = [
    # Models
    "ModelNode",
    "NodeAttribute",
    "RelationEdge",
    "RelationGraph",
    # Builder
    "RelationGraphBuilder",
    "build_relation_graph",
    # Formatters
    "MermaidFormatter",
    "MermaidMarkdownFormatter",
    "DotFormatter",
]

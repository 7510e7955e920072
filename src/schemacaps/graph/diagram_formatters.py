"""Diagram formatters for relationship graphs (Mermaid and DOT/Graphviz)."""

import re
from typing import List, Optional, Set, Tuple

from schemacaps.global_models import Cardinality
from schemacaps.graph.models import ModelNode, RelationEdge, RelationGraph

# Color palette (muted jewel tones for light/dark mode compatibility)
FOCUS_FILL = "#e6a843"
NEIGHBOR_FILL = "#4ecdc4"


def _sanitize_mermaid_id(identifier: str) -> str:
    """Sanitize an identifier for use as a Mermaid entity name or attribute type.

    Replaces non-alphanumeric characters with underscores.

    Args:
        identifier: Raw identifier (e.g., "numeric(10,2)")

    Returns:
        Sanitized ID safe for Mermaid syntax
    """
    return re.sub(r"[^a-zA-Z0-9_]", "_", identifier)


def _quote_dot_id(identifier: str) -> str:
    """Quote an identifier for use in DOT syntax.

    Args:
        identifier: Raw node identifier

    Returns:
        Double-quoted identifier with internal quotes escaped
    """
    escaped = identifier.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _pair_key(edge: RelationEdge) -> Tuple[frozenset, Optional[str]]:
    return frozenset((edge.source_model, edge.target_model)), edge.relation_name


def _edges_to_draw(graph: RelationGraph) -> List[RelationEdge]:
    """Owning edges, plus one edge per relation that has no owning side."""
    owned = {_pair_key(edge) for edge in graph.owning_edges}
    drawn: Set[Tuple[frozenset, Optional[str]]] = set()
    edges = list(graph.owning_edges)
    for edge in graph.edges:
        if edge.is_owner:
            continue
        key = _pair_key(edge)
        if key in owned or key in drawn:
            continue
        drawn.add(key)
        edges.append(edge)
    return edges


def _neighborhood(graph: RelationGraph, model: str) -> RelationGraph:
    """Restrict a graph to one model, its direct relations and their targets."""
    edges = [e for e in graph.edges if model in (e.source_model, e.target_model)]
    names = {model}
    for edge in edges:
        names.update((edge.source_model, edge.target_model))
    nodes = [node for node in graph.nodes if node.name in names]
    return RelationGraph(nodes=nodes, edges=edges)


class MermaidFormatter:
    """Format relationship graphs as Mermaid entity-relationship diagrams."""

    @staticmethod
    def _entity_lines(node: ModelNode) -> List[str]:
        entity = _sanitize_mermaid_id(node.name)
        if not node.attributes:
            return [f"    {entity} {{", "    }"]
        lines = [f"    {entity} {{"]
        for attr in node.attributes:
            line = f"        {_sanitize_mermaid_id(attr.type)} {_sanitize_mermaid_id(attr.name)}"
            if attr.key:
                line += f" {attr.key}"
            lines.append(line)
        lines.append("    }")
        return lines

    @staticmethod
    def _relationship_line(edge: RelationEdge) -> str:
        source = _sanitize_mermaid_id(edge.source_model)
        target = _sanitize_mermaid_id(edge.target_model)
        if edge.is_owner:
            # Target side: exactly one or zero-or-one; source side: FK uniqueness
            left = "||" if edge.required else "|o"
            right = "o|" if edge.fk_unique else "o{"
            return f'    {target} {left}--{right} {source} : "{edge.field_name}"'
        marker = "}o--o{" if edge.cardinality == Cardinality.LIST else "|o--o|"
        return f'    {source} {marker} {target} : "{edge.field_name}"'

    @staticmethod
    def format_full_graph(graph: RelationGraph) -> str:
        """Format a complete relationship graph as a Mermaid erDiagram.

        Args:
            graph: RelationGraph with all nodes and edges

        Returns:
            Mermaid diagram string (erDiagram syntax)
        """
        lines = ["erDiagram"]

        for node in graph.nodes:
            lines.extend(MermaidFormatter._entity_lines(node))

        for edge in _edges_to_draw(graph):
            lines.append(MermaidFormatter._relationship_line(edge))

        return "\n".join(lines)

    @staticmethod
    def format_model(graph: RelationGraph, model: str) -> str:
        """Format one model and its direct relations as a Mermaid erDiagram.

        Args:
            graph: RelationGraph with all nodes and edges
            model: Model to focus on

        Returns:
            Mermaid diagram string restricted to the model's neighborhood
        """
        return MermaidFormatter.format_full_graph(_neighborhood(graph, model))


class MermaidMarkdownFormatter:
    """Format relationship graphs as Mermaid diagrams wrapped in markdown code fences."""

    @staticmethod
    def format_full_graph(graph: RelationGraph) -> str:
        mermaid = MermaidFormatter.format_full_graph(graph)
        return f"```mermaid\n{mermaid}\n```"

    @staticmethod
    def format_model(graph: RelationGraph, model: str) -> str:
        mermaid = MermaidFormatter.format_model(graph, model)
        return f"```mermaid\n{mermaid}\n```"


class DotFormatter:
    """Format relationship graphs as DOT (Graphviz) diagrams."""

    @staticmethod
    def _edge_line(edge: RelationEdge) -> str:
        src = _quote_dot_id(edge.source_model)
        tgt = _quote_dot_id(edge.target_model)
        attrs = [f"label={_quote_dot_id(edge.field_name)}"]
        if not edge.is_owner:
            attrs.append("style=dashed")
        elif not edge.required:
            attrs.append("arrowhead=odot")
        return f"    {src} -> {tgt} [{', '.join(attrs)}];"

    @staticmethod
    def format_full_graph(graph: RelationGraph, focus: Optional[str] = None) -> str:
        """Format a relationship graph as a DOT digraph.

        Owning relations point from the model holding the foreign key to the
        referenced model. Relations without an owning side are dashed.

        Args:
            graph: RelationGraph with all nodes and edges
            focus: Optional model to highlight (its neighbors are highlighted too)

        Returns:
            DOT diagram string
        """
        lines = [
            "digraph relations {",
            "    rankdir=LR;",
            "    node [shape=box, style=rounded];",
        ]

        if not graph.nodes:
            lines.append("}")
            return "\n".join(lines)

        neighbors: Set[str] = set()
        if focus:
            for edge in graph.edges:
                if focus in (edge.source_model, edge.target_model):
                    neighbors.update((edge.source_model, edge.target_model))
            neighbors.discard(focus)

        for node in graph.nodes:
            qid = _quote_dot_id(node.name)
            if node.name == focus:
                lines.append(f'    {qid} [style="rounded,filled", fillcolor="{FOCUS_FILL}"];')
            elif node.name in neighbors:
                lines.append(
                    f'    {qid} [style="rounded,filled", fillcolor="{NEIGHBOR_FILL}"];'
                )
            else:
                lines.append(f"    {qid};")

        for edge in _edges_to_draw(graph):
            lines.append(DotFormatter._edge_line(edge))

        lines.append("}")
        return "\n".join(lines)

    @staticmethod
    def format_model(graph: RelationGraph, model: str) -> str:
        """Format one model and its direct relations as a DOT digraph."""
        return DotFormatter.format_full_graph(_neighborhood(graph, model), focus=model)

"""Build the model relationship graph of a schema with rustworkx."""

from typing import Dict, List, Tuple

import rustworkx as rx

from schemacaps.analysis.fields import foreign_key_field_names
from schemacaps.analysis.unique import UniqueValidator
from schemacaps.global_models import FieldKind
from schemacaps.graph.models import ModelNode, NodeAttribute, RelationEdge, RelationGraph
from schemacaps.schema.models import Model, Schema


class RelationGraphBuilder:
    """Build a directed graph with one node per model and one edge per relation field."""

    def __init__(self, schema: Schema):
        """
        Initialize the graph builder.

        Args:
            schema: Schema snapshot to graph
        """
        self.schema = schema
        self.unique_validator = UniqueValidator()
        self.graph: rx.PyDiGraph = rx.PyDiGraph()
        self._node_index_map: Dict[str, int] = {}  # model name -> rustworkx node index
        self._dangling: List[Tuple[str, str, str]] = []  # (model, field, target)

        for model in schema.models:
            self._ensure_node(model)
        for model in schema.models:
            self._add_relations(model)

    def _ensure_node(self, model: Model) -> int:
        if model.name in self._node_index_map:
            return self._node_index_map[model.name]

        fk_names = foreign_key_field_names(model)
        pk_names = set(model.primary_key)
        attributes = []
        for field in model.fields:
            if field.kind not in (FieldKind.SCALAR, FieldKind.ENUM):
                continue
            if field.is_id or field.name in pk_names:
                key = "PK"
            elif field.name in fk_names:
                key = "FK"
            elif self.unique_validator.is_field_unique(model, field.name):
                key = "UK"
            else:
                key = None
            attributes.append(NodeAttribute(name=field.name, type=field.type, key=key))

        node = ModelNode(name=model.name, attributes=attributes)
        node_idx = self.graph.add_node(node.model_dump())
        self._node_index_map[model.name] = node_idx
        return node_idx

    def _add_relations(self, model: Model) -> None:
        source_idx = self._node_index_map[model.name]
        for field in model.relation_fields:
            target = field.relation.target_model
            if target not in self._node_index_map:
                # Left to schema validation
                self._dangling.append((model.name, field.name, target))
                continue

            fk_names = field.relation.fk_field_names
            fk_fields = [model.get_field(name) for name in fk_names]
            required = (
                not field.is_list
                and field.required
                and all(f is not None and f.required for f in fk_fields)
            )
            edge = RelationEdge(
                source_model=model.name,
                target_model=target,
                field_name=field.name,
                cardinality=field.cardinality,
                is_owner=field.is_owner,
                required=required,
                fk_unique=field.is_owner
                and self.unique_validator.are_fields_unique(model, fk_names),
                fk_field_names=fk_names,
                relation_name=field.relation.relation_name,
            )
            self.graph.add_edge(
                source_idx, self._node_index_map[target], edge.model_dump()
            )

    def build(self) -> RelationGraph:
        """
        Build and return the RelationGraph.

        Returns:
            RelationGraph with one node per model and one edge per resolvable
            relation field
        """
        nodes = [ModelNode(**self.graph[idx]) for idx in self.graph.node_indices()]
        edges = [
            RelationEdge(**self.graph.get_edge_data_by_index(edge_idx))
            for edge_idx in self.graph.edge_indices()
        ]
        return RelationGraph(nodes=nodes, edges=edges)

    def find_required_cycles(self) -> List[List[str]]:
        """
        Find cycles made only of required owning relations.

        Records on such a cycle can never be inserted, since every one of them
        needs another to exist first.

        Returns:
            Model names of each cycle (a single name for a required self-relation),
            sorted for stable output
        """
        required = rx.PyDiGraph()
        index_map = {
            idx: required.add_node(self.graph[idx]["name"])
            for idx in self.graph.node_indices()
        }
        for source, target, data in self.graph.weighted_edge_list():
            if data["is_owner"] and data["required"]:
                required.add_edge(index_map[source], index_map[target], None)

        cycles: List[List[str]] = []
        for component in rx.strongly_connected_components(required):
            if len(component) == 1 and not required.has_edge(component[0], component[0]):
                continue
            cycles.append(sorted(required[idx] for idx in component))
        return sorted(cycles)

    @property
    def rustworkx_graph(self) -> rx.PyDiGraph:
        """Get the underlying rustworkx graph for direct operations."""
        return self.graph

    @property
    def node_index_map(self) -> Dict[str, int]:
        """Get mapping from model names to rustworkx indices."""
        return self._node_index_map.copy()

    @property
    def dangling_relations(self) -> List[Tuple[str, str, str]]:
        """Relation fields whose target model is missing, as (model, field, target)."""
        return self._dangling.copy()


def build_relation_graph(schema: Schema) -> Tuple[rx.PyDiGraph, Dict[str, int]]:
    """
    Build the relationship graph of a schema.

    Args:
        schema: Schema snapshot

    Returns:
        Tuple of (rustworkx graph, model name -> node index). Node payloads are
        ModelNode dumps and edge payloads RelationEdge dumps.
    """
    builder = RelationGraphBuilder(schema)
    return builder.rustworkx_graph, builder.node_index_map

# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for graph building and semantic validation."""

import pytest

from flowdraw.compiler.semantic_analysis import ValidationError, build_graph
from flowdraw.errors import Stage
from flowdraw.model.graph import GraphModel
from flowdraw.model.types import Direction, EdgeStyle, NodeShape
from flowdraw.parser.parser import parse_source

# ###############
# Test Helpers
# ###############


def _build(body: str, header: str = "graph TD") -> GraphModel:
    return build_graph(parse_source(f"{header}\n{body}"))


# ###############
# Nodes
# ###############


class TestNodes:
    def test_undeclared_endpoints_become_rectangles(self) -> None:
        graph = _build("a --> b")
        assert list(graph.nodes) == ["a", "b"]
        for node_id in ("a", "b"):
            node = graph.nodes[node_id]
            assert node.shape == NodeShape.RECTANGLE
            assert node.label == node_id

    def test_declared_nodes(self) -> None:
        graph = build_graph(parse_source("graph TD\nA[Start] --> B(End)"))
        assert graph.nodes["A"].shape == NodeShape.RECTANGLE
        assert graph.nodes["A"].label == "Start"
        assert graph.nodes["B"].shape == NodeShape.ROUNDED
        assert graph.nodes["B"].label == "End"
        assert len(graph.edges) == 1
        assert (graph.edges[0].source, graph.edges[0].target) == ("A", "B")

    def test_nodes_keep_first_mention_order(self) -> None:
        graph = _build("C --> A\nB\nA --> D")
        assert list(graph.nodes) == ["C", "A", "B", "D"]

    def test_later_declaration_upgrades_bare_mention(self) -> None:
        graph = _build("A --> B\nB{Decide}")
        assert graph.nodes["B"].shape == NodeShape.RHOMBUS
        assert graph.nodes["B"].label == "Decide"

    def test_bare_mention_keeps_declared_shape(self) -> None:
        graph = _build("B((Hub))\nA --> B")
        assert graph.nodes["B"].shape == NodeShape.CIRCLE
        assert graph.nodes["B"].label == "Hub"

    def test_same_shape_redeclared_uses_latest_label(self) -> None:
        graph = _build("A[First]\nA[Second]")
        assert graph.nodes["A"].label == "Second"

    def test_conflicting_shapes_cite_both_positions(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _build("a[Label1]\nb --> c\na(Label2)")
        err = exc_info.value
        assert err.stage is Stage.VALIDATE
        assert "Node 'a'" in err.message
        assert "rectangle" in err.message
        assert "rounded" in err.message
        assert [(p.line, p.column) for p in err.positions] == [(2, 1), (4, 1)]
        assert err.position == err.positions[-1]

    def test_conflict_inside_edge_chain(self) -> None:
        with pytest.raises(ValidationError):
            _build("A[x] --> A{y}")


# ###############
# Edges
# ###############


class TestEdges:
    def test_chain_expands_to_consecutive_edges(self) -> None:
        graph = _build("A --> B -.-> C")
        assert [(e.source, e.target) for e in graph.edges] == [("A", "B"), ("B", "C")]
        assert graph.edges[1].style == EdgeStyle.DASHED

    def test_edge_attributes(self) -> None:
        graph = _build("A ==>|go| B\nB --- C")
        first, second = graph.edges
        assert first.label == "go"
        assert first.style == EdgeStyle.THICK
        assert first.has_arrowhead
        assert second.label is None
        assert not second.has_arrowhead

    def test_endpoints_are_node_keys(self) -> None:
        graph = _build("A --> B\nB --> C\nC --> A\nD --> D")
        for edge in graph.edges:
            assert edge.source in graph.nodes
            assert edge.target in graph.nodes

    def test_self_loop(self) -> None:
        graph = _build("A --> A")
        assert graph.edges[0].is_self_loop

    def test_incoming_and_outgoing(self) -> None:
        graph = _build("A --> B\nC --> B\nB --> D")
        assert [e.source for e in graph.incoming("B")] == ["A", "C"]
        assert [e.target for e in graph.outgoing("B")] == ["D"]

    def test_direction_is_copied(self) -> None:
        assert _build("A", header="flowchart RL").direction == Direction.RL


# ###############
# Subgraphs
# ###############


class TestSubgraphs:
    def test_nodes_belong_to_subgraph_of_first_mention(self) -> None:
        graph = _build("subgraph s [Group]\n  A --> B\nend\nB --> C")
        assert len(graph.subgraphs) == 1
        subgraph = graph.subgraphs[0]
        assert subgraph.title == "Group"
        assert subgraph.node_ids == ["A", "B"]

    def test_node_mentioned_before_subgraph_stays_outside(self) -> None:
        graph = _build("A\nsubgraph s\n  A --> B\nend")
        assert graph.subgraphs[0].node_ids == ["B"]

    def test_nested_subgraph_ids(self) -> None:
        graph = _build("subgraph outer\n  X\n  subgraph inner\n    Y\n  end\nend")
        outer, inner = graph.subgraphs
        assert outer.subgraph_ids == ["inner"]
        assert outer.node_ids == ["X"]
        assert inner.node_ids == ["Y"]

    def test_duplicate_subgraph_id(self) -> None:
        with pytest.raises(ValidationError, match="Duplicate subgraph id 's'") as exc_info:
            _build("subgraph s\nA\nend\nsubgraph s\nB\nend")
        assert [p.line for p in exc_info.value.positions] == [2, 5]

    def test_subgraph_id_used_as_node_id(self) -> None:
        with pytest.raises(ValidationError, match="also used as a node id") as exc_info:
            _build("A --> s\nsubgraph s\nB\nend")
        assert [p.line for p in exc_info.value.positions] == [2, 3]

# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the deterministic scene layout."""

import pytest

from flowdraw.compiler.semantic_analysis import build_graph
from flowdraw.model.graph import GraphModel
from flowdraw.model.types import NodeShape
from flowdraw.parser.parser import parse_source
from flowdraw.views.layout import LayoutError, Point, SceneGraph, assign_ranks, edge_label_size, layout
from flowdraw.workspace.config import RenderConfig

# ###############
# Test Helpers
# ###############


def _graph(body: str, header: str = "graph TD") -> GraphModel:
    return build_graph(parse_source(f"{header}\n{body}"))


def _scene(body: str, header: str = "graph TD", config: RenderConfig | None = None) -> SceneGraph:
    graph = _graph(body, header)
    return layout(graph, config) if config else layout(graph)


def _overlaps(a: tuple[float, float, float, float], b: tuple[float, float, float, float]) -> bool:
    ax, ay, aw, ah = a
    bx, by, bw, bh = b
    return ax < bx + bw and bx < ax + aw and ay < by + bh and by < ay + ah


# ###############
# Ranks
# ###############


class TestAssignRanks:
    def test_chain(self) -> None:
        assert assign_ranks(_graph("A --> B --> C")) == {"A": 0, "B": 1, "C": 2}

    def test_breadth_first_depth(self) -> None:
        ranks = assign_ranks(_graph("A --> B --> C\nA --> C"))
        assert ranks["C"] == 1

    def test_multiple_sources(self) -> None:
        ranks = assign_ranks(_graph("A --> C\nB --> C"))
        assert ranks == {"A": 0, "C": 1, "B": 0}

    def test_self_loop_does_not_block_source(self) -> None:
        assert assign_ranks(_graph("A --> A\nA --> B")) == {"A": 0, "B": 1}

    def test_cycle_without_source_is_seeded_in_order(self) -> None:
        assert assign_ranks(_graph("A --> B\nB --> A")) == {"A": 0, "B": 1}

    def test_isolated_nodes_rank_zero(self) -> None:
        assert assign_ranks(_graph("A\nB")) == {"A": 0, "B": 0}


# ###############
# Placement
# ###############


class TestPlacement:
    def test_top_down_coordinates(self) -> None:
        scene = _scene("A --> B")
        a, b = scene.shape("A"), scene.shape("B")
        assert (a.x, a.y, a.width, a.height) == (24, 24, 120, 48)
        assert (b.x, b.y) == (24, 132)
        assert (scene.width, scene.height) == (168, 204)

    def test_left_right_coordinates(self) -> None:
        scene = _scene("A --> B", header="graph LR")
        assert (scene.shape("A").x, scene.shape("A").y) == (24, 24)
        assert (scene.shape("B").x, scene.shape("B").y) == (204, 24)

    def test_bottom_up_reverses_ranks(self) -> None:
        scene = _scene("A --> B", header="graph BT")
        assert scene.shape("A").y > scene.shape("B").y

    def test_right_left_reverses_ranks(self) -> None:
        scene = _scene("A --> B", header="graph RL")
        assert scene.shape("A").x > scene.shape("B").x

    def test_node_ids_match_graph_in_order(self) -> None:
        graph = _graph("C --> A\nB\nA --> D")
        scene = layout(graph)
        assert scene.node_ids == list(graph.nodes)

    def test_shapes_do_not_overlap(self) -> None:
        scene = _scene("A --> B\nA --> C\nA --> D\nB --> E\nC --> E\nD((Long circular label)) --> E")
        boxes = [(s.x, s.y, s.width, s.height) for s in scene.shapes]
        for i, first in enumerate(boxes):
            for second in boxes[i + 1 :]:
                assert not _overlaps(first, second)

    def test_everything_inside_canvas(self) -> None:
        scene = _scene("subgraph s [Group]\nA --> B\nend\nB --> B\nB -->|x| C\nC --> A")
        for shape in scene.shapes:
            assert shape.x >= 0 and shape.y >= 0
            assert shape.x + shape.width <= scene.width
            assert shape.y + shape.height <= scene.height
        for connector in scene.connectors:
            for point in connector.points:
                assert 0 <= point.x <= scene.width
                assert 0 <= point.y <= scene.height

    def test_long_label_widens_box(self) -> None:
        scene = _scene("A[A label that is much longer than the default width]")
        assert scene.shape("A").width > 120

    def test_shape_sizes(self) -> None:
        scene = _scene("A{x}\nB((x))")
        assert scene.shape("A").shape == NodeShape.RHOMBUS
        assert scene.shape("A").height == 72
        circle = scene.shape("B")
        assert circle.width == circle.height

    def test_config_spacing_is_used(self) -> None:
        config = RenderConfig(**{"rank-gap": 100, "padding": 10})
        scene = _scene("A --> B", config=config)
        assert scene.shape("A").y == 10
        assert scene.shape("B").y == 10 + 48 + 100

    def test_empty_graph_raises(self) -> None:
        with pytest.raises(LayoutError, match="no nodes"):
            layout(GraphModel())

    def test_layout_is_deterministic(self) -> None:
        body = "A --> B\nB --> C\nC --> A\nA --> A\nsubgraph s\nD --> E\nend"
        assert _scene(body) == _scene(body)

    def test_unknown_shape_lookup_raises(self) -> None:
        with pytest.raises(KeyError):
            _scene("A").shape("Z")


# ###############
# Connectors
# ###############


class TestConnectors:
    def test_one_connector_per_edge(self) -> None:
        scene = _scene("A --> B --> C\nA --> C")
        assert [(c.source, c.target) for c in scene.connectors] == [("A", "B"), ("B", "C"), ("A", "C")]
        assert [c.edge_index for c in scene.connectors] == [0, 1, 2]

    def test_straight_connector_joins_box_sides(self) -> None:
        connector = _scene("A --> B").connectors[0]
        assert connector.points == (Point(84, 72), Point(84, 132))

    def test_parallel_edges_are_separated(self) -> None:
        scene = _scene("A --> B\nA --> B")
        first, second = scene.connectors
        assert len(first.points) == 3
        assert first.points != second.points

    def test_opposite_edges_are_separated(self) -> None:
        scene = _scene("A --> B\nB --> A")
        first, second = scene.connectors
        assert first.points[1] != second.points[1]

    def test_self_loop_is_drawn(self) -> None:
        connector = _scene("A --> A").connectors[0]
        assert len(connector.points) == 4
        assert connector.source == connector.target == "A"

    def test_repeated_self_loops_nest(self) -> None:
        first, second = _scene("A --> A\nA --> A").connectors
        assert first.points != second.points

    def test_label_position_only_for_labelled_edges(self) -> None:
        labelled, plain = _scene("A -->|yes| B\nB --> C").connectors
        assert labelled.label == "yes"
        assert labelled.label_position is not None
        assert plain.label_position is None

    @pytest.mark.parametrize("header", ["graph TD", "graph LR", "graph BT", "graph RL"])
    def test_edge_labels_inside_canvas(self, header: str) -> None:
        scene = _scene("A -->|another wide label here| B\nB -->|a rather long self loop label| B", header)
        for connector in scene.connectors:
            assert connector.label_position is not None
            width, height = edge_label_size(connector.label or "")
            at = connector.label_position
            assert at.x - width / 2 >= 0 and at.y - height / 2 >= 0
            assert at.x + width / 2 <= scene.width
            assert at.y + height / 2 <= scene.height


# ###############
# Clusters
# ###############


class TestClusters:
    def test_cluster_encloses_members(self) -> None:
        scene = _scene("subgraph s [Group]\nA --> B\nend\nB --> C")
        (cluster,) = scene.clusters
        assert cluster.title == "Group"
        for node_id in ("A", "B"):
            box = scene.shape(node_id)
            assert cluster.x < box.x
            assert cluster.y < box.y
            assert box.x + box.width < cluster.x + cluster.width
            assert box.y + box.height < cluster.y + cluster.height

    def test_untitled_cluster_uses_id(self) -> None:
        (cluster,) = _scene("subgraph grp\nA\nend").clusters
        assert cluster.title == "grp"

    def test_nested_cluster_inside_parent(self) -> None:
        scene = _scene("subgraph outer\nX\nsubgraph inner\nY\nend\nend")
        outer, inner = scene.clusters
        assert outer.x < inner.x
        assert outer.y < inner.y
        assert inner.x + inner.width < outer.x + outer.width

    def test_empty_subgraph_has_no_cluster(self) -> None:
        scene = _scene("A\nsubgraph empty\nend")
        assert scene.clusters == ()


# ###############
# Label Padding
# ###############


class TestLabelPadding:
    def test_label_padding_widens_long_labels(self) -> None:
        label = "A label that is much longer than the default width"
        narrow = _scene(f"A[{label}]", config=RenderConfig(**{"label-padding": 0}))
        wide = _scene(f"A[{label}]", config=RenderConfig(**{"label-padding": 30}))
        assert wide.shape("A").width - narrow.shape("A").width == pytest.approx(60)

    def test_short_labels_keep_node_width(self) -> None:
        scene = _scene("A[x]", config=RenderConfig(**{"label-padding": 30}))
        assert scene.shape("A").width == 120

# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Deterministic layout of a graph model into a positioned scene graph.

Nodes are ranked by breadth-first depth from the source-only nodes. Ranks are
stacked along the diagram direction; nodes inside a rank keep their
first-mention order. Identical input always yields an identical scene.

The scene contains:
- one :class:`ShapeBox` per node;
- one :class:`Connector` per edge (parallel edges and self-loops included);
- one :class:`ClusterBox` per non-empty subgraph.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, replace

from flowdraw.errors import FlowdrawError, Stage
from flowdraw.model.graph import Edge, GraphModel, Subgraph
from flowdraw.model.types import Direction, EdgeStyle, NodeShape
from flowdraw.workspace.config import DEFAULT_CONFIG, RenderConfig

# ###############
# Public Interface
# ###############


class LayoutError(FlowdrawError):
    """Raised when a graph model cannot be laid out (e.g. it has no nodes)."""

    stage = Stage.LAYOUT


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class ShapeBox:
    """A positioned node.

    Attributes:
        node_id: Id of the source node.
        shape: Shape to draw.
        label: Text to draw inside the shape.
        rank: Breadth-first depth of the node.
        order: Position of the node within its rank.
        x: Left edge.
        y: Top edge.
        width: Box width.
        height: Box height.
    """

    node_id: str
    shape: NodeShape
    label: str
    rank: int
    order: int
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)


@dataclass(frozen=True)
class Connector:
    """A routed edge.

    Attributes:
        edge_index: Index of the source edge in ``GraphModel.edges``.
        source: Id of the node the connector leaves.
        target: Id of the node the connector enters.
        points: Polyline from source boundary to target boundary.
        style: Stroke style.
        has_arrowhead: Whether an arrowhead is drawn at the target end.
        label: Optional edge label.
        label_position: Where the label is centered, if there is one.
    """

    edge_index: int
    source: str
    target: str
    points: tuple[Point, ...]
    style: EdgeStyle
    has_arrowhead: bool
    label: str | None = None
    label_position: Point | None = None


@dataclass(frozen=True)
class ClusterBox:
    """The frame drawn around the members of a subgraph."""

    subgraph_id: str
    title: str | None
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class SceneGraph:
    """Positioned shapes, connectors and clusters, ready for vector serialization."""

    direction: Direction
    width: float
    height: float
    shapes: tuple[ShapeBox, ...]
    connectors: tuple[Connector, ...] = ()
    clusters: tuple[ClusterBox, ...] = ()

    @property
    def node_ids(self) -> list[str]:
        return [shape.node_id for shape in self.shapes]

    def shape(self, node_id: str) -> ShapeBox:
        """Return the box of *node_id*; raises KeyError if absent."""
        for box in self.shapes:
            if box.node_id == node_id:
                return box
        raise KeyError(node_id)


def assign_ranks(graph: GraphModel) -> dict[str, int]:
    """Return the rank of every node, keyed in node insertion order.

    Source-only nodes (no incoming edges other than self-loops) get rank 0 and
    a breadth-first traversal assigns each other node its depth. Nodes left
    unranked (cycles with no source) seed a new traversal at rank 0, in
    insertion order.
    """
    indegree = dict.fromkeys(graph.nodes, 0)
    successors: dict[str, list[str]] = {node_id: [] for node_id in graph.nodes}
    for edge in graph.edges:
        successors[edge.source].append(edge.target)
        if not edge.is_self_loop:
            indegree[edge.target] += 1

    ranks: dict[str, int] = {}
    queue: deque[str] = deque()
    for node_id, count in indegree.items():
        if count == 0:
            ranks[node_id] = 0
            queue.append(node_id)
    _breadth_first(queue, successors, ranks)

    for node_id in graph.nodes:
        if node_id not in ranks:
            ranks[node_id] = 0
            queue.append(node_id)
            _breadth_first(queue, successors, ranks)

    return {node_id: ranks[node_id] for node_id in graph.nodes}


def layout(graph: GraphModel, config: RenderConfig = DEFAULT_CONFIG) -> SceneGraph:
    """Lay out *graph* into a :class:`SceneGraph`.

    Args:
        graph: A validated graph model.
        config: Sizing and spacing settings.

    Returns:
        The positioned scene.

    Raises:
        LayoutError: If the graph has no nodes.
    """
    if not graph.nodes:
        raise LayoutError("Diagram has no nodes to lay out")
    return _Layouter(graph, config).run()


def edge_label_size(label: str, config: RenderConfig = DEFAULT_CONFIG) -> tuple[float, float]:
    """Return (width, height) of the background box drawn behind an edge label."""
    return len(label) * config.char_width + 8, config.font_size + 6


# ################
# Implementation
# ################

_PARALLEL_GAP = 16.0
_SELF_LOOP_REACH = 24.0


def _breadth_first(queue: deque[str], successors: dict[str, list[str]], ranks: dict[str, int]) -> None:
    while queue:
        current = queue.popleft()
        for nxt in successors[current]:
            if nxt not in ranks:
                ranks[nxt] = ranks[current] + 1
                queue.append(nxt)


class _Layouter:
    """Computes boxes, connectors and clusters for one graph."""

    def __init__(self, graph: GraphModel, config: RenderConfig) -> None:
        self._graph = graph
        self._config = config
        self._direction = graph.direction
        self._boxes: dict[str, ShapeBox] = {}

    def run(self) -> SceneGraph:
        self._place_nodes()
        clusters = self._place_clusters()
        connectors = self._route_edges()
        return self._normalize(connectors, clusters)

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def _size(self, shape: NodeShape, label: str) -> tuple[float, float]:
        """Return (width, height) of a node box."""
        cfg = self._config
        width = max(cfg.node_width, len(label) * cfg.char_width + 2 * cfg.label_padding)
        height = cfg.node_height
        if shape == NodeShape.CIRCLE:
            diameter = max(height, len(label) * cfg.char_width + 2 * cfg.label_padding)
            return diameter, diameter
        if shape == NodeShape.RHOMBUS:
            return width * 1.25, height * 1.5
        return width, height

    def _place_nodes(self) -> None:
        cfg = self._config
        horizontal = self._direction.is_horizontal
        ranks = assign_ranks(self._graph)
        max_rank = max(ranks.values())

        members: list[list[str]] = [[] for _ in range(max_rank + 1)]
        for node_id, rank in ranks.items():
            members[rank].append(node_id)

        sizes = {node_id: self._size(node.shape, node.label) for node_id, node in self._graph.nodes.items()}

        def main_extent(node_id: str) -> float:
            width, height = sizes[node_id]
            return width if horizontal else height

        def cross_extent(node_id: str) -> float:
            width, height = sizes[node_id]
            return height if horizontal else width

        rank_depth = [max(main_extent(n) for n in ids) for ids in members]
        rank_breadth = [sum(cross_extent(n) for n in ids) + cfg.node_gap * (len(ids) - 1) for ids in members]
        widest = max(rank_breadth)

        order = list(range(max_rank + 1))
        if self._direction.is_reversed:
            order.reverse()
        rank_start: dict[int, float] = {}
        cursor = cfg.padding
        for rank in order:
            rank_start[rank] = cursor
            cursor += rank_depth[rank] + cfg.rank_gap

        for rank, ids in enumerate(members):
            along = cfg.padding + (widest - rank_breadth[rank]) / 2
            for index, node_id in enumerate(ids):
                node = self._graph.nodes[node_id]
                width, height = sizes[node_id]
                main = rank_start[rank] + (rank_depth[rank] - main_extent(node_id)) / 2
                x, y = (main, along) if horizontal else (along, main)
                self._boxes[node_id] = ShapeBox(
                    node_id=node_id,
                    shape=node.shape,
                    label=node.label,
                    rank=rank,
                    order=index,
                    x=x,
                    y=y,
                    width=width,
                    height=height,
                )
                along += cross_extent(node_id) + cfg.node_gap

    # ------------------------------------------------------------------
    # Clusters
    # ------------------------------------------------------------------

    def _place_clusters(self) -> list[ClusterBox]:
        by_id = {s.id: s for s in self._graph.subgraphs}
        placed: dict[str, ClusterBox | None] = {}
        for subgraph in self._graph.subgraphs:
            self._cluster_for(subgraph, by_id, placed)
        return [box for box in (placed[s.id] for s in self._graph.subgraphs) if box is not None]

    def _cluster_for(
        self,
        subgraph: Subgraph,
        by_id: dict[str, Subgraph],
        placed: dict[str, ClusterBox | None],
    ) -> ClusterBox | None:
        if subgraph.id in placed:
            return placed[subgraph.id]

        rects = [
            (box.x, box.y, box.x + box.width, box.y + box.height)
            for box in (self._boxes[n] for n in subgraph.node_ids)
        ]
        for child_id in subgraph.subgraph_ids:
            child = self._cluster_for(by_id[child_id], by_id, placed)
            if child is not None:
                rects.append((child.x, child.y, child.x + child.width, child.y + child.height))

        if not rects:
            placed[subgraph.id] = None
            return None

        pad = self._config.padding / 2
        title_band = self._config.font_size + 6
        left = min(r[0] for r in rects) - pad
        top = min(r[1] for r in rects) - pad - title_band
        right = max(r[2] for r in rects) + pad
        bottom = max(r[3] for r in rects) + pad
        box = ClusterBox(
            subgraph_id=subgraph.id,
            title=subgraph.title or subgraph.id,
            x=left,
            y=top,
            width=right - left,
            height=bottom - top,
        )
        placed[subgraph.id] = box
        return box

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def _sides(self) -> tuple[str, str, str, str]:
        """Return (exit, entry, before, after) sides for forward flow in this direction."""
        return {
            Direction.TD: ("bottom", "top", "left", "right"),
            Direction.TB: ("bottom", "top", "left", "right"),
            Direction.BT: ("top", "bottom", "left", "right"),
            Direction.LR: ("right", "left", "top", "bottom"),
            Direction.RL: ("left", "right", "top", "bottom"),
        }[self._direction]

    def _route_edges(self) -> list[Connector]:
        groups: dict[frozenset[str], list[int]] = {}
        for index, edge in enumerate(self._graph.edges):
            groups.setdefault(frozenset((edge.source, edge.target)), []).append(index)

        connectors: list[Connector] = []
        for index, edge in enumerate(self._graph.edges):
            siblings = groups[frozenset((edge.source, edge.target))]
            slot = siblings.index(index)
            if edge.is_self_loop:
                points = self._self_loop(edge, slot)
                label_at = _midpoint(points[1], points[2])
            else:
                offset = (slot - (len(siblings) - 1) / 2) * _PARALLEL_GAP
                points = self._straight(edge, offset)
                label_at = points[len(points) // 2] if len(points) == 3 else _midpoint(points[0], points[-1])
            connectors.append(
                Connector(
                    edge_index=index,
                    source=edge.source,
                    target=edge.target,
                    points=points,
                    style=edge.style,
                    has_arrowhead=edge.has_arrowhead,
                    label=edge.label,
                    label_position=label_at if edge.label else None,
                )
            )
        return connectors

    def _straight(self, edge: Edge, offset: float) -> tuple[Point, ...]:
        exit_side, entry_side, before, after = self._sides()
        src = self._boxes[edge.source]
        dst = self._boxes[edge.target]
        if src.rank < dst.rank:
            start, end = _anchor(src, exit_side), _anchor(dst, entry_side)
        elif src.rank > dst.rank:
            start, end = _anchor(src, entry_side), _anchor(dst, exit_side)
        elif src.order < dst.order:
            start, end = _anchor(src, after), _anchor(dst, before)
        else:
            start, end = _anchor(src, before), _anchor(dst, after)

        if offset == 0:
            return (start, end)
        mid = _midpoint(start, end)
        # Bend perpendicular to the dominant direction of travel.
        if abs(end.x - start.x) >= abs(end.y - start.y):
            bend = Point(mid.x, mid.y + offset)
        else:
            bend = Point(mid.x + offset, mid.y)
        return (start, bend, end)

    def _self_loop(self, edge: Edge, slot: int) -> tuple[Point, ...]:
        _, _, _, after = self._sides()
        box = self._boxes[edge.source]
        reach = _SELF_LOOP_REACH * (slot + 1)
        if after == "right":
            x = box.x + box.width
            top, bottom = box.y + box.height / 4, box.y + 3 * box.height / 4
            return (Point(x, top), Point(x + reach, top), Point(x + reach, bottom), Point(x, bottom))
        y = box.y + box.height
        left, right = box.x + box.width / 4, box.x + 3 * box.width / 4
        return (Point(left, y), Point(left, y + reach), Point(right, y + reach), Point(right, y))

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    def _normalize(self, connectors: list[Connector], clusters: list[ClusterBox]) -> SceneGraph:
        """Shift everything so the content starts at the padding, then size the canvas."""
        pad = self._config.padding
        xs = [b.x for b in self._boxes.values()] + [c.x for c in clusters]
        ys = [b.y for b in self._boxes.values()] + [c.y for c in clusters]
        for connector in connectors:
            xs.extend(p.x for p in connector.points)
            ys.extend(p.y for p in connector.points)
            left, top, _, _ = self._label_bounds(connector)
            xs.append(left)
            ys.append(top)
        dx = max(0.0, pad - min(xs))
        dy = max(0.0, pad - min(ys))

        shapes = tuple(replace(b, x=b.x + dx, y=b.y + dy) for b in (self._boxes[n] for n in self._graph.nodes))
        moved_clusters = tuple(replace(c, x=c.x + dx, y=c.y + dy) for c in clusters)
        moved_connectors = tuple(
            replace(
                c,
                points=tuple(Point(p.x + dx, p.y + dy) for p in c.points),
                label_position=Point(c.label_position.x + dx, c.label_position.y + dy) if c.label_position else None,
            )
            for c in connectors
        )

        label_bounds = [self._label_bounds(c) for c in moved_connectors]
        right = max(
            [s.x + s.width for s in shapes]
            + [c.x + c.width for c in moved_clusters]
            + [p.x for c in moved_connectors for p in c.points]
            + [b[2] for b in label_bounds]
        )
        bottom = max(
            [s.y + s.height for s in shapes]
            + [c.y + c.height for c in moved_clusters]
            + [p.y for c in moved_connectors for p in c.points]
            + [b[3] for b in label_bounds]
        )
        return SceneGraph(
            direction=self._direction,
            width=right + pad,
            height=bottom + pad,
            shapes=shapes,
            connectors=moved_connectors,
            clusters=moved_clusters,
        )

    def _label_bounds(self, connector: Connector) -> tuple[float, float, float, float]:
        """Return (left, top, right, bottom) of the label box; unlabelled connectors give their first point."""
        if not connector.label or connector.label_position is None:
            start = connector.points[0]
            return start.x, start.y, start.x, start.y
        width, height = edge_label_size(connector.label, self._config)
        at = connector.label_position
        return at.x - width / 2, at.y - height / 2, at.x + width / 2, at.y + height / 2


def _anchor(box: ShapeBox, side: str) -> Point:
    """Return the midpoint of one side of *box*."""
    center = box.center
    if side == "top":
        return Point(center.x, box.y)
    if side == "bottom":
        return Point(center.x, box.y + box.height)
    if side == "left":
        return Point(box.x, center.y)
    return Point(box.x + box.width, center.y)


def _midpoint(a: Point, b: Point) -> Point:
    return Point((a.x + b.x) / 2, (a.y + b.y) / 2)

# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Graph model built from a validated AST: nodes, edges, and subgraphs."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic import Field as _Field

from flowdraw.model.types import DiagramType, Direction, EdgeStyle, NodeShape

# ###############
# Public Interface
# ###############


class Node(BaseModel):
    """A diagram node. Identity is the id."""

    id: str
    label: str
    shape: NodeShape = NodeShape.RECTANGLE


class Edge(BaseModel):
    """A directed edge between two nodes, referenced by id."""

    source: str
    target: str
    label: str | None = None
    style: EdgeStyle = EdgeStyle.SOLID
    has_arrowhead: bool = True

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


class Subgraph(BaseModel):
    """A named group of nodes, possibly containing nested subgraphs."""

    id: str
    title: str | None = None
    node_ids: list[str] = _Field(default_factory=list)
    subgraph_ids: list[str] = _Field(default_factory=list)


class GraphModel(BaseModel):
    """The validated graph: nodes in first-mention order plus edges in source order.

    Every edge endpoint is a key of :attr:`nodes`.
    """

    diagram_type: DiagramType = DiagramType.FLOWCHART
    direction: Direction = Direction.TD
    nodes: dict[str, Node] = _Field(default_factory=dict)
    edges: list[Edge] = _Field(default_factory=list)
    subgraphs: list[Subgraph] = _Field(default_factory=list)

    def incoming(self, node_id: str) -> list[Edge]:
        """Return the edges ending at *node_id*, in source order."""
        return [e for e in self.edges if e.target == node_id]

    def outgoing(self, node_id: str) -> list[Edge]:
        """Return the edges starting at *node_id*, in source order."""
        return [e for e in self.edges if e.source == node_id]

# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Semantic analysis: turns a parsed Diagram into a validated GraphModel.

Statements are walked in source order. Nodes are created on first mention,
so that the node map preserves the order layout relies on. An edge endpoint
that was never declared becomes a rectangle labelled with its id. Only
irreconcilable conflicts are errors:

- the same node id declared with two different explicit shapes;
- two subgraphs sharing an id;
- a subgraph id that is also used as a node id.
"""

from __future__ import annotations

from dataclasses import dataclass

from flowdraw.errors import FlowdrawError, SourcePosition, Stage
from flowdraw.model.ast import Diagram, EdgeStatement, NodeRef, NodeStatement, Statement, SubgraphBlock
from flowdraw.model.graph import Edge, GraphModel, Node, Subgraph
from flowdraw.model.types import NodeShape

# ###############
# Public Interface
# ###############


class ValidationError(FlowdrawError):
    """Raised when the statements of a diagram contradict each other.

    Attributes:
        positions: Every source position cited by the error, in source order.
            The last one is where the conflict was detected and doubles as
            :attr:`position`.
    """

    stage = Stage.VALIDATE

    def __init__(self, message: str, positions: tuple[SourcePosition, ...]) -> None:
        super().__init__(message, positions[-1] if positions else None)
        self.positions = positions


def build_graph(diagram: Diagram) -> GraphModel:
    """Build the graph model for *diagram*.

    Args:
        diagram: Syntax tree produced by :func:`~flowdraw.parser.parser.parse`.

    Returns:
        A :class:`GraphModel` whose edges only reference keys of ``nodes``.

    Raises:
        ValidationError: On conflicting shape declarations or clashing
            subgraph ids.
    """
    return _GraphBuilder(diagram).build()


# ################
# Implementation
# ################


@dataclass
class _Declaration:
    shape: NodeShape
    position: SourcePosition


class _GraphBuilder:
    """Walks a Diagram once and accumulates the graph model."""

    def __init__(self, diagram: Diagram) -> None:
        self._diagram = diagram
        self._graph = GraphModel(
            diagram_type=diagram.declaration.diagram_type,
            direction=diagram.declaration.direction,
        )
        self._first_mention: dict[str, SourcePosition] = {}
        self._declarations: dict[str, _Declaration] = {}
        self._subgraph_positions: dict[str, SourcePosition] = {}

    def build(self) -> GraphModel:
        self._visit(self._diagram.statements, parent=None)
        self._check_subgraph_ids()
        return self._graph

    def _visit(self, statements: list[Statement], parent: Subgraph | None) -> None:
        for statement in statements:
            if isinstance(statement, NodeStatement):
                self._mention(statement.node, parent)
            elif isinstance(statement, EdgeStatement):
                self._add_edges(statement, parent)
            elif isinstance(statement, SubgraphBlock):
                self._add_subgraph(statement, parent)

    # ------------------------------------------------------------------
    # Nodes and edges
    # ------------------------------------------------------------------

    def _mention(self, ref: NodeRef, parent: Subgraph | None) -> None:
        """Record a mention of a node, creating or upgrading it as needed."""
        node = self._graph.nodes.get(ref.id)
        if node is None:
            node = Node(id=ref.id, label=ref.id)
            self._graph.nodes[ref.id] = node
            self._first_mention[ref.id] = ref.span.start
            if parent is not None:
                parent.node_ids.append(ref.id)

        if ref.shape is None:
            return

        previous = self._declarations.get(ref.id)
        if previous is not None and previous.shape != ref.shape:
            raise ValidationError(
                f"Node {ref.id!r} is declared as {previous.shape.value} at {previous.position} "
                f"and as {ref.shape.value} at {ref.span.start}",
                (previous.position, ref.span.start),
            )
        self._declarations[ref.id] = _Declaration(shape=ref.shape, position=ref.span.start)
        node.shape = ref.shape
        if ref.label is not None:
            node.label = ref.label

    def _add_edges(self, statement: EdgeStatement, parent: Subgraph | None) -> None:
        for ref in statement.nodes:
            self._mention(ref, parent)
        for source, link, target in zip(statement.nodes, statement.links, statement.nodes[1:]):
            self._graph.edges.append(
                Edge(
                    source=source.id,
                    target=target.id,
                    label=link.label,
                    style=link.style,
                    has_arrowhead=link.has_arrowhead,
                )
            )

    # ------------------------------------------------------------------
    # Subgraphs
    # ------------------------------------------------------------------

    def _add_subgraph(self, block: SubgraphBlock, parent: Subgraph | None) -> None:
        previous = self._subgraph_positions.get(block.id)
        if previous is not None:
            raise ValidationError(
                f"Duplicate subgraph id {block.id!r}: first defined at {previous}",
                (previous, block.span.start),
            )
        self._subgraph_positions[block.id] = block.span.start
        subgraph = Subgraph(id=block.id, title=block.title)
        self._graph.subgraphs.append(subgraph)
        if parent is not None:
            parent.subgraph_ids.append(block.id)
        self._visit(block.statements, parent=subgraph)

    def _check_subgraph_ids(self) -> None:
        """Reject subgraph ids that are also used as node ids."""
        for subgraph_id, position in self._subgraph_positions.items():
            node_position = self._first_mention.get(subgraph_id)
            if node_position is None:
                continue
            ordered = tuple(sorted((position, node_position), key=lambda p: p.offset))
            raise ValidationError(
                f"Subgraph id {subgraph_id!r} (at {position}) is also used as a node id (at {node_position})",
                ordered,
            )

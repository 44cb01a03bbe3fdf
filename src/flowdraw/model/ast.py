# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Abstract syntax tree produced by the parser.

Every node carries the source span it was parsed from so that later stages
can attribute errors to a precise location.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

from flowdraw.errors import SourcePosition
from flowdraw.model.types import DiagramType, Direction, EdgeStyle, NodeShape

# ###############
# Public Interface
# ###############


class SourceSpan(BaseModel):
    """Half-open range of source text covered by an AST node."""

    model_config = ConfigDict(frozen=True)

    start: SourcePosition
    end: SourcePosition


class GraphDeclaration(BaseModel):
    """The ``graph TD`` / ``flowchart LR`` line that opens every diagram."""

    kind: Literal["declaration"] = "declaration"
    diagram_type: DiagramType
    direction: Direction = Direction.TD
    span: SourceSpan


class NodeRef(BaseModel):
    """A mention of a node id, optionally declaring its shape and label."""

    id: str
    shape: NodeShape | None = None
    label: str | None = None
    span: SourceSpan

    @property
    def is_declaration(self) -> bool:
        return self.shape is not None


class Link(BaseModel):
    """The operator between two nodes of an edge chain."""

    style: EdgeStyle = EdgeStyle.SOLID
    has_arrowhead: bool = True
    label: str | None = None
    span: SourceSpan


class NodeStatement(BaseModel):
    """A statement consisting of a single node mention."""

    kind: Literal["node"] = "node"
    node: NodeRef
    span: SourceSpan


class EdgeStatement(BaseModel):
    """A chain of nodes joined by links, e.g. ``A --> B -.-> C``.

    ``links[i]`` joins ``nodes[i]`` to ``nodes[i + 1]``.
    """

    kind: Literal["edge"] = "edge"
    nodes: list[NodeRef]
    links: list[Link]
    span: SourceSpan


class SubgraphBlock(BaseModel):
    """A ``subgraph id [title] ... end`` block."""

    kind: Literal["subgraph"] = "subgraph"
    id: str
    title: str | None = None
    statements: list[Statement] = _Field(default_factory=list)
    span: SourceSpan


# A statement inside a diagram or subgraph body.
Statement = Annotated[
    NodeStatement | EdgeStatement | SubgraphBlock,
    _Field(discriminator="kind"),
]


class Diagram(BaseModel):
    """Root of the AST: the declaration followed by the statement list."""

    declaration: GraphDeclaration
    statements: list[Statement] = _Field(default_factory=list)


# Resolve forward references in self-referential models.
SubgraphBlock.model_rebuild()
Diagram.model_rebuild()

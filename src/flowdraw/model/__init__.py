# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Syntax tree and graph model for diagram-definition text."""

from flowdraw.model.ast import (
    Diagram,
    EdgeStatement,
    GraphDeclaration,
    Link,
    NodeRef,
    NodeStatement,
    SourceSpan,
    Statement,
    SubgraphBlock,
)
from flowdraw.model.graph import Edge, GraphModel, Node, Subgraph
from flowdraw.model.types import DiagramType, Direction, EdgeStyle, NodeShape

__all__ = [
    # Enumerations
    "DiagramType",
    "Direction",
    "NodeShape",
    "EdgeStyle",
    # Syntax tree
    "SourceSpan",
    "GraphDeclaration",
    "NodeRef",
    "Link",
    "NodeStatement",
    "EdgeStatement",
    "SubgraphBlock",
    "Statement",
    "Diagram",
    # Graph model
    "Node",
    "Edge",
    "Subgraph",
    "GraphModel",
]

# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Enumerations shared by the AST, the graph model, and the scene graph."""

from __future__ import annotations

from enum import Enum

# ###############
# Public Interface
# ###############


class DiagramType(Enum):
    """Statement grammar selected by the declaration on the first line."""

    FLOWCHART = "flowchart"


class Direction(Enum):
    """Flow direction of a diagram: the axis along which ranks are stacked."""

    TD = "TD"
    TB = "TB"
    BT = "BT"
    LR = "LR"
    RL = "RL"

    @property
    def is_horizontal(self) -> bool:
        return self in (Direction.LR, Direction.RL)

    @property
    def is_reversed(self) -> bool:
        return self in (Direction.BT, Direction.RL)


class NodeShape(Enum):
    """Visual shape of a node."""

    RECTANGLE = "rectangle"  # id[label]
    ROUNDED = "rounded"  # id(label)
    RHOMBUS = "rhombus"  # id{label}
    CIRCLE = "circle"  # id((label))


class EdgeStyle(Enum):
    """Stroke style of an edge."""

    SOLID = "solid"
    DASHED = "dashed"
    THICK = "thick"

# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Layout and vector serialization of graph models."""

from flowdraw.views.layout import (
    ClusterBox,
    Connector,
    LayoutError,
    Point,
    SceneGraph,
    ShapeBox,
    assign_ranks,
    layout,
)
from flowdraw.views.svg import render_svg, sanitize_label

__all__ = [
    "Point",
    "ShapeBox",
    "Connector",
    "ClusterBox",
    "SceneGraph",
    "LayoutError",
    "assign_ranks",
    "layout",
    "render_svg",
    "sanitize_label",
]

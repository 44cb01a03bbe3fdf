# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Render pipeline for diagram-definition text: graph building, error reporting, and orchestration."""

from flowdraw.compiler.errors import DiagramError, report
from flowdraw.compiler.pipeline import RenderResult, VectorRenderer, VectorRenderError, render_diagram, render_to_svg
from flowdraw.compiler.semantic_analysis import ValidationError, build_graph

__all__ = [
    "build_graph",
    "ValidationError",
    "DiagramError",
    "report",
    "RenderResult",
    "VectorRenderer",
    "VectorRenderError",
    "render_diagram",
    "render_to_svg",
]

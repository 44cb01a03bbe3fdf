# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""End-to-end render pipeline: text -> tokens -> AST -> graph -> scene -> SVG.

Each stage either hands its output to the next or fails with a positioned
error. The first failure wins: later stages are not attempted and the error
is returned in the result instead of being raised.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from flowdraw.compiler.errors import DiagramError, report
from flowdraw.compiler.semantic_analysis import build_graph
from flowdraw.errors import FlowdrawError, Stage
from flowdraw.model.graph import GraphModel
from flowdraw.parser.lexer import tokenize
from flowdraw.parser.parser import parse
from flowdraw.views.layout import SceneGraph, layout
from flowdraw.views.svg import render_svg
from flowdraw.workspace.config import DEFAULT_CONFIG, RenderConfig

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

# Vector serialization engine: scene + config -> markup, may raise.
VectorRenderer = Callable[[SceneGraph, RenderConfig], str]


class VectorRenderError(FlowdrawError):
    """Raised by a vector renderer that cannot serialize a scene."""

    stage = Stage.RENDER


@dataclass(frozen=True)
class RenderResult:
    """Outcome of one pipeline run.

    Exactly one of :attr:`scene` and :attr:`error` is set.

    Attributes:
        source: The text that was rendered.
        graph: The graph model, when the run got past validation.
        scene: The laid-out scene on success.
        svg: The serialized markup, for runs that included serialization.
        error: The first error encountered.
    """

    source: str
    graph: GraphModel | None = None
    scene: SceneGraph | None = None
    svg: str | None = None
    error: DiagramError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def render_diagram(source: str, config: RenderConfig | None = None) -> RenderResult:
    """Run lexer, parser, graph builder and layout on *source*.

    Never raises for invalid diagram text: the first stage failure is
    normalized with :func:`~flowdraw.compiler.errors.report` and returned.
    """
    config = config or DEFAULT_CONFIG
    graph: GraphModel | None = None
    try:
        diagram = parse(tokenize(source))
        graph = build_graph(diagram)
        scene = layout(graph, config)
    except FlowdrawError as exc:
        error = report(exc)
        logger.debug("Render failed in %s stage: %s", error.stage.value, exc)
        return RenderResult(source=source, graph=graph, error=error)
    logger.debug("Rendered %d node(s), %d edge(s)", len(graph.nodes), len(graph.edges))
    return RenderResult(source=source, graph=graph, scene=scene)


def render_to_svg(
    source: str,
    config: RenderConfig | None = None,
    renderer: VectorRenderer | None = None,
) -> RenderResult:
    """Run :func:`render_diagram` and serialize the scene with *renderer*.

    Args:
        source: Diagram-definition text.
        config: Render settings; defaults to :data:`DEFAULT_CONFIG`.
        renderer: Vector serialization engine; defaults to
            :func:`~flowdraw.views.svg.render_svg`.

    Returns:
        A RenderResult whose ``svg`` is set on success. A renderer failure is
        reported with stage ``RENDER``.
    """
    config = config or DEFAULT_CONFIG
    result = render_diagram(source, config)
    if result.scene is None:
        return result
    renderer = renderer or render_svg
    try:
        svg = renderer(result.scene, config)
    except VectorRenderError as exc:
        logger.warning("Vector renderer failed: %s", exc)
        return RenderResult(source=source, graph=result.graph, error=report(exc))
    except Exception as exc:  # pluggable engines may raise anything
        logger.warning("Vector renderer failed: %s", exc)
        return RenderResult(
            source=source,
            graph=result.graph,
            error=DiagramError(message=str(exc) or type(exc).__name__, stage=Stage.RENDER),
        )
    return RenderResult(source=source, graph=result.graph, scene=result.scene, svg=svg)

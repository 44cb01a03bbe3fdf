# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""End-to-end tests for the render pipeline boundary."""

import pytest

from flowdraw.compiler.pipeline import VectorRenderError, render_diagram, render_to_svg
from flowdraw.errors import Stage
from flowdraw.model.types import NodeShape
from flowdraw.views.layout import SceneGraph
from flowdraw.workspace.config import RenderConfig

SAMPLE = """graph TD
    A[Christmas] -->|Get money| B(Go shopping)
    B --> C{Let me think}
    C -->|One| D[Laptop]
    C -->|Two| E[iPhone]
    C -->|Three| F[Car]
"""

# ###############
# Successful Renders
# ###############


class TestSuccess:
    def test_valid_text_renders(self) -> None:
        result = render_diagram(SAMPLE)
        assert result.ok
        assert result.error is None
        assert result.scene is not None
        assert result.graph is not None

    def test_scene_node_ids_equal_graph_node_ids(self) -> None:
        result = render_diagram(SAMPLE)
        assert result.scene is not None and result.graph is not None
        assert set(result.scene.node_ids) == set(result.graph.nodes)
        assert len(result.scene.connectors) == len(result.graph.edges)

    def test_identical_text_gives_equal_scenes(self) -> None:
        assert render_diagram(SAMPLE).scene == render_diagram(SAMPLE).scene

    def test_declared_nodes_and_edge(self) -> None:
        result = render_diagram("graph TD\nA[Start] --> B(End)")
        graph = result.graph
        assert graph is not None
        assert graph.nodes["A"].shape == NodeShape.RECTANGLE
        assert graph.nodes["A"].label == "Start"
        assert graph.nodes["B"].shape == NodeShape.ROUNDED
        assert graph.nodes["B"].label == "End"
        assert [(e.source, e.target) for e in graph.edges] == [("A", "B")]

    def test_implicit_nodes(self) -> None:
        graph = render_diagram("graph TD\na --> b").graph
        assert graph is not None
        assert {n.id: (n.shape, n.label) for n in graph.nodes.values()} == {
            "a": (NodeShape.RECTANGLE, "a"),
            "b": (NodeShape.RECTANGLE, "b"),
        }

    def test_render_diagram_does_not_serialize(self) -> None:
        assert render_diagram(SAMPLE).svg is None

    def test_render_to_svg(self) -> None:
        result = render_to_svg(SAMPLE)
        assert result.ok
        assert result.svg is not None
        assert result.svg.startswith("<svg")
        assert "Christmas" in result.svg

    def test_config_is_applied(self) -> None:
        result = render_to_svg("graph TD\nA", RenderConfig(theme="dark"))
        assert result.svg is not None
        assert "#1f2020" in result.svg


# ###############
# Failures
# ###############


class TestFailures:
    def test_missing_declaration(self) -> None:
        result = render_diagram("A --> B")
        assert not result.ok
        assert result.scene is None
        assert result.error is not None
        assert result.error.stage is Stage.PARSE
        assert "diagram type declaration" in result.error.message

    def test_blank_text_is_missing_declaration(self) -> None:
        result = render_diagram("   \n")
        assert result.error is not None
        assert result.error.stage is Stage.PARSE

    def test_lexer_failure(self) -> None:
        result = render_diagram("graph TD\nA[unterminated --> B")
        assert result.error is not None
        assert result.error.stage is Stage.LEX
        assert result.error.position is not None
        assert (result.error.position.line, result.error.position.column) == (2, 2)

    def test_conflicting_declarations(self) -> None:
        result = render_diagram("graph TD\na[Label1]\na --> b\na(Label2)")
        assert result.error is not None
        assert result.error.stage is Stage.VALIDATE
        assert [(p.line, p.column) for p in result.error.related] == [(2, 1), (4, 1)]

    def test_graph_kept_when_layout_fails(self) -> None:
        result = render_diagram("graph TD\nsubgraph s\nend")
        assert result.error is not None
        assert result.error.stage is Stage.LAYOUT
        assert result.error.position is None
        assert result.graph is not None

    @pytest.mark.parametrize(
        "source",
        [
            "",
            "graph",
            "graph TD\n-->",
            "graph TD\nA -->",
            "graph TD\nA[",
            "graph TD\nA -->|x B",
            "graph TD\nsubgraph s\nA",
            "graph TD\nend",
            "graph QQ",
            "flowchart LR\nA{x} --> A[y]",
            "graph TD\n\x00",
        ],
    )
    def test_never_raises(self, source: str) -> None:
        result = render_to_svg(source)
        assert result.error is not None
        assert result.svg is None


# ###############
# Vector Renderer Failures
# ###############


class TestRendererFailures:
    def test_custom_renderer_is_used(self) -> None:
        def renderer(scene: SceneGraph, config: RenderConfig) -> str:
            return f"<svg data-nodes='{len(scene.shapes)}'/>"

        result = render_to_svg("graph TD\nA --> B", renderer=renderer)
        assert result.svg == "<svg data-nodes='2'/>"

    def test_render_error_is_reported(self) -> None:
        def renderer(scene: SceneGraph, config: RenderConfig) -> str:
            raise VectorRenderError("engine unavailable")

        result = render_to_svg("graph TD\nA --> B", renderer=renderer)
        assert result.error is not None
        assert result.error.stage is Stage.RENDER
        assert result.error.message == "engine unavailable"
        assert result.scene is None
        assert result.graph is not None

    def test_unexpected_renderer_exception_is_reported(self) -> None:
        def renderer(scene: SceneGraph, config: RenderConfig) -> str:
            raise RuntimeError("boom")

        result = render_to_svg("graph TD\nA --> B", renderer=renderer)
        assert result.error is not None
        assert result.error.stage is Stage.RENDER
        assert result.error.describe() == "Render error: boom"

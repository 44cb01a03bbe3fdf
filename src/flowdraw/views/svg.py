# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""SVG serialization of a laid-out scene graph."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET

from flowdraw.model.types import EdgeStyle, NodeShape
from flowdraw.views.layout import ClusterBox, Connector, Point, SceneGraph, ShapeBox, edge_label_size
from flowdraw.workspace.config import DEFAULT_CONFIG, RenderConfig

# ###############
# Public Interface
# ###############

SVG_NAMESPACE = "http://www.w3.org/2000/svg"

THEMES: dict[str, dict[str, str]] = {
    "light": {
        "background": "#ffffff",
        "node_fill": "#ececff",
        "node_stroke": "#9370db",
        "text": "#333333",
        "edge": "#333333",
        "cluster_fill": "#ffffde",
        "cluster_stroke": "#aaaa33",
        "label_background": "#e8e8e8",
    },
    "dark": {
        "background": "#1f2020",
        "node_fill": "#1f2020",
        "node_stroke": "#cccccc",
        "text": "#e0dfdf",
        "edge": "#d3d3d3",
        "cluster_fill": "#2b2b3b",
        "cluster_stroke": "#6b6b8b",
        "label_background": "#585858",
    },
}


def render_svg(scene: SceneGraph, config: RenderConfig = DEFAULT_CONFIG) -> str:
    """Serialize *scene* to a standalone SVG document string."""
    colors = THEMES[config.theme]
    root = ET.Element(
        "svg",
        {
            "xmlns": SVG_NAMESPACE,
            "width": _num(scene.width),
            "height": _num(scene.height),
            "viewBox": f"0 0 {_num(scene.width)} {_num(scene.height)}",
            "font-family": config.font_family,
            "font-size": _num(config.font_size),
        },
    )
    _add_defs(root, colors)
    ET.SubElement(
        root,
        "rect",
        {"class": "background", "width": "100%", "height": "100%", "fill": colors["background"]},
    )

    for cluster in scene.clusters:
        _add_cluster(root, cluster, colors, config)
    for connector in scene.connectors:
        _add_connector(root, connector, colors, config)
    for box in scene.shapes:
        _add_shape(root, box, colors, config)

    return ET.tostring(root, encoding="unicode")


def sanitize_label(label: str, security_level: str) -> str:
    """Return the label text to draw; markup tags are stripped in strict mode."""
    if security_level == "strict":
        return _TAG.sub("", label)
    return label


# ################
# Implementation
# ################

_TAG = re.compile(r"<[^>]*>")

_STROKE_WIDTH: dict[EdgeStyle, str] = {
    EdgeStyle.SOLID: "2",
    EdgeStyle.DASHED: "2",
    EdgeStyle.THICK: "3.5",
}


def _num(value: float) -> str:
    """Format a coordinate compactly and deterministically."""
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _points(points: tuple[Point, ...]) -> str:
    return " ".join(f"{_num(p.x)},{_num(p.y)}" for p in points)


def _add_defs(root: ET.Element, colors: dict[str, str]) -> None:
    defs = ET.SubElement(root, "defs")
    marker = ET.SubElement(
        defs,
        "marker",
        {
            "id": "arrowhead",
            "viewBox": "0 0 10 10",
            "refX": "9",
            "refY": "5",
            "markerWidth": "8",
            "markerHeight": "8",
            "orient": "auto-start-reverse",
        },
    )
    ET.SubElement(marker, "path", {"d": "M 0 0 L 10 5 L 0 10 z", "fill": colors["edge"]})


def _add_text(parent: ET.Element, text: str, at: Point, color: str, config: RenderConfig) -> None:
    element = ET.SubElement(
        parent,
        "text",
        {
            "x": _num(at.x),
            "y": _num(at.y),
            "fill": color,
            "text-anchor": "middle",
            "dominant-baseline": "central",
        },
    )
    element.text = sanitize_label(text, config.security_level)


def _add_shape(root: ET.Element, box: ShapeBox, colors: dict[str, str], config: RenderConfig) -> None:
    group = ET.SubElement(root, "g", {"class": f"node {box.shape.value}", "id": f"node-{box.node_id}"})
    style = {"fill": colors["node_fill"], "stroke": colors["node_stroke"], "stroke-width": "1.5"}
    center = box.center
    if box.shape == NodeShape.CIRCLE:
        ET.SubElement(
            group,
            "circle",
            {"cx": _num(center.x), "cy": _num(center.y), "r": _num(box.width / 2), **style},
        )
    elif box.shape == NodeShape.RHOMBUS:
        corners = (
            Point(center.x, box.y),
            Point(box.x + box.width, center.y),
            Point(center.x, box.y + box.height),
            Point(box.x, center.y),
        )
        ET.SubElement(group, "polygon", {"points": _points(corners), **style})
    else:
        radius = "0" if box.shape == NodeShape.RECTANGLE else _num(box.height / 4)
        ET.SubElement(
            group,
            "rect",
            {
                "x": _num(box.x),
                "y": _num(box.y),
                "width": _num(box.width),
                "height": _num(box.height),
                "rx": radius,
                "ry": radius,
                **style,
            },
        )
    _add_text(group, box.label, center, colors["text"], config)


def _add_connector(root: ET.Element, connector: Connector, colors: dict[str, str], config: RenderConfig) -> None:
    group = ET.SubElement(
        root,
        "g",
        {"class": f"edge {connector.style.value}", "id": f"edge-{connector.edge_index}"},
    )
    attrs = {
        "points": _points(connector.points),
        "fill": "none",
        "stroke": colors["edge"],
        "stroke-width": _STROKE_WIDTH[connector.style],
    }
    if connector.style == EdgeStyle.DASHED:
        attrs["stroke-dasharray"] = "4 3"
    if connector.has_arrowhead:
        attrs["marker-end"] = "url(#arrowhead)"
    ET.SubElement(group, "polyline", attrs)

    if connector.label and connector.label_position:
        at = connector.label_position
        width, height = edge_label_size(connector.label, config)
        ET.SubElement(
            group,
            "rect",
            {
                "x": _num(at.x - width / 2),
                "y": _num(at.y - height / 2),
                "width": _num(width),
                "height": _num(height),
                "fill": colors["label_background"],
            },
        )
        _add_text(group, connector.label, at, colors["text"], config)


def _add_cluster(root: ET.Element, cluster: ClusterBox, colors: dict[str, str], config: RenderConfig) -> None:
    group = ET.SubElement(root, "g", {"class": "cluster", "id": f"cluster-{cluster.subgraph_id}"})
    ET.SubElement(
        group,
        "rect",
        {
            "x": _num(cluster.x),
            "y": _num(cluster.y),
            "width": _num(cluster.width),
            "height": _num(cluster.height),
            "fill": colors["cluster_fill"],
            "stroke": colors["cluster_stroke"],
        },
    )
    if cluster.title:
        title_at = Point(cluster.x + cluster.width / 2, cluster.y + (config.font_size + 6) / 2 + 2)
        _add_text(group, cluster.title, title_at, colors["text"], config)

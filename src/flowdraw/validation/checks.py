# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Non-fatal lint checks on a validated graph model.

These checks never block rendering. They point at constructs that are
legal but usually unintended.
"""

from __future__ import annotations

from dataclasses import dataclass

from flowdraw.model.graph import GraphModel

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class LintWarning:
    """A suspicious but renderable construct.

    Attributes:
        message: Human-readable description of the warning.
    """

    message: str


def check(graph: GraphModel) -> list[LintWarning]:
    """Run all lint checks on *graph*.

    Checks performed:

    1. **Isolated nodes**: in a graph that has edges, nodes that no edge
       touches.
    2. **Duplicate edges**: two edges with the same endpoints, label and
       style. Both are drawn.
    3. **Empty subgraphs**: subgraphs with no nodes and no nested subgraphs.
       They are not drawn.
    4. **Cycles**: a cycle in the edge graph (self-loops excluded). Back
       edges are routed against the flow direction.

    Returns:
        Warnings in check order. An empty list means nothing was flagged.
    """
    warnings: list[LintWarning] = []
    warnings.extend(_check_isolated_nodes(graph))
    warnings.extend(_check_duplicate_edges(graph))
    warnings.extend(_check_empty_subgraphs(graph))
    warnings.extend(_check_cycles(graph))
    return warnings


# ################
# Implementation
# ################


def _detect_cycle(graph: dict[str, list[str]]) -> list[str] | None:
    """Detect a cycle in a directed graph using DFS.

    Uses a three-colour marking scheme (white/grey/black) to distinguish
    unvisited, in-progress, and fully-explored nodes. The walk keeps an
    explicit stack of neighbour iterators, so long chains do not hit the
    interpreter's recursion limit.

    Returns:
        The node ids forming the cycle with the start node repeated at the
        end (e.g. ``["A", "B", "A"]``), or ``None`` if the graph is acyclic.
    """
    WHITE, GREY, BLACK = 0, 1, 2
    color: dict[str, int] = {}

    for root in graph:
        if color.get(root, WHITE) != WHITE:
            continue
        color[root] = GREY
        path: list[str] = [root]
        stack = [iter(graph.get(root, []))]
        while stack:
            neighbor = next(stack[-1], None)
            if neighbor is None:
                stack.pop()
                color[path.pop()] = BLACK
                continue
            state = color.get(neighbor, WHITE)
            if state == GREY:
                return path[path.index(neighbor) :] + [neighbor]
            if state == WHITE:
                color[neighbor] = GREY
                path.append(neighbor)
                stack.append(iter(graph.get(neighbor, [])))
    return None


def _check_isolated_nodes(graph: GraphModel) -> list[LintWarning]:
    if not graph.edges:
        return []
    touched = {e.source for e in graph.edges} | {e.target for e in graph.edges}
    return [
        LintWarning(message=f"Node '{node_id}' is not connected to any other node (isolated).")
        for node_id in graph.nodes
        if node_id not in touched
    ]


def _check_duplicate_edges(graph: GraphModel) -> list[LintWarning]:
    warnings: list[LintWarning] = []
    seen: set[tuple[str, str, str | None, str]] = set()
    for edge in graph.edges:
        key = (edge.source, edge.target, edge.label, edge.style.value)
        if key in seen:
            warnings.append(LintWarning(message=f"Duplicate edge '{edge.source}' -> '{edge.target}'."))
        seen.add(key)
    return warnings


def _check_empty_subgraphs(graph: GraphModel) -> list[LintWarning]:
    return [
        LintWarning(message=f"Subgraph '{s.id}' is empty and will not be drawn.")
        for s in graph.subgraphs
        if not s.node_ids and not s.subgraph_ids
    ]


def _check_cycles(graph: GraphModel) -> list[LintWarning]:
    adjacency: dict[str, list[str]] = {node_id: [] for node_id in graph.nodes}
    for edge in graph.edges:
        if not edge.is_self_loop:
            adjacency[edge.source].append(edge.target)
    cycle = _detect_cycle(adjacency)
    if cycle is None:
        return []
    return [LintWarning(message=f"Cycle detected: {' -> '.join(cycle)}.")]

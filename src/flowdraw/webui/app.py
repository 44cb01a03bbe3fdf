# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Dash-based diagram editor: text pane, live preview, error panel, and AI fix review."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import dash
from dash import Input, Output, State, dcc, html
from dash.exceptions import PreventUpdate

from flowdraw.compiler.pipeline import render_to_svg
from flowdraw.repair.diff import DiffLine
from flowdraw.repair.service import GeminiRepairService, RepairError, RepairService, request_repair
from flowdraw.workspace.config import DEFAULT_CONFIG, RenderConfig
from flowdraw.workspace.credentials import CredentialError, CredentialStore

# ###############
# Public Interface
# ###############

SAMPLE_DIAGRAM = """graph TD
    A[Christmas] -->|Get money| B(Go shopping)
    B --> C{Let me think}
    C -->|One| D[Laptop]
    C -->|Two| E[iPhone]
    C -->|Three| F[Car]"""

ServiceFactory = Callable[[str], RepairService]


def create_app(
    config: RenderConfig = DEFAULT_CONFIG,
    store: CredentialStore | None = None,
    service_factory: ServiceFactory | None = None,
) -> dash.Dash:
    """Create and configure the Flowdraw web editor.

    Args:
        config: Render settings shared by every preview.
        store: Where the API key for AI repair is kept.
        service_factory: Builds a repair service from an API key; defaults to
            a Gemini-backed service using ``config.ai_model``.
    """
    store = store or CredentialStore()
    if service_factory is None:

        def service_factory(api_key: str) -> RepairService:
            return GeminiRepairService(api_key, model=config.ai_model, temperature=config.ai_temperature)

    app = dash.Dash(
        __name__,
        title="Flowdraw Diagram Editor",
    )
    app.layout = _build_layout(config)
    _register_callbacks(app, config, store, service_factory)
    return app


# ################
# Implementation
# ################

_PANEL_STYLE = {"flex": "1", "display": "flex", "flexDirection": "column", "gap": "0.5rem"}
_ERROR_STYLE = {
    "color": "#9f1239",
    "background": "#fff1f2",
    "border": "1px solid #fecdd3",
    "padding": "1rem",
    "fontFamily": "monospace",
}
_DIFF_COLORS = {
    "equal": "transparent",
    "removed": "#fef2f2",
    "added": "#f0fdf4",
    "changed": "#fefce8",
}


def _build_layout(config: RenderConfig = DEFAULT_CONFIG) -> html.Div:
    """Build the application layout."""
    return html.Div(
        [
            html.H1("Flowdraw Diagram Editor"),
            html.Div(
                [
                    html.Div(
                        [
                            html.H3("Editor"),
                            dcc.Textarea(
                                id="editor",
                                value=SAMPLE_DIAGRAM,
                                style={"width": "100%", "height": "60vh", "fontFamily": "monospace"},
                            ),
                            dcc.Store(id="pending-edit"),
                            dcc.Store(id="rendered-revision", data=0),
                            dcc.Interval(id="render-timer", interval=_tick_interval_ms(config)),
                        ],
                        style=_PANEL_STYLE,
                    ),
                    html.Div(
                        [
                            html.H3("Preview"),
                            html.Iframe(id="preview", style={"width": "100%", "height": "60vh", "border": "none"}),
                            html.Div(id="error-panel"),
                            html.Button("Fix with AI", id="fix-button", n_clicks=0),
                        ],
                        style=_PANEL_STYLE,
                    ),
                ],
                style={"display": "flex", "gap": "1rem"},
            ),
            html.Hr(),
            html.H3("Review AI fix"),
            html.Div(id="diff-view"),
            html.Button("Apply fix", id="apply-button", n_clicks=0),
            dcc.Store(id="suggestion-store"),
            html.Hr(),
            html.H3("Settings"),
            dcc.Input(id="api-key", type="password", placeholder="Gemini API key"),
            html.Button("Save key", id="save-key", n_clicks=0),
            html.Span(id="key-status", style={"marginLeft": "1rem"}),
        ],
        style={"fontFamily": "sans-serif", "padding": "2rem"},
    )


def _register_callbacks(
    app: dash.Dash,
    config: RenderConfig,
    store: CredentialStore,
    service_factory: ServiceFactory,
) -> None:
    @app.callback(
        Output("pending-edit", "data"),
        Input("editor", "value"),
        State("pending-edit", "data"),
    )
    def _on_edit(code: str | None, pending: dict[str, Any] | None) -> dict[str, Any]:
        return _queue_edit(code or "", pending, time.time())

    @app.callback(
        Output("preview", "srcDoc"),
        Output("error-panel", "children"),
        Output("rendered-revision", "data"),
        Input("render-timer", "n_intervals"),
        State("pending-edit", "data"),
        State("rendered-revision", "data"),
    )
    def _on_tick(
        _n_intervals: int | None, pending: dict[str, Any] | None, rendered: int | None
    ) -> tuple[str, Any, int]:
        update = _render_if_settled(pending, rendered or 0, time.time(), config)
        if update is None:
            raise PreventUpdate
        return update

    @app.callback(
        Output("suggestion-store", "data"),
        Output("diff-view", "children"),
        Input("fix-button", "n_clicks"),
        State("editor", "value"),
        prevent_initial_call=True,
    )
    def _on_fix(n_clicks: int, code: str | None) -> tuple[dict[str, str] | None, Any]:
        if not n_clicks:
            raise PreventUpdate
        return _suggest_fix(code or "", config, store, service_factory)

    @app.callback(
        Output("editor", "value"),
        Output("suggestion-store", "data", allow_duplicate=True),
        Output("diff-view", "children", allow_duplicate=True),
        Input("apply-button", "n_clicks"),
        State("suggestion-store", "data"),
        prevent_initial_call=True,
    )
    def _on_apply(n_clicks: int, data: dict[str, str] | None) -> tuple[str, None, list[Any]]:
        if not n_clicks:
            raise PreventUpdate
        return _apply_suggestion(data)

    @app.callback(
        Output("key-status", "children"),
        Input("save-key", "n_clicks"),
        State("api-key", "value"),
        prevent_initial_call=True,
    )
    def _on_save_key(n_clicks: int, api_key: str | None) -> str:
        if not n_clicks:
            raise PreventUpdate
        return _save_key(api_key or "", store)


def _render_preview(code: str, config: RenderConfig) -> tuple[str, Any]:
    """Return (preview markup, error panel children) for the editor text."""
    if not code.strip():
        return "", []
    result = render_to_svg(code, config)
    if result.error is not None:
        return "", html.Div(
            [html.Strong("Syntax error detected"), html.P(result.error.describe())],
            style=_ERROR_STYLE,
        )
    return result.svg or "", []


def _tick_interval_ms(config: RenderConfig) -> int:
    """Poll often enough that a settled edit renders within about 1.5x the debounce delay."""
    return max(50, config.debounce_ms // 2)


def _queue_edit(code: str, pending: dict[str, Any] | None, now: float) -> dict[str, Any]:
    """Record the latest editor text; each edit bumps the revision and restarts the quiet period."""
    revision = (pending or {}).get("revision", 0) + 1
    return {"code": code, "revision": revision, "at": now}


def _render_if_settled(
    pending: dict[str, Any] | None,
    rendered_revision: int,
    now: float,
    config: RenderConfig,
) -> tuple[str, Any, int] | None:
    """Render the pending edit once the editor has been quiet for ``config.debounce_ms``.

    Returns:
        ``(preview markup, error panel children, rendered revision)``, or
        ``None`` when there is nothing new or the user is still typing.
    """
    if not pending or pending["revision"] == rendered_revision:
        return None
    if (now - pending["at"]) * 1000 < config.debounce_ms:
        return None
    markup, errors = _render_preview(pending["code"], config)
    return markup, errors, pending["revision"]


def _apply_suggestion(data: dict[str, str] | None) -> tuple[str, None, list[Any]]:
    """Return the new editor text and clear the stored suggestion and its diff."""
    if not data:
        raise PreventUpdate
    return data["suggestion"], None, []


def _suggest_fix(
    code: str,
    config: RenderConfig,
    store: CredentialStore,
    service_factory: ServiceFactory,
) -> tuple[dict[str, str] | None, Any]:
    """Ask the repair service about the current error; return (stored suggestion, diff view)."""
    result = render_to_svg(code, config)
    if result.error is None:
        return None, html.P("The diagram renders; there is nothing to fix.")
    try:
        api_key = store.load()
    except CredentialError as exc:
        return None, html.P(f"Error: {exc}")
    if not api_key:
        return None, html.P("Set an API key in Settings to use AI repair.")
    try:
        suggestion = request_repair(code, result.error, service_factory(api_key))
    except RepairError as exc:
        return None, html.P(f"Error: {exc}")
    return {"suggestion": suggestion.suggestion}, _diff_table(suggestion.diff)


def _diff_table(rows: list[DiffLine]) -> html.Table:
    """Render a side-by-side diff: current text on the left, suggestion on the right."""
    header = html.Tr([html.Th("Your code"), html.Th("AI suggestion")])
    body = [
        html.Tr(
            [html.Td(row.old or ""), html.Td(row.new or "")],
            style={"background": _DIFF_COLORS[row.kind], "fontFamily": "monospace", "whiteSpace": "pre"},
        )
        for row in rows
    ]
    return html.Table([header, *body], style={"width": "100%"})


def _save_key(api_key: str, store: CredentialStore) -> str:
    try:
        store.save(api_key)
    except CredentialError as exc:
        return f"Error: {exc}"
    return "API key saved."

# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the Flowdraw command-line interface."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from yachalk import chalk

from flowdraw.compiler.pipeline import RenderResult, render_to_svg
from flowdraw.live.session import LivePreview
from flowdraw.validation.checks import check
from flowdraw.workspace.config import (
    CONFIG_FILE_NAME,
    DEFAULT_CONFIG,
    RenderConfig,
    RenderConfigError,
    load_render_config,
)
from flowdraw.workspace.credentials import CredentialError, CredentialStore

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the Flowdraw CLI."""
    parser = argparse.ArgumentParser(
        prog="flowdraw",
        description="Flowdraw: render flowchart descriptions to SVG",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    config_parent = argparse.ArgumentParser(add_help=False)
    config_parent.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Render configuration file (default: {CONFIG_FILE_NAME} in the current directory, if present)",
    )

    # render subcommand
    render_parser = subparsers.add_parser(
        "render",
        parents=[config_parent],
        help="Render a diagram file to SVG",
        description="Render a diagram-definition file to SVG.",
    )
    render_parser.add_argument("file", type=Path, help="Diagram-definition file")
    render_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output SVG file (default: standard output)",
    )

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        parents=[config_parent],
        help="Check a diagram file for errors and warnings",
        description="Run the render pipeline on a file and report errors and lint warnings.",
    )
    check_parser.add_argument("file", type=Path, help="Diagram-definition file")

    # watch subcommand
    watch_parser = subparsers.add_parser(
        "watch",
        parents=[config_parent],
        help="Re-render a diagram file whenever it changes",
        description="Watch a diagram file and re-render it after edits settle.",
    )
    watch_parser.add_argument("file", type=Path, help="Diagram-definition file")
    watch_parser.add_argument("-o", "--output", type=Path, required=True, help="Output SVG file")
    watch_parser.add_argument(
        "--interval",
        type=float,
        default=_DEFAULT_POLL_INTERVAL,
        help=f"Polling interval in seconds (default: {_DEFAULT_POLL_INTERVAL})",
    )

    # fix subcommand
    fix_parser = subparsers.add_parser(
        "fix",
        parents=[config_parent],
        help="Ask the AI repair service to fix a broken diagram",
        description=(
            "Send the broken text and its error to the AI repair service and print the suggested change "
            "as a unified diff. The file is only modified with --apply."
        ),
    )
    fix_parser.add_argument("file", type=Path, help="Diagram-definition file")
    fix_parser.add_argument("--apply", action="store_true", help="Write the suggestion back to the file")

    # set-key subcommand
    set_key_parser = subparsers.add_parser(
        "set-key",
        help="Store the API key for the AI repair service",
        description="Store the API key used by 'fix' and the web UI.",
    )
    set_key_parser.add_argument("key", help="API key")

    # clear-key subcommand
    subparsers.add_parser(
        "clear-key",
        help="Remove the stored API key",
        description="Remove the stored API key.",
    )

    # serve subcommand
    serve_parser = subparsers.add_parser(
        "serve",
        parents=[config_parent],
        help="Launch the web editor",
        description="Launch the web-based diagram editor with live preview.",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8050,
        help="Port to run the server on (default: 8050)",
    )
    serve_parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind the server to (default: 127.0.0.1)",
    )

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(_dispatch(args))


# ################
# Implementation
# ################

_DEFAULT_POLL_INTERVAL = 0.5


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "render":
        return _cmd_render(args)
    if args.command == "check":
        return _cmd_check(args)
    if args.command == "watch":
        return _cmd_watch(args)
    if args.command == "fix":
        return _cmd_fix(args)
    if args.command == "set-key":
        return _cmd_set_key(args)
    if args.command == "clear-key":
        return _cmd_clear_key(args)
    if args.command == "serve":
        return _cmd_serve(args)
    return 0


def _error(message: str) -> None:
    print(chalk.red(f"Error: {message}"), file=sys.stderr)


def _warning(message: str) -> None:
    print(chalk.yellow(f"Warning: {message}"), file=sys.stderr)


def _load_config(args: argparse.Namespace) -> RenderConfig:
    """Return the configuration named by --config, the local file, or the defaults.

    Raises:
        RenderConfigError: If the selected file is missing or invalid.
    """
    if args.config is not None:
        return load_render_config(args.config)
    local = Path.cwd() / CONFIG_FILE_NAME
    if local.exists():
        logger.debug("Using configuration from %s", local)
        return load_render_config(local)
    return DEFAULT_CONFIG


def _read_source(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        _error(f"file '{path}' does not exist.")
    except OSError as exc:
        _error(f"cannot read '{path}': {exc}")
    return None


def _cmd_render(args: argparse.Namespace) -> int:
    """Handle the render subcommand."""
    try:
        config = _load_config(args)
    except RenderConfigError as exc:
        _error(str(exc))
        return 1

    source = _read_source(args.file)
    if source is None:
        return 1

    result = render_to_svg(source, config)
    if result.error is not None:
        _error(f"{args.file}: {result.error.describe()}")
        return 1

    if args.output is None:
        print(result.svg)
        return 0
    try:
        args.output.write_text(result.svg or "", encoding="utf-8")
    except OSError as exc:
        _error(f"cannot write '{args.output}': {exc}")
        return 1
    print(chalk.green(f"Wrote '{args.output}'."))
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the check subcommand."""
    try:
        config = _load_config(args)
    except RenderConfigError as exc:
        _error(str(exc))
        return 1

    source = _read_source(args.file)
    if source is None:
        return 1

    result = render_to_svg(source, config)
    if result.error is not None:
        _error(f"{args.file}: {result.error.describe()}")
        return 1

    if result.graph is None:
        _error(f"{args.file}: the pipeline produced no graph.")
        return 1

    warnings = check(result.graph)
    for warning in warnings:
        _warning(warning.message)

    print(
        f"Checked '{args.file}': {len(result.graph.nodes)} node(s), "
        f"{len(result.graph.edges)} edge(s), {len(warnings)} warning(s)."
    )
    return 0


def _cmd_watch(args: argparse.Namespace) -> int:
    """Handle the watch subcommand."""
    try:
        config = _load_config(args)
    except RenderConfigError as exc:
        _error(str(exc))
        return 1

    if not args.file.exists():
        _error(f"file '{args.file}' does not exist.")
        return 1

    print(f"Watching '{args.file}' (Ctrl+C to stop)...")
    try:
        return asyncio.run(_watch_file(args.file, args.output, config, args.interval))
    except KeyboardInterrupt:
        return 0


async def _watch_file(
    path: Path,
    output: Path,
    config: RenderConfig,
    interval: float = _DEFAULT_POLL_INTERVAL,
    max_polls: int | None = None,
) -> int:
    """Poll *path* and feed every change into a LivePreview writing *output*.

    Runs until cancelled, or for *max_polls* polls when given. A final
    pending render is allowed to complete before returning.
    """

    def _on_result(result: RenderResult | None) -> None:
        if result is None:
            return
        if result.error is not None:
            _error(f"{path}: {result.error.describe()}")
            return
        try:
            output.write_text(result.svg or "", encoding="utf-8")
        except OSError as exc:
            _error(f"cannot write '{output}': {exc}")
            return
        print(chalk.green(f"Wrote '{output}'."))

    preview = LivePreview(config, on_result=_on_result)
    last_text: str | None = None
    polls = 0
    try:
        while max_polls is None or polls < max_polls:
            try:
                text = path.read_text(encoding="utf-8")
            except OSError as exc:
                _error(f"cannot read '{path}': {exc}")
                return 1
            if text != last_text:
                last_text = text
                preview.update(text)
            polls += 1
            await asyncio.sleep(interval)
        # Let the last scheduled render fire.
        await asyncio.sleep(config.debounce_ms / 1000)
    finally:
        preview.close()
    return 0


def _cmd_fix(args: argparse.Namespace) -> int:
    """Handle the fix subcommand."""
    from flowdraw.repair.diff import unified_diff
    from flowdraw.repair.service import GeminiRepairService, RepairError, request_repair

    try:
        config = _load_config(args)
    except RenderConfigError as exc:
        _error(str(exc))
        return 1

    source = _read_source(args.file)
    if source is None:
        return 1

    result = render_to_svg(source, config)
    if result.error is None:
        print(f"'{args.file}' renders without errors; nothing to fix.")
        return 0
    print(f"{args.file}: {result.error.describe()}")

    try:
        api_key = CredentialStore().load()
    except CredentialError as exc:
        _error(str(exc))
        return 1
    if not api_key:
        _error("no API key stored. Run 'flowdraw set-key KEY' first.")
        return 1

    try:
        service = GeminiRepairService(api_key, model=config.ai_model, temperature=config.ai_temperature)
        suggestion = request_repair(source, result.error, service)
    except RepairError as exc:
        _error(str(exc))
        return 1

    if not suggestion.changed:
        print("The repair service suggested no changes.")
        return 1
    print(unified_diff(source, suggestion.suggestion, name=args.file.name), end="")

    if not args.apply:
        print("Run again with --apply to write the suggestion.")
        return 0
    try:
        args.file.write_text(suggestion.suggestion + "\n", encoding="utf-8")
    except OSError as exc:
        _error(f"cannot write '{args.file}': {exc}")
        return 1
    print(chalk.green(f"Applied suggestion to '{args.file}'."))
    return 0


def _cmd_set_key(args: argparse.Namespace) -> int:
    """Handle the set-key subcommand."""
    store = CredentialStore()
    try:
        store.save(args.key)
    except CredentialError as exc:
        _error(str(exc))
        return 1
    print(f"API key stored in '{store.path}'.")
    return 0


def _cmd_clear_key(args: argparse.Namespace) -> int:
    """Handle the clear-key subcommand."""
    store = CredentialStore()
    try:
        store.clear()
    except CredentialError as exc:
        _error(str(exc))
        return 1
    print("API key removed.")
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    """Handle the serve subcommand."""
    from flowdraw.webui.app import create_app

    try:
        config = _load_config(args)
    except RenderConfigError as exc:
        _error(str(exc))
        return 1

    app = create_app(config=config)
    print(f"Starting Flowdraw editor at http://{args.host}:{args.port}/")
    app.run(host=args.host, port=args.port, debug=False)
    return 0

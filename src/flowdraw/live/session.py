# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Live preview: re-render diagram text after each burst of edits."""

from __future__ import annotations

import logging
from collections.abc import Callable

from flowdraw.compiler.pipeline import RenderResult, VectorRenderer, render_to_svg
from flowdraw.live.scheduler import DebouncedScheduler, ScheduledRun
from flowdraw.workspace.config import DEFAULT_CONFIG, RenderConfig

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

# Receives each fresh result; None means the text was blank and nothing is shown.
ResultCallback = Callable[[RenderResult | None], None]


class LivePreview:
    """Keeps the rendering of an edited text up to date.

    Each :meth:`update` restarts the quiescence timer; only the text present
    when the timer finally fires is rendered. Blank text clears the preview
    without reporting an error.

    Attributes:
        latest: The most recent result, or None before the first run and
            after blank text.
        runs: Number of pipeline runs performed.
    """

    def __init__(
        self,
        config: RenderConfig = DEFAULT_CONFIG,
        on_result: ResultCallback | None = None,
        renderer: VectorRenderer | None = None,
    ) -> None:
        self._config = config
        self._on_result = on_result
        self._renderer = renderer
        self._scheduler = DebouncedScheduler(config.debounce_ms / 1000)
        self.latest: RenderResult | None = None
        self.runs = 0

    def update(self, text: str) -> ScheduledRun:
        """Record an edit and (re)schedule the render of *text*."""
        return self._scheduler.schedule(self._run, text)

    def close(self) -> None:
        """Cancel any pending render."""
        self._scheduler.cancel_pending()

    def _run(self, text: str) -> None:
        self.runs += 1
        if not text.strip():
            self.latest = None
        else:
            self.latest = render_to_svg(text, self._config, self._renderer)
            if self.latest.error is not None:
                logger.info("Preview not updated: %s", self.latest.error.describe())
        if self._on_result is not None:
            self._on_result(self.latest)

# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Debounced live re-rendering of edited diagram text."""

from flowdraw.live.scheduler import DebouncedScheduler, ScheduledRun
from flowdraw.live.session import LivePreview, ResultCallback

__all__ = [
    "DebouncedScheduler",
    "ScheduledRun",
    "LivePreview",
    "ResultCallback",
]

# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lint checks for graph models (isolated nodes, duplicate edges, cycles, etc.)."""

from flowdraw.validation.checks import LintWarning, check

__all__ = [
    "LintWarning",
    "check",
]

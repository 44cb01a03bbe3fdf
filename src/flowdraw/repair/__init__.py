# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""AI repair suggestions and their review diffs."""

from flowdraw.repair.diff import DiffLine, diff_suggestion, unified_diff
from flowdraw.repair.service import (
    SYSTEM_PROMPT,
    GeminiRepairService,
    RepairError,
    RepairService,
    RepairSuggestion,
    build_repair_prompt,
    clean_suggestion,
    request_repair,
)

__all__ = [
    "DiffLine",
    "diff_suggestion",
    "unified_diff",
    "SYSTEM_PROMPT",
    "GeminiRepairService",
    "RepairError",
    "RepairService",
    "RepairSuggestion",
    "build_repair_prompt",
    "clean_suggestion",
    "request_repair",
]

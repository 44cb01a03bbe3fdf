# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Normalization of stage-specific errors into a single reportable shape."""

from __future__ import annotations

from dataclasses import dataclass

from flowdraw.compiler.semantic_analysis import ValidationError
from flowdraw.errors import FlowdrawError, SourcePosition, Stage

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class DiagramError:
    """The one error surfaced for a failed render.

    Attributes:
        message: Human-readable description without location prefix.
        stage: Pipeline stage that failed.
        position: Where the failure was detected, if known.
        related: Further positions cited by the error (e.g. both
            declarations of a conflicting node).
    """

    message: str
    stage: Stage
    position: SourcePosition | None = None
    related: tuple[SourcePosition, ...] = ()

    def describe(self) -> str:
        """Return the message as shown to the user and sent to the repair service."""
        if self.position is None:
            return f"{self.stage.value.capitalize()} error: {self.message}"
        return (
            f"{self.stage.value.capitalize()} error on line {self.position.line}, "
            f"column {self.position.column}: {self.message}"
        )


def report(error: FlowdrawError) -> DiagramError:
    """Normalize a stage-specific error into a :class:`DiagramError`."""
    related: tuple[SourcePosition, ...] = ()
    if isinstance(error, ValidationError):
        related = error.positions
    return DiagramError(
        message=error.message,
        stage=error.stage,
        position=error.position,
        related=related,
    )

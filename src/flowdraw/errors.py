# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Error base class, pipeline stage tags, and source positions shared by all stages."""

from __future__ import annotations

import enum
from dataclasses import dataclass

# ###############
# Public Interface
# ###############


class Stage(enum.Enum):
    """Pipeline stage in which a failure was detected."""

    LEX = "lex"
    PARSE = "parse"
    VALIDATE = "validate"
    LAYOUT = "layout"
    RENDER = "render"


@dataclass(frozen=True)
class SourcePosition:
    """A location in diagram-definition text.

    Attributes:
        line: 1-based line number.
        column: 1-based column number.
        offset: 0-based character offset from the start of the source.
    """

    line: int
    column: int
    offset: int = 0

    def __str__(self) -> str:
        return f"line {self.line}, column {self.column}"


class FlowdrawError(Exception):
    """Base class for every error raised by a pipeline stage.

    Subclasses set :attr:`stage`. The string form prefixes the message with
    its location when one is known, e.g. ``Line 2, column 5: ...``.

    Attributes:
        message: The bare human-readable message.
        position: Where the error was detected, if known.
    """

    stage: Stage = Stage.PARSE

    def __init__(self, message: str, position: SourcePosition | None = None) -> None:
        if position is not None:
            super().__init__(f"Line {position.line}, column {position.column}: {message}")
        else:
            super().__init__(message)
        self.message = message
        self.position = position

    @property
    def line(self) -> int | None:
        return self.position.line if self.position else None

    @property
    def column(self) -> int | None:
        return self.position.column if self.position else None

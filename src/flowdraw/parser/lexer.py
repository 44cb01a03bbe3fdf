# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanner for diagram-definition text.

Converts raw source text into a sequence of tokens for subsequent parsing.
"""

import enum
from dataclasses import dataclass

from flowdraw.errors import FlowdrawError, SourcePosition, Stage

# ###############
# Public Interface
# ###############


class TokenType(enum.Enum):
    """All token types produced by the lexer."""

    # Keywords
    GRAPH = "graph"
    FLOWCHART = "flowchart"
    SUBGRAPH = "subgraph"
    END = "end"

    # Links
    ARROW = "ARROW"
    LINK_START = "LINK_START"

    # Shapes and labels
    OPEN_BRACKET = "OPEN_BRACKET"
    CLOSE_BRACKET = "CLOSE_BRACKET"
    PIPE = "|"
    LABEL = "LABEL"

    # Identifiers
    IDENTIFIER = "IDENTIFIER"

    # Statement terminator (newline or ';')
    NEWLINE = "NEWLINE"

    # End of file
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """A lexical token with its source location.

    Attributes:
        type: The kind of token.
        value: The raw text of the token (label text is stripped and unquoted).
        line: 1-based line number where the token starts.
        column: 1-based column number where the token starts.
        offset: 0-based character offset where the token starts.
    """

    type: TokenType
    value: str
    line: int
    column: int
    offset: int = 0

    @property
    def position(self) -> SourcePosition:
        return SourcePosition(self.line, self.column, self.offset)


class LexerError(FlowdrawError):
    """Raised when the scanner encounters an invalid character or unterminated label."""

    stage = Stage.LEX

    def __init__(self, message: str, line: int, column: int, offset: int = 0) -> None:
        super().__init__(message, SourcePosition(line, column, offset))


def tokenize(source: str) -> list[Token]:
    """Tokenize diagram-definition text into a sequence of tokens.

    Returns a list of tokens. The final token is always an EOF token.
    Comments and non-newline whitespace are consumed and not included in the
    output; newlines and ``;`` are emitted as NEWLINE tokens.

    Args:
        source: The full diagram-definition text.

    Returns:
        A list of Token objects ending with a single EOF token.

    Raises:
        LexerError: On unexpected characters, unterminated bracketed, piped or
            quoted labels, or inline link labels without a closing arrow.
    """
    return _Lexer(source).tokenize()


# ################
# Implementation
# ################

_KEYWORDS: dict[str, TokenType] = {
    "graph": TokenType.GRAPH,
    "flowchart": TokenType.FLOWCHART,
    "subgraph": TokenType.SUBGRAPH,
    "end": TokenType.END,
}

# Longest first so that a single pass picks the longest operator.
_ARROWS: tuple[str, ...] = ("-.->", "-->", "---", "-.-", "==>", "===")

# Inline-label link openers and the arrows that may close them.
_LINK_CLOSERS: dict[str, tuple[str, ...]] = {
    "--": ("-->", "---"),
    "-.": (".->", ".-"),
    "==": ("==>", "==="),
}

# Opening bracket -> closing bracket, longest opener first.
_BRACKETS: tuple[tuple[str, str], ...] = (
    ("((", "))"),
    ("[", "]"),
    ("(", ")"),
    ("{", "}"),
)


class _Lexer:
    """Internal scanner state machine."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._line = 1
        self._column = 1
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Run the scanner and return all tokens including the terminal EOF."""
        while self._pos < len(self._source):
            self._skip_blanks_and_comments()
            if self._pos >= len(self._source):
                break
            self._scan_token()
        self._emit(TokenType.EOF, "", self._line, self._column, self._pos)
        return self._tokens

    # ------------------------------------------------------------------
    # Low-level character access helpers
    # ------------------------------------------------------------------

    def _current(self) -> str:
        """Return the character at the current position, or '' at end of input."""
        if self._pos < len(self._source):
            return self._source[self._pos]
        return ""

    def _starts_with(self, text: str) -> bool:
        return self._source.startswith(text, self._pos)

    def _advance(self) -> str:
        """Consume the current character, update position tracking, and return it."""
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return ch

    def _advance_by(self, count: int) -> None:
        for _ in range(count):
            self._advance()

    def _emit(self, token_type: TokenType, value: str, line: int, col: int, offset: int) -> None:
        self._tokens.append(Token(token_type, value, line, col, offset))

    # ------------------------------------------------------------------
    # Whitespace and comment skipping
    # ------------------------------------------------------------------

    def _skip_blanks_and_comments(self) -> None:
        """Skip spaces, tabs, carriage returns and ``%%`` comments (newlines are kept)."""
        while self._pos < len(self._source):
            ch = self._current()
            if ch in " \t\r":
                self._advance()
            elif self._starts_with("%%"):
                while self._pos < len(self._source) and self._current() != "\n":
                    self._advance()
            else:
                break

    # ------------------------------------------------------------------
    # Token scanning dispatcher
    # ------------------------------------------------------------------

    def _scan_token(self) -> None:
        """Dispatch to the appropriate handler based on the current character."""
        ch = self._current()
        line, col, offset = self._line, self._column, self._pos

        if ch in "\n;":
            self._advance()
            self._emit(TokenType.NEWLINE, ch, line, col, offset)
        elif ch == "|":
            self._scan_pipe_label(line, col, offset)
        elif ch in "[({":
            self._scan_bracketed_label(line, col, offset)
        elif ch in "-=":
            self._scan_link(line, col, offset)
        elif ch.isalnum() or ch == "_":
            self._scan_identifier_or_keyword(line, col, offset)
        else:
            raise LexerError(f"Unexpected character: {ch!r}", line, col, offset)

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    def _scan_link(self, line: int, col: int, offset: int) -> None:
        """Scan an arrow operator, or an inline-label link such as ``-- text -->``."""
        for arrow in _ARROWS:
            if self._starts_with(arrow):
                self._advance_by(len(arrow))
                self._emit(TokenType.ARROW, arrow, line, col, offset)
                return
        for opener, closers in _LINK_CLOSERS.items():
            if self._starts_with(opener):
                self._advance_by(len(opener))
                self._emit(TokenType.LINK_START, opener, line, col, offset)
                self._scan_inline_link_label(opener, closers, line, col, offset)
                return
        raise LexerError(f"Unexpected character: {self._current()!r}", line, col, offset)

    def _scan_inline_link_label(
        self,
        opener: str,
        closers: tuple[str, ...],
        line: int,
        col: int,
        offset: int,
    ) -> None:
        """Scan label text up to the closing arrow of an inline-label link."""
        label_line, label_col, label_offset = self._line, self._column, self._pos
        start = self._pos
        while self._pos < len(self._source) and self._current() != "\n":
            for closer in closers:
                if self._starts_with(closer):
                    text = self._source[start : self._pos]
                    self._emit(TokenType.LABEL, text.strip(), label_line, label_col, label_offset)
                    arrow_line, arrow_col, arrow_offset = self._line, self._column, self._pos
                    self._advance_by(len(closer))
                    self._emit(TokenType.ARROW, closer, arrow_line, arrow_col, arrow_offset)
                    return
            self._advance()
        raise LexerError(
            f"Unterminated edge label: expected {' or '.join(repr(c) for c in closers)} after {opener!r}",
            line,
            col,
            offset,
        )

    # ------------------------------------------------------------------
    # Labels
    # ------------------------------------------------------------------

    def _scan_pipe_label(self, line: int, col: int, offset: int) -> None:
        """Scan ``|label|``; the label must close on the same line."""
        self._advance()  # opening |
        self._emit(TokenType.PIPE, "|", line, col, offset)
        label_line, label_col, label_offset = self._line, self._column, self._pos
        start = self._pos
        while self._pos < len(self._source) and self._current() not in "|\n":
            self._advance()
        if self._current() != "|":
            raise LexerError("Unterminated edge label: missing closing '|'", line, col, offset)
        text = self._source[start : self._pos]
        self._emit(TokenType.LABEL, _unquote(text.strip()), label_line, label_col, label_offset)
        close_line, close_col, close_offset = self._line, self._column, self._pos
        self._advance()  # closing |
        self._emit(TokenType.PIPE, "|", close_line, close_col, close_offset)

    def _scan_bracketed_label(self, line: int, col: int, offset: int) -> None:
        """Scan a shape label such as ``[text]``, ``(text)``, ``{text}`` or ``((text))``."""
        opener, closer = next((o, c) for o, c in _BRACKETS if self._starts_with(o))
        self._advance_by(len(opener))
        self._emit(TokenType.OPEN_BRACKET, opener, line, col, offset)

        while self._current() in (" ", "\t"):
            self._advance()
        label_line, label_col, label_offset = self._line, self._column, self._pos

        if self._current() == '"':
            text = self._scan_quoted(label_line, label_col, label_offset)
            while self._current() in (" ", "\t"):
                self._advance()
            if not self._starts_with(closer):
                if self._pos >= len(self._source):
                    raise LexerError(f"Unterminated label: missing closing {closer!r}", line, col, offset)
                raise LexerError(
                    f"Expected {closer!r} after quoted label, got {self._current()!r}",
                    self._line,
                    self._column,
                    self._pos,
                )
        else:
            start = self._pos
            while self._pos < len(self._source) and not self._starts_with(closer):
                self._advance()
            if self._pos >= len(self._source):
                raise LexerError(f"Unterminated label: missing closing {closer!r}", line, col, offset)
            text = self._source[start : self._pos].strip()

        self._emit(TokenType.LABEL, text, label_line, label_col, label_offset)
        close_line, close_col, close_offset = self._line, self._column, self._pos
        self._advance_by(len(closer))
        self._emit(TokenType.CLOSE_BRACKET, closer, close_line, close_col, close_offset)

    def _scan_quoted(self, line: int, col: int, offset: int) -> str:
        """Scan a double-quoted label and return its content without quotes."""
        self._advance()  # opening "
        start = self._pos
        while self._pos < len(self._source) and self._current() not in '"\n':
            self._advance()
        if self._current() != '"':
            raise LexerError("Unterminated quoted label", line, col, offset)
        text = self._source[start : self._pos]
        self._advance()  # closing "
        return text

    # ------------------------------------------------------------------
    # Identifiers
    # ------------------------------------------------------------------

    def _scan_identifier_or_keyword(self, line: int, col: int, offset: int) -> None:
        """Scan an identifier and map it to a keyword token type if applicable."""
        start = self._pos
        while self._pos < len(self._source) and (self._current().isalnum() or self._current() == "_"):
            self._advance()
        value = self._source[start : self._pos]
        token_type = _KEYWORDS.get(value, TokenType.IDENTIFIER)
        self._emit(token_type, value, line, col, offset)


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        return text[1:-1]
    return text

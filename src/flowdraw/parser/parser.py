# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Recursive-descent parser for diagram-definition text.

Converts a token stream produced by the lexer into a :class:`Diagram` syntax
tree. The first structural violation aborts parsing; there is no recovery.
"""

from flowdraw.errors import FlowdrawError, SourcePosition, Stage
from flowdraw.model.ast import (
    Diagram,
    EdgeStatement,
    GraphDeclaration,
    Link,
    NodeRef,
    NodeStatement,
    SourceSpan,
    Statement,
    SubgraphBlock,
)
from flowdraw.model.types import DiagramType, Direction, EdgeStyle, NodeShape
from flowdraw.parser.lexer import Token, TokenType, tokenize

# ###############
# Public Interface
# ###############

DIAGRAM_KEYWORDS: dict[str, DiagramType] = {
    "flowchart": DiagramType.FLOWCHART,
    "graph": DiagramType.FLOWCHART,
}


class ParseError(FlowdrawError):
    """Raised when the parser encounters a syntactically invalid construct.

    Attributes:
        line: 1-based line number of the error.
        column: 1-based column number of the error.
    """

    stage = Stage.PARSE

    def __init__(self, message: str, line: int, column: int, offset: int = 0) -> None:
        super().__init__(message, SourcePosition(line, column, offset))


def parse(tokens: list[Token]) -> Diagram:
    """Parse a token stream into a :class:`Diagram`.

    Args:
        tokens: Tokens produced by :func:`~flowdraw.parser.lexer.tokenize`,
            ending with EOF.

    Returns:
        The syntax tree of the diagram.

    Raises:
        ParseError: At the first token that does not fit the grammar,
            including a missing or unknown diagram type declaration.
    """
    return _Parser(tokens).parse()


def parse_source(source: str) -> Diagram:
    """Tokenize and parse diagram-definition text.

    Raises:
        LexerError: If the source contains invalid characters or unterminated labels.
        ParseError: If the source is syntactically invalid.
    """
    return parse(tokenize(source))


# ################
# Implementation
# ################

_SHAPES: dict[str, NodeShape] = {
    "[": NodeShape.RECTANGLE,
    "(": NodeShape.ROUNDED,
    "{": NodeShape.RHOMBUS,
    "((": NodeShape.CIRCLE,
}

# Arrow lexeme -> (style, has_arrowhead). Includes the closers of inline-label links.
_LINK_OPERATORS: dict[str, tuple[EdgeStyle, bool]] = {
    "-->": (EdgeStyle.SOLID, True),
    "---": (EdgeStyle.SOLID, False),
    "-.->": (EdgeStyle.DASHED, True),
    "-.-": (EdgeStyle.DASHED, False),
    ".->": (EdgeStyle.DASHED, True),
    ".-": (EdgeStyle.DASHED, False),
    "==>": (EdgeStyle.THICK, True),
    "===": (EdgeStyle.THICK, False),
}

_ACCEPTED_KEYWORDS = ", ".join(repr(k) for k in sorted(DIAGRAM_KEYWORDS))
_ACCEPTED_DIRECTIONS = ", ".join(repr(d.value) for d in Direction)


class _Parser:
    """Recursive-descent parser for flowchart token streams."""

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0
        self._last: Token = tokens[0]

    def parse(self) -> Diagram:
        """Parse the full token stream and return a Diagram."""
        self._skip_newlines()
        declaration = self._parse_declaration()
        statements = self._parse_statements(until=TokenType.EOF)
        return Diagram(declaration=declaration, statements=statements)

    # ------------------------------------------------------------------
    # Token access helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        """Return the current (un-consumed) token."""
        return self._tokens[self._pos]

    def _check(self, *types: TokenType) -> bool:
        """Return True if the current token matches any of the given types."""
        return self._tokens[self._pos].type in types

    def _advance(self) -> Token:
        """Consume and return the current token, stopping at EOF."""
        tok = self._tokens[self._pos]
        if self._pos < len(self._tokens) - 1:
            self._pos += 1
        self._last = tok
        return tok

    def _expect(self, token_type: TokenType, description: str) -> Token:
        """Consume the current token if it has *token_type*, else raise ParseError."""
        tok = self._current()
        if tok.type != token_type:
            raise _error(f"Expected {description}, got {_describe(tok)}", tok)
        return self._advance()

    def _skip_newlines(self) -> None:
        while self._check(TokenType.NEWLINE):
            self._advance()

    def _expect_end_of_statement(self) -> None:
        """Consume a statement terminator; EOF also ends a statement."""
        if self._check(TokenType.NEWLINE):
            self._advance()
        elif not self._check(TokenType.EOF):
            tok = self._current()
            raise _error(f"Expected end of statement, got {_describe(tok)}", tok)

    def _span_from(self, start: Token) -> SourceSpan:
        """Return the span from *start* through the end of the last consumed token."""
        last = self._last
        end = SourcePosition(last.line, last.column + len(last.value), last.offset + len(last.value))
        return SourceSpan(start=start.position, end=end)

    # ------------------------------------------------------------------
    # Diagram type declaration
    # ------------------------------------------------------------------

    def _parse_declaration(self) -> GraphDeclaration:
        """Parse: (graph | flowchart) [direction]"""
        tok = self._current()
        if tok.type == TokenType.EOF:
            raise _error(f"Missing diagram type declaration: expected one of {_ACCEPTED_KEYWORDS}", tok)
        if tok.type not in (TokenType.GRAPH, TokenType.FLOWCHART):
            if tok.type == TokenType.IDENTIFIER and self._peek_type() in (TokenType.NEWLINE, TokenType.EOF):
                raise _error(
                    f"Unknown diagram type declaration {tok.value!r}: expected one of {_ACCEPTED_KEYWORDS}",
                    tok,
                )
            raise _error(
                f"Missing diagram type declaration: expected one of {_ACCEPTED_KEYWORDS}, got {_describe(tok)}",
                tok,
            )
        self._advance()

        direction = Direction.TD
        if self._check(TokenType.IDENTIFIER):
            dir_tok = self._advance()
            try:
                direction = Direction(dir_tok.value)
            except ValueError:
                raise _error(
                    f"Unknown direction {dir_tok.value!r}: expected one of {_ACCEPTED_DIRECTIONS}",
                    dir_tok,
                ) from None
        span = self._span_from(tok)
        self._expect_end_of_statement()
        return GraphDeclaration(diagram_type=DIAGRAM_KEYWORDS[tok.value], direction=direction, span=span)

    def _peek_type(self) -> TokenType:
        """Return the type of the token after the current one."""
        if self._pos + 1 < len(self._tokens):
            return self._tokens[self._pos + 1].type
        return TokenType.EOF

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_statements(self, until: TokenType) -> list[Statement]:
        """Parse statements up to (not including) a token of type *until*."""
        statements: list[Statement] = []
        while True:
            self._skip_newlines()
            tok = self._current()
            if tok.type == until:
                return statements
            if tok.type == TokenType.SUBGRAPH:
                statements.append(self._parse_subgraph())
            elif tok.type == TokenType.IDENTIFIER:
                statements.append(self._parse_chain())
            elif tok.type == TokenType.END:
                raise _error("Unexpected 'end' outside of a subgraph", tok)
            elif tok.type == TokenType.EOF:
                # Only reachable inside a subgraph body; the caller reports it.
                return statements
            elif tok.type in (TokenType.GRAPH, TokenType.FLOWCHART):
                raise _error(f"Unexpected diagram type declaration {tok.value!r}: only one is allowed", tok)
            else:
                raise _error(f"Unexpected {_describe(tok)} at start of statement", tok)

    def _parse_subgraph(self) -> SubgraphBlock:
        """Parse: subgraph <id> [ '[' title ']' ] NEWLINE statement* end"""
        start = self._advance()  # consume 'subgraph'
        id_tok = self._expect(TokenType.IDENTIFIER, "subgraph id")
        title: str | None = None
        if self._check(TokenType.OPEN_BRACKET):
            open_tok = self._advance()
            if open_tok.value != "[":
                raise _error(f"Expected '[' around subgraph title, got {open_tok.value!r}", open_tok)
            title = self._advance().value or None  # LABEL always follows an opening bracket
            self._advance()  # closing bracket
        self._expect_end_of_statement()

        statements = self._parse_statements(until=TokenType.END)
        if not self._check(TokenType.END):
            raise _error(
                f"Unterminated subgraph {id_tok.value!r}: expected 'end' before end of input",
                start,
            )
        self._advance()  # consume 'end'
        span = self._span_from(start)
        self._expect_end_of_statement()
        return SubgraphBlock(id=id_tok.value, title=title, statements=statements, span=span)

    def _parse_chain(self) -> NodeStatement | EdgeStatement:
        """Parse: node_ref (link node_ref)*

        A lone node reference is a NodeStatement; one or more links make an
        EdgeStatement.
        """
        start = self._current()
        nodes = [self._parse_node_ref()]
        links: list[Link] = []
        while self._check(TokenType.ARROW, TokenType.LINK_START):
            links.append(self._parse_link())
            nodes.append(self._parse_node_ref())
        span = self._span_from(start)
        self._expect_end_of_statement()
        if not links:
            return NodeStatement(node=nodes[0], span=span)
        return EdgeStatement(nodes=nodes, links=links, span=span)

    def _parse_node_ref(self) -> NodeRef:
        """Parse: <id> [ open_bracket label close_bracket ]

        An opening bracket directly after an id always binds to it, so a node
        declaration wins over a bare reference.
        """
        id_tok = self._expect(TokenType.IDENTIFIER, "node id")
        if not self._check(TokenType.OPEN_BRACKET):
            return NodeRef(id=id_tok.value, span=self._span_from(id_tok))
        open_tok = self._advance()
        label_tok = self._advance()  # LABEL always follows an opening bracket
        if not label_tok.value:
            raise _error(f"Empty label for node {id_tok.value!r}", label_tok)
        self._advance()  # closing bracket
        return NodeRef(
            id=id_tok.value,
            shape=_SHAPES[open_tok.value],
            label=label_tok.value,
            span=self._span_from(id_tok),
        )

    def _parse_link(self) -> Link:
        """Parse: ARROW [ '|' label '|' ] | LINK_START label ARROW"""
        start = self._current()
        label: str | None = None
        if start.type == TokenType.LINK_START:
            self._advance()
            label_tok = self._advance()  # LABEL always follows a link opener
            if not label_tok.value:
                raise _error("Empty edge label", label_tok)
            label = label_tok.value
            arrow = self._advance()  # closing ARROW
        else:
            arrow = self._advance()
            if self._check(TokenType.PIPE):
                self._advance()
                label_tok = self._advance()
                if not label_tok.value:
                    raise _error("Empty edge label", label_tok)
                label = label_tok.value
                self._advance()  # closing pipe
        style, has_arrowhead = _LINK_OPERATORS[arrow.value]
        return Link(style=style, has_arrowhead=has_arrowhead, label=label, span=self._span_from(start))


def _error(message: str, tok: Token) -> ParseError:
    return ParseError(message, tok.line, tok.column, tok.offset)


def _describe(tok: Token) -> str:
    """Return a human-readable description of a token for error messages."""
    if tok.type == TokenType.EOF:
        return "end of input"
    if tok.type == TokenType.NEWLINE:
        return "end of line" if tok.value == "\n" else "';'"
    return repr(tok.value)

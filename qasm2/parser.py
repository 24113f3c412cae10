from __future__ import annotations

import importlib.resources as importlib_resources
from functools import lru_cache
from typing import Iterator, List, Optional

from lark import Lark, Token
from lark.exceptions import LarkError, UnexpectedInput
from lark.visitors import Transformer_NonRecursive

from qasm2.ast_nodes import (
    Add,
    Arg,
    BarrierStmt,
    CRegDecl,
    Div,
    Expr,
    Float,
    GateCall,
    GateDef,
    IfStmt,
    IncludeStmt,
    MeasureStmt,
    Mul,
    QRegDecl,
    ResetStmt,
    Statement,
    Sub,
    Var,
)
from qasm2.errors import HeaderError, StatementSyntaxError

__all__ = [
    "SUPPORTED_VERSION",
    "StatementTransformer",
    "create_parser",
    "iter_statements",
    "parse_expression",
    "parse_statement",
]

SUPPORTED_VERSION = "2.0"

_GRAMMAR_FILE = "qasm2.lark"
_SNIPPET_LIMIT = 60


class StatementTransformer(Transformer_NonRecursive):
    """Convert a Lark parse tree for one statement into a statement node.

    The tree is walked iteratively, so the length of a parameter expression
    is not bounded by the interpreter's recursion limit.

    Parameters
    ----------
    line_offset : int
        Line of the statement's first character in the full source.
    col_offset : int
        Column of the statement's first character in the full source.
    """

    def __init__(self, line_offset: int = 1, col_offset: int = 1) -> None:
        super().__init__()
        self._line_offset = line_offset
        self._col_offset = col_offset

    def _location(self, line: Optional[int], column: Optional[int]) -> tuple[int, int]:
        if line is None or column is None:
            return self._line_offset, self._col_offset
        if line == 1:
            return self._line_offset, self._col_offset + column - 1
        return self._line_offset + line - 1, column

    def _token_location(self, token: Token) -> tuple[int, int]:
        return self._location(getattr(token, "line", None), getattr(token, "column", None))

    # -----------------------------------------------------------------
    # Statements

    def header(self, children: list) -> str:
        return str(children[0])

    def statement(self, children: list) -> Statement:
        return children[0]

    def include(self, children: list) -> IncludeStmt:
        token = children[0]
        line, col = self._token_location(token)
        return IncludeStmt(filename=str(token)[1:-1], line=line, col=col)

    def qreg(self, children: list) -> QRegDecl:
        name, size = children
        line, col = self._token_location(name)
        return QRegDecl(name=str(name), size=int(size), line=line, col=col)

    def creg(self, children: list) -> CRegDecl:
        name, size = children
        line, col = self._token_location(name)
        return CRegDecl(name=str(name), size=int(size), line=line, col=col)

    def measure(self, children: list) -> MeasureStmt:
        qarg, carg = children
        return MeasureStmt(qarg=qarg, carg=carg, line=qarg.line, col=qarg.col)

    def reset(self, children: list) -> ResetStmt:
        qarg = children[0]
        return ResetStmt(qarg=qarg, line=qarg.line, col=qarg.col)

    def barrier(self, children: list) -> BarrierStmt:
        args = children[0]
        return BarrierStmt(args=args, line=args[0].line, col=args[0].col)

    def gate_def(self, children: list) -> GateDef:
        name = children[0]
        if len(children) > 2 and isinstance(children[2], list):
            params, qargs, body = children[1], children[2], children[3:]
        else:
            params, qargs, body = [], children[1], children[2:]
        line, col = self._token_location(name)
        return GateDef(name=str(name), params=params, qargs=qargs, body=list(body), line=line, col=col)

    def formal_params(self, children: list) -> List[str]:
        return children[0] if children else []

    def if_stmt(self, children: list) -> IfStmt:
        creg, value, body = children
        line, col = self._token_location(creg)
        return IfStmt(creg=str(creg), value=int(value), body=body, line=line, col=col)

    def gate_call(self, children: list) -> GateCall:
        name = children[0]
        if len(children) == 3:
            params, args = children[1], children[2]
        else:
            params, args = [], children[1]
        line, col = self._token_location(name)
        return GateCall(name=str(name), args=args, params=params, line=line, col=col)

    def call_params(self, children: list) -> List[Expr]:
        return children[0] if children else []

    # -----------------------------------------------------------------
    # Operands

    def arg_list(self, children: list) -> List[Arg]:
        return list(children)

    def arg(self, children: list) -> Arg:
        name = children[0]
        index = int(children[1]) if len(children) > 1 else None
        line, col = self._token_location(name)
        return Arg(name=str(name), index=index, line=line, col=col)

    def id_list(self, children: list) -> List[str]:
        return [str(child) for child in children]

    def expr_list(self, children: list) -> List[Expr]:
        return list(children)

    # -----------------------------------------------------------------
    # Expressions

    def number(self, children: list) -> Float:
        return Float(float(children[0]))

    def neg_number(self, children: list) -> Float:
        return Float(-float(children[0]))

    def var(self, children: list) -> Var:
        return Var(str(children[0]))

    def add(self, children: list) -> Add:
        return Add(*children)

    def sub(self, children: list) -> Sub:
        return Sub(*children)

    def mul(self, children: list) -> Mul:
        return Mul(*children)

    def div(self, children: list) -> Div:
        return Div(*children)


@lru_cache(maxsize=1)
def create_parser() -> Lark:
    """Instantiate the Lark parser for the OpenQASM 2 grammar.

    Returns
    -------
    Lark
        LALR parser with the ``header``, ``statement`` and ``expr`` start
        symbols and position propagation enabled. The basic lexer keeps
        keywords reserved, so ``qreg gate[1];`` is a syntax error.
    """
    grammar_text = (
        importlib_resources.files("qasm2").joinpath("grammar").joinpath(_GRAMMAR_FILE).read_text(encoding="utf-8")
    )
    return Lark(
        grammar_text,
        start=["header", "statement", "expr"],
        parser="lalr",
        lexer="basic",
        propagate_positions=True,
        maybe_placeholders=False,
    )


@lru_cache(maxsize=256)
def parse_expression(text: str) -> Expr:
    """Parse a standalone parameter expression such as ``pi/2 + theta``.

    Parameters
    ----------
    text : str
        Expression source.

    Returns
    -------
    Expr
        Unevaluated expression tree.

    Raises
    ------
    StatementSyntaxError
        If the text is not a valid expression.
    """
    try:
        tree = create_parser().parse(text, start="expr")
    except UnexpectedInput as exc:
        raise StatementSyntaxError(f"Invalid expression {text!r}.", *_error_location(exc)) from exc
    except LarkError as exc:
        raise StatementSyntaxError(f"Invalid expression {text!r}.") from exc
    return StatementTransformer().transform(tree)


def parse_statement(text: str) -> Statement:
    """Parse exactly one statement without resolving any names."""
    return _parse_span(text, 0, len(text), 1, 1)


def iter_statements(text: str) -> Iterator[Statement]:
    """Yield the statements of an OpenQASM 2 program in source order.

    The leading ``OPENQASM 2.0;`` header is consumed and checked before any
    other statement is attempted. Statements are lexed lazily, so a syntax
    error is only reported once every earlier statement has been yielded.

    Parameters
    ----------
    text : str
        OpenQASM 2 source code.

    Yields
    ------
    Statement
        Parsed statement nodes; the header itself is not yielded.

    Raises
    ------
    HeaderError
        If the program does not start with a well-formed ``OPENQASM 2.0;``.
    StatementSyntaxError
        If a statement matches no grammar alternative.
    """
    spans = _iter_statement_spans(text)
    try:
        first = next(spans)
    except StopIteration:
        raise HeaderError("Empty file or missing OPENQASM header.") from None
    except StatementSyntaxError as exc:
        raise HeaderError(
            f"Missing or invalid OPENQASM header. File must start with 'OPENQASM {SUPPORTED_VERSION};'.",
            exc.line,
            exc.col,
        ) from exc
    _check_header(text, *first)

    for start, end, line, col in spans:
        yield _parse_span(text, start, end, line, col)


def _check_header(text: str, start: int, end: int, line: int, col: int) -> None:
    try:
        tree = create_parser().parse(text[start:end], start="header")
    except LarkError as exc:
        raise HeaderError(
            f"Missing or invalid OPENQASM header. File must start with 'OPENQASM {SUPPORTED_VERSION};'.",
            line,
            col,
        ) from exc
    version = StatementTransformer(line, col).transform(tree)
    if version != SUPPORTED_VERSION:
        raise HeaderError(
            f"Unsupported OpenQASM version: '{version}'. Only '{SUPPORTED_VERSION}' is supported.",
            line,
            col,
        )


def _parse_span(text: str, start: int, end: int, line: int, col: int) -> Statement:
    try:
        tree = create_parser().parse(text[start:end], start="statement")
    except LarkError as exc:
        raise StatementSyntaxError(f"Parse error at: {_snippet(text[start:])}", line, col) from exc
    return StatementTransformer(line, col).transform(tree)


def _iter_statement_spans(text: str) -> Iterator[tuple[int, int, int, int]]:
    """Split the source into top-level statement spans.

    A statement ends at a ``;`` outside braces or at the ``}`` that closes a
    gate body. Each span is reported as ``(start, end, line, col)``.
    """
    first: Optional[Token] = None
    depth = 0
    tokens = create_parser().lex(text)
    while True:
        try:
            token = next(tokens)
        except StopIteration:
            break
        except UnexpectedInput as exc:
            pos = getattr(exc, "pos_in_stream", None) or 0
            raise StatementSyntaxError(f"Parse error at: {_snippet(text[pos:])}", *_error_location(exc)) from exc
        if first is None:
            first = token
        if token.value == "{":
            depth += 1
        elif token.value == "}":
            depth -= 1
            if depth <= 0:
                yield first.start_pos, token.end_pos, first.line, first.column
                first, depth = None, 0
        elif token.value == ";" and depth == 0:
            yield first.start_pos, token.end_pos, first.line, first.column
            first = None
    if first is not None:
        yield first.start_pos, len(text), first.line, first.column


def _error_location(exc: UnexpectedInput) -> tuple[int, int]:
    line = getattr(exc, "line", 1)
    column = getattr(exc, "column", 1)
    if not isinstance(line, int) or not isinstance(column, int) or line < 1 or column < 1:
        return 1, 1
    return line, column


def _snippet(remaining: str) -> str:
    remaining = remaining.strip()
    if len(remaining) > _SNIPPET_LIMIT:
        return remaining[:_SNIPPET_LIMIT] + "..."
    return remaining

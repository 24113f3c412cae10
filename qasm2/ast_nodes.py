"""Syntax-level nodes produced by the OpenQASM 2 parser.

Nothing in this module is part of the circuit IR. Statement nodes live only
between parsing a statement and resolving it against the parse context, except
for gate definition bodies which are stored unresolved in the gate table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

__all__ = [
    "Expr",
    "Float",
    "Var",
    "BinOp",
    "Add",
    "Sub",
    "Mul",
    "Div",
    "Arg",
    "QRegDecl",
    "CRegDecl",
    "GateCall",
    "MeasureStmt",
    "ResetStmt",
    "BarrierStmt",
    "IncludeStmt",
    "GateDef",
    "IfStmt",
    "Statement",
]


# ---------------------------------------------------------------------------
# Parameter expressions


@dataclass(frozen=True)
class Float:
    """Numeric literal."""

    value: float


@dataclass(frozen=True)
class Var:
    """Reference to ``pi`` or to a gate parameter bound during expansion."""

    name: str


@dataclass(frozen=True)
class BinOp:
    """Binary arithmetic node owning both operands."""

    left: Expr
    right: Expr


class Add(BinOp):
    pass


class Sub(BinOp):
    pass


class Mul(BinOp):
    pass


class Div(BinOp):
    pass


Expr = Union[Float, Var, BinOp]


# ---------------------------------------------------------------------------
# Statements


@dataclass(frozen=True)
class Arg:
    """Reference to a register, a single register element, or a gate-local qubit.

    Parameters
    ----------
    name : str
        Register or formal qubit name.
    index : Optional[int]
        Subscript, or ``None`` for the whole register.
    line : int
        Source line number where this reference appears.
    col : int
        Source column number where this reference appears.
    """

    name: str
    index: Optional[int] = None
    line: int = 1
    col: int = 1


@dataclass
class QRegDecl:
    """``qreg name[size];``"""

    name: str
    size: int
    line: int = 1
    col: int = 1


@dataclass
class CRegDecl:
    """``creg name[size];``"""

    name: str
    size: int
    line: int = 1
    col: int = 1


@dataclass
class GateCall:
    """Gate invocation, either at top level or inside a gate body.

    Parameters
    ----------
    name : str
        Name of the gate being invoked.
    args : List[Arg]
        Quantum operands.
    params : List[Expr]
        Unevaluated parameter expressions.
    line : int
        Source line number of the gate call.
    col : int
        Source column number of the gate call.
    """

    name: str
    args: List[Arg] = field(default_factory=list)
    params: List[Expr] = field(default_factory=list)
    line: int = 1
    col: int = 1


@dataclass
class MeasureStmt:
    """``measure qarg -> carg;``"""

    qarg: Arg
    carg: Arg
    line: int = 1
    col: int = 1


@dataclass
class ResetStmt:
    """``reset qarg;``"""

    qarg: Arg
    line: int = 1
    col: int = 1


@dataclass
class BarrierStmt:
    """``barrier args;``"""

    args: List[Arg] = field(default_factory=list)
    line: int = 1
    col: int = 1


@dataclass
class IncludeStmt:
    """``include "filename";``"""

    filename: str
    line: int = 1
    col: int = 1


@dataclass
class GateDef:
    """User-defined gate declaration.

    Parameters
    ----------
    name : str
        Name of the user-defined gate.
    params : List[str]
        Formal parameter names.
    qargs : List[str]
        Formal qubit names.
    body : List[Statement]
        Unresolved body statements in source order.
    line : int
        Source line number of the gate definition.
    col : int
        Source column number of the gate definition.
    """

    name: str
    params: List[str] = field(default_factory=list)
    qargs: List[str] = field(default_factory=list)
    body: List[Statement] = field(default_factory=list)
    line: int = 1
    col: int = 1


@dataclass
class IfStmt:
    """``if (creg == value) statement``"""

    creg: str
    value: int
    body: Statement
    line: int = 1
    col: int = 1


Statement = Union[
    QRegDecl,
    CRegDecl,
    GateCall,
    MeasureStmt,
    ResetStmt,
    BarrierStmt,
    IncludeStmt,
    GateDef,
    IfStmt,
]

"""Evaluation of OpenQASM 2 parameter expressions."""

from __future__ import annotations

import math
import operator
from typing import Callable, Mapping, Optional

from qasm2.ast_nodes import Add, BinOp, Div, Expr, Float, Mul, Sub, Var
from qasm2.errors import DivisionByZeroError, UndefinedParameterError

__all__ = ["ALLOWED_CONSTANTS", "evaluate"]

ALLOWED_CONSTANTS: dict[str, float] = {"pi": float(math.pi)}

_BINARY_OPERATORS: dict[type, Callable[[float, float], float]] = {
    Add: operator.add,
    Sub: operator.sub,
    Mul: operator.mul,
    Div: operator.truediv,
}


def evaluate(expr: Expr, bindings: Optional[Mapping[str, float]] = None, line: int = 1, col: int = 1) -> float:
    """Evaluate a parameter expression.

    Parameters
    ----------
    expr : Expr
        Expression tree built by :func:`qasm2.parser.parse_expression` or by the
        statement parser.
    bindings : Mapping[str, float], optional
        Values of the gate parameters currently in scope. ``pi`` is always
        available and cannot be shadowed.
    line, col : int
        Source location reported if evaluation fails.

    Returns
    -------
    float
        Evaluated value in radians.

    Raises
    ------
    UndefinedParameterError
        If the expression references an unbound name.
    DivisionByZeroError
        If a denominator evaluates to zero.
    """
    scope = bindings or {}
    values: list[float] = []
    pending: list[tuple[Expr, bool]] = [(expr, False)]
    while pending:
        node, operands_done = pending.pop()
        if not isinstance(node, BinOp):
            values.append(_evaluate_leaf(node, scope, line, col))
        elif not operands_done:
            pending.append((node, True))
            pending.append((node.right, False))
            pending.append((node.left, False))
        else:
            right = values.pop()
            left = values.pop()
            try:
                values.append(float(_BINARY_OPERATORS[type(node)](left, right)))
            except ZeroDivisionError as exc:
                raise DivisionByZeroError("Division by zero in expression.", line, col) from exc
    return values.pop()


def _evaluate_leaf(expr: Expr, scope: Mapping[str, float], line: int, col: int) -> float:
    if isinstance(expr, Float):
        return float(expr.value)

    if isinstance(expr, Var):
        if expr.name in ALLOWED_CONSTANTS:
            return ALLOWED_CONSTANTS[expr.name]
        if expr.name not in scope:
            raise UndefinedParameterError(f"Undefined parameter '{expr.name}' in expression.", line, col)
        return float(scope[expr.name])

    raise TypeError(f"Unsupported expression node: {type(expr)!r}")

"""Test suite for qasm2.expr_eval module.

This module tests the evaluation of OpenQASM 2 parameter expressions,
covering constants, literals, operators, bindings, and error handling.
"""

from __future__ import annotations

import math

import pytest

from qasm2.ast_nodes import Add, Div, Float, Mul, Sub, Var
from qasm2.errors import DivisionByZeroError, QasmSemanticError, UndefinedParameterError
from qasm2.expr_eval import ALLOWED_CONSTANTS, evaluate
from qasm2.parser import parse_expression


class TestConstants:
    """Test evaluation of mathematical constants."""

    def test_pi_constant(self) -> None:
        """Test evaluation of pi constant."""
        assert evaluate(Var("pi")) == pytest.approx(math.pi)

    def test_pi_in_allowed_constants(self) -> None:
        """Verify pi is in ALLOWED_CONSTANTS dictionary."""
        assert "pi" in ALLOWED_CONSTANTS
        assert ALLOWED_CONSTANTS["pi"] == pytest.approx(math.pi)

    def test_pi_cannot_be_shadowed(self) -> None:
        """A binding named pi does not replace the constant."""
        assert evaluate(Var("pi"), {"pi": 1.0}) == pytest.approx(math.pi)


class TestNumericLiterals:
    """Test evaluation of numeric literals."""

    def test_float_literal(self) -> None:
        assert evaluate(Float(3.14159)) == pytest.approx(3.14159)

    def test_integer_literal_is_float(self) -> None:
        """Integer literals evaluate to floats."""
        result = evaluate(parse_expression("42"))
        assert result == 42.0
        assert isinstance(result, float)

    def test_negative_literal(self) -> None:
        assert evaluate(parse_expression("-2.5")) == -2.5

    def test_exponent_literal(self) -> None:
        assert evaluate(parse_expression("1e-3")) == pytest.approx(0.001)


class TestBinaryOperators:
    """Test evaluation of binary operators."""

    def test_addition(self) -> None:
        assert evaluate(Add(Float(1.0), Float(2.0))) == 3.0

    def test_subtraction(self) -> None:
        assert evaluate(Sub(Float(5.0), Float(3.0))) == 2.0

    def test_multiplication(self) -> None:
        assert evaluate(Mul(Float(4.0), Float(2.5))) == 10.0

    def test_division(self) -> None:
        assert evaluate(Div(Var("pi"), Float(2.0))) == pytest.approx(math.pi / 2)

    def test_precedence(self) -> None:
        """Multiplication binds tighter than addition."""
        assert evaluate(parse_expression("1 + 2 * 3")) == 7.0

    def test_left_associativity(self) -> None:
        """Subtraction and division associate to the left."""
        assert evaluate(parse_expression("10 - 4 - 3")) == 3.0
        assert evaluate(parse_expression("8 / 4 / 2")) == 1.0

    def test_parentheses(self) -> None:
        assert evaluate(parse_expression("(1 + 2) * 3")) == 9.0


class TestBindings:
    """Test evaluation against parameter bindings."""

    def test_bound_variable(self) -> None:
        assert evaluate(Var("theta"), {"theta": 0.25}) == 0.25

    def test_expression_with_bindings(self) -> None:
        expr = parse_expression("theta / 2 + phi")
        assert evaluate(expr, {"theta": 1.0, "phi": 0.5}) == pytest.approx(1.0)

    def test_unbound_variable_raises(self) -> None:
        with pytest.raises(UndefinedParameterError) as exc_info:
            evaluate(Var("theta"), {}, 4, 7)
        assert exc_info.value.code == "E303"
        assert (exc_info.value.line, exc_info.value.col) == (4, 7)
        assert "theta" in exc_info.value.message


class TestDivisionByZero:
    """Division by a zero-valued denominator is always rejected."""

    def test_literal_zero(self) -> None:
        with pytest.raises(DivisionByZeroError) as exc_info:
            evaluate(parse_expression("pi / 0"))
        assert exc_info.value.code == "E302"

    def test_bound_zero(self) -> None:
        """Zero arriving through a binding is caught as well."""
        with pytest.raises(DivisionByZeroError):
            evaluate(parse_expression("1 / theta"), {"theta": 0.0})

    def test_computed_zero(self) -> None:
        with pytest.raises(QasmSemanticError):
            evaluate(parse_expression("1 / (pi - pi)"))


class TestDeepExpressions:
    """Evaluation depth is not limited by the interpreter stack."""

    def test_long_sum(self) -> None:
        expr = Float(0.0)
        for _ in range(5000):
            expr = Add(expr, Var("step"))
        assert evaluate(expr, {"step": 0.5}) == pytest.approx(2500.0)

    def test_right_nested_chain(self) -> None:
        expr = Float(1.0)
        for _ in range(5000):
            expr = Mul(Float(1.0), expr)
        assert evaluate(expr) == pytest.approx(1.0)

    def test_division_by_zero_deep_in_chain(self) -> None:
        expr = Div(Float(1.0), Float(0.0))
        for _ in range(5000):
            expr = Add(Float(1.0), expr)
        with pytest.raises(DivisionByZeroError):
            evaluate(expr)


def test_unknown_node_type() -> None:
    """Objects that are not expression nodes are rejected."""
    with pytest.raises(TypeError):
        evaluate("pi")  # type: ignore[arg-type]

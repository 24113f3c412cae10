"""Tests for the per-compilation symbol tables and operand resolution."""

from __future__ import annotations

import pytest

from qasm2.ast_nodes import Arg, GateDef
from qasm2.context import ParseContext, Register
from qasm2.errors import (
    CannotIndexLocalQubitError,
    DuplicateDefinitionError,
    IndexOutOfBoundsError,
    InvalidRegisterSizeError,
    UndefinedRegisterError,
)


@pytest.fixture
def context() -> ParseContext:
    """Context with ``qreg a[2]; qreg b[3]; creg c[2];`` declared."""
    ctx = ParseContext()
    ctx.declare_qreg("a", 2)
    ctx.declare_qreg("b", 3)
    ctx.declare_creg("c", 2)
    return ctx


# =============================================================================
# Register Declaration Tests
# =============================================================================


class TestRegisterDeclarations:
    """Registers occupy contiguous ranges in declaration order."""

    def test_offsets_follow_declaration_order(self, context: ParseContext) -> None:
        assert context.qregs.registers["a"] == Register("a", 0, 2)
        assert context.qregs.registers["b"] == Register("b", 2, 3)
        assert context.num_qubits == 5

    def test_classical_space_is_separate(self, context: ParseContext) -> None:
        assert context.cregs.registers["c"] == Register("c", 0, 2)
        assert context.num_cbits == 2

    def test_register_indices(self) -> None:
        assert Register("b", 2, 3).indices() == [2, 3, 4]

    def test_duplicate_qreg(self, context: ParseContext) -> None:
        with pytest.raises(DuplicateDefinitionError) as exc_info:
            context.declare_qreg("a", 1, 4, 1)
        assert exc_info.value.code == "E304"
        assert exc_info.value.line == 4

    def test_same_name_in_both_spaces(self, context: ParseContext) -> None:
        """Quantum and classical registers have separate namespaces."""
        context.declare_creg("a", 1)
        assert context.num_cbits == 3

    def test_zero_size_register(self) -> None:
        ctx = ParseContext()
        with pytest.raises(InvalidRegisterSizeError):
            ctx.declare_qreg("q", 0)
        assert ctx.num_qubits == 0


# =============================================================================
# Gate Definition Tests
# =============================================================================


class TestGateDefinitions:
    """Gate definitions are recorded once per name."""

    def test_define_and_lookup(self) -> None:
        ctx = ParseContext()
        definition = GateDef(name="bell", qargs=["a", "b"])
        ctx.define_gate(definition)
        assert ctx.lookup_gate("bell") is definition
        assert ctx.lookup_gate("other") is None

    def test_duplicate_definition(self) -> None:
        ctx = ParseContext()
        ctx.define_gate(GateDef(name="g", qargs=["a"]))
        with pytest.raises(DuplicateDefinitionError):
            ctx.define_gate(GateDef(name="g", qargs=["b"], line=5, col=6))


# =============================================================================
# Resolution Tests
# =============================================================================


class TestResolveQarg:
    """Quantum operands resolve to global qubit indices."""

    def test_indexed_reference(self, context: ParseContext) -> None:
        assert context.resolve_qarg(Arg("b", 1)) == [3]

    def test_whole_register_broadcasts(self, context: ParseContext) -> None:
        assert context.resolve_qarg(Arg("b")) == [2, 3, 4]

    def test_index_out_of_bounds(self, context: ParseContext) -> None:
        with pytest.raises(IndexOutOfBoundsError) as exc_info:
            context.resolve_qarg(Arg("a", 2, line=7, col=3))
        assert (exc_info.value.line, exc_info.value.col) == (7, 3)

    def test_undefined_register(self, context: ParseContext) -> None:
        with pytest.raises(UndefinedRegisterError) as exc_info:
            context.resolve_qarg(Arg("r", 0))
        assert exc_info.value.code == "E401"

    def test_classical_register_is_not_quantum(self, context: ParseContext) -> None:
        with pytest.raises(UndefinedRegisterError):
            context.resolve_qarg(Arg("c", 0))

    def test_local_qubit(self, context: ParseContext) -> None:
        assert context.resolve_qarg(Arg("x"), {"x": 4}) == [4]

    def test_local_qubit_shadows_register(self, context: ParseContext) -> None:
        assert context.resolve_qarg(Arg("a"), {"a": 3}) == [3]

    def test_local_qubit_cannot_be_indexed(self, context: ParseContext) -> None:
        with pytest.raises(CannotIndexLocalQubitError) as exc_info:
            context.resolve_qarg(Arg("x", 0), {"x": 4})
        assert exc_info.value.code == "E403"

    def test_global_register_visible_from_local_scope(self, context: ParseContext) -> None:
        assert context.resolve_qarg(Arg("a", 1), {"x": 4}) == [1]


class TestResolveCarg:
    """Classical operands resolve against the creg table only."""

    def test_indexed_reference(self, context: ParseContext) -> None:
        assert context.resolve_carg(Arg("c", 1)) == [1]

    def test_whole_register(self, context: ParseContext) -> None:
        assert context.resolve_carg(Arg("c")) == [0, 1]

    def test_out_of_bounds(self, context: ParseContext) -> None:
        with pytest.raises(IndexOutOfBoundsError) as exc_info:
            context.resolve_carg(Arg("c", 5))
        assert "c[5]" in exc_info.value.message

    def test_quantum_register_is_not_classical(self, context: ParseContext) -> None:
        with pytest.raises(UndefinedRegisterError):
            context.resolve_carg(Arg("a", 0))

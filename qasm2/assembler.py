"""Compile OpenQASM 2 source into a flat :class:`~ir.circuit.Circuit`."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ir.circuit import Circuit
from ir.operations import Barrier, Measure, Reset
from qasm2.ast_nodes import (
    BarrierStmt,
    CRegDecl,
    GateCall,
    GateDef,
    IfStmt,
    IncludeStmt,
    MeasureStmt,
    QRegDecl,
    ResetStmt,
    Statement,
)
from qasm2.context import ParseContext
from qasm2.errors import MeasureBroadcastMismatchError, UnsupportedFeatureError
from qasm2.expand import DEFAULT_MAX_DEPTH, GateExpander
from qasm2.lower import build_gate_table, default_gate_table
from qasm2.parser import iter_statements

__all__ = ["CircuitAssembler", "parse_qasm", "parse_qasm_file"]

_LOG = logging.getLogger(__name__)


class CircuitAssembler:
    """Apply parsed statements to a circuit under construction.

    One assembler compiles one program; its :class:`ParseContext` is never
    shared with another compilation.
    """

    def __init__(self, gate_mappings: Optional[dict] = None, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        table = build_gate_table(gate_mappings) if gate_mappings is not None else default_gate_table()
        self.context = ParseContext()
        self.expander = GateExpander(self.context, table, max_depth=max_depth)
        self.circuit = Circuit()

    def apply(self, stmt: Statement) -> None:
        """Resolve one statement and append its operations."""
        if isinstance(stmt, QRegDecl):
            self.context.declare_qreg(stmt.name, stmt.size, stmt.line, stmt.col)
        elif isinstance(stmt, CRegDecl):
            self.context.declare_creg(stmt.name, stmt.size, stmt.line, stmt.col)
        elif isinstance(stmt, GateDef):
            self.context.define_gate(stmt)
        elif isinstance(stmt, GateCall):
            for gate in self.expander.expand_call(stmt):
                self.circuit.add_op(gate)
        elif isinstance(stmt, MeasureStmt):
            self._apply_measure(stmt)
        elif isinstance(stmt, ResetStmt):
            for qubit in self.context.resolve_qarg(stmt.qarg):
                self.circuit.add_op(Reset(qubit=qubit))
        elif isinstance(stmt, BarrierStmt):
            qubits = [qubit for arg in stmt.args for qubit in self.context.resolve_qarg(arg)]
            self.circuit.add_op(Barrier(qubits=tuple(qubits)))
        elif isinstance(stmt, IncludeStmt):
            raise UnsupportedFeatureError(
                f"Includes are not supported: '{stmt.filename}'", stmt.line, stmt.col
            )
        elif isinstance(stmt, IfStmt):
            raise UnsupportedFeatureError(
                "Classical conditionals ('if') are not supported.", stmt.line, stmt.col
            )
        else:
            raise TypeError(f"Unsupported statement node: {stmt!r}")

    def finish(self) -> Circuit:
        """Fix the register totals and return the circuit."""
        self.circuit.num_qubits = self.context.num_qubits
        self.circuit.num_cbits = self.context.num_cbits
        return self.circuit

    def _apply_measure(self, stmt: MeasureStmt) -> None:
        qubits = self.context.resolve_qarg(stmt.qarg)
        cbits = self.context.resolve_carg(stmt.carg)
        if len(qubits) != len(cbits):
            raise MeasureBroadcastMismatchError(
                f"Cannot measure {len(qubits)} qubit(s) into {len(cbits)} classical bit(s).",
                stmt.line,
                stmt.col,
            )
        for qubit, cbit in zip(qubits, cbits):
            self.circuit.add_op(Measure(qubit=qubit, cbit=cbit))


def parse_qasm(text: str, gate_mappings: Optional[dict] = None, max_depth: int = DEFAULT_MAX_DEPTH) -> Circuit:
    """Compile OpenQASM 2 source text.

    Parameters
    ----------
    text : str
        Program text starting with ``OPENQASM 2.0;``.
    gate_mappings : dict, optional
        Gate name table document (see :func:`qasm2.lower.load_gate_mappings`).
        The packaged table is used when omitted.
    max_depth : int
        Maximum nesting of user gate definitions during expansion.

    Returns
    -------
    Circuit
        Flat circuit over globally indexed qubits and classical bits.

    Raises
    ------
    QasmError
        The first error encountered; no partial circuit is returned.

    Examples
    --------
    >>> circuit = parse_qasm("OPENQASM 2.0; qreg q[2]; h q;")
    >>> len(circuit.operations)
    2
    """
    assembler = CircuitAssembler(gate_mappings=gate_mappings, max_depth=max_depth)
    for stmt in iter_statements(text):
        assembler.apply(stmt)
    circuit = assembler.finish()
    _LOG.debug(
        "Compiled %d operation(s) over %d qubit(s) and %d classical bit(s)",
        len(circuit.operations),
        circuit.num_qubits,
        circuit.num_cbits,
    )
    return circuit


def parse_qasm_file(path: str, gate_mappings: Optional[dict] = None, max_depth: int = DEFAULT_MAX_DEPTH) -> Circuit:
    """Read a UTF-8 OpenQASM 2 file and compile it with :func:`parse_qasm`."""
    text = Path(path).read_text(encoding="utf-8")
    return parse_qasm(text, gate_mappings=gate_mappings, max_depth=max_depth)

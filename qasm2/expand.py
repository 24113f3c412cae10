"""Gate-macro expansion.

User gate definitions are inlined recursively until only primitives of the IR
catalogue remain. Parameter and qubit scopes are plain dictionaries rebuilt for
every nested expansion, so a body sees the bindings of every enclosing
definition unless it rebinds the same name.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence, Tuple

from ir.operations import Gate
from qasm2.ast_nodes import Expr, GateCall
from qasm2.context import ParseContext
from qasm2.errors import (
    BroadcastMismatchError,
    GateRecursionError,
    ParamArityMismatchError,
    QubitArityMismatchError,
    UnknownGateError,
)
from qasm2.expr_eval import evaluate
from qasm2.lower import GateMapping, GateTable, default_gate_table

__all__ = ["DEFAULT_MAX_DEPTH", "GateExpander", "broadcast"]

_LOG = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 100


def broadcast(qubit_lists: Sequence[Sequence[int]], line: int = 1, col: int = 1) -> List[List[int]]:
    """Zip resolved operands into one qubit vector per application.

    Parameters
    ----------
    qubit_lists : Sequence[Sequence[int]]
        One resolved index list per operand.
    line, col : int
        Location reported on mismatch.

    Returns
    -------
    List[List[int]]
        ``max_len`` vectors, where ``max_len`` is the longest operand (at least
        one). Single-element operands repeat in every vector.

    Raises
    ------
    BroadcastMismatchError
        If two operands longer than one element differ in length.

    Examples
    --------
    >>> broadcast([[0, 1, 2], [5]])
    [[0, 5], [1, 5], [2, 5]]
    """
    max_len = max((len(indices) for indices in qubit_lists), default=1)
    max_len = max(max_len, 1)
    for indices in qubit_lists:
        if len(indices) not in (1, max_len):
            sizes = ", ".join(str(len(item)) for item in qubit_lists)
            raise BroadcastMismatchError(f"Cannot broadcast register arguments of sizes ({sizes}).", line, col)
    return [[indices[0] if len(indices) == 1 else indices[i] for indices in qubit_lists] for i in range(max_len)]


class GateExpander:
    """Expand gate invocations into primitive :class:`~ir.operations.Gate` operations.

    Parameters
    ----------
    context : ParseContext
        Registers and gate definitions of the program being compiled.
    gate_table : GateTable, optional
        Name table for primitives; defaults to the packaged ``gates.yaml``.
    max_depth : int
        Maximum nesting of user gate definitions.
    """

    def __init__(
        self,
        context: ParseContext,
        gate_table: Optional[GateTable] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        if max_depth < 1:
            raise ValueError("max_depth must be a positive integer.")
        self.context = context
        self.gate_table = gate_table if gate_table is not None else default_gate_table()
        self.max_depth = max_depth

    def expand_call(
        self,
        call: GateCall,
        param_scope: Optional[Mapping[str, float]] = None,
        qubit_scope: Optional[Mapping[str, int]] = None,
        chain: Tuple[str, ...] = (),
    ) -> List[Gate]:
        """Resolve the operands of ``call``, broadcast them and expand each application."""
        qubit_lists = [self.context.resolve_qarg(arg, qubit_scope) for arg in call.args]
        gates: List[Gate] = []
        for qubits in broadcast(qubit_lists, call.line, call.col):
            gates.extend(
                self.expand(call.name, call.params, qubits, param_scope, qubit_scope, chain, call.line, call.col)
            )
        return gates

    def expand(
        self,
        name: str,
        param_exprs: Sequence[Expr],
        qubits: Sequence[int],
        param_scope: Optional[Mapping[str, float]] = None,
        qubit_scope: Optional[Mapping[str, int]] = None,
        chain: Tuple[str, ...] = (),
        line: int = 1,
        col: int = 1,
    ) -> List[Gate]:
        """Expand one application of ``name`` to concrete qubits.

        Parameters
        ----------
        name : str
            Gate identifier.
        param_exprs : Sequence[Expr]
            Unevaluated actual parameters.
        qubits : Sequence[int]
            Global qubit indices, one per operand.
        param_scope, qubit_scope : Mapping, optional
            Bindings of the enclosing definitions.
        chain : tuple[str, ...]
            User gates currently being expanded, outermost first.
        line, col : int
            Location of the invocation.

        Returns
        -------
        List[Gate]
            Primitive operations in execution order.

        Raises
        ------
        UnknownGateError
            If ``name`` is neither primitive nor defined.
        ParamArityMismatchError, QubitArityMismatchError
            If the invocation does not match the gate signature.
        GateRecursionError
            If the definition is cyclic or nests deeper than ``max_depth``.
        """
        values = [evaluate(expr, param_scope, line, col) for expr in param_exprs]

        mapping = self.gate_table.lookup(name)
        if mapping is not None:
            return [self._emit_primitive(mapping, values, qubits, line, col)]

        definition = self.context.lookup_gate(name)
        if definition is None:
            raise UnknownGateError(f"Unknown gate: {name}", line, col)
        if name in chain:
            cycle = " -> ".join((*chain, name))
            raise GateRecursionError(f"Cyclic gate definition: {cycle}", line, col)
        if len(chain) >= self.max_depth:
            raise GateRecursionError(
                f"Gate expansion of '{name}' exceeded maximum depth of {self.max_depth}.", line, col
            )
        if len(values) != len(definition.params):
            raise ParamArityMismatchError(
                f"Gate '{name}' expects {len(definition.params)} parameter(s) but received {len(values)}.", line, col
            )
        if len(qubits) != len(definition.qargs):
            raise QubitArityMismatchError(
                f"Gate '{name}' expects {len(definition.qargs)} qubit(s) but received {len(qubits)}.", line, col
            )

        inner_params = {**(param_scope or {}), **dict(zip(definition.params, values))}
        inner_qubits = {**(qubit_scope or {}), **dict(zip(definition.qargs, qubits))}
        inner_chain = (*chain, name)
        _LOG.debug("expanding %s%s on %s", name, tuple(values), list(qubits))

        gates: List[Gate] = []
        for statement in definition.body:
            # Body barriers and any non-call statements produce nothing.
            if isinstance(statement, GateCall):
                gates.extend(self.expand_call(statement, inner_params, inner_qubits, inner_chain))
        return gates

    def _emit_primitive(
        self, mapping: GateMapping, values: Sequence[float], qubits: Sequence[int], line: int, col: int
    ) -> Gate:
        if len(values) != len(mapping.params):
            raise ParamArityMismatchError(
                f"Gate '{mapping.name}' expects {len(mapping.params)} parameter(s) but received {len(values)}.",
                line,
                col,
            )
        if len(qubits) != mapping.kind.num_qubits:
            raise QubitArityMismatchError(
                f"Gate '{mapping.name}' expects {mapping.kind.num_qubits} qubit(s) but received {len(qubits)}.",
                line,
                col,
            )
        return Gate(kind=mapping.kind, qubits=tuple(qubits), params=mapping.apply(values, line, col))

"""Symbol tables built while compiling one OpenQASM 2 program.

A :class:`ParseContext` belongs to exactly one compilation. It maps register
names to contiguous ranges of the global qubit and classical bit index spaces
and records user gate definitions, and it resolves operand references against
those tables.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from qasm2.ast_nodes import Arg, GateDef
from qasm2.errors import (
    CannotIndexLocalQubitError,
    DuplicateDefinitionError,
    IndexOutOfBoundsError,
    InvalidRegisterSizeError,
    UndefinedRegisterError,
)

__all__ = ["Register", "RegisterTable", "ParseContext"]

_LOG = logging.getLogger(__name__)

_INDEX_LABELS = {"quantum": "Qubit", "classical": "Classical bit"}


@dataclass(frozen=True)
class Register:
    """Contiguous slice ``[start, start + size)`` of a global index space."""

    name: str
    start: int
    size: int

    def indices(self) -> List[int]:
        return list(range(self.start, self.start + self.size))


@dataclass
class RegisterTable:
    """Registers of one kind, assigned offsets in declaration order.

    Parameters
    ----------
    kind : str
        ``"quantum"`` or ``"classical"``; only used in diagnostics.
    """

    kind: str
    registers: Dict[str, Register] = field(default_factory=dict)
    total: int = 0

    def declare(self, name: str, size: int, line: int = 1, col: int = 1) -> Register:
        """Append a register after every previously declared one.

        Raises
        ------
        DuplicateDefinitionError
            If ``name`` is already declared.
        InvalidRegisterSizeError
            If ``size`` is zero.
        """
        if name in self.registers:
            raise DuplicateDefinitionError(f"Duplicate {self.kind} register '{name}'.", line, col)
        if size <= 0:
            raise InvalidRegisterSizeError(
                f"{self.kind.capitalize()} register '{name}' must have size greater than zero.", line, col
            )
        register = Register(name=name, start=self.total, size=size)
        self.registers[name] = register
        self.total += size
        return register

    def resolve(self, arg: Arg) -> List[int]:
        """Resolve a reference to global indices.

        An indexed reference yields one index; a bare register name yields the
        whole register in ascending order.

        Raises
        ------
        UndefinedRegisterError
            If the register has not been declared.
        IndexOutOfBoundsError
            If the subscript is not smaller than the register size.
        """
        register = self.registers.get(arg.name)
        if register is None:
            raise UndefinedRegisterError(f"Undefined {self.kind} register: {arg.name}", arg.line, arg.col)
        if arg.index is None:
            return register.indices()
        if arg.index >= register.size:
            raise IndexOutOfBoundsError(
                f"{_INDEX_LABELS[self.kind]} index out of bounds: {arg.name}[{arg.index}]", arg.line, arg.col
            )
        return [register.start + arg.index]


class ParseContext:
    """Per-compilation qreg, creg and gate-definition tables."""

    def __init__(self) -> None:
        self.qregs = RegisterTable("quantum")
        self.cregs = RegisterTable("classical")
        self.gate_defs: Dict[str, GateDef] = {}

    @property
    def num_qubits(self) -> int:
        return self.qregs.total

    @property
    def num_cbits(self) -> int:
        return self.cregs.total

    def declare_qreg(self, name: str, size: int, line: int = 1, col: int = 1) -> Register:
        register = self.qregs.declare(name, size, line, col)
        _LOG.debug("qreg %s -> qubits [%d, %d)", name, register.start, register.start + register.size)
        return register

    def declare_creg(self, name: str, size: int, line: int = 1, col: int = 1) -> Register:
        register = self.cregs.declare(name, size, line, col)
        _LOG.debug("creg %s -> cbits [%d, %d)", name, register.start, register.start + register.size)
        return register

    def define_gate(self, definition: GateDef) -> None:
        """Record a user gate definition.

        Raises
        ------
        DuplicateDefinitionError
            If a gate with the same name was already defined.
        """
        if definition.name in self.gate_defs:
            raise DuplicateDefinitionError(
                f"Duplicate gate definition '{definition.name}'.", definition.line, definition.col
            )
        self.gate_defs[definition.name] = definition
        _LOG.debug(
            "gate %s(%s) %s with %d body statement(s)",
            definition.name,
            ", ".join(definition.params),
            ", ".join(definition.qargs),
            len(definition.body),
        )

    def lookup_gate(self, name: str) -> Optional[GateDef]:
        return self.gate_defs.get(name)

    def resolve_qarg(self, arg: Arg, local_qubits: Optional[Mapping[str, int]] = None) -> List[int]:
        """Resolve a quantum operand.

        Names bound in ``local_qubits`` (the formal qubits of the gate
        definitions being expanded) take precedence over global registers and
        always denote exactly one qubit.

        Raises
        ------
        CannotIndexLocalQubitError
            If a subscript is applied to a gate-local qubit.
        UndefinedRegisterError, IndexOutOfBoundsError
            As for :meth:`RegisterTable.resolve`.
        """
        if local_qubits and arg.name in local_qubits:
            if arg.index is not None:
                raise CannotIndexLocalQubitError(
                    f"Gate argument '{arg.name}' denotes a single qubit and cannot be indexed.", arg.line, arg.col
                )
            return [local_qubits[arg.name]]
        return self.qregs.resolve(arg)

    def resolve_carg(self, arg: Arg) -> List[int]:
        """Resolve a classical operand against the creg table."""
        return self.cregs.resolve(arg)

"""Operations making up a circuit.

All operations are immutable. Qubit and classical bit indices are global
positions in the circuit's flat index spaces.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ir.gates import GateKind

__all__ = ["Gate", "Measure", "Reset", "Barrier", "Operation"]


@dataclass(frozen=True)
class Gate:
    """Primitive gate application.

    Attributes
    ----------
    kind : GateKind
        Primitive gate being applied.
    qubits : tuple[int, ...]
        Qubits the gate acts on, in operand order.
    params : tuple[float, ...]
        Gate parameters in radians, in the canonical order of ``kind``
        (``(theta, phi, lam)`` for :attr:`GateKind.U`).
    """

    kind: GateKind
    qubits: tuple[int, ...]
    params: tuple[float, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "qubits", tuple(int(qubit) for qubit in self.qubits))
        object.__setattr__(self, "params", tuple(float(param) for param in self.params))


@dataclass(frozen=True)
class Measure:
    """Measurement of one qubit into one classical bit."""

    qubit: int
    cbit: int


@dataclass(frozen=True)
class Reset:
    """Reset of one qubit to ``|0>``."""

    qubit: int


@dataclass(frozen=True)
class Barrier:
    """Scheduling boundary across the listed qubits."""

    qubits: tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "qubits", tuple(int(qubit) for qubit in self.qubits))


Operation = Union[Gate, Measure, Reset, Barrier]

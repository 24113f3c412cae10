"""Catalogue of primitive gates understood by the IR."""

from __future__ import annotations

from enum import Enum

__all__ = ["GateKind"]


class GateKind(Enum):
    """Primitive gate kinds.

    Each member's value is its canonical lowercase name; :attr:`num_params`
    and :attr:`num_qubits` give the fixed signature of the gate.
    """

    H = "h"
    X = "x"
    Y = "y"
    Z = "z"
    ID = "id"
    S = "s"
    SDG = "sdg"
    T = "t"
    TDG = "tdg"
    RX = "rx"
    RY = "ry"
    RZ = "rz"
    U = "u"
    CX = "cx"
    SWAP = "swap"
    CCX = "ccx"

    @property
    def num_params(self) -> int:
        return _SIGNATURES[self][0]

    @property
    def num_qubits(self) -> int:
        return _SIGNATURES[self][1]


_SIGNATURES: dict[GateKind, tuple[int, int]] = {
    GateKind.H: (0, 1),
    GateKind.X: (0, 1),
    GateKind.Y: (0, 1),
    GateKind.Z: (0, 1),
    GateKind.ID: (0, 1),
    GateKind.S: (0, 1),
    GateKind.SDG: (0, 1),
    GateKind.T: (0, 1),
    GateKind.TDG: (0, 1),
    GateKind.RX: (1, 1),
    GateKind.RY: (1, 1),
    GateKind.RZ: (1, 1),
    GateKind.U: (3, 1),
    GateKind.CX: (0, 2),
    GateKind.SWAP: (0, 2),
    GateKind.CCX: (0, 3),
}

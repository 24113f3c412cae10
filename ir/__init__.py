"""Flat circuit intermediate representation."""

from ir.circuit import Circuit
from ir.gates import GateKind
from ir.operations import Barrier, Gate, Measure, Operation, Reset

__all__ = ["Barrier", "Circuit", "Gate", "GateKind", "Measure", "Operation", "Reset"]

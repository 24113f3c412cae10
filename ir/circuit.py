"""Intermediate representation for quantum circuits."""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ir.gates import GateKind
from ir.operations import Barrier, Gate, Measure, Operation, Reset

__all__ = ["Circuit", "NO_MEASUREMENT_WARNING"]

NO_MEASUREMENT_WARNING = (
    "Warning: No measurements found. The circuit will not produce classical output on hardware."
)


@dataclass
class Circuit:
    """Flat circuit: register sizes plus an ordered operation list.

    Attributes
    ----------
    num_qubits : int
        Total number of qubits declared by the program.
    num_cbits : int
        Total number of classical bits declared by the program.
    operations : list[Operation]
        Operations in execution order.
    """

    num_qubits: int = 0
    num_cbits: int = 0
    operations: list[Operation] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Normalize field values after initialization.

        Notes
        -----
        Ensures the dataclass contains an independent operation list.
        """
        self.num_qubits = int(self.num_qubits)
        self.num_cbits = int(self.num_cbits)
        self.operations = list(self.operations)

    def add_op(self, op: Operation) -> None:
        """Append an operation to the circuit."""
        self.operations.append(op)

    def validate(self) -> list[str]:
        """Run advisory checks on the finished circuit.

        Returns
        -------
        list[str]
            Human-readable warnings. An empty list means nothing to report;
            warnings never prevent the circuit from being used.
        """
        warnings: list[str] = []
        if not any(isinstance(op, Measure) for op in self.operations):
            warnings.append(NO_MEASUREMENT_WARNING)
        return warnings

    def gate_counts(self) -> Counter[str]:
        """Count primitive gate applications by canonical gate name."""
        return Counter(op.kind.value for op in self.operations if isinstance(op, Gate))

    def copy(self) -> Circuit:
        """Return a circuit with its own operation list."""
        return Circuit(num_qubits=self.num_qubits, num_cbits=self.num_cbits, operations=self.operations)

    def to_dict(self) -> dict[str, Any]:
        """Create a JSON-serializable dictionary representation.

        Returns
        -------
        dict[str, Any]
            Mapping suitable for JSON serialization.
        """
        return {
            "num_qubits": self.num_qubits,
            "num_cbits": self.num_cbits,
            "operations": [_op_to_dict(op) for op in self.operations],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Circuit:
        """Instantiate a circuit from a dictionary description.

        Parameters
        ----------
        data : dict[str, Any]
            Dictionary produced by :meth:`to_dict`.

        Returns
        -------
        Circuit
            Circuit instance constructed from the supplied dictionary.

        Raises
        ------
        ValueError
            If an operation entry has an unknown type or gate kind.
        """
        return cls(
            num_qubits=data["num_qubits"],
            num_cbits=data.get("num_cbits", 0),
            operations=[_op_from_dict(entry) for entry in data.get("operations", [])],
        )

    def to_json(self, file_path: str) -> None:
        """Persist the circuit to a JSON file.

        Parameters
        ----------
        file_path : str
            Destination path of the JSON file.
        """
        path = Path(file_path)
        with path.open("w", encoding="utf-8") as handle:
            json.dump(self.to_dict(), handle, indent=2)

    @classmethod
    def from_json(cls, file_path: str) -> Circuit:
        """Load a circuit description from a JSON file.

        Parameters
        ----------
        file_path : str
            Source path of the JSON file.

        Returns
        -------
        Circuit
            Circuit instance reconstructed from the JSON file.
        """
        path = Path(file_path)
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        return cls.from_dict(data)


def _op_to_dict(op: Operation) -> dict[str, Any]:
    if isinstance(op, Gate):
        return {"op": "gate", "kind": op.kind.value, "qubits": list(op.qubits), "params": list(op.params)}
    if isinstance(op, Measure):
        return {"op": "measure", "qubit": op.qubit, "cbit": op.cbit}
    if isinstance(op, Reset):
        return {"op": "reset", "qubit": op.qubit}
    if isinstance(op, Barrier):
        return {"op": "barrier", "qubits": list(op.qubits)}
    raise TypeError(f"Unsupported operation: {op!r}")


def _op_from_dict(entry: dict[str, Any]) -> Operation:
    op_type = entry.get("op")
    if op_type == "gate":
        try:
            kind = GateKind(entry["kind"])
        except ValueError as exc:
            raise ValueError(f"Unknown gate kind '{entry['kind']}'.") from exc
        return Gate(kind=kind, qubits=tuple(entry["qubits"]), params=tuple(entry.get("params") or ()))
    if op_type == "measure":
        return Measure(qubit=int(entry["qubit"]), cbit=int(entry["cbit"]))
    if op_type == "reset":
        return Reset(qubit=int(entry["qubit"]))
    if op_type == "barrier":
        return Barrier(qubits=tuple(entry["qubits"]))
    raise ValueError(f"Unknown operation type '{op_type}'.")

"""Physical backend description used to check compiled circuits."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Optional

import networkx as nx
import yaml

from ir.circuit import Circuit
from ir.operations import Gate

__all__ = ["Backend", "load_backend"]


class Backend:
    """Target device: qubit count, basis gates and directed connectivity.

    Parameters
    ----------
    name : str
        Device name.
    num_qubits : int
        Number of physical qubits. Nodes ``0..num_qubits-1`` are created
        immediately; the coupling map starts without edges.
    basis_gates : Iterable[str], optional
        Canonical names of the natively supported gates.
    """

    def __init__(self, name: str, num_qubits: int, basis_gates: Optional[Iterable[str]] = None) -> None:
        if num_qubits < 0:
            raise ValueError("num_qubits must be non-negative.")
        self.name = name
        self.num_qubits = num_qubits
        self.basis_gates: set[str] = set(basis_gates or ())
        self.coupling_map = nx.DiGraph()
        self.coupling_map.add_nodes_from(range(num_qubits))

    def __repr__(self) -> str:
        return (
            f"Backend(name={self.name!r}, num_qubits={self.num_qubits}, "
            f"basis_gates={sorted(self.basis_gates)!r}, edges={self.coupling_map.number_of_edges()})"
        )

    def add_basis_gate(self, gate: str) -> None:
        self.basis_gates.add(gate)

    def set_coupling_map(self, edges: Iterable[tuple[int, int]]) -> None:
        """Replace every coupling with the given directed ``(source, target)`` edges.

        Raises
        ------
        ValueError
            If an endpoint is not a qubit of this backend. The existing
            couplings are left untouched in that case.
        """
        edge_list = [(int(source), int(target)) for source, target in edges]
        for source, target in edge_list:
            if not (0 <= source < self.num_qubits and 0 <= target < self.num_qubits):
                raise ValueError(
                    f"Coupling ({source}, {target}) is outside the {self.num_qubits} qubit(s) of backend '{self.name}'."
                )
        self.coupling_map.remove_edges_from(list(self.coupling_map.edges()))
        self.coupling_map.add_edges_from(edge_list)

    def is_coupled(self, source: int, target: int) -> bool:
        """Return whether a two-qubit gate may act from ``source`` to ``target``."""
        return self.coupling_map.has_edge(source, target)

    def supports(self, circuit: Circuit) -> bool:
        """Return whether ``circuit`` fits into the backend's qubits."""
        return circuit.num_qubits <= self.num_qubits

    def unsupported_gates(self, circuit: Circuit) -> set[str]:
        """Gate names used by ``circuit`` that are missing from the basis.

        A backend without basis gates accepts every gate.
        """
        if not self.basis_gates:
            return set()
        used = {op.kind.value for op in circuit.operations if isinstance(op, Gate)}
        return used - self.basis_gates

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Backend:
        """Build a backend from a mapping with ``name``, ``num_qubits``,
        ``basis_gates`` and ``coupling_map`` keys.

        Raises
        ------
        ValueError
            If a required key is missing or a coupling entry is not a pair.
        """
        try:
            name = str(data["name"])
            num_qubits = int(data["num_qubits"])
        except KeyError as exc:
            raise ValueError(f"Backend description is missing '{exc.args[0]}'.") from exc
        backend = cls(name, num_qubits, data.get("basis_gates") or ())
        edges = []
        for entry in data.get("coupling_map") or []:
            if not isinstance(entry, (list, tuple)) or len(entry) != 2:
                raise ValueError(f"Coupling entry {entry!r} must be a [source, target] pair.")
            edges.append((entry[0], entry[1]))
        backend.set_coupling_map(edges)
        return backend


def load_backend(yaml_path: str) -> Backend:
    """Load a backend description from a YAML file.

    Examples
    --------
    A linear three-qubit device::

        name: line3
        num_qubits: 3
        basis_gates: [u, cx]
        coupling_map: [[0, 1], [1, 2]]
    """
    data = yaml.safe_load(Path(yaml_path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Backend file '{yaml_path}' must contain a mapping at the top level.")
    return Backend.from_dict(data)

"""Gate name table mapping OpenQASM identifiers onto IR primitives.

The table is configuration: the packaged ``gates.yaml`` provides the standard
names (``h``, ``cx``, ``u1``, ``u2``, ``u3``, ``U`` ...), and callers may load
their own file to add aliases. Each entry names a primitive of
:class:`ir.gates.GateKind`, the formal parameters accepted by the identifier,
and the primitive's parameters as expressions over those formals.
"""

from __future__ import annotations

import importlib.resources as importlib_resources
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence

import yaml

from ir.gates import GateKind
from qasm2.ast_nodes import Expr
from qasm2.errors import QasmError
from qasm2.expr_eval import evaluate
from qasm2.parser import parse_expression

__all__ = [
    "GateMapping",
    "GateTable",
    "build_gate_table",
    "default_gate_table",
    "load_default_gate_mappings",
    "load_gate_mappings",
]

_DEFAULT_GATES_FILE = "gates.yaml"


@dataclass(frozen=True)
class GateMapping:
    """One entry of the gate name table.

    Attributes
    ----------
    name : str
        OpenQASM identifier.
    kind : GateKind
        Primitive emitted for the identifier.
    params : tuple[str, ...]
        Formal parameter names accepted by the identifier.
    args : tuple[Expr, ...]
        Parameters of the primitive expressed over ``params``.
    """

    name: str
    kind: GateKind
    params: tuple[str, ...]
    args: tuple[Expr, ...]

    def apply(self, values: Sequence[float], line: int = 1, col: int = 1) -> tuple[float, ...]:
        """Compute the primitive's parameters from the call's evaluated parameters."""
        bindings = dict(zip(self.params, values))
        return tuple(evaluate(arg, bindings, line, col) for arg in self.args)


class GateTable:
    """Lookup of primitive mappings by OpenQASM identifier."""

    def __init__(self, mappings: Mapping[str, GateMapping]) -> None:
        self._mappings = dict(mappings)

    def __contains__(self, name: object) -> bool:
        return name in self._mappings

    def __len__(self) -> int:
        return len(self._mappings)

    def names(self) -> list[str]:
        return sorted(self._mappings)

    def lookup(self, name: str) -> Optional[GateMapping]:
        """Return the mapping for ``name``, or ``None`` for a user-defined gate."""
        return self._mappings.get(name)


def load_gate_mappings(yaml_path: str) -> dict:
    """Load gate name mappings from a YAML file.

    Parameters
    ----------
    yaml_path : str
        Path to a ``gates.yaml``-style file.

    Returns
    -------
    dict
        Parsed YAML content.

    Raises
    ------
    FileNotFoundError
        If the supplied path does not exist.
    ValueError
        If the file contents cannot be parsed into a dictionary.
    """
    content = Path(yaml_path).read_text(encoding="utf-8")
    return _parse_mapping_document(content, yaml_path)


def load_default_gate_mappings() -> dict:
    """Load the packaged ``gates.yaml`` resource.

    Returns
    -------
    dict
        Parsed YAML content describing the standard gate names.

    Examples
    --------
    >>> from qasm2.lower import load_default_gate_mappings
    >>> mappings = load_default_gate_mappings()
    >>> mappings["mappings"]["u2"]["op"]
    'u'
    """
    content = importlib_resources.files("qasm2").joinpath(_DEFAULT_GATES_FILE).read_text(encoding="utf-8")
    return _parse_mapping_document(content, _DEFAULT_GATES_FILE)


def build_gate_table(gate_mappings: dict) -> GateTable:
    """Validate a mapping document and compile it into a :class:`GateTable`.

    Parameters
    ----------
    gate_mappings : dict
        Document as returned by :func:`load_gate_mappings`.

    Returns
    -------
    GateTable
        Table with every ``args`` template parsed into an expression tree.

    Raises
    ------
    ValueError
        If an entry is malformed, names an unknown primitive, or supplies the
        wrong number of primitive parameters.
    """
    raw = gate_mappings.get("mappings")
    if not isinstance(raw, dict):
        raise ValueError("Gate mappings must provide a 'mappings' dictionary.")

    entries: Dict[str, GateMapping] = {}
    for name, entry in raw.items():
        if not isinstance(entry, dict):
            raise ValueError(f"Gate '{name}' mapping entry is invalid.")
        op_name = entry.get("op")
        try:
            kind = GateKind(op_name)
        except ValueError as exc:
            raise ValueError(f"Gate '{name}' maps to unknown primitive '{op_name}'.") from exc
        params = entry.get("params") or []
        args = entry.get("args") or []
        if not isinstance(params, list) or not isinstance(args, list):
            raise ValueError(f"Gate '{name}' mapping must provide params and args as lists.")
        if len(args) != kind.num_params:
            raise ValueError(
                f"Gate '{name}' must supply {kind.num_params} argument(s) for primitive '{kind.value}', got {len(args)}."
            )
        try:
            compiled = tuple(parse_expression(str(template)) for template in args)
        except QasmError as exc:
            raise ValueError(f"Gate '{name}' has an invalid argument template: {exc.message}") from exc
        entries[str(name)] = GateMapping(
            name=str(name),
            kind=kind,
            params=tuple(str(param) for param in params),
            args=compiled,
        )
    return GateTable(entries)


@lru_cache(maxsize=1)
def default_gate_table() -> GateTable:
    """Return the shared table built from the packaged ``gates.yaml``."""
    return build_gate_table(load_default_gate_mappings())


def _parse_mapping_document(content: str, source: str) -> dict:
    data = yaml.safe_load(content)
    if not isinstance(data, dict):
        raise ValueError(f"Gate mapping file '{source}' must contain a mapping at the top level.")
    return data

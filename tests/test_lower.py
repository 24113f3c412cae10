"""Test suite for the gate name table in qasm2.lower.

This module covers:
- Loading gate mappings from YAML files
- The packaged default table
- Parameter templates evaluated against the identifier's formals
- Validation of malformed mapping documents
"""

from __future__ import annotations

import math
from pathlib import Path

import pytest

from ir.gates import GateKind
from qasm2.lower import (
    GateTable,
    build_gate_table,
    default_gate_table,
    load_default_gate_mappings,
    load_gate_mappings,
)


# =============================================================================
# Test Fixtures and Helpers
# =============================================================================


@pytest.fixture
def gates_yaml_path() -> str:
    """Provide the path to the packaged gate mappings YAML file."""
    return str(Path(__file__).resolve().parent.parent / "qasm2" / "gates.yaml")


@pytest.fixture
def table() -> GateTable:
    return default_gate_table()


def _document(**entries: dict) -> dict:
    return {"mappings": entries}


# =============================================================================
# Loading
# =============================================================================


class TestLoading:
    """Mapping documents are read with PyYAML."""

    def test_load_from_path(self, gates_yaml_path: str) -> None:
        mappings = load_gate_mappings(gates_yaml_path)
        assert "mappings" in mappings
        assert mappings["mappings"]["h"]["op"] == "h"

    def test_packaged_matches_file(self, gates_yaml_path: str) -> None:
        assert load_default_gate_mappings() == load_gate_mappings(gates_yaml_path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_gate_mappings(str(tmp_path / "missing.yaml"))

    def test_non_mapping_document(self, tmp_path: Path) -> None:
        path = tmp_path / "gates.yaml"
        path.write_text("- h\n- x\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_gate_mappings(str(path))


# =============================================================================
# Default Table
# =============================================================================


class TestDefaultTable:
    """The packaged table covers the standard identifiers."""

    @pytest.mark.parametrize(
        ("name", "kind"),
        [
            ("h", GateKind.H),
            ("x", GateKind.X),
            ("y", GateKind.Y),
            ("z", GateKind.Z),
            ("id", GateKind.ID),
            ("s", GateKind.S),
            ("sdg", GateKind.SDG),
            ("t", GateKind.T),
            ("tdg", GateKind.TDG),
            ("rx", GateKind.RX),
            ("ry", GateKind.RY),
            ("rz", GateKind.RZ),
            ("u1", GateKind.RZ),
            ("u2", GateKind.U),
            ("u3", GateKind.U),
            ("U", GateKind.U),
            ("cx", GateKind.CX),
            ("CX", GateKind.CX),
            ("swap", GateKind.SWAP),
            ("ccx", GateKind.CCX),
        ],
    )
    def test_standard_names(self, table: GateTable, name: str, kind: GateKind) -> None:
        mapping = table.lookup(name)
        assert mapping is not None
        assert mapping.kind is kind
        assert len(mapping.args) == kind.num_params

    def test_unknown_name_is_custom(self, table: GateTable) -> None:
        assert table.lookup("my_gate") is None
        assert "my_gate" not in table

    def test_shared_instance(self) -> None:
        assert default_gate_table() is default_gate_table()

    def test_u2_template(self, table: GateTable) -> None:
        mapping = table.lookup("u2")
        assert mapping is not None
        assert mapping.params == ("phi", "lam")
        assert mapping.apply([0.25, 0.5]) == pytest.approx((math.pi / 2, 0.25, 0.5))

    def test_names_sorted(self, table: GateTable) -> None:
        names = table.names()
        assert names == sorted(names)
        assert len(names) == len(table)


# =============================================================================
# Custom Tables
# =============================================================================


class TestBuildGateTable:
    """Custom documents are validated when compiled."""

    def test_alias(self) -> None:
        table = build_gate_table(_document(cnot={"op": "cx"}))
        mapping = table.lookup("cnot")
        assert mapping is not None
        assert mapping.kind is GateKind.CX
        assert mapping.params == ()

    def test_template_expression(self) -> None:
        table = build_gate_table(_document(p={"op": "rz", "params": ["lam"], "args": ["-1.0 * lam"]}))
        mapping = table.lookup("p")
        assert mapping is not None
        assert mapping.apply([0.5]) == pytest.approx((-0.5,))

    def test_numeric_template(self) -> None:
        """YAML numbers are accepted as literal templates."""
        table = build_gate_table(_document(sx={"op": "rx", "args": [1.5707963267948966]}))
        mapping = table.lookup("sx")
        assert mapping is not None
        assert mapping.apply([]) == pytest.approx((math.pi / 2,))

    def test_missing_mappings_key(self) -> None:
        with pytest.raises(ValueError, match="mappings"):
            build_gate_table({"gates": {}})

    def test_unknown_primitive(self) -> None:
        with pytest.raises(ValueError, match="unknown primitive"):
            build_gate_table(_document(cz={"op": "cz"}))

    def test_wrong_argument_count(self) -> None:
        with pytest.raises(ValueError, match="must supply 3"):
            build_gate_table(_document(u={"op": "u", "params": ["a"], "args": ["a"]}))

    def test_invalid_template(self) -> None:
        with pytest.raises(ValueError, match="invalid argument template"):
            build_gate_table(_document(r={"op": "rx", "params": ["a"], "args": ["a +"]}))

    def test_entry_not_a_mapping(self) -> None:
        with pytest.raises(ValueError):
            build_gate_table(_document(h="h"))  # type: ignore[arg-type]

    def test_params_must_be_list(self) -> None:
        with pytest.raises(ValueError):
            build_gate_table(_document(r={"op": "rx", "params": "a", "args": ["a"]}))

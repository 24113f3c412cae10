from __future__ import annotations

import argparse
import importlib.metadata
import logging
import sys
from typing import Sequence

import yaml

from ir.circuit import Circuit
from qasm2.assembler import parse_qasm_file
from qasm2.errors import QasmError
from qasm2.expand import DEFAULT_MAX_DEPTH
from qasm2.lower import build_gate_table, load_gate_mappings
from transpiler.backend import Backend, load_backend

_LOG = logging.getLogger("qasm2ir")


def _positive_int(text: str) -> int:
    """argparse type for counts that must be at least one."""
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: {text!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return value


def _build_argument_parser() -> argparse.ArgumentParser:
    """Create the command-line argument parser."""
    examples = (
        "Examples:\n"
        "  qasm2ir --in circuit.qasm --out circuit.json\n"
        "  qasm2ir --in circuit.qasm --out circuit.json --backend line5.yaml"
    )
    parser = argparse.ArgumentParser(
        prog="qasm2ir",
        description="Compile an OpenQASM 2 program into the flat circuit IR (JSON).",
        epilog=examples,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-i",
        "--in",
        dest="input_path",
        required=True,
        help="Path to the OpenQASM 2 source file that should be compiled.",
    )
    parser.add_argument(
        "-o",
        "--out",
        dest="output_path",
        required=True,
        help="Destination path for the circuit JSON.",
    )
    parser.add_argument(
        "-g",
        "--gates",
        dest="gates_path",
        help="Path to a gates.yaml name table (defaults to the packaged resource).",
    )
    parser.add_argument(
        "-b",
        "--backend",
        dest="backend_path",
        help="Path to a backend YAML description the circuit is checked against.",
    )
    parser.add_argument(
        "--max-depth",
        dest="max_depth",
        type=_positive_int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum nesting of user gate definitions (default: {DEFAULT_MAX_DEPTH}).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        dest="verbose",
        action="store_true",
        help="Emit verbose logging (debug level).",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_distribution_version()}",
    )
    return parser


def _configure_logging(verbose: bool) -> None:
    """Configure the logging subsystem for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _distribution_version() -> str:
    """Best-effort lookup of the installed package version."""
    try:
        return importlib.metadata.version("qasm2ir")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def _report_qasm_error(err: QasmError) -> None:
    """Print a formatted QASM diagnostic to stderr."""
    print(f"Error {err.code} at line {err.line}, col {err.col}: {err.message}", file=sys.stderr)


def _check_backend(circuit: Circuit, backend: Backend) -> bool:
    """Log how the circuit relates to the backend; return ``False`` if it cannot run there."""
    if not backend.supports(circuit):
        print(
            f"Circuit needs {circuit.num_qubits} qubit(s) but backend '{backend.name}' "
            f"provides {backend.num_qubits}.",
            file=sys.stderr,
        )
        return False
    missing = backend.unsupported_gates(circuit)
    if missing:
        _LOG.warning("Gates outside the basis of '%s': %s", backend.name, ", ".join(sorted(missing)))
    return True


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point."""
    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    input_path = args.input_path
    output_path = args.output_path

    _LOG.debug("Input file: %s", input_path)
    _LOG.debug("Output file: %s", output_path)

    gate_mappings = None
    if args.gates_path:
        try:
            gate_mappings = load_gate_mappings(args.gates_path)
            build_gate_table(gate_mappings)
        except FileNotFoundError as exc:
            print(f"Gate mapping file not found '{args.gates_path}': {exc}", file=sys.stderr)
            return 1
        except (ValueError, yaml.YAMLError) as exc:
            print(f"Invalid gate mapping file '{args.gates_path}': {exc}", file=sys.stderr)
            return 1
        _LOG.debug("Using gate mappings: %s", args.gates_path)

    backend = None
    if args.backend_path:
        try:
            backend = load_backend(args.backend_path)
        except FileNotFoundError as exc:
            print(f"Backend file not found '{args.backend_path}': {exc}", file=sys.stderr)
            return 1
        except (ValueError, yaml.YAMLError) as exc:
            print(f"Invalid backend file '{args.backend_path}': {exc}", file=sys.stderr)
            return 1
        _LOG.debug("Loaded backend %r", backend)

    try:
        circuit = parse_qasm_file(input_path, gate_mappings=gate_mappings, max_depth=args.max_depth)
    except (FileNotFoundError, PermissionError) as exc:
        print(f"Failed to read input file '{input_path}': {exc}", file=sys.stderr)
        return 1
    except UnicodeDecodeError as exc:
        print(f"Input file '{input_path}' is not valid UTF-8: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Error reading input file '{input_path}': {exc}", file=sys.stderr)
        return 1
    except QasmError as err:
        _report_qasm_error(err)
        return 1

    for warning in circuit.validate():
        _LOG.warning(warning)

    if backend is not None and not _check_backend(circuit, backend):
        return 1

    try:
        circuit.to_json(output_path)
    except OSError as exc:
        print(f"Failed to write output file '{output_path}': {exc}", file=sys.stderr)
        return 1

    counts = circuit.gate_counts()
    _LOG.debug("Gate counts: %s", dict(sorted(counts.items())))
    _LOG.info(
        "Compiled %d operations (%d gates), %d qubits, %d classical bits",
        len(circuit.operations),
        sum(counts.values()),
        circuit.num_qubits,
        circuit.num_cbits,
    )
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())

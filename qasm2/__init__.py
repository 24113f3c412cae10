"""OpenQASM 2 front end producing the flat circuit IR."""

from qasm2.assembler import parse_qasm, parse_qasm_file
from qasm2.errors import QasmError

__all__ = ["QasmError", "parse_qasm", "parse_qasm_file"]

"""Backend model and pass pipeline operating on the circuit IR."""

from transpiler.backend import Backend, load_backend
from transpiler.passes import FunctionPass, Pass, PassManager

__all__ = ["Backend", "FunctionPass", "Pass", "PassManager", "load_backend"]

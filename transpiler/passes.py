"""Transpiler pass interface and a sequential pass manager."""

from __future__ import annotations

import logging
from typing import Callable, List, Protocol, Union, runtime_checkable

from ir.circuit import Circuit

__all__ = ["FunctionPass", "Pass", "PassManager"]

_LOG = logging.getLogger(__name__)


@runtime_checkable
class Pass(Protocol):
    """A named ``Circuit -> Circuit`` transformation.

    Passes must not mutate their input; they return a new circuit.
    """

    name: str

    def run(self, circuit: Circuit) -> Circuit: ...


class FunctionPass:
    """Adapt a plain function to the :class:`Pass` interface."""

    def __init__(self, func: Callable[[Circuit], Circuit], name: str | None = None) -> None:
        self.func = func
        self.name = name or getattr(func, "__name__", type(func).__name__)

    def __repr__(self) -> str:
        return f"FunctionPass({self.name!r})"

    def run(self, circuit: Circuit) -> Circuit:
        return self.func(circuit)


class PassManager:
    """Ordered sequence of passes applied one after another.

    Examples
    --------
    >>> manager = PassManager()
    >>> manager.add_pass(lambda circuit: circuit)
    >>> manager.names()
    ['<lambda>']
    """

    def __init__(self) -> None:
        self.passes: List[Pass] = []

    def __len__(self) -> int:
        return len(self.passes)

    def add_pass(self, pass_: Union[Pass, Callable[[Circuit], Circuit]]) -> None:
        """Append a pass; plain callables are wrapped in :class:`FunctionPass`."""
        if not isinstance(pass_, Pass):
            if not callable(pass_):
                raise TypeError(f"Expected a pass or a callable, got {type(pass_).__name__}.")
            pass_ = FunctionPass(pass_)
        self.passes.append(pass_)

    def names(self) -> list[str]:
        return [pass_.name for pass_ in self.passes]

    def run(self, circuit: Circuit) -> Circuit:
        """Run every pass in order on a copy of ``circuit``."""
        current = circuit.copy()
        for pass_ in self.passes:
            _LOG.debug("running pass %s on %d operation(s)", pass_.name, len(current.operations))
            current = pass_.run(current)
        return current

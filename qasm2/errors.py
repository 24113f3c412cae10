"""Error model for OpenQASM 2 compilation.

Every failure raised while turning OpenQASM 2 text into a circuit is a
:class:`QasmError`. Error codes are grouped by category (for example, syntax
issues in the ``E20x`` family) and each concrete error kind carries a fixed
code so that callers can branch on either the class or the code.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import ClassVar

__all__ = [
    "QasmError",
    "QasmSyntaxError",
    "QasmSemanticError",
    "QasmResolutionError",
    "QasmExpansionError",
    "HeaderError",
    "StatementSyntaxError",
    "UnsupportedFeatureError",
    "DivisionByZeroError",
    "UndefinedParameterError",
    "DuplicateDefinitionError",
    "InvalidRegisterSizeError",
    "UndefinedRegisterError",
    "IndexOutOfBoundsError",
    "CannotIndexLocalQubitError",
    "UnknownGateError",
    "GateRecursionError",
    "ParamArityMismatchError",
    "QubitArityMismatchError",
    "BroadcastMismatchError",
    "MeasureBroadcastMismatchError",
]

_CODE_PATTERN = re.compile(r"^E\d{3}$")


@dataclass(slots=True)
class QasmError(Exception):
    """Base class for all structured OpenQASM 2 errors.

    Parameters
    ----------
    code : str
        Error identifier (for example, ``E201``).
    message : str
        Human-readable explanation of the problem.
    line : int
        One-based line index pointing at the source location.
    col : int
        One-based column index pointing at the source location.
    """

    code: str
    message: str
    line: int = 1
    col: int = 1

    def __post_init__(self) -> None:
        """Validate the common error attributes."""
        if not _CODE_PATTERN.match(self.code):
            raise ValueError("Error codes must follow the `E###` pattern.")
        if self.line < 1 or self.col < 1:
            raise ValueError("Source locations are one-based; line and column must be positive integers.")

    def __str__(self) -> str:
        """Return a concise diagnostic string."""
        return f"{self.code} (line {self.line}, col {self.col}): {self.message}"


class _CategorisedQasmError(QasmError):
    """Utility mixin enforcing category-specific validation."""

    CATEGORY_PREFIX: ClassVar[str]
    CATEGORY_LABEL: ClassVar[str]

    def __post_init__(self) -> None:
        super().__post_init__()
        if not self.code.startswith(self.CATEGORY_PREFIX):
            raise ValueError(f"{self.CATEGORY_LABEL} must use an error code starting with '{self.CATEGORY_PREFIX}'.")


class QasmSyntaxError(_CategorisedQasmError):
    """Grammar and syntax violations (``E20x`` family)."""

    CATEGORY_PREFIX: ClassVar[str] = "E20"
    CATEGORY_LABEL: ClassVar[str] = "Syntax errors"


class QasmSemanticError(_CategorisedQasmError):
    """Semantic consistency issues (``E30x`` family)."""

    CATEGORY_PREFIX: ClassVar[str] = "E30"
    CATEGORY_LABEL: ClassVar[str] = "Semantic errors"


class QasmResolutionError(_CategorisedQasmError):
    """Symbol resolution and scoping failures (``E40x`` family)."""

    CATEGORY_PREFIX: ClassVar[str] = "E40"
    CATEGORY_LABEL: ClassVar[str] = "Resolution errors"


class QasmExpansionError(_CategorisedQasmError):
    """Gate expansion and broadcasting failures (``E50x`` family)."""

    CATEGORY_PREFIX: ClassVar[str] = "E50"
    CATEGORY_LABEL: ClassVar[str] = "Expansion errors"


class _CodedError:
    """Mixin giving an error kind a fixed code.

    Concrete kinds are constructed from a message and an optional location,
    for example ``UnknownGateError("unknown gate 'foo'", 3, 1)``.
    """

    CODE: ClassVar[str]

    def __init__(self, message: str, line: int = 1, col: int = 1) -> None:
        QasmError.__init__(self, self.CODE, message, line, col)


class HeaderError(_CodedError, QasmSyntaxError):
    """Missing or malformed ``OPENQASM`` header, or an unsupported version."""

    CODE: ClassVar[str] = "E201"


class StatementSyntaxError(_CodedError, QasmSyntaxError):
    """No statement form matches the input at the current position."""

    CODE: ClassVar[str] = "E202"


class UnsupportedFeatureError(_CodedError, QasmSemanticError):
    """Recognised but unsupported construct (``include``, ``if``)."""

    CODE: ClassVar[str] = "E301"


class DivisionByZeroError(_CodedError, QasmSemanticError):
    """Expression divides by a zero-valued denominator."""

    CODE: ClassVar[str] = "E302"


class UndefinedParameterError(_CodedError, QasmSemanticError):
    """Expression references a name that is neither bound nor ``pi``."""

    CODE: ClassVar[str] = "E303"


class DuplicateDefinitionError(_CodedError, QasmSemanticError):
    """Register or gate name declared twice."""

    CODE: ClassVar[str] = "E304"


class InvalidRegisterSizeError(_CodedError, QasmSemanticError):
    """Register declared with size zero."""

    CODE: ClassVar[str] = "E305"


class UndefinedRegisterError(_CodedError, QasmResolutionError):
    """Reference to an undeclared register or gate-local qubit."""

    CODE: ClassVar[str] = "E401"


class IndexOutOfBoundsError(_CodedError, QasmResolutionError):
    """Subscript not smaller than the declared register size."""

    CODE: ClassVar[str] = "E402"


class CannotIndexLocalQubitError(_CodedError, QasmResolutionError):
    """Subscript applied to a gate definition's formal qubit."""

    CODE: ClassVar[str] = "E403"


class UnknownGateError(_CodedError, QasmResolutionError):
    """Gate name that is neither primitive nor user-defined."""

    CODE: ClassVar[str] = "E404"


class GateRecursionError(_CodedError, QasmExpansionError):
    """Cyclic gate definitions or expansion nested beyond the depth limit."""

    CODE: ClassVar[str] = "E501"


class ParamArityMismatchError(_CodedError, QasmExpansionError):
    """Gate invoked with the wrong number of parameters."""

    CODE: ClassVar[str] = "E502"


class QubitArityMismatchError(_CodedError, QasmExpansionError):
    """Gate invoked with the wrong number of qubit operands."""

    CODE: ClassVar[str] = "E503"


class BroadcastMismatchError(_CodedError, QasmExpansionError):
    """Whole-register gate operands of unequal, non-unit sizes."""

    CODE: ClassVar[str] = "E504"


class MeasureBroadcastMismatchError(_CodedError, QasmExpansionError):
    """Measurement operands resolving to different numbers of bits."""

    CODE: ClassVar[str] = "E505"

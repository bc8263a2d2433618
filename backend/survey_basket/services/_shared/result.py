# comments in English; reST docstrings
"""
Success/failure envelope used across the service layer.

Services return :class:`Result` instead of raising for expected outcomes
(bad credentials, unknown tokens, ...). Only programming mistakes, such as
building an inconsistent result or reading the value of a failure, raise
:class:`~survey_basket.services._shared.errors.ResultContractError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Generic, TypeVar

from survey_basket.services._shared.errors import ResultContractError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Error:
    """
    Immutable, catalog-defined failure payload.

    :param code: Stable machine-readable identifier (e.g. ``User.NotFound``).
    :type code: str
    :param description: Human-readable explanation, safe for clients.
    :type description: str
    """

    code: str
    description: str

    NONE: ClassVar[Error]

    def __bool__(self) -> bool:
        return self != Error.NONE


Error.NONE = Error(code="", description="")


class Result(Generic[T]):
    """
    Tagged outcome holding either a value or an :class:`Error`.

    Use the :meth:`success`, :meth:`ok` and :meth:`failure` constructors
    rather than calling the class directly.
    """

    __slots__ = ("_is_success", "_value", "_error")

    def __init__(self, is_success: bool, value: T | None, error: Error) -> None:
        if is_success and error != Error.NONE:
            raise ResultContractError("A successful result cannot carry an error.")
        if not is_success and error == Error.NONE:
            raise ResultContractError("A failed result requires an error.")
        self._is_success = is_success
        self._value = value
        self._error = error

    # ------------------------------ constructors ------------------------------

    @classmethod
    def success(cls, value: T) -> Result[T]:
        """Build a successful outcome wrapping ``value``."""
        return cls(True, value, Error.NONE)

    @classmethod
    def ok(cls) -> Result[None]:
        """Build a successful outcome with no payload."""
        return Result(True, None, Error.NONE)

    @classmethod
    def failure(cls, error: Error) -> Result[T]:
        """Build a failed outcome carrying ``error``."""
        return cls(False, None, error)

    # ------------------------------- accessors --------------------------------

    @property
    def is_success(self) -> bool:
        return self._is_success

    @property
    def is_failure(self) -> bool:
        return not self._is_success

    @property
    def error(self) -> Error:
        """Failure payload, :attr:`Error.NONE` on success."""
        return self._error

    @property
    def value(self) -> T:
        """
        Success payload.

        :raises ResultContractError: When called on a failed result.
        """
        if not self._is_success:
            raise ResultContractError("Failure results can't have value.")
        return self._value  # type: ignore[return-value]

    def __repr__(self) -> str:
        if self._is_success:
            return f"Result.success({self._value!r})"
        return f"Result.failure({self._error.code!r})"

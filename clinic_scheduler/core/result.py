"""Outcomes of booking decisions that are expected to fail.

A rejected slot or series is not an exception: it is returned as a
``Failure`` carrying the verdict, and the caller (workflow, CLI, API
layer) decides how to show it. Exceptions stay reserved for programming
errors and store failures.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Accepted outcome, e.g. the stored appointment(s)."""

    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def unwrap(self) -> T:
        """The accepted value."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, func: Callable[[T], U]) -> "Success[U]":
        """Transform the accepted value, e.g. appointments to their ids."""
        return Success(func(self.value))

    def __repr__(self) -> str:
        return f"Success({self.value!r})"


@dataclass(frozen=True)
class Failure(Generic[E]):
    """Rejected outcome carrying the reason (ValidationResult, SeriesError, ...)."""

    error: E

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def unwrap(self) -> Any:
        """
        Rejected outcomes have no value.

        Raises:
            RuntimeError: Always
        """
        raise RuntimeError(f"Outcome was rejected: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, func: Callable[[Any], U]) -> "Failure[E]":
        """Rejections pass through unchanged."""
        return self

    def __repr__(self) -> str:
        return f"Failure(error={self.error!r})"


Result = Union[Success[T], Failure[E]]


def ok(value: T) -> Success[T]:
    """Accept with a value."""
    return Success(value)


def err(error: E) -> Failure[E]:
    """Reject with a reason."""
    return Failure(error)

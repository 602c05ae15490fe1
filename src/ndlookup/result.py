"""Tagged value-or-error result returned by fallible table operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from .errors import LookupTableError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a fallible operation: either a value or an error.

    Exactly one of ``value`` and ``error`` is meaningful. Use the
    :meth:`success` and :meth:`failure` constructors rather than building
    instances directly.

    Attributes:
        value (T | None): Computed value, or None on failure.
        error (LookupTableError | None): Condition that prevented the
            computation, or None on success.

    Example:
        >>> res = table.query_by_values([1.5, 10.0])
        >>> ok, value, message = res.as_tuple()
    """

    value: T | None = None
    error: LookupTableError | None = None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        """Build a successful result holding ``value``."""
        return cls(value=value, error=None)

    @classmethod
    def failure(cls, error: LookupTableError) -> Result[T]:
        """Build a failed result carrying ``error``."""
        return cls(value=None, error=error)

    @property
    def ok(self) -> bool:
        """Whether the operation succeeded."""
        return self.error is None

    @property
    def error_message(self) -> str:
        """Human-readable error description, empty on success."""
        return "" if self.error is None else str(self.error)

    def unwrap(self) -> T:
        """Return the value, raising the carried error on failure.

        Returns:
            T: The computed value.

        Raises:
            LookupTableError: The carried error, if the operation failed.
        """
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]

    def as_tuple(self) -> tuple[bool, T | None, str]:
        """Return the ``(ok, value, error_message)`` reporting triple."""
        return self.ok, self.value, self.error_message

"""Two-variant result type threaded through every engine operation.

A step reports its outcome by returning ``Success(value)`` or
``Failure(error)``. The executor hands back the same type from
``Executor.execute()`` so callers never need a try/except around a run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Success:
    """Successful outcome carrying a value."""

    value: Any = None

    @property
    def is_success(self) -> bool:
        return True

    @property
    def is_failure(self) -> bool:
        return False

    def unwrap(self) -> Any:
        """Return the wrapped value."""
        return self.value


@dataclass(frozen=True)
class Failure:
    """Failed outcome carrying an error (message or exception)."""

    error: Any

    @property
    def is_success(self) -> bool:
        return False

    @property
    def is_failure(self) -> bool:
        return True

    def unwrap(self) -> Any:
        """Raise the wrapped error.

        Raises:
            Exception: The wrapped exception, or a ReactorError built from
                the error message when the error is not an exception
        """
        if isinstance(self.error, BaseException):
            raise self.error
        from .errors import ReactorError

        raise ReactorError(str(self.error))


Result = Union[Success, Failure]


def success(value: Any = None) -> Success:
    return Success(value)


def failure(error: Any) -> Failure:
    return Failure(error)


def is_result(value: Any) -> bool:
    """Check whether a value is already wrapped in a Result."""
    return isinstance(value, (Success, Failure))

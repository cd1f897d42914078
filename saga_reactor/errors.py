"""Error taxonomy for workflow runs.

Every error the engine produces derives from :class:`ReactorError`. The
executor never lets these escape ``execute()``; they travel inside a
``Failure`` so callers can branch on the class:

- ValidationError: missing input, bad definition, validator rejection
- DependencyError: cyclic graph or a run that cannot make progress
- StepFailureError: a step's run behavior failed (compensated and rolled back)
- CompensationError: compensation for a failed step itself failed
- UndoError: an undo call failed during rollback (collected, never fatal)
- ExecutionError: anything else, after best-effort rollback
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from .orchestration.workflow_engine.context import Context


class ReactorError(Exception):
    """Base class for all workflow engine errors."""

    def __init__(
        self,
        message: str,
        step: Optional[str] = None,
        context: Optional["Context"] = None,
        original_error: Any = None,
    ) -> None:
        self.message = message
        self.step = step
        self.context = context
        self.original_error = original_error
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, step={self.step!r})"


class ValidationError(ReactorError):
    """Raised when inputs or a workflow definition are invalid."""
    pass


class InputValidationError(ValidationError):
    """Raised when an input validator rejects the provided inputs.

    Attributes:
        field_errors: Mapping of field name to human-readable message(s)
    """

    def __init__(self, field_errors: Optional[Dict[str, Any]] = None) -> None:
        self.field_errors: Dict[str, Any] = dict(field_errors or {})
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        if not self.field_errors:
            return "Input validation failed"
        details = ", ".join(f"{field} {errors}" for field, errors in self.field_errors.items())
        return f"Input validation failed: {details}"


class DependencyError(ReactorError):
    """Raised when the dependency graph cannot be executed."""
    pass


class StepFailureError(ReactorError):
    """Raised when a step's run behavior reports failure."""

    def __init__(self, step: str, error: Any, context: Optional["Context"] = None) -> None:
        super().__init__(
            f"Step '{step}' failed: {error}",
            step=step,
            context=context,
            original_error=error,
        )


class CompensationError(ReactorError):
    """Raised when compensation for a failed step fails.

    Attributes:
        original_error: The step failure that triggered compensation
        compensation_error: The error reported by the compensate behavior
    """

    def __init__(
        self,
        step: str,
        original_error: Any,
        compensation_error: Any,
        context: Optional["Context"] = None,
    ) -> None:
        self.compensation_error = compensation_error
        super().__init__(
            f"Compensation for step '{step}' failed: {compensation_error}",
            step=step,
            context=context,
            original_error=original_error,
        )


class UndoError(ReactorError):
    """Undo of a completed step failed during rollback."""

    def __init__(self, step: str, error: Any) -> None:
        super().__init__(f"Undo failed for step '{step}': {error}", step=step, original_error=error)


class ExecutionError(ReactorError):
    """Unexpected failure during a run, surfaced after rollback."""

    def __init__(self, error: Any, context: Optional["Context"] = None) -> None:
        message = error.message if isinstance(error, ReactorError) else str(error)
        super().__init__(f"Execution failed: {message}", context=context, original_error=error)


class TransformError(ReactorError):
    """Raised when an argument transform function fails.

    The executor converts this into a failure of the owning step.

    Attributes:
        argument: Name of the argument whose transform failed
        resolved: Arguments resolved before the failure
    """

    def __init__(
        self, argument: str, error: Exception, resolved: Optional[Dict[str, Any]] = None
    ) -> None:
        self.argument = argument
        self.resolved: Dict[str, Any] = dict(resolved or {})
        super().__init__(
            f"Transform for argument '{argument}' failed: {error}", original_error=error
        )

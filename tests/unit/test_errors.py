"""Tests for saga_reactor.errors module."""

import pytest

from saga_reactor.errors import (
    CompensationError,
    DependencyError,
    ExecutionError,
    InputValidationError,
    ReactorError,
    StepFailureError,
    TransformError,
    UndoError,
    ValidationError,
)
from saga_reactor.orchestration.workflow_engine.context import Context


class TestHierarchy:
    """All engine errors share the ReactorError base."""

    @pytest.mark.parametrize(
        "error",
        [
            ValidationError("bad"),
            InputValidationError({"email": "is missing"}),
            DependencyError("cycle"),
            StepFailureError("a", "boom"),
            CompensationError("a", "boom", "worse"),
            UndoError("a", "oops"),
            ExecutionError(RuntimeError("x")),
            TransformError("arg", ValueError("bad")),
        ],
    )
    def test_is_reactor_error(self, error):
        """Test error derives from ReactorError."""
        assert isinstance(error, ReactorError)
        assert isinstance(error, Exception)

    def test_input_validation_error_is_validation_error(self):
        """Test input validation error is validation error."""
        assert isinstance(InputValidationError(), ValidationError)


class TestReactorError:
    """Tests for the base error."""

    def test_attributes(self):
        """Test ReactorError keeps step, context and cause."""
        context = Context({"a": 1})
        error = ReactorError("message", step="s", context=context, original_error="root")
        assert error.message == "message"
        assert error.step == "s"
        assert error.context is context
        assert error.original_error == "root"
        assert str(error) == "message"

    def test_repr(self):
        """Test repr includes message and step."""
        assert repr(ReactorError("m", step="s")) == "ReactorError('m', step='s')"


class TestMessages:
    """Rendered messages of each error class."""

    def test_step_failure(self):
        """Test StepFailureError message."""
        error = StepFailureError("validate_email", "Email must contain @")
        assert str(error) == "Step 'validate_email' failed: Email must contain @"
        assert error.step == "validate_email"
        assert error.original_error == "Email must contain @"

    def test_compensation(self):
        """Test CompensationError message and causes."""
        error = CompensationError("charge", "declined", "refund failed")
        assert str(error) == "Compensation for step 'charge' failed: refund failed"
        assert error.original_error == "declined"
        assert error.compensation_error == "refund failed"

    def test_undo(self):
        """Test UndoError message."""
        error = UndoError("reserve", "gone")
        assert error.message == "Undo failed for step 'reserve': gone"
        assert error.step == "reserve"

    def test_execution_from_exception(self):
        """Test execution from exception."""
        cause = RuntimeError("disk on fire")
        error = ExecutionError(cause)
        assert str(error) == "Execution failed: disk on fire"
        assert error.original_error is cause

    def test_execution_from_reactor_error_uses_message(self):
        """Test execution from reactor error uses message."""
        error = ExecutionError(DependencyError("stuck"))
        assert str(error) == "Execution failed: stuck"

    def test_input_validation_without_fields(self):
        """Test input validation without fields."""
        assert str(InputValidationError()) == "Input validation failed"

    def test_input_validation_with_fields(self):
        """Test input validation with fields."""
        error = InputValidationError({"email": "is missing", "age": "must be positive"})
        assert str(error) == "Input validation failed: email is missing, age must be positive"
        assert error.field_errors == {"email": "is missing", "age": "must be positive"}

    def test_transform(self):
        """Test TransformError message and partial arguments."""
        cause = ValueError("not a number")
        error = TransformError("amount", cause, {"currency": "EUR"})
        assert str(error) == "Transform for argument 'amount' failed: not a number"
        assert error.argument == "amount"
        assert error.resolved == {"currency": "EUR"}
        assert error.original_error is cause

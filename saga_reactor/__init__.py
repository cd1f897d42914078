"""Saga-pattern workflow orchestration.

Declare steps whose arguments come from inputs, other steps' results or
literals; the executor orders them by dependency, runs them, and on
failure compensates the failed step and undoes completed ones in reverse.
"""

from .config import Config, get_config
from .errors import (
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
from .orchestration import (
    Context,
    DependencyGraph,
    Executor,
    FromInput,
    FromResult,
    InputSpec,
    Literal,
    ModelInputValidator,
    Reactor,
    RunStatus,
    SchemaInputValidator,
    SequentialExecutor,
    StepBuilder,
    StepDefinition,
    StepExecutor,
    StepImplementation,
    WorkflowBuilder,
    WorkflowDefinition,
    from_input,
    from_result,
    literal,
)
from .result import Failure, Result, Success, failure, success

__version__ = "0.1.0"

__all__ = [
    # Results
    "Failure",
    "Result",
    "Success",
    "failure",
    "success",

    # Errors
    "CompensationError",
    "DependencyError",
    "ExecutionError",
    "InputValidationError",
    "ReactorError",
    "StepFailureError",
    "TransformError",
    "UndoError",
    "ValidationError",

    # Declaration
    "FromInput",
    "FromResult",
    "InputSpec",
    "Literal",
    "Reactor",
    "StepBuilder",
    "StepDefinition",
    "StepImplementation",
    "WorkflowBuilder",
    "WorkflowDefinition",
    "from_input",
    "from_result",
    "literal",

    # Validation
    "ModelInputValidator",
    "SchemaInputValidator",

    # Execution
    "Context",
    "DependencyGraph",
    "Executor",
    "RunStatus",
    "SequentialExecutor",
    "StepExecutor",

    # Configuration
    "Config",
    "get_config",
]

"""Workflow declaration, validation and orchestration."""

from .builder import Reactor, StepBuilder, WorkflowBuilder, validate_definition
from .validation import ModelInputValidator, SchemaInputValidator, format_errors
from .workflow_engine import (
    EVENTS,
    Argument,
    ArgumentSource,
    Context,
    DependencyGraph,
    Executor,
    FromInput,
    FromResult,
    InputSpec,
    LedgerEntry,
    Literal,
    RunStatus,
    SequentialExecutor,
    StepDefinition,
    StepExecutor,
    StepImplementation,
    WorkflowDefinition,
    extract_path,
    from_input,
    from_result,
    literal,
    resolve_arguments,
)

__all__ = [
    "Argument",
    "ArgumentSource",
    "Context",
    "DependencyGraph",
    "EVENTS",
    "Executor",
    "FromInput",
    "FromResult",
    "InputSpec",
    "LedgerEntry",
    "Literal",
    "ModelInputValidator",
    "Reactor",
    "RunStatus",
    "SchemaInputValidator",
    "SequentialExecutor",
    "StepBuilder",
    "StepDefinition",
    "StepExecutor",
    "StepImplementation",
    "WorkflowBuilder",
    "WorkflowDefinition",
    "extract_path",
    "format_errors",
    "from_input",
    "from_result",
    "literal",
    "resolve_arguments",
    "validate_definition",
]

"""
Saga workflow engine.

This package contains the execution core:
- sources: argument sources and path extraction
- steps: step, input and workflow definitions
- context: per-run state and the completion ledger
- graph: dependency graph, cycle detection, ready-step computation
- executors: invocation of run / compensate / undo behaviors
- core: the orchestrator and its three-tier failure protocol
"""

from __future__ import annotations

from .context import Context, LedgerEntry
from .core import EVENTS, Executor
from .executors import SequentialExecutor, StepExecutor
from .graph import DependencyGraph
from .sources import (
    Argument,
    ArgumentSource,
    FromInput,
    FromResult,
    Literal,
    extract_path,
    from_input,
    from_result,
    literal,
    resolve_arguments,
)
from .steps import InputSpec, RunStatus, StepDefinition, StepImplementation, WorkflowDefinition

__all__ = [
    # Argument sources
    "Argument",
    "ArgumentSource",
    "FromInput",
    "FromResult",
    "Literal",
    "extract_path",
    "from_input",
    "from_result",
    "literal",
    "resolve_arguments",

    # Definitions
    "InputSpec",
    "RunStatus",
    "StepDefinition",
    "StepImplementation",
    "WorkflowDefinition",

    # Run state
    "Context",
    "DependencyGraph",
    "LedgerEntry",

    # Execution
    "EVENTS",
    "Executor",
    "SequentialExecutor",
    "StepExecutor",
]

"""
Saga orchestration engine.

The :class:`Executor` owns one run of one workflow definition: it checks
inputs, builds and validates the dependency graph, executes ready steps
one at a time, and on failure compensates the failed step and undoes the
completed ones in reverse completion order.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, List, Mapping, Optional

from ...config import Config, get_config
from ...errors import (
    CompensationError,
    DependencyError,
    ExecutionError,
    ReactorError,
    StepFailureError,
    TransformError,
    UndoError,
    ValidationError,
)
from ...result import Failure, Result, Success, is_result
from ...utils.logger import get_logger
from .context import Context
from .executors import SequentialExecutor, StepExecutor
from .graph import DependencyGraph
from .sources import resolve_arguments
from .steps import RunStatus, StepDefinition, WorkflowDefinition

logger = get_logger(__name__)

EVENTS = (
    "started",
    "step_completed",
    "step_skipped",
    "step_failed",
    "rolled_back",
    "completed",
    "failed",
)

Callback = Callable[[str, Context, Dict[str, Any]], None]


class Executor:
    """Runs a workflow definition against one set of inputs.

    An instance serves exactly one run; calling :meth:`execute` a second
    time returns a failure without touching any step.
    """

    def __init__(
        self,
        definition: WorkflowDefinition,
        inputs: Optional[Mapping[str, Any]] = None,
        *,
        step_executor: Optional[StepExecutor] = None,
        config: Optional[Config] = None,
    ):
        """Initialize the executor.

        Args:
            definition: Workflow definition to run
            inputs: Workflow inputs
            step_executor: Strategy invoking step behaviors
            config: Engine configuration (global config when None)
        """
        self.definition = definition
        self.config = config or get_config()
        self.step_executor = step_executor or SequentialExecutor(
            capture_exceptions=self.config.capture_step_exceptions,
            enable_metrics=self.config.enable_metrics,
        )
        self.context = Context(inputs)
        self.dependency_graph = DependencyGraph()
        self.status = RunStatus.PENDING
        self.outcome: Optional[Result] = None
        self.undo_errors: List[UndoError] = []

        self._callbacks: Dict[str, List[Callback]] = {}
        self._failure_handled = False
        self._metrics = {
            "steps_completed": 0,
            "steps_skipped": 0,
            "steps_failed": 0,
            "steps_undone": 0,
            "undo_failures": 0,
            "duration": 0.0,
        }

    @classmethod
    def from_snapshot(
        cls, definition: WorkflowDefinition, snapshot: Mapping[str, Any], **kwargs: Any
    ) -> "Executor":
        """Create an executor around a context rebuilt from ``Context.to_dict()``.

        Call :meth:`continue_execution` on the result to finish the run.
        """
        executor = cls(definition, snapshot.get("inputs"), **kwargs)
        executor.context = Context.from_dict(snapshot)
        return executor

    @property
    def undo_stack(self):
        return self.context.ledger

    def execute(self) -> Result:
        """Run the workflow from the beginning.

        Returns:
            Success with the return step's result (or every step's result),
            or Failure with the error that ended the run
        """
        return self._run(resume=False)

    def continue_execution(self) -> Result:
        """Finish a run whose context was restored from a snapshot.

        Steps with a recorded result or ledger entry count as completed;
        input validation is not repeated.
        """
        return self._run(resume=True)

    def _run(self, resume: bool) -> Result:
        if self.status is not RunStatus.PENDING:
            return Failure(
                ExecutionError(f"executor already finished with status {self.status.value}")
            )

        start = time.monotonic()
        self._notify("started")
        try:
            outcome = None if resume else self._validate_inputs()
            if outcome is None:
                self._build_dependency_graph()
                self._validate_graph()
                if resume:
                    self._restore_progress()
                outcome = self._execute_steps()
        except Exception as e:
            outcome = self._handle_execution_error(e)

        self.status = RunStatus.COMPLETED if outcome.is_success else RunStatus.FAILED
        self.outcome = outcome
        if self.config.enable_metrics:
            self._metrics["duration"] = time.monotonic() - start

        if outcome.is_success:
            logger.info(f"Workflow {self.definition.name} completed")
            self._notify("completed", result=outcome.value)
        else:
            logger.info(f"Workflow {self.definition.name} failed: {outcome.error}")
            self._notify("failed", error=outcome.error)
        return outcome

    def _validate_inputs(self) -> Optional[Failure]:
        """Check required inputs, then run the configured validator.

        Returns:
            The validator's Failure unchanged when it rejects the inputs

        Raises:
            ValidationError: If a required input is missing
        """
        self.status = RunStatus.VALIDATING

        for name in self.definition.required_inputs():
            if not self.context.has_input(name):
                raise ValidationError(f"Required input '{name}' is missing", context=self.context)

        validator = self.definition.validator
        if validator is None:
            return None

        outcome = validator(dict(self.context.inputs))
        if not is_result(outcome):
            outcome = Success(outcome)
        if outcome.is_failure:
            logger.info(f"Input validation failed for {self.definition.name}: {outcome.error}")
            return outcome
        if isinstance(outcome.value, Mapping):
            self.context.replace_inputs(outcome.value)
        return None

    def _build_dependency_graph(self) -> None:
        self.status = RunStatus.BUILDING_GRAPH
        for step in self.definition.steps.values():
            self.dependency_graph.add_step(step)

    def _validate_graph(self) -> None:
        for step in self.dependency_graph.steps:
            if not step.is_runnable:
                raise ValidationError(
                    f"Step '{step.name}' has no implementation", step=step.name, context=self.context
                )

        if self.dependency_graph.has_cycles():
            logger.error(f"Cycle detected: {self.dependency_graph.find_cycle()}")
            raise DependencyError("Dependency graph contains cycles", context=self.context)

    def _restore_progress(self) -> None:
        done = set(self.context.intermediate_results) | {entry.step for entry in self.context.ledger}
        for name in done:
            if name in self.dependency_graph:
                self.dependency_graph.complete_step(name)
        logger.info(f"Resuming {self.definition.name} with {len(done)} completed step(s)")

    def _execute_steps(self) -> Result:
        self.status = RunStatus.EXECUTING

        while not self.dependency_graph.all_completed():
            ready_steps = self.dependency_graph.ready_steps()

            if not ready_steps:
                missing = self.dependency_graph.missing_dependencies()
                if missing:
                    logger.error(f"Undefined dependencies: {missing}")
                raise DependencyError(
                    "No ready steps available but execution not complete", context=self.context
                )

            for step in ready_steps:
                self._execute_step(step)

        if self.definition.return_step is not None:
            return Success(self.context.get_result(self.definition.return_step))
        return Success(dict(self.context.intermediate_results))

    def _execute_step(self, step: StepDefinition) -> None:
        with self.context.with_step(step.name):
            if not step.should_run(self.context):
                logger.info(f"Skipping step {step.name} due to condition")
                self.dependency_graph.complete_step(step.name)
                self._count("steps_skipped")
                self._notify("step_skipped", step=step.name)
                return

            try:
                arguments = resolve_arguments(step.arguments, self.context)
            except TransformError as e:
                raise self._handle_step_failure(step, e.original_error, e.resolved) from e

            result = self.step_executor.run_step(step, arguments, self.context)

            if result.is_success:
                self.context.record(step.name, arguments, result.value)
                self.dependency_graph.complete_step(step.name)
                self._count("steps_completed")
                self._notify("step_completed", step=step.name, result=result.value)
            else:
                raise self._handle_step_failure(step, result.error, arguments)

    def _handle_step_failure(
        self, step: StepDefinition, error: Any, arguments: Dict[str, Any]
    ) -> ReactorError:
        """Compensate the failed step, roll back completed steps.

        Returns:
            StepFailureError, or CompensationError when compensation failed
        """
        self.status = RunStatus.COMPENSATING
        self._count("steps_failed")
        logger.error(f"Step {step.name} failed: {error}")
        self._notify("step_failed", step=step.name, error=error)

        compensation = self.step_executor.compensate_step(step, error, arguments, self.context)
        self._rollback_completed_steps()
        self._failure_handled = True

        if compensation.is_success:
            return StepFailureError(step.name, error, context=self.context)

        logger.error(f"Compensation for step {step.name} failed: {compensation.error}")
        return CompensationError(step.name, error, compensation.error, context=self.context)

    def _rollback_completed_steps(self) -> None:
        """Undo completed steps, most recent first; undo failures never stop the walk."""
        self.status = RunStatus.ROLLING_BACK
        entries = list(reversed(self.context.ledger))
        if entries:
            logger.info(f"Rolling back {len(entries)} completed step(s)")

        for entry in entries:
            step = self.definition.steps.get(entry.step)
            if step is None:
                self._record_undo_error(UndoError(entry.step, "step is not defined"))
                continue
            with self.context.with_step(entry.step):
                try:
                    outcome = self.step_executor.undo_step(step, entry, self.context)
                except Exception as e:
                    outcome = Failure(e)
            if outcome.is_failure:
                self._record_undo_error(UndoError(entry.step, outcome.error))
            else:
                self._count("steps_undone")

        self.context.ledger.clear()
        if entries:
            self._notify("rolled_back", steps=[entry.step for entry in entries])

    def _record_undo_error(self, error: UndoError) -> None:
        logger.warning(error.message)
        self.undo_errors.append(error)
        self._count("undo_failures")

    def _handle_execution_error(self, error: Exception) -> Failure:
        if self._failure_handled and isinstance(error, (StepFailureError, CompensationError)):
            return Failure(error)

        if isinstance(error, ReactorError):
            self._rollback_completed_steps()
            return Failure(error)

        logger.error(f"Workflow {self.definition.name} failed: {error}", exc_info=True)
        self._rollback_completed_steps()
        return Failure(ExecutionError(error, context=self.context))

    def add_callback(self, event: str, callback: Callback) -> None:
        """Register a lifecycle callback.

        Args:
            event: One of ``EVENTS``
            callback: Called as ``callback(event, context, data)``

        Raises:
            ValueError: If the event name is unknown
        """
        if event not in EVENTS:
            raise ValueError(f"Unknown event '{event}'. Expected one of: {', '.join(EVENTS)}")
        self._callbacks.setdefault(event, []).append(callback)

    def _notify(self, event: str, **data: Any) -> None:
        for callback in self._callbacks.get(event, []):
            try:
                callback(event, self.context, data)
            except Exception as e:
                logger.error(f"Callback error: {e}")

    def _count(self, key: str) -> None:
        if self.config.enable_metrics:
            self._metrics[key] += 1

    def get_metrics(self) -> Dict[str, Any]:
        """Get run metrics.

        Returns:
            Metrics dictionary
        """
        return self._metrics.copy()

"""
Step execution strategies.

A step executor invokes one step's run, compensate or undo behavior and
normalises whatever the behavior returns into a ``Success`` / ``Failure``.
The orchestrator in :mod:`.core` decides *when* behaviors are invoked;
executors decide *how*. Swapping the executor does not change step
semantics.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from ...result import Failure, Result, Success, is_result
from ...utils.logger import get_logger
from .context import Context, LedgerEntry
from .steps import StepDefinition

logger = get_logger(__name__)


class StepExecutor(ABC):
    """Abstract base class for step executors."""

    @abstractmethod
    def run_step(
        self, step: StepDefinition, arguments: Dict[str, Any], context: Context
    ) -> Result:
        """Invoke a step's run behavior.

        Args:
            step: Step to run
            arguments: Resolved arguments
            context: Run context

        Returns:
            Success with the step's value, or Failure with its error
        """
        pass

    @abstractmethod
    def compensate_step(
        self, step: StepDefinition, error: Any, arguments: Dict[str, Any], context: Context
    ) -> Result:
        """Invoke a failed step's compensate behavior."""
        pass

    @abstractmethod
    def undo_step(self, step: StepDefinition, entry: LedgerEntry, context: Context) -> Result:
        """Invoke a completed step's undo behavior for its ledger entry."""
        pass


def _behavior(step: StepDefinition, kind: str) -> Optional[Callable[..., Any]]:
    """Inline behavior first, then the named implementation's method."""
    inline = getattr(step, kind)
    if inline is not None:
        return inline
    if step.impl is not None:
        return getattr(step.impl, kind)
    return None


class SequentialExecutor(StepExecutor):
    """Runs behaviors inline on the caller's thread."""

    def __init__(self, capture_exceptions: bool = True, enable_metrics: bool = True):
        """Initialize sequential executor.

        Args:
            capture_exceptions: Treat exceptions raised by a run behavior as a
                step failure instead of letting them escalate
            enable_metrics: Enable metrics collection
        """
        self.capture_exceptions = capture_exceptions
        self.enable_metrics = enable_metrics
        self._metrics = {
            "steps_executed": 0,
            "steps_failed": 0,
            "compensations": 0,
            "undos": 0,
        }

    def _count(self, key: str) -> None:
        if self.enable_metrics:
            self._metrics[key] += 1

    def run_step(
        self, step: StepDefinition, arguments: Dict[str, Any], context: Context
    ) -> Result:
        behavior = _behavior(step, "run")
        if behavior is None:
            raise RuntimeError(f"Step '{step.name}' has no implementation")

        logger.info(f"Executing step: {step.name}")
        self._count("steps_executed")
        try:
            outcome = behavior(arguments, context)
        except Exception as e:
            if not self.capture_exceptions:
                raise
            logger.error(f"Step {step.name} raised: {e}")
            outcome = Failure(e)

        if not is_result(outcome):
            # Plain return values count as success
            outcome = Success(outcome)
        if outcome.is_failure:
            self._count("steps_failed")
        return outcome

    def compensate_step(
        self, step: StepDefinition, error: Any, arguments: Dict[str, Any], context: Context
    ) -> Result:
        behavior = _behavior(step, "compensate")
        if behavior is None:
            return Success()

        logger.info(f"Compensating step: {step.name}")
        self._count("compensations")
        try:
            outcome = behavior(error, arguments, context)
        except Exception as e:
            logger.error(f"Compensation for {step.name} raised: {e}")
            return Failure(e)
        return outcome if is_result(outcome) else Success(outcome)

    def undo_step(self, step: StepDefinition, entry: LedgerEntry, context: Context) -> Result:
        behavior = _behavior(step, "undo")
        if behavior is None:
            return Success()

        logger.info(f"Undoing step: {step.name}")
        self._count("undos")
        try:
            outcome = behavior(entry.result, entry.arguments, context)
        except Exception as e:
            return Failure(e)
        return outcome if is_result(outcome) else Success(outcome)

    def get_metrics(self) -> Dict[str, Any]:
        """Get executor metrics.

        Returns:
            Metrics dictionary
        """
        return self._metrics.copy()

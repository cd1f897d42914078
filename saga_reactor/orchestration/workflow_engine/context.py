"""
Per-run execution context.

The context carries the run's inputs, the results recorded by completed
steps, the name of the step currently executing and the completion
ledger consumed in reverse during rollback. It is owned by exactly one
executor for one run and is not safe for concurrent mutation.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional

from .sources import extract_path


@dataclass
class LedgerEntry:
    """Record of one successfully completed step."""

    step: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    result: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {"step": self.step, "arguments": dict(self.arguments), "result": self.result}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LedgerEntry":
        return cls(
            step=data["step"],
            arguments=dict(data.get("arguments") or {}),
            result=data.get("result"),
        )


class Context:
    """Mutable state of a single workflow run."""

    def __init__(self, inputs: Optional[Mapping[str, Any]] = None):
        """Initialize a fresh run context.

        Args:
            inputs: Workflow inputs; copied and exposed read-only
        """
        self._inputs: Mapping[str, Any] = MappingProxyType(dict(inputs or {}))
        self.intermediate_results: Dict[str, Any] = {}
        self.private_data: Dict[str, Any] = {}
        self.current_step: Optional[str] = None
        self.ledger: List[LedgerEntry] = []

    @property
    def inputs(self) -> Mapping[str, Any]:
        return self._inputs

    def replace_inputs(self, inputs: Mapping[str, Any]) -> None:
        """Swap in validated inputs before any step has run.

        Raises:
            RuntimeError: If a step result or ledger entry is already recorded
        """
        if self.intermediate_results or self.ledger:
            raise RuntimeError("Inputs cannot be replaced once steps have run")
        self._inputs = MappingProxyType(dict(inputs))

    def has_input(self, name: str) -> bool:
        return name in self._inputs

    def get_input(self, name: str, path: Any = None) -> Any:
        """Get an input value, optionally drilling into it."""
        return extract_path(self._inputs.get(name), path)

    def has_result(self, step_name: str) -> bool:
        return step_name in self.intermediate_results

    def get_result(self, step_name: str, path: Any = None) -> Any:
        """Get a step's recorded result, optionally drilling into it."""
        return extract_path(self.intermediate_results.get(step_name), path)

    def set_result(self, step_name: str, value: Any) -> None:
        self.intermediate_results[step_name] = value

    def record(self, step_name: str, arguments: Dict[str, Any], result: Any) -> LedgerEntry:
        """Store a step's result and append its ledger entry."""
        self.set_result(step_name, result)
        entry = LedgerEntry(step=step_name, arguments=arguments, result=result)
        self.ledger.append(entry)
        return entry

    @contextmanager
    def with_step(self, step_name: str) -> Iterator["Context"]:
        """Mark ``step_name`` as current for the duration of the block."""
        previous = self.current_step
        self.current_step = step_name
        try:
            yield self
        finally:
            self.current_step = previous

    def to_dict(self) -> Dict[str, Any]:
        """Plain snapshot of the run state."""
        return {
            "inputs": dict(self._inputs),
            "intermediate_results": dict(self.intermediate_results),
            "private_data": dict(self.private_data),
            "current_step": self.current_step,
            "ledger": [entry.to_dict() for entry in self.ledger],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Context":
        """Rebuild a context from :meth:`to_dict` output."""
        context = cls(data.get("inputs") or {})
        context.intermediate_results = dict(data.get("intermediate_results") or {})
        context.private_data = dict(data.get("private_data") or {})
        context.current_step = data.get("current_step")
        context.ledger = [LedgerEntry.from_dict(entry) for entry in data.get("ledger") or []]
        return context

    def __repr__(self) -> str:
        return (
            f"Context(inputs={list(self._inputs)}, "
            f"results={list(self.intermediate_results)}, current_step={self.current_step!r})"
        )

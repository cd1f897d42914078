"""
Workflow step models and data structures.

This module defines the immutable descriptors consumed by the executor:
step definitions, named step implementations, input declarations and the
workflow definition that ties them together.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ...result import Success
from .sources import Argument, ArgumentSource

if TYPE_CHECKING:
    from .context import Context

Predicate = Callable[["Context"], bool]


class RunStatus(Enum):
    """Lifecycle of a single workflow run."""

    PENDING = "pending"
    VALIDATING = "validating"
    BUILDING_GRAPH = "building_graph"
    EXECUTING = "executing"
    COMPENSATING = "compensating"
    ROLLING_BACK = "rolling_back"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in {RunStatus.COMPLETED, RunStatus.FAILED}


class StepImplementation(ABC):
    """Named step implementation.

    Subclasses implement :meth:`run`; compensation defaults to accepting the
    failure and undo defaults to a no-op.
    """

    @abstractmethod
    def run(self, arguments: Dict[str, Any], context: "Context") -> Any:
        """Execute the step and return a Result (or a raw value)."""

    def compensate(self, error: Any, arguments: Dict[str, Any], context: "Context") -> Any:
        return Success()

    def undo(self, result: Any, arguments: Dict[str, Any], context: "Context") -> Any:
        return Success()


@dataclass(frozen=True, eq=False)
class StepDefinition:
    """Immutable descriptor of one workflow step.

    Inline ``run`` / ``compensate`` / ``undo`` callables take precedence
    over the methods of ``impl``. A step with neither an inline ``run``
    nor an ``impl`` fails graph validation.
    """

    name: str
    arguments: Mapping[str, Argument] = field(default_factory=dict)
    dependencies: Tuple[str, ...] = ()
    conditions: Tuple[Predicate, ...] = ()
    guards: Tuple[Predicate, ...] = ()
    run: Optional[Callable[..., Any]] = None
    compensate: Optional[Callable[..., Any]] = None
    undo: Optional[Callable[..., Any]] = None
    impl: Optional[StepImplementation] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Normalise collections and instantiate implementation classes."""
        arguments = {
            name: arg if isinstance(arg, Argument) else Argument(arg)
            for name, arg in dict(self.arguments).items()
        }
        for name, arg in arguments.items():
            if not isinstance(arg.source, ArgumentSource):
                raise TypeError(
                    f"Argument '{name}' of step '{self.name}' has no valid source: {arg.source!r}"
                )
        object.__setattr__(self, "arguments", MappingProxyType(arguments))
        object.__setattr__(self, "dependencies", tuple(self.dependencies))
        object.__setattr__(self, "conditions", tuple(self.conditions))
        object.__setattr__(self, "guards", tuple(self.guards))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))
        if isinstance(self.impl, type):
            object.__setattr__(self, "impl", self.impl())

    @property
    def has_run_block(self) -> bool:
        return self.run is not None

    @property
    def has_impl(self) -> bool:
        return self.impl is not None

    @property
    def is_runnable(self) -> bool:
        return self.has_run_block or self.has_impl

    def dependency_names(self) -> List[str]:
        """Steps this step depends on, deduplicated, in declaration order."""
        names: List[str] = []
        for argument in self.arguments.values():
            dependency = argument.source.step_dependency
            if dependency is not None and dependency not in names:
                names.append(dependency)
        for dependency in self.dependencies:
            if dependency not in names:
                names.append(dependency)
        return names

    def should_run(self, context: "Context") -> bool:
        """Evaluate conditions then guards; all must hold."""
        return all(condition(context) for condition in self.conditions) and all(
            guard(context) for guard in self.guards
        )

    def __repr__(self) -> str:
        return f"StepDefinition(name={self.name!r}, arguments={dict(self.arguments)!r})"


@dataclass(frozen=True)
class InputSpec:
    """Declaration of a workflow input."""

    name: str
    optional: bool = False
    description: Optional[str] = None
    schema: Any = None


class WorkflowDefinition(BaseModel):
    """Workflow definition with validation.

    ``steps`` and ``inputs`` accept either ordered mappings keyed by name or
    sequences of :class:`StepDefinition` / :class:`InputSpec` (input names
    as plain strings are accepted too).
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    description: str = ""
    inputs: Dict[str, Any] = Field(default_factory=dict)
    steps: Dict[str, Any]
    return_step: Optional[str] = None
    validator: Optional[Any] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("inputs", mode="before")
    @classmethod
    def normalise_inputs(cls, v):
        """Convert input declarations to an ordered name -> InputSpec mapping."""
        if v is None:
            return {}
        if isinstance(v, Mapping):
            items = []
            for name, spec in v.items():
                if isinstance(spec, InputSpec):
                    items.append(spec)
                elif isinstance(spec, Mapping):
                    items.append(InputSpec(name=name, **spec))
                else:
                    items.append(InputSpec(name=name))
        else:
            items = [spec if isinstance(spec, InputSpec) else InputSpec(name=spec) for spec in v]
        return {spec.name: spec for spec in items}

    @field_validator("steps", mode="before")
    @classmethod
    def normalise_steps(cls, v):
        """Convert step sequences to an ordered name -> StepDefinition mapping."""
        if isinstance(v, Mapping):
            return dict(v)
        steps: Dict[str, Any] = {}
        for step in v:
            if not isinstance(step, StepDefinition):
                raise ValueError(f"Expected StepDefinition, got {type(step).__name__}")
            if step.name in steps:
                raise ValueError(f"Duplicate step name: {step.name}")
            steps[step.name] = step
        return steps

    @field_validator("steps")
    @classmethod
    def validate_steps(cls, v):
        """Validate step definitions."""
        if not v:
            raise ValueError("Workflow must have at least one step")

        for key, step in v.items():
            if not isinstance(step, StepDefinition):
                raise ValueError(f"Step '{key}' is not a StepDefinition")
            if step.name != key:
                raise ValueError(f"Step registered as '{key}' is named '{step.name}'")

        return v

    @model_validator(mode="after")
    def validate_return_step(self):
        """Ensure the return step names a declared step."""
        if self.return_step is not None and self.return_step not in self.steps:
            raise ValueError(f"Return step '{self.return_step}' is not defined")
        return self

    def get_step(self, name: str) -> StepDefinition:
        return self.steps[name]

    def required_inputs(self) -> List[str]:
        return [name for name, spec in self.inputs.items() if not spec.optional]

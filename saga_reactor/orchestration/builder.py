"""Declarative construction of workflow definitions.

Builders are mutable; ``build()`` produces the immutable definitions the
executor consumes. Example::

    registration = WorkflowBuilder("user_registration")
    registration.input("email")
    registration.input("password")

    validate = registration.step("validate_email")
    validate.argument("email", from_input("email"))

    @validate.run
    def validate_email(args, context):
        if "@" in (args["email"] or ""):
            return Success(args["email"])
        return Failure("Email must contain @")

    registration.returns("validate_email")
    definition = registration.build()
    outcome = Executor(definition, {"email": "a@b.com", "password": "pw"}).execute()
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from ..config import Config, get_config
from ..errors import DependencyError, ValidationError
from ..result import Result
from ..utils.logger import get_logger
from .validation import SchemaInputValidator
from .workflow_engine.core import Executor
from .workflow_engine.executors import StepExecutor
from .workflow_engine.graph import DependencyGraph
from .workflow_engine.sources import Argument, ArgumentSource
from .workflow_engine.steps import InputSpec, StepDefinition, StepImplementation, WorkflowDefinition

logger = get_logger(__name__)


class StepBuilder:
    """Collects the pieces of one step definition."""

    def __init__(self, name: str, impl: Optional[Any] = None):
        self.name = name
        self.impl = impl
        self.arguments: Dict[str, Argument] = {}
        self.run_block: Optional[Callable[..., Any]] = None
        self.compensate_block: Optional[Callable[..., Any]] = None
        self.undo_block: Optional[Callable[..., Any]] = None
        self.conditions: List[Callable[..., bool]] = []
        self.guards: List[Callable[..., bool]] = []
        self.dependencies: List[str] = []
        self.metadata: Dict[str, Any] = {}

    def argument(
        self, name: str, source: ArgumentSource, transform: Optional[Callable[[Any], Any]] = None
    ) -> "StepBuilder":
        self.arguments[name] = Argument(source, transform)
        return self

    def run(self, fn: Callable[..., Any]) -> Callable[..., Any]:
        """Set the run behavior: ``fn(arguments, context)``."""
        self.run_block = fn
        return fn

    def compensate(self, fn: Callable[..., Any]) -> Callable[..., Any]:
        """Set the compensate behavior: ``fn(error, arguments, context)``."""
        self.compensate_block = fn
        return fn

    def undo(self, fn: Callable[..., Any]) -> Callable[..., Any]:
        """Set the undo behavior: ``fn(result, arguments, context)``."""
        self.undo_block = fn
        return fn

    def where(self, predicate: Callable[..., bool]) -> Callable[..., bool]:
        self.conditions.append(predicate)
        return predicate

    def guard(self, predicate: Callable[..., bool]) -> Callable[..., bool]:
        self.guards.append(predicate)
        return predicate

    def wait_for(self, *step_names: str) -> "StepBuilder":
        self.dependencies.extend(step_names)
        return self

    def build(self) -> StepDefinition:
        return StepDefinition(
            name=self.name,
            arguments=self.arguments,
            dependencies=tuple(self.dependencies),
            conditions=tuple(self.conditions),
            guards=tuple(self.guards),
            run=self.run_block,
            compensate=self.compensate_block,
            undo=self.undo_block,
            impl=self.impl,
            metadata=self.metadata,
        )


class WorkflowBuilder:
    """Collects inputs and steps and builds a :class:`WorkflowDefinition`."""

    def __init__(self, name: str, description: str = "", config: Optional[Config] = None):
        self.name = name
        self.description = description
        self.config = config or get_config()
        self._inputs: Dict[str, InputSpec] = {}
        self._steps: Dict[str, StepBuilder] = {}
        self._return_step: Optional[str] = None
        self._validator: Optional[Callable[[Mapping[str, Any]], Result]] = None

    def input(
        self,
        name: str,
        optional: bool = False,
        description: Optional[str] = None,
        schema: Any = None,
    ) -> InputSpec:
        """Declare a workflow input.

        Args:
            name: Input name
            optional: Whether the input may be absent
            description: Human-readable description
            schema: Type validated with pydantic when the workflow runs
        """
        spec = InputSpec(name=name, optional=optional, description=description, schema=schema)
        self._inputs[name] = spec
        return spec

    def step(self, name: str, impl: Optional[Any] = None) -> StepBuilder:
        """Register a step in declaration order.

        Raises:
            ValidationError: If a step with the same name exists
        """
        if name in self._steps:
            raise ValidationError(f"Step '{name}' is already defined", step=name)
        if impl is not None and not isinstance(impl, StepImplementation) and not (
            isinstance(impl, type) and issubclass(impl, StepImplementation)
        ):
            raise ValidationError(
                f"Implementation of step '{name}' must be a StepImplementation", step=name
            )
        builder = StepBuilder(name, impl)
        self._steps[name] = builder
        return builder

    def returns(self, step_name: str) -> None:
        self._return_step = step_name

    def validator(self, fn: Callable[[Mapping[str, Any]], Result]) -> Callable[..., Result]:
        """Install a custom input validator, replacing per-input schemas."""
        self._validator = fn
        return fn

    def _input_validator(self) -> Optional[Callable[[Mapping[str, Any]], Result]]:
        if self._validator is not None:
            return self._validator
        schemas = {name: spec.schema for name, spec in self._inputs.items() if spec.schema is not None}
        if not schemas:
            return None
        optional = [name for name, spec in self._inputs.items() if spec.optional]
        return SchemaInputValidator(schemas, optional=optional)

    def build(self) -> WorkflowDefinition:
        """Build the immutable workflow definition.

        When ``Config.validate_definitions`` is set the step graph is checked
        eagerly as well.

        Raises:
            ValidationError: If the definition is invalid
            DependencyError: If the step graph is cyclic or references
                undefined steps
        """
        try:
            definition = WorkflowDefinition(
                name=self.name,
                description=self.description,
                inputs=self._inputs,
                steps=[builder.build() for builder in self._steps.values()],
                return_step=self._return_step,
                validator=self._input_validator(),
            )
        except PydanticValidationError as e:
            messages = "; ".join(detail["msg"] for detail in e.errors())
            raise ValidationError(f"Invalid workflow '{self.name}': {messages}") from e

        if self.config.validate_definitions:
            validate_definition(definition)
        logger.debug(f"Built workflow {definition.name} with {len(definition.steps)} step(s)")
        return definition


def validate_definition(definition: WorkflowDefinition) -> None:
    """Check a definition's steps and graph without running it.

    Raises:
        ValidationError: If a step has no implementation
        DependencyError: If a dependency is undefined or the graph is cyclic
    """
    graph = DependencyGraph()
    for step in definition.steps.values():
        if not step.is_runnable:
            raise ValidationError(f"Step '{step.name}' has no implementation", step=step.name)
        graph.add_step(step)

    missing = graph.missing_dependencies()
    if missing:
        details = ", ".join(f"{step} -> {', '.join(deps)}" for step, deps in missing.items())
        raise DependencyError(f"Undefined step dependencies: {details}")

    if graph.has_cycles():
        raise DependencyError("Dependency graph contains cycles")


class Reactor:
    """Base class binding a workflow definition to a runnable class.

    Subclasses set ``definition`` and may set ``config`` / ``step_executor``;
    each :meth:`run` creates a fresh :class:`Executor` so runs never share
    state. Every keyword argument of :meth:`run` is a workflow input.
    """

    definition: ClassVar[Optional[WorkflowDefinition]] = None
    config: ClassVar[Optional[Config]] = None
    step_executor: ClassVar[Optional[StepExecutor]] = None

    @classmethod
    def _definition(cls) -> WorkflowDefinition:
        if cls.definition is None:
            raise ValidationError(f"{cls.__name__} has no workflow definition")
        return cls.definition

    @classmethod
    def executor(
        cls,
        inputs: Optional[Mapping[str, Any]] = None,
        *,
        config: Optional[Config] = None,
        step_executor: Optional[StepExecutor] = None,
    ) -> Executor:
        """Create an executor; explicit options override the class-level ones."""
        return Executor(
            cls._definition(),
            inputs,
            step_executor=step_executor or cls.step_executor,
            config=config or cls.config,
        )

    @classmethod
    def run(cls, inputs: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Result:
        """Run the workflow; keyword arguments are merged into ``inputs``."""
        merged = dict(inputs or {})
        merged.update(kwargs)
        return cls.executor(merged).execute()

    @classmethod
    def call(cls, inputs: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Result:
        return cls.run(inputs, **kwargs)

    @classmethod
    def validate(cls) -> None:
        """Validate the bound definition without running it."""
        validate_definition(cls._definition())

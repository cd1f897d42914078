"""Rich rendering of workflow plans and run outcomes.

Developer tooling only: nothing in the engine depends on this module.
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from ..errors import CompensationError, ReactorError
from ..orchestration.workflow_engine.core import Executor
from ..orchestration.workflow_engine.graph import DependencyGraph
from ..orchestration.workflow_engine.steps import WorkflowDefinition


def _graph_for(definition: WorkflowDefinition) -> DependencyGraph:
    graph = DependencyGraph()
    for step in definition.steps.values():
        graph.add_step(step)
    return graph


def plan_table(definition: WorkflowDefinition) -> Table:
    """Table of steps grouped by execution level."""
    graph = _graph_for(definition)
    table = Table(title=f"Workflow: {definition.name}")
    table.add_column("Level", justify="right")
    table.add_column("Step")
    table.add_column("Depends on")
    table.add_column("Undo", justify="center")

    for index, level in enumerate(graph.execution_levels()):
        for name in level:
            step = definition.steps[name]
            has_undo = step.undo is not None or step.impl is not None
            marker = " (return)" if name == definition.return_step else ""
            table.add_row(
                str(index),
                f"{name}{marker}",
                ", ".join(graph.dependencies_of(name)) or "-",
                "yes" if has_undo else "-",
            )
    return table


def dependency_tree(definition: WorkflowDefinition) -> Tree:
    """Tree of each root step and the steps that depend on it."""
    graph = _graph_for(definition)
    tree = Tree(definition.name)

    def _attach(node: Tree, name: str, seen: frozenset) -> None:
        for dependent in graph.dependents_of(name):
            if dependent in seen:
                continue
            _attach(node.add(dependent), dependent, seen | {dependent})

    for step in definition.steps.values():
        if not graph.dependencies_of(step.name):
            _attach(tree.add(step.name), step.name, frozenset({step.name}))
    return tree


def outcome_panel(executor: Executor) -> Panel:
    """Summary panel of a finished run."""
    outcome = executor.outcome
    lines = [f"Status: {executor.status.value}"]

    if outcome is None:
        lines.append("Not run")
    elif outcome.is_success:
        lines.append(escape(f"Result: {outcome.value!r}"))
    else:
        error = outcome.error
        lines.append(escape(f"Error ({type(error).__name__}): {error}"))
        if isinstance(error, CompensationError):
            lines.append(escape(f"Original error: {error.original_error}"))
        elif isinstance(error, ReactorError) and error.step:
            lines.append(escape(f"Failed step: {error.step}"))
    for undo_error in executor.undo_errors:
        lines.append(f"[yellow]{escape(undo_error.message)}[/yellow]")

    metrics = executor.get_metrics()
    lines.append(
        f"Completed: {metrics['steps_completed']}  Skipped: {metrics['steps_skipped']}  "
        f"Undone: {metrics['steps_undone']}  Duration: {metrics['duration']:.3f}s"
    )
    style = "green" if outcome is not None and outcome.is_success else "red"
    return Panel("\n".join(lines), title=executor.definition.name, border_style=style)


def print_plan(definition: WorkflowDefinition, console: Optional[Console] = None) -> None:
    console = console or Console()
    console.print(plan_table(definition))


def print_outcome(executor: Executor, console: Optional[Console] = None) -> None:
    console = console or Console()
    console.print(outcome_panel(executor))

"""
Dependency graph over workflow steps.

Edges point from a dependency to the step that needs it. They come from
``FromResult`` argument sources and from explicit dependency names.
Cycles are not rejected while steps are added; :meth:`has_cycles` is a
separate validation pass that the executor runs before any step executes.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Set, Tuple

import networkx as nx

from ...errors import DependencyError
from .steps import StepDefinition


class DependencyGraph:
    """Directed graph of step dependencies with completion tracking."""

    def __init__(self):
        self._graph = nx.DiGraph()
        self._steps: Dict[str, StepDefinition] = {}
        self._dependencies: Dict[str, List[str]] = {}
        self._completed: Set[str] = set()

    def add_step(self, step: StepDefinition) -> None:
        """Register a step and the edges from each of its dependencies.

        Args:
            step: Step definition to add
        """
        self._steps[step.name] = step
        self._graph.add_node(step.name)

        dependencies = step.dependency_names()
        for dependency in dependencies:
            self._graph.add_edge(dependency, step.name)
        self._dependencies[step.name] = dependencies

    def __len__(self) -> int:
        return len(self._steps)

    def __contains__(self, step_name: str) -> bool:
        return step_name in self._steps

    @property
    def steps(self) -> List[StepDefinition]:
        return list(self._steps.values())

    def dependencies_of(self, step_name: str) -> List[str]:
        return list(self._dependencies.get(step_name, []))

    def dependents_of(self, step_name: str) -> List[str]:
        if step_name not in self._graph:
            return []
        return [name for name in self._steps if self._graph.has_edge(step_name, name)]

    def missing_dependencies(self) -> Dict[str, List[str]]:
        """Dependencies that name no registered step, keyed by dependent step."""
        missing = {}
        for name, dependencies in self._dependencies.items():
            unknown = [dep for dep in dependencies if dep not in self._steps]
            if unknown:
                missing[name] = unknown
        return missing

    def ready_steps(self) -> List[StepDefinition]:
        """Steps not yet completed whose dependencies have all completed.

        Returned in registration order. A full scan runs on every call.
        """
        return [
            step
            for name, step in self._steps.items()
            if name not in self._completed
            and all(dep in self._completed for dep in self._dependencies[name])
        ]

    def complete_step(self, step_name: str) -> None:
        self._completed.add(step_name)

    def is_completed(self, step_name: str) -> bool:
        return step_name in self._completed

    def all_completed(self) -> bool:
        return len(self._completed) == len(self._steps)

    def pending_steps(self) -> List[str]:
        return [name for name in self._steps if name not in self._completed]

    def has_cycles(self) -> bool:
        return not nx.is_directed_acyclic_graph(self._graph)

    def find_cycle(self) -> Optional[List[Tuple[str, str]]]:
        """Return the edges of one cycle, or None when the graph is acyclic."""
        try:
            return [(u, v) for u, v in nx.find_cycle(self._graph)]
        except nx.NetworkXNoCycle:
            return None

    def topological_sort(self) -> List[StepDefinition]:
        """Linear order in which every step follows its dependencies.

        Ties are broken by registration order. Empty when the graph is cyclic.
        """
        if self.has_cycles():
            return []
        positions = {name: index for index, name in enumerate(self._steps)}
        ordered = nx.lexicographical_topological_sort(
            self._graph, key=lambda name: (positions.get(name, len(positions)), name)
        )
        return [self._steps[name] for name in ordered if name in self._steps]

    def execution_levels(self) -> List[List[str]]:
        """Group steps into levels whose members only depend on earlier levels.

        Raises:
            DependencyError: If the graph contains cycles
        """
        if self.has_cycles():
            raise DependencyError("Dependency graph contains cycles")

        positions = {name: index for index, name in enumerate(self._steps)}
        levels = []
        for generation in nx.topological_generations(self._graph):
            level = sorted((name for name in generation if name in self._steps), key=positions.get)
            if level:
                levels.append(level)
        return levels

    def __repr__(self) -> str:
        return (
            f"DependencyGraph(steps={len(self._steps)}, edges={self._graph.number_of_edges()}, "
            f"completed={len(self._completed)})"
        )

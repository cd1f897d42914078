"""Console rendering helpers."""

from .console import dependency_tree, outcome_panel, plan_table, print_outcome, print_plan

__all__ = ["dependency_tree", "outcome_panel", "plan_table", "print_outcome", "print_plan"]

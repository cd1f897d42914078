"""
Argument sources: where a step argument's value comes from.

A source resolves against a :class:`Context` and never observes other
arguments of the same step. Resolution of an absent input or result, or
traversal through an absent value, yields ``None`` instead of raising.

Path semantics for ``FromInput`` / ``FromResult``:
- ``str``: split on ``.`` and index once per segment
- ``list`` / ``tuple``: index once per element
- any other hashable key (``int``, enum member, ...): index once
- a callable: called with the value (named accessor)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from ...errors import TransformError

if TYPE_CHECKING:
    from .context import Context


def _lookup(value: Any, key: Any) -> Any:
    """Index ``value`` by ``key`` once, returning None when absent.

    Name keys on plain objects read data attributes only; methods and
    string values never match.
    """
    if value is None:
        return None
    if isinstance(value, Mapping):
        return value.get(key)
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        if isinstance(key, str) and key.lstrip("-").isdigit():
            key = int(key)
        if isinstance(key, int):
            return value[key] if -len(value) <= key < len(value) else None
        return None
    if isinstance(key, str):
        if isinstance(value, (str, bytes)):
            return None
        attribute = getattr(value, key, None)
        return None if callable(attribute) else attribute
    try:
        return value[key]
    except (KeyError, IndexError, TypeError):
        return None


def extract_path(value: Any, path: Any) -> Any:
    """Drill into ``value`` following ``path``.

    Args:
        value: Root value (an input or a step result)
        path: Key, dotted string, sequence of keys or accessor callable

    Returns:
        The extracted value, or None when any hop is absent
    """
    if value is None or path is None:
        return value

    if isinstance(path, str):
        keys = path.split(".")
    elif isinstance(path, (list, tuple)):
        keys = list(path)
    elif callable(path):
        return path(value)
    else:
        keys = [path]

    for key in keys:
        value = _lookup(value, key)
        if value is None:
            return None
    return value


class ArgumentSource(ABC):
    """Base class for argument sources."""

    @abstractmethod
    def resolve(self, context: "Context") -> Any:
        """Resolve the argument value against a run context."""

    @property
    def step_dependency(self) -> Optional[str]:
        """Name of the step this source reads from, if any."""
        return None


@dataclass(frozen=True)
class FromInput(ArgumentSource):
    """Reads a workflow input, optionally drilling into it."""

    name: str
    path: Any = None

    def resolve(self, context: "Context") -> Any:
        return extract_path(context.get_input(self.name), self.path)

    def __repr__(self) -> str:
        if self.path is not None:
            return f"input({self.name!r}, {self.path!r})"
        return f"input({self.name!r})"


@dataclass(frozen=True)
class FromResult(ArgumentSource):
    """Reads another step's recorded result, optionally drilling into it."""

    step_name: str
    path: Any = None

    def resolve(self, context: "Context") -> Any:
        return extract_path(context.get_result(self.step_name), self.path)

    @property
    def step_dependency(self) -> Optional[str]:
        return self.step_name

    def __repr__(self) -> str:
        if self.path is not None:
            return f"result({self.step_name!r}, {self.path!r})"
        return f"result({self.step_name!r})"


@dataclass(frozen=True)
class Literal(ArgumentSource):
    """A fixed value, independent of the context."""

    value: Any

    def resolve(self, context: "Context") -> Any:
        return self.value

    def __repr__(self) -> str:
        return f"value({self.value!r})"


@dataclass(frozen=True)
class Argument:
    """An argument source plus an optional transform applied after resolution."""

    source: ArgumentSource
    transform: Optional[Callable[[Any], Any]] = None

    def resolve(self, context: "Context") -> Any:
        value = self.source.resolve(context)
        if self.transform is not None:
            value = self.transform(value)
        return value


def resolve_arguments(arguments: Mapping[str, Argument], context: "Context") -> Dict[str, Any]:
    """Resolve every declared argument of a step.

    Raises:
        TransformError: If a transform function raises
    """
    resolved: Dict[str, Any] = {}
    for name, argument in arguments.items():
        value = argument.source.resolve(context)
        if argument.transform is not None:
            try:
                value = argument.transform(value)
            except Exception as e:
                raise TransformError(name, e, resolved) from e
        resolved[name] = value
    return resolved


def from_input(name: str, path: Any = None) -> FromInput:
    return FromInput(name, path)


def from_result(step_name: str, path: Any = None) -> FromResult:
    return FromResult(step_name, path)


def literal(value: Any) -> Literal:
    return Literal(value)

"""Parsing and evaluation of nested column paths such as ``addresses[0].city``."""

from __future__ import annotations

import re
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Union, cast

from docbridge.errors import PathSyntaxError

_SEGMENT_PATTERN = re.compile(r"^(?P<name>[^\[\]]+)(?P<indexes>(?:\[\d+\])*)$")
_INDEX_PATTERN = re.compile(r"\[(\d+)\]")


@dataclass(frozen=True, slots=True)
class FieldStep:
    name: str


@dataclass(frozen=True, slots=True)
class IndexStep:
    index: int


PathStep = Union[FieldStep, IndexStep]


@dataclass(frozen=True, slots=True)
class ColumnPath:
    raw: str
    steps: tuple[PathStep, ...]

    @property
    def root(self) -> str:
        # parse_path always starts with a field step
        return cast(FieldStep, self.steps[0]).name

    @property
    def is_simple(self) -> bool:
        return len(self.steps) == 1

    @property
    def has_index(self) -> bool:
        return any(isinstance(step, IndexStep) for step in self.steps)

    @property
    def native_path(self) -> str:
        """Dot notation understood by the store, e.g. ``addresses.0.city``."""
        return ".".join(
            step.name if isinstance(step, FieldStep) else str(step.index) for step in self.steps
        )

    @property
    def projection_path(self) -> str:
        """Longest field-only prefix; arrays are always projected whole."""
        names: list[str] = []
        for step in self.steps:
            if isinstance(step, IndexStep):
                break
            names.append(step.name)
        return ".".join(names)

    def prefix(self, length: int) -> "ColumnPath":
        """The path made of the first ``length`` steps, e.g. ``addresses[0]``."""
        raw = ""
        for step in self.steps[:length]:
            if isinstance(step, IndexStep):
                raw += f"[{step.index}]"
            else:
                raw = f"{raw}.{step.name}" if raw else step.name
        return ColumnPath(raw=raw, steps=self.steps[:length])


@lru_cache(maxsize=1024)
def parse_path(path: str) -> ColumnPath:
    if not path:
        raise PathSyntaxError("Column path must not be empty")

    steps: list[PathStep] = []
    for segment in path.split("."):
        if not segment:
            raise PathSyntaxError(f"Column path {path!r} contains an empty segment")
        match = _SEGMENT_PATTERN.match(segment)
        if match is None:
            raise PathSyntaxError(f"Column path {path!r} has a malformed segment {segment!r}")
        steps.append(FieldStep(match.group("name")))
        steps.extend(IndexStep(int(index)) for index in _INDEX_PATTERN.findall(match.group("indexes")))
    return ColumnPath(raw=path, steps=tuple(steps))


def resolve_path(document: Any, path: str | ColumnPath) -> Any:
    """Follow ``path`` through ``document``; anything missing resolves to ``None``."""
    column_path = parse_path(path) if isinstance(path, str) else path
    current = document
    for step in column_path.steps:
        if current is None:
            return None
        if isinstance(step, FieldStep):
            if not isinstance(current, Mapping):
                return None
            current = current.get(step.name)
        else:
            if not isinstance(current, (list, tuple)) or step.index >= len(current):
                return None
            current = current[step.index]
    return current


def assign_path(document: MutableMapping[str, Any], path: str | ColumnPath, value: Any) -> None:
    """Set ``value`` at a field-only path, creating intermediate documents."""
    column_path = parse_path(path) if isinstance(path, str) else path
    if column_path.has_index:
        raise PathSyntaxError(f"Cannot assign through array index in {column_path.raw!r}")

    names = [step.name for step in column_path.steps]  # type: ignore[union-attr]
    target = document
    for name in names[:-1]:
        child = target.get(name)
        if not isinstance(child, MutableMapping):
            child = {}
            target[name] = child
        target = child
    target[names[-1]] = value


__all__ = [
    "ColumnPath",
    "FieldStep",
    "IndexStep",
    "PathStep",
    "assign_path",
    "parse_path",
    "resolve_path",
]

"""A small dependency graph of sequential stages.

Each stage declares the stages it needs and receives only their results.
Dependencies must already be registered when a stage is added, so the
graph is acyclic by construction and insertion order is a valid
topological order. Stages run one after another; the first ``Err`` stops
the run.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Final, cast

from pubrel.core.result import Err, Ok, Result

__all__ = ["SKIPPED", "Stage", "StageFailure", "StageResults", "TaskGraph"]


class _Skipped:
    """Result of a stage that took part in the graph but had nothing to do."""

    _instance: _Skipped | None = None

    def __new__(cls) -> _Skipped:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SKIPPED"


SKIPPED: Final = _Skipped()


class StageResults(Mapping[str, object]):
    """Read-only results of the stages a stage depends on."""

    def __init__(self, values: Mapping[str, object]) -> None:
        self._values = dict(values)

    def __getitem__(self, name: str) -> object:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def skipped(self, name: str) -> bool:
        return self._values[name] is SKIPPED

    def value[T](self, name: str, kind: type[T]) -> T:
        """Result of ``name``, checked to be a ``kind``.

        Raises:
            KeyError: ``name`` is not a dependency of the running stage
            TypeError: the result has another type (including SKIPPED)
        """
        value = self._values[name]
        if not isinstance(value, kind):
            expected = getattr(kind, "__name__", kind)
            raise TypeError(f"stage {name!r} produced {value!r}, expected {expected}")
        return cast(T, value)


@dataclass(frozen=True, slots=True)
class Stage[E]:
    name: str
    run: Callable[[StageResults], Result[object, E]]
    needs: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class StageFailure[E]:
    stage: str
    error: E


class TaskGraph[E]:
    def __init__(self) -> None:
        self._stages: dict[str, Stage[E]] = {}

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._stages)

    def add(
        self,
        name: str,
        run: Callable[[StageResults], Result[object, E]],
        *,
        needs: tuple[str, ...] = (),
    ) -> None:
        """Register a stage.

        Raises:
            ValueError: duplicate name or a dependency that is not registered yet
        """
        if name in self._stages:
            raise ValueError(f"duplicate stage: {name}")
        unknown = [dep for dep in needs if dep not in self._stages]
        if unknown:
            raise ValueError(f"stage {name} needs unknown stage(s): {', '.join(unknown)}")
        self._stages[name] = Stage(name=name, run=run, needs=needs)

    def run(
        self,
        on_stage: Callable[[str], None] | None = None,
    ) -> Result[StageResults, StageFailure[E]]:
        """Run every stage in order and return all their results."""
        results: dict[str, object] = {}
        for stage in self._stages.values():
            if on_stage is not None:
                on_stage(stage.name)
            inputs = StageResults({dep: results[dep] for dep in stage.needs})
            outcome = stage.run(inputs)
            if isinstance(outcome, Err):
                return Err(StageFailure(stage=stage.name, error=outcome.error))
            results[stage.name] = outcome.value
        return Ok(StageResults(results))

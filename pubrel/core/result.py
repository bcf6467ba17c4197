"""Tagged success/failure values.

Every fallible step of a publish returns a ``Result`` instead of raising, so
the orchestrator can stop at the first failure and carry the typed error to
the caller without try/except blocks at each seam.

Usage:
    def find_release(tag: str) -> Result[Release, str]:
        if tag not in known:
            return Err(f"no release for {tag}")
        return Ok(known[tag])

    match find_release("v1.0.0"):
        case Ok(release):
            print(release.url)
        case Err(message):
            print(message)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Never


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful outcome carrying ``value``."""

    value: T

    def unwrap(self) -> T:
        return self.value

    def map_err[F](self, f: Callable[[Never], F]) -> Ok[T]:
        return self

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed outcome carrying ``error``."""

    error: E

    def unwrap(self) -> Never:
        """Raise ValueError; an Err has no value to hand out."""
        raise ValueError(f"called unwrap on Err: {self.error}")

    def map_err[F](self, f: Callable[[E], F]) -> Err[F]:
        """Transform the carried error, e.g. to redact or wrap it."""
        return Err(f(self.error))

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]

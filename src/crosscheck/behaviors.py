# Copyright (c) Syntropy Systems
"""Named registry of the behaviors compared by an experiment."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from typing_extensions import TypeAlias

if TYPE_CHECKING:
    from collections.abc import Iterator

Behavior: TypeAlias = Callable[[], Any]

CONTROL = "control"
CANDIDATE = "candidate"


class BehaviorRegistry:
    """Insertion-ordered mapping of behavior name to callable.

    Iteration order is registration order, which fixes the order of
    candidates in every result.
    """

    _behaviors: dict[str, Behavior]

    def __init__(self) -> None:
        self._behaviors = {}

    def register(self, name: str, behavior: Behavior) -> None:
        """Register a behavior under a unique name."""
        if not name:
            msg = "Behavior name must be non-empty"
            raise ValueError(msg)
        if not callable(behavior):
            msg = f"Behavior {name!r} must be callable, got {type(behavior).__name__}"
            raise TypeError(msg)
        if name in self._behaviors:
            msg = f"Behavior {name!r} is already registered"
            raise ValueError(msg)
        self._behaviors[name] = behavior

    def get(self, name: str) -> Behavior | None:
        """Return the behavior registered under name, if any."""
        return self._behaviors.get(name)

    def names(self) -> list[str]:
        """Return all behavior names in registration order."""
        return list(self._behaviors)

    def candidates(self, control: str = CONTROL) -> list[tuple[str, Behavior]]:
        """Return every behavior other than control, in registration order."""
        return [(n, b) for n, b in self._behaviors.items() if n != control]

    def __contains__(self, name: object) -> bool:
        return name in self._behaviors

    def __iter__(self) -> Iterator[tuple[str, Behavior]]:
        return iter(list(self._behaviors.items()))

    def __len__(self) -> int:
        return len(self._behaviors)

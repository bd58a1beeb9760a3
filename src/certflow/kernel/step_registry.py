from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from certflow.kernel.step import Step


# Errors are explicit for fast config feedback.
class UnknownStepError(KeyError):
    pass


# Step factories accept the step's declarative config plus shared wiring and return a bound Step.
StepFactory = Callable[[dict[str, object], dict[str, object]], Step]


@dataclass
class StepRegistry:
    # Registry maps step kinds to factories.
    _factories: dict[str, StepFactory] = field(default_factory=dict)

    def register(self, name: str, factory: StepFactory) -> None:
        # Registration is explicit; later registration overrides are allowed by default.
        self._factories[name] = factory

    def get(self, name: str) -> StepFactory:
        if name not in self._factories:
            raise UnknownStepError(name)
        return self._factories[name]

    def names(self) -> list[str]:
        return sorted(self._factories)

from __future__ import annotations

import threading
from collections.abc import Sequence
from dataclasses import dataclass, field

from certflow.kernel.step import Step


class FlowAlreadyRunError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class StepSpec:
    # StepSpec binds a human-readable label to a step command.
    label: str
    step: Step


@dataclass(frozen=True, slots=True)
class Flow:
    # Flow is an immutable ordered list of labeled steps, executed once per scenario.
    description: str
    steps: tuple[StepSpec, ...]
    capture_logs: bool = False
    _started: threading.Event = field(default_factory=threading.Event, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.description:
            raise ValueError("Flow.description must be non-empty")
        if not isinstance(self.steps, tuple):
            object.__setattr__(self, "steps", tuple(self.steps))

    @property
    def labels(self) -> list[str]:
        return [spec.label for spec in self.steps]

    def mark_started(self) -> None:
        # A flow is single-use; a second run would replay fixture steps against stale state.
        if self._started.is_set():
            raise FlowAlreadyRunError(f"Flow '{self.description}' has already been run")
        self._started.set()


@dataclass(slots=True)
class FlowBuilder:
    # Fluent builder: Flow stays immutable, the builder collects steps in order.
    description: str
    capture_logs: bool = False
    _steps: list[StepSpec] = field(default_factory=list)

    def step(self, label: str, step: Step) -> FlowBuilder:
        if not label:
            raise ValueError("Step label must be non-empty")
        self._steps.append(StepSpec(label=label, step=step))
        return self

    def extend(self, specs: Sequence[StepSpec]) -> FlowBuilder:
        self._steps.extend(specs)
        return self

    def build(self) -> Flow:
        return Flow(description=self.description, steps=tuple(self._steps), capture_logs=self.capture_logs)

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from certflow.kernel.flow import Flow, StepSpec
from certflow.kernel.step_registry import StepRegistry, UnknownStepError


class InvalidFlowConfigError(ValueError):
    pass


class StepBuildError(RuntimeError):
    def __init__(self, step_name: str, cause: Exception) -> None:
        super().__init__(f"Failed to build step '{step_name}': {cause}")
        self.step_name = step_name
        self.cause = cause


@dataclass(frozen=True, slots=True)
class ScenarioBuilder:
    # ScenarioBuilder assembles a Flow from step declarations and a registry.
    registry: StepRegistry

    def build(
        self,
        *,
        description: str,
        steps: Sequence[Mapping[str, object]],
        wiring: dict[str, object],
        capture_logs: bool = False,
    ) -> Flow:
        if not steps:
            raise InvalidFlowConfigError("Flow steps list is empty")

        built_steps: list[StepSpec] = []
        for idx, step_cfg in enumerate(steps):
            name = step_cfg.get("kind")
            if not isinstance(name, str):
                raise InvalidFlowConfigError(f"steps[{idx}].kind must be a string")
            label = step_cfg.get("label", name)
            if not isinstance(label, str) or not label:
                raise InvalidFlowConfigError(f"steps[{idx}].label must be a non-empty string")
            try:
                factory = self.registry.get(name)
            except UnknownStepError as exc:
                raise UnknownStepError(name) from exc

            config = step_cfg.get("config", {})
            if not isinstance(config, dict):
                raise InvalidFlowConfigError(f"steps[{idx}].config must be a mapping")

            try:
                step = factory(config, wiring)
            except Exception as exc:  # noqa: BLE001 - wrap with explicit error
                raise StepBuildError(name, exc) from exc

            built_steps.append(StepSpec(label=label, step=step))

        return Flow(description=description, steps=tuple(built_steps), capture_logs=capture_logs)

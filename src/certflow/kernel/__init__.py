from .context import Context, ContextFactory
from .flow import Flow, FlowAlreadyRunError, FlowBuilder, StepSpec
from .records import FlowReport, StepRecord, StepRecorder
from .runner import FlowCancelledError, FlowRunner, StepFailure
from .scenario_builder import InvalidFlowConfigError, ScenarioBuilder, StepBuildError
from .step import Call, Sleep, Step
from .step_registry import StepRegistry, UnknownStepError

# Kernel exports are minimal and runtime-focused.
__all__ = [
    "Call",
    "Context",
    "ContextFactory",
    "Flow",
    "FlowAlreadyRunError",
    "FlowBuilder",
    "FlowCancelledError",
    "FlowReport",
    "FlowRunner",
    "InvalidFlowConfigError",
    "ScenarioBuilder",
    "Sleep",
    "Step",
    "StepBuildError",
    "StepFailure",
    "StepRecord",
    "StepRecorder",
    "StepRegistry",
    "StepSpec",
    "UnknownStepError",
]

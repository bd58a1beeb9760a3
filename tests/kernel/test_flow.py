from __future__ import annotations

import pytest

from certflow.kernel.context import ContextFactory
from certflow.kernel.flow import Flow, FlowAlreadyRunError, FlowBuilder, StepSpec
from certflow.kernel.step import Call, Sleep


def _noop(ctx) -> None:
    return None


def test_builder_preserves_declaration_order() -> None:
    # Steps run in the order they were declared.
    flow = (
        FlowBuilder("ordered")
        .step("first", Call(_noop))
        .step("second", Call(_noop))
        .extend([StepSpec(label="third", step=Call(_noop))])
        .build()
    )
    assert flow.labels == ["first", "second", "third"]
    assert isinstance(flow.steps, tuple)


def test_builder_rejects_empty_label() -> None:
    with pytest.raises(ValueError):
        FlowBuilder("labels").step("", Call(_noop))


def test_flow_requires_description() -> None:
    with pytest.raises(ValueError):
        Flow(description="", steps=())


def test_flow_converts_step_list_to_tuple() -> None:
    flow = Flow(description="list", steps=[StepSpec(label="only", step=Call(_noop))])
    assert isinstance(flow.steps, tuple)
    assert flow.labels == ["only"]


def test_flow_is_single_use() -> None:
    # A second start must fail; flows replay fixture steps otherwise.
    flow = FlowBuilder("once").step("noop", Call(_noop)).build()
    flow.mark_started()
    with pytest.raises(FlowAlreadyRunError):
        flow.mark_started()


def test_builder_carries_capture_flag() -> None:
    flow = FlowBuilder("captured", capture_logs=True).step("noop", Call(_noop)).build()
    assert flow.capture_logs is True


def test_sleep_rejects_negative_seconds() -> None:
    with pytest.raises(ValueError):
        Sleep(-1)


def test_sleep_uses_injected_sleep_fn() -> None:
    calls: list[float] = []
    Sleep(2.5, sleep_fn=calls.append).execute(ContextFactory().new("sleep"))
    assert calls == [2.5]

from __future__ import annotations

import pytest

from certflow.kernel.step import Call
from certflow.kernel.step_registry import StepRegistry, UnknownStepError


def test_registry_returns_registered_factory() -> None:
    registry = StepRegistry()

    def factory(cfg, wiring):
        return Call(lambda ctx: None)

    registry.register("noop", factory)
    assert registry.get("noop") is factory


def test_registry_unknown_kind_raises() -> None:
    with pytest.raises(UnknownStepError):
        StepRegistry().get("missing")


def test_registry_later_registration_overrides() -> None:
    # Later registration wins so callers can swap a kind in tests.
    registry = StepRegistry()
    first = lambda cfg, wiring: Call(lambda ctx: None)  # noqa: E731
    second = lambda cfg, wiring: Call(lambda ctx: None)  # noqa: E731
    registry.register("noop", first)
    registry.register("noop", second)
    assert registry.get("noop") is second


def test_registry_names_are_sorted() -> None:
    registry = StepRegistry()
    registry.register("sleep", lambda cfg, wiring: Call(lambda ctx: None))
    registry.register("expect_secret", lambda cfg, wiring: Call(lambda ctx: None))
    assert registry.names() == ["expect_secret", "sleep"]

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from certflow.kernel.scenario_builder import ScenarioBuilder, StepBuildError
from certflow.kernel.step import Sleep
from vault_cert.config.models import HarnessConfig
from vault_cert.domain.models import Ports
from vault_cert.usecases.catalog import vault_catalog
from vault_cert.usecases.steps import ExpectCapability, ExpectSecretEquals, InterruptNetwork
from vault_cert.usecases.wiring import build_step_registry


def _config(**timings: float) -> HarnessConfig:
    return HarnessConfig.model_validate({"store_server": {"compose_file": "c.yml"}, "timings": timings})


def _wiring() -> dict[str, object]:
    return {
        "ports": Ports(grpc=1, http=2),
        "components_path": Path("/components/default"),
        "component_name": "my-hashicorp-vault",
        "store_server": object(),
        "sidecar": object(),
        "metadata": object(),
        "secrets": object(),
        "fault_injector": object(),
        "log_capture": object(),
    }


def test_registry_knows_every_catalog_step_kind() -> None:
    names = set(build_step_registry(_config()).names())
    used = {step.kind for scenario in vault_catalog() for step in scenario.steps}
    assert used <= names


def test_sleep_resolves_named_timings() -> None:
    registry = build_step_registry(_config(server_start_wait=3, network_instability=40))
    factory = registry.get("sleep")
    assert factory({"timing": "server_start"}, {}) == Sleep(3)
    assert factory({"timing": "recovery"}, {}) == Sleep(10)
    assert factory({"seconds": 1.5}, {}) == Sleep(1.5)
    with pytest.raises(ValueError):
        factory({"timing": "forever"}, {})


def test_secret_step_defaults_store_to_component() -> None:
    # Steps target the scenario's component unless the declaration names another one.
    factory = build_step_registry(_config()).get("expect_secret")
    step = factory({"key": "secondsecret", "expected": {"secondsecret": "efgh"}}, _wiring())
    assert isinstance(step, ExpectSecretEquals)
    assert step.store == "my-hashicorp-vault"
    assert step.options == {}

    other = factory({"key": "k", "expected": {"a": 1}, "store": "other", "options": {"v": "2"}}, _wiring())
    assert other.store == "other"
    assert other.expected == {"a": "1"}
    assert other.options == {"v": "2"}


def test_interrupt_defaults_to_service_port_and_instability_window() -> None:
    factory = build_step_registry(_config(network_instability=30, recovery_wait=5)).get("interrupt_network")
    step = factory({}, _wiring())
    assert isinstance(step, InterruptNetwork)
    assert step.port == "8200"
    assert step.duration == timedelta(seconds=30)


def test_capability_step_reads_presence_flag() -> None:
    factory = build_step_registry(_config()).get("expect_capability")
    step = factory({"capability": "MULTIPLE_KEY_VALUES_PER_SECRET", "present": False}, _wiring())
    assert isinstance(step, ExpectCapability)
    assert step.present is False


def test_missing_wiring_fails_at_build_time() -> None:
    builder = ScenarioBuilder(build_step_registry(_config()))
    with pytest.raises(StepBuildError):
        builder.build(description="d", steps=[{"kind": "start_store_server"}], wiring={})


def test_missing_step_config_fails_at_build_time() -> None:
    builder = ScenarioBuilder(build_step_registry(_config()))
    with pytest.raises(StepBuildError):
        builder.build(description="d", steps=[{"kind": "expect_secret", "config": {"key": "k"}}], wiring=_wiring())


def test_every_catalog_scenario_builds() -> None:
    builder = ScenarioBuilder(build_step_registry(_config()))
    for scenario in vault_catalog():
        flow = builder.build(
            description=scenario.description,
            steps=[step.as_mapping() for step in scenario.steps],
            wiring=_wiring(),
            capture_logs=scenario.capture_logs,
        )
        assert len(flow.steps) == len(scenario.steps)

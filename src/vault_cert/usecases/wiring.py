from __future__ import annotations

from datetime import timedelta
from typing import Any

from certflow.kernel.step import Sleep
from certflow.kernel.step_registry import StepRegistry
from vault_cert.config.models import HarnessConfig
from vault_cert.usecases.steps import (
    CutNetwork,
    ExpectBulkSecret,
    ExpectCapability,
    ExpectComponentRegistered,
    ExpectInitFailureLogged,
    ExpectNoInitFailureLogged,
    ExpectSecretAbsent,
    ExpectSecretEquals,
    ExpectSecretStable,
    InterruptNetwork,
    RestoreNetwork,
    StartSidecar,
    StartStoreServer,
    StopSidecar,
    StopStoreServer,
)


def build_step_registry(config: HarnessConfig) -> StepRegistry:
    # Step kinds map declarative config + fixture wiring to bound command objects.
    registry = StepRegistry()
    timings = config.timings

    named_waits = {
        "server_start": timings.server_start_wait,
        "component_load": timings.component_load_wait,
        "recovery": timings.effective_recovery_wait,
        "network_instability": timings.network_instability,
    }

    def sleep(cfg: dict[str, object], w: dict[str, object]) -> Sleep:
        if "timing" in cfg:
            timing = _str(cfg, "timing")
            if timing not in named_waits:
                raise ValueError(f"Unknown timing '{timing}'; expected one of {sorted(named_waits)}")
            return Sleep(named_waits[timing])
        return Sleep(float(_require_cfg(cfg, "seconds")))

    registry.register("sleep", sleep)

    registry.register("start_store_server", lambda cfg, w: StartStoreServer(_require(w, "store_server")))
    registry.register("stop_store_server", lambda cfg, w: StopStoreServer(_require(w, "store_server")))
    registry.register(
        "start_sidecar",
        lambda cfg, w: StartSidecar(
            sidecar=_require(w, "sidecar"),
            components_path=_require(w, "components_path"),
            ports=_require(w, "ports"),
        ),
    )
    registry.register("stop_sidecar", lambda cfg, w: StopSidecar(_require(w, "sidecar")))

    registry.register(
        "expect_component_registered",
        lambda cfg, w: ExpectComponentRegistered(
            client=_require(w, "metadata"),
            component=_component(cfg, w),
            registered=bool(cfg.get("registered", True)),
        ),
    )
    registry.register(
        "expect_capability",
        lambda cfg, w: ExpectCapability(
            client=_require(w, "metadata"),
            component=_component(cfg, w),
            capability=_str(cfg, "capability"),
            present=bool(cfg.get("present", True)),
        ),
    )

    registry.register(
        "expect_secret",
        lambda cfg, w: ExpectSecretEquals(
            client=_require(w, "secrets"),
            store=_component(cfg, w, key="store"),
            key=_str(cfg, "key"),
            expected=_str_map(cfg, "expected"),
            options=_str_map(cfg, "options", required=False),
        ),
    )
    registry.register(
        "expect_secret_absent",
        lambda cfg, w: ExpectSecretAbsent(
            client=_require(w, "secrets"),
            store=_component(cfg, w, key="store"),
            key=_str(cfg, "key"),
            options=_str_map(cfg, "options", required=False),
        ),
    )
    registry.register(
        "expect_secret_stable",
        lambda cfg, w: ExpectSecretStable(
            client=_require(w, "secrets"),
            store=_component(cfg, w, key="store"),
            key=_str(cfg, "key"),
        ),
    )
    registry.register(
        "expect_bulk_secret",
        lambda cfg, w: ExpectBulkSecret(
            client=_require(w, "secrets"),
            store=_component(cfg, w, key="store"),
            required=tuple(str(name) for name in cfg.get("required", []) or []),
        ),
    )

    service_port = config.fault_injection.service_port
    registry.register(
        "interrupt_network",
        lambda cfg, w: InterruptNetwork(
            injector=_require(w, "fault_injector"),
            port=str(cfg.get("port", service_port)),
            duration=timedelta(seconds=float(cfg.get("seconds", timings.network_instability))),
        ),
    )
    registry.register(
        "cut_network",
        lambda cfg, w: CutNetwork(injector=_require(w, "fault_injector"), port=str(cfg.get("port", service_port))),
    )
    registry.register(
        "restore_network",
        lambda cfg, w: RestoreNetwork(injector=_require(w, "fault_injector"), port=str(cfg.get("port", service_port))),
    )

    registry.register(
        "expect_init_failure_logged",
        lambda cfg, w: ExpectInitFailureLogged(
            capture=_require(w, "log_capture"),
            component=_component(cfg, w),
            required=tuple(str(item) for item in cfg.get("required", []) or []),
        ),
    )
    registry.register(
        "expect_no_init_failure_logged",
        lambda cfg, w: ExpectNoInitFailureLogged(capture=_require(w, "log_capture"), component=_component(cfg, w)),
    )

    return registry


def _require(wiring: dict[str, object], key: str) -> Any:
    # Wiring must provide required dependencies; raise KeyError to fail fast.
    if key not in wiring:
        raise KeyError(f"Missing wiring dependency: {key}")
    return wiring[key]


def _require_cfg(cfg: dict[str, object], key: str) -> object:
    if key not in cfg:
        raise ValueError(f"Missing step config key: {key}")
    return cfg[key]


def _str(cfg: dict[str, object], key: str) -> str:
    value = _require_cfg(cfg, key)
    if not isinstance(value, str) or not value:
        raise ValueError(f"Step config '{key}' must be a non-empty string")
    return value


def _str_map(cfg: dict[str, object], key: str, *, required: bool = True) -> dict[str, str]:
    if key not in cfg and not required:
        return {}
    value = _require_cfg(cfg, key)
    if not isinstance(value, dict):
        raise ValueError(f"Step config '{key}' must be a mapping")
    return {str(k): str(v) for k, v in value.items()}


def _component(cfg: dict[str, object], wiring: dict[str, object], *, key: str = "component") -> str:
    # Steps target the scenario's component unless the declaration names another one.
    if key in cfg:
        return _str(cfg, key)
    return str(_require(wiring, "component_name"))

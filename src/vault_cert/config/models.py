from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Config models map the harness YAML sections to typed structures.


class StoreServerConfig(BaseModel):
    # docker compose project that runs the store server and seeds the test secrets.
    model_config = ConfigDict(extra="forbid")
    project: str = "hashicorp-vault"
    compose_file: str
    docker: str = "docker"


class SidecarConfig(BaseModel):
    # daprd launch parameters; the component resources path comes from each scenario.
    model_config = ConfigDict(extra="forbid")
    app_id: str = "hashicorp-vault-sidecar"
    binary: str = "daprd"
    log_level: str = "info"
    resources_flag: str = "--resources-path"
    extra_args: list[str] = Field(default_factory=list)
    runtime_logger: str = "dapr.runtime"
    stop_timeout: float = 10.0


class FaultInjectionConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    command_prefix: list[str] = Field(default_factory=list)
    iptables: str = "iptables"
    service_port: str = "8200"


class TimingsConfig(BaseModel):
    # Fixed waits used by the catalog; seconds.
    model_config = ConfigDict(extra="forbid")
    server_start_wait: float = Field(default=5.0, ge=0)
    component_load_wait: float = Field(default=5.0, ge=0)
    network_instability: float = Field(default=60.0, ge=0)
    recovery_wait: float | None = Field(default=None, ge=0)
    flow_timeout: float | None = Field(default=None, gt=0)

    @property
    def effective_recovery_wait(self) -> float:
        # Default recovery wait is a quarter of the instability window.
        if self.recovery_wait is not None:
            return self.recovery_wait
        return self.network_instability / 4

    @model_validator(mode="after")
    def _recovery_shorter_than_window(self) -> TimingsConfig:
        if self.recovery_wait is not None and self.recovery_wait >= self.network_instability > 0:
            raise ValueError("timings.recovery_wait must be shorter than timings.network_instability")
        return self


class ReportConfig(BaseModel):
    # Report sink selector; jsonl requires a path.
    model_config = ConfigDict(extra="forbid")
    kind: Literal["stdout", "jsonl", "none"] = "none"
    path: str | None = None

    @model_validator(mode="after")
    def _require_path(self) -> ReportConfig:
        if self.kind == "jsonl" and not self.path:
            raise ValueError("report.path is required when kind is 'jsonl'")
        return self


class StepDecl(BaseModel):
    # One step declaration: registry kind, display label, kind-specific config.
    model_config = ConfigDict(extra="forbid")
    kind: str
    label: str | None = None
    config: dict[str, Any] = Field(default_factory=dict)

    def as_mapping(self) -> dict[str, object]:
        return {"kind": self.kind, "label": self.label or self.kind, "config": self.config}


class ScenarioDecl(BaseModel):
    # A named scenario: which component resources to load and which steps to run.
    model_config = ConfigDict(extra="forbid")
    name: str
    description: str
    component_path: str
    compose_file: str | None = None
    capture_logs: bool = False
    steps: list[StepDecl]

    @model_validator(mode="after")
    def _require_steps(self) -> ScenarioDecl:
        if not self.steps:
            raise ValueError(f"scenario '{self.name}' has no steps")
        return self


class HarnessConfig(BaseModel):
    # HarnessConfig is the top-level typed view of the harness YAML.
    model_config = ConfigDict(extra="forbid")
    version: int = 1
    store_server: StoreServerConfig
    sidecar: SidecarConfig = Field(default_factory=SidecarConfig)
    fault_injection: FaultInjectionConfig = Field(default_factory=FaultInjectionConfig)
    timings: TimingsConfig = Field(default_factory=TimingsConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    components_root: str | None = None
    scenarios: list[str] = Field(default_factory=list)
    extra_scenarios: list[ScenarioDecl] = Field(default_factory=list)

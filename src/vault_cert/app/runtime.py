from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from certflow.config.loader import ConfigError
from certflow.kernel.context import ContextFactory
from certflow.kernel.flow import Flow
from certflow.kernel.records import FlowReport
from certflow.kernel.runner import FlowRunner
from certflow.kernel.scenario_builder import ScenarioBuilder
from certflow.observability.log_capture import LogCaptureHarness
from certflow.observability.report_sinks import JsonlReportSink, ReportSink, StdoutReportSink
from vault_cert.adapters.dapr_http import DaprMetadataClient, DaprSecretClient, base_url_for_port
from vault_cert.adapters.fault_injector import IptablesFaultInjector
from vault_cert.adapters.ports import allocate_sidecar_ports
from vault_cert.adapters.sidecar import DaprdSidecar
from vault_cert.adapters.store_server import ComposeStoreServer
from vault_cert.config.component import VAULT_COMPONENT_TYPE, ComponentResource, load_component_resource, vault_metadata
from vault_cert.config.models import HarnessConfig, ScenarioDecl
from vault_cert.domain.capabilities import Capability
from vault_cert.domain.models import Ports
from vault_cert.ports.fault_injector import FaultInjector
from vault_cert.ports.metadata_client import MetadataClient
from vault_cert.ports.secret_client import SecretClient
from vault_cert.ports.sidecar import Sidecar
from vault_cert.ports.store_server import StoreServer
from vault_cert.usecases.wiring import build_step_registry

logger = logging.getLogger(__name__)


def default_components_root() -> Path:
    # Component resources ship inside the package.
    return Path(__file__).resolve().parents[1] / "components"


@dataclass(slots=True)
class Fixture:
    # Everything one scenario runs against; allocated fresh per scenario and never shared.
    ports: Ports
    components_path: Path
    component_name: str
    store_server: StoreServer
    sidecar: Sidecar
    metadata: MetadataClient
    secrets: SecretClient
    fault_injector: FaultInjector

    def wiring(self, log_capture: LogCaptureHarness) -> dict[str, object]:
        return {
            "ports": self.ports,
            "components_path": self.components_path,
            "component_name": self.component_name,
            "store_server": self.store_server,
            "sidecar": self.sidecar,
            "metadata": self.metadata,
            "secrets": self.secrets,
            "fault_injector": self.fault_injector,
            "log_capture": log_capture,
        }

    def release(self) -> None:
        # Driver-level safety net after a failed flow; the runner itself never unwinds.
        if self.sidecar.is_running():
            logger.warning("sidecar still running after flow; stopping it")
            self.sidecar.stop()
        for client in (self.metadata, self.secrets):
            close = getattr(client, "close", None)
            if callable(close):
                close()


def components_root(config: HarnessConfig) -> Path:
    return Path(config.components_root) if config.components_root else default_components_root()


def log_component_diagnostics(resource: ComponentResource) -> None:
    # What the component under test is expected to do; the runtime alone decides whether it loads.
    if resource.spec.type != VAULT_COMPONENT_TYPE:
        logger.debug("component %s is %s; no vault diagnostics", resource.name, resource.spec.type)
        return
    meta = vault_metadata(resource)
    capability = Capability.MULTIPLE_KEY_VALUES_PER_SECRET.value if meta.advertises_multiple_key_values else "none"
    logger.debug(
        "component %s: vaultAddr=%s enginePath=%s prefix=%s expected capability=%s",
        resource.name,
        meta.vault_addr,
        meta.engine_path,
        meta.vault_kv_prefix if meta.vault_kv_use_prefix else "-",
        capability,
    )
    token_error = meta.token_config_error()
    if token_error is not None:
        logger.debug("component %s is expected to fail initialization: %s", resource.name, token_error)


def build_fixture(config: HarnessConfig, scenario: ScenarioDecl) -> Fixture:
    root = components_root(config)
    components_path = root / scenario.component_path
    resource = load_component_resource(components_path)
    log_component_diagnostics(resource)

    compose_file = Path(config.store_server.compose_file)
    if scenario.compose_file:
        compose_file = root / scenario.compose_file

    ports = allocate_sidecar_ports()
    base_url = base_url_for_port(ports.http)
    return Fixture(
        ports=ports,
        components_path=components_path,
        component_name=resource.name,
        store_server=ComposeStoreServer(
            project=config.store_server.project,
            compose_file=compose_file,
            docker=config.store_server.docker,
        ),
        sidecar=DaprdSidecar(
            app_id=config.sidecar.app_id,
            binary=config.sidecar.binary,
            log_level=config.sidecar.log_level,
            resources_flag=config.sidecar.resources_flag,
            extra_args=config.sidecar.extra_args,
            runtime_logger=config.sidecar.runtime_logger,
            stop_timeout=config.sidecar.stop_timeout,
        ),
        metadata=DaprMetadataClient(base_url=base_url),
        secrets=DaprSecretClient(base_url=base_url),
        fault_injector=IptablesFaultInjector(
            command_prefix=config.fault_injection.command_prefix,
            iptables=config.fault_injection.iptables,
        ),
    )


def build_log_capture(config: HarnessConfig) -> LogCaptureHarness:
    return LogCaptureHarness(logger_name=config.sidecar.runtime_logger)


def build_report_sink(config: HarnessConfig) -> ReportSink | None:
    if config.report.kind == "stdout":
        return StdoutReportSink()
    if config.report.kind == "jsonl":
        if config.report.path is None:
            raise ConfigError("report.path is required for jsonl reports")
        return JsonlReportSink(path=Path(config.report.path))
    return None


def build_runner(
    config: HarnessConfig,
    *,
    log_capture: LogCaptureHarness,
    report_sink: ReportSink | None = None,
) -> FlowRunner:
    return FlowRunner(
        context_factory=ContextFactory(timeout=config.timings.flow_timeout),
        report_sink=report_sink,
        log_capture=log_capture,
    )


def build_flow(
    config: HarnessConfig,
    scenario: ScenarioDecl,
    fixture: Fixture,
    log_capture: LogCaptureHarness,
) -> Flow:
    registry = build_step_registry(config)
    return ScenarioBuilder(registry).build(
        description=scenario.description,
        steps=[step.as_mapping() for step in scenario.steps],
        wiring=fixture.wiring(log_capture),
        capture_logs=scenario.capture_logs,
    )


def run_scenario(
    config: HarnessConfig,
    scenario: ScenarioDecl,
    *,
    fixture: Fixture,
    runner: FlowRunner,
) -> FlowReport:
    # Raises StepFailure on the first failing step; the fixture is released either way.
    if runner.log_capture is None:
        raise ValueError("Runner must be built with a log capture harness")
    try:
        flow = build_flow(config, scenario, fixture, runner.log_capture)
        logger.info("scenario %s: %s", scenario.name, scenario.description)
        return runner.run(flow)
    finally:
        fixture.release()

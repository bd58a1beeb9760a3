from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

import pytest

from vault_cert.app.runtime import Fixture, default_components_root
from vault_cert.config.component import load_component_resource, vault_metadata
from vault_cert.config.models import HarnessConfig, ScenarioDecl
from vault_cert.domain.capabilities import Capability
from vault_cert.domain.errors import FixtureError, SecretRetrievalError
from vault_cert.domain.models import ComponentRecord, FaultWindow, Ports

ROOT_TOKEN = "vault-dev-root-token-id"

# Secrets seeded by the store server's compose project, keyed by (engine, prefix, name).
SEEDED: dict[tuple[str, str, str], dict[str, str]] = {
    ("secret", "dapr", "secondsecret"): {"secondsecret": "efgh"},
    ("secret", "dapr", "multiplekeyvaluessecret"): {"first": "1", "second": "2", "third": "3"},
    ("secret", "alternativePrefix", "secretUnderAlternativePrefix"): {"altPrefixKey": "altPrefixValue"},
    ("secret", "", "secretWithNoPrefix"): {"noPrefixKey": "noProblem"},
    ("customSecretPath", "dapr", "secretUnderCustomPath"): {"the": "trick", "was": "the", "path": "parameter"},
}


@dataclass
class FakeVaultServer:
    # Stand-in for the compose project: one address, optionally behind a self-signed certificate.
    address: str = "http://127.0.0.1:8200"
    self_signed: bool = False
    running: bool = False
    reachable: bool = True
    starts: int = 0

    def start(self) -> None:
        self.running = True
        self.starts += 1

    def stop(self) -> None:
        self.running = False


@dataclass
class FakeSidecar:
    # Loads the component resource the way the runtime would and logs init failures to dapr.runtime.
    server: FakeVaultServer
    component: dict[str, object] | None = None
    running: bool = False

    def start(self, *, components_path: Path, ports: Ports) -> None:
        if self.running:
            raise FixtureError("already running")
        resource = load_component_resource(components_path)
        meta = vault_metadata(resource)
        error = meta.token_config_error()
        token = meta.vault_token
        if error is None and meta.vault_token_mount_path:
            token_file = components_path / meta.vault_token_mount_path
            if not token_file.is_file():
                error = f"couldn't read vault token from mount path {meta.vault_token_mount_path}"
            else:
                token = token_file.read_text(encoding="utf-8").strip()
        if error is not None:
            logging.getLogger("dapr.runtime").warning(
                "error initializing component %s: [INIT_COMPONENT_FAILURE]: initialization error occurred for %s "
                "(secretstores.hashicorp.vault/v1): %s",
                resource.name,
                resource.name,
                error,
            )
        self.component = {"name": resource.name, "meta": meta, "token": token, "init_ok": error is None}
        self.running = True

    def stop(self) -> None:
        self.running = False

    def is_running(self) -> bool:
        return self.running


@dataclass
class FakeRuntimeApi:
    # Answers metadata and secret calls from the loaded component and the fake server state.
    sidecar: FakeSidecar
    calls: list[tuple[str, str]] = field(default_factory=list)

    def list_components(self) -> list[ComponentRecord]:
        component = self.sidecar.component
        if not self.sidecar.running or component is None:
            return []
        meta = component["meta"]
        caps = {Capability.MULTIPLE_KEY_VALUES_PER_SECRET.value} if meta.advertises_multiple_key_values else set()
        return [
            ComponentRecord(
                name=str(component["name"]),
                type="secretstores.hashicorp.vault",
                capabilities=frozenset(caps),
            )
        ]

    def get_secret(self, store: str, key: str, options: Mapping[str, str] | None = None) -> dict[str, str]:
        self.calls.append((store, key))
        meta = self._usable_meta(store)
        prefix = meta.vault_kv_prefix if meta.vault_kv_use_prefix else ""
        values = SEEDED.get((meta.engine_path, prefix, key))
        if values is None:
            raise SecretRetrievalError(f"secret {key} not found", kind="not_found", status=500)
        if meta.vault_value_type == "text":
            return {key: json.dumps(values, separators=(",", ":"))}
        return dict(values)

    def get_bulk_secret(self, store: str, options: Mapping[str, str] | None = None) -> dict[str, dict[str, str]]:
        meta = self._usable_meta(store)
        prefix = meta.vault_kv_prefix if meta.vault_kv_use_prefix else ""
        return {
            name: dict(values)
            for (engine, p, name), values in SEEDED.items()
            if engine == meta.engine_path and p == prefix
        }

    def _usable_meta(self, store: str):
        component = self.sidecar.component
        server = self.sidecar.server
        if not self.sidecar.running or component is None or component["name"] != store:
            raise SecretRetrievalError(f"secret store {store} not found", status=400)
        meta = component["meta"]
        if not component["init_ok"]:
            raise SecretRetrievalError(f"secret store {store} failed to initialize", status=500)
        if not server.running or not server.reachable or meta.vault_addr != server.address:
            raise SecretRetrievalError("connection refused", kind="unreachable", status=500)
        if server.self_signed and not meta.skip_verify:
            raise SecretRetrievalError("x509: certificate signed by unknown authority", status=500)
        if component["token"] != ROOT_TOKEN:
            raise SecretRetrievalError("permission denied", status=500)
        return meta


@dataclass
class FakeFaultInjector:
    server: FakeVaultServer
    windows: list[FaultWindow] = field(default_factory=list)

    def interrupt(self, port: str, duration: timedelta) -> FaultWindow:
        self.cut(port)
        try:
            window = FaultWindow(target_port=port, duration=duration)
            self.windows.append(window)
        finally:
            self.restore(port)
        return window

    def cut(self, port: str) -> None:
        self.server.reachable = False

    def restore(self, port: str) -> None:
        self.server.reachable = True


def _server_for(scenario: ScenarioDecl) -> FakeVaultServer:
    # Compose overrides in the catalog stand up TLS servers with self-signed certificates.
    compose = scenario.compose_file or ""
    if "nonStdPort" in compose:
        return FakeVaultServer(address="https://127.0.0.1:11200", self_signed=True)
    if "vaultAddr/missing" in compose:
        return FakeVaultServer(address="https://127.0.0.1:8200", self_signed=True)
    return FakeVaultServer()


@pytest.fixture
def harness_config() -> HarnessConfig:
    return HarnessConfig.model_validate(
        {
            "store_server": {"compose_file": "docker-compose-hashicorp-vault.yml"},
            "timings": {
                "server_start_wait": 0,
                "component_load_wait": 0,
                "network_instability": 0,
                "recovery_wait": 0,
            },
        }
    )


@pytest.fixture
def fake_fixture_builder() -> Callable[[HarnessConfig, ScenarioDecl], Fixture]:
    def build(config: HarnessConfig, scenario: ScenarioDecl) -> Fixture:
        components_path = default_components_root() / scenario.component_path
        server = _server_for(scenario)
        sidecar = FakeSidecar(server=server)
        api = FakeRuntimeApi(sidecar=sidecar)
        return Fixture(
            ports=Ports(grpc=50001, http=3500),
            components_path=components_path,
            component_name=load_component_resource(components_path).name,
            store_server=server,
            sidecar=sidecar,
            metadata=api,
            secrets=api,
            fault_injector=FakeFaultInjector(server=server),
        )

    return build

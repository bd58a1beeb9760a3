from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from certflow.kernel.context import Context
from vault_cert.domain.models import Ports
from vault_cert.ports.sidecar import Sidecar
from vault_cert.ports.store_server import StoreServer


@dataclass(frozen=True, slots=True)
class StartStoreServer:
    server: StoreServer

    def execute(self, ctx: Context) -> None:
        self.server.start()


@dataclass(frozen=True, slots=True)
class StopStoreServer:
    server: StoreServer

    def execute(self, ctx: Context) -> None:
        self.server.stop()


@dataclass(frozen=True, slots=True)
class StartSidecar:
    # Loads the component resources found under components_path on freshly allocated ports.
    sidecar: Sidecar
    components_path: Path
    ports: Ports

    def execute(self, ctx: Context) -> None:
        ctx.log("sidecar ports: grpc=%d http=%d", self.ports.grpc, self.ports.http)
        self.sidecar.start(components_path=self.components_path, ports=self.ports)


@dataclass(frozen=True, slots=True)
class StopSidecar:
    sidecar: Sidecar

    def execute(self, ctx: Context) -> None:
        self.sidecar.stop()

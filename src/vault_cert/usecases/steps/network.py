from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from certflow.kernel.context import Context
from vault_cert.ports.fault_injector import FaultInjector


@dataclass(frozen=True, slots=True)
class InterruptNetwork:
    # Blocks for the whole window; connectivity is back when execute returns.
    injector: FaultInjector
    port: str
    duration: timedelta

    def execute(self, ctx: Context) -> None:
        window = self.injector.interrupt(self.port, self.duration)
        ctx.note(f"port {window.target_port} interrupted for {window.seconds:.0f}s")


@dataclass(frozen=True, slots=True)
class CutNetwork:
    injector: FaultInjector
    port: str

    def execute(self, ctx: Context) -> None:
        self.injector.cut(self.port)


@dataclass(frozen=True, slots=True)
class RestoreNetwork:
    injector: FaultInjector
    port: str

    def execute(self, ctx: Context) -> None:
        self.injector.restore(self.port)

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta


@dataclass(frozen=True, slots=True)
class ComponentRecord:
    # One registered component as reported by a single metadata query; never cached.
    name: str
    type: str = ""
    version: str = ""
    capabilities: frozenset[str] = field(default_factory=frozenset)

    def has(self, capability: str) -> bool:
        return capability in self.capabilities


@dataclass(frozen=True, slots=True)
class FaultWindow:
    # A network interruption against one service port; closure is trusted to elapsed time.
    target_port: str
    duration: timedelta

    def __post_init__(self) -> None:
        if not self.target_port:
            raise ValueError("FaultWindow.target_port must be non-empty")
        if self.duration < timedelta(0):
            raise ValueError("FaultWindow.duration must not be negative")

    @property
    def seconds(self) -> float:
        return self.duration.total_seconds()


@dataclass(frozen=True, slots=True)
class Ports:
    # Freshly allocated sidecar ports for one fixture.
    grpc: int
    http: int

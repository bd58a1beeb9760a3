from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from vault_cert.domain.models import Ports


# Sidecar port launches the hosting runtime that loads the component under test.
@runtime_checkable
class Sidecar(Protocol):
    def start(self, *, components_path: Path, ports: Ports) -> None:
        """Start the runtime with the given component resources and ports."""
        raise NotImplementedError("Sidecar is a port; use a concrete adapter.")

    def stop(self) -> None:
        """Stop the runtime; a no-op when it is not running."""
        raise NotImplementedError("Sidecar is a port; use a concrete adapter.")

    def is_running(self) -> bool:
        raise NotImplementedError("Sidecar is a port; use a concrete adapter.")

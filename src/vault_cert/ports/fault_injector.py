from __future__ import annotations

from datetime import timedelta
from typing import Protocol, runtime_checkable

from vault_cert.domain.models import FaultWindow


# FaultInjector port suspends and restores network reachability of one service port.
@runtime_checkable
class FaultInjector(Protocol):
    def interrupt(self, port: str, duration: timedelta) -> FaultWindow:
        """Block until ``duration`` has elapsed and connectivity is restored."""
        raise NotImplementedError("FaultInjector is a port; use a concrete adapter.")

    def cut(self, port: str) -> None:
        """Start an interruption without waiting."""
        raise NotImplementedError("FaultInjector is a port; use a concrete adapter.")

    def restore(self, port: str) -> None:
        """End an interruption started with cut()."""
        raise NotImplementedError("FaultInjector is a port; use a concrete adapter.")

from __future__ import annotations

from typing import Protocol, runtime_checkable


# StoreServer port starts and stops the secret-store server backing one fixture.
@runtime_checkable
class StoreServer(Protocol):
    def start(self) -> None:
        """Bring the server up (detached)."""
        raise NotImplementedError("StoreServer is a port; use a concrete adapter.")

    def stop(self) -> None:
        """Tear the server down."""
        raise NotImplementedError("StoreServer is a port; use a concrete adapter.")

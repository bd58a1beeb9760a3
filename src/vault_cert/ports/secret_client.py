from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable


# SecretClient port covers the read-only secret retrieval contract of a named store.
@runtime_checkable
class SecretClient(Protocol):
    def get_secret(self, store: str, key: str, options: Mapping[str, str] | None = None) -> dict[str, str]:
        """Return the key/value mapping of one secret; raise SecretRetrievalError otherwise."""
        # A key the store does not expose is an error, never an empty mapping.
        raise NotImplementedError("SecretClient is a port; use a concrete adapter.")

    def get_bulk_secret(
        self, store: str, options: Mapping[str, str] | None = None
    ) -> dict[str, dict[str, str]]:
        """Return every secret of the store keyed by secret name."""
        raise NotImplementedError("SecretClient is a port; use a concrete adapter.")

from __future__ import annotations

from typing import Protocol, runtime_checkable

from vault_cert.domain.models import ComponentRecord


# MetadataClient port lists the components currently registered in the hosting runtime.
@runtime_checkable
class MetadataClient(Protocol):
    def list_components(self) -> list[ComponentRecord]:
        """Return the registered components; raise MetadataQueryError on failure."""
        # Port contract has no implementation; calling it directly is a wiring error.
        raise NotImplementedError("MetadataClient is a port; use a concrete adapter.")


def find_component(client: MetadataClient, name: str) -> ComponentRecord | None:
    # Exact name match only; "my-store" must not match "my-store-2".
    for record in client.list_components():
        if record.name == name:
            return record
    return None


def is_registered(client: MetadataClient, name: str) -> bool:
    return find_component(client, name) is not None


def has_capability(client: MetadataClient, name: str, capability: str) -> bool:
    record = find_component(client, name)
    return record is not None and record.has(capability)

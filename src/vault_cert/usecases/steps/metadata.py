from __future__ import annotations

from dataclasses import dataclass

from certflow.kernel.context import Context
from vault_cert.ports.metadata_client import MetadataClient
from vault_cert.usecases.assertions import expect_capability, expect_component_absent, expect_component_present


@dataclass(frozen=True, slots=True)
class ExpectComponentRegistered:
    client: MetadataClient
    component: str
    registered: bool = True

    def execute(self, ctx: Context) -> None:
        if self.registered:
            expect_component_present(self.client, self.component)
        else:
            expect_component_absent(self.client, self.component)


@dataclass(frozen=True, slots=True)
class ExpectCapability:
    client: MetadataClient
    component: str
    capability: str
    present: bool = True

    def execute(self, ctx: Context) -> None:
        expect_capability(self.client, self.component, self.capability, self.present)

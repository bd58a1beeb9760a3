from __future__ import annotations

from dataclasses import dataclass, field

from certflow.kernel.context import Context
from vault_cert.ports.secret_client import SecretClient
from vault_cert.usecases.assertions import (
    expect_bulk_secret_contains,
    expect_secret_absent,
    expect_secret_equals,
    expect_secret_stable,
)


@dataclass(frozen=True, slots=True)
class ExpectSecretEquals:
    client: SecretClient
    store: str
    key: str
    expected: dict[str, str]
    options: dict[str, str] = field(default_factory=dict)

    def execute(self, ctx: Context) -> None:
        expect_secret_equals(self.client, self.store, self.key, self.expected, self.options)


@dataclass(frozen=True, slots=True)
class ExpectSecretAbsent:
    client: SecretClient
    store: str
    key: str
    options: dict[str, str] = field(default_factory=dict)

    def execute(self, ctx: Context) -> None:
        error = expect_secret_absent(self.client, self.store, self.key, self.options)
        ctx.logger.debug("retrieval of '%s' failed as expected: %s", self.key, error)


@dataclass(frozen=True, slots=True)
class ExpectSecretStable:
    client: SecretClient
    store: str
    key: str

    def execute(self, ctx: Context) -> None:
        expect_secret_stable(self.client, self.store, self.key)


@dataclass(frozen=True, slots=True)
class ExpectBulkSecret:
    # Lists every secret (name and keys) visible through the bulk call.
    client: SecretClient
    store: str
    required: tuple[str, ...] = ()

    def execute(self, ctx: Context) -> None:
        result = expect_bulk_secret_contains(self.client, self.store, self.required)
        for name, values in sorted(result.items()):
            ctx.logger.debug("bulk secret %s", name)
            for key in sorted(values):
                ctx.logger.debug("\t%s", key)
        ctx.note(f"bulk secrets in '{self.store}': {', '.join(sorted(result))}")

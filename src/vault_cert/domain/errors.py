from __future__ import annotations

from typing import Literal

RetrievalErrorKind = Literal["not_found", "unreachable", "error", "malformed"]


class SecretRetrievalError(RuntimeError):
    # Umbrella for every failed secret call; assertions only care that it is an error.
    def __init__(self, message: str, *, kind: RetrievalErrorKind = "error", status: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.status = status


class MetadataQueryError(RuntimeError):
    pass


class CertificationAssertionError(AssertionError):
    pass


class FixtureError(RuntimeError):
    # Raised by store server, sidecar or fault injector adapters when an external command fails.
    pass

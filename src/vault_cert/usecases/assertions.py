"""Checks over the metadata, secret and log-capture adapters.

Every check either returns normally or raises CertificationAssertionError
with a message naming what was expected and what was observed. Adapter
errors that the check does not expect (e.g. a metadata query failure) are
not translated and propagate as-is.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from certflow.observability.log_capture import INIT_FAILURE_MARKER, CaptureHandle, LogCaptureHarness
from vault_cert.domain.errors import CertificationAssertionError, SecretRetrievalError
from vault_cert.ports.metadata_client import MetadataClient, find_component
from vault_cert.ports.secret_client import SecretClient


def expect_secret_equals(
    client: SecretClient,
    store: str,
    key: str,
    expected: Mapping[str, str],
    options: Mapping[str, str] | None = None,
) -> dict[str, str]:
    # Subset containment: every expected pair must match exactly; extra keys are fine.
    try:
        actual = client.get_secret(store, key, options)
    except SecretRetrievalError as exc:
        raise CertificationAssertionError(
            f"Expected secret '{key}' from '{store}' but retrieval failed: {exc}"
        ) from exc
    if actual is None:
        raise CertificationAssertionError(f"Secret '{key}' from '{store}' returned no mapping")

    missing = sorted(k for k in expected if k not in actual)
    if missing:
        raise CertificationAssertionError(
            f"Secret '{key}' from '{store}' is missing keys {missing}; got keys {sorted(actual)}"
        )
    wrong = {k: (v, actual[k]) for k, v in expected.items() if actual[k] != v}
    if wrong:
        details = ", ".join(f"{k}: expected {exp!r}, got {got!r}" for k, (exp, got) in sorted(wrong.items()))
        raise CertificationAssertionError(f"Secret '{key}' from '{store}' has wrong values: {details}")
    return actual


def expect_secret_absent(
    client: SecretClient,
    store: str,
    key: str,
    options: Mapping[str, str] | None = None,
) -> SecretRetrievalError:
    try:
        actual = client.get_secret(store, key, options)
    except SecretRetrievalError as exc:
        return exc
    raise CertificationAssertionError(
        f"Expected retrieval of '{key}' from '{store}' to fail, but it returned keys {sorted(actual or {})}"
    )


def expect_secret_stable(client: SecretClient, store: str, key: str) -> dict[str, str]:
    # Two reads with no state change in between must be identical.
    first = expect_secret_equals(client, store, key, {})
    second = expect_secret_equals(client, store, key, {})
    if first != second:
        raise CertificationAssertionError(f"Secret '{key}' from '{store}' changed between reads: {first} != {second}")
    return second


def expect_bulk_secret_contains(
    client: SecretClient,
    store: str,
    required_names: Iterable[str] = (),
) -> dict[str, dict[str, str]]:
    try:
        result = client.get_bulk_secret(store)
    except SecretRetrievalError as exc:
        raise CertificationAssertionError(f"Bulk retrieval from '{store}' failed: {exc}") from exc
    if not result:
        raise CertificationAssertionError(f"Bulk retrieval from '{store}' returned no secrets")
    missing = sorted(name for name in required_names if name not in result)
    if missing:
        raise CertificationAssertionError(
            f"Bulk retrieval from '{store}' is missing secrets {missing}; got {sorted(result)}"
        )
    return result


def expect_component_present(client: MetadataClient, name: str) -> None:
    if find_component(client, name) is None:
        raise CertificationAssertionError(f"Component '{name}' was expected to be registered but it is missing")


def expect_component_absent(client: MetadataClient, name: str) -> None:
    if find_component(client, name) is not None:
        raise CertificationAssertionError(f"Component '{name}' was expected to be missing but it is registered")


def expect_capability(client: MetadataClient, name: str, capability: str, expected_presence: bool) -> None:
    record = find_component(client, name)
    capabilities = record.capabilities if record is not None else frozenset()
    if expected_presence and not capabilities:
        raise CertificationAssertionError(f"Component '{name}' advertises no capabilities; expected '{capability}'")
    present = capability in capabilities
    if present != expected_presence:
        verb = "to advertise" if expected_presence else "not to advertise"
        raise CertificationAssertionError(
            f"Expected component '{name}' {verb} '{capability}'; capabilities: {sorted(capabilities)}"
        )


def expect_init_failure_logged(
    capture: LogCaptureHarness,
    handle: CaptureHandle,
    component_name: str,
    *required_substrings: str,
    marker: str = INIT_FAILURE_MARKER,
) -> str:
    line = capture.check_for_marker(handle, marker)
    if not line:
        raise CertificationAssertionError("Expected a component initialization error message but none was found")
    if component_name not in line:
        raise CertificationAssertionError(
            f"Expected component '{component_name}' to be mentioned in the initialization error: {line}"
        )
    for substring in required_substrings:
        if substring not in line:
            raise CertificationAssertionError(f"Expected '{substring}' in the initialization error: {line}")
    return line


def expect_no_init_failure_logged(
    capture: LogCaptureHarness,
    handle: CaptureHandle,
    component_name: str,
    marker: str = INIT_FAILURE_MARKER,
) -> None:
    for line in capture.lines(handle):
        if marker in line and component_name in line:
            raise CertificationAssertionError(
                f"Component '{component_name}' is mentioned in an initialization error: {line}"
            )

from __future__ import annotations

import logging

import pytest

from certflow.observability.log_capture import LogCaptureHarness
from vault_cert.domain.errors import CertificationAssertionError, MetadataQueryError, SecretRetrievalError
from vault_cert.domain.models import ComponentRecord
from vault_cert.usecases.assertions import (
    expect_bulk_secret_contains,
    expect_capability,
    expect_component_absent,
    expect_component_present,
    expect_init_failure_logged,
    expect_no_init_failure_logged,
    expect_secret_absent,
    expect_secret_equals,
    expect_secret_stable,
)

MULTI_KV = "MULTIPLE_KEY_VALUES_PER_SECRET"
LOGGER = "certflow.test.assertions"


class _Secrets:
    def __init__(self, secrets: dict[str, dict[str, str]]) -> None:
        self.secrets = secrets
        self.reads = 0

    def get_secret(self, store, key, options=None):
        self.reads += 1
        if key not in self.secrets:
            raise SecretRetrievalError(f"{key} not found", kind="not_found", status=204)
        return dict(self.secrets[key])

    def get_bulk_secret(self, store, options=None):
        return {name: dict(values) for name, values in self.secrets.items()}


class _Flaky(_Secrets):
    def get_secret(self, store, key, options=None):
        result = super().get_secret(store, key, options)
        result["read"] = str(self.reads)
        return result


class _Metadata:
    def __init__(self, *records: ComponentRecord) -> None:
        self.records = list(records)

    def list_components(self):
        return list(self.records)


class _BrokenMetadata:
    def list_components(self):
        raise MetadataQueryError("sidecar down")


def test_secret_equals_checks_subset() -> None:
    # Extra keys are fine; every expected pair must match.
    client = _Secrets({"multiplekeyvaluessecret": {"first": "1", "second": "2", "third": "3"}})
    actual = expect_secret_equals(client, "s", "multiplekeyvaluessecret", {"first": "1", "third": "3"})
    assert actual["second"] == "2"


def test_secret_equals_reports_wrong_value() -> None:
    client = _Secrets({"secondsecret": {"secondsecret": "wrong"}})
    with pytest.raises(CertificationAssertionError) as excinfo:
        expect_secret_equals(client, "s", "secondsecret", {"secondsecret": "efgh"})
    assert "expected 'efgh', got 'wrong'" in str(excinfo.value)


def test_secret_equals_reports_missing_key() -> None:
    client = _Secrets({"secondsecret": {"other": "x"}})
    with pytest.raises(CertificationAssertionError) as excinfo:
        expect_secret_equals(client, "s", "secondsecret", {"secondsecret": "efgh"})
    assert "missing keys ['secondsecret']" in str(excinfo.value)


def test_secret_equals_translates_retrieval_failure() -> None:
    with pytest.raises(CertificationAssertionError) as excinfo:
        expect_secret_equals(_Secrets({}), "s", "secondsecret", {"secondsecret": "efgh"})
    assert isinstance(excinfo.value.__cause__, SecretRetrievalError)


def test_secret_absent_accepts_any_retrieval_error() -> None:
    error = expect_secret_absent(_Secrets({}), "s", "this_secret_is_not_there")
    assert error.kind == "not_found"


def test_secret_absent_fails_when_secret_is_returned() -> None:
    with pytest.raises(CertificationAssertionError):
        expect_secret_absent(_Secrets({"k": {"k": "v"}}), "s", "k")


def test_secret_stable_detects_changes() -> None:
    assert expect_secret_stable(_Secrets({"k": {"k": "v"}}), "s", "k") == {"k": "v"}
    with pytest.raises(CertificationAssertionError):
        expect_secret_stable(_Flaky({"k": {"k": "v"}}), "s", "k")


def test_bulk_secret_requires_named_secrets() -> None:
    client = _Secrets({"secretUnderCustomPath": {"the": "trick"}})
    assert "secretUnderCustomPath" in expect_bulk_secret_contains(client, "s", ["secretUnderCustomPath"])
    with pytest.raises(CertificationAssertionError):
        expect_bulk_secret_contains(client, "s", ["missing"])
    with pytest.raises(CertificationAssertionError):
        expect_bulk_secret_contains(_Secrets({}), "s")


def test_component_presence() -> None:
    client = _Metadata(ComponentRecord(name="my-hashicorp-vault"))
    expect_component_present(client, "my-hashicorp-vault")
    expect_component_absent(client, "my-hashicorp-vault-2")
    with pytest.raises(CertificationAssertionError):
        expect_component_present(client, "my-hashicorp")
    with pytest.raises(CertificationAssertionError):
        expect_component_absent(client, "my-hashicorp-vault")


def test_metadata_errors_are_not_translated() -> None:
    # A failed metadata query is not the same as "component absent".
    with pytest.raises(MetadataQueryError):
        expect_component_absent(_BrokenMetadata(), "x")


def test_capability_presence_and_absence() -> None:
    with_cap = _Metadata(ComponentRecord(name="a", capabilities=frozenset({MULTI_KV})))
    without_cap = _Metadata(ComponentRecord(name="a", capabilities=frozenset({"OTHER"})))
    no_caps = _Metadata(ComponentRecord(name="a"))

    expect_capability(with_cap, "a", MULTI_KV, True)
    expect_capability(without_cap, "a", MULTI_KV, False)
    expect_capability(no_caps, "a", MULTI_KV, False)
    with pytest.raises(CertificationAssertionError):
        expect_capability(with_cap, "a", MULTI_KV, False)
    with pytest.raises(CertificationAssertionError) as excinfo:
        expect_capability(no_caps, "a", MULTI_KV, True)
    assert "advertises no capabilities" in str(excinfo.value)


def test_init_failure_logged_requires_component_and_substrings() -> None:
    harness = LogCaptureHarness(logger_name=LOGGER)
    log = logging.getLogger(LOGGER)
    with harness.begin() as handle:
        log.warning("[INIT_COMPONENT_FAILURE]: my-store: token mount path and token both set")
        line = expect_init_failure_logged(harness, handle, "my-store", "token mount path and token both set")
        assert "my-store" in line
        with pytest.raises(CertificationAssertionError):
            expect_init_failure_logged(harness, handle, "other-store")
        with pytest.raises(CertificationAssertionError):
            expect_init_failure_logged(harness, handle, "my-store", "token mount path and token not set")


def test_init_failure_logged_fails_without_marker() -> None:
    harness = LogCaptureHarness(logger_name=LOGGER)
    with harness.begin() as handle:
        with pytest.raises(CertificationAssertionError):
            expect_init_failure_logged(harness, handle, "my-store")


def test_no_init_failure_ignores_other_components() -> None:
    harness = LogCaptureHarness(logger_name=LOGGER)
    log = logging.getLogger(LOGGER)
    with harness.begin() as handle:
        log.warning("[INIT_COMPONENT_FAILURE]: other-store: broken")
        expect_no_init_failure_logged(harness, handle, "my-store")
        log.warning("[INIT_COMPONENT_FAILURE]: my-store: broken")
        with pytest.raises(CertificationAssertionError):
            expect_no_init_failure_logged(harness, handle, "my-store")

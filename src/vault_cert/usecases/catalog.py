"""Scenario catalog for the HashiCorp Vault secret store.

Each scenario names a component resources directory (relative to the
components root) and an ordered list of step declarations. Waits, the
instability window and the interrupted port come from the harness timings
through the step registry, so the catalog itself holds no numbers.

The test secrets are the ones seeded by the store server's compose project:

* ``secondsecret`` -> ``{"secondsecret": "efgh"}``
* ``multiplekeyvaluessecret`` -> ``{"first": "1", "second": "2", "third": "3"}``
* ``secretUnderAlternativePrefix`` (prefix ``alternativePrefix``)
* ``secretWithNoPrefix`` (no prefix)
* ``secretUnderCustomPath`` (engine path ``customSecretPath``)
"""

from __future__ import annotations

from vault_cert.config.models import ScenarioDecl, StepDecl
from vault_cert.domain.capabilities import Capability

MISSING_SECRET = "this_secret_is_not_there"
DEFAULT_SECRET = "multiplekeyvaluessecret"
DEFAULT_SECRET_VALUES = {"first": "1", "second": "2", "third": "3"}
COMPOSE_OVERRIDE = "docker-compose-hashicorp-vault.yml"

MULTI_KV = Capability.MULTIPLE_KEY_VALUES_PER_SECRET.value


def _step(kind: str, label: str, **config: object) -> StepDecl:
    return StepDecl(kind=kind, label=label, config=config)


def _boot() -> list[StepDecl]:
    return [
        _step("start_store_server", "Start HashiCorp Vault server"),
        _step("sleep", "Waiting for component to start...", timing="server_start"),
        _step("start_sidecar", "Start sidecar with the component under test"),
        _step("sleep", "Waiting for component to load...", timing="component_load"),
    ]


def _teardown() -> list[StepDecl]:
    return [
        _step("stop_sidecar", "Stop sidecar"),
        _step("stop_store_server", "Stop HashiCorp Vault server"),
    ]


def _registered(label: str = "Verify component is registered") -> StepDecl:
    return _step("expect_component_registered", label)


def _not_found(key: str, label: str) -> StepDecl:
    return _step("expect_secret_absent", label, key=key)


def _default_secret_found() -> StepDecl:
    return _step(
        "expect_secret",
        "Test that the default secret is found",
        key=DEFAULT_SECRET,
        expected=DEFAULT_SECRET_VALUES,
    )


def _component_not_working() -> StepDecl:
    # A failed component may still be listed by the registry; a known secret failing is the usable signal.
    return _not_found(DEFAULT_SECRET, "Verify component does not work")


def _no_init_errors() -> StepDecl:
    return _step("expect_no_init_failure_logged", "Verify no errors regarding component initialization")


def basic_secret_retrieval() -> ScenarioDecl:
    known = _step(
        "expect_secret",
        "Run basic secret retrieval test",
        key="secondsecret",
        expected={"secondsecret": "efgh"},
    )
    return ScenarioDecl(
        name="basic_secret_retrieval",
        description="Test component is up and we can retrieve some secrets",
        component_path="default",
        steps=[
            *_boot(),
            _registered(),
            known,
            _step("expect_secret_stable", "Verify repeated retrieval returns identical results", key="secondsecret"),
            _not_found(MISSING_SECRET, "Test retrieval of secret that does not exist"),
            _step("interrupt_network", "Interrupt network to the Vault server"),
            _step("sleep", "Wait for component to recover", timing="recovery"),
            known.model_copy(update={"label": "Run basic test again to verify reconnection occurred"}),
            *_teardown(),
        ],
    )


def multiple_kv_retrieval() -> ScenarioDecl:
    return ScenarioDecl(
        name="multiple_kv_retrieval",
        description="Test retrieving multiple key values from a secret",
        component_path="default",
        steps=[
            *_boot(),
            _registered(),
            _step(
                "expect_capability",
                "Verify component has support for multiple key-values under the same secret",
                capability=MULTI_KV,
                present=True,
            ),
            _step(
                "expect_secret",
                "Test retrieval of a secret with multiple key-values",
                key=DEFAULT_SECRET,
                expected=DEFAULT_SECRET_VALUES,
            ),
            _not_found(
                "secretUnderAlternativePrefix",
                "Test secret registered under a non-default vaultKVPrefix cannot be found",
            ),
            _not_found("secretWithNoPrefix", "Test secret registered with no prefix cannot be found"),
            *_teardown(),
        ],
    )


def vault_kv_prefix() -> ScenarioDecl:
    return ScenarioDecl(
        name="vault_kv_prefix",
        description="Test setting a non-default vaultKVPrefix value",
        component_path="vaultKVPrefix",
        steps=[
            *_boot(),
            _registered(),
            _step(
                "expect_capability",
                "Verify component has support for multiple key-values under the same secret",
                capability=MULTI_KV,
                present=True,
            ),
            _step(
                "expect_secret",
                "Test retrieval of a secret under a non-default vaultKVPrefix",
                key="secretUnderAlternativePrefix",
                expected={"altPrefixKey": "altPrefixValue"},
            ),
            _not_found("secretWithNoPrefix", "Test secret registered with no prefix cannot be found"),
            _not_found(DEFAULT_SECRET, "Test secret registered under the default vaultKVPrefix cannot be found"),
            *_teardown(),
        ],
    )


def vault_kv_use_prefix_false() -> ScenarioDecl:
    return ScenarioDecl(
        name="vault_kv_use_prefix_false",
        description="Test using an empty vaultKVPrefix value",
        component_path="vaultKVUsePrefixFalse",
        steps=[
            *_boot(),
            _registered(),
            _step(
                "expect_capability",
                "Verify component has support for multiple key-values under the same secret",
                capability=MULTI_KV,
                present=True,
            ),
            _step(
                "expect_secret",
                "Test retrieval of a secret registered with no prefix and assuming vaultKVUsePrefix=false",
                key="secretWithNoPrefix",
                expected={"noPrefixKey": "noProblem"},
            ),
            _not_found(DEFAULT_SECRET, "Test secret registered under the default vaultKVPrefix cannot be found"),
            _not_found(
                "secretUnderAlternativePrefix",
                "Test secret registered under a non-default vaultKVPrefix cannot be found",
            ),
            *_teardown(),
        ],
    )


def vault_value_type_text() -> ScenarioDecl:
    return ScenarioDecl(
        name="vault_value_type_text",
        description="Test setting vaultValueType=text should cause it to behave with single-value semantics",
        component_path="vaultValueTypeText",
        steps=[
            *_boot(),
            _registered(),
            _step(
                "expect_capability",
                "Verify component DOES NOT support multiple key-values under the same secret",
                capability=MULTI_KV,
                present=False,
            ),
            # One key named after the secret, holding the whole secret serialized as JSON text.
            _step(
                "expect_secret",
                "Test secret store presents name/value semantics for secrets",
                key="secondsecret",
                expected={"secondsecret": '{"secondsecret":"efgh"}'},
            ),
            _not_found(
                "secretUnderAlternativePrefix",
                "Test secret registered under a non-default vaultKVPrefix cannot be found",
            ),
            _not_found("secretWithNoPrefix", "Test secret registered with no prefix cannot be found"),
            *_teardown(),
        ],
    )


def _init_fails(name: str, description: str, component_path: str, *required: str) -> ScenarioDecl:
    return ScenarioDecl(
        name=name,
        description=description,
        component_path=component_path,
        capture_logs=True,
        steps=[
            *_boot(),
            _component_not_working(),
            _step(
                "expect_init_failure_logged",
                "Verify initialization error reported for component",
                required=list(required),
            ),
            # Known runtime inconsistency: the failed component is still listed as registered.
            _registered("Verify the failed component is still listed by the registry"),
            *_teardown(),
        ],
    )


def _init_succeeds_use_fails(
    name: str, description: str, component_path: str, compose_file: str | None = None
) -> ScenarioDecl:
    return ScenarioDecl(
        name=name,
        description=description,
        component_path=component_path,
        compose_file=compose_file,
        capture_logs=True,
        steps=[
            *_boot(),
            _registered(),
            _no_init_errors(),
            _component_not_working(),
            *_teardown(),
        ],
    )


def _succeeds(name: str, description: str, component_path: str, compose_file: str | None = None) -> ScenarioDecl:
    return ScenarioDecl(
        name=name,
        description=description,
        component_path=component_path,
        compose_file=compose_file,
        capture_logs=True,
        steps=[
            *_boot(),
            _registered(),
            _no_init_errors(),
            _default_secret_found(),
            *_teardown(),
        ],
    )


def token_and_token_mount_path() -> list[ScenarioDecl]:
    base = "vaultTokenAndTokenMountPath"
    return [
        _init_fails(
            "token_both_set",
            "Verify component initialization failure when BOTH vaultToken and vaultTokenMountPath are present",
            f"{base}/both",
            "token mount path and token both set",
        ),
        _init_fails(
            "token_neither_set",
            "Verify component initialization failure when NEITHER vaultToken nor vaultTokenMountPath are present",
            f"{base}/neither",
        ),
        _init_fails(
            "token_mount_path_broken",
            "Verify component initialization failure when vaultTokenPath points to a non-existing file",
            f"{base}/tokenMountPathPointsToBrokenPath",
        ),
        _init_succeeds_use_fails(
            "token_bad_value",
            "Verify failure when vaultToken value does not match our servers's value",
            f"{base}/badVaultToken",
        ),
        _succeeds(
            "token_mount_path_happy_case",
            "Verify success when vaultTokenPath points to an existing file matching the configured secret we have "
            "for our secret seeder",
            f"{base}/tokenMountPathHappyCase",
        ),
    ]


def vault_addr() -> list[ScenarioDecl]:
    base = "vaultAddr"
    return [
        _init_succeeds_use_fails(
            "vault_addr_wrong_address",
            "Verify initialization success but use failure when vaultAddr does not point to a valid vault server "
            "address",
            f"{base}/wrongAddress",
        ),
        _succeeds(
            "vault_addr_missing_skip_verify",
            "Verify success when vaultAddr is missing and skipVerify is true and vault is using a self-signed "
            "certificate",
            f"{base}/missing",
            compose_file=f"{base}/missing/{COMPOSE_OVERRIDE}",
        ),
        _succeeds(
            "vault_addr_non_std_port",
            "Verify success when vaultAddr points to a non-standard port",
            f"{base}/nonStdPort",
            compose_file=f"{base}/nonStdPort/{COMPOSE_OVERRIDE}",
        ),
        _init_succeeds_use_fails(
            "vault_addr_missing_skip_verify_false",
            "Verify initialization success but use failure when vaultAddr is missing and skipVerify is false and "
            "vault is using a self-signed certificate",
            f"{base}/missingSkipVerifyFalse",
            compose_file=f"{base}/missingSkipVerifyFalse/{COMPOSE_OVERRIDE}",
        ),
    ]


def engine_path() -> list[ScenarioDecl]:
    base = "enginePath"
    custom = ScenarioDecl(
        name="engine_path_custom_secrets_path",
        description="Verify success when we set enginePath to a non-std value",
        component_path=f"{base}/customSecretsPath",
        compose_file=f"{base}/customSecretsPath/{COMPOSE_OVERRIDE}",
        capture_logs=True,
        steps=[
            *_boot(),
            _registered(),
            _no_init_errors(),
            _step(
                "expect_bulk_secret",
                "Verify that the custom path has secrets under it",
                required=["secretUnderCustomPath"],
            ),
            _step(
                "expect_secret",
                "Verify that the custom path-specific secret is found",
                key="secretUnderCustomPath",
                expected={"the": "trick", "was": "the", "path": "parameter"},
            ),
            *_teardown(),
        ],
    )
    return [
        custom,
        _succeeds(
            "engine_path_secret",
            "Verify success when vaultEngine explicitly uses the secrets engine",
            f"{base}/secret",
        ),
    ]


def vault_catalog() -> list[ScenarioDecl]:
    return [
        basic_secret_retrieval(),
        multiple_kv_retrieval(),
        vault_kv_prefix(),
        vault_kv_use_prefix_false(),
        vault_value_type_text(),
        *token_and_token_mount_path(),
        *vault_addr(),
        *engine_path(),
    ]


def select_scenarios(catalog: list[ScenarioDecl], names: list[str]) -> list[ScenarioDecl]:
    # Empty selection means the whole catalog; unknown names fail fast.
    if not names:
        return list(catalog)
    by_name = {scenario.name: scenario for scenario in catalog}
    unknown = sorted(set(names) - set(by_name))
    if unknown:
        raise KeyError(f"Unknown scenarios: {unknown}")
    return [by_name[name] for name in names]

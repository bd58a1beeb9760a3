"""Read-only view of the component resources handed to the hosting runtime.

The harness never validates a component on the runtime's behalf; it only
needs the component name and, for diagnostics, a typed view of the
documented HashiCorp Vault metadata fields.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from certflow.config.loader import ConfigError

DEFAULT_VAULT_ADDR = "https://127.0.0.1:8200"
VAULT_COMPONENT_TYPE = "secretstores.hashicorp.vault"


class MetadataItem(BaseModel):
    model_config = ConfigDict(extra="ignore")
    name: str
    value: Any = None


class ComponentMeta(BaseModel):
    model_config = ConfigDict(extra="ignore")
    name: str


class ComponentSpec(BaseModel):
    model_config = ConfigDict(extra="ignore")
    type: str
    version: str = "v1"
    metadata: list[MetadataItem] = Field(default_factory=list)


class ComponentResource(BaseModel):
    # Mirrors the runtime's Component resource; unknown keys are the runtime's business.
    model_config = ConfigDict(extra="ignore")
    api_version: str = Field(default="dapr.io/v1alpha1", alias="apiVersion")
    kind: Literal["Component"]
    metadata: ComponentMeta
    spec: ComponentSpec

    @property
    def name(self) -> str:
        return self.metadata.name

    def metadata_map(self) -> dict[str, Any]:
        return {item.name: item.value for item in self.spec.metadata}


class VaultComponentMetadata(BaseModel):
    # Typed view of the documented vault fields; defaults follow the component's documented defaults.
    model_config = ConfigDict(extra="ignore", populate_by_name=True)
    vault_addr: str = Field(default=DEFAULT_VAULT_ADDR, alias="vaultAddr")
    vault_token: str | None = Field(default=None, alias="vaultToken")
    vault_token_mount_path: str | None = Field(default=None, alias="vaultTokenMountPath")
    vault_kv_prefix: str = Field(default="dapr", alias="vaultKVPrefix")
    vault_kv_use_prefix: bool = Field(default=True, alias="vaultKVUsePrefix")
    vault_value_type: Literal["map", "text"] = Field(
        default="map", validation_alias=AliasChoices("vaultValueType", "vault_value_type")
    )
    skip_verify: bool = Field(default=False, alias="skipVerify")
    engine_path: str = Field(default="secret", alias="enginePath")
    ca_cert: str | None = Field(default=None, alias="caCert")
    ca_path: str | None = Field(default=None, alias="caPath")
    ca_pem: str | None = Field(default=None, alias="caPem")

    @property
    def advertises_multiple_key_values(self) -> bool:
        # Text mode serializes the whole secret under one key named after it.
        return self.vault_value_type != "text"

    def token_config_error(self) -> str | None:
        # Exactly one of vaultToken / vaultTokenMountPath must be set.
        if self.vault_token and self.vault_token_mount_path:
            return "token mount path and token both set"
        if not self.vault_token and not self.vault_token_mount_path:
            return "token mount path and token not set"
        return None


def load_component_resource(path: Path) -> ComponentResource:
    """Load the single Component resource from a file or a resources directory."""
    files = [path] if path.is_file() else sorted([*path.glob("*.yaml"), *path.glob("*.yml")])
    components: list[ComponentResource] = []
    for file in files:
        try:
            documents = list(yaml.safe_load_all(file.read_text(encoding="utf-8")))
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {file}: {exc}") from exc
        for doc in documents:
            if isinstance(doc, dict) and doc.get("kind") == "Component":
                components.append(ComponentResource.model_validate(doc))
    if len(components) != 1:
        raise ConfigError(f"Expected exactly one Component resource under {path}, found {len(components)}")
    return components[0]


def vault_metadata(resource: ComponentResource) -> VaultComponentMetadata:
    if resource.spec.type != VAULT_COMPONENT_TYPE:
        raise ConfigError(f"Component '{resource.name}' is '{resource.spec.type}', not {VAULT_COMPONENT_TYPE}")
    return VaultComponentMetadata.model_validate(resource.metadata_map())

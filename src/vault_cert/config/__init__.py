from .component import (
    ComponentResource,
    VaultComponentMetadata,
    load_component_resource,
    vault_metadata,
)
from .loader import load_harness_config
from .models import HarnessConfig, ScenarioDecl, StepDecl

__all__ = [
    "ComponentResource",
    "HarnessConfig",
    "ScenarioDecl",
    "StepDecl",
    "VaultComponentMetadata",
    "load_component_resource",
    "load_harness_config",
    "vault_metadata",
]

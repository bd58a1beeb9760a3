from __future__ import annotations

from pathlib import Path

from certflow.config.loader import ConfigError, load_yaml_config
from vault_cert.config.models import HarnessConfig

# Keys holding filesystem paths; relative values are resolved against the config file's directory.
_PATH_KEYS: tuple[tuple[str, ...], ...] = (
    ("store_server", "compose_file"),
    ("components_root",),
    ("report", "path"),
)


def load_harness_config(path: Path) -> HarnessConfig:
    raw = load_yaml_config(path)
    base = path.resolve().parent
    for keys in _PATH_KEYS:
        _resolve_in_place(raw, keys, base)
    for idx, scenario in enumerate(raw.get("extra_scenarios") or []):
        if not isinstance(scenario, dict):
            raise ConfigError(f"extra_scenarios[{idx}] must be a mapping")
        _resolve_in_place(scenario, ("component_path",), base)
        _resolve_in_place(scenario, ("compose_file",), base)
    return HarnessConfig.model_validate(raw)


def _resolve_in_place(raw: dict[str, object], keys: tuple[str, ...], base: Path) -> None:
    node: object = raw
    for key in keys[:-1]:
        if not isinstance(node, dict):
            return
        node = node.get(key)
    if not isinstance(node, dict):
        return
    value = node.get(keys[-1])
    if isinstance(value, str) and value and not Path(value).is_absolute():
        node[keys[-1]] = str(base / value)

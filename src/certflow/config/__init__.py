from .loader import ConfigError, load_yaml_config

__all__ = ["ConfigError", "load_yaml_config"]

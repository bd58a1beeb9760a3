from .fault_injector import FaultInjector
from .metadata_client import MetadataClient, find_component, has_capability, is_registered
from .secret_client import SecretClient
from .sidecar import Sidecar
from .store_server import StoreServer

# Public port exports keep wiring explicit at composition time.
__all__ = [
    "FaultInjector",
    "MetadataClient",
    "SecretClient",
    "Sidecar",
    "StoreServer",
    "find_component",
    "has_capability",
    "is_registered",
]

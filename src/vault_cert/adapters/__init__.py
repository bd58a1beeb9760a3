from .dapr_http import DaprMetadataClient, DaprSecretClient
from .fault_injector import IptablesFaultInjector
from .ports import allocate_free_ports, allocate_sidecar_ports
from .sidecar import DaprdSidecar
from .store_server import ComposeStoreServer

# Public adapter exports are optional but make wiring simpler.
__all__ = [
    "ComposeStoreServer",
    "DaprMetadataClient",
    "DaprSecretClient",
    "DaprdSidecar",
    "IptablesFaultInjector",
    "allocate_free_ports",
    "allocate_sidecar_ports",
]

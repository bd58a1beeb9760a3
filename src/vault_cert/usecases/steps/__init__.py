from .fixture import StartSidecar, StartStoreServer, StopSidecar, StopStoreServer
from .init_logs import ExpectInitFailureLogged, ExpectNoInitFailureLogged
from .metadata import ExpectCapability, ExpectComponentRegistered
from .network import CutNetwork, InterruptNetwork, RestoreNetwork
from .secrets import ExpectBulkSecret, ExpectSecretAbsent, ExpectSecretEquals, ExpectSecretStable

__all__ = [
    "CutNetwork",
    "ExpectBulkSecret",
    "ExpectCapability",
    "ExpectComponentRegistered",
    "ExpectInitFailureLogged",
    "ExpectNoInitFailureLogged",
    "ExpectSecretAbsent",
    "ExpectSecretEquals",
    "ExpectSecretStable",
    "InterruptNetwork",
    "RestoreNetwork",
    "StartSidecar",
    "StartStoreServer",
    "StopSidecar",
    "StopStoreServer",
]

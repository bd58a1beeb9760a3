from .capabilities import Capability
from .errors import (
    CertificationAssertionError,
    FixtureError,
    MetadataQueryError,
    RetrievalErrorKind,
    SecretRetrievalError,
)
from .models import ComponentRecord, FaultWindow, Ports

# Public domain exports keep imports explicit across layers.
__all__ = [
    "Capability",
    "CertificationAssertionError",
    "ComponentRecord",
    "FaultWindow",
    "FixtureError",
    "MetadataQueryError",
    "Ports",
    "RetrievalErrorKind",
    "SecretRetrievalError",
]

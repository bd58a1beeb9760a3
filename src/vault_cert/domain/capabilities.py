from __future__ import annotations

from enum import Enum


# Capability strings advertised by secret stores through the runtime metadata endpoint.
class Capability(str, Enum):
    MULTIPLE_KEY_VALUES_PER_SECRET = "MULTIPLE_KEY_VALUES_PER_SECRET"

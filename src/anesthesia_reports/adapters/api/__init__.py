"""Record service adapter (HTTP + JSON)."""

from __future__ import annotations

from .client import FATAL_SESSION_CODES, ApiClient
from .patients import HttpPatientGateway
from .surgeries import HttpSurgeryGateway

__all__ = [
    "FATAL_SESSION_CODES",
    "ApiClient",
    "HttpPatientGateway",
    "HttpSurgeryGateway",
]

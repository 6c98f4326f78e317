"""Domain port definitions for adapters."""

from __future__ import annotations

from .collaborators import EntityStore, SessionListener
from .gateway import (
    ConflictError,
    GatewayError,
    NotFoundError,
    PatientGateway,
    RecordGateway,
    SurgeryGateway,
)

__all__ = [
    "ConflictError",
    "EntityStore",
    "GatewayError",
    "NotFoundError",
    "PatientGateway",
    "RecordGateway",
    "SessionListener",
    "SurgeryGateway",
]

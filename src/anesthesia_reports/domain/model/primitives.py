"""Domain primitives: scalar aliases + small value objects."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

type EntityId = str
type IsoDate = str  # YYYY-MM-DD
type Cns = str

CNS_LENGTH: Final[int] = 15
MAX_SURGERY_MATCH_SCORE: Final[int] = 6


@dataclass(frozen=True, slots=True)
class CbhpmCode:
    """Procedure code from the CBHPM billing table."""

    code: str
    procedure: str
    port: str

"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityKind(StrEnum):
    PATIENT = "patient"
    SURGERY = "surgery"


class Sex(StrEnum):
    MALE = "male"
    FEMALE = "female"


class SurgeryType(StrEnum):
    INSURANCE = "insurance"
    SUS = "sus"  # public health system

    @property
    def display_name(self) -> str:
        return "Insurance" if self is SurgeryType.INSURANCE else "SUS"


class MatchLevel(StrEnum):
    """Server-assigned similarity tier for patient precheck matches."""

    STRONG = "strong"
    WEAK = "weak"
    POSSIBLE = "possible"

    @classmethod
    def from_wire(cls, value: str | None) -> MatchLevel:
        """Unknown or blank tiers are presented as ``possible``."""
        normalized = (value or "").strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            return cls.POSSIBLE

    @property
    def rank(self) -> int:
        return _MATCH_LEVEL_RANK[self]

    @property
    def label(self) -> str:
        return f"{self.value.capitalize()} similarity"


_MATCH_LEVEL_RANK: dict[MatchLevel, int] = {
    MatchLevel.STRONG: 0,
    MatchLevel.WEAK: 1,
    MatchLevel.POSSIBLE: 2,
}


class ResolutionPath(StrEnum):
    """How a workflow run produced its entity."""

    CREATED = "created"
    ADOPTED = "adopted"
    ADOPTED_AND_UPDATED = "adopted_and_updated"

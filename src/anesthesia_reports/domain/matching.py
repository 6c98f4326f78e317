"""Match classification for precheck results.

The server already decided how similar each candidate is. This module only
attaches a per-kind confidence type to those values and orders candidates for
presentation. Nothing here ever picks a candidate on the caller's behalf.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from anesthesia_reports.domain.model import MAX_SURGERY_MATCH_SCORE, MatchLevel
from anesthesia_reports.domain.normalization import format_cns

if TYPE_CHECKING:
    from collections.abc import Iterable

    from anesthesia_reports.domain.model import (
        EntityId,
        PatientMatch,
        Sex,
        SurgeryMatch,
        SurgeryType,
    )

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PatientConfidence:
    level: MatchLevel
    fingerprint_match: bool = False

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.level.rank, 0 if self.fingerprint_match else 1)

    @property
    def label(self) -> str:
        return self.level.label


@dataclass(frozen=True, slots=True)
class SurgeryConfidence:
    score: int

    def __post_init__(self) -> None:
        if not 0 <= self.score <= MAX_SURGERY_MATCH_SCORE:
            raise ValueError(f"Surgery match score out of range: {self.score}")

    @property
    def sort_key(self) -> tuple[int]:
        return (-self.score,)

    @property
    def label(self) -> str:
        return f"Match {self.score}/{MAX_SURGERY_MATCH_SCORE}"


type Confidence = PatientConfidence | SurgeryConfidence


@dataclass(frozen=True, slots=True, kw_only=True)
class PatientSummary:
    name: str
    sex: Sex
    date_of_birth: str
    cns: str
    created_by_name: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class SurgerySummary:
    proposed_procedure: str
    date: str
    type: SurgeryType | None
    hospital: str
    insurance_name: str
    main_surgeon: str
    created_by_name: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class MatchCandidate[
    TSummary: (PatientSummary, SurgerySummary),
    TConfidence: (PatientConfidence, SurgeryConfidence),
]:
    """Immutable snapshot of one existing record that may duplicate the draft."""

    candidate_id: EntityId
    summary: TSummary
    confidence: TConfidence


type PatientCandidate = MatchCandidate[PatientSummary, PatientConfidence]
type SurgeryCandidate = MatchCandidate[SurgerySummary, SurgeryConfidence]
type AnyCandidate = PatientCandidate | SurgeryCandidate


def classify_patient_matches(matches: Iterable[PatientMatch]) -> list[PatientCandidate]:
    candidates = [
        MatchCandidate(
            candidate_id=match.patient_id,
            summary=PatientSummary(
                name=match.name,
                sex=match.sex,
                date_of_birth=match.date_of_birth,
                cns=format_cns(match.cns),
                created_by_name=match.created_by_name,
            ),
            confidence=PatientConfidence(
                level=MatchLevel.from_wire(match.match_level),
                fingerprint_match=match.fingerprint_match,
            ),
        )
        for match in matches
    ]
    # sorted() is stable: equal keys keep the server's order
    return sorted(candidates, key=lambda candidate: candidate.confidence.sort_key)


def classify_surgery_matches(matches: Iterable[SurgeryMatch]) -> list[SurgeryCandidate]:
    candidates = [
        MatchCandidate(
            candidate_id=match.surgery_id,
            summary=SurgerySummary(
                proposed_procedure=match.proposed_procedure,
                date=match.date,
                type=match.type,
                hospital=match.hospital,
                insurance_name=match.insurance_name,
                main_surgeon=match.main_surgeon,
                created_by_name=match.created_by_name,
            ),
            confidence=SurgeryConfidence(score=_clamp_score(match)),
        )
        for match in matches
    ]
    return sorted(candidates, key=lambda candidate: candidate.confidence.sort_key)


def _clamp_score(match: SurgeryMatch) -> int:
    score = match.match_score
    clamped = min(max(score, 0), MAX_SURGERY_MATCH_SCORE)
    if clamped != score:
        log.warning(
            "Clamped surgery match score %s to %s for candidate %s",
            score,
            clamped,
            match.surgery_id,
        )
    return clamped

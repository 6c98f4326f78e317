"""Public domain model surface."""

from __future__ import annotations

from anesthesia_reports.domain.model.enums import (
    EntityKind,
    MatchLevel,
    ResolutionPath,
    Sex,
    SurgeryType,
)
from anesthesia_reports.domain.model.patient import Patient, PatientDraft, PatientMatch
from anesthesia_reports.domain.model.primitives import (
    CNS_LENGTH,
    MAX_SURGERY_MATCH_SCORE,
    CbhpmCode,
    Cns,
    EntityId,
    IsoDate,
)
from anesthesia_reports.domain.model.surgery import Surgery, SurgeryDraft, SurgeryMatch

type Draft = PatientDraft | SurgeryDraft
type RecordEntity = Patient | Surgery

__all__ = [
    "CNS_LENGTH",
    "MAX_SURGERY_MATCH_SCORE",
    "CbhpmCode",
    "Cns",
    "Draft",
    "EntityId",
    "EntityKind",
    "IsoDate",
    "MatchLevel",
    "Patient",
    "PatientDraft",
    "PatientMatch",
    "RecordEntity",
    "ResolutionPath",
    "Sex",
    "Surgery",
    "SurgeryDraft",
    "SurgeryMatch",
    "SurgeryType",
]

"""Surgery records, drafts and precheck matches."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from anesthesia_reports.domain.model.enums import EntityKind

if TYPE_CHECKING:
    from datetime import datetime

    from anesthesia_reports.domain.model.enums import SurgeryType
    from anesthesia_reports.domain.model.primitives import CbhpmCode, EntityId, IsoDate


@dataclass(frozen=True, slots=True, kw_only=True)
class SurgeryDraft:
    """Normalized fields of a surgery that does not exist yet.

    The first block is what the precheck service compares; the rest is only
    sent on create and on adopt-and-update.
    """

    KIND: ClassVar[EntityKind] = EntityKind.SURGERY

    patient_id: EntityId
    date: IsoDate
    type: SurgeryType
    insurance_name: str
    hospital: str
    main_surgeon: str
    proposed_procedure: str

    insurance_number: str
    weight: float
    auxiliary_surgeons: tuple[str, ...] = ()
    complete_procedure: str | None = None
    cbhpm: CbhpmCode | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Surgery:
    """Server-side canonical representation of a surgery."""

    KIND: ClassVar[EntityKind] = EntityKind.SURGERY

    id: EntityId
    patient_id: EntityId
    date: IsoDate
    type: SurgeryType
    insurance_name: str
    insurance_number: str
    main_surgeon: str
    hospital: str
    weight: float | None
    proposed_procedure: str
    auxiliary_surgeons: tuple[str, ...] = field(default_factory=tuple)
    complete_procedure: str | None = None
    cbhpm: CbhpmCode | None = None
    status: str | None = None
    my_permission: str | None = None
    created_by: str | None = None
    created_by_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class SurgeryMatch:
    """One existing surgery proposed by the precheck service, as delivered."""

    surgery_id: EntityId
    patient_id: EntityId
    date: IsoDate
    type: SurgeryType | None
    insurance_name: str
    hospital: str
    main_surgeon: str
    proposed_procedure: str
    match_score: int
    created_by: str | None = None
    created_by_name: str | None = None

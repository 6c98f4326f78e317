"""Patient records, drafts and precheck matches."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from anesthesia_reports.domain.model.enums import EntityKind

if TYPE_CHECKING:
    from datetime import datetime

    from anesthesia_reports.domain.model.enums import Sex
    from anesthesia_reports.domain.model.primitives import Cns, EntityId, IsoDate


@dataclass(frozen=True, slots=True, kw_only=True)
class PatientDraft:
    """Normalized identity fields of a patient that does not exist yet."""

    KIND: ClassVar[EntityKind] = EntityKind.PATIENT

    name: str
    sex: Sex
    date_of_birth: IsoDate
    cns: Cns


@dataclass(frozen=True, slots=True, kw_only=True)
class Patient:
    """Server-side canonical representation of a patient."""

    KIND: ClassVar[EntityKind] = EntityKind.PATIENT

    id: EntityId
    name: str
    sex: Sex
    date_of_birth: IsoDate
    cns: Cns
    fingerprint: str | None = None
    my_permission: str | None = None
    my_role: str | None = None
    created_by: str | None = None
    created_by_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class PatientMatch:
    """One existing patient proposed by the precheck service, as delivered."""

    patient_id: EntityId
    name: str
    sex: Sex
    date_of_birth: IsoDate
    cns: Cns
    match_level: str
    fingerprint_match: bool = False
    created_by: str | None = None
    created_by_name: str | None = None

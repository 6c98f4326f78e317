"""Translate record service payloads into domain entities, and drafts into request bodies."""

from __future__ import annotations

from typing import TYPE_CHECKING

from anesthesia_reports.domain.model import (
    CbhpmCode,
    Patient,
    PatientMatch,
    Surgery,
    SurgeryMatch,
)

from .schema import (
    CbhpmInput,
    PatientInput,
    PrecheckSurgeryInput,
    SurgeryInput,
)

if TYPE_CHECKING:
    from anesthesia_reports.domain.model import PatientDraft, SurgeryDraft

    from .schema import (
        CbhpmPayload,
        PatientMatchPayload,
        PatientPayload,
        SurgeryMatchPayload,
        SurgeryPayload,
    )

type JsonBody = dict[str, object]


def parse_patient(payload: PatientPayload) -> Patient:
    return Patient(
        id=payload.id,
        name=payload.name,
        sex=payload.sex,
        date_of_birth=payload.date_of_birth,
        cns=payload.cns,
        fingerprint=payload.fingerprint,
        my_permission=payload.my_permission,
        my_role=payload.my_role,
        created_by=payload.created_by,
        created_by_name=payload.created_by_name,
        created_at=payload.created_at,
        updated_at=payload.updated_at,
        version=payload.version,
    )


def parse_patient_match(payload: PatientMatchPayload) -> PatientMatch:
    return PatientMatch(
        patient_id=payload.patient_id,
        name=payload.name,
        sex=payload.sex,
        date_of_birth=payload.date_of_birth,
        cns=payload.cns,
        match_level=payload.match_level,
        fingerprint_match=payload.fingerprint_match,
        created_by=payload.created_by,
        created_by_name=payload.created_by_name,
    )


def _parse_cbhpm(payload: CbhpmPayload | None) -> CbhpmCode | None:
    if payload is None:
        return None
    return CbhpmCode(code=payload.code, procedure=payload.procedure, port=payload.port)


def parse_surgery(payload: SurgeryPayload) -> Surgery:
    return Surgery(
        id=payload.id,
        patient_id=payload.patient_id,
        date=payload.date,
        type=payload.type,
        insurance_name=payload.insurance_name,
        insurance_number=payload.insurance_number,
        main_surgeon=payload.main_surgeon,
        hospital=payload.hospital,
        weight=payload.weight,
        proposed_procedure=payload.proposed_procedure,
        auxiliary_surgeons=tuple(payload.auxiliary_surgeons or ()),
        complete_procedure=payload.complete_procedure,
        cbhpm=_parse_cbhpm(payload.cbhpm),
        status=payload.status,
        my_permission=payload.my_permission,
        created_by=payload.created_by,
        created_by_name=payload.created_by_name,
        created_at=payload.created_at,
        updated_at=payload.updated_at,
        version=payload.version,
    )


def parse_surgery_match(payload: SurgeryMatchPayload) -> SurgeryMatch:
    return SurgeryMatch(
        surgery_id=payload.surgery_id,
        patient_id=payload.patient_id,
        date=payload.date,
        type=payload.type,
        insurance_name=payload.insurance_name,
        hospital=payload.hospital,
        main_surgeon=payload.main_surgeon,
        proposed_procedure=payload.proposed_procedure,
        match_score=payload.match_score,
        created_by=payload.created_by,
        created_by_name=payload.created_by_name,
    )


def patient_body(draft: PatientDraft) -> JsonBody:
    body = PatientInput(
        patient_name=draft.name,
        sex=draft.sex,
        date_of_birth=draft.date_of_birth,
        cns=draft.cns,
    )
    return body.model_dump(mode="json")


def surgery_precheck_body(draft: SurgeryDraft) -> JsonBody:
    body = PrecheckSurgeryInput(
        patient_id=draft.patient_id,
        date=draft.date,
        type=draft.type,
        insurance_name=draft.insurance_name,
        hospital=draft.hospital,
        main_surgeon=draft.main_surgeon,
        proposed_procedure=draft.proposed_procedure,
    )
    return body.model_dump(mode="json")


def surgery_body(draft: SurgeryDraft, *, include_patient: bool = True) -> JsonBody:
    """Serialize a full surgery draft; updates never move a surgery to another patient."""

    cbhpm = (
        CbhpmInput(code=draft.cbhpm.code, procedure=draft.cbhpm.procedure, port=draft.cbhpm.port)
        if draft.cbhpm is not None
        else None
    )
    body = SurgeryInput(
        patient_id=draft.patient_id if include_patient else None,
        date=draft.date,
        type=draft.type,
        insurance_name=draft.insurance_name,
        insurance_number=draft.insurance_number,
        main_surgeon=draft.main_surgeon,
        auxiliary_surgeons=list(draft.auxiliary_surgeons) or None,
        hospital=draft.hospital,
        weight=draft.weight,
        proposed_procedure=draft.proposed_procedure,
        complete_procedure=draft.complete_procedure,
        cbhpm=cbhpm,
    )
    return body.model_dump(mode="json", exclude_none=True)

"""Pydantic models describing the record service payloads."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field, field_validator

from anesthesia_reports.domain.model import Sex, SurgeryType
from anesthesia_reports.domain.normalization import normalize_iso_date


def _iso_date(value: object) -> object:
    if isinstance(value, str):
        return normalize_iso_date(value) or value
    return value


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _decimal(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip().replace(",", ".")
        return stripped or None
    return value


class ApiBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ErrorDetail(ApiBaseModel):
    code: str
    message: str = ""


class ErrorResponse(ApiBaseModel):
    error: ErrorDetail


# Patients


class PatientPayload(ApiBaseModel):
    id: str = Field(alias="patient_id")
    name: str = Field(alias="patient_name")
    sex: Sex
    date_of_birth: str
    cns: str
    fingerprint: str | None = None
    my_permission: str | None = None
    my_role: str | None = None
    created_by: str | None = None
    created_by_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int | None = None

    _normalize_date = field_validator("date_of_birth", mode="before")(_iso_date)


class PatientResponse(ApiBaseModel):
    patient: PatientPayload


class PatientMatchPayload(ApiBaseModel):
    patient_id: str
    name: str = Field(alias="patient_name")
    sex: Sex
    date_of_birth: str
    cns: str
    created_by: str | None = None
    created_by_name: str | None = None
    fingerprint_match: bool = False
    match_level: str = ""

    _normalize_date = field_validator("date_of_birth", mode="before")(_iso_date)


class PrecheckPatientsResponse(ApiBaseModel):
    matches: list[PatientMatchPayload] = Field(default_factory=list[PatientMatchPayload])


class PatientInput(ApiBaseModel):
    """Body of precheck, create and update calls for patients."""

    patient_name: str
    sex: Sex
    date_of_birth: str
    cns: str


# Surgeries


class CbhpmPayload(ApiBaseModel):
    code: str
    procedure: str
    port: str


class SurgeryPayload(ApiBaseModel):
    id: str = Field(alias="surgery_id")
    patient_id: str
    date: str
    type: SurgeryType = SurgeryType.INSURANCE
    insurance_name: str
    insurance_number: str = ""
    main_surgeon: str
    auxiliary_surgeons: list[str] | None = None
    hospital: str
    weight: float | None = None
    proposed_procedure: str
    complete_procedure: str | None = None
    status: str | None = None
    my_permission: str | None = None
    cbhpm: CbhpmPayload | None = None
    created_by: str | None = None
    created_by_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int | None = None

    _normalize_date = field_validator("date", mode="before")(_iso_date)
    _normalize_weight = field_validator("weight", mode="before")(_decimal)
    _normalize_complete = field_validator("complete_procedure", mode="before")(_blank_to_none)

    @field_validator("type", mode="before")
    @classmethod
    def _known_type(cls, value: object) -> object:
        if isinstance(value, str) and value.strip().lower() in SurgeryType:
            return value.strip().lower()
        return SurgeryType.INSURANCE


class SurgeryResponse(ApiBaseModel):
    surgery: SurgeryPayload


class SurgeryMatchPayload(ApiBaseModel):
    surgery_id: str
    patient_id: str
    date: str
    type: SurgeryType | None = None
    insurance_name: str = ""
    hospital: str = ""
    main_surgeon: str = ""
    proposed_procedure: str = ""
    match_score: int = 0
    created_by: str | None = None
    created_by_name: str | None = None

    _normalize_date = field_validator("date", mode="before")(_iso_date)

    @field_validator("type", mode="before")
    @classmethod
    def _known_type(cls, value: object) -> object:
        if isinstance(value, str) and value.strip().lower() in SurgeryType:
            return value.strip().lower()
        return None


class PrecheckSurgeriesResponse(ApiBaseModel):
    matches: list[SurgeryMatchPayload] = Field(default_factory=list[SurgeryMatchPayload])


class PrecheckSurgeryInput(ApiBaseModel):
    patient_id: str
    date: str
    type: SurgeryType
    insurance_name: str
    hospital: str
    main_surgeon: str
    proposed_procedure: str


class CbhpmInput(ApiBaseModel):
    code: str
    procedure: str
    port: str


class SurgeryInput(ApiBaseModel):
    """Body of create calls; update calls send the same fields minus ``patient_id``."""

    patient_id: str | None = None
    date: str
    type: SurgeryType
    insurance_name: str
    insurance_number: str
    main_surgeon: str
    auxiliary_surgeons: list[str] | None = None
    hospital: str
    weight: float
    proposed_procedure: str
    complete_procedure: str | None = None
    cbhpm: CbhpmInput | None = None

"""Patient gateway backed by the record service."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .client import path_segment
from .parsing import parse_payload
from .schema import PatientResponse, PrecheckPatientsResponse
from .translator import parse_patient, parse_patient_match, patient_body

if TYPE_CHECKING:
    from anesthesia_reports.domain.model import EntityId, Patient, PatientDraft, PatientMatch

    from .client import ApiClient


class HttpPatientGateway:
    """``/patients`` endpoints."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def precheck(self, draft: PatientDraft) -> list[PatientMatch]:
        payload = await self._client.request("POST", "/patients/precheck", body=patient_body(draft))
        if payload is None:
            return []
        response = parse_payload(PrecheckPatientsResponse, payload)
        return [parse_patient_match(match) for match in response.matches]

    async def claim(self, entity_id: EntityId) -> None:
        await self._client.request("POST", f"/patients/{path_segment(entity_id)}/claim")

    async def create(self, draft: PatientDraft) -> Patient:
        payload = await self._client.request_object("POST", "/patients", body=patient_body(draft))
        return parse_patient(parse_payload(PatientResponse, payload).patient)

    async def update(self, entity_id: EntityId, draft: PatientDraft) -> Patient:
        payload = await self._client.request_object(
            "PATCH", f"/patients/{path_segment(entity_id)}", body=patient_body(draft)
        )
        return parse_patient(parse_payload(PatientResponse, payload).patient)

    async def get_by_id(self, entity_id: EntityId) -> Patient:
        payload = await self._client.request_object("GET", f"/patients/{path_segment(entity_id)}")
        return parse_patient(parse_payload(PatientResponse, payload).patient)

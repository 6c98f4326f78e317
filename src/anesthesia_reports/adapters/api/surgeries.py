"""Surgery gateway backed by the record service."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .client import path_segment
from .parsing import parse_payload
from .schema import PrecheckSurgeriesResponse, SurgeryResponse
from .translator import parse_surgery, parse_surgery_match, surgery_body, surgery_precheck_body

if TYPE_CHECKING:
    from anesthesia_reports.domain.model import EntityId, Surgery, SurgeryDraft, SurgeryMatch

    from .client import ApiClient


class HttpSurgeryGateway:
    """``/surgeries`` endpoints."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def precheck(self, draft: SurgeryDraft) -> list[SurgeryMatch]:
        payload = await self._client.request(
            "POST", "/surgeries/precheck", body=surgery_precheck_body(draft)
        )
        if payload is None:
            return []
        response = parse_payload(PrecheckSurgeriesResponse, payload)
        return [parse_surgery_match(match) for match in response.matches]

    async def claim(self, entity_id: EntityId) -> None:
        await self._client.request("POST", f"/surgeries/{path_segment(entity_id)}/claim")

    async def create(self, draft: SurgeryDraft) -> Surgery:
        payload = await self._client.request_object("POST", "/surgeries", body=surgery_body(draft))
        return parse_surgery(parse_payload(SurgeryResponse, payload).surgery)

    async def update(self, entity_id: EntityId, draft: SurgeryDraft) -> Surgery:
        payload = await self._client.request_object(
            "PATCH",
            f"/surgeries/{path_segment(entity_id)}",
            body=surgery_body(draft, include_patient=False),
        )
        return parse_surgery(parse_payload(SurgeryResponse, payload).surgery)

    async def get_by_id(self, entity_id: EntityId) -> Surgery:
        payload = await self._client.request_object("GET", f"/surgeries/{path_segment(entity_id)}")
        return parse_surgery(parse_payload(SurgeryResponse, payload).surgery)

"""Claim coordination: adopt an existing record or create a new one.

A claim grants the current caller access to an existing record without
touching anyone else's access. It is idempotent, so a claim that succeeded
before a failing fetch/update is never undone; re-running the workflow simply
claims again.

Every sequence here is single-attempt. Retries belong to the transport.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from anesthesia_reports.domain.errors import ClaimError, CreateError
from anesthesia_reports.domain.ports import ConflictError, GatewayError, NotFoundError

if TYPE_CHECKING:
    from anesthesia_reports.domain.model import EntityId
    from anesthesia_reports.domain.ports import RecordGateway

log = getLogger(__name__)


class ClaimCoordinator[TDraft, TEntity]:
    """Runs the network call sequence behind each decision intent."""

    def __init__(self, gateway: RecordGateway[TDraft, TEntity, object]) -> None:
        self._gateway = gateway

    async def claim_and_fetch(self, candidate_id: EntityId) -> TEntity:
        await self._claim(candidate_id)
        try:
            return await self._gateway.get_by_id(candidate_id)
        except GatewayError as exc:
            raise ClaimError(
                f"Could not load claimed record {candidate_id}: {exc.message}",
                candidate_id=candidate_id,
                stage="fetch",
            ) from exc

    async def claim_and_apply(self, candidate_id: EntityId, draft: TDraft) -> TEntity:
        await self._claim(candidate_id)
        try:
            return await self._gateway.update(candidate_id, draft)
        except GatewayError as exc:
            raise ClaimError(
                f"Could not update claimed record {candidate_id}: {exc.message}",
                candidate_id=candidate_id,
                stage="update",
            ) from exc

    async def create_fresh(self, draft: TDraft) -> TEntity:
        try:
            return await self._gateway.create(draft)
        except GatewayError as exc:
            raise CreateError(f"Could not create record: {exc.message}") from exc

    async def _claim(self, candidate_id: EntityId) -> None:
        try:
            await self._gateway.claim(candidate_id)
        except ConflictError:
            log.info("Record %s already claimed by the current user", candidate_id)
        except NotFoundError as exc:
            raise ClaimError(
                f"Record {candidate_id} no longer exists",
                candidate_id=candidate_id,
                stage="claim",
            ) from exc
        except GatewayError as exc:
            raise ClaimError(
                f"Could not claim record {candidate_id}: {exc.message}",
                candidate_id=candidate_id,
                stage="claim",
            ) from exc
        else:
            log.debug("Claimed record %s", candidate_id)

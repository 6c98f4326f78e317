"""Ports for the backend record service (precheck, claim, create, update, fetch)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from anesthesia_reports.domain.model import (
    Patient,
    PatientDraft,
    PatientMatch,
    Surgery,
    SurgeryDraft,
    SurgeryMatch,
)

if TYPE_CHECKING:
    from anesthesia_reports.domain.model import EntityId


class GatewayError(RuntimeError):
    """Raised by gateways when the service rejects a request.

    Fatal session failures are not gateway errors: gateways raise
    :class:`~anesthesia_reports.domain.errors.FatalSessionError` for those, and
    :class:`~anesthesia_reports.domain.errors.NetworkError` for transport failures.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status


class NotFoundError(GatewayError):
    """The referenced record does not exist or is not visible."""


class ConflictError(GatewayError):
    """The request conflicts with current server state (e.g. already claimed)."""


@runtime_checkable
class RecordGateway[TDraft, TEntity, TMatch](Protocol):
    """Asynchronous record-service capabilities consumed by the workflow.

    ``precheck``, ``claim``, ``update`` and ``get_by_id`` are idempotent;
    ``create`` is not.
    """

    async def precheck(self, draft: TDraft) -> list[TMatch]: ...

    async def claim(self, entity_id: EntityId) -> None: ...

    async def create(self, draft: TDraft) -> TEntity: ...

    async def update(self, entity_id: EntityId, draft: TDraft) -> TEntity: ...

    async def get_by_id(self, entity_id: EntityId) -> TEntity: ...


@runtime_checkable
class PatientGateway(RecordGateway[PatientDraft, Patient, PatientMatch], Protocol):
    """Record service for patients."""


@runtime_checkable
class SurgeryGateway(RecordGateway[SurgeryDraft, Surgery, SurgeryMatch], Protocol):
    """Record service for surgeries."""

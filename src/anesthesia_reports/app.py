"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from anesthesia_reports.adapters.api import ApiClient, HttpPatientGateway, HttpSurgeryGateway
from anesthesia_reports.config import get_api_config
from anesthesia_reports.domain.workflow import patient_workflow, surgery_workflow

if TYPE_CHECKING:
    from anesthesia_reports.config import ApiConfig
    from anesthesia_reports.domain.decision import DecisionSurface
    from anesthesia_reports.domain.model import Patient, Surgery
    from anesthesia_reports.domain.normalization import RawFields
    from anesthesia_reports.domain.ports import (
        EntityStore,
        PatientGateway,
        SessionListener,
        SurgeryGateway,
    )
    from anesthesia_reports.domain.workflow import StateObserver, WorkflowOutcome


log = getLogger(__name__)


def build_api_client(config: ApiConfig | None = None) -> ApiClient:
    return ApiClient(config=config or get_api_config())


async def create_or_claim_patient(
    raw: RawFields,
    *,
    decide: DecisionSurface,
    gateway: PatientGateway | None = None,
    store: EntityStore[Patient] | None = None,
    session: SessionListener | None = None,
    observer: StateObserver | None = None,
) -> WorkflowOutcome[Patient]:
    """Create a patient, or adopt an existing one, using the configured adapters."""

    if gateway is None:
        async with build_api_client() as client:
            return await create_or_claim_patient(
                raw,
                decide=decide,
                gateway=HttpPatientGateway(client),
                store=store,
                session=session,
                observer=observer,
            )

    workflow = patient_workflow(gateway, decide=decide, store=store, session=session)
    if observer is not None:
        workflow.subscribe(observer)
    outcome = await workflow.resolve(raw)
    log.info(f"Patient {outcome.entity.id} resolved via {outcome.path}")
    return outcome


async def create_or_claim_surgery(
    raw: RawFields,
    *,
    decide: DecisionSurface,
    gateway: SurgeryGateway | None = None,
    store: EntityStore[Surgery] | None = None,
    session: SessionListener | None = None,
    observer: StateObserver | None = None,
) -> WorkflowOutcome[Surgery]:
    """Create a surgery, or adopt an existing one, using the configured adapters."""

    if gateway is None:
        async with build_api_client() as client:
            return await create_or_claim_surgery(
                raw,
                decide=decide,
                gateway=HttpSurgeryGateway(client),
                store=store,
                session=session,
                observer=observer,
            )

    workflow = surgery_workflow(gateway, decide=decide, store=store, session=session)
    if observer is not None:
        workflow.subscribe(observer)
    outcome = await workflow.resolve(raw)
    log.info(f"Surgery {outcome.entity.id} resolved via {outcome.path}")
    return outcome

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from tests.support.records import make_patient, make_surgery

if TYPE_CHECKING:
    from anesthesia_reports.domain.errors import FatalSessionError
    from anesthesia_reports.domain.model import (
        Patient,
        PatientDraft,
        PatientMatch,
        Surgery,
        SurgeryDraft,
        SurgeryMatch,
    )


@dataclass
class FakeGateway[TDraft, TEntity, TMatch]:
    """Scripted record service recording every call it receives."""

    matches: list[TMatch] = field(default_factory=list)
    records: dict[str, TEntity] = field(default_factory=dict)
    created: TEntity | None = None
    errors: dict[str, BaseException] = field(default_factory=dict)
    calls: list[tuple[str, Any]] = field(default_factory=list)
    precheck_gate: asyncio.Event | None = None

    def operations(self) -> list[str]:
        return [name for name, _ in self.calls]

    def _record(self, name: str, argument: Any) -> None:
        self.calls.append((name, argument))
        error = self.errors.get(name)
        if error is not None:
            raise error

    async def precheck(self, draft: TDraft) -> list[TMatch]:
        self._record("precheck", draft)
        if self.precheck_gate is not None:
            await self.precheck_gate.wait()
        return list(self.matches)

    async def claim(self, entity_id: str) -> None:
        self._record("claim", entity_id)

    async def create(self, draft: TDraft) -> TEntity:
        self._record("create", draft)
        assert self.created is not None
        return self.created

    async def update(self, entity_id: str, draft: TDraft) -> TEntity:
        self._record("update", (entity_id, draft))
        return self._updated(self.records[entity_id], draft)

    async def get_by_id(self, entity_id: str) -> TEntity:
        self._record("get_by_id", entity_id)
        return self.records[entity_id]

    def _updated(self, entity: TEntity, draft: TDraft) -> TEntity:
        return entity


class FakePatientGateway(FakeGateway["PatientDraft", "Patient", "PatientMatch"]):
    def _updated(self, entity: Patient, draft: PatientDraft) -> Patient:
        return replace(
            entity,
            name=draft.name,
            sex=draft.sex,
            date_of_birth=draft.date_of_birth,
            cns=draft.cns,
            version=(entity.version or 0) + 1,
        )


class FakeSurgeryGateway(FakeGateway["SurgeryDraft", "Surgery", "SurgeryMatch"]):
    def _updated(self, entity: Surgery, draft: SurgeryDraft) -> Surgery:
        return replace(
            entity,
            insurance_number=draft.insurance_number,
            weight=draft.weight,
            complete_procedure=draft.complete_procedure,
            version=(entity.version or 0) + 1,
        )


def patient_gateway(**kwargs: Any) -> FakePatientGateway:
    kwargs.setdefault("created", make_patient("p-new"))
    return FakePatientGateway(**kwargs)


def surgery_gateway(**kwargs: Any) -> FakeSurgeryGateway:
    kwargs.setdefault("created", make_surgery("s-new"))
    return FakeSurgeryGateway(**kwargs)


@dataclass
class RecordingStore[TEntity]:
    calls: list[tuple[str, Any]] = field(default_factory=list)

    def insert(self, entity: TEntity) -> None:
        self.calls.append(("insert", entity))

    def upsert(self, entity: TEntity) -> None:
        self.calls.append(("upsert", entity))

    def remove(self, entity_id: str) -> None:
        self.calls.append(("remove", entity_id))


@dataclass
class RecordingSession:
    errors: list[FatalSessionError] = field(default_factory=list)

    def on_fatal_session_error(self, error: FatalSessionError) -> None:
        self.errors.append(error)

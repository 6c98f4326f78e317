from __future__ import annotations

import asyncio

import pytest

from anesthesia_reports.domain.decision import (
    AdoptAndUpdate,
    AdoptExisting,
    CreateNew,
    DecisionRequest,
    Intent,
    ScriptedDecisionSurface,
    collect_intent,
    validate_intent,
)
from anesthesia_reports.domain.errors import InvalidDecisionError, WorkflowCancelledError
from anesthesia_reports.domain.matching import classify_patient_matches
from anesthesia_reports.domain.model import EntityKind
from anesthesia_reports.domain.normalization import normalize_patient
from tests.support.records import RAW_PATIENT, make_patient_match


def _request(*candidate_ids: str) -> DecisionRequest:
    return DecisionRequest(
        kind=EntityKind.PATIENT,
        draft=normalize_patient(RAW_PATIENT),
        candidates=classify_patient_matches(make_patient_match(cid) for cid in candidate_ids),
    )


def test_adopt_requires_offered_candidate() -> None:
    request = _request("p-1", "p-2")

    assert validate_intent(AdoptExisting("p-2"), request) == AdoptExisting("p-2")
    with pytest.raises(InvalidDecisionError, match="p-9"):
        validate_intent(AdoptAndUpdate("p-9"), request)


def test_create_new_needs_confirmation_when_candidates_exist() -> None:
    request = _request("p-1")

    with pytest.raises(InvalidDecisionError):
        validate_intent(CreateNew(), request)
    assert validate_intent(CreateNew(confirmed=True), request) == CreateNew(confirmed=True)


def test_create_new_without_candidates_needs_no_confirmation() -> None:
    assert validate_intent(CreateNew(), _request()) == CreateNew()


def test_non_intent_answers_are_rejected() -> None:
    with pytest.raises(InvalidDecisionError, match="no intent"):
        validate_intent(None, _request("p-1"))


def test_collect_intent_awaits_async_surfaces() -> None:
    async def surface(request: DecisionRequest) -> Intent:
        await asyncio.sleep(0)
        return AdoptExisting(request.candidate_ids()[0])

    intent = asyncio.run(collect_intent(surface, _request("p-1")))

    assert intent == AdoptExisting("p-1")


def test_scripted_surface_records_requests_and_runs_out() -> None:
    surface = ScriptedDecisionSurface.of(AdoptExisting("p-1"))
    request = _request("p-1")

    assert surface(request) == AdoptExisting("p-1")
    with pytest.raises(WorkflowCancelledError):
        surface(request)
    assert surface.requests == [request, request]

"""Create-or-claim workflow state machine.

One run takes raw form input to a resolved entity::

    Draft -> Prechecking -> NoMatches -> Creating -> Resolved
                         -> HasMatches -> AwaitingDecision -> Executing -> Resolved
                                                           -> Creating  -> Resolved

Any state can move to Aborted on a fatal session error or cancellation.
Recoverable failures send the run back to Draft, from where the same or an
edited draft can be resubmitted. The machine is shared by patients and
surgeries; an :class:`EntityProfile` supplies the per-kind pieces.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from anesthesia_reports.domain.claims import ClaimCoordinator
from anesthesia_reports.domain.concurrency import SingleFlight
from anesthesia_reports.domain.decision import (
    AdoptAndUpdate,
    AdoptExisting,
    CreateNew,
    DecisionRequest,
    collect_intent,
)
from anesthesia_reports.domain.errors import (
    FatalSessionError,
    PrecheckError,
    ValidationError,
    WorkflowCancelledError,
    WorkflowError,
    find_fatal_session_error,
)
from anesthesia_reports.domain.matching import classify_patient_matches, classify_surgery_matches
from anesthesia_reports.domain.model import (
    EntityKind,
    Patient,
    PatientDraft,
    PatientMatch,
    ResolutionPath,
    Surgery,
    SurgeryDraft,
    SurgeryMatch,
)
from anesthesia_reports.domain.normalization import normalize_patient, normalize_surgery
from anesthesia_reports.domain.ports import GatewayError

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Iterable, Sequence

    from anesthesia_reports.domain.decision import DecisionSurface
    from anesthesia_reports.domain.matching import (
        AnyCandidate,
        PatientCandidate,
        SurgeryCandidate,
    )
    from anesthesia_reports.domain.normalization import RawFields
    from anesthesia_reports.domain.ports import (
        EntityStore,
        PatientGateway,
        RecordGateway,
        SessionListener,
        SurgeryGateway,
    )

log = getLogger(__name__)


class WorkflowState(StrEnum):
    DRAFT = "draft"
    PRECHECKING = "prechecking"
    NO_MATCHES = "no_matches"
    CREATING = "creating"
    HAS_MATCHES = "has_matches"
    AWAITING_DECISION = "awaiting_decision"
    EXECUTING = "executing"
    RESOLVED = "resolved"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in {WorkflowState.RESOLVED, WorkflowState.ABORTED}


_TRANSITIONS: dict[WorkflowState, frozenset[WorkflowState]] = {
    WorkflowState.DRAFT: frozenset({WorkflowState.DRAFT, WorkflowState.PRECHECKING}),
    WorkflowState.PRECHECKING: frozenset(
        {WorkflowState.NO_MATCHES, WorkflowState.HAS_MATCHES, WorkflowState.DRAFT}
    ),
    WorkflowState.NO_MATCHES: frozenset({WorkflowState.CREATING}),
    WorkflowState.CREATING: frozenset({WorkflowState.RESOLVED, WorkflowState.DRAFT}),
    WorkflowState.HAS_MATCHES: frozenset({WorkflowState.AWAITING_DECISION}),
    WorkflowState.AWAITING_DECISION: frozenset(
        {WorkflowState.CREATING, WorkflowState.EXECUTING, WorkflowState.DRAFT}
    ),
    WorkflowState.EXECUTING: frozenset({WorkflowState.RESOLVED, WorkflowState.DRAFT}),
    WorkflowState.RESOLVED: frozenset(),
    WorkflowState.ABORTED: frozenset(),
}


@dataclass(frozen=True, slots=True)
class WorkflowOutcome[TEntity]:
    """Terminal value of a run: the server's entity and how it was obtained."""

    entity: TEntity
    path: ResolutionPath


@dataclass(frozen=True, slots=True, kw_only=True)
class StateChange:
    """One observable transition of a workflow run."""

    run_id: UUID
    kind: EntityKind
    state: WorkflowState
    key: Hashable = None
    previous: WorkflowState | None = None
    candidates: Sequence[AnyCandidate] = ()
    error: WorkflowError | None = None
    outcome: WorkflowOutcome[object] | None = None


type StateObserver = Callable[[StateChange], None]


@dataclass(frozen=True, slots=True)
class EntityProfile[TDraft, TMatch, TCandidate]:
    """Per-kind normalizer and classifier plugged into the shared machine."""

    kind: EntityKind
    normalize: Callable[[RawFields], TDraft]
    classify: Callable[[Iterable[TMatch]], list[TCandidate]]


PATIENT_PROFILE: EntityProfile[PatientDraft, PatientMatch, PatientCandidate] = EntityProfile(
    kind=EntityKind.PATIENT,
    normalize=normalize_patient,
    classify=classify_patient_matches,
)
SURGERY_PROFILE: EntityProfile[SurgeryDraft, SurgeryMatch, SurgeryCandidate] = EntityProfile(
    kind=EntityKind.SURGERY,
    normalize=normalize_surgery,
    classify=classify_surgery_matches,
)


@dataclass(slots=True)
class _RunTracker:
    kind: EntityKind
    emit: Callable[[StateChange], None]
    key: Hashable = None
    run_id: UUID = field(default_factory=uuid4)
    state: WorkflowState | None = None
    candidates: Sequence[AnyCandidate] = ()

    def enter(
        self,
        state: WorkflowState,
        *,
        error: WorkflowError | None = None,
        outcome: WorkflowOutcome[object] | None = None,
    ) -> None:
        previous = self.state
        if (
            previous is not None
            and state is not WorkflowState.ABORTED
            and state not in _TRANSITIONS[previous]
        ):
            raise RuntimeError(f"Illegal workflow transition {previous} -> {state}")
        self.state = state
        log.debug("%s run %s: %s -> %s", self.kind, self.run_id, previous, state)
        self.emit(
            StateChange(
                run_id=self.run_id,
                kind=self.kind,
                state=state,
                key=self.key,
                previous=previous,
                candidates=self.candidates,
                error=error,
                outcome=outcome,
            )
        )


class CreateOrClaimWorkflow[TDraft, TEntity, TMatch, TCandidate: AnyCandidate]:
    """Duplicate-aware creation of one entity kind."""

    def __init__(
        self,
        profile: EntityProfile[TDraft, TMatch, TCandidate],
        gateway: RecordGateway[TDraft, TEntity, TMatch],
        *,
        decide: DecisionSurface,
        store: EntityStore[TEntity] | None = None,
        session: SessionListener | None = None,
    ) -> None:
        self._profile = profile
        self._gateway = gateway
        self._coordinator: ClaimCoordinator[TDraft, TEntity] = ClaimCoordinator(gateway)
        self._decide = decide
        self._store = store
        self._session = session
        self._observers: list[StateObserver] = []
        self._single_flight = SingleFlight()
        self._states: dict[Hashable, WorkflowState] = {}

    @property
    def kind(self) -> EntityKind:
        return self._profile.kind

    @property
    def state(self) -> WorkflowState | None:
        """State of the latest run for the default key, ``None`` before the first one."""
        return self.state_for(None)

    def state_for(self, key: Hashable) -> WorkflowState | None:
        """State of the latest run for ``key``; runs under other keys do not affect it."""
        return self._states.get(key)

    def subscribe(self, observer: StateObserver) -> Callable[[], None]:
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def cancel(self, *, key: Hashable = None) -> bool:
        """Cancel the in-flight run for ``key``; returns whether one was pending."""
        return self._single_flight.cancel((self.kind, key))

    async def run(
        self,
        raw: RawFields,
        *,
        decide: DecisionSurface | None = None,
        key: Hashable = None,
    ) -> TEntity:
        """Run the workflow and return the resolved entity."""
        outcome = await self.resolve(raw, decide=decide, key=key)
        return outcome.entity

    async def resolve(
        self,
        raw: RawFields,
        *,
        decide: DecisionSurface | None = None,
        key: Hashable = None,
    ) -> WorkflowOutcome[TEntity]:
        """Like :meth:`run`, but also reports which path produced the entity."""
        surface = decide or self._decide
        return await self._single_flight.run(
            (self.kind, key),
            lambda: self._run(raw, surface, key),
        )

    async def _run(
        self,
        raw: RawFields,
        surface: DecisionSurface,
        key: Hashable,
    ) -> WorkflowOutcome[TEntity]:
        run = _RunTracker(kind=self.kind, emit=self._emit, key=key)
        run.enter(WorkflowState.DRAFT)
        try:
            draft = self._profile.normalize(raw)
        except ValidationError as exc:
            log.warning("%s draft rejected: %s", self.kind, exc.message)
            run.enter(WorkflowState.DRAFT, error=exc)
            raise

        try:
            return await self._drive(run, draft, surface)
        except asyncio.CancelledError:
            run.enter(WorkflowState.ABORTED, error=WorkflowCancelledError("Run cancelled"))
            raise
        except WorkflowError as exc:
            fatal = find_fatal_session_error(exc)
            if fatal is not None:
                self._abort(run, fatal)
                if fatal is exc:
                    raise
                raise fatal from None
            if isinstance(exc, WorkflowCancelledError):
                run.enter(WorkflowState.ABORTED, error=exc)
                raise
            log.warning("%s run %s failed: %s", self.kind, run.run_id, exc.message)
            run.enter(WorkflowState.DRAFT, error=exc)
            raise

    async def _drive(
        self,
        run: _RunTracker,
        draft: TDraft,
        surface: DecisionSurface,
    ) -> WorkflowOutcome[TEntity]:
        run.enter(WorkflowState.PRECHECKING)
        try:
            matches = await self._gateway.precheck(draft)
        except GatewayError as exc:
            raise PrecheckError(f"Duplicate check failed: {exc.message}") from exc

        candidates = self._profile.classify(matches)
        if not candidates:
            run.enter(WorkflowState.NO_MATCHES)
            run.enter(WorkflowState.CREATING)
            entity = await self._coordinator.create_fresh(draft)
            return self._resolve(run, entity, ResolutionPath.CREATED)

        run.candidates = tuple(candidates)
        run.enter(WorkflowState.HAS_MATCHES)
        request = DecisionRequest(kind=self.kind, draft=draft, candidates=run.candidates)  # pyright: ignore[reportArgumentType]
        run.enter(WorkflowState.AWAITING_DECISION)
        intent = await collect_intent(surface, request)
        log.info("%s run %s decision: %s", self.kind, run.run_id, intent)

        match intent:
            case CreateNew():
                run.enter(WorkflowState.CREATING)
                entity = await self._coordinator.create_fresh(draft)
                return self._resolve(run, entity, ResolutionPath.CREATED)
            case AdoptExisting(candidate_id=candidate_id):
                run.enter(WorkflowState.EXECUTING)
                entity = await self._coordinator.claim_and_fetch(candidate_id)
                return self._resolve(run, entity, ResolutionPath.ADOPTED)
            case AdoptAndUpdate(candidate_id=candidate_id):
                run.enter(WorkflowState.EXECUTING)
                entity = await self._coordinator.claim_and_apply(candidate_id, draft)
                return self._resolve(run, entity, ResolutionPath.ADOPTED_AND_UPDATED)

    def _resolve(
        self,
        run: _RunTracker,
        entity: TEntity,
        path: ResolutionPath,
    ) -> WorkflowOutcome[TEntity]:
        outcome = WorkflowOutcome(entity=entity, path=path)
        if self._store is not None:
            if path is ResolutionPath.CREATED:
                self._store.insert(entity)
            else:
                self._store.upsert(entity)
        log.info("%s run %s resolved (%s)", self.kind, run.run_id, path)
        run.enter(WorkflowState.RESOLVED, outcome=outcome)  # pyright: ignore[reportArgumentType]
        return outcome

    def _abort(self, run: _RunTracker, error: FatalSessionError) -> None:
        log.error("%s run %s aborted: %s", self.kind, run.run_id, error.message)
        run.enter(WorkflowState.ABORTED, error=error)
        if self._session is not None:
            self._session.on_fatal_session_error(error)

    def _emit(self, change: StateChange) -> None:
        self._states[change.key] = change.state
        for observer in tuple(self._observers):
            observer(change)


type PatientWorkflow = CreateOrClaimWorkflow[PatientDraft, Patient, PatientMatch, PatientCandidate]
type SurgeryWorkflow = CreateOrClaimWorkflow[SurgeryDraft, Surgery, SurgeryMatch, SurgeryCandidate]


def patient_workflow(
    gateway: PatientGateway,
    *,
    decide: DecisionSurface,
    store: EntityStore[Patient] | None = None,
    session: SessionListener | None = None,
) -> PatientWorkflow:
    return CreateOrClaimWorkflow(
        PATIENT_PROFILE,
        gateway,
        decide=decide,
        store=store,
        session=session,
    )


def surgery_workflow(
    gateway: SurgeryGateway,
    *,
    decide: DecisionSurface,
    store: EntityStore[Surgery] | None = None,
    session: SessionListener | None = None,
) -> SurgeryWorkflow:
    return CreateOrClaimWorkflow(
        SURGERY_PROFILE,
        gateway,
        decide=decide,
        store=store,
        session=session,
    )

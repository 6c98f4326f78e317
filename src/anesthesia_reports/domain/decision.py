"""Decision surface contract.

When a precheck finds candidates, the workflow hands them to a decision
surface and waits for exactly one intent. A surface is any callable taking a
:class:`DecisionRequest` and returning an intent, directly or as an awaitable:
a terminal prompt, a UI sheet, or a scripted sequence in tests.
"""

from __future__ import annotations

import inspect
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from anesthesia_reports.domain.errors import InvalidDecisionError, WorkflowCancelledError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Iterable, Sequence

    from anesthesia_reports.domain.matching import AnyCandidate
    from anesthesia_reports.domain.model import Draft, EntityId, EntityKind

DUPLICATE_WARNING = (
    "The record you are creating may already exist. Review the matches to avoid duplicates."
)


@dataclass(frozen=True, slots=True)
class CreateNew:
    """Create a fresh record even though candidates exist.

    ``confirmed`` must be set when candidates were offered: creating anyway
    knowingly risks a duplicate.
    """

    confirmed: bool = False


@dataclass(frozen=True, slots=True)
class AdoptExisting:
    candidate_id: EntityId


@dataclass(frozen=True, slots=True)
class AdoptAndUpdate:
    candidate_id: EntityId


type Intent = CreateNew | AdoptExisting | AdoptAndUpdate


@dataclass(frozen=True, slots=True, kw_only=True)
class DecisionRequest:
    kind: EntityKind
    draft: Draft
    candidates: Sequence[AnyCandidate]
    message: str = DUPLICATE_WARNING

    def candidate_ids(self) -> list[EntityId]:
        return [candidate.candidate_id for candidate in self.candidates]


class DecisionSurface(Protocol):
    def __call__(self, request: DecisionRequest) -> Intent | Awaitable[Intent]: ...


async def collect_intent(surface: DecisionSurface, request: DecisionRequest) -> Intent:
    """Ask ``surface`` for an intent and validate it against the offered candidates."""

    answer = surface(request)
    if inspect.isawaitable(answer):
        answer = await answer
    return validate_intent(answer, request)


def validate_intent(answer: object, request: DecisionRequest) -> Intent:
    match answer:
        case CreateNew(confirmed=confirmed):
            if request.candidates and not confirmed:
                raise InvalidDecisionError(
                    "Creating a new record despite matches needs explicit confirmation"
                )
            return answer
        case AdoptExisting(candidate_id=candidate_id) | AdoptAndUpdate(candidate_id=candidate_id):
            if candidate_id not in request.candidate_ids():
                raise InvalidDecisionError(f"Candidate {candidate_id} was not offered")
            return answer
        case _:
            raise InvalidDecisionError(f"Decision surface returned no intent: {answer!r}")


@dataclass(slots=True)
class ScriptedDecisionSurface:
    """Answers decision requests from a fixed queue of intents.

    Used by automated callers and tests. Running out of scripted answers is
    treated as a cancellation rather than a silent default.
    """

    intents: deque[Intent] = field(default_factory=deque["Intent"])
    requests: list[DecisionRequest] = field(default_factory=list[DecisionRequest])

    @classmethod
    def of(cls, *intents: Intent) -> ScriptedDecisionSurface:
        return cls(intents=deque(intents))

    def extend(self, intents: Iterable[Intent]) -> None:
        self.intents.extend(intents)

    def __call__(self, request: DecisionRequest) -> Intent:
        self.requests.append(request)
        if not self.intents:
            raise WorkflowCancelledError("No scripted decision left")
        return self.intents.popleft()

"""Error taxonomy of the create-or-claim workflow.

Every error except :class:`FatalSessionError` leaves the workflow in a state
from which the same or an edited draft can be resubmitted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from anesthesia_reports.domain.model import EntityId


class WorkflowError(Exception):
    """Base class for all failures surfaced by a workflow run."""

    recoverable: bool = True

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(WorkflowError):
    """Raw form input could not be normalized into a draft."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class PrecheckError(WorkflowError):
    """The matching service rejected the precheck request."""


class InvalidDecisionError(WorkflowError):
    """The decision surface answered with something that cannot be executed."""


class ClaimError(WorkflowError):
    """Claim, or the fetch/update that follows it, failed."""

    def __init__(self, message: str, *, candidate_id: EntityId, stage: str) -> None:
        super().__init__(message)
        self.candidate_id = candidate_id
        self.stage = stage


class CreateError(WorkflowError):
    """The create call failed."""


class NetworkError(WorkflowError):
    """Generic transport failure."""

    def __init__(self, message: str = "Network error") -> None:
        super().__init__(message)


class FatalSessionError(WorkflowError):
    """The session is no longer valid; the run is aborted and never retried."""

    recoverable = False

    def __init__(self, message: str = "Session expired", *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class WorkflowCancelledError(WorkflowError):
    """The run was cancelled explicitly or superseded by a newer run."""

    recoverable = False


def find_fatal_session_error(exc: BaseException) -> FatalSessionError | None:
    """Return a fatal session error anywhere in ``exc``'s cause/context chain."""

    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, FatalSessionError):
            return current
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return None

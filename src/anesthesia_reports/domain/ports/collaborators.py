"""Ports for the application collaborators that observe workflow results."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from anesthesia_reports.domain.errors import FatalSessionError


@runtime_checkable
class EntityStore[TEntity](Protocol):
    """Session container caching entity lists for display.

    The workflow writes to it exactly once per resolved run.
    """

    def insert(self, entity: TEntity) -> None: ...

    def upsert(self, entity: TEntity) -> None: ...

    def remove(self, entity_id: str) -> None: ...


@runtime_checkable
class SessionListener(Protocol):
    """Surrounding application hook for sessions that are no longer valid."""

    def on_fatal_session_error(self, error: FatalSessionError) -> None: ...

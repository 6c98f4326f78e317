"""In-memory entity list kept for display during a session."""

from __future__ import annotations

from logging import getLogger
from typing import Protocol

log = getLogger(__name__)


class _Identified(Protocol):
    @property
    def id(self) -> str: ...


class InMemoryEntityStore[TEntity: _Identified]:
    """Newest-first list of entities, keyed by id.

    ``insert`` puts a new entity at the front (replacing any stale copy),
    ``upsert`` replaces an existing entry in place or prepends it when absent.
    """

    def __init__(self) -> None:
        self._items: list[TEntity] = []

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, entity_id: object) -> bool:
        return any(item.id == entity_id for item in self._items)

    def items(self) -> list[TEntity]:
        return list(self._items)

    def get(self, entity_id: str) -> TEntity | None:
        return next((item for item in self._items if item.id == entity_id), None)

    def insert(self, entity: TEntity) -> None:
        self._items = [item for item in self._items if item.id != entity.id]
        self._items.insert(0, entity)
        log.debug(f"Inserted {entity.id}")

    def upsert(self, entity: TEntity) -> None:
        for index, item in enumerate(self._items):
            if item.id == entity.id:
                self._items[index] = entity
                log.debug(f"Replaced {entity.id}")
                return
        self._items.insert(0, entity)
        log.debug(f"Prepended {entity.id}")

    def remove(self, entity_id: str) -> None:
        self._items = [item for item in self._items if item.id != entity_id]

    def clear(self) -> None:
        self._items.clear()

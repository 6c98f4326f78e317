"""Single-flight execution of workflow runs."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from anesthesia_reports.domain.errors import WorkflowCancelledError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Hashable

log = getLogger(__name__)


class SingleFlight:
    """Keeps at most one in-flight task per key.

    Starting a run for a key that already has one pending cancels the older
    task instead of racing it. The caller awaiting the superseded run gets
    :class:`WorkflowCancelledError`. Server-side effects that were already sent
    are not rolled back.
    """

    def __init__(self) -> None:
        self._inflight: dict[Hashable, asyncio.Task[object]] = {}

    def cancel(self, key: Hashable) -> bool:
        task = self._inflight.get(key)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    async def run[T](self, key: Hashable, factory: Callable[[], Awaitable[T]]) -> T:
        if self.cancel(key):
            log.debug("Superseding in-flight run for %s", key)

        task: asyncio.Task[T] = asyncio.ensure_future(factory())
        self._inflight[key] = task  # pyright: ignore[reportArgumentType]
        try:
            return await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            raise WorkflowCancelledError(f"Run for {key} was superseded or cancelled") from None
        finally:
            if self._inflight.get(key) is task:
                del self._inflight[key]

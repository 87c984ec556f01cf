"""Fire-and-forget alternatives lookup after an accepted suggestion."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Protocol, Sequence

from ghosttext.autocomplete.models import Alternative, ContextPair


logger = logging.getLogger(__name__)


class AlternativesEndpoint(Protocol):
    async def alternatives(self, context: ContextPair) -> Sequence[Alternative]:
        ...


class AlternativesFetcher:
    def __init__(
        self,
        endpoint: AlternativesEndpoint,
        on_alternatives: Callable[[list[Alternative]], None],
    ) -> None:
        self._endpoint = endpoint
        self._on_alternatives = on_alternatives
        self._tasks: set[asyncio.Task[list[Alternative]]] = set()

    async def fetch(self, context: ContextPair) -> list[Alternative]:
        try:
            alternatives = list(await self._endpoint.alternatives(context))
        except Exception:
            logger.exception("Alternatives request failed; delivering an empty list")
            alternatives = []

        try:
            self._on_alternatives(alternatives)
        except Exception:
            logger.exception("Alternatives callback failed")
        return alternatives

    def schedule(self, context: ContextPair) -> asyncio.Task[list[Alternative]]:
        task = asyncio.get_running_loop().create_task(self.fetch(context))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def close(self) -> None:
        tasks = list(self._tasks)
        self._tasks.clear()
        for task in tasks:
            task.cancel()

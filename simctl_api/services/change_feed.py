"""Deduplicating change feed over a periodically polled source.

The first poll runs as soon as a subscriber starts iterating and is always
emitted.  After that the source is polled every ``interval`` seconds and a
value is only emitted when it differs (by model equality) from the last one
emitted.  A failed poll ends the stream with that poll's error.
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Awaitable, Callable, Generic, TypeVar

from simctl_api.models.results import ExecutionResult
from simctl_api.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")

_UNSET = object()


class ChangeFeed(Generic[T]):
    def __init__(
        self,
        poll: Callable[[], Awaitable[ExecutionResult[T]]],
        interval: float = 5.0,
        *,
        name: str = "feed",
    ) -> None:
        self._poll = poll
        self.interval = interval
        self.name = name

    async def subscribe(self) -> AsyncIterator[T]:
        """Yield snapshots until the consumer stops or a poll fails.

        Each call has its own "last emitted" state.  Polls never overlap:
        the next one is scheduled only after the previous one finished.
        """
        last: object = _UNSET
        polls = 0
        try:
            while True:
                result = await self._poll()
                polls += 1
                if not result.ok:
                    log.warning(
                        "feed.poll_failed",
                        feed=self.name,
                        poll=polls,
                        kind=result.error.kind,
                        error=str(result.error),
                    )
                    raise result.error
                value = result.value
                if last is _UNSET or value != last:
                    last = value
                    log.debug("feed.emit", feed=self.name, poll=polls)
                    yield value
                await asyncio.sleep(self.interval)
        finally:
            log.debug("feed.closed", feed=self.name, polls=polls)

    def __aiter__(self) -> AsyncIterator[T]:
        return self.subscribe()

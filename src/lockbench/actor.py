"""
Cooperative scheduling counter.

CounterActor owns its state through a mailbox processed by a single asyncio
task. Callers never block a thread: each operation enqueues a message and
suspends on a future until the worker has handled it. Suspended callers may
interleave freely, but messages are handled one at a time, so mutations are
strictly serialized.
"""

import asyncio
from collections.abc import Callable
from typing import Any

import structlog

from .containers import last_or_zero, last_or_zero_with_work, simulate_work
from .exceptions import ActorClosedError

logger = structlog.get_logger(__name__)

_STOP = object()


class CounterActor:
    """
    Counter with suspending ``write``/``read``/``reset`` operations.

    The mailbox worker starts lazily on the first call, on the running event
    loop, and is stopped by ``aclose``. An actor is bound to the loop it was
    first used on.
    """

    def __init__(self):
        self._values: list[int] = []
        self._mailbox: asyncio.Queue | None = None
        self._worker: asyncio.Task | None = None
        self._closed = False
        self._handled = 0

    @property
    def handled_messages(self) -> int:
        """Number of messages the worker has processed."""
        return self._handled

    @property
    def closed(self) -> bool:
        return self._closed

    async def write(self, value: int) -> None:
        await self._send(self._values.append, value)

    async def read(self) -> int:
        return await self._send(self._last)

    async def write_with_simulated_work(self, value: int) -> None:
        await self._send(self._append_with_work, value)

    async def read_with_simulated_work(self) -> int:
        return await self._send(self._last_with_work)

    async def reset(self) -> None:
        await self._send(self._values.clear)

    async def aclose(self) -> None:
        """Stop the mailbox worker after it drains queued messages."""
        if self._closed:
            return
        self._closed = True
        if self._worker is not None:
            self._mailbox.put_nowait(_STOP)
            await self._worker
            logger.debug("CounterActor stopped", handled_messages=self._handled)

    async def __aenter__(self) -> "CounterActor":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _last(self) -> int:
        return last_or_zero(self._values)

    def _last_with_work(self) -> int:
        return last_or_zero_with_work(self._values)

    def _append_with_work(self, value: int) -> None:
        simulate_work()
        self._values.append(value)

    async def _send(self, handler: Callable[..., Any], *args: Any) -> Any:
        if self._closed:
            raise ActorClosedError()

        loop = asyncio.get_running_loop()
        if self._worker is None:
            self._mailbox = asyncio.Queue()
            self._worker = loop.create_task(self._run(), name="lockbench-actor")

        future = loop.create_future()
        self._mailbox.put_nowait((handler, args, future))
        return await future

    async def _run(self) -> None:
        mailbox = self._mailbox
        while True:
            message = await mailbox.get()
            if message is _STOP:
                return

            handler, args, future = message
            self._handled += 1
            if future.cancelled():
                continue
            try:
                result = handler(*args)
            except Exception as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)

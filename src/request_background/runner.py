from __future__ import annotations

import asyncio
import inspect
import time

from request_background.config import get_settings
from request_background.options import BackgroundOptions
from request_background.tasks import TaskQueue
from request_background.utils.log import logger


class BackgroundRunner:
    """
    Fire-and-forget launcher for per-request drains.

    - `dispatch()` starts `queue.run()` as a detached asyncio task and returns at once
    - a failed drain is routed to exactly one sink (`on_error` or the default), once
    - async error handlers are scheduled, never awaited by the drain
    - in-flight work is held here (strong refs) so `shutdown()` can wait for / cancel it
    """

    def __init__(self, options: BackgroundOptions | None = None) -> None:
        self.options = options or BackgroundOptions()
        self._inflight: set[asyncio.Future] = set()

    @property
    def inflight(self) -> int:
        return len(self._inflight)

    def _track(self, fut: asyncio.Future) -> None:
        self._inflight.add(fut)
        fut.add_done_callback(self._on_done)

    def _on_done(self, fut: asyncio.Future) -> None:
        self._inflight.discard(fut)
        if fut.cancelled():
            return
        ex = fut.exception()
        if ex is None:
            return
        # Only error handlers can land here; hand their failure to the loop, unhandled.
        fut.get_loop().call_exception_handler(
            {
                "message": "request_background error handler failed",
                "exception": ex,
                "future": fut,
            }
        )

    def dispatch(self, queue: TaskQueue) -> asyncio.Task[None] | None:
        if not queue.tasks:
            return None
        task = asyncio.get_running_loop().create_task(
            self._drain(queue), name=f"request_background.drain.{id(queue):x}"
        )
        self._track(task)
        return task

    async def _drain(self, queue: TaskQueue) -> None:
        t0 = time.perf_counter()
        try:
            await queue.run()
        except Exception as ex:
            logger.debug(
                "background_drain_failed",
                completed=queue.completed,
                skipped=queue.drained - queue.completed - 1,
                error_type=type(ex).__name__,
            )
            self.report(ex)
            return
        logger.debug(
            "background_drain_ok",
            tasks=queue.completed,
            duration_ms=(time.perf_counter() - t0) * 1000.0,
        )

    def report(self, error: BaseException) -> None:
        result = self.options.error_handler()(error)
        if inspect.isawaitable(result):
            self._track(asyncio.ensure_future(result))

    async def shutdown(self, *, timeout_s: float | None = None) -> None:
        """
        Let in-flight drains (and async error handlers) finish until the deadline,
        then cancel whatever is left.
        """
        if timeout_s is None:
            timeout_s = float(get_settings().shutdown_timeout_sec)
        deadline = time.monotonic() + float(timeout_s)
        # Drains that fail during the wait may schedule async error handlers.
        while self._inflight:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            await asyncio.wait(set(self._inflight), timeout=remaining)
        pending = list(self._inflight)
        if not pending:
            return
        for fut in pending:
            fut.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning("background_shutdown_cancelled", count=len(pending), timeout_s=timeout_s)

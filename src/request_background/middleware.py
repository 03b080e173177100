from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from request_background.runner import BackgroundRunner
from request_background.tasks import TaskQueue
from request_background.utils.log import logger, set_request_id

CallNext = Callable[[Request], Awaitable[Response]]


def _new_request_id() -> str:
    return uuid.uuid4().hex


async def request_context_middleware(request: Request, call_next: CallNext) -> Response:
    """
    Request-scoped context:
    - Inject X-Request-ID if absent
    - Put request_id into a contextvar so all logs (including detached drains) get it
    """
    rid = request.headers.get("x-request-id") or _new_request_id()
    set_request_id(rid)
    request.state.request_id = rid
    try:
        resp = await call_next(request)
        resp.headers.setdefault("x-request-id", rid)
        return resp
    finally:
        set_request_id(None)


class BackgroundMiddleware:
    """
    ASGI middleware that gives every HTTP request its own `TaskQueue`.

    - the queue is exposed as `request.state.task_queue`
    - the drain is launched once the final `http.response.body` message has gone out,
      whatever the status code
    - if the endpoint raises, the error response is produced further out (by the
      server error handler); the drain is launched as the exception leaves this layer
    - the request never waits for the drain
    """

    def __init__(self, app: ASGIApp, runner: BackgroundRunner) -> None:
        self.app = app
        self.runner = runner

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        queue = TaskQueue()
        scope.setdefault("state", {})["task_queue"] = queue
        launched = False

        def launch() -> None:
            nonlocal launched
            if not launched:
                launched = True
                self.runner.dispatch(queue)

        async def send_then_launch(message: Message) -> None:
            await send(message)
            if message["type"] == "http.response.body" and not message.get("more_body", False):
                launch()

        try:
            await self.app(scope, receive, send_then_launch)
        except Exception:
            if not launched and len(queue):
                logger.debug("background_dispatch_after_error", tasks=len(queue))
            launch()
            raise
        # e.g. client disconnected before the body completed
        launch()

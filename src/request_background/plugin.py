from __future__ import annotations

from fastapi import FastAPI

from request_background.middleware import BackgroundMiddleware, request_context_middleware
from request_background.options import BackgroundOptions
from request_background.runner import BackgroundRunner


def install_background(
    app: FastAPI,
    options: BackgroundOptions | None = None,
    *,
    request_id: bool = True,
) -> BackgroundRunner:
    """
    Wire per-request background tasks into `app`.

    - every request gets a fresh `TaskQueue` (`request.state.task_queue` / `TaskQueueDep`)
    - queued tasks drain after the response is sent, detached from the request
    - the runner is kept on `app.state.background_runner`; call `runner.shutdown()`
      from the app's lifespan to wait for in-flight drains on exit

    Must be called before the app starts serving.
    """
    runner = BackgroundRunner(options)
    app.state.background_runner = runner
    app.add_middleware(BackgroundMiddleware, runner=runner)
    # Registered last => outermost, so request_id is bound before the queue exists.
    if request_id:
        app.middleware("http")(request_context_middleware)
    return runner

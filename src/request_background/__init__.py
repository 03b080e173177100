"""
Per-request background tasks for FastAPI.

Usage:
    from fastapi import FastAPI
    from request_background import TaskQueueDep, install_background

    app = FastAPI()
    install_background(app)

    @app.post("/users")
    async def create_user(user: User, tasks: TaskQueueDep):
        tasks.add_task(send_welcome_email, user.email)
        return {"id": user.id, "status": "created"}

Tasks must be async. They run one at a time, in the order they were added, after
the response has been sent; the first failure stops the rest and is passed to
`BackgroundOptions.on_error` (or logged).
"""

from .deps import TaskQueueDep, get_task_queue
from .errors import BackgroundError, BackgroundNotInstalledError, TaskKindError
from .options import BackgroundOptions, default_error_sink
from .plugin import install_background
from .runner import BackgroundRunner
from .tasks import Task, TaskQueue

__all__ = [
    # Core
    "Task",
    "TaskQueue",
    # Hook
    "BackgroundOptions",
    "BackgroundRunner",
    "default_error_sink",
    # FastAPI
    "install_background",
    "get_task_queue",
    "TaskQueueDep",
    # Errors
    "BackgroundError",
    "BackgroundNotInstalledError",
    "TaskKindError",
]

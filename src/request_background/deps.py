from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from request_background.errors import BackgroundNotInstalledError
from request_background.tasks import TaskQueue


def get_task_queue(request: Request) -> TaskQueue:
    queue = getattr(request.state, "task_queue", None)
    if not isinstance(queue, TaskQueue):
        raise BackgroundNotInstalledError(
            "no task queue on this request; call install_background(app) before startup"
        )
    return queue


TaskQueueDep = Annotated[TaskQueue, Depends(get_task_queue)]

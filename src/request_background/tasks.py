from __future__ import annotations

import functools
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from request_background.errors import TaskKindError
from request_background.utils.log import logger

TaskFunc = Callable[..., Awaitable[Any]]


def is_async_callable(func: Any) -> bool:
    """
    True for coroutine functions, `functools.partial` wrappers around them, and
    objects whose `__call__` is a coroutine function.
    """
    while isinstance(func, functools.partial):
        func = func.func
    if inspect.iscoroutinefunction(func):
        return True
    # A class with an async __call__ is a constructor, not a coroutine function.
    if inspect.isclass(func):
        return False
    return callable(func) and inspect.iscoroutinefunction(getattr(func, "__call__", None))


def _task_name(func: Any) -> str:
    while isinstance(func, functools.partial):
        func = func.func
    return str(getattr(func, "__qualname__", None) or type(func).__qualname__)


class Task:
    """
    One deferred unit of work: an async callable plus the arguments it was queued with.

    The callable is classified once, at construction; `run()` never re-inspects it.
    """

    __slots__ = ("func", "args", "kwargs", "is_suspending")

    def __init__(self, func: TaskFunc, *args: Any, **kwargs: Any) -> None:
        self.func = func
        self.args = args
        self.kwargs = kwargs
        self.is_suspending = is_async_callable(func)

    @property
    def name(self) -> str:
        return _task_name(self.func)

    async def run(self) -> None:
        if not self.is_suspending:
            raise TaskKindError(self.func)
        await self.func(*self.args, **self.kwargs)

    def __repr__(self) -> str:
        return f"Task({self.name}, args={len(self.args)}, kwargs={sorted(self.kwargs)})"


class TaskQueue:
    """
    Ordered tasks for a single request, drained after its response has been sent.

    - `add_task` only records work; nothing runs until `run()`
    - `run()` awaits tasks one at a time, in insertion order
    - the first failure stops the drain and is re-raised unchanged; later tasks never run

    Error routing is left to the caller (see `BackgroundRunner`).
    """

    def __init__(self, tasks: list[Task] | None = None) -> None:
        self.tasks: list[Task] = list(tasks) if tasks is not None else []
        self.completed = 0
        # Size of the last drain's snapshot.
        self.drained = 0

    def __len__(self) -> int:
        return len(self.tasks)

    def add_task(self, func: TaskFunc, *args: Any, **kwargs: Any) -> None:
        self.tasks.append(Task(func, *args, **kwargs))

    async def run(self) -> None:
        # Tasks appended while draining are not part of this pass.
        snapshot = tuple(self.tasks)
        self.drained = len(snapshot)
        self.completed = 0
        logger.debug("background_drain_started", tasks=len(snapshot))
        for task in snapshot:
            await task.run()
            self.completed += 1
        late = len(self.tasks) - len(snapshot)
        if late > 0:
            logger.warning("background_tasks_added_during_drain_ignored", count=late)
        logger.debug("background_drain_done", tasks=len(snapshot))

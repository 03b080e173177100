from __future__ import annotations


class BackgroundError(Exception):
    """Base class for errors raised by request_background itself."""


class TaskKindError(BackgroundError, TypeError):
    """
    A queued callable is not async.

    Raised by `Task.run()` instead of invoking the callable: synchronous work would
    block the event loop that also serves new requests.
    """

    def __init__(self, func: object) -> None:
        name = getattr(func, "__qualname__", None) or repr(func)
        super().__init__(
            f"synchronous task not supported: {name} must be an async callable"
        )
        self.func = func


class BackgroundNotInstalledError(BackgroundError, RuntimeError):
    pass

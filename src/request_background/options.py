from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from request_background.utils.log import logger

ERROR_TAG = "[request-background]"

ErrorHandler = Callable[[BaseException], "Awaitable[None] | None"]


def default_error_sink(error: BaseException) -> None:
    """Log a failed drain to the package's diagnostic stream, tagged and with traceback."""
    logger.error(
        f"{ERROR_TAG} Task failed",
        error=repr(error),
        error_type=type(error).__name__,
        exc_info=error,
    )


@dataclass(frozen=True, slots=True)
class BackgroundOptions:
    """
    Options for the background hook.

    on_error:
      Called once with the failing task's exception when a drain aborts.
      May be sync or async; an async handler is scheduled, not awaited.
      Defaults to `default_error_sink`.
    """

    on_error: ErrorHandler | None = None

    def error_handler(self) -> ErrorHandler:
        return self.on_error if self.on_error is not None else default_error_sink

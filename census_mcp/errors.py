import asyncio
from functools import wraps
from typing import Any, Awaitable, Callable


class CensusServerError(Exception):
    """Base class for every failure the tool layer knows how to report."""


class ValidationError(CensusServerError, ValueError):
    """A required argument is missing or empty; raised before any I/O."""


class ToolArgumentError(ValidationError):
    """Tool call arguments are incomplete; the message is shown to the caller as is."""


class UpstreamError(CensusServerError):
    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.endpoint = endpoint


class DecodeError(CensusServerError):
    """The response body does not have the expected shape."""


class EmptyResultError(CensusServerError):
    """The response is well formed but carries no data rows."""


def _tool_error_boundary(
    prefix: str,
) -> Callable[[Callable[..., Awaitable[Any]]], Callable[..., Awaitable[Any]]]:
    """Turn exceptions raised by a tool method into error results.

    The decorated method must live on an object exposing ``_error_result`` and
    ``_logger``. Argument errors are reported verbatim, every other failure
    gets ``prefix`` in front of its message.
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @wraps(func)
        async def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            try:
                return await func(self, *args, **kwargs)
            except asyncio.CancelledError:
                raise
            except ToolArgumentError as exc:
                self._logger.warning(
                    "Tool arguments rejected",
                    extra={"tool": func.__name__, "reason": str(exc)},
                )
                return self._error_result(str(exc))
            except CensusServerError as exc:
                self._logger.error(
                    "Tool call failed",
                    extra={
                        "tool": func.__name__,
                        "error_type": type(exc).__name__,
                        "reason": str(exc),
                    },
                )
                return self._error_result(prefix + str(exc))
            except Exception as exc:
                self._logger.exception("Unhandled tool error in '%s'", func.__name__)
                return self._error_result(prefix + str(exc))

        return wrapper

    return decorator

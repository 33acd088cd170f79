"""Completion styles layered over one awaitable API call.

The awaitable coroutine is the canonical form. ``run_with_callback`` and
``Single`` adapt it to a completion callback and to a single-value stream
without duplicating any request logic.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Generator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from kitchen.network.errors import NetworkError, UnknownNetworkError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of one call: either ``value`` or ``error`` is meaningful."""

    value: T | None = None
    error: NetworkError | None = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: NetworkError) -> Result[T]:
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value or raise the error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


def _as_network_error(exc: BaseException) -> NetworkError:
    if isinstance(exc, NetworkError):
        return exc
    return UnknownNetworkError(exc)


def _result_of(task: asyncio.Task) -> Result[Any]:
    if task.cancelled():
        return Result.failure(UnknownNetworkError(asyncio.CancelledError()))
    exc = task.exception()
    if exc is not None:
        return Result.failure(_as_network_error(exc))
    return Result.success(task.result())


def run_with_callback(
    call: Awaitable[T],
    completion: Callable[[Result[T]], None],
) -> asyncio.Task:
    """Schedule ``call`` on the running loop and hand its ``Result`` to ``completion``.

    ``completion`` is invoked exactly once, on the event loop thread, after
    the call finishes. Cancelling the returned task completes with
    ``UnknownNetworkError`` wrapping ``CancelledError``.
    """
    task = asyncio.ensure_future(call)

    def _done(finished: asyncio.Task) -> None:
        try:
            completion(_result_of(finished))
        except Exception:
            logger.exception("Completion callback raised")

    task.add_done_callback(_done)
    return task


class Subscription:
    """Handle returned by ``Single.subscribe``."""

    def __init__(self) -> None:
        self._cancelled = False
        self._task: asyncio.Task | None = None

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Suppress any later delivery. The in-flight request keeps running."""
        self._cancelled = True


class Single(Generic[T]):
    """Single-value, single-error stream over one awaitable call.

    Each ``subscribe`` starts the call once and delivers either a value
    followed by completion, or one error. Awaiting the ``Single`` yields the
    value or raises the error.

    Parameters
    ----------
    factory:
        Zero-argument callable producing the awaitable to run.
    """

    def __init__(self, factory: Callable[[], Awaitable[T]]) -> None:
        self._factory = factory

    def subscribe(
        self,
        on_value: Callable[[T], None],
        on_error: Callable[[NetworkError], None] | None = None,
        on_complete: Callable[[], None] | None = None,
    ) -> Subscription:
        subscription = Subscription()
        task = asyncio.ensure_future(self._factory())

        def _deliver(finished: asyncio.Task) -> None:
            result = _result_of(finished)
            if subscription.is_cancelled:
                return
            try:
                if result.error is not None:
                    if on_error is not None:
                        on_error(result.error)
                    return
                on_value(result.value)  # type: ignore[arg-type]
                if on_complete is not None:
                    on_complete()
            except Exception:
                logger.exception("Stream subscriber raised")

        task.add_done_callback(_deliver)
        subscription._task = task
        return subscription

    def __await__(self) -> Generator[Any, None, T]:
        return self._factory().__await__()

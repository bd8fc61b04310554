"""Shared plumbing for store operations.

Contract:
- Every store operation settles into an ``OperationResult``; remote failures
  are data, never exceptions, once inside a store.
- Pending flags are backed by counters so overlapping operations of the same
  kind keep the flag raised until the last one settles.
- ``Store.dispatch`` starts an operation as a background task and keeps a
  reference to it until it finishes.
"""

import asyncio
import logging
from collections.abc import Coroutine
from collections.abc import Hashable
from dataclasses import dataclass
from typing import Any
from typing import Generic
from typing import TypeVar

from pydantic import BaseModel

from .events import StateEmitter
from .remote.errors import RemoteServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")
StateT = TypeVar("StateT", bound=BaseModel)


@dataclass
class OperationResult(Generic[T]):
    """Outcome of a store operation."""

    ok: bool
    value: T | None = None
    error: str | None = None

    @classmethod
    def success(cls, value: T | None = None) -> "OperationResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> "OperationResult[T]":
        return cls(ok=False, error=error)


class PendingCounter:
    """Counts in-flight operations per key."""

    def __init__(self) -> None:
        self._counts: dict[Hashable, int] = {}

    def begin(self, key: Hashable) -> None:
        self._counts[key] = self._counts.get(key, 0) + 1

    def end(self, key: Hashable) -> bool:
        """Mark one operation settled; return whether any are still in flight."""
        remaining = self._counts.get(key, 0) - 1
        if remaining > 0:
            self._counts[key] = remaining
            return True
        self._counts.pop(key, None)
        return False


class Store(Generic[StateT]):
    """Base class for stores owning one state model."""

    def __init__(self, state: StateT) -> None:
        self._state = state
        self._emitter: StateEmitter[StateT] = StateEmitter()
        self._pending = PendingCounter()
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def state(self) -> StateT:
        """Snapshot of the current state. Mutating it does not affect the store."""
        return self._state.model_copy(deep=True)

    def subscribe(self) -> asyncio.Queue[StateT]:
        return self._emitter.subscribe()

    def unsubscribe(self, queue: asyncio.Queue[StateT]) -> None:
        self._emitter.unsubscribe(queue)

    def _publish(self) -> None:
        self._emitter.emit(self.state)

    def dispatch(self, operation: Coroutine[Any, Any, T]) -> asyncio.Task[T]:
        """Run an operation in the background.

        Args:
            operation: Coroutine returned by one of the store's operations;
                input validation already happened when it was created

        Returns:
            The task; awaiting it yields the operation's result
        """
        task = asyncio.create_task(operation)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait until every dispatched operation has settled.

        Operations report failures as results; anything a task raises
        anyway is logged here rather than re-raised.
        """
        while self._tasks:
            results = await asyncio.gather(*list(self._tasks), return_exceptions=True)
            for result in results:
                if isinstance(result, BaseException):
                    logger.error(f"Dispatched operation raised: {result!r}")

    def _record_failure(self, exc: RemoteServiceError, fallback: str) -> OperationResult[Any]:
        """Capture a remote failure as data: log it and keep the message in ``last_error``."""
        message = exc.message or fallback
        logger.warning(f"{fallback}: {exc}")
        self._state.last_error = message
        return OperationResult.failure(message)

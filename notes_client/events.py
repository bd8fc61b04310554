"""State publication for stores.

Each subscriber gets its own unbounded queue so a slow reader never blocks a
store. Stores push a fresh snapshot after every transition.
"""

import asyncio
from typing import Generic
from typing import TypeVar

SnapshotT = TypeVar("SnapshotT")


class StateEmitter(Generic[SnapshotT]):
    """Fan-out of state snapshots to subscriber queues."""

    def __init__(self) -> None:
        self.queues: list[asyncio.Queue[SnapshotT]] = []

    def subscribe(self) -> asyncio.Queue[SnapshotT]:
        """Create new subscriber queue.

        Returns:
            asyncio.Queue that will receive every published snapshot
        """
        queue: asyncio.Queue[SnapshotT] = asyncio.Queue()
        self.queues.append(queue)
        return queue

    def emit(self, snapshot: SnapshotT) -> None:
        """Push a snapshot to all subscriber queues.

        Args:
            snapshot: Immutable-by-convention copy of the store state
        """
        for queue in self.queues:
            queue.put_nowait(snapshot)

    def unsubscribe(self, queue: asyncio.Queue[SnapshotT]) -> None:
        """Remove subscriber queue.

        Args:
            queue: Queue to remove
        """
        if queue in self.queues:
            self.queues.remove(queue)

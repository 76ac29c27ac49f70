import asyncio
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from algorithms.exceptions import EmptyQueueError, NotFoundError
from algorithms.priority_queue import PriorityQueue

_logger = logger.bind(name="storage.queue_registry")


class QueueRegistry:
    """Named priority queues shared by one service instance.

    The registry is constructed by whoever composes the service and passed
    to its consumers explicitly. Every queue operation goes through a single
    asyncio.Lock, which serializes mutations as PriorityQueue requires.

    Only enqueue creates a queue. Every other operation treats an unknown
    name as an empty queue and leaves the registry untouched.
    """

    def __init__(self, initial_capacity: int = PriorityQueue.INITIAL_CAPACITY):
        self.initial_capacity = initial_capacity
        self._queues: Dict[str, PriorityQueue] = {}
        self._lock = asyncio.Lock()

    def get_or_create(self, name: str) -> PriorityQueue:
        if name not in self._queues:
            self._queues[name] = PriorityQueue(initial_capacity=self.initial_capacity)
            _logger.debug(f"Created queue '{name}'")
        return self._queues[name]

    def _get(self, name: str) -> Optional[PriorityQueue]:
        return self._queues.get(name)

    def _status(self, name: str) -> Dict[str, Any]:
        queue = self._get(name)
        if queue is None:
            return {"name": name, "size": 0, "capacity": self.initial_capacity}
        return {
            "name": name,
            "size": queue.size(),
            "capacity": queue.capacity
        }

    def names(self) -> List[str]:
        return sorted(self._queues)

    def drop(self, name: str) -> bool:
        if self._queues.pop(name, None) is None:
            return False
        _logger.info(f"Dropped queue '{name}'")
        return True

    def clear_all(self):
        self._queues.clear()

    async def enqueue(self, name: str, value: Any, priority: float) -> Dict[str, Any]:
        """Enqueue and return the queue status observed under the same lock."""
        async with self._lock:
            self.get_or_create(name).enqueue(value, priority)
            return self._status(name)

    async def dequeue(self, name: str) -> Any:
        async with self._lock:
            queue = self._get(name)
            if queue is None:
                raise EmptyQueueError(f"queue '{name}' is empty")
            return queue.dequeue()

    async def peek(self, name: str) -> Tuple[Any, float]:
        async with self._lock:
            queue = self._get(name)
            if queue is None:
                raise EmptyQueueError(f"queue '{name}' is empty")
            return queue.peek(), queue.peek_priority()

    async def decrease_key(self, name: str, value: Any, new_priority: float):
        async with self._lock:
            queue = self._get(name)
            if queue is None:
                raise NotFoundError(f"value {value!r} is not in the queue")
            queue.decrease_key(value, new_priority)

    async def get_priority(self, name: str, value: Any) -> float:
        async with self._lock:
            queue = self._get(name)
            if queue is None:
                raise NotFoundError(f"value {value!r} is not in the queue")
            return queue.get_priority(value)

    async def contains(self, name: str, value: Any) -> bool:
        async with self._lock:
            queue = self._get(name)
            return queue is not None and queue.contains(value)

    async def status(self, name: str) -> Dict[str, Any]:
        async with self._lock:
            return self._status(name)

    async def age(self, name: str, threshold: float, step: float,
                  floor: Optional[float] = None) -> int:
        async with self._lock:
            queue = self._get(name)
            promoted = queue.apply_aging(threshold, step, floor) if queue is not None else 0
        if promoted:
            _logger.debug(f"Aged {promoted} entries in queue '{name}'")
        return promoted

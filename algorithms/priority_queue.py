import time
from dataclasses import dataclass
from typing import Callable, Generic, Iterator, List, Optional, TypeVar

from loguru import logger

from .exceptions import EmptyQueueError, InvalidPriorityError, NotFoundError

T = TypeVar("T")

_logger = logger.bind(name="algorithms.priority_queue")


@dataclass
class HeapEntry(Generic[T]):
    value: T
    priority: float
    sequence: int
    enqueued_at: float = 0.0

    def __lt__(self, other):
        if self.priority != other.priority:
            return self.priority < other.priority
        return self.sequence < other.sequence


class PriorityQueue(Generic[T]):
    """Array-backed binary min-heap keyed on (priority, insertion sequence).

    Equal priorities come out in insertion order. Value lookups
    (decrease_key, get_priority, contains) are linear scans using ``==``,
    so values never need to be hashable; when several live entries hold
    equal values the first one in heap-array order is used.

    Not thread-safe: callers must serialize enqueue, dequeue and
    decrease_key on a given instance.
    """

    INITIAL_CAPACITY = 16

    def __init__(self, initial_capacity: int = INITIAL_CAPACITY,
                 clock: Callable[[], float] = time.monotonic):
        if initial_capacity < 1:
            raise ValueError(f"initial_capacity must be at least 1, got {initial_capacity}")
        self._initial_capacity = initial_capacity
        self.heap: List[Optional[HeapEntry[T]]] = [None] * initial_capacity
        self._size = 0
        self.sequence = 0
        self.clock = clock

    def _sift_up(self, index: int):
        """Carry the entry at ``index`` rootward past every greater parent."""
        heap = self.heap
        entry = heap[index]
        while index > 0:
            parent = (index - 1) // 2
            if not entry < heap[parent]:
                break
            heap[index] = heap[parent]
            index = parent
        heap[index] = entry

    def _sift_down(self, index: int):
        """Carry the entry at ``index`` leafward past every smaller child."""
        heap = self.heap
        size = self._size
        entry = heap[index]
        while True:
            child = 2 * index + 1
            if child >= size:
                break
            # Prefer the right child only when it is strictly smaller
            if child + 1 < size and heap[child + 1] < heap[child]:
                child += 1
            if not heap[child] < entry:
                break
            heap[index] = heap[child]
            index = child
        heap[index] = entry

    def _ensure_capacity(self):
        """Double the backing storage when every slot is taken."""
        capacity = len(self.heap)
        if self._size < capacity:
            return
        # Build the new storage fully before swapping it in
        grown = self.heap[:self._size] + [None] * capacity
        self.heap = grown
        _logger.debug(f"Grew heap storage from {capacity} to {len(grown)} slots")

    def _index_of(self, value: T) -> int:
        for i in range(self._size):
            if self.heap[i].value == value:
                return i
        raise NotFoundError(f"value {value!r} is not in the queue")

    def _lower_priority(self, index: int, new_priority: float):
        self.heap[index].priority = new_priority
        self._sift_up(index)

    @property
    def capacity(self) -> int:
        return len(self.heap)

    def size(self) -> int:
        return self._size

    def is_empty(self) -> bool:
        return self._size == 0

    def enqueue(self, value: T, priority: float):
        self._ensure_capacity()
        entry = HeapEntry(
            value=value,
            priority=priority,
            sequence=self.sequence,
            enqueued_at=self.clock()
        )
        self.sequence += 1
        index = self._size
        self.heap[index] = entry
        self._size += 1
        self._sift_up(index)

    def dequeue(self) -> T:
        """Remove and return the value with the smallest (priority, sequence)."""
        if self._size == 0:
            raise EmptyQueueError("dequeue from an empty priority queue")

        root = self.heap[0]
        self._size -= 1

        if self._size == 0:
            self.heap[0] = None
            return root.value

        last = self._size
        self.heap[0] = self.heap[last]
        self.heap[last] = None
        self._sift_down(0)

        return root.value

    def peek(self) -> T:
        if self._size == 0:
            raise EmptyQueueError("peek into an empty priority queue")
        return self.heap[0].value

    def peek_priority(self) -> float:
        if self._size == 0:
            raise EmptyQueueError("peek into an empty priority queue")
        return self.heap[0].priority

    def decrease_key(self, value: T, new_priority: float):
        """Lower the priority of the first entry equal to ``value``.

        Raises NotFoundError when no live entry matches and
        InvalidPriorityError unless ``new_priority`` is strictly lower than
        the current priority. The entry is sifted up on the full
        (priority, sequence) key, so ties keep their insertion order.
        """
        index = self._index_of(value)
        current = self.heap[index].priority
        if not new_priority < current:
            raise InvalidPriorityError(
                f"decrease_key needs a priority below {current}, got {new_priority}"
            )
        self._lower_priority(index, new_priority)

    def get_priority(self, value: T) -> float:
        return self.heap[self._index_of(value)].priority

    def contains(self, value: T) -> bool:
        try:
            self._index_of(value)
        except NotFoundError:
            return False
        return True

    def apply_aging(self, threshold: float, step: float, floor: Optional[float] = None) -> int:
        """Lower the priority of entries waiting longer than ``threshold`` seconds.

        Each such entry drops by ``step`` but never below ``floor``.
        Returns the number of entries that were promoted.
        """
        if step <= 0:
            raise InvalidPriorityError(f"aging step must be positive, got {step}")

        current_time = self.clock()
        promoted = 0

        # Sifting up only moves ancestors down into already-visited slots,
        # so every entry is considered exactly once.
        for i in range(self._size):
            entry = self.heap[i]
            if current_time - entry.enqueued_at <= threshold:
                continue
            new_priority = entry.priority - step
            if floor is not None:
                new_priority = max(new_priority, floor)
            if new_priority < entry.priority:
                self._lower_priority(i, new_priority)
                promoted += 1

        return promoted

    def clear(self):
        """Drop every entry. The sequence counter keeps counting."""
        self.heap = [None] * self._initial_capacity
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._size > 0

    def __contains__(self, value) -> bool:
        return self.contains(value)

    def __iter__(self) -> Iterator[T]:
        # Heap-array order, not priority order
        return iter([entry.value for entry in self.heap[:self._size]])

    def __repr__(self) -> str:
        return f"PriorityQueue(size={self._size}, capacity={len(self.heap)})"

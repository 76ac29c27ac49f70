from .priority_queue import PriorityQueue, HeapEntry
from .exceptions import PriorityQueueError, EmptyQueueError, NotFoundError, InvalidPriorityError

__all__ = [
    'PriorityQueue',
    'HeapEntry',
    'PriorityQueueError',
    'EmptyQueueError',
    'NotFoundError',
    'InvalidPriorityError',
]

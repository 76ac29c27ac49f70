class PriorityQueueError(Exception):
    """Base class for every failure raised by PriorityQueue."""

    kind = "priority_queue_error"


class EmptyQueueError(PriorityQueueError, IndexError):
    """The operation needs a live entry but the queue holds none."""

    kind = "empty_queue"


class NotFoundError(PriorityQueueError, KeyError):
    """No live entry compares equal to the requested value."""

    kind = "not_found"

    def __str__(self):
        # KeyError quotes its argument; keep the plain message instead
        return str(self.args[0]) if self.args else ""


class InvalidPriorityError(PriorityQueueError, ValueError):
    """A priority change would not strictly lower the current priority."""

    kind = "invalid_priority"

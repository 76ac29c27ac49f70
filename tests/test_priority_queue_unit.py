"""
Unit tests for PriorityQueue: algorithmic correctness.
Tests heap invariants, enqueue/dequeue ordering, peeking, growth and lookups.
"""
import pytest
import random
import time
from algorithms.priority_queue import PriorityQueue, HeapEntry
from algorithms.exceptions import EmptyQueueError, NotFoundError, PriorityQueueError
from conftest import assert_heap_order


def test_new_queue_is_empty():
    queue = PriorityQueue()
    assert queue.size() == 0
    assert queue.is_empty()
    assert len(queue) == 0
    assert not queue
    assert queue.capacity == PriorityQueue.INITIAL_CAPACITY == 16


def test_initial_capacity_must_be_positive():
    with pytest.raises(ValueError):
        PriorityQueue(initial_capacity=0)


def test_enqueue_and_dequeue_single(queue):
    """Enqueue one value and dequeue it."""
    queue.enqueue(55, -1.2)
    assert queue.size() == 1
    assert queue.dequeue() == 55
    assert queue.size() == 0
    assert queue.is_empty()


def test_dequeue_respects_priority_order(queue):
    """Values come out lowest priority first."""
    queue.enqueue("normal", 2)
    queue.enqueue("critical", 0)
    queue.enqueue("high", 1)

    assert queue.dequeue() == "critical"
    assert queue.dequeue() == "high"
    assert queue.dequeue() == "normal"


def test_fifo_within_same_priority(queue):
    """Values with the same priority come out in insertion order."""
    for i in range(20):
        queue.enqueue(f"job_{i}", 3.5)

    assert [queue.dequeue() for _ in range(20)] == [f"job_{i}" for i in range(20)]


def test_decreasing_priorities_come_out_reversed(queue):
    for i in range(10):
        queue.enqueue(i, 10.4 - i)

    assert [queue.dequeue() for _ in range(10)] == list(range(9, -1, -1))


def test_dequeue_from_empty_raises(queue):
    with pytest.raises(EmptyQueueError):
        queue.dequeue()


def test_empty_errors_are_index_errors(queue):
    """EmptyQueueError is both a PriorityQueueError and an IndexError."""
    with pytest.raises(IndexError):
        queue.peek()
    with pytest.raises(PriorityQueueError):
        queue.peek_priority()


def test_falsy_values_are_not_confused_with_empty(queue):
    queue.enqueue(0, 1.0)
    queue.enqueue(None, 2.0)
    assert queue.peek() == 0
    assert queue.dequeue() == 0
    assert queue.dequeue() is None
    with pytest.raises(EmptyQueueError):
        queue.dequeue()


def test_peek_returns_min_without_removing(queue):
    queue.enqueue("high", 1)
    queue.enqueue("critical", 0)
    snapshot = list(queue)

    assert queue.peek() == "critical"
    assert queue.peek_priority() == 0
    assert queue.size() == 2
    assert list(queue) == snapshot


def test_peek_on_empty_raises(queue):
    with pytest.raises(EmptyQueueError):
        queue.peek()
    with pytest.raises(EmptyQueueError):
        queue.peek_priority()


def test_size_tracks_enqueues_minus_dequeues(queue):
    expected = 0
    for i in range(30):
        queue.enqueue(i, random.uniform(-5, 5))
        expected += 1
        assert queue.size() == expected
        if i % 3 == 0:
            queue.dequeue()
            expected -= 1
            assert queue.size() == expected


def test_growth_past_initial_capacity():
    """Enqueueing past the initial capacity keeps every entry and heap order."""
    queue = PriorityQueue()
    for i in range(100):
        queue.enqueue(i, -i + i * i * 1.1)
        assert_heap_order(queue)

    assert queue.size() == 100
    assert queue.capacity >= 100

    priorities = []
    values = set()
    while not queue.is_empty():
        priorities.append(queue.peek_priority())
        values.add(queue.dequeue())

    assert values == set(range(100))
    assert priorities == sorted(priorities)


def test_capacity_doubles_when_full():
    queue = PriorityQueue(initial_capacity=2)
    queue.enqueue("a", 1)
    queue.enqueue("b", 2)
    assert queue.capacity == 2

    queue.enqueue("c", 0)
    assert queue.capacity == 4
    assert [queue.dequeue() for _ in range(3)] == ["c", "a", "b"]


def test_dequeue_clears_vacated_slots(queue):
    for i in range(5):
        queue.enqueue(i, i)
    queue.dequeue()
    queue.dequeue()
    assert_heap_order(queue)
    assert queue.heap[3] is None
    assert queue.heap[4] is None


def test_heap_invariant_after_many_operations(queue):
    """Heap order holds after random enqueues, dequeues and decreases."""
    rng = random.Random(1234)
    live = []
    for i in range(300):
        action = rng.random()
        if action < 0.6 or not live:
            queue.enqueue(i, rng.choice([0, 1, 2, 3.5, -1]))
            live.append(i)
        elif action < 0.85:
            live.remove(queue.dequeue())
        else:
            target = rng.choice(live)
            queue.decrease_key(target, queue.get_priority(target) - rng.uniform(0.5, 3))
        assert_heap_order(queue)
        assert queue.size() == len(live)


def test_drain_is_sorted_by_priority_then_insertion(queue):
    """A full drain yields non-decreasing priorities with ties in insertion order."""
    rng = random.Random(99)
    inserted = []
    for i in range(200):
        priority = rng.choice([0, 1, 2])
        queue.enqueue(i, priority)
        inserted.append((priority, i))

    drained = [queue.dequeue() for _ in range(200)]

    assert queue.size() == 0
    assert drained == [i for _, i in sorted(inserted)]


def test_sequence_is_never_reused(queue):
    queue.enqueue("a", 1)
    queue.enqueue("b", 1)
    queue.dequeue()
    queue.enqueue("c", 1)
    sequences = [entry.sequence for entry in queue.heap[:queue.size()]]
    assert sorted(sequences) == [1, 2]
    assert queue.sequence == 3


def test_clear_keeps_sequence_counting(queue):
    for i in range(40):
        queue.enqueue(i, i)
    queue.clear()

    assert queue.size() == 0
    assert queue.capacity == PriorityQueue.INITIAL_CAPACITY
    queue.enqueue("after", 0)
    assert queue.heap[0].sequence == 40


def test_contains_and_get_priority(queue):
    queue.enqueue({"id": "a"}, 2.5)
    queue.enqueue({"id": "b"}, 1.5)

    assert queue.contains({"id": "a"})
    assert {"id": "b"} in queue
    assert not queue.contains({"id": "z"})
    assert queue.get_priority({"id": "a"}) == 2.5
    assert queue.get_priority({"id": "b"}) == 1.5


def test_lookup_ignores_dequeued_entries(queue):
    queue.enqueue("gone", 0)
    queue.enqueue("kept", 1)
    queue.dequeue()

    assert not queue.contains("gone")
    with pytest.raises(NotFoundError):
        queue.get_priority("gone")


def test_get_priority_missing_raises_key_error(queue):
    queue.enqueue("a", 1)
    with pytest.raises(KeyError):
        queue.get_priority("b")


def test_heap_entry_orders_by_priority_then_sequence():
    assert HeapEntry("x", 1.0, 5) < HeapEntry("y", 2.0, 0)
    assert HeapEntry("x", 1.0, 0) < HeapEntry("y", 1.0, 1)
    assert not HeapEntry("x", 1.0, 1) < HeapEntry("y", 1.0, 0)


def test_large_queue_performance():
    """Enqueue and dequeue 10,000 values to verify O(log n) behaviour."""
    queue = PriorityQueue()

    start = time.time()
    for i in range(10000):
        queue.enqueue(i, i % 3)
    insert_time = time.time() - start

    start = time.time()
    while not queue.is_empty():
        queue.dequeue()
    extract_time = time.time() - start

    assert insert_time < 1.0, f"10k enqueues took {insert_time:.2f}s"
    assert extract_time < 1.0, f"10k dequeues took {extract_time:.2f}s"

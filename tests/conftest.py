import pytest
from main import app, get_config, get_registry
from config import ServiceConfig
from algorithms.priority_queue import PriorityQueue
from storage.queue_registry import QueueRegistry


class FakeClock:
    """Manually advanced clock for aging tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def advance(self, seconds: float):
        self.now += seconds

    def __call__(self):
        return self.now


def assert_heap_order(queue: PriorityQueue):
    """Every live entry's (priority, sequence) is >= its parent's."""
    live = queue.heap[:queue.size()]
    assert all(entry is not None for entry in live)
    assert all(entry is None for entry in queue.heap[queue.size():])
    for i in range(1, len(live)):
        parent = live[(i - 1) // 2]
        child = live[i]
        assert (child.priority, child.sequence) >= (parent.priority, parent.sequence), (
            f"Heap order violated at index {i}: parent {parent} > child {child}"
        )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def queue(clock):
    return PriorityQueue(clock=clock)


@pytest.fixture
def service_config():
    return ServiceConfig(initial_capacity=4, aging_threshold=5.0, aging_step=1.0)


@pytest.fixture
def registry(service_config):
    return QueueRegistry(initial_capacity=service_config.initial_capacity)


@pytest.fixture(autouse=True)
def override_dependencies(registry, service_config):
    """Give every test its own registry and config instead of the lifespan ones."""
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_config] = lambda: service_config

    yield

    app.dependency_overrides.clear()

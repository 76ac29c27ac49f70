import asyncio
import random
import time
import statistics
import tracemalloc
from httpx import AsyncClient, ASGITransport
from main import app, get_config, get_registry
from config import ServiceConfig
from algorithms.priority_queue import PriorityQueue
from storage.queue_registry import QueueRegistry


class PerformanceBenchmark:
    def __init__(self):
        self.latencies = []
        self.successful_requests = 0
        self.failed_requests = 0

    def _report_metrics(self, test_name: str, duration: float, num_operations: int):
        throughput = num_operations / duration
        avg_latency = statistics.mean(self.latencies)
        p50 = statistics.median(self.latencies)
        p95 = statistics.quantiles(self.latencies, n=20)[18] if len(self.latencies) >= 20 else max(self.latencies)
        p99 = statistics.quantiles(self.latencies, n=100)[98] if len(self.latencies) >= 100 else max(self.latencies)

        print(f"\n{'=' * 60}")
        print(f"  {test_name}")
        print(f"{'=' * 60}")
        print(f"  Operations:  {num_operations}")
        print(f"  Duration:    {duration:.2f}s")
        print(f"  Throughput:  {throughput:,.0f} ops/s")
        print(f"  Succeeded:   {self.successful_requests}")
        print(f"  Failed:      {self.failed_requests}")
        print(f"  Avg Latency: {avg_latency:.4f}ms")
        print(f"  p50 Latency: {p50:.4f}ms")
        print(f"  p95 Latency: {p95:.4f}ms")
        print(f"  p99 Latency: {p99:.4f}ms")
        print(f"{'=' * 60}")

        return {
            "throughput": throughput,
            "avg_latency": avg_latency,
            "p50": p50,
            "p95": p95,
            "p99": p99,
        }

    def _reset(self):
        self.latencies.clear()
        self.successful_requests = 0
        self.failed_requests = 0

    def _timed(self, operation, *args):
        start_time = time.perf_counter()
        operation(*args)
        self.latencies.append((time.perf_counter() - start_time) * 1000)
        self.successful_requests += 1

    def run_queue_test(self, num_items: int = 20000):
        """Enqueue, decrease one key in a hundred, then drain, all in-process."""
        self._reset()
        queue = PriorityQueue()
        priorities = [random.uniform(0, 1000) for _ in range(num_items)]

        start_time = time.time()

        for i, priority in enumerate(priorities):
            self._timed(queue.enqueue, i, priority)

        # decrease_key is a linear scan, so keep the number of calls small
        for i in range(num_items - 1, num_items - 1 - num_items // 100, -1):
            self._timed(queue.decrease_key, i, priorities[i] - 500)

        while not queue.is_empty():
            self._timed(queue.dequeue)

        duration = time.time() - start_time
        num_operations = num_items * 2 + num_items // 100

        return self._report_metrics(f"In-process Queue ({num_items} items)", duration, num_operations)

    async def single_request(self, client: AsyncClient, method: str, path: str, payload=None):
        start_time = time.perf_counter()

        try:
            response = await client.request(method, path, json=payload)

            latency = (time.perf_counter() - start_time) * 1000
            self.latencies.append(latency)

            if response.status_code == 200:
                self.successful_requests += 1
            else:
                self.failed_requests += 1

        except Exception:
            self.failed_requests += 1
            latency = (time.perf_counter() - start_time) * 1000
            self.latencies.append(latency)

    async def run_http_test(self, num_requests: int = 5000, concurrency: int = 100):
        self._reset()

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            start_time = time.time()

            semaphore = asyncio.Semaphore(concurrency)

            async def bounded_enqueue(i):
                async with semaphore:
                    await self.single_request(
                        client, "POST", "/v1/queues/benchmark/enqueue",
                        {"value": f"job_{i}", "priority": random.choice([0, 1, 2])}
                    )

            await asyncio.gather(*[bounded_enqueue(i) for i in range(num_requests)])

            for _ in range(num_requests):
                await self.single_request(client, "POST", "/v1/queues/benchmark/dequeue")

            duration = time.time() - start_time

        return self._report_metrics(
            f"HTTP Enqueue/Dequeue ({num_requests} each, concurrency {concurrency})",
            duration,
            num_requests * 2
        )

    async def run_all_benchmarks(self):
        print("\n" + "#" * 60)
        print("  PRIORITY SCHEDULER: PERFORMANCE BENCHMARK")
        print("#" * 60)

        # Memory tracking
        tracemalloc.start()

        results = {}
        results["queue"] = self.run_queue_test()
        results["http"] = await self.run_http_test()

        peak_memory = tracemalloc.get_traced_memory()[1]
        tracemalloc.stop()

        print(f"\n{'=' * 60}")
        print(f"  MEMORY")
        print(f"{'=' * 60}")
        print(f"  Peak Memory Usage: {peak_memory / 1024:.1f} KB ({peak_memory / (1024*1024):.2f} MB)")
        print(f"{'=' * 60}")

        # Summary
        print(f"\n{'#' * 60}")
        print(f"  SUMMARY")
        print(f"{'#' * 60}")
        q = results["queue"]
        h = results["http"]
        print(f"  Queue Throughput: {q['throughput']:,.0f} ops/s")
        print(f"  HTTP Throughput:  {h['throughput']:,.0f} req/s")
        print(f"  HTTP p95 Latency: {h['p95']:.2f}ms")
        print(f"  Peak Memory:      {peak_memory / 1024:.1f} KB")
        print(f"{'#' * 60}\n")

        return results


async def main():
    config = ServiceConfig.from_env()
    registry = QueueRegistry(initial_capacity=config.initial_capacity)
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_config] = lambda: config

    benchmark = PerformanceBenchmark()
    await benchmark.run_all_benchmarks()


if __name__ == "__main__":
    asyncio.run(main())

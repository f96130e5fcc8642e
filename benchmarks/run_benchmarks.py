"""Benchmark suite for the storefront read-through cache."""

import asyncio
import statistics
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from storefront_cache.backend.memory import InMemoryBackingStore
from storefront_cache.cache.lookup import CachedLookup
from storefront_cache.storage.memory import MemoryCacheStore

BACKEND_LATENCY = 0.02  # seconds per simulated backing-store round trip


class SlowBackingStore(InMemoryBackingStore):
    """In-memory backing store that sleeps to mimic a remote database."""

    def __init__(self, latency: float, **kwargs: Any):
        super().__init__(**kwargs)
        self.latency = latency

    async def fetch_all_products(self) -> list[dict[str, Any]]:
        await asyncio.sleep(self.latency)
        return await super().fetch_all_products()

    async def fetch_product_by_id(self, product_id: str) -> Optional[dict[str, Any]]:
        await asyncio.sleep(self.latency)
        return await super().fetch_product_by_id(product_id)

    async def search_products(self, query: str) -> list[dict[str, Any]]:
        await asyncio.sleep(self.latency)
        return await super().search_products(query)


@dataclass
class BenchmarkResult:
    """Result of a benchmark run."""

    name: str
    duration: float
    operations: int
    throughput: float  # ops/sec
    latencies: list[float]
    avg_latency: float
    p50_latency: float
    p95_latency: float
    p99_latency: float
    backend_calls: int = 0


class BenchmarkRunner:
    """Runner for cache benchmarks."""

    def __init__(self, num_products: int = 500, latency: float = BACKEND_LATENCY):
        self.products = [
            {"id": str(i), "name": f"Product {i} {'watch' if i % 10 == 0 else 'shirt'}", "price": float(i)}
            for i in range(num_products)
        ]
        self.latency = latency
        self.results: list[BenchmarkResult] = []

    def fresh_lookup(self) -> tuple[CachedLookup, SlowBackingStore]:
        backend = SlowBackingStore(self.latency, products=self.products)
        return CachedLookup(MemoryCacheStore(), backend), backend

    def calculate_percentile(self, latencies: list[float], percentile: float) -> float:
        """Calculate percentile from latency list."""
        if not latencies:
            return 0.0
        sorted_latencies = sorted(latencies)
        index = int(len(sorted_latencies) * percentile / 100)
        return sorted_latencies[min(index, len(sorted_latencies) - 1)]

    def create_result(
        self, name: str, duration: float, operations: int, latencies: list[float], backend_calls: int = 0
    ) -> BenchmarkResult:
        """Create a benchmark result with calculated metrics."""
        throughput = operations / duration if duration > 0 else 0
        avg_latency = statistics.mean(latencies) if latencies else 0

        result = BenchmarkResult(
            name=name,
            duration=duration,
            operations=operations,
            throughput=throughput,
            latencies=latencies,
            avg_latency=avg_latency,
            p50_latency=self.calculate_percentile(latencies, 50),
            p95_latency=self.calculate_percentile(latencies, 95),
            p99_latency=self.calculate_percentile(latencies, 99),
            backend_calls=backend_calls,
        )
        self.results.append(result)
        return result

    async def benchmark_cold_lookups(self, num_lookups: int = 100) -> BenchmarkResult:
        """Every lookup misses and goes to the backing store."""
        print(f"\n📊 Running: Cold product lookups ({num_lookups})")
        lookup, backend = self.fresh_lookup()
        latencies = []

        start_time = time.perf_counter()
        for i in range(num_lookups):
            op_start = time.perf_counter()
            await lookup.get_product_by_id(str(i))
            latencies.append(time.perf_counter() - op_start)
        duration = time.perf_counter() - start_time

        return self.create_result("Cold product lookups", duration, num_lookups, latencies, sum(backend.calls.values()))

    async def benchmark_warm_lookups(self, num_lookups: int = 5000, distinct: int = 50) -> BenchmarkResult:
        """Lookups over a small hot set, served from cache after the first pass."""
        print(f"\n📊 Running: Warm product lookups ({num_lookups} over {distinct} ids)")
        lookup, backend = self.fresh_lookup()
        latencies = []

        start_time = time.perf_counter()
        for i in range(num_lookups):
            op_start = time.perf_counter()
            await lookup.get_product_by_id(str(i % distinct))
            latencies.append(time.perf_counter() - op_start)
        duration = time.perf_counter() - start_time

        return self.create_result("Warm product lookups", duration, num_lookups, latencies, sum(backend.calls.values()))

    async def benchmark_concurrent_misses(self, concurrency: int = 50) -> BenchmarkResult:
        """Concurrent misses on one key are not coalesced; count the backend calls."""
        print(f"\n📊 Running: Concurrent misses on one key ({concurrency})")
        lookup, backend = self.fresh_lookup()

        async def timed() -> float:
            op_start = time.perf_counter()
            await lookup.get_all_products()
            return time.perf_counter() - op_start

        start_time = time.perf_counter()
        latencies = list(await asyncio.gather(*(timed() for _ in range(concurrency))))
        duration = time.perf_counter() - start_time

        return self.create_result(
            "Concurrent misses on one key", duration, concurrency, latencies, sum(backend.calls.values())
        )

    async def benchmark_invalidation_sweep(self, num_queries: int = 1000) -> BenchmarkResult:
        """Populate many search entries, then time a product invalidation."""
        print(f"\n📊 Running: Product invalidation with {num_queries} cached searches")
        lookup, backend = self.fresh_lookup()
        backend.latency = 0
        for i in range(num_queries):
            await lookup.search_products(f"query {i}")

        start_time = time.perf_counter()
        await lookup.invalidate_product_cache("1")
        duration = time.perf_counter() - start_time

        return self.create_result("Product invalidation sweep", duration, 1, [duration])

    def print_result(self, result: BenchmarkResult):
        """Print a single benchmark result."""
        print(f"\n{'=' * 70}")
        print(f"📊 {result.name}")
        print(f"{'=' * 70}")
        print(f"Duration:       {result.duration:.3f}s")
        print(f"Operations:     {result.operations:,}")
        print(f"Throughput:     {result.throughput:,.0f} ops/sec")
        print(f"Avg Latency:    {result.avg_latency * 1000:.3f}ms")
        print(f"P50 Latency:    {result.p50_latency * 1000:.3f}ms")
        print(f"P95 Latency:    {result.p95_latency * 1000:.3f}ms")
        print(f"P99 Latency:    {result.p99_latency * 1000:.3f}ms")
        print(f"Backend calls:  {result.backend_calls:,}")

    def print_summary(self):
        """Print summary of all benchmark results."""
        print(f"\n{'=' * 70}")
        print("📈 BENCHMARK SUMMARY")
        print(f"{'=' * 70}\n")

        print(f"{'Benchmark':<40} {'Throughput':>14} {'Avg Latency':>12} {'Backend':>8}")
        print(f"{'-' * 40} {'-' * 14} {'-' * 12} {'-' * 8}")

        for result in self.results:
            throughput_str = f"{result.throughput:,.0f} ops/s"
            latency_str = f"{result.avg_latency * 1000:.3f}ms"
            print(f"{result.name:<40} {throughput_str:>14} {latency_str:>12} {result.backend_calls:>8}")

        print()

    async def run_all_benchmarks(self):
        """Run all benchmarks in sequence."""
        print("\n" + "=" * 70)
        print("🚀 STOREFRONT CACHE BENCHMARK SUITE")
        print("=" * 70)
        print(f"Simulated backend latency: {self.latency * 1000:.0f}ms")
        print(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

        try:
            self.print_result(await self.benchmark_cold_lookups())
            self.print_result(await self.benchmark_warm_lookups())
            self.print_result(await self.benchmark_concurrent_misses())
            self.print_result(await self.benchmark_invalidation_sweep())
        except KeyboardInterrupt:
            print("\n⚠️  Benchmark interrupted by user")

        self.print_summary()

        print(f"Completed at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        print("=" * 70)


async def main():
    """Main entry point for benchmarks."""
    runner = BenchmarkRunner()
    await runner.run_all_benchmarks()


if __name__ == "__main__":
    asyncio.run(main())

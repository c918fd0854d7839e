"""
Example: Periodic Reporting

Records a few metrics from a fake request handler and flushes them to a
Graphite backend every two seconds. Start a receiver first to watch the
lines arrive:

    graphite-reporter listen --port 2003
"""

import asyncio
import logging
import random

from graphite_reporter import (
    FlushResult,
    GraphiteReporter,
    MetricRegistry,
    ReporterConfig,
    get_or_register_counter,
    get_or_register_gauge,
    get_or_register_timer,
)


async def handle_request(registry: MetricRegistry):
    """Pretend to serve one request."""
    with get_or_register_timer("request.latency", registry).time():
        await asyncio.sleep(random.uniform(0.001, 0.02))
    get_or_register_counter("request.count", registry).inc()


def print_result(result: FlushResult):
    print(f"flush: {result.status.value} records={result.records} bytes={result.bytes_written}")


async def main():
    registry = MetricRegistry()
    config = ReporterConfig(
        address="127.0.0.1:2003",
        registry=registry,
        flush_interval=2,
        prefix="example.web01",
        duration_unit="ms",
    )

    async with GraphiteReporter(config, on_result=print_result) as reporter:
        reporter.start()
        for _ in range(200):
            await handle_request(registry)
            get_or_register_gauge("queue.depth", registry).update(random.randint(0, 10))
            await asyncio.sleep(0.03)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())

"""
Observability for the ring SOM solver: structured logs, Prometheus metrics
and request correlation
"""

import time
import uuid
import logging
import psutil
import structlog
from typing import Dict, Any, Optional
from contextlib import contextmanager
from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

CORRELATION_HEADER = b"x-correlation-id"


# Prometheus Metrics
REQUESTS_TOTAL = Counter(
    "somtsp_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "somtsp_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
)

TRAINING_DURATION = Histogram(
    "somtsp_training_duration_seconds",
    "Ring training duration in seconds",
    ["neighborhood"],
)

TRAINING_ITERATIONS = Counter(
    "somtsp_training_iterations_total", "Passes over the cities, summed over runs"
)

TOURS_SOLVED = Counter(
    "somtsp_tours_solved_total", "Tours read off a trained ring", ["neighborhood"]
)

TOUR_LENGTH = Histogram(
    "somtsp_tour_length",
    "Open-path length of extracted tours",
    ["neighborhood"],
    buckets=(1, 10, 100, 1_000, 10_000, 100_000, 1_000_000, float("inf")),
)

RUNS_STORED = Gauge("somtsp_runs_stored", "Solved runs held by the service")

SYSTEM_MEMORY_USAGE = Gauge(
    "somtsp_system_memory_usage_bytes", "System memory usage in bytes"
)

SYSTEM_CPU_USAGE = Gauge("somtsp_system_cpu_usage_percent", "System CPU usage percentage")


def setup_logging(log_level: str = "INFO", json_format: bool = True) -> None:
    """
    Configure structlog over the standard library

    Values bound with ``structlog.contextvars`` (the correlation ID of the
    current operation) are merged into every entry, including the ones the
    trainer and the sweep driver emit.
    """
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
    )


def new_correlation_id() -> str:
    return str(uuid.uuid4())


@contextmanager
def trace_operation(
    operation_name: str, correlation_id: Optional[str] = None, **extra_context
):
    """
    Log the start, end and duration of an operation under one correlation ID

    The ID is bound to the logging context for the duration of the block and
    yielded to the caller. A fresh one is generated when none is given.
    """
    logger = structlog.get_logger()
    correlation_id = correlation_id or new_correlation_id()
    start_time = time.time()

    with structlog.contextvars.bound_contextvars(
        correlation_id=correlation_id, operation=operation_name
    ):
        logger.info("Operation started", **extra_context)
        try:
            yield correlation_id
        except Exception as e:
            logger.error(
                "Operation failed",
                duration_seconds=time.time() - start_time,
                error=str(e),
                error_type=type(e).__name__,
                **extra_context,
            )
            raise
        logger.info(
            "Operation completed",
            duration_seconds=time.time() - start_time,
            **extra_context,
        )


def update_system_metrics():
    """Update system-level metrics"""
    try:
        SYSTEM_MEMORY_USAGE.set(psutil.virtual_memory().used)
        SYSTEM_CPU_USAGE.set(psutil.cpu_percent(interval=None))
    except Exception as e:
        structlog.get_logger().error("Failed to update system metrics", error=str(e))


def get_metrics() -> bytes:
    """Get Prometheus metrics in text format"""
    update_system_metrics()
    return generate_latest()


def log_request_metrics(method: str, endpoint: str, status_code: int, duration: float):
    REQUESTS_TOTAL.labels(
        method=method, endpoint=endpoint, status_code=status_code
    ).inc()
    REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration)


def log_training_metrics(neighborhood: str, duration: float, iterations: int):
    """Record one finished training run"""
    TRAINING_DURATION.labels(neighborhood=neighborhood).observe(duration)
    TRAINING_ITERATIONS.inc(iterations)


def log_tour_metrics(neighborhood: str, length: float):
    """Record one extracted tour and its length"""
    TOURS_SOLVED.labels(neighborhood=neighborhood).inc()
    TOUR_LENGTH.labels(neighborhood=neighborhood).observe(length)


def update_stored_runs_count(count: int):
    RUNS_STORED.set(count)


class RequestTracingMiddleware:
    """ASGI middleware that gives every HTTP request a correlation ID

    The ID is stored in ``scope["correlation_id"]`` for the endpoints and
    echoed back in the ``x-correlation-id`` response header. A client may
    supply its own ID in that header.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        supplied = headers.get(CORRELATION_HEADER)
        correlation_id = supplied.decode() if supplied else new_correlation_id()
        scope["correlation_id"] = correlation_id

        async def send_with_correlation_id(message):
            if message["type"] == "http.response.start":
                response_headers = dict(message.get("headers", []))
                response_headers[CORRELATION_HEADER] = correlation_id.encode()
                message["headers"] = list(response_headers.items())
            await send(message)

        await self.app(scope, receive, send_with_correlation_id)


def get_health_status() -> Dict[str, Any]:
    """Process-level health: memory and CPU of the host running the solver"""
    try:
        memory_info = psutil.virtual_memory()
        return {
            "status": "healthy",
            "timestamp": time.time(),
            "system": {
                "memory": {
                    "total": memory_info.total,
                    "available": memory_info.available,
                    "percentage": memory_info.percent,
                },
                "cpu": {"usage_percent": psutil.cpu_percent(interval=None)},
            },
        }
    except Exception as e:
        return {"status": "unhealthy", "timestamp": time.time(), "error": str(e)}

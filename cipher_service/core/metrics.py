"""Prometheus-backed metrics registry shared by the service components."""
from __future__ import annotations

import time
from typing import Dict

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from cipher_service.core.exceptions import DuplicateMetricError, MetricsError

MEMORY_USAGE = "memory_usage_bytes"
START_TIME = "start_time_seconds"


class MetricsRegistry:
    """Owns a private collector registry and the gauges written into it.

    One instance is built at startup and handed to every component that
    reads or writes metrics. Gauge values are guarded by prometheus_client,
    so a scrape may interleave with the sampler's writes at any time.
    """

    def __init__(self, *, namespace: str = "app") -> None:
        self._namespace = namespace
        self.registry = CollectorRegistry(auto_describe=True)
        self._gauges: Dict[str, Gauge] = {}
        self._start_time_recorded = False

        self.gauge(MEMORY_USAGE, "Resident memory size in bytes")
        self.gauge(START_TIME, "App start time in seconds since Unix epoch")

        self.http_requests = Counter(
            "http_requests_total",
            "Total number of HTTP requests",
            ["endpoint", "method", "status"],
            namespace="api",
            registry=self.registry,
        )
        self.http_duration = Histogram(
            "http_requests_duration_seconds",
            "HTTP request duration in seconds",
            ["endpoint", "method", "status"],
            namespace="api",
            registry=self.registry,
        )

    @property
    def namespace(self) -> str:
        return self._namespace

    def gauge(self, name: str, documentation: str) -> Gauge:
        """Create and register a gauge; names must be unique."""

        if name in self._gauges:
            raise DuplicateMetricError(name)
        try:
            gauge = Gauge(name, documentation, namespace=self._namespace, registry=self.registry)
        except ValueError as exc:
            raise DuplicateMetricError(name) from exc
        self._gauges[name] = gauge
        return gauge

    def _require(self, name: str) -> Gauge:
        try:
            return self._gauges[name]
        except KeyError:
            raise MetricsError(f"Unknown gauge '{name}'") from None

    def set(self, name: str, value: float) -> None:
        self._require(name).set(value)

    def get(self, name: str) -> float:
        full_name = f"{self._namespace}_{name}" if self._namespace else name
        value = self.registry.get_sample_value(full_name)
        if value is None:
            raise MetricsError(f"Unknown gauge '{name}'")
        return value

    def set_memory_usage(self, value: int) -> None:
        self.set(MEMORY_USAGE, value)

    @property
    def memory_usage(self) -> float:
        return self.get(MEMORY_USAGE)

    def record_start_time(self, timestamp: float | None = None) -> float:
        """Publish the process start time; allowed exactly once."""

        if self._start_time_recorded:
            raise MetricsError("Start time has already been recorded")
        value = time.time() if timestamp is None else timestamp
        self.set(START_TIME, value)
        self._start_time_recorded = True
        return value

    @property
    def start_time_recorded(self) -> bool:
        return self._start_time_recorded

    @property
    def start_time(self) -> float:
        return self.get(START_TIME)

    def observe_request(self, *, endpoint: str, method: str, status: int, duration_s: float) -> None:
        labels = {"endpoint": endpoint, "method": method, "status": str(status)}
        self.http_requests.labels(**labels).inc()
        self.http_duration.labels(**labels).observe(duration_s)

    def render(self) -> tuple[bytes, str]:
        """Serialize the registry in the Prometheus text exposition format."""

        return generate_latest(self.registry), CONTENT_TYPE_LATEST

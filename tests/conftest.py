"""
Pytest fixtures for frontend edge tests
"""

import json
from typing import Callable, Dict, List, Tuple, Union

import httpx
import pytest
from fastapi.testclient import TestClient
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from app.config import Settings
from app.main import create_app
from app.utils.backend_client import BackendClient
from app.utils.observability import ObservabilitySink

BACKEND_URL = "http://backend.test:8080"

Reply = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class MockBackend:
    """
    In-process backend double built on httpx.MockTransport.

    Replies are registered per (method, path). A reply is a response, an
    exception to raise, or a callable producing either. Unregistered routes
    answer 404. Every request the edge sends is recorded.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Reply] = {}
        self.requests: List[httpx.Request] = []

    def reply(self, method: str, path: str, status_code: int = 200, json_body=None, content: bytes = None):
        if content is None:
            content = json.dumps(json_body if json_body is not None else {}).encode()
        self.routes[(method, path)] = httpx.Response(
            status_code, content=content, headers={"content-type": "application/json"}
        )

    def fail(self, method: str, path: str, exc_factory: Callable[[httpx.Request], Exception]):
        self.routes[(method, path)] = exc_factory

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.routes.get((request.method, request.url.path))
        if reply is None:
            return httpx.Response(404, json={"error": "no route"})
        if callable(reply):
            reply = reply(request)
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def connect_error(request: httpx.Request) -> Exception:
    return httpx.ConnectError("Connection refused", request=request)


def read_timeout(request: httpx.Request) -> Exception:
    return httpx.ReadTimeout("timed out", request=request)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        backend_url=BACKEND_URL,
        backend_timeout_ms=2000,
        otel_enabled=False,
        log_format="console",
    )


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def metric_reader() -> InMemoryMetricReader:
    return InMemoryMetricReader()


@pytest.fixture
def sink(span_exporter, metric_reader) -> ObservabilitySink:
    tracer_provider = TracerProvider()
    tracer_provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    return ObservabilitySink(
        service_name="frontend",
        tracer_provider=tracer_provider,
        meter_provider=MeterProvider(metric_readers=[metric_reader]),
    )


@pytest.fixture
def backend() -> MockBackend:
    return MockBackend()


@pytest.fixture
def backend_client(settings, sink, backend) -> BackendClient:
    return BackendClient(settings.backend_config(), sink=sink, transport=backend.transport)


@pytest.fixture
def app(settings, sink, backend):
    return create_app(settings=settings, sink=sink, transport=backend.transport)


@pytest.fixture
def client(app):
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


def metric_points(reader: InMemoryMetricReader, name: str) -> list:
    """Collect data points for one metric name"""
    data = reader.get_metrics_data()
    points = []
    if data is None:
        return points
    for resource_metrics in data.resource_metrics:
        for scope_metrics in resource_metrics.scope_metrics:
            for metric in scope_metrics.metrics:
                if metric.name == name:
                    points.extend(metric.data.data_points)
    return points

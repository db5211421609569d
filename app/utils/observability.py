"""
Observability sink
Structured request logs plus OpenTelemetry traces and metrics.

The sink is built once at startup and handed to the edge and the backend
client. Providers are owned by the sink and never installed as OTel globals.
"""

from contextlib import contextmanager
from typing import Mapping, Optional

import structlog
from opentelemetry.propagate import extract
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import SpanKind

from app.config import Settings
from app.models.outcomes import BackendCallOutcome, RequestLogRecord


class ObservabilitySink:
    """
    Receives request records and backend call signals.

    structlog loggers and the OTel SDK providers are safe to share between
    concurrent requests, so one instance serves the whole process.
    """

    def __init__(
        self,
        service_name: str = "frontend",
        logger=None,
        tracer_provider: Optional[TracerProvider] = None,
        meter_provider: Optional[MeterProvider] = None,
    ):
        self.service_name = service_name
        self.logger = logger or structlog.get_logger(service_name)
        self._tracer_provider = tracer_provider or TracerProvider()
        self._meter_provider = meter_provider or MeterProvider()
        self.tracer = self._tracer_provider.get_tracer(service_name)

        meter = self._meter_provider.get_meter(service_name)
        self._request_counter = meter.create_counter(
            "http.server.requests",
            description="Inbound HTTP requests",
        )
        self._request_duration = meter.create_histogram(
            "http.server.duration",
            unit="ms",
            description="Inbound HTTP request duration",
        )
        self._backend_calls = meter.create_counter(
            "backend.client.calls",
            description="Outbound calls to the backend, by outcome",
        )
        self._backend_duration = meter.create_histogram(
            "backend.client.duration",
            unit="ms",
            description="Outbound backend call duration",
        )

    def record_request(self, record: RequestLogRecord) -> None:
        self.logger.info(
            "HTTP request",
            method=record.method,
            path=record.path,
            status=record.status_code,
            duration=round(record.duration_ms, 3),
            ip=record.client_address,
        )
        attributes = {
            "http.method": record.method,
            "http.status_code": record.status_code,
        }
        self._request_counter.add(1, attributes)
        self._request_duration.record(record.duration_ms, attributes)

    def record_backend_call(
        self, method: str, path: str, outcome: BackendCallOutcome, duration_ms: float
    ) -> None:
        attributes = {"http.method": method, "backend.outcome": outcome.kind}
        status_code = getattr(outcome, "status_code", None)
        if status_code is not None:
            attributes["http.status_code"] = status_code
        self._backend_calls.add(1, attributes)
        self._backend_duration.record(duration_ms, attributes)

    @contextmanager
    def server_span(self, method: str, path: str, carrier: Mapping[str, str]):
        """
        Server span around one inbound request.

        Continues the caller's trace when the carrier holds a W3C
        traceparent header, otherwise starts a new trace.
        """
        with self.tracer.start_as_current_span(
            f"{method} {path}",
            context=extract(carrier),
            kind=SpanKind.SERVER,
            attributes={"http.method": method, "http.target": path},
        ) as span:
            yield span

    @contextmanager
    def backend_span(self, method: str, url: str):
        """Client span around one outbound backend call"""
        with self.tracer.start_as_current_span(
            f"{method} backend",
            kind=SpanKind.CLIENT,
            attributes={"http.method": method, "http.url": url},
        ) as span:
            yield span

    def shutdown(self) -> None:
        """Flush and stop exporters"""
        try:
            self._tracer_provider.shutdown()
            self._meter_provider.shutdown()
            self.logger.info("OpenTelemetry terminated")
        except Exception as e:
            self.logger.error("Error terminating OpenTelemetry", error=str(e))


def build_resource(settings: Settings) -> Resource:
    return Resource.create({
        "service.name": settings.service_name,
        "service.version": settings.service_version,
        "deployment.environment": settings.deployment_environment,
        "application": settings.application_name,
    })


def create_observability_sink(settings: Settings) -> ObservabilitySink:
    """
    Build the sink from settings.

    Exporters are attached only when telemetry is enabled and an OTLP endpoint
    is configured; otherwise spans and metrics stay in-process.
    """
    logger = structlog.get_logger(settings.service_name)
    resource = build_resource(settings)

    if not settings.telemetry_active():
        return ObservabilitySink(
            service_name=settings.service_name,
            logger=logger,
            tracer_provider=TracerProvider(resource=resource),
            meter_provider=MeterProvider(resource=resource),
        )

    from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    endpoint = settings.otel_exporter_otlp_endpoint
    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=True))
    )
    metric_reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=endpoint, insecure=True),
        export_interval_millis=settings.otel_metric_export_interval_ms,
    )
    meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])

    logger.info("OpenTelemetry initialized successfully", endpoint=endpoint)
    return ObservabilitySink(
        service_name=settings.service_name,
        logger=logger,
        tracer_provider=tracer_provider,
        meter_provider=meter_provider,
    )
